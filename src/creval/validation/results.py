# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Validation result records.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from ..core.primitives import Model, Score0To100, Severity


class ValidationIssue(Model):
    """A single finding raised during validation."""

    severity: Severity
    message: str
    field: Optional[str] = Field(default=None, description="Input field the finding concerns.")

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR


class DataCompleteness(Model):
    """Share of expected fields populated, per input group (0-100)."""

    subject: Score0To100 = 0.0
    comparables: Score0To100 = 0.0
    market: Score0To100 = 0.0
    overall: Score0To100 = 0.0


class ValidationResult(Model):
    """
    Outcome of input validation.

    `is_valid` is true exactly when no fatal errors were found; the pipeline
    must not run any approach otherwise.
    """

    issues: List[ValidationIssue] = Field(default_factory=list)
    quality_score: Score0To100 = 100.0
    data_completeness: DataCompleteness = Field(default_factory=DataCompleteness)
    recommendations: List[str] = Field(default_factory=list)

    @property
    def errors(self) -> List[str]:
        return [issue.message for issue in self.issues if issue.is_error]

    @property
    def warnings(self) -> List[str]:
        return [issue.message for issue in self.issues if not issue.is_error]

    @property
    def is_valid(self) -> bool:
        return not any(issue.is_error for issue in self.issues)
