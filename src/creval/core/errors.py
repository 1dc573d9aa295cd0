# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Appraisal error types.

Approaches raise these; the orchestrator captures per-approach failures and
converts run-level failures into a structured `AppraisalFailure` record.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..validation.results import ValidationResult


class AppraisalError(ValueError):
    """Base error for a failed appraisal stage."""

    def __init__(self, message: str, stage: str = "appraisal"):
        super().__init__(message)
        self.message = message
        self.stage = stage


class InsufficientDataError(AppraisalError):
    """A precondition for a computation is missing (comparables, income data)."""


class ValidationFailedError(AppraisalError):
    """Input validation produced fatal errors."""

    def __init__(self, validation: "ValidationResult", message: Optional[str] = None):
        super().__init__(
            message or f"Validation failed: {'; '.join(validation.errors)}",
            stage="validation",
        )
        self.validation = validation
