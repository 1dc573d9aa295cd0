# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Input validation for appraisal runs.
"""

from .results import DataCompleteness, ValidationIssue, ValidationResult
from .validator import AppraisalValidator, validate

__all__ = [
    "AppraisalValidator",
    "DataCompleteness",
    "ValidationIssue",
    "ValidationResult",
    "validate",
]
