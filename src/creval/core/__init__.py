# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Creval Core

Primitives, input records, shared calculations and error types.
"""

from .base import (
    Comparable,
    FinancingTerms,
    MarketData,
    RentalComparable,
    SubjectProperty,
)
from .calculations import ValuationCalculations
from .errors import AppraisalError, InsufficientDataError, ValidationFailedError
from .primitives import AppraisalSettings, Model

__all__ = [
    "AppraisalError",
    "AppraisalSettings",
    "Comparable",
    "FinancingTerms",
    "InsufficientDataError",
    "MarketData",
    "Model",
    "RentalComparable",
    "SubjectProperty",
    "ValidationFailedError",
    "ValuationCalculations",
]
