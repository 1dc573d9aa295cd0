# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Creval Valuation Module - The Three Approaches to Value

1. Sales Comparison Approach - Adjusted comparable sales
2. Income Capitalization Approach - Direct capitalization and DCF
3. Cost Approach - Land plus depreciated replacement cost

Reconciliation weighs the available indications into a final value.
"""

from typing import Union

from .adjustments import ADJUSTMENT_ORDER, AdjustmentCalculator
from .base import ApproachResult, BaseApproach, ValueRange
from .cost import CostApproach, CostApproachResult
from .dcf import DCFAnalysis, DCFValuation
from .depreciation import DepreciationAnalysis, DepreciationCalculator
from .direct_cap import DirectCapValuation, ExpenseStatement, IncomeStatement
from .income import IncomeApproach, IncomeApproachResult
from .reconciliation import (
    ApproachWeights,
    Reconciler,
    ReconciliationResult,
    ReliabilityAssessment,
    VarianceAnalysis,
    reconcile,
)
from .sales_comp import AdjustedComparable, SalesComparisonApproach, SalesComparisonResult

# Polymorphic union type for all approach results
AnyApproachResult = Union[SalesComparisonResult, IncomeApproachResult, CostApproachResult]

__all__ = [
    # Base classes
    "ApproachResult",
    "BaseApproach",
    "ValueRange",
    # Sales comparison
    "ADJUSTMENT_ORDER",
    "AdjustedComparable",
    "AdjustmentCalculator",
    "SalesComparisonApproach",
    "SalesComparisonResult",
    # Income capitalization
    "DCFAnalysis",
    "DCFValuation",
    "DirectCapValuation",
    "ExpenseStatement",
    "IncomeApproach",
    "IncomeApproachResult",
    "IncomeStatement",
    # Cost
    "CostApproach",
    "CostApproachResult",
    "DepreciationAnalysis",
    "DepreciationCalculator",
    # Reconciliation
    "ApproachWeights",
    "Reconciler",
    "ReconciliationResult",
    "ReliabilityAssessment",
    "VarianceAnalysis",
    "reconcile",
    # Type unions
    "AnyApproachResult",
]
