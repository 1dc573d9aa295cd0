# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Appraisal result models.

`AppraisalResult` is the terminal artifact of a run: every component output
plus an identifier and timestamp, ready for a report formatter or a
persistence layer. `AppraisalFailure` is the structured record returned in
its place when a run cannot complete.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Literal, Optional

import pandas as pd
from pydantic import Field

from ..core.base import AppraisalOptions, SubjectProperty
from ..core.primitives import ApproachKind, Assumption, Model, Score0To100
from ..hbu import HighestBestUseResult
from ..validation import ValidationResult
from ..valuation import (
    ApproachResult,
    CostApproachResult,
    IncomeApproachResult,
    ReconciliationResult,
    SalesComparisonResult,
    ValueRange,
)


class ComplianceSummary(Model):
    """Review metadata for a compliant report."""

    uspap: bool = Field(
        default=False, description="Caller requested the detailed compliance narrative."
    )
    review_status: str = "pending"
    quality_score: Score0To100 = 0.0


class AppraisalResult(Model):
    """
    Complete output of one appraisal run.

    Attributes:
        appraisal_id: Generated identifier; cosmetic, never used in values
        timestamp: When the run completed
        as_of_date: Effective date of value
        subject: The appraised property
        options: Options the run was made with
        validation: Input validation outcome
        highest_best_use: Highest and best use conclusion
        sales_comparison: Sales comparison result, when it ran
        income: Income approach result, when it ran
        cost: Cost approach result, when it ran
        omitted: Approaches not applicable to this run, with the reason
        approach_errors: Approaches that raised, with the message
        reconciliation: Final value conclusion
        confidence: Weight-averaged confidence of the approaches
        compliance: Review metadata and quality score
        assumptions: Inputs resolved from market data or defaults
    """

    appraisal_id: str
    timestamp: datetime
    as_of_date: date
    subject: SubjectProperty
    options: AppraisalOptions = Field(default_factory=AppraisalOptions)

    # === COMPONENT RESULTS ===
    validation: ValidationResult
    highest_best_use: HighestBestUseResult
    sales_comparison: Optional[SalesComparisonResult] = None
    income: Optional[IncomeApproachResult] = None
    cost: Optional[CostApproachResult] = None
    omitted: Dict[ApproachKind, str] = Field(default_factory=dict)
    approach_errors: Dict[ApproachKind, str] = Field(default_factory=dict)
    reconciliation: ReconciliationResult

    # === SUMMARY ===
    confidence: Score0To100
    compliance: ComplianceSummary = Field(default_factory=ComplianceSummary)
    assumptions: List[Assumption] = Field(default_factory=list)

    @property
    def final_value(self) -> float:
        return self.reconciliation.final_value

    @property
    def value_range(self) -> ValueRange:
        return self.reconciliation.value_range

    @property
    def approaches(self) -> Dict[ApproachKind, ApproachResult]:
        """Approach results that produced a value, keyed by approach."""
        results = {
            ApproachKind.SALES: self.sales_comparison,
            ApproachKind.INCOME: self.income,
            ApproachKind.COST: self.cost,
        }
        return {kind: result for kind, result in results.items() if result is not None}

    def summary_frame(self) -> pd.DataFrame:
        """
        One row per approach with its indication, confidence, reliability
        and reconciliation weight.
        """
        reconciliation = self.reconciliation
        rows = []
        for kind, result in self.approaches.items():
            reliability = reconciliation.reliability.get(kind)
            rows.append(
                {
                    "approach": kind.value,
                    "value_indication": result.value_indication,
                    "confidence": result.confidence,
                    "reliability": reliability.score if reliability else None,
                    "weight": reconciliation.weights.get(kind),
                }
            )
        return pd.DataFrame(rows).set_index("approach") if rows else pd.DataFrame()


class AppraisalFailure(Model):
    """
    Structured error returned when a run cannot complete.

    `message` names the missing precondition; `validation` is present when
    the run halted on invalid inputs.
    """

    error: Literal[True] = True
    message: str
    stage: str
    errors: List[str] = Field(default_factory=list)
    validation: Optional[ValidationResult] = None
