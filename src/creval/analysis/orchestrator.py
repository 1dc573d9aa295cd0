# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Appraisal Orchestration Engine.

Sequences one appraisal run:

1. VALIDATION - halt before any approach when inputs carry fatal errors
2. HIGHEST AND BEST USE - as vacant and as improved; the concluded use is
   passed to every approach as the applicable-use context
3. APPLICABILITY - decide which approaches can and should run
4. APPROACHES - sales comparison, income and cost, mutually independent
5. RECONCILIATION - weigh the indications into a final value
6. SUMMARY - overall confidence, quality score, assumptions

FAILURE SEMANTICS:
An approach that raises is recorded in `approach_errors` and omitted from
reconciliation; its siblings still run. The run itself fails only when
validation fails, when no approach produces a value, or when the sole
requested approach cannot run.

The approaches share nothing mutable, so they may run on a thread pool
(`EngineSettings.parallel_approaches`); results are identical either way.
"""

from __future__ import annotations

import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from functools import partial
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..core.base import (
    AppraisalOptions,
    Comparable,
    MarketData,
    RentalComparable,
    SubjectProperty,
)
from ..core.calculations import ValuationCalculations
from ..core.errors import AppraisalError, InsufficientDataError, ValidationFailedError
from ..core.primitives import (
    AppraisalSettings,
    ApproachKind,
    Assumption,
    ConfidenceLevel,
    CostApplicability,
)
from ..hbu import HighestBestUseResult, analyze_highest_best_use
from ..validation import AppraisalValidator
from ..valuation import (
    ApproachResult,
    CostApproach,
    IncomeApproach,
    ReconciliationResult,
    SalesComparisonApproach,
    reconcile,
)
from .results import AppraisalResult, ComplianceSummary

logger = logging.getLogger(__name__)

ApproachOutcome = Tuple[Optional[ApproachResult], Optional[str]]


class AppraisalEngine:
    """
    Runs a full appraisal over one subject.

    Example:
        ```python
        engine = AppraisalEngine(AppraisalSettings(as_of_date=date(2025, 6, 30)))
        result = engine.run(subject, comparables, market_data)
        result.final_value, result.value_range
        ```
    """

    def __init__(self, settings: Optional[AppraisalSettings] = None):
        self.settings = settings or AppraisalSettings()

    def run(
        self,
        subject: SubjectProperty,
        comparables: Sequence[Comparable],
        market_data: Optional[MarketData] = None,
        options: Optional[AppraisalOptions] = None,
        rental_comparables: Optional[Sequence[RentalComparable]] = None,
    ) -> AppraisalResult:
        """
        Generate an appraisal.

        Raises:
            InsufficientDataError: No comparables, no approach produced a
                value, or the sole requested approach could not run
            ValidationFailedError: Inputs failed validation
        """
        options = options or AppraisalOptions()
        market_data = market_data or MarketData()
        run_start = time.time()
        logger.info("=== Appraisal Started ===")

        if not comparables:
            raise InsufficientDataError(
                "A subject property and at least one comparable property are required "
                "to generate an appraisal",
                stage="input",
            )

        # Phase 1: Validation
        validation = AppraisalValidator(self.settings).validate(
            subject, comparables, market_data, options.user_adjustments
        )
        if not validation.is_valid:
            logger.warning(f"Validation failed with {len(validation.errors)} error(s)")
            raise ValidationFailedError(validation)

        # Phase 2: Highest and best use
        hbu = analyze_highest_best_use(subject, market_data, self.settings)

        # Phase 3: Applicability
        runners, omitted = self.plan_approaches(
            subject, comparables, market_data, options, hbu, rental_comparables
        )
        for kind, reason in omitted.items():
            logger.warning(f"Omitting {kind.value} approach: {reason}")

        sole = options.sole_approach
        if sole is not None and sole in omitted:
            raise InsufficientDataError(
                f"The requested {sole.value} approach cannot be applied: {omitted[sole]}",
                stage=sole.value,
            )

        # Phase 4: Approaches
        outcomes = self.run_approaches(runners)
        results: Dict[ApproachKind, ApproachResult] = {}
        approach_errors: Dict[ApproachKind, str] = {}
        for kind, (result, error) in outcomes.items():
            if result is not None:
                results[kind] = result
            else:
                approach_errors[kind] = error or "Approach failed"

        if sole is not None and sole in approach_errors:
            raise InsufficientDataError(approach_errors[sole], stage=sole.value)
        if not results:
            failures = {**omitted, **approach_errors}
            details = "; ".join(f"{k.value}: {v}" for k, v in failures.items())
            raise InsufficientDataError(
                f"No valuation approach could be completed ({details})", stage="approaches"
            )

        # Phase 5: Reconciliation
        reconciliation = reconcile(
            results.get(ApproachKind.SALES),
            results.get(ApproachKind.INCOME),
            results.get(ApproachKind.COST),
            subject,
            options,
            self.settings,
            applicable_use=hbu.recommended_use,
        )

        # Phase 6: Summary
        assumptions: List[Assumption] = []
        for result in results.values():
            assumptions.extend(result.assumptions)

        appraisal = AppraisalResult(
            appraisal_id=self.generate_appraisal_id(),
            timestamp=datetime.now(timezone.utc),
            as_of_date=self.settings.as_of_date,
            subject=subject,
            options=options,
            validation=validation,
            highest_best_use=hbu,
            sales_comparison=results.get(ApproachKind.SALES),
            income=results.get(ApproachKind.INCOME),
            cost=results.get(ApproachKind.COST),
            omitted=omitted,
            approach_errors=approach_errors,
            reconciliation=reconciliation,
            confidence=self.overall_confidence(results, reconciliation),
            compliance=ComplianceSummary(
                uspap=options.uspap_compliance,
                quality_score=self.quality_score(results, reconciliation),
            ),
            assumptions=assumptions,
        )
        logger.info("=== Appraisal Completed ===")
        logger.info(
            f"Final value {appraisal.final_value:,.0f} "
            f"({appraisal.value_range.low:,.0f} - {appraisal.value_range.high:,.0f}), "
            f"confidence {appraisal.confidence:.0f}, in {time.time() - run_start:.3f}s"
        )
        return appraisal

    # === APPLICABILITY ===

    def plan_approaches(
        self,
        subject: SubjectProperty,
        comparables: Sequence[Comparable],
        market_data: MarketData,
        options: AppraisalOptions,
        hbu: HighestBestUseResult,
        rental_comparables: Optional[Sequence[RentalComparable]] = None,
    ) -> Tuple[Dict[ApproachKind, Callable[[], ApproachResult]], Dict[ApproachKind, str]]:
        """Runnable approaches and the reasons the others were omitted."""
        runners: Dict[ApproachKind, Callable[[], ApproachResult]] = {}
        omitted: Dict[ApproachKind, str] = {}

        if options.requested(ApproachKind.SALES):
            reason = self.sales_omission(subject, comparables)
            if reason is None:
                runners[ApproachKind.SALES] = partial(
                    SalesComparisonApproach(self.settings).compute,
                    subject,
                    comparables,
                    market_data,
                    options.user_adjustments,
                    applicable_use=hbu.recommended_use,
                )
            else:
                omitted[ApproachKind.SALES] = reason

        if options.requested(ApproachKind.INCOME):
            if subject.is_income_producing:
                runners[ApproachKind.INCOME] = partial(
                    IncomeApproach(self.settings).compute,
                    subject,
                    rental_comparables,
                    market_data,
                    applicable_use=hbu.recommended_use,
                )
            else:
                omitted[ApproachKind.INCOME] = "Subject reports no income"

        if options.requested(ApproachKind.COST):
            reason = self.cost_omission(subject, options, hbu)
            if reason is None:
                runners[ApproachKind.COST] = partial(
                    CostApproach(self.settings).compute,
                    subject,
                    market_data,
                    applicable_use=hbu.recommended_use,
                )
            else:
                omitted[ApproachKind.COST] = reason

        return runners, omitted

    def sales_omission(
        self, subject: SubjectProperty, comparables: Sequence[Comparable]
    ) -> Optional[str]:
        required = self.settings.sales.min_comparables
        if len(comparables) < required:
            return (
                f"At least {required} comparable sales are required, "
                f"{len(comparables)} provided"
            )
        if not subject.rentable_area:
            return "Subject building area is required"
        return None

    def cost_omission(
        self, subject: SubjectProperty, options: AppraisalOptions, hbu: HighestBestUseResult
    ) -> Optional[str]:
        if options.include_all_approaches or options.sole_approach is ApproachKind.COST:
            return None
        if hbu.redevelopment:
            return "Highest and best use is redevelopment; the improvements contribute no value"
        age = subject.age(self.settings.as_of_date)
        if subject.physical.special_use:
            return None
        if age is not None and age < self.settings.engine.cost_age_threshold:
            return None
        return "Cost approach applies to newer or special-use buildings"

    # === EXECUTION ===

    def run_approaches(
        self, runners: Dict[ApproachKind, Callable[[], ApproachResult]]
    ) -> Dict[ApproachKind, ApproachOutcome]:
        """Run each approach, capturing failures per approach."""
        engine = self.settings.engine
        if engine.parallel_approaches and len(runners) > 1:
            with ThreadPoolExecutor(max_workers=engine.max_workers) as pool:
                futures = {
                    kind: pool.submit(self._run_one, kind, runner)
                    for kind, runner in runners.items()
                }
                return {kind: future.result() for kind, future in futures.items()}
        return {kind: self._run_one(kind, runner) for kind, runner in runners.items()}

    @staticmethod
    def _run_one(kind: ApproachKind, runner: Callable[[], ApproachResult]) -> ApproachOutcome:
        start = time.time()
        try:
            result = runner()
        except (AppraisalError, ValueError) as e:
            logger.warning(f"{kind.value} approach failed: {e}")
            return None, str(e)
        except Exception as e:
            logger.exception(f"{kind.value} approach raised an unexpected error")
            return None, f"{type(e).__name__}: {e}"
        logger.info(
            f"{kind.value} approach: {result.value_indication:,.0f} "
            f"(confidence {result.confidence:.0f}) in {time.time() - start:.3f}s"
        )
        return result, None

    # === SUMMARY ===

    @staticmethod
    def overall_confidence(
        results: Dict[ApproachKind, ApproachResult], reconciliation: ReconciliationResult
    ) -> float:
        """Approach confidence averaged by reconciliation weight."""
        weights = reconciliation.weights
        total_weight = sum(weights.get(kind) for kind in results)
        if total_weight <= 0:
            return 0.0
        total = sum(result.confidence * weights.get(kind) for kind, result in results.items())
        return ValuationCalculations.round_half_up(total / total_weight)

    def quality_score(
        self, results: Dict[ApproachKind, ApproachResult], reconciliation: ReconciliationResult
    ) -> float:
        """Completeness of the evidence behind the conclusion, 0-100."""
        engine = self.settings.engine
        weights = reconciliation.weights
        score = 0.0
        sales = results.get(ApproachKind.SALES)
        income = results.get(ApproachKind.INCOME)
        cost = results.get(ApproachKind.COST)
        if sales is not None and len(sales.comparables) >= engine.quality_min_comparables:
            score += engine.quality_comparables_points
        if income is not None and income.data_quality is ConfidenceLevel.HIGH:
            score += engine.quality_income_points
        if cost is not None and cost.applicability is CostApplicability.HIGH:
            score += engine.quality_cost_points
        if reconciliation.variance.range < engine.quality_variance_threshold:
            score += engine.quality_variance_points
        if weights.sales + weights.income >= engine.quality_market_weight_threshold:
            score += engine.quality_market_weight_points
        return min(score, 100.0)

    @staticmethod
    def generate_appraisal_id() -> str:
        stamp = format(int(time.time() * 1000), "x")
        return f"APR-{stamp}-{uuid.uuid4().hex[:6]}".upper()
