# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Reconciliation - Final Value Conclusion

Weighs the available approach indications into one market value:

1. **Reliability**: score each approach from structural checks on its inputs
2. **Weights**: base weights by property type scaled by reliability, with an
   optional boost for the caller's preferred approach, normalized to 1
3. **Weighted value**: rounded to a denomination suited to its magnitude
4. **Variance**: dispersion of the indications around their mean
5. **Range and confidence**: widen the range and discount confidence as
   variance grows or reliability falls

The value range is derived from the final value, so the final value always
lies inside it.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from pydantic import Field

from ..core.base import AppraisalOptions, SubjectProperty
from ..core.calculations import ValuationCalculations
from ..core.errors import InsufficientDataError
from ..core.primitives import (
    AppraisalSettings,
    ApproachKind,
    ConfidenceLevel,
    CostApplicability,
    Model,
    PropertyTypeEnum,
    ReconciliationSettings,
    Score0To100,
    VarianceRating,
)
from .base import ApproachResult, ValueRange, with_applicable_use
from .cost import CostApproachResult
from .income import IncomeApproachResult
from .sales_comp import SalesComparisonResult

logger = logging.getLogger(__name__)

APPROACH_LABELS = {
    ApproachKind.SALES: "Sales Comparison",
    ApproachKind.INCOME: "Income Approach",
    ApproachKind.COST: "Cost Approach",
}


class ReliabilityAssessment(Model):
    """Structural reliability of one approach."""

    score: Score0To100
    level: ConfidenceLevel
    factors: List[str] = Field(default_factory=list)


class ApproachWeights(Model):
    """Normalized reconciliation weights; zero for an absent approach."""

    sales: float = 0.0
    income: float = 0.0
    cost: float = 0.0

    @property
    def total(self) -> float:
        return self.sales + self.income + self.cost

    def get(self, kind: ApproachKind) -> float:
        return getattr(self, kind.value)


class VarianceAnalysis(Model):
    """Dispersion of the approach indications."""

    values: List[float] = Field(default_factory=list)
    mean: float = 0.0
    variance: float = 0.0
    std_dev: float = 0.0
    coefficient_of_variation: float = 0.0
    range: float = Field(default=0.0, description="(max - min) / mean.")
    acceptable: bool = True
    rating: VarianceRating = VarianceRating.EXCELLENT


class ReconciliationNarrative(Model):
    summary: str
    weighting_rationale: str
    conclusion: str
    approach_analysis: Dict[ApproachKind, str] = Field(default_factory=dict)
    variance_analysis: Optional[str] = None

    @property
    def text(self) -> str:
        parts = [self.summary]
        parts.extend(self.approach_analysis.values())
        parts.append(self.weighting_rationale)
        if self.variance_analysis:
            parts.append(self.variance_analysis)
        parts.append(self.conclusion)
        return "\n".join(parts)


class ReconciliationResult(Model):
    """
    Final value conclusion.

    `weights` sum to 1 across the approaches that produced a value;
    `value_range` always contains `final_value`.
    """

    indications: Dict[ApproachKind, float]
    reliability: Dict[ApproachKind, ReliabilityAssessment]
    weights: ApproachWeights
    weighted_value: float
    final_value: float
    value_range: ValueRange
    range_percent: float
    variance: VarianceAnalysis
    confidence: Score0To100
    narrative: ReconciliationNarrative


class Reconciler:
    """Reconciles approach results using `ReconciliationSettings`."""

    def __init__(self, settings: Optional[AppraisalSettings] = None):
        self.settings = settings or AppraisalSettings()
        self.rules: ReconciliationSettings = self.settings.reconciliation

    def reconcile(
        self,
        sales: Optional[SalesComparisonResult],
        income: Optional[IncomeApproachResult],
        cost: Optional[CostApproachResult],
        subject: SubjectProperty,
        options: Optional[AppraisalOptions] = None,
        applicable_use: Optional[PropertyTypeEnum] = None,
    ) -> ReconciliationResult:
        options = options or AppraisalOptions()
        subject = with_applicable_use(subject, applicable_use)
        results: Dict[ApproachKind, ApproachResult] = {
            kind: result
            for kind, result in (
                (ApproachKind.SALES, sales),
                (ApproachKind.INCOME, income),
                (ApproachKind.COST, cost),
            )
            if result is not None
        }
        if not results:
            raise InsufficientDataError(
                "No valuation approach produced a value to reconcile", stage="reconciliation"
            )
        indications = {kind: result.value_indication for kind, result in results.items()}

        # Step 1: Reliability
        reliability: Dict[ApproachKind, ReliabilityAssessment] = {}
        if sales is not None:
            reliability[ApproachKind.SALES] = self.sales_reliability(sales)
        if income is not None:
            reliability[ApproachKind.INCOME] = self.income_reliability(income, subject)
        if cost is not None:
            reliability[ApproachKind.COST] = self.cost_reliability(cost, subject)

        # Step 2: Weights
        weights = self.weights(reliability, subject, options.preferred_approach)

        # Step 3: Weighted and final value
        weighted_value = ValuationCalculations.round_half_up(
            sum(weights.get(kind) * value for kind, value in indications.items())
        )
        final_value = ValuationCalculations.round_to_denomination(
            weighted_value, self.rules.rounding_tiers, self.rules.default_denomination
        )

        # Step 4: Variance
        variance = self.variance(list(indications.values()))

        # Step 5: Range and confidence
        value_range, range_percent = self.value_range(final_value, variance, reliability)
        confidence = self.overall_confidence(reliability, variance, weights)

        logger.info(
            f"Reconciled {len(results)} approach(es) to {final_value:,.0f} "
            f"(variance {variance.range:.1%}, {variance.rating.value}; confidence {confidence:.0f})"
        )
        return ReconciliationResult(
            indications=indications,
            reliability=reliability,
            weights=weights,
            weighted_value=weighted_value,
            final_value=final_value,
            value_range=value_range,
            range_percent=range_percent,
            variance=variance,
            confidence=confidence,
            narrative=self.narrative(
                indications, reliability, weights, final_value, variance, options.uspap_compliance
            ),
        )

    # === RELIABILITY ===

    def sales_reliability(self, sales: SalesComparisonResult) -> ReliabilityAssessment:
        rules = self.rules
        score = 100.0
        level = ConfidenceLevel.HIGH
        factors: List[str] = []
        comparables = sales.comparables

        if len(comparables) < rules.sales_min_comparables:
            score -= rules.few_comparables_penalty
            level = ConfidenceLevel.MEDIUM
            factors.append("Limited comparable sales")

        if comparables:
            average = sum(comp.total_net_adjustment for comp in comparables) / len(comparables)
            if average > rules.high_adjustment_threshold:
                score -= rules.high_adjustment_penalty
                level = ConfidenceLevel.MEDIUM
                factors.append("High adjustment levels")

        stale = rules.sales_stale_months
        if comparables and all(comp.sale_age_months > stale for comp in comparables):
            score -= rules.stale_sales_penalty
            factors.append("Dated sales data")

        if score < rules.low_reliability_score:
            level = ConfidenceLevel.LOW
        return ReliabilityAssessment(score=max(0.0, score), level=level, factors=factors)

    def income_reliability(
        self, income: IncomeApproachResult, subject: SubjectProperty
    ) -> ReliabilityAssessment:
        rules = self.rules
        score = 100.0
        level = ConfidenceLevel.HIGH
        factors: List[str] = []

        if not income.has_rent_roll:
            score -= rules.no_rent_roll_penalty
            level = ConfidenceLevel.MEDIUM
            factors.append("Limited rent roll data")

        if not income.market_cap_support:
            score -= rules.no_cap_rate_support_penalty
            factors.append("Limited cap rate market support")

        if subject.property_type not in rules.income_property_types:
            score -= rules.non_income_type_penalty
            level = ConfidenceLevel.MEDIUM
            factors.append("Limited income-producing nature")

        if score < rules.low_reliability_score:
            level = ConfidenceLevel.LOW
        return ReliabilityAssessment(score=max(0.0, score), level=level, factors=factors)

    def cost_reliability(
        self, cost: CostApproachResult, subject: SubjectProperty
    ) -> ReliabilityAssessment:
        rules = self.rules
        score = rules.cost_base_score
        level = (
            ConfidenceLevel.LOW
            if cost.applicability is CostApplicability.VERY_LOW
            else ConfidenceLevel(cost.applicability.value)
        )
        factors: List[str] = []

        if cost.building_age < rules.cost_new_building_age:
            score = rules.cost_new_building_score
            level = ConfidenceLevel.HIGH
            factors.append("New construction")
        elif cost.building_age > rules.cost_old_building_age:
            score = rules.cost_old_building_score
            level = ConfidenceLevel.LOW
            factors.append("Older building with depreciation uncertainty")

        if subject.physical.special_use:
            score += rules.special_use_bonus
            factors.append("Special use property - limited sales data")

        return ReliabilityAssessment(
            score=ValuationCalculations.clamp(score, 0.0, 100.0), level=level, factors=factors
        )

    # === WEIGHTS ===

    def weights(
        self,
        reliability: Dict[ApproachKind, ReliabilityAssessment],
        subject: SubjectProperty,
        preferred: Optional[ApproachKind] = None,
    ) -> ApproachWeights:
        """
        Reliability-scaled, normalized approach weights.

        An absent approach weighs zero. When every weight collapses to zero
        the fallback weights apply, restricted to the approaches present.
        """
        rules = self.rules
        base_weights = rules.base_weights.get(subject.property_type, rules.fallback_weights)
        base = dict(zip(APPROACH_LABELS, base_weights))
        raw = {
            kind: base[kind] * reliability[kind].score / 100 if kind in reliability else 0.0
            for kind in APPROACH_LABELS
        }
        if preferred is not None and preferred in reliability:
            raw[preferred] *= rules.preferred_approach_boost

        total = sum(raw.values())
        if total <= 0:
            logger.warning("All reconciliation weights collapsed to zero; using fallback weights")
            fallback = dict(zip(APPROACH_LABELS, rules.fallback_weights))
            raw = {kind: fallback[kind] if kind in reliability else 0.0 for kind in APPROACH_LABELS}
            total = sum(raw.values())
        return ApproachWeights(**{kind.value: raw[kind] / total for kind in APPROACH_LABELS})

    # === VARIANCE ===

    def variance(self, values: List[float]) -> VarianceAnalysis:
        if len(values) < 2:
            return VarianceAnalysis(values=values, mean=values[0] if values else 0.0)
        stats = ValuationCalculations.population_statistics(values)
        mean = stats["mean"]
        spread = (stats["max"] - stats["min"]) / mean if mean > 0 else 0.0
        return VarianceAnalysis(
            values=values,
            mean=mean,
            variance=stats["variance"],
            std_dev=stats["std_dev"],
            coefficient_of_variation=stats["coefficient_of_variation"],
            range=spread,
            acceptable=spread <= self.rules.acceptable_variance_range,
            rating=self.variance_rating(spread),
        )

    def variance_rating(self, spread: float) -> VarianceRating:
        for threshold, label in self.rules.variance_labels:
            if spread <= threshold:
                return VarianceRating(label)
        return VarianceRating.POOR

    # === RANGE AND CONFIDENCE ===

    def value_range(
        self,
        final_value: float,
        variance: VarianceAnalysis,
        reliability: Dict[ApproachKind, ReliabilityAssessment],
    ) -> Tuple[ValueRange, float]:
        rules = self.rules
        percent = rules.base_range
        for threshold in rules.range_variance_thresholds:
            if variance.range > threshold:
                percent += rules.range_step

        average = sum(r.score for r in reliability.values()) / len(reliability)
        for threshold in rules.range_reliability_thresholds:
            if average < threshold:
                percent += rules.range_step
        percent = min(rules.max_range, percent)

        value_range = ValueRange(
            low=ValuationCalculations.round_half_up(final_value * (1 - percent)),
            high=ValuationCalculations.round_half_up(final_value * (1 + percent)),
        )
        return value_range, percent

    def overall_confidence(
        self,
        reliability: Dict[ApproachKind, ReliabilityAssessment],
        variance: VarianceAnalysis,
        weights: ApproachWeights,
    ) -> float:
        total_weight = sum(weights.get(kind) for kind in reliability)
        if total_weight <= 0:
            return 0.0
        confidence = (
            sum(r.score * weights.get(kind) for kind, r in reliability.items()) / total_weight
        )
        for threshold, multiplier in self.rules.confidence_discounts:
            if variance.range > threshold:
                confidence *= multiplier
        return ValuationCalculations.round_half_up(
            ValuationCalculations.clamp(confidence, 0.0, 100.0)
        )

    # === NARRATIVE ===

    @staticmethod
    def narrative(
        indications: Dict[ApproachKind, float],
        reliability: Dict[ApproachKind, ReliabilityAssessment],
        weights: ApproachWeights,
        final_value: float,
        variance: VarianceAnalysis,
        detailed: bool = False,
    ) -> ReconciliationNarrative:
        weighted = ", ".join(
            f"{APPROACH_LABELS[kind]} {weights.get(kind):.0%}"
            for kind in APPROACH_LABELS
            if weights.get(kind) > 0
        )
        narrative = ReconciliationNarrative(
            summary=(
                f"Based on the analysis of {len(indications)} approach(es) to value, the final "
                f"value conclusion is ${final_value:,.0f}."
            ),
            weighting_rationale=f"The approaches were weighted as follows: {weighted}.",
            conclusion=(
                f"The final value of ${final_value:,.0f} represents the most probable market "
                f"value based on the weight of evidence from the applicable approaches."
            ),
        )
        if not detailed:
            return narrative

        consistency = (
            "indicating consistent value indications"
            if variance.acceptable
            else "which requires careful consideration of each approach's reliability"
        )
        return narrative.model_copy(
            update={
                "approach_analysis": {
                    kind: (
                        f"{APPROACH_LABELS[kind]}: ${value:,.0f} ({weights.get(kind):.0%} weight) - "
                        f"{reliability[kind].level.value} reliability"
                    )
                    for kind, value in indications.items()
                },
                "variance_analysis": (
                    f"The variance between approaches is {variance.rating.value} "
                    f"({variance.range:.0%}), {consistency}."
                ),
            }
        )


def reconcile(
    sales: Optional[SalesComparisonResult],
    income: Optional[IncomeApproachResult],
    cost: Optional[CostApproachResult],
    subject: SubjectProperty,
    options: Optional[AppraisalOptions] = None,
    settings: Optional[AppraisalSettings] = None,
    applicable_use: Optional[PropertyTypeEnum] = None,
) -> ReconciliationResult:
    """Reconcile the available approach results into a final value."""
    return Reconciler(settings).reconcile(sales, income, cost, subject, options, applicable_use)
