# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Sales Comparison Approach

Derives a value indication from adjusted comparable sales:

1. **Verify**: drop stale, incompatible or badly mismatched sales
2. **Rank & select**: order verified sales and keep the best six
3. **Adjust**: apply the fixed-order adjustment calculus to each selection
4. **Weight**: discount heavily adjusted comparables
5. **Aggregate**: weighted adjusted price per SF times subject rentable area
6. **Reliability**: score confidence from count, adjustment size,
   dispersion and sale age

Comparables whose net adjustment exceeds the cap are kept in the result for
audit but contribute nothing to the value.
"""

from __future__ import annotations

import logging
import math
from typing import ClassVar, Dict, List, Optional, Sequence, Tuple

import pandas as pd
from pydantic import Field

from ..comparables import ComparableAnalyzer
from ..core.base import (
    Adjustment,
    Comparable,
    MarketData,
    SubjectProperty,
    UserAdjustments,
)
from ..core.calculations import ValuationCalculations
from ..core.errors import InsufficientDataError
from ..core.primitives import (
    AdjustmentKind,
    ApproachKind,
    AssumptionTracker,
    ConfidenceLevel,
    Model,
    PropertyTypeEnum,
    SaleConditionEnum,
    SalesComparisonSettings,
    Score0To100,
)
from .adjustments import ADJUSTMENT_ORDER, AdjustmentCalculator
from .base import ApproachResult, BaseApproach, ValueRange, with_applicable_use

logger = logging.getLogger(__name__)

SUMMARY_ADJUSTMENTS = ("location", "size", "age", "condition", "market_conditions")


class ExcludedComparable(Model):
    """A comparable dropped during verification."""

    key: str
    label: str
    reason: str


class AdjustedComparable(Model):
    """
    A selected comparable with its adjustment grid.

    `total_net_adjustment` is `|sum(dollar) / sale_price + prod(1 + percent) - 1|`.
    Comparables with `adjustment_valid=False` carry zero weight.
    """

    comparable: Comparable
    key: str = Field(..., description="Comparable id or list position.")
    ranking_score: float = 0.0
    similarity: Score0To100 = 0.0
    adjustments: Dict[str, Adjustment] = Field(default_factory=dict)
    total_dollar_adjustment: float = 0.0
    total_percent_adjustment: float = 0.0
    adjusted_price: float
    adjusted_price_per_sf: float
    total_net_adjustment: float
    adjustment_valid: bool
    weight: float = 0.0
    sale_age_months: float = 0.0
    notes: List[str] = Field(default_factory=list)

    @property
    def label(self) -> str:
        return self.comparable.label

    @property
    def largest_adjustment(self) -> float:
        """Largest single adjustment as a share of sale price."""
        price = self.comparable.sale_price or 0.0
        if not self.adjustments or price <= 0:
            return 0.0
        return max(abs(adj.dollar_value(price)) / price for adj in self.adjustments.values())


class SalesStatistics(Model):
    """Dispersion of the adjusted price per SF across valid comparables."""

    mean: float
    median: float
    std_dev: float
    coefficient_of_variation: float
    minimum: float
    maximum: float
    count: int
    confidence_interval: Optional[Tuple[float, float]] = Field(
        default=None, description="Student-t interval for the mean adjusted price per SF."
    )


class AdjustmentSummary(Model):
    average: float
    minimum: float
    maximum: float
    count: int


class ReliabilityFactors(Model):
    comparable_count: int
    average_adjustment: float
    coefficient_of_variation: float
    average_age_months: float


class SalesCompliance(Model):
    """Disclosure checks a compliant report relies on."""

    minimum_comparables: bool
    limit_violations: List[str] = Field(default_factory=list)
    timeframe_violations: List[str] = Field(default_factory=list)
    average_age_months: float = 0.0

    @property
    def adjustment_limits_valid(self) -> bool:
        return not self.limit_violations

    @property
    def timeframe_valid(self) -> bool:
        return not self.timeframe_violations


class SalesComparisonResult(ApproachResult):
    """Sales comparison value indication and its supporting grid."""

    kind: ClassVar[ApproachKind] = ApproachKind.SALES

    value_per_sf: float
    value_range: ValueRange
    comparables: List[AdjustedComparable] = Field(default_factory=list)
    excluded: List[ExcludedComparable] = Field(default_factory=list)
    statistics: SalesStatistics
    reliability: ReliabilityFactors
    adjustment_summary: Dict[str, AdjustmentSummary] = Field(default_factory=dict)
    compliance: SalesCompliance

    @property
    def valid_comparables(self) -> List[AdjustedComparable]:
        return [comp for comp in self.comparables if comp.adjustment_valid]

    @property
    def comparable_count(self) -> int:
        return len(self.comparables)

    def to_frame(self) -> pd.DataFrame:
        """
        Adjustment grid as a DataFrame, one row per selected comparable.

        Columns hold the sale price, each adjustment amount in application
        order, the totals, the adjusted price per SF and the weight.
        """
        rows = []
        for comp in self.comparables:
            row = {
                "comparable": comp.label,
                "sale_price": comp.comparable.sale_price,
                "price_per_sf": comp.comparable.price_per_sf,
            }
            for name in ADJUSTMENT_ORDER:
                if name in comp.adjustments:
                    row[name] = comp.adjustments[name].amount
            extra = [name for name in comp.adjustments if name not in ADJUSTMENT_ORDER]
            for name in extra:
                row[name] = comp.adjustments[name].amount
            row.update(
                {
                    "total_dollar": comp.total_dollar_adjustment,
                    "total_percent": comp.total_percent_adjustment,
                    "net_adjustment": comp.total_net_adjustment,
                    "adjusted_price": comp.adjusted_price,
                    "adjusted_price_per_sf": comp.adjusted_price_per_sf,
                    "valid": comp.adjustment_valid,
                    "weight": comp.weight,
                }
            )
            rows.append(row)
        return pd.DataFrame(rows).set_index("comparable") if rows else pd.DataFrame()


class SalesComparisonApproach(BaseApproach):
    """
    Sales comparison approach over a set of comparable sales.

    Example:
        ```python
        approach = SalesComparisonApproach(settings)
        result = approach.compute(subject, comparables, market_data)
        result.value_indication, result.confidence
        ```
    """

    kind: ClassVar[ApproachKind] = ApproachKind.SALES

    @property
    def rules(self) -> SalesComparisonSettings:
        return self.settings.sales

    def compute(
        self,
        subject: SubjectProperty,
        comparables: Sequence[Comparable],
        market_data: Optional[MarketData] = None,
        user_adjustments: Optional[UserAdjustments] = None,
        applicable_use: Optional[PropertyTypeEnum] = None,
    ) -> SalesComparisonResult:
        rules = self.settings.sales
        market_data = market_data or MarketData()
        tracker = AssumptionTracker("sales")
        subject = with_applicable_use(subject, applicable_use, tracker)
        if not comparables:
            raise InsufficientDataError(
                "At least one comparable property is required", stage="sales_comparison"
            )
        area = subject.rentable_area
        if not area or area <= 0:
            raise InsufficientDataError(
                "Subject rentable area is required for the sales comparison approach",
                stage="sales_comparison",
            )

        # Step 1: Verify
        verified, excluded = self.verify(subject, comparables)
        logger.info(f"Sales comparison: {len(verified)} of {len(comparables)} comparables verified")
        if len(verified) < rules.min_comparables:
            raise InsufficientDataError(
                f"At least {rules.min_comparables} verified comparables are required, "
                f"found {len(verified)}",
                stage="sales_comparison",
            )

        # Step 2: Rank and select
        analyzer = ComparableAnalyzer(self.settings)
        ranked = analyzer.rank(subject, [comp for _, comp, _ in verified])
        selected = ranked[: rules.max_selected]

        # Step 3 and 4: Adjust and weight
        calculator = AdjustmentCalculator(self.settings, tracker)
        adjusted: List[AdjustedComparable] = []
        for ranking in selected:
            index, comparable, notes = verified[ranking.index]
            key = comparable.key(index)
            adjustments = calculator.calculate_all(subject, comparable, market_data)
            if user_adjustments and key in user_adjustments:
                adjustments = self.merge_user_adjustments(adjustments, user_adjustments[key])
            adjusted.append(
                self.apply_adjustments(
                    comparable,
                    key,
                    adjustments,
                    notes=notes,
                    ranking_score=ranking.ranking_score,
                    similarity=ranking.similarity,
                )
            )

        valid = [comp for comp in adjusted if comp.adjustment_valid]
        for comp in adjusted:
            if not comp.adjustment_valid:
                logger.warning(
                    f"{comp.label}: net adjustment {comp.total_net_adjustment:.1%} exceeds "
                    f"{rules.max_net_adjustment:.0%}, excluded from value"
                )
        if len(valid) < rules.min_comparables:
            raise InsufficientDataError(
                f"Insufficient valid comparables after adjustments: {len(valid)} of "
                f"{len(adjusted)} within the {rules.max_net_adjustment:.0%} adjustment limit",
                stage="sales_comparison",
            )

        # Step 5: Aggregate
        prices = [comp.adjusted_price_per_sf for comp in valid]
        value_per_sf = ValuationCalculations.weighted_average(
            prices, [comp.weight for comp in valid]
        )
        value = ValuationCalculations.round_half_up(value_per_sf * area)
        stats = ValuationCalculations.population_statistics(prices)
        statistics = SalesStatistics(
            mean=stats["mean"],
            median=stats["median"],
            std_dev=stats["std_dev"],
            coefficient_of_variation=stats["coefficient_of_variation"],
            minimum=stats["min"],
            maximum=stats["max"],
            count=stats["count"],
            confidence_interval=ValuationCalculations.confidence_interval(
                prices, rules.confidence_level
            ),
        )
        range_percent = ValuationCalculations.clamp(
            statistics.coefficient_of_variation, rules.range_floor, rules.range_cap
        )
        value_range = ValueRange(
            low=ValuationCalculations.round_half_up(value * (1 - range_percent)),
            high=ValuationCalculations.round_half_up(value * (1 + range_percent)),
        )

        # Step 6: Reliability
        confidence, data_quality, factors = self.reliability(adjusted, statistics)

        return SalesComparisonResult(
            value_indication=value,
            confidence=confidence,
            data_quality=data_quality,
            value_per_sf=ValuationCalculations.round_half_up(value_per_sf, 2),
            value_range=value_range,
            comparables=adjusted,
            excluded=excluded,
            statistics=statistics,
            reliability=factors,
            adjustment_summary=self.adjustment_summary(adjusted),
            compliance=self.compliance(adjusted),
            assumptions=tracker.records,
            narrative=self.narrative(adjusted, value, value_per_sf, statistics),
        )

    # === VERIFICATION ===

    def verify(
        self, subject: SubjectProperty, comparables: Sequence[Comparable]
    ) -> Tuple[List[Tuple[int, Comparable, List[str]]], List[ExcludedComparable]]:
        """
        Screen comparables before ranking.

        Returns:
            Tuple of (index, comparable, notes) for kept sales and the
            excluded sales with their reasons.
        """
        rules = self.rules
        verified: List[Tuple[int, Comparable, List[str]]] = []
        excluded: List[ExcludedComparable] = []

        def exclude(index: int, comparable: Comparable, reason: str) -> None:
            logger.debug(f"Excluded {comparable.label}: {reason}")
            excluded.append(
                ExcludedComparable(key=comparable.key(index), label=comparable.label, reason=reason)
            )

        for index, comparable in enumerate(comparables):
            notes: List[str] = []
            if not comparable.sale_price or comparable.sale_price <= 0:
                exclude(index, comparable, "Missing or non-positive sale price")
                continue
            if not comparable.building_size or comparable.building_size <= 0:
                exclude(index, comparable, "Missing or non-positive building size")
                continue
            if comparable.sale_date is None:
                exclude(index, comparable, "Missing sale date")
                continue

            months = comparable.sale_age_months(self.settings.as_of_date, rules.days_per_month)
            if months > rules.max_sale_age_months:
                exclude(index, comparable, f"Sale is {months:.1f} months old")
                continue
            if months > rules.note_sale_age_months:
                notes.append(f"Older sale ({months:.1f} months), requires market conditions support")

            if not self.is_compatible_type(subject, comparable):
                exclude(
                    index,
                    comparable,
                    f"Incompatible property type: {_type_label(comparable)} vs {_type_label(subject)}",
                )
                continue

            ratio = comparable.building_size / subject.rentable_area
            if ratio < rules.min_size_ratio or ratio > rules.max_size_ratio:
                exclude(index, comparable, f"Size ratio {ratio:.2f} outside acceptable range")
                continue

            if comparable.sale_conditions in (
                SaleConditionEnum.DISTRESSED,
                SaleConditionEnum.FORECLOSURE,
            ):
                notes.append("Distressed sale, requires conditions of sale adjustment")

            verified.append((index, comparable, notes))
        return verified, excluded

    def is_compatible_type(self, subject: SubjectProperty, comparable: Comparable) -> bool:
        if subject.property_type is None or comparable.property_type is None:
            return subject.property_type == comparable.property_type
        allowed = self.rules.compatible_types.get(subject.property_type)
        if allowed is None:
            return comparable.property_type == subject.property_type
        return comparable.property_type in allowed

    # === ADJUSTMENT ===

    @staticmethod
    def merge_user_adjustments(
        computed: Dict[str, Adjustment], overrides: Dict[str, object]
    ) -> Dict[str, Adjustment]:
        """
        Merge caller adjustments over the computed grid.

        A bare number becomes a dollar adjustment named by its key. Either
        form replaces a computed adjustment of the same name.
        """
        merged = dict(computed)
        for name, override in overrides.items():
            if isinstance(override, Adjustment):
                merged[name] = override
            elif isinstance(override, dict):
                merged[name] = Adjustment.model_validate({"name": name, **override})
            else:
                merged[name] = Adjustment(
                    name=name,
                    kind=AdjustmentKind.DOLLAR,
                    amount=float(override),
                    explanation="Appraiser-supplied adjustment",
                    confidence=ConfidenceLevel.MEDIUM,
                )
        return merged

    def apply_adjustments(
        self,
        comparable: Comparable,
        key: str,
        adjustments: Dict[str, Adjustment],
        notes: Optional[List[str]] = None,
        ranking_score: float = 0.0,
        similarity: float = 0.0,
    ) -> AdjustedComparable:
        """Combine an adjustment grid into an adjusted price, validity and weight."""
        rules = self.rules
        price = comparable.sale_price
        dollar_total = sum(adj.amount for adj in adjustments.values() if not adj.is_percent)
        percent_total = (
            math.prod(1 + adj.amount for adj in adjustments.values() if adj.is_percent) - 1
        )
        adjusted_price = (price + dollar_total) * (1 + percent_total)
        net = abs(dollar_total / price + percent_total)
        valid = net <= rules.max_net_adjustment
        return AdjustedComparable(
            comparable=comparable,
            key=key,
            ranking_score=ranking_score,
            similarity=similarity,
            adjustments=adjustments,
            total_dollar_adjustment=dollar_total,
            total_percent_adjustment=percent_total,
            adjusted_price=adjusted_price,
            adjusted_price_per_sf=adjusted_price / comparable.building_size,
            total_net_adjustment=net,
            adjustment_valid=valid,
            weight=self.comparable_weight(adjustments, net) if valid else 0.0,
            sale_age_months=comparable.sale_age_months(
                self.settings.as_of_date, rules.days_per_month
            )
            or 0.0,
            notes=notes or [],
        )

    def comparable_weight(self, adjustments: Dict[str, Adjustment], net_adjustment: float) -> float:
        rules = self.rules
        weight = 1.0 - min(0.5, net_adjustment)
        location = adjustments.get("location")
        if location is not None and abs(location.amount) > rules.weight_location_threshold:
            weight *= rules.weight_penalty_multiplier
        market = adjustments.get("market_conditions")
        if market is not None and abs(market.amount) > rules.weight_market_threshold:
            weight *= rules.weight_penalty_multiplier
        return max(rules.weight_floor, weight)

    # === RELIABILITY ===

    def reliability(
        self, adjusted: List[AdjustedComparable], statistics: SalesStatistics
    ) -> Tuple[float, ConfidenceLevel, ReliabilityFactors]:
        rules = self.rules
        count = len(adjusted)
        confidence = 100.0
        dispersed = False

        if count < 4:
            confidence -= rules.few_comparables_penalty
        if count < 3:
            confidence -= rules.very_few_comparables_penalty

        average_adjustment = sum(c.total_net_adjustment for c in adjusted) / count
        confidence -= sum(p for t, p in rules.adjustment_penalty_bands if average_adjustment > t)

        if statistics.coefficient_of_variation > rules.dispersion_threshold:
            confidence -= rules.dispersion_penalty
            dispersed = True

        average_age = sum(c.sale_age_months for c in adjusted) / count
        confidence -= sum(p for t, p in rules.staleness_penalty_bands if average_age > t)

        confidence = self.clamp_score(confidence)
        label = self.confidence_label(confidence)
        if dispersed and label is ConfidenceLevel.HIGH:
            label = ConfidenceLevel.MEDIUM

        factors = ReliabilityFactors(
            comparable_count=count,
            average_adjustment=average_adjustment,
            coefficient_of_variation=statistics.coefficient_of_variation,
            average_age_months=average_age,
        )
        return confidence, label, factors

    # === REPORTING ===

    @staticmethod
    def adjustment_summary(adjusted: List[AdjustedComparable]) -> Dict[str, AdjustmentSummary]:
        """Average and range of the non-zero amounts for the principal adjustments."""
        summary: Dict[str, AdjustmentSummary] = {}
        for name in SUMMARY_ADJUSTMENTS:
            amounts = [
                comp.adjustments[name].amount
                for comp in adjusted
                if name in comp.adjustments and comp.adjustments[name].amount != 0
            ]
            if amounts:
                summary[name] = AdjustmentSummary(
                    average=sum(amounts) / len(amounts),
                    minimum=min(amounts),
                    maximum=max(amounts),
                    count=len(amounts),
                )
        return summary

    def compliance(self, adjusted: List[AdjustedComparable]) -> SalesCompliance:
        limits = self.settings.validation
        limit_violations: List[str] = []
        timeframe_violations: List[str] = []
        for position, comp in enumerate(adjusted, start=1):
            if comp.total_net_adjustment > limits.max_total_adjustment:
                limit_violations.append(
                    f"Comparable {position}: Total adjustments exceed "
                    f"{limits.max_total_adjustment:.0%} ({comp.total_net_adjustment:.1%})"
                )
            price = comp.comparable.sale_price
            for name, adjustment in comp.adjustments.items():
                share = abs(adjustment.dollar_value(price)) / price
                if share > limits.max_single_adjustment:
                    limit_violations.append(
                        f"Comparable {position}: {name} adjustment exceeds "
                        f"{limits.max_single_adjustment:.0%} ({share:.1%})"
                    )
            if comp.sale_age_months > self.rules.max_sale_age_months:
                timeframe_violations.append(
                    f"Comparable {position}: Sale date exceeds "
                    f"{self.rules.max_sale_age_months:.0f} months ({comp.sale_age_months:.1f} months)"
                )
        average_age = sum(c.sale_age_months for c in adjusted) / len(adjusted) if adjusted else 0.0
        return SalesCompliance(
            minimum_comparables=len(adjusted) >= self.rules.min_comparables,
            limit_violations=limit_violations,
            timeframe_violations=timeframe_violations,
            average_age_months=average_age,
        )

    @staticmethod
    def narrative(
        adjusted: List[AdjustedComparable],
        value: float,
        value_per_sf: float,
        statistics: SalesStatistics,
    ) -> str:
        cv = statistics.coefficient_of_variation
        if cv < 0.1:
            reliability = "highly reliable"
        elif cv < 0.2:
            reliability = "reliable"
        else:
            reliability = "moderately reliable"

        lines = [
            f"The Sales Comparison Approach analyzed {len(adjusted)} comparable sales, "
            f"resulting in an indicated value of ${value:,.0f} or ${value_per_sf:,.2f}/SF."
        ]
        for comp in adjusted:
            key_adjustments = [
                f"{name}: {adj.amount:+.1%}"
                for name, adj in comp.adjustments.items()
                if adj.is_percent and abs(adj.amount) > 0.05
            ]
            detail = ", ".join(key_adjustments) if key_adjustments else "minor adjustments"
            status = "" if comp.adjustment_valid else " (excluded, adjustment limit exceeded)"
            lines.append(
                f"{comp.label}: sold for ${comp.comparable.sale_price:,.0f}, adjusted to "
                f"${comp.adjusted_price:,.0f} ({detail}){status}."
            )
        lines.append(
            f"This indication is considered {reliability} based on the quality and quantity "
            f"of comparable data available."
        )
        return "\n".join(lines)


def _type_label(record) -> str:
    return record.property_type.value if record.property_type else "unknown"
