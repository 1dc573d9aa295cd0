# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Sales Comparison Adjustment Calculus

Computes the individual adjustments that bring a comparable sale in line with
the subject. Adjustments are applied in the conventional sequence:

1. Property rights conveyed
2. Financing terms
3. Conditions of sale
4. Market conditions (time)
5. Location
6. Physical: size, age, condition, construction quality, functional utility
7. Income (when both properties report income): lease terms, tenant quality

Each method returns an `Adjustment` with a signed fraction of price; a
positive amount means the comparable is inferior to the subject and its
price is adjusted upward.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Set

from ..core.base import (
    Adjustment,
    Comparable,
    ConstructionDetails,
    IncomeData,
    MarketData,
    SubjectProperty,
)
from ..core.calculations import ValuationCalculations
from ..core.primitives import (
    AdjustmentKind,
    AppraisalSettings,
    AssumptionTracker,
    ConfidenceLevel,
    PropertyRightsEnum,
    SalesComparisonSettings,
)

logger = logging.getLogger(__name__)

ADJUSTMENT_ORDER = (
    "property_rights",
    "financing",
    "sale_conditions",
    "market_conditions",
    "location",
    "size",
    "age",
    "condition",
    "quality",
    "functional_utility",
    "lease_terms",
    "tenant_quality",
)


def _percent(
    name: str, amount: float, explanation: str, confidence: ConfidenceLevel
) -> Adjustment:
    return Adjustment(
        name=name,
        kind=AdjustmentKind.PERCENT,
        amount=amount,
        explanation=explanation,
        confidence=confidence,
    )


class AdjustmentCalculator:
    """
    Market-derived adjustments for one subject against its comparables.

    All constants come from `SalesComparisonSettings`. Inputs that fall back
    to market data or a default are recorded once per name in the
    calculator's `AssumptionTracker`.
    """

    def __init__(
        self,
        settings: Optional[AppraisalSettings] = None,
        tracker: Optional[AssumptionTracker] = None,
    ):
        self.settings = settings or AppraisalSettings()
        self.rules: SalesComparisonSettings = self.settings.sales
        self.tracker = tracker or AssumptionTracker("sales")
        self._recorded: Set[str] = set()

    @property
    def as_of(self) -> date:
        return self.settings.as_of_date

    def resolve(
        self, name: str, supplied: Any = None, market: Any = None, default: Any = None
    ) -> Any:
        """First available of supplied, market and default; recorded once per name."""
        if name not in self._recorded:
            self._recorded.add(name)
            return self.tracker.resolve(name, supplied=supplied, market=market, default=default)
        for value in (supplied, market):
            if value is not None:
                return value
        return default

    def calculate_all(
        self, subject: SubjectProperty, comparable: Comparable, market_data: MarketData
    ) -> Dict[str, Adjustment]:
        """All applicable adjustments, keyed by name in application order."""
        adjustments = [
            self.property_rights(subject, comparable),
            self.financing(comparable, market_data),
            self.sale_conditions(comparable),
            self.market_conditions(comparable, market_data),
            self.location(subject, comparable, market_data),
            self.size(subject, comparable),
            self.age(subject, comparable),
            self.condition(subject, comparable),
            self.quality(subject, comparable),
            self.functional_utility(subject, comparable),
        ]
        if subject.income is not None and comparable.income is not None:
            adjustments.append(self.lease_terms(subject.income, comparable.income))
            adjustments.append(self.tenant_quality(subject.income, comparable.income))
        return {adjustment.name: adjustment for adjustment in adjustments}

    # === TRANSACTION ADJUSTMENTS ===

    def property_rights(self, subject: SubjectProperty, comparable: Comparable) -> Adjustment:
        subject_rights = subject.legal.property_rights or PropertyRightsEnum.FEE_SIMPLE
        comp_rights = comparable.property_rights or PropertyRightsEnum.FEE_SIMPLE
        amount = 0.0
        if (
            subject_rights is PropertyRightsEnum.FEE_SIMPLE
            and comp_rights is PropertyRightsEnum.LEASED_FEE
        ):
            amount = -self.rules.property_rights_adjustment
        elif (
            subject_rights is PropertyRightsEnum.LEASED_FEE
            and comp_rights is PropertyRightsEnum.FEE_SIMPLE
        ):
            amount = self.rules.property_rights_adjustment
        return _percent(
            "property_rights",
            amount,
            f"Property rights: {subject_rights.value} vs {comp_rights.value}",
            ConfidenceLevel.MEDIUM,
        )

    def financing(self, comparable: Comparable, market_data: MarketData) -> Adjustment:
        rules = self.rules
        terms = comparable.financing
        if terms is None or terms.is_cash_equivalent:
            return _percent(
                "financing",
                0.0,
                "Cash equivalent sale, no financing adjustment needed",
                ConfidenceLevel.HIGH,
            )
        market_rate = self.resolve(
            "market_interest_rate",
            market=market_data.market_interest_rate or None,
            default=rules.default_market_interest_rate,
        )
        actual_rate = terms.interest_rate if terms.interest_rate is not None else market_rate
        gap_points = (market_rate - actual_rate) * 100
        amount = 0.0
        if gap_points > rules.financing_threshold_points:
            # Below-market financing inflated the price paid
            amount = -min(rules.financing_cap, gap_points * rules.financing_factor)
        return _percent(
            "financing",
            amount,
            f"Financing at {actual_rate:.2%} vs market {market_rate:.2%}",
            ConfidenceLevel.MEDIUM,
        )

    def sale_conditions(self, comparable: Comparable) -> Adjustment:
        conditions = comparable.sale_conditions
        amount = self.rules.sale_condition_adjustments.get(conditions, 0.0)
        if amount:
            explanation = f"{conditions.value.replace('_', ' ').capitalize()} sale, upward adjustment applied"
        else:
            explanation = "Arms-length transaction, no adjustment needed"
        return _percent("sale_conditions", amount, explanation, ConfidenceLevel.HIGH)

    def market_conditions(self, comparable: Comparable, market_data: MarketData) -> Adjustment:
        rules = self.rules
        months = comparable.sale_age_months(self.as_of, rules.days_per_month) or 0.0
        annual = self.resolve(
            "appreciation_rate",
            market=market_data.appreciation_rate,
            default=rules.default_appreciation_rate,
        )
        amount = ValuationCalculations.clamp(
            months * annual / 12, rules.time_adjustment_floor, rules.time_adjustment_cap
        )
        return _percent(
            "market_conditions",
            amount,
            f"Market conditions: {months:.1f} months at {annual:.1%} annual",
            ConfidenceLevel.MEDIUM,
        )

    # === LOCATION ===

    def location(
        self, subject: SubjectProperty, comparable: Comparable, market_data: MarketData
    ) -> Adjustment:
        rules = self.rules
        subject_loc = subject.location
        comp_loc = comparable.location
        amount = 0.0
        factors: List[str] = []

        if subject_loc.neighborhood and comp_loc.neighborhood:
            diff = self.neighborhood_rating(subject_loc.neighborhood, market_data) - (
                self.neighborhood_rating(comp_loc.neighborhood, market_data)
            )
            amount += diff * rules.neighborhood_factor
            factors.append(f"neighborhood {diff:+.1f} points")

        if subject_loc.transportation and comp_loc.transportation:
            diff = subject_loc.transportation.score - comp_loc.transportation.score
            amount += diff * rules.transportation_factor
            factors.append(f"transportation {diff:+d} points")

        # Positive when the comparable is farther from the CBD
        distance_diff = (comp_loc.distance_from_cbd or 0.0) - (subject_loc.distance_from_cbd or 0.0)
        if abs(distance_diff) > rules.distance_threshold_miles:
            amount += distance_diff * rules.distance_factor
            factors.append(f"distance from CBD {distance_diff:+.1f} miles")

        amount = ValuationCalculations.clamp(amount, -rules.location_cap, rules.location_cap)
        explanation = "Location: " + (", ".join(factors) if factors else "comparable location")
        return _percent("location", amount, explanation, ConfidenceLevel.MEDIUM)

    def neighborhood_rating(self, neighborhood: str, market_data: MarketData) -> float:
        return self.resolve(
            f"neighborhood_rating.{neighborhood}",
            market=market_data.neighborhoods.get(neighborhood),
            default=self.rules.default_neighborhood_rating,
        )

    # === PHYSICAL ADJUSTMENTS ===

    def size(self, subject: SubjectProperty, comparable: Comparable) -> Adjustment:
        rules = self.rules
        subject_size = subject.rentable_area
        comp_size = comparable.building_size
        if not subject_size or not comp_size:
            return _percent("size", 0.0, "Size: insufficient data", ConfidenceLevel.LOW)
        ratio = comp_size / subject_size
        amount = 0.0
        # Larger buildings trade at lower prices per SF
        if ratio > rules.large_size_ratio:
            amount = min(rules.size_cap, (ratio - 1) * rules.size_factor)
        elif ratio < rules.small_size_ratio:
            amount = max(-rules.size_cap, (1 - ratio) * -rules.size_factor)
        return _percent(
            "size",
            amount,
            f"Size: {comp_size:,.0f} SF vs {subject_size:,.0f} SF ({ratio:.0%})",
            ConfidenceLevel.HIGH,
        )

    def age(self, subject: SubjectProperty, comparable: Comparable) -> Adjustment:
        rules = self.rules
        subject_age = subject.age(self.as_of)
        if subject_age is None or comparable.year_built is None:
            return _percent("age", 0.0, "Age: insufficient data", ConfidenceLevel.LOW)
        comp_age = self.as_of.year - comparable.year_built
        age_diff = comp_age - subject_age
        amount = ValuationCalculations.clamp(age_diff * rules.age_factor, -rules.age_cap, rules.age_cap)
        return _percent(
            "age",
            amount,
            f"Age: {comp_age} years vs {subject_age} years ({age_diff:+d} year difference)",
            ConfidenceLevel.MEDIUM,
        )

    def condition(self, subject: SubjectProperty, comparable: Comparable) -> Adjustment:
        rules = self.rules
        subject_condition = subject.physical.condition
        subject_score = self.resolve(
            "condition_score.subject",
            supplied=subject_condition.score if subject_condition else None,
            default=rules.default_condition_score,
        )
        comp_score = self.resolve(
            f"condition_score.{comparable.comparable_id or comparable.label}",
            supplied=comparable.condition.score if comparable.condition else None,
            default=rules.default_condition_score,
        )
        amount = ValuationCalculations.clamp(
            (subject_score - comp_score) * rules.condition_factor,
            -rules.condition_cap,
            rules.condition_cap,
        )
        return _percent(
            "condition",
            amount,
            f"Condition: {subject_score:g} vs {comp_score:g} on a 5-point scale",
            ConfidenceLevel.MEDIUM,
        )

    def quality(self, subject: SubjectProperty, comparable: Comparable) -> Adjustment:
        rules = self.rules
        subject_score = self.construction_quality_score(subject.physical.construction)
        comp_score = self.construction_quality_score(comparable.construction)
        amount = ValuationCalculations.clamp(
            (subject_score - comp_score) * rules.quality_factor,
            -rules.quality_cap,
            rules.quality_cap,
        )
        return _percent(
            "quality",
            amount,
            f"Quality: {subject_score:g} vs {comp_score:g} quality score",
            ConfidenceLevel.MEDIUM,
        )

    def construction_quality_score(self, construction: ConstructionDetails) -> float:
        """Quality score 1-5 from construction class plus finish bonuses."""
        rules = self.rules
        score = rules.quality_scores.get(construction.construction_type, rules.default_quality_score)
        if construction.roof_type in rules.premium_roofs:
            score += rules.finish_bonus
        if construction.exterior_finish in rules.premium_finishes:
            score += rules.finish_bonus
        return ValuationCalculations.clamp(score, 1.0, 5.0)

    def functional_utility(self, subject: SubjectProperty, comparable: Comparable) -> Adjustment:
        rules = self.rules
        physical = subject.physical
        amount = 0.0
        factors: List[str] = []

        if physical.hvac_type != comparable.hvac_type:
            diff = self.hvac_score(physical.hvac_type) - self.hvac_score(comparable.hvac_type)
            amount += diff * rules.hvac_factor
            factors.append(f"HVAC {diff:+g}")

        parking_diff = (physical.parking.ratio or 0.0) - (comparable.parking_ratio or 0.0)
        if abs(parking_diff) > rules.parking_threshold:
            amount += parking_diff * rules.parking_factor
            factors.append(f"parking {parking_diff:+.1f} spaces/1,000 SF")

        if subject.property_type in rules.dock_property_types:
            dock_diff = (physical.loading_docks or 0) - (comparable.loading_docks or 0)
            if dock_diff:
                amount += dock_diff * rules.dock_factor
                factors.append(f"loading docks {dock_diff:+d}")

        amount = ValuationCalculations.clamp(amount, -rules.functional_cap, rules.functional_cap)
        explanation = "Functional utility: " + (", ".join(factors) if factors else "comparable utility")
        return _percent("functional_utility", amount, explanation, ConfidenceLevel.LOW)

    def hvac_score(self, hvac_type) -> float:
        return self.rules.hvac_scores.get(hvac_type, self.rules.default_hvac_score)

    # === INCOME ADJUSTMENTS ===

    def lease_terms(self, subject_income: IncomeData, comp_income: IncomeData) -> Adjustment:
        rules = self.rules
        subject_term = self.average_lease_length(subject_income)
        comp_term = self.average_lease_length(comp_income)
        amount = ValuationCalculations.clamp(
            (subject_term - comp_term) * rules.lease_term_factor,
            -rules.lease_term_cap,
            rules.lease_term_cap,
        )
        return _percent(
            "lease_terms",
            amount,
            f"Lease terms: {subject_term:.1f} vs {comp_term:.1f} months average",
            ConfidenceLevel.MEDIUM,
        )

    def tenant_quality(self, subject_income: IncomeData, comp_income: IncomeData) -> Adjustment:
        rules = self.rules
        subject_score = self.tenant_quality_score(subject_income)
        comp_score = self.tenant_quality_score(comp_income)
        amount = ValuationCalculations.clamp(
            (subject_score - comp_score) * rules.tenant_factor,
            -rules.tenant_cap,
            rules.tenant_cap,
        )
        return _percent(
            "tenant_quality",
            amount,
            f"Tenant quality: {subject_score:.1f} vs {comp_score:.1f} score",
            ConfidenceLevel.MEDIUM,
        )

    def average_lease_length(self, income: IncomeData) -> float:
        """SF-weighted average lease term in months."""
        total_area = sum(lease.area for lease in income.rent_roll)
        if total_area <= 0:
            return 0.0
        weighted = sum((lease.term_months or 0.0) * lease.area for lease in income.rent_roll)
        return weighted / total_area

    def tenant_quality_score(self, income: IncomeData) -> float:
        """SF-weighted tenant credit score on a 1-5 scale, adjusted for lease length."""
        rules = self.rules
        total_area = sum(lease.area for lease in income.rent_roll)
        if total_area <= 0:
            return rules.default_tenant_score
        weighted = 0.0
        for lease in income.rent_roll:
            score = rules.default_tenant_score
            if lease.credit_rating:
                score = rules.credit_scores.get(
                    lease.credit_rating.strip().upper(), rules.default_tenant_score
                )
            term = lease.term_months or 0.0
            if term > rules.long_lease_months:
                score += rules.lease_length_bonus
            elif term < rules.short_lease_months:
                score -= rules.lease_length_bonus
            weighted += score * lease.area
        return weighted / total_area
