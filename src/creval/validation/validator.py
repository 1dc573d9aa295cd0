# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Appraisal Input Validation

Checks the subject property, comparables, market data and any caller
adjustments for completeness and plausibility before any approach runs.

Fatal errors make the result invalid and halt the pipeline; warnings are
carried through to the final result for disclosure. The quality score starts
at 100 and loses a fixed number of points per error and per warning.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from ..core.base import (
    Adjustment,
    Comparable,
    IncomeData,
    MarketData,
    OperatingExpenses,
    SubjectProperty,
    UserAdjustments,
)
from ..core.calculations import ValuationCalculations
from ..core.primitives import AppraisalSettings, Severity
from .results import DataCompleteness, ValidationIssue, ValidationResult

logger = logging.getLogger(__name__)

# (field name, accessor) pairs whose absence is a fatal error
_REQUIRED_SUBJECT_FIELDS: List[Tuple[str, Callable[[SubjectProperty], object]]] = [
    ("property_type", lambda s: s.property_type),
    ("physical.gross_building_area", lambda s: s.gross_building_area),
    ("physical.land_area", lambda s: s.land_area),
    ("physical.year_built", lambda s: s.year_built),
    ("location.city", lambda s: s.city),
    ("location.state", lambda s: s.state),
]

_COMPLETENESS_SUBJECT_FIELDS: List[Callable[[SubjectProperty], object]] = [
    lambda s: s.property_type,
    lambda s: s.gross_building_area,
    lambda s: s.land_area,
    lambda s: s.year_built,
    lambda s: s.location.address,
    lambda s: s.city,
    lambda s: s.state,
    lambda s: s.physical.condition,
    lambda s: s.legal.zoning,
    lambda s: s.legal.property_rights,
]

_COMPLETENESS_COMPARABLE_FIELDS: List[Callable[[Comparable], object]] = [
    lambda c: c.sale_price,
    lambda c: c.building_size,
    lambda c: c.sale_date,
    lambda c: c.property_type,
    lambda c: c.city or c.address,
]

_COMPLETENESS_MARKET_FIELDS: List[Callable[[MarketData], object]] = [
    lambda m: m.cap_rates,
    lambda m: m.expense_ratios,
    lambda m: m.construction_costs,
    lambda m: m.conditions.trend or m.conditions.declining or m.conditions.land_value_multiplier,
]


class AppraisalValidator:
    """
    Validates appraisal inputs against the plausibility rules in
    `ValidationSettings`.

    Each `check_*` method returns the issues for one input group; `validate`
    combines them with the quality score, completeness breakdown and
    recommendations.
    """

    def __init__(self, settings: Optional[AppraisalSettings] = None):
        self.settings = settings or AppraisalSettings()
        self.rules = self.settings.validation

    def validate(
        self,
        subject: SubjectProperty,
        comparables: Sequence[Comparable],
        market_data: Optional[MarketData],
        adjustments: Optional[UserAdjustments] = None,
    ) -> ValidationResult:
        issues: List[ValidationIssue] = []
        issues.extend(self.check_subject(subject))
        issues.extend(self.check_comparables(comparables))
        issues.extend(self.check_market_data(market_data))
        issues.extend(self.check_adjustments(adjustments, comparables))

        n_errors = sum(1 for issue in issues if issue.is_error)
        n_warnings = len(issues) - n_errors
        score = ValuationCalculations.clamp(
            100.0
            - n_errors * self.rules.error_penalty
            - n_warnings * self.rules.warning_penalty,
            0.0,
            100.0,
        )
        result = ValidationResult(
            issues=issues,
            quality_score=score,
            data_completeness=self.data_completeness(subject, comparables, market_data),
            recommendations=self._recommendations(issues, score),
        )
        logger.info(
            f"Validation complete: {n_errors} errors, {n_warnings} warnings, "
            f"quality score {score:.0f}"
        )
        return result

    # === SUBJECT ===

    def check_subject(self, subject: SubjectProperty) -> List[ValidationIssue]:
        rules = self.rules
        issues: List[ValidationIssue] = []

        for field, accessor in _REQUIRED_SUBJECT_FIELDS:
            if accessor(subject) is None:
                issues.append(_error(f"Missing required field: {field}", field))

        gba = subject.gross_building_area
        nra = subject.net_rentable_area
        land = subject.land_area

        if gba is not None and gba <= 0:
            issues.append(
                _error("Gross building area must be greater than 0", "physical.gross_building_area")
            )
        if gba is not None and nra is not None and gba > 0:
            if nra > gba:
                issues.append(
                    _error(
                        "Net rentable area cannot exceed gross building area "
                        f"({nra:,.0f} SF > {gba:,.0f} SF)",
                        "physical.net_rentable_area",
                    )
                )
            elif nra / gba < rules.min_net_to_gross:
                issues.append(
                    _warning(
                        f"Very low efficiency ratio (NRA/GBA < {rules.min_net_to_gross:.0%})",
                        "physical.net_rentable_area",
                    )
                )

        if land is not None and land <= 0:
            issues.append(_error("Land area must be greater than 0", "physical.land_area"))
        elif land is not None and gba is not None and gba > land:
            issues.append(
                _warning("Building area exceeds land area - check data", "physical.land_area")
            )

        year_built = subject.year_built
        if year_built is not None:
            as_of_year = self.settings.as_of_date.year
            if year_built > as_of_year:
                issues.append(
                    _error("Year built cannot be in the future", "physical.year_built")
                )
            elif year_built < rules.min_year_built:
                issues.append(
                    _warning("Very old construction date - verify accuracy", "physical.year_built")
                )
            elif as_of_year - year_built > rules.max_building_age:
                issues.append(
                    _warning(
                        f"Building is over {rules.max_building_age} years old - "
                        "consider condition impacts",
                        "physical.year_built",
                    )
                )

        if subject.legal.property_rights is None:
            issues.append(
                _warning(
                    "Property rights not specified - assuming fee simple",
                    "legal.property_rights",
                )
            )
        if not subject.legal.zoning:
            issues.append(_warning("Zoning information not provided", "legal.zoning"))

        if subject.income is not None:
            issues.extend(self.check_income(subject.income, subject.expenses))
        return issues

    def check_income(
        self, income: IncomeData, expenses: Optional[OperatingExpenses]
    ) -> List[ValidationIssue]:
        rules = self.rules
        issues: List[ValidationIssue] = []
        for index, lease in enumerate(income.rent_roll, start=1):
            if lease.monthly_rent is None or lease.monthly_rent <= 0:
                issues.append(
                    _warning(f"Unit {index}: Invalid rent amount", "income.rent_roll")
                )
            if lease.lease_end is None:
                issues.append(
                    _warning(f"Unit {index}: Missing lease expiration", "income.rent_roll")
                )

        gross = income.potential_gross_income
        if gross and income.rent_roll:
            annual_roll = income.annual_rent_roll
            if abs(annual_roll - gross) > gross * rules.income_mismatch_tolerance:
                issues.append(
                    _warning(
                        f"Gross income ({gross:,.0f}) does not match rent roll total "
                        f"({annual_roll:,.0f})",
                        "income.potential_gross_income",
                    )
                )

        if gross and expenses is not None and expenses.has_line_items:
            ratio = expenses.reported_total / gross
            if ratio > rules.max_expense_ratio:
                issues.append(
                    _warning(f"Very high expense ratio: {ratio:.1%}", "expenses")
                )
            elif ratio < rules.min_expense_ratio:
                issues.append(
                    _warning(f"Very low expense ratio: {ratio:.1%}", "expenses")
                )
        return issues

    # === COMPARABLES ===

    def check_comparables(self, comparables: Sequence[Comparable]) -> List[ValidationIssue]:
        rules = self.rules
        issues: List[ValidationIssue] = []

        if len(comparables) < rules.min_comparables:
            issues.append(
                _warning(
                    f"Fewer than {rules.min_comparables} comparables may reduce reliability",
                    "comparables",
                )
            )
        elif len(comparables) > rules.max_comparables:
            issues.append(
                _warning(
                    f"More than {rules.max_comparables} comparables may be excessive",
                    "comparables",
                )
            )

        for index, comparable in enumerate(comparables):
            issues.extend(self.check_comparable(comparable, index))
        issues.extend(self._duplicate_comparables(comparables))
        return issues

    def check_comparable(self, comparable: Comparable, index: int) -> List[ValidationIssue]:
        rules = self.rules
        prefix = f"Comparable {index + 1}:"
        field = f"comparables[{index}]"
        issues: List[ValidationIssue] = []

        for name in ("sale_price", "building_size", "property_type"):
            if getattr(comparable, name) is None:
                issues.append(_error(f"{prefix} Missing required field: {name}", f"{field}.{name}"))

        price = comparable.sale_price
        size = comparable.building_size
        if price is not None:
            if price <= 0:
                issues.append(_error(f"{prefix} Sale price must be greater than 0", f"{field}.sale_price"))
            elif price > rules.max_sale_price:
                issues.append(
                    _warning(f"{prefix} Very high sale price - verify accuracy", f"{field}.sale_price")
                )
        if size is not None:
            if size <= 0:
                issues.append(
                    _error(f"{prefix} Building size must be greater than 0", f"{field}.building_size")
                )
            elif size > rules.max_building_size:
                issues.append(
                    _warning(f"{prefix} Very large building - verify accuracy", f"{field}.building_size")
                )

        as_of = self.settings.as_of_date
        if comparable.sale_date is None:
            issues.append(_warning(f"{prefix} Sale date not provided", f"{field}.sale_date"))
        elif comparable.sale_date > as_of:
            issues.append(
                _error(f"{prefix} Sale date cannot be in the future", f"{field}.sale_date")
            )
        else:
            months = comparable.sale_age_months(as_of, rules.days_per_month)
            if months > rules.very_stale_sale_months:
                issues.append(
                    ValidationIssue(
                        severity=Severity.HIGH,
                        message=f"{prefix} Sale is over {rules.very_stale_sale_months:.0f} "
                        "months old - time adjustment needed",
                        field=f"{field}.sale_date",
                    )
                )
            elif months > rules.stale_sale_months:
                issues.append(
                    _warning(
                        f"{prefix} Sale is over {rules.stale_sale_months:.0f} months old - "
                        "consider time adjustment",
                        f"{field}.sale_date",
                    )
                )

        if price and size and price > 0 and size > 0:
            price_per_sf = price / size
            if price_per_sf < rules.min_price_per_sf:
                issues.append(
                    _warning(
                        f"{prefix} Very low price per SF (${price_per_sf:,.2f}) - verify data",
                        f"{field}.sale_price",
                    )
                )
            elif price_per_sf > rules.max_price_per_sf:
                issues.append(
                    _warning(
                        f"{prefix} Very high price per SF (${price_per_sf:,.2f}) - verify data",
                        f"{field}.sale_price",
                    )
                )
        return issues

    def _duplicate_comparables(self, comparables: Sequence[Comparable]) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        seen = {}
        for index, comparable in enumerate(comparables):
            key = (
                comparable.property_name or comparable.address,
                comparable.sale_price,
                comparable.sale_date,
            )
            if key in seen:
                issues.append(
                    _warning(
                        f"Comparable {index + 1} may be a duplicate of comparable {seen[key] + 1}",
                        f"comparables[{index}]",
                    )
                )
            else:
                seen[key] = index
        return issues

    # === MARKET DATA ===

    def check_market_data(self, market_data: Optional[MarketData]) -> List[ValidationIssue]:
        rules = self.rules
        if market_data is None or market_data.is_empty:
            return [
                ValidationIssue(
                    severity=Severity.HIGH,
                    message="No market data provided - using defaults",
                    field="market_data",
                )
            ]

        issues: List[ValidationIssue] = []
        if not market_data.cap_rates:
            issues.append(
                ValidationIssue(
                    severity=Severity.HIGH,
                    message="No cap rate data provided - default capitalization rates apply",
                    field="market_data.cap_rates",
                )
            )
        for property_type, rate in market_data.cap_rates.items():
            if not rules.min_cap_rate <= rate <= rules.max_cap_rate:
                issues.append(
                    _warning(
                        f"Unusual cap rate for {property_type.value}: {rate:.1%}",
                        "market_data.cap_rates",
                    )
                )
        for property_type, ratios in market_data.expense_ratios.items():
            total = ratios.total
            if not rules.min_expense_ratio <= total <= rules.max_expense_ratio:
                issues.append(
                    _warning(
                        f"Unusual expense ratio for {property_type.value}: {total:.1%}",
                        "market_data.expense_ratios",
                    )
                )
        return issues

    # === ADJUSTMENTS ===

    def check_adjustments(
        self,
        adjustments: Optional[UserAdjustments],
        comparables: Sequence[Comparable],
    ) -> List[ValidationIssue]:
        rules = self.rules
        issues: List[ValidationIssue] = []
        if not adjustments:
            return issues

        for index, comparable in enumerate(comparables):
            overrides = adjustments.get(comparable.key(index))
            if not overrides or not comparable.sale_price or comparable.sale_price <= 0:
                continue
            price = comparable.sale_price
            total = 0.0
            for name, value in overrides.items():
                magnitude = abs(
                    value.dollar_value(price) if isinstance(value, Adjustment) else float(value)
                )
                total += magnitude
                if magnitude > price * rules.max_single_adjustment:
                    issues.append(
                        _warning(
                            f"Large {name} adjustment ({magnitude / price:.1%}) "
                            f"for comparable {index + 1}",
                            f"adjustments[{comparable.key(index)}].{name}",
                        )
                    )
            if total > price * rules.max_total_adjustment:
                issues.append(
                    _warning(
                        f"Very high total adjustments ({total / price:.1%}) "
                        f"for comparable {index + 1}",
                        f"adjustments[{comparable.key(index)}]",
                    )
                )
        return issues

    # === DIAGNOSTICS ===

    def data_completeness(
        self,
        subject: SubjectProperty,
        comparables: Sequence[Comparable],
        market_data: Optional[MarketData],
    ) -> DataCompleteness:
        subject_pct = _share_present([f(subject) for f in _COMPLETENESS_SUBJECT_FIELDS])
        comparable_pct = 0.0
        if comparables:
            comparable_pct = _share_present(
                [f(c) for c in comparables for f in _COMPLETENESS_COMPARABLE_FIELDS]
            )
        market_pct = 0.0
        if market_data is not None:
            market_pct = _share_present([f(market_data) for f in _COMPLETENESS_MARKET_FIELDS])
        overall = ValuationCalculations.round_half_up(
            (subject_pct + comparable_pct + market_pct) / 3
        )
        return DataCompleteness(
            subject=subject_pct,
            comparables=comparable_pct,
            market=market_pct,
            overall=overall,
        )

    def _recommendations(self, issues: List[ValidationIssue], score: float) -> List[str]:
        recommendations = []
        messages = [issue.message.lower() for issue in issues if not issue.is_error]
        if score < 60:
            recommendations.append("Consider obtaining additional data to improve reliability")
        if any(issue.is_error for issue in issues):
            recommendations.append("Resolve all data errors before proceeding with valuation")
        if any(
            ("large" in message and "adjustment" in message) or "total adjustments" in message
            for message in messages
        ):
            recommendations.append("Review large adjustments for reasonableness and market support")
        if any("months old" in message for message in messages):
            recommendations.append("Consider time adjustments for older sales data")
        if any("market data" in message or "cap rate data" in message for message in messages):
            recommendations.append("Obtain current market cap rate and expense data")
        return recommendations


def validate(
    subject: SubjectProperty,
    comparables: Sequence[Comparable],
    market_data: Optional[MarketData],
    adjustments: Optional[UserAdjustments] = None,
    settings: Optional[AppraisalSettings] = None,
) -> ValidationResult:
    """Validate appraisal inputs. Pure function over its arguments."""
    return AppraisalValidator(settings).validate(subject, comparables, market_data, adjustments)


def _error(message: str, field: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(severity=Severity.ERROR, message=message, field=field)


def _warning(message: str, field: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(severity=Severity.WARNING, message=message, field=field)


def _share_present(values: List[object]) -> float:
    if not values:
        return 0.0
    present = sum(1 for value in values if value not in (None, "", {}, []) and value is not False)
    return ValuationCalculations.round_half_up(present / len(values) * 100)
