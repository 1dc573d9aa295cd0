# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Income Capitalization Approach

Builds a stabilized income statement for the subject, values it by direct
capitalization and by a discounted cash flow projection, and blends the two
indications (60% direct cap, 40% DCF by default).

Income and expense data are required. Missing expense lines, vacancy and
the cap rate fall back to market data and then to the documented defaults;
each fallback is recorded as an assumption and lowers confidence.
"""

from __future__ import annotations

import logging
from typing import ClassVar, List, Optional, Sequence

from pydantic import Field

from ..core.base import (
    ExpenseRatios,
    MarketData,
    OperatingExpenses,
    RentalComparable,
    SubjectProperty,
)
from ..core.calculations import ValuationCalculations
from ..core.errors import InsufficientDataError
from ..core.primitives import (
    ApproachKind,
    AssumptionSource,
    AssumptionTracker,
    ExpenseRatioTable,
    IncomeSettings,
    PropertyTypeEnum,
)
from .adjustments import AdjustmentCalculator
from .base import ApproachResult, BaseApproach, with_applicable_use
from .dcf import DCFAnalysis, DCFValuation
from .direct_cap import (
    CapRateSelection,
    DirectCapitalization,
    DirectCapValuation,
    ExpenseStatement,
    IncomeStatement,
)

logger = logging.getLogger(__name__)

EXPENSE_LINES = ("taxes", "insurance", "utilities", "maintenance", "management", "reserves")


class IncomeApproachResult(ApproachResult):
    """Income approach indication with both capitalization methods."""

    kind: ClassVar[ApproachKind] = ApproachKind.INCOME

    direct_capitalization: DirectCapitalization
    discounted_cash_flow: DCFAnalysis
    direct_cap_weight: float = Field(..., description="Share of value from direct cap.")
    has_rent_roll: bool = False
    has_expense_detail: bool = False

    @property
    def net_operating_income(self) -> float:
        return self.direct_capitalization.net_operating_income

    @property
    def cap_rate(self) -> float:
        return self.direct_capitalization.cap_rate.selected

    @property
    def market_cap_support(self) -> bool:
        return self.direct_capitalization.cap_rate.market_support


class IncomeApproach(BaseApproach):
    """
    Income capitalization approach.

    Example:
        ```python
        result = IncomeApproach(settings).compute(subject, [], market_data)
        result.net_operating_income, result.cap_rate
        ```
    """

    kind: ClassVar[ApproachKind] = ApproachKind.INCOME

    @property
    def rules(self) -> IncomeSettings:
        return self.settings.income

    def compute(
        self,
        subject: SubjectProperty,
        rental_comparables: Optional[Sequence[RentalComparable]] = None,
        market_data: Optional[MarketData] = None,
        applicable_use: Optional[PropertyTypeEnum] = None,
    ) -> IncomeApproachResult:
        rules = self.rules
        market_data = market_data or MarketData()
        if subject.income is None or subject.expenses is None:
            raise InsufficientDataError(
                "Income and expense data required for Income Approach", stage="income"
            )
        tracker = AssumptionTracker("income")
        subject = with_applicable_use(subject, applicable_use, tracker)

        statement = self.income_statement(subject, rental_comparables or [], market_data, tracker)
        noi = statement.net_operating_income
        if noi <= 0:
            raise InsufficientDataError(
                f"Net operating income must be positive, got {noi:,.0f}", stage="income"
            )

        # Method 1: Direct capitalization
        cap_rate = self.select_cap_rate(subject, market_data, tracker)
        direct_cap_value = DirectCapValuation(cap_rate=cap_rate.selected).calculate_value(noi)
        direct_cap = DirectCapitalization(
            statement=statement,
            cap_rate=cap_rate,
            value_indication=ValuationCalculations.round_half_up(direct_cap_value),
        )

        # Method 2: Discounted cash flow
        dcf = self.dcf_valuation(subject, cap_rate, market_data, tracker).calculate_value(statement)

        value = ValuationCalculations.round_half_up(
            rules.direct_cap_weight * direct_cap.value_indication
            + (1 - rules.direct_cap_weight) * dcf.value_indication
        )

        has_rent_roll = bool(subject.income.rent_roll)
        has_expense_detail = subject.expenses.has_line_items
        confidence = 100.0
        if not has_rent_roll:
            confidence -= rules.no_rent_roll_penalty
        if not has_expense_detail:
            confidence -= rules.assumed_expenses_penalty
        if not cap_rate.market_support:
            confidence -= rules.no_market_cap_penalty
        if subject.income.vacancy_rate is None:
            confidence -= rules.assumed_vacancy_penalty
        confidence = self.clamp_score(confidence)

        logger.info(
            f"Income approach: NOI {noi:,.0f} at {cap_rate.selected:.2%} -> "
            f"direct cap {direct_cap.value_indication:,.0f}, DCF {dcf.value_indication:,.0f}"
        )
        return IncomeApproachResult(
            value_indication=value,
            confidence=confidence,
            data_quality=self.confidence_label(confidence),
            direct_capitalization=direct_cap,
            discounted_cash_flow=dcf,
            direct_cap_weight=rules.direct_cap_weight,
            has_rent_roll=has_rent_roll,
            has_expense_detail=has_expense_detail,
            assumptions=tracker.records,
            narrative=self.narrative(direct_cap, dcf, value, rules.direct_cap_weight),
        )

    # === INCOME STATEMENT ===

    def income_statement(
        self,
        subject: SubjectProperty,
        rental_comparables: Sequence[RentalComparable],
        market_data: MarketData,
        tracker: AssumptionTracker,
    ) -> IncomeStatement:
        rules = self.rules
        income = subject.income
        pgi = self.potential_gross_income(subject, rental_comparables, tracker)
        vacancy_rate = tracker.resolve(
            "vacancy_rate",
            supplied=income.vacancy_rate,
            market=market_data.vacancy_rates.get(subject.property_type),
            default=rules.default_vacancy_rate,
        )
        other_income = income.other_income or 0.0
        egi = pgi - pgi * vacancy_rate + other_income
        expenses = self.operating_expenses(
            subject.property_type, subject.expenses, egi, market_data, tracker
        )
        return IncomeStatement(
            potential_gross_income=pgi,
            vacancy_rate=vacancy_rate,
            other_income=other_income,
            expenses=expenses,
        )

    def potential_gross_income(
        self,
        subject: SubjectProperty,
        rental_comparables: Sequence[RentalComparable],
        tracker: AssumptionTracker,
    ) -> float:
        """Supplied PGI, else the annualized rent roll, else market rent times rentable area."""
        income = subject.income
        if income.potential_gross_income:
            tracker.record(
                "potential_gross_income", income.potential_gross_income, AssumptionSource.SUPPLIED
            )
            return income.potential_gross_income
        rent_roll = income.annual_rent_roll
        if rent_roll > 0:
            tracker.record("potential_gross_income", rent_roll, AssumptionSource.SUPPLIED)
            return rent_roll
        area = subject.rentable_area
        rents = [c.rent_per_sf for c in rental_comparables]
        if rents and area:
            pgi = sum(rents) / len(rents) * area
            tracker.record("potential_gross_income", pgi, AssumptionSource.MARKET_DATA)
            return pgi
        raise InsufficientDataError(
            "Potential gross income, a rent roll or rental comparables are required",
            stage="income",
        )

    def operating_expenses(
        self,
        property_type: Optional[PropertyTypeEnum],
        expenses: OperatingExpenses,
        egi: float,
        market_data: MarketData,
        tracker: AssumptionTracker,
    ) -> ExpenseStatement:
        """Reported expense lines, each missing line estimated as EGI times its ratio."""
        market_ratios: ExpenseRatios = market_data.expense_ratios.get(property_type) or ExpenseRatios()
        default_ratios = self.default_expense_ratios(property_type)
        lines = {}
        for line in EXPENSE_LINES:
            supplied = getattr(expenses, line)
            market = getattr(market_ratios, line)
            market_amount = egi * market if market is not None else None
            lines[line] = tracker.resolve(
                f"expenses.{line}",
                supplied=supplied,
                market=market_amount,
                default=egi * getattr(default_ratios, line),
            )
        lines["other"] = expenses.other or 0.0
        return ExpenseStatement(**lines)

    def default_expense_ratios(self, property_type: Optional[PropertyTypeEnum]) -> ExpenseRatioTable:
        tables = self.rules.expense_ratios
        return tables.get(property_type) or tables.get(PropertyTypeEnum.OFFICE) or ExpenseRatioTable()

    # === RATES ===

    def select_cap_rate(
        self, subject: SubjectProperty, market_data: MarketData, tracker: AssumptionTracker
    ) -> CapRateSelection:
        """
        Market cap rate for the type plus risk adjustments, clamped to the allowed band.

        Adjustments: neighborhood grade A lowers the rate, C or D raises it;
        strong tenancy lowers it, weak tenancy raises it; buildings over 30
        years old and below-average condition raise it.
        """
        rules = self.rules
        market_rate = market_data.cap_rates.get(subject.property_type)
        base = tracker.resolve("cap_rate", market=market_rate, default=rules.default_cap_rate)

        adjustment = 0.0
        reasons: List[str] = []
        grade = subject.location.grade_letter
        if grade == "A":
            adjustment += rules.superior_grade_adjustment
            reasons.append("superior location")
        elif grade in ("C", "D"):
            adjustment += rules.inferior_grade_adjustment
            reasons.append("inferior location")

        tenant_score = AdjustmentCalculator(self.settings).tenant_quality_score(subject.income)
        if tenant_score > rules.strong_tenant_threshold:
            adjustment += rules.strong_tenant_adjustment
            reasons.append("strong tenancy")
        elif tenant_score < rules.weak_tenant_threshold:
            adjustment += rules.weak_tenant_adjustment
            reasons.append("weak tenancy")

        age = subject.age(self.settings.as_of_date)
        if age is not None and age > rules.old_building_age:
            adjustment += rules.old_building_adjustment
            reasons.append("building age")
        if subject.condition.score < rules.poor_condition_threshold:
            adjustment += rules.poor_condition_adjustment
            reasons.append("condition")

        selected = ValuationCalculations.clamp(
            base + adjustment, rules.min_cap_rate, rules.max_cap_rate
        )
        rationale = f"Base: {base:.2%}, Risk adj: {adjustment:+.2%}"
        if reasons:
            rationale += f" ({', '.join(reasons)})"
        return CapRateSelection(
            base=base,
            risk_adjustment=adjustment,
            selected=selected,
            market_support=market_rate is not None,
            rationale=rationale,
        )

    def dcf_valuation(
        self,
        subject: SubjectProperty,
        cap_rate: CapRateSelection,
        market_data: MarketData,
        tracker: AssumptionTracker,
    ) -> DCFValuation:
        rules = self.rules
        growth = market_data.growth
        discount_rate = tracker.resolve(
            "discount_rate",
            market=market_data.discount_rates.get(subject.property_type),
            default=cap_rate.selected + rules.discount_rate_spread,
        )
        return DCFValuation(
            discount_rate=discount_rate,
            terminal_cap_rate=cap_rate.selected + rules.terminal_cap_spread,
            hold_period_years=rules.projection_years,
            income_growth_rate=tracker.resolve(
                "income_growth", market=growth.income_growth, default=rules.income_growth
            ),
            expense_growth_rate=tracker.resolve(
                "expense_growth", market=growth.expense_growth, default=rules.expense_growth
            ),
            terminal_growth_rate=tracker.resolve(
                "terminal_growth", market=growth.terminal_growth, default=rules.terminal_growth
            ),
        )

    # === NARRATIVE ===

    @staticmethod
    def narrative(
        direct_cap: DirectCapitalization, dcf: DCFAnalysis, value: float, weight: float
    ) -> str:
        statement = direct_cap.statement
        return "\n".join(
            [
                f"Effective gross income of ${statement.effective_gross_income:,.0f} less operating "
                f"expenses of ${statement.expenses.total:,.0f} ({statement.expense_ratio:.1%} of EGI) "
                f"yields net operating income of ${statement.net_operating_income:,.0f}.",
                f"Direct capitalization at {direct_cap.cap_rate.selected:.2%} "
                f"({direct_cap.cap_rate.rationale}) indicates ${direct_cap.value_indication:,.0f}.",
                f"A {len(dcf.projections)}-year discounted cash flow at {dcf.discount_rate:.2%} with a "
                f"{dcf.terminal_cap_rate:.2%} terminal cap rate indicates ${dcf.value_indication:,.0f}.",
                f"Weighting direct capitalization {weight:.0%} and the DCF {1 - weight:.0%}, the "
                f"Income Approach indicates ${value:,.0f}.",
            ]
        )

