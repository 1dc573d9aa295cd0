# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
DCF Valuation - Discounted Cash Flow Analysis

Projects a stabilized income statement over a holding period, capitalizes
the year after the horizon into a terminal value, and discounts both at the
selected discount rate.
"""

from __future__ import annotations

import logging
from typing import List

import pandas as pd
from pydantic import Field, model_validator

from ..core.calculations import ValuationCalculations
from ..core.primitives import Model, PositiveFloat, PositiveInt
from .direct_cap import IncomeStatement

logger = logging.getLogger(__name__)


class ProjectionYear(Model):
    """One projected operating year."""

    year: int
    gross_income: float
    other_income: float
    vacancy: float
    expenses: float
    net_operating_income: float


class DCFAnalysis(Model):
    """Projection, terminal value and present values of a DCF run."""

    projections: List[ProjectionYear]
    discount_rate: float
    terminal_cap_rate: float
    terminal_noi: float
    terminal_value: float
    present_value_cash_flows: float
    present_value_terminal: float
    value_indication: float

    def to_frame(self) -> pd.DataFrame:
        """Projection table indexed by year."""
        return pd.DataFrame([p.model_dump() for p in self.projections]).set_index("year")


class DCFValuation(Model):
    """
    Discounted cash flow valuation of a stabilized income statement.

    Attributes:
        discount_rate: Discount rate for present value calculations
        terminal_cap_rate: Cap rate applied to the terminal NOI
        hold_period_years: Projection horizon in years
        income_growth_rate: Annual growth of gross and other income
        expense_growth_rate: Annual growth of operating expenses
        terminal_growth_rate: Growth from the final year to the terminal NOI

    Example:
        ```python
        dcf = DCFValuation(
            discount_rate=0.09,
            terminal_cap_rate=0.075,
            hold_period_years=10,
        )
        analysis = dcf.calculate_value(statement)
        ```
    """

    # === DCF PARAMETERS ===
    discount_rate: PositiveFloat = Field(
        ..., description="Discount rate for present value calculations"
    )
    terminal_cap_rate: PositiveFloat = Field(
        ..., description="Cap rate for terminal value calculation"
    )
    hold_period_years: PositiveInt = Field(default=10, description="Analysis period in years")
    income_growth_rate: float = Field(default=0.03)
    expense_growth_rate: float = Field(default=0.03)
    terminal_growth_rate: float = Field(default=0.02)

    # === VALIDATION ===

    @model_validator(mode="after")
    def validate_dcf_parameters(self) -> "DCFValuation":
        """Validate DCF parameters are reasonable."""
        if not (0.02 <= self.discount_rate <= 0.25):
            raise ValueError(
                f"Discount rate ({self.discount_rate:.1%}) should be between 2% and 25%"
            )
        if not (0.01 <= self.terminal_cap_rate <= 0.20):
            raise ValueError(
                f"Terminal cap rate ({self.terminal_cap_rate:.1%}) should be between 1% and 20%"
            )
        if self.hold_period_years > 50:
            raise ValueError(
                f"Hold period ({self.hold_period_years} years) should be at most 50 years"
            )
        if self.terminal_growth_rate >= self.discount_rate:
            raise ValueError(
                f"Terminal growth rate ({self.terminal_growth_rate:.1%}) must be less than "
                f"discount rate ({self.discount_rate:.1%})"
            )
        return self

    # === CALCULATION METHODS ===

    def project(self, statement: IncomeStatement) -> List[ProjectionYear]:
        """
        Grow the stabilized statement forward.

        Year 1 is the stabilized statement itself; income and expenses
        compound from there. Vacancy stays at the statement's rate.
        """
        projections = []
        for year in range(1, self.hold_period_years + 1):
            income_factor = (1 + self.income_growth_rate) ** (year - 1)
            expense_factor = (1 + self.expense_growth_rate) ** (year - 1)
            gross = statement.potential_gross_income * income_factor
            other = statement.other_income * income_factor
            vacancy = gross * statement.vacancy_rate
            expenses = statement.expenses.total * expense_factor
            projections.append(
                ProjectionYear(
                    year=year,
                    gross_income=gross,
                    other_income=other,
                    vacancy=vacancy,
                    expenses=expenses,
                    net_operating_income=gross + other - vacancy - expenses,
                )
            )
        return projections

    def calculate_value(self, statement: IncomeStatement) -> DCFAnalysis:
        projections = self.project(statement)
        cash_flows = [p.net_operating_income for p in projections]

        terminal_noi = cash_flows[-1] * (1 + self.terminal_growth_rate)
        terminal_value = terminal_noi / self.terminal_cap_rate

        pv_cash_flows = ValuationCalculations.present_value(self.discount_rate, cash_flows)
        pv_terminal = terminal_value / (1 + self.discount_rate) ** self.hold_period_years
        value = pv_cash_flows + pv_terminal
        logger.debug(
            f"DCF: PV cash flows {pv_cash_flows:,.0f} + PV terminal {pv_terminal:,.0f} "
            f"at {self.discount_rate:.2%}"
        )

        return DCFAnalysis(
            projections=projections,
            discount_rate=self.discount_rate,
            terminal_cap_rate=self.terminal_cap_rate,
            terminal_noi=terminal_noi,
            terminal_value=terminal_value,
            present_value_cash_flows=pv_cash_flows,
            present_value_terminal=pv_terminal,
            value_indication=ValuationCalculations.round_half_up(value),
        )
