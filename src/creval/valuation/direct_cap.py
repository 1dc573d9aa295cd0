# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
DirectCap Valuation - Income Approach

Single-period valuation of a stabilized income statement:
Value = NOI / Cap_Rate

The income statement runs potential gross income, less vacancy and
collection loss, plus other income, to effective gross income, less
operating expenses, to net operating income.
"""

from __future__ import annotations

from pydantic import Field, model_validator

from ..core.primitives import FloatBetween0And1, Model, PositiveFloat


class ExpenseStatement(Model):
    """Annual operating expenses by line item."""

    taxes: float = 0.0
    insurance: float = 0.0
    utilities: float = 0.0
    maintenance: float = 0.0
    management: float = 0.0
    reserves: float = 0.0
    other: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.taxes
            + self.insurance
            + self.utilities
            + self.maintenance
            + self.management
            + self.reserves
            + self.other
        )


class IncomeStatement(Model):
    """
    Stabilized annual income statement.

    Attributes:
        potential_gross_income: Rent at full occupancy
        vacancy_rate: Vacancy and collection loss as a share of PGI
        other_income: Parking, storage and similar income
        expenses: Operating expense lines
    """

    potential_gross_income: PositiveFloat
    vacancy_rate: FloatBetween0And1
    other_income: PositiveFloat = 0.0
    expenses: ExpenseStatement = Field(default_factory=ExpenseStatement)

    # === COMPUTED PROPERTIES ===

    @property
    def vacancy_loss(self) -> float:
        return self.potential_gross_income * self.vacancy_rate

    @property
    def effective_gross_income(self) -> float:
        return self.potential_gross_income - self.vacancy_loss + self.other_income

    @property
    def net_operating_income(self) -> float:
        return self.effective_gross_income - self.expenses.total

    @property
    def expense_ratio(self) -> float:
        egi = self.effective_gross_income
        return self.expenses.total / egi if egi > 0 else 0.0


class CapRateSelection(Model):
    """Market cap rate with subject-specific risk adjustments."""

    base: FloatBetween0And1
    risk_adjustment: float = 0.0
    selected: FloatBetween0And1
    market_support: bool = Field(
        default=False, description="True when market data supplied the base rate."
    )
    rationale: str = ""


class DirectCapValuation(Model):
    """
    Income approach valuation using direct capitalization.

    Example:
        ```python
        valuation = DirectCapValuation(cap_rate=0.0675)
        value = valuation.calculate_value(statement.net_operating_income)
        ```
    """

    cap_rate: PositiveFloat = Field(..., description="Capitalization rate for valuation")

    # === VALIDATION ===

    @model_validator(mode="after")
    def validate_parameters(self) -> "DirectCapValuation":
        """Validate the cap rate is reasonable."""
        if not (0.01 <= self.cap_rate <= 0.20):
            raise ValueError(f"Cap rate ({self.cap_rate:.1%}) should be between 1% and 20%")
        return self

    # === CALCULATION METHODS ===

    def calculate_value(self, noi: float) -> float:
        return noi / self.cap_rate


class DirectCapitalization(Model):
    """Direct capitalization output within the income approach."""

    statement: IncomeStatement
    cap_rate: CapRateSelection
    value_indication: float

    @property
    def net_operating_income(self) -> float:
        return self.statement.net_operating_income
