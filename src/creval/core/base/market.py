# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Market data supplied alongside the subject and comparables.

Every field is optional; an empty `MarketData()` is a valid input and the
components fall back to the documented defaults in `AppraisalSettings`.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import Field

from ..primitives import (
    FloatBetween0And1,
    MarketConditionEnum,
    Model,
    PositiveFloat,
    PropertyTypeEnum,
)


class ExpenseRatios(Model):
    """Market operating expense ratios (share of EGI) for one property type."""

    taxes: Optional[FloatBetween0And1] = None
    insurance: Optional[FloatBetween0And1] = None
    utilities: Optional[FloatBetween0And1] = None
    maintenance: Optional[FloatBetween0And1] = None
    management: Optional[FloatBetween0And1] = None
    reserves: Optional[FloatBetween0And1] = None

    @property
    def total(self) -> float:
        return sum(v for v in self.model_dump().values() if v is not None)


class LandSale(Model):
    price: PositiveFloat
    land_area: PositiveFloat
    zoning: Optional[str] = None
    sale_date: Optional[date] = None

    @property
    def price_per_sf(self) -> float:
        return self.price / self.land_area if self.land_area else 0.0


class ImprovedSale(Model):
    """Improved sale used to extract an implied land value."""

    sale_price: PositiveFloat
    land_area: PositiveFloat
    improvement_value: Optional[PositiveFloat] = Field(
        default=None, description="Depreciated value of the improvements, when known."
    )
    land_allocation: Optional[FloatBetween0And1] = Field(
        default=None, description="Share of the price attributable to land."
    )


class GrowthAssumptions(Model):
    income_growth: Optional[float] = None
    expense_growth: Optional[float] = None
    terminal_growth: Optional[float] = None


class MarketConditions(Model):
    declining: bool = False
    trend: Optional[MarketConditionEnum] = None
    land_value_multiplier: Optional[PositiveFloat] = None


class MarketData(Model):
    """Market evidence and assumptions by property type and region."""

    cap_rates: Dict[PropertyTypeEnum, FloatBetween0And1] = Field(default_factory=dict)
    discount_rates: Dict[PropertyTypeEnum, FloatBetween0And1] = Field(default_factory=dict)
    vacancy_rates: Dict[PropertyTypeEnum, FloatBetween0And1] = Field(default_factory=dict)
    expense_ratios: Dict[PropertyTypeEnum, ExpenseRatios] = Field(default_factory=dict)
    construction_costs: Dict[PropertyTypeEnum, PositiveFloat] = Field(
        default_factory=dict, description="Base construction cost per SF."
    )
    cost_multipliers: Dict[str, PositiveFloat] = Field(
        default_factory=dict, description="Regional construction cost multipliers by market."
    )
    land_sales: List[LandSale] = Field(default_factory=list)
    improved_sales: List[ImprovedSale] = Field(default_factory=list)
    appreciation_rate: Optional[float] = Field(
        default=None, description="Annual market appreciation for time adjustments."
    )
    growth: GrowthAssumptions = Field(default_factory=GrowthAssumptions)
    neighborhoods: Dict[str, PositiveFloat] = Field(
        default_factory=dict, description="Neighborhood name to 1-5 rating."
    )
    market_interest_rate: Optional[FloatBetween0And1] = None
    conditions: MarketConditions = Field(default_factory=MarketConditions)
    prefers_open_floor_plan: bool = False
    demand: Dict[PropertyTypeEnum, str] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self == MarketData()
