# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Comparable transaction records.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field

from ..calculations import ValuationCalculations
from ..primitives import (
    ConditionInput,
    FinancingTypeEnum,
    HVACTypeEnum,
    MarketConditionEnum,
    Model,
    PositiveFloat,
    PositiveInt,
    PropertyRightsEnum,
    PropertyTypeEnum,
    SaleConditionEnum,
)
from .property import ConstructionDetails, IncomeData, LocationDetails


class FinancingTerms(Model):
    """Financing used by the buyer of a comparable."""

    financing_type: Optional[FinancingTypeEnum] = None
    interest_rate: Optional[float] = Field(
        default=None, ge=0, le=1, description="Annual rate as a decimal (0.055 = 5.5%)."
    )

    @property
    def is_cash_equivalent(self) -> bool:
        return self.financing_type in (
            FinancingTypeEnum.CASH,
            FinancingTypeEnum.CASH_EQUIVALENT,
        )


class Comparable(Model):
    """
    A past sale used as market evidence.

    Required fields for valuation (price, date, size, type) are optional at
    parse time so validation can report what is missing.
    """

    # === CORE IDENTITY ===
    comparable_id: Optional[str] = None
    property_name: Optional[str] = None
    address: Optional[str] = None
    property_type: Optional[PropertyTypeEnum] = None

    # === TRANSACTION ===
    sale_price: Optional[float] = None
    sale_date: Optional[date] = None
    sale_conditions: SaleConditionEnum = SaleConditionEnum.ARMS_LENGTH
    financing: Optional[FinancingTerms] = None
    property_rights: Optional[PropertyRightsEnum] = None
    market_conditions: Optional[MarketConditionEnum] = None
    cap_rate: Optional[PositiveFloat] = None

    # === PROPERTY ===
    building_size: Optional[float] = Field(default=None, description="Building area in SF.")
    land_area: Optional[PositiveFloat] = None
    year_built: Optional[int] = None
    condition: Optional[ConditionInput] = None
    construction: ConstructionDetails = Field(default_factory=ConstructionDetails)
    location: LocationDetails = Field(default_factory=LocationDetails)
    hvac_type: Optional[HVACTypeEnum] = None
    parking_ratio: Optional[PositiveFloat] = None
    loading_docks: Optional[PositiveInt] = None
    income: Optional[IncomeData] = None

    # === COMPUTED PROPERTIES ===

    @property
    def price_per_sf(self) -> Optional[float]:
        if not self.sale_price or not self.building_size:
            return None
        return self.sale_price / self.building_size

    @property
    def city(self) -> Optional[str]:
        return self.location.city

    @property
    def label(self) -> str:
        """Human-readable name for narratives and logs."""
        return self.property_name or self.address or self.comparable_id or "Unnamed comparable"

    def key(self, index: int) -> str:
        """Identifier used to attach caller adjustments: the id, else the list position."""
        return self.comparable_id or str(index)

    def sale_age_months(self, as_of: date, days_per_month: float = 30.44) -> Optional[float]:
        if self.sale_date is None:
            return None
        return ValuationCalculations.months_between(self.sale_date, as_of, days_per_month)


class RentalComparable(Model):
    """Market rent evidence used when the subject reports no gross income."""

    name: str = ""
    property_type: Optional[PropertyTypeEnum] = None
    rent_per_sf: PositiveFloat = Field(..., description="Annual rent per SF.")
    size: Optional[PositiveFloat] = None
