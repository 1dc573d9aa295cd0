# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Subject Property Records

Strongly-typed description of the property under appraisal. The records are
parsed once at the system boundary and read through explicit accessor
properties; no component walks dotted paths over untyped data.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import Field

from ..calculations import ValuationCalculations
from ..primitives import (
    ConditionEnum,
    ConditionInput,
    ConstructionTypeEnum,
    ExteriorFinishEnum,
    FloatBetween0And1,
    FloorPlanEnum,
    HVACTypeEnum,
    Model,
    PositiveFloat,
    PositiveInt,
    PropertyRightsEnum,
    PropertyTypeEnum,
    RoofTypeEnum,
)


class ConstructionDetails(Model):
    """Structural class and finishes."""

    construction_type: Optional[ConstructionTypeEnum] = None
    roof_type: Optional[RoofTypeEnum] = None
    exterior_finish: Optional[ExteriorFinishEnum] = None


class ParkingDetails(Model):
    spaces: Optional[PositiveInt] = None
    ratio: Optional[PositiveFloat] = Field(
        default=None, description="Parking spaces per 1,000 SF of building area."
    )


class TransportationAccess(Model):
    """Transportation amenities serving a location."""

    highways: List[str] = Field(default_factory=list)
    public_transit: List[str] = Field(default_factory=list)
    airport: Optional[str] = None
    walk_score: Optional[float] = Field(default=None, ge=0, le=100)

    @property
    def score(self) -> int:
        """Access score: highways 2, transit 1, airport 1, walkable 1."""
        score = 0
        if self.highways:
            score += 2
        if self.public_transit:
            score += 1
        if self.airport and self.airport.lower() != "none":
            score += 1
        if self.walk_score is not None and self.walk_score > 70:
            score += 1
        return score


class LocationDetails(Model):
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    market: Optional[str] = Field(
        default=None, description="Regional market key used for construction cost multipliers."
    )
    neighborhood: Optional[str] = Field(default=None, description="Neighborhood name.")
    neighborhood_grade: Optional[str] = Field(
        default=None, description="Letter grade, e.g. 'A', 'B+', 'C-'."
    )
    distance_from_cbd: Optional[PositiveFloat] = Field(
        default=None, description="Miles from the central business district."
    )
    transportation: Optional[TransportationAccess] = None
    declining: bool = Field(default=False, description="Neighborhood in decline.")

    @property
    def grade_letter(self) -> Optional[str]:
        """First letter of the neighborhood grade, upper-cased."""
        if not self.neighborhood_grade:
            return None
        return self.neighborhood_grade.strip()[:1].upper()


class PhysicalCharacteristics(Model):
    """
    Physical description of the improvements and site.

    Areas are deliberately unconstrained so validation can report
    non-positive values instead of failing at parse time.
    """

    gross_building_area: Optional[float] = None
    net_rentable_area: Optional[float] = None
    land_area: Optional[float] = Field(default=None, description="Site area in SF.")
    year_built: Optional[int] = None
    construction: ConstructionDetails = Field(default_factory=ConstructionDetails)
    condition: Optional[ConditionInput] = None
    stories: PositiveInt = 1
    ceiling_height: Optional[PositiveFloat] = None
    parking: ParkingDetails = Field(default_factory=ParkingDetails)
    hvac_type: Optional[HVACTypeEnum] = None
    loading_docks: Optional[PositiveInt] = None
    floor_plan: Optional[FloorPlanEnum] = None
    frontage: Optional[PositiveFloat] = Field(default=None, description="Street frontage in feet.")
    highway_access: bool = False
    rail_access: bool = False
    traffic_count: Optional[PositiveInt] = None
    special_use: bool = False


class LegalCharacteristics(Model):
    zoning: Optional[str] = None
    property_rights: Optional[PropertyRightsEnum] = None
    easements: List[str] = Field(default_factory=list)


class Lease(Model):
    """One rent roll entry."""

    tenant: str = ""
    area: PositiveFloat = Field(..., description="Leased SF.")
    monthly_rent: Optional[float] = None
    lease_start: Optional[date] = None
    lease_end: Optional[date] = None
    credit_rating: Optional[str] = None

    @property
    def term_months(self) -> Optional[float]:
        if self.lease_start is None or self.lease_end is None:
            return None
        return ValuationCalculations.months_between(self.lease_start, self.lease_end)


class IncomeData(Model):
    """Reported income for an income-producing property."""

    potential_gross_income: Optional[PositiveFloat] = None
    vacancy_rate: Optional[FloatBetween0And1] = None
    other_income: Optional[PositiveFloat] = None
    net_operating_income: Optional[float] = None
    total_units: Optional[PositiveInt] = None
    rent_roll: List[Lease] = Field(default_factory=list)

    @property
    def annual_rent_roll(self) -> float:
        return sum(lease.monthly_rent or 0.0 for lease in self.rent_roll) * 12

    @property
    def is_income_producing(self) -> bool:
        return bool(
            (self.total_units or 0) > 0
            or (self.potential_gross_income or 0) > 0
            or self.rent_roll
        )


class OperatingExpenses(Model):
    """Annual operating expense line items; absent lines are estimated."""

    taxes: Optional[PositiveFloat] = None
    insurance: Optional[PositiveFloat] = None
    utilities: Optional[PositiveFloat] = None
    maintenance: Optional[PositiveFloat] = None
    management: Optional[PositiveFloat] = None
    reserves: Optional[PositiveFloat] = None
    other: Optional[PositiveFloat] = None

    @property
    def reported_total(self) -> float:
        return sum(v for v in self.model_dump().values() if v is not None)

    @property
    def has_line_items(self) -> bool:
        return any(v is not None for v in self.model_dump().values())


class EnvironmentalData(Model):
    has_issues: bool = False
    issues: List[str] = Field(default_factory=list)


class SubjectProperty(Model):
    """
    The property under appraisal.

    Example:
        ```python
        subject = SubjectProperty(
            property_type=PropertyTypeEnum.OFFICE,
            physical=PhysicalCharacteristics(
                gross_building_area=50_000,
                net_rentable_area=45_000,
                land_area=100_000,
                year_built=2005,
                condition="good",
            ),
            location=LocationDetails(city="Austin", state="TX"),
        )
        ```
    """

    # === CORE IDENTITY ===
    name: str = Field(default="Subject Property")
    property_type: Optional[PropertyTypeEnum] = None

    # === CHARACTERISTICS ===
    physical: PhysicalCharacteristics = Field(default_factory=PhysicalCharacteristics)
    legal: LegalCharacteristics = Field(default_factory=LegalCharacteristics)
    location: LocationDetails = Field(default_factory=LocationDetails)
    income: Optional[IncomeData] = None
    expenses: Optional[OperatingExpenses] = None
    environmental: Optional[EnvironmentalData] = None

    # === ACCESSORS ===

    @property
    def gross_building_area(self) -> Optional[float]:
        return self.physical.gross_building_area

    @property
    def net_rentable_area(self) -> Optional[float]:
        return self.physical.net_rentable_area

    @property
    def land_area(self) -> Optional[float]:
        return self.physical.land_area

    @property
    def year_built(self) -> Optional[int]:
        return self.physical.year_built

    @property
    def city(self) -> Optional[str]:
        return self.location.city

    @property
    def state(self) -> Optional[str]:
        return self.location.state

    @property
    def condition(self) -> ConditionEnum:
        return self.physical.condition or ConditionEnum.AVERAGE

    @property
    def rentable_area(self) -> Optional[float]:
        """Net rentable area, else gross building area."""
        return self.physical.net_rentable_area or self.physical.gross_building_area

    @property
    def is_income_producing(self) -> bool:
        return self.income is not None and self.income.is_income_producing

    def age(self, as_of: date) -> Optional[int]:
        """Building age in whole years at the valuation date."""
        if self.physical.year_built is None:
            return None
        return ValuationCalculations.years_between(self.physical.year_built, as_of)
