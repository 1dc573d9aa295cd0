# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Test utilities and fixtures for Creval testing.

Builders create valid records with sensible defaults so each test only
spells out the fields it exercises. Every fixture values the property as of
2025-06-30 so sale ages and building ages are stable.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

import pytest

from creval.core.base import (
    Comparable,
    ConstructionDetails,
    FinancingTerms,
    IncomeData,
    Lease,
    LegalCharacteristics,
    LocationDetails,
    MarketData,
    OperatingExpenses,
    ParkingDetails,
    PhysicalCharacteristics,
    SubjectProperty,
)
from creval.core.primitives import (
    AppraisalSettings,
    ApproachKind,
    ConditionEnum,
    ConstructionTypeEnum,
    CostApplicability,
    FinancingTypeEnum,
    HVACTypeEnum,
    MarketConditionEnum,
    PropertyRightsEnum,
    PropertyTypeEnum,
)
from creval.valuation import (
    AdjustedComparable,
    CostApproachResult,
    IncomeApproachResult,
    SalesComparisonResult,
)
from creval.valuation.direct_cap import CapRateSelection, DirectCapitalization

AS_OF = date(2025, 6, 30)


# Subject Utilities
def create_office_subject(
    year_built: int = 2015,
    gross_building_area: float = 50_000.0,
    net_rentable_area: Optional[float] = 45_000.0,
    land_area: float = 100_000.0,
    condition: ConditionEnum = ConditionEnum.GOOD,
    with_income: bool = True,
    special_use: bool = False,
    **overrides,
) -> SubjectProperty:
    """
    Create a stabilized multi-tenant office building for testing.

    The rent roll annualizes to exactly the stated gross income and the
    expense lines run 23% of gross, so validation raises no issues.

    Example:
        >>> subject = create_office_subject(year_built=2023)
        >>> subject.age(AS_OF)
        2
    """
    fields = dict(
        name="Congress Avenue Office",
        property_type=PropertyTypeEnum.OFFICE,
        physical=PhysicalCharacteristics(
            gross_building_area=gross_building_area,
            net_rentable_area=net_rentable_area,
            land_area=land_area,
            year_built=year_built,
            condition=condition,
            stories=3,
            construction=ConstructionDetails(construction_type=ConstructionTypeEnum.STEEL_FRAME),
            hvac_type=HVACTypeEnum.CENTRAL_AIR,
            parking=ParkingDetails(spaces=150, ratio=3.0),
            special_use=special_use,
        ),
        legal=LegalCharacteristics(
            zoning="Commercial C-2", property_rights=PropertyRightsEnum.FEE_SIMPLE
        ),
        location=LocationDetails(
            address="100 Congress Ave",
            city="Austin",
            state="TX",
            neighborhood="Downtown",
            neighborhood_grade="B+",
        ),
    )
    if with_income:
        fields["income"] = IncomeData(
            potential_gross_income=1_350_000.0,
            vacancy_rate=0.05,
            other_income=20_000.0,
            rent_roll=[
                Lease(
                    tenant="Law Firm",
                    area=20_000,
                    monthly_rent=50_000,
                    lease_start=date(2020, 1, 1),
                    lease_end=date(2030, 12, 31),
                    credit_rating="A",
                ),
                Lease(
                    tenant="Engineering Co",
                    area=15_000,
                    monthly_rent=37_500,
                    lease_start=date(2022, 1, 1),
                    lease_end=date(2027, 12, 31),
                    credit_rating="BBB",
                ),
                Lease(
                    tenant="Startup",
                    area=10_000,
                    monthly_rent=25_000,
                    lease_start=date(2023, 6, 1),
                    lease_end=date(2026, 5, 31),
                    credit_rating="B",
                ),
            ],
        )
        fields["expenses"] = OperatingExpenses(
            taxes=120_000,
            insurance=25_000,
            utilities=60_000,
            maintenance=50_000,
            management=40_000,
            reserves=15_000,
        )
    fields.update(overrides)
    return SubjectProperty(**fields)


# Comparable Utilities
def create_comparable(
    name: str,
    sale_price: float,
    building_size: float,
    sale_date: date,
    year_built: int = 2015,
    condition: ConditionEnum = ConditionEnum.GOOD,
    property_type: PropertyTypeEnum = PropertyTypeEnum.OFFICE,
    **overrides,
) -> Comparable:
    """Create an arms-length, cash, fee simple office sale in Austin."""
    fields = dict(
        comparable_id=name.lower().replace(" ", "-"),
        property_name=name,
        address=f"{name}, Austin TX",
        property_type=property_type,
        sale_price=sale_price,
        sale_date=sale_date,
        building_size=building_size,
        land_area=90_000,
        year_built=year_built,
        condition=condition,
        cap_rate=0.068,
        property_rights=PropertyRightsEnum.FEE_SIMPLE,
        financing=FinancingTerms(financing_type=FinancingTypeEnum.CASH),
        market_conditions=MarketConditionEnum.BALANCED,
        construction=ConstructionDetails(construction_type=ConstructionTypeEnum.STEEL_FRAME),
        location=LocationDetails(city="Austin", state="TX"),
        hvac_type=HVACTypeEnum.CENTRAL_AIR,
        parking_ratio=3.0,
    )
    fields.update(overrides)
    return Comparable(**fields)


def create_office_comparables() -> List[Comparable]:
    """Five recent office sales between $250 and $265 per SF."""
    return [
        create_comparable("Congress Plaza", 12_480_000, 48_000, date(2025, 3, 15), year_built=2013),
        create_comparable("Lamar Tower", 13_000_000, 52_000, date(2024, 12, 1), year_built=2016),
        create_comparable(
            "Riverside Center",
            11_660_000,
            44_000,
            date(2025, 1, 20),
            year_built=2012,
            condition=ConditionEnum.AVERAGE,
        ),
        create_comparable("Domain Office", 13_250_000, 50_000, date(2024, 10, 10), year_built=2017),
        create_comparable("Mopac Place", 11_730_000, 46_000, date(2025, 5, 1), year_built=2014),
    ]


def create_market_data(**overrides) -> MarketData:
    fields = dict(
        cap_rates={PropertyTypeEnum.OFFICE: 0.07},
        vacancy_rates={PropertyTypeEnum.OFFICE: 0.08},
        neighborhoods={"Downtown": 4.5},
    )
    fields.update(overrides)
    return MarketData(**fields)


# Approach Result Utilities
#
# Reconciliation reads only a handful of fields from each approach result.
# These builders skip validation of the detail it never touches.
def make_sales_result(
    value: float,
    confidence: float = 90.0,
    net_adjustments: Optional[List[float]] = None,
    sale_age_months: float = 3.0,
) -> SalesComparisonResult:
    net_adjustments = net_adjustments if net_adjustments is not None else [0.05] * 5
    comparables = [
        AdjustedComparable.model_construct(
            total_net_adjustment=net, sale_age_months=sale_age_months, adjustment_valid=True
        )
        for net in net_adjustments
    ]
    return SalesComparisonResult.model_construct(
        value_indication=value, confidence=confidence, comparables=comparables
    )


def make_income_result(
    value: float,
    confidence: float = 90.0,
    has_rent_roll: bool = True,
    market_cap_support: bool = True,
) -> IncomeApproachResult:
    direct_cap = DirectCapitalization.model_construct(
        cap_rate=CapRateSelection(base=0.07, selected=0.07, market_support=market_cap_support)
    )
    return IncomeApproachResult.model_construct(
        value_indication=value,
        confidence=confidence,
        direct_capitalization=direct_cap,
        has_rent_roll=has_rent_roll,
    )


def make_cost_result(
    value: float,
    building_age: int = 10,
    applicability: CostApplicability = CostApplicability.MEDIUM,
    confidence: float = 70.0,
) -> CostApproachResult:
    return CostApproachResult.model_construct(
        value_indication=value,
        confidence=confidence,
        applicability=applicability,
        building_age=building_age,
    )


def weights_total(weights) -> float:
    return sum(weights.get(kind) for kind in ApproachKind)


# Pytest Fixtures
@pytest.fixture
def settings():
    """Default settings valued as of 2025-06-30."""
    return AppraisalSettings(as_of_date=AS_OF)


@pytest.fixture
def subject():
    """Ten-year-old, 50,000 SF office building with a full rent roll."""
    return create_office_subject()


@pytest.fixture
def comparables():
    return create_office_comparables()


@pytest.fixture
def market_data():
    return create_market_data()
