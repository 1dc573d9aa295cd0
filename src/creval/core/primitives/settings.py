# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Appraisal Settings

Every heuristic constant the engine relies on (risk thresholds, expense
ratios, cost tables, reconciliation weights) is declared here as a default on
a grouped settings model. The groups compose into `AppraisalSettings`, which
is passed into every component so tests and callers can override any figure
without touching the algorithms.

The defaults are illustrative market conventions, not audited standards.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Tuple

from pydantic import Field, model_validator

from .enums import (
    ConditionEnum,
    ConstructionTypeEnum,
    ExteriorFinishEnum,
    FinancingTypeEnum,
    HVACTypeEnum,
    MarketConditionEnum,
    PropertyTypeEnum,
    RoofTypeEnum,
    SaleConditionEnum,
)
from .model import Model
from .types import FloatBetween0And1, PositiveFloat, PositiveInt, Score0To100

OFFICE = PropertyTypeEnum.OFFICE
RETAIL = PropertyTypeEnum.RETAIL
INDUSTRIAL = PropertyTypeEnum.INDUSTRIAL
WAREHOUSE = PropertyTypeEnum.WAREHOUSE
MULTIFAMILY = PropertyTypeEnum.MULTIFAMILY
MIXED_USE = PropertyTypeEnum.MIXED_USE

# Neighborhood letter grades on a numeric scale (A+ best)
DEFAULT_NEIGHBORHOOD_GRADES: Dict[str, int] = {
    "A+": 10,
    "A": 9,
    "A-": 8,
    "B+": 7,
    "B": 6,
    "B-": 5,
    "C+": 4,
    "C": 3,
    "C-": 2,
    "D+": 1,
    "D": 0,
    "D-": -1,
}

# Tenant credit ratings on a 1-5 scale
DEFAULT_CREDIT_SCORES: Dict[str, float] = {
    "AAA": 5.0,
    "AA": 4.5,
    "A": 4.0,
    "BBB": 3.5,
    "BB": 3.0,
    "B": 2.5,
    "CCC": 2.0,
    "CC": 1.5,
    "C": 1.0,
}


class ValidationSettings(Model):
    """Plausibility bands and scoring penalties for input validation."""

    error_penalty: PositiveFloat = Field(
        default=15.0, description="Quality score points removed per fatal error."
    )
    warning_penalty: PositiveFloat = Field(
        default=3.0, description="Quality score points removed per warning."
    )
    min_year_built: PositiveInt = Field(
        default=1800, description="Construction years earlier than this are flagged."
    )
    max_building_age: PositiveInt = Field(
        default=100, description="Buildings older than this are flagged."
    )
    min_net_to_gross: FloatBetween0And1 = Field(
        default=0.5, description="NRA/GBA efficiency below which a warning is raised."
    )
    min_price_per_sf: PositiveFloat = Field(default=10.0)
    max_price_per_sf: PositiveFloat = Field(default=1000.0)
    max_sale_price: PositiveFloat = Field(
        default=100_000_000.0, description="Sale prices above this are flagged for review."
    )
    max_building_size: PositiveFloat = Field(
        default=1_000_000.0, description="Building sizes above this are flagged for review."
    )
    stale_sale_months: PositiveFloat = Field(default=12.0)
    very_stale_sale_months: PositiveFloat = Field(default=24.0)
    days_per_month: PositiveFloat = Field(
        default=30.0, description="Day count used when aging sales for validation."
    )
    min_cap_rate: FloatBetween0And1 = Field(default=0.02)
    max_cap_rate: FloatBetween0And1 = Field(default=0.20)
    min_expense_ratio: FloatBetween0And1 = Field(default=0.10)
    max_expense_ratio: FloatBetween0And1 = Field(default=0.80)
    max_single_adjustment: FloatBetween0And1 = Field(
        default=0.30, description="A single adjustment above this share of price is flagged."
    )
    max_total_adjustment: FloatBetween0And1 = Field(
        default=0.50, description="Total adjustments above this share of price are flagged."
    )
    min_comparables: PositiveInt = Field(default=3)
    max_comparables: PositiveInt = Field(default=6)
    income_mismatch_tolerance: FloatBetween0And1 = Field(
        default=0.10,
        description="Allowed gap between stated gross income and the annualized rent roll.",
    )


class ComparableSettings(Model):
    """Similarity, risk, data-quality and market-support scoring for comparables."""

    type_mismatch_penalty: PositiveFloat = Field(default=25.0)
    size_penalty_bands: List[Tuple[float, float]] = Field(
        default_factory=lambda: [(0.50, 20.0), (0.30, 15.0), (0.15, 10.0), (0.05, 5.0)],
        description="(relative size deviation above, penalty) checked in order.",
    )
    age_penalty_bands: List[Tuple[float, float]] = Field(
        default_factory=lambda: [(20.0, 15.0), (10.0, 10.0), (5.0, 5.0)],
        description="(year-built difference above, penalty) checked in order.",
    )
    city_mismatch_penalty: PositiveFloat = Field(default=10.0)
    grade_penalty_bands: List[Tuple[float, float]] = Field(
        default_factory=lambda: [(2.0, 10.0), (1.0, 5.0)],
        description="(neighborhood grade distance above, penalty) checked in order.",
    )
    recency_penalty_bands: List[Tuple[float, float]] = Field(
        default_factory=lambda: [(24.0, 10.0), (12.0, 7.0), (6.0, 3.0)],
        description="(sale age in months above, penalty) checked in order.",
    )
    cap_rate_bonus: PositiveFloat = Field(
        default=10.0, description="Bonus when the comp reports a cap rate and the subject has income."
    )
    neighborhood_grades: Dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_NEIGHBORHOOD_GRADES)
    )
    default_grade_score: int = Field(default=5)
    days_per_month: PositiveFloat = Field(default=30.0)

    # Adjustment risk
    size_high_risk_delta: PositiveFloat = Field(default=0.50)
    size_moderate_risk_delta: PositiveFloat = Field(default=0.30)
    type_mismatch_risk_factors: PositiveInt = Field(default=2)
    age_risk_delta: PositiveFloat = Field(default=15.0)
    stale_risk_months: PositiveFloat = Field(default=18.0)
    high_risk_factors: PositiveInt = Field(default=4)
    moderate_risk_factors: PositiveInt = Field(default=2)

    # Data quality
    required_field_points: PositiveFloat = Field(default=15.0)
    useful_field_points: PositiveFloat = Field(default=5.0)

    # Market support
    support_recency_points: List[Tuple[float, int]] = Field(
        default_factory=lambda: [(6.0, 3), (12.0, 2), (18.0, 1)],
        description="(sale age in months at most, points) checked in order.",
    )
    favorable_market_conditions: List[MarketConditionEnum] = Field(
        default_factory=lambda: [MarketConditionEnum.STRONG, MarketConditionEnum.BALANCED]
    )
    favorable_market_points: PositiveInt = Field(default=2)
    favorable_financing: List[FinancingTypeEnum] = Field(
        default_factory=lambda: [FinancingTypeEnum.CONVENTIONAL, FinancingTypeEnum.CASH]
    )
    favorable_financing_points: PositiveInt = Field(default=2)
    fee_simple_points: PositiveInt = Field(default=1)
    complete_data_points: PositiveInt = Field(default=2)
    strong_support_points: PositiveInt = Field(default=7)
    moderate_support_points: PositiveInt = Field(default=4)

    # Ranking
    similarity_weight: FloatBetween0And1 = Field(default=0.4)
    data_quality_weight: FloatBetween0And1 = Field(default=0.3)
    risk_weight: FloatBetween0And1 = Field(default=0.2)
    support_weight: FloatBetween0And1 = Field(default=0.1)
    risk_scores: Dict[str, float] = Field(
        default_factory=lambda: {"low": 100.0, "moderate": 70.0, "high": 40.0}
    )
    support_scores: Dict[str, float] = Field(
        default_factory=lambda: {"strong": 100.0, "moderate": 70.0, "weak": 40.0}
    )

    # Filtering
    max_sale_age_months: PositiveFloat = Field(default=36.0)
    min_size_ratio: PositiveFloat = Field(default=0.5)
    max_size_ratio: PositiveFloat = Field(default=2.0)
    min_similarity: PositiveFloat = Field(default=0.0)

    @model_validator(mode="after")
    def validate_ranking_weights(self) -> "ComparableSettings":
        """Ranking weights must sum to one."""
        total = (
            self.similarity_weight
            + self.data_quality_weight
            + self.risk_weight
            + self.support_weight
        )
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Ranking weights must sum to 1.0, got {total:.4f}")
        return self


class SalesComparisonSettings(Model):
    """Verification, adjustment and aggregation constants for sales comparison."""

    max_sale_age_months: PositiveFloat = Field(
        default=36.0, description="Sales older than this are dropped during verification."
    )
    note_sale_age_months: PositiveFloat = Field(
        default=24.0, description="Sales older than this are kept with a note."
    )
    days_per_month: PositiveFloat = Field(default=30.44)
    compatible_types: Dict[PropertyTypeEnum, List[PropertyTypeEnum]] = Field(
        default_factory=lambda: {
            OFFICE: [OFFICE, MIXED_USE],
            RETAIL: [RETAIL, MIXED_USE],
            INDUSTRIAL: [INDUSTRIAL, WAREHOUSE],
            WAREHOUSE: [INDUSTRIAL, WAREHOUSE],
            MIXED_USE: [MIXED_USE, OFFICE, RETAIL],
            MULTIFAMILY: [MULTIFAMILY, PropertyTypeEnum.APARTMENT],
            PropertyTypeEnum.APARTMENT: [MULTIFAMILY, PropertyTypeEnum.APARTMENT],
        },
        description="Subject type to comparable types accepted; unlisted types must match exactly.",
    )
    min_size_ratio: PositiveFloat = Field(default=0.33)
    max_size_ratio: PositiveFloat = Field(default=3.0)
    min_comparables: PositiveInt = Field(default=3)
    max_selected: PositiveInt = Field(default=6)
    max_net_adjustment: FloatBetween0And1 = Field(
        default=0.50, description="Comparables adjusted beyond this are excluded from value."
    )

    # Transaction adjustments
    property_rights_adjustment: FloatBetween0And1 = Field(default=0.05)
    default_market_interest_rate: FloatBetween0And1 = Field(default=0.07)
    financing_threshold_points: PositiveFloat = Field(
        default=0.5, description="Rate gap in percentage points before financing is adjusted."
    )
    financing_factor: PositiveFloat = Field(
        default=0.02, description="Adjustment per percentage point below market."
    )
    financing_cap: FloatBetween0And1 = Field(default=0.10)
    sale_condition_adjustments: Dict[SaleConditionEnum, float] = Field(
        default_factory=lambda: {
            SaleConditionEnum.DISTRESSED: 0.15,
            SaleConditionEnum.FORECLOSURE: 0.15,
            SaleConditionEnum.RELATED_PARTY: 0.05,
            SaleConditionEnum.FAMILY: 0.05,
            SaleConditionEnum.AUCTION: 0.08,
        }
    )
    default_appreciation_rate: float = Field(default=0.03)
    time_adjustment_floor: float = Field(default=-0.15)
    time_adjustment_cap: float = Field(default=0.25)

    # Property adjustments
    default_neighborhood_rating: PositiveFloat = Field(default=3.0)
    neighborhood_factor: PositiveFloat = Field(default=0.02)
    transportation_factor: PositiveFloat = Field(default=0.01)
    distance_threshold_miles: PositiveFloat = Field(default=2.0)
    distance_factor: PositiveFloat = Field(default=0.005)
    location_cap: FloatBetween0And1 = Field(default=0.20)
    large_size_ratio: PositiveFloat = Field(default=1.5)
    small_size_ratio: PositiveFloat = Field(default=0.67)
    size_factor: PositiveFloat = Field(default=0.10)
    size_cap: FloatBetween0And1 = Field(default=0.15)
    age_factor: float = Field(default=-0.005, description="Adjustment per year the comp is older.")
    age_cap: FloatBetween0And1 = Field(default=0.20)
    default_condition_score: PositiveFloat = Field(default=3.0)
    condition_factor: PositiveFloat = Field(default=0.05)
    condition_cap: FloatBetween0And1 = Field(default=0.20)
    quality_scores: Dict[ConstructionTypeEnum, float] = Field(
        default_factory=lambda: {
            ConstructionTypeEnum.STEEL_FRAME: 5.0,
            ConstructionTypeEnum.STRUCTURAL_STEEL: 5.0,
            ConstructionTypeEnum.CONCRETE: 4.0,
            ConstructionTypeEnum.REINFORCED_CONCRETE: 4.0,
            ConstructionTypeEnum.MASONRY: 3.0,
            ConstructionTypeEnum.WOOD_FRAME: 2.0,
            ConstructionTypeEnum.METAL: 2.0,
        }
    )
    default_quality_score: PositiveFloat = Field(default=3.0)
    premium_roofs: List[RoofTypeEnum] = Field(
        default_factory=lambda: [RoofTypeEnum.NEW, RoofTypeEnum.MEMBRANE]
    )
    premium_finishes: List[ExteriorFinishEnum] = Field(
        default_factory=lambda: [ExteriorFinishEnum.GLASS, ExteriorFinishEnum.STONE]
    )
    finish_bonus: PositiveFloat = Field(default=0.5)
    quality_factor: PositiveFloat = Field(default=0.03)
    quality_cap: FloatBetween0And1 = Field(default=0.15)
    hvac_scores: Dict[HVACTypeEnum, float] = Field(
        default_factory=lambda: {
            HVACTypeEnum.GEOTHERMAL: 5.0,
            HVACTypeEnum.CHILLED_WATER: 5.0,
            HVACTypeEnum.CENTRAL_AIR: 4.0,
            HVACTypeEnum.PACKAGE_UNITS: 3.0,
            HVACTypeEnum.WINDOW_UNITS: 1.0,
            HVACTypeEnum.NONE: 0.0,
        }
    )
    default_hvac_score: PositiveFloat = Field(default=2.0)
    hvac_factor: PositiveFloat = Field(default=0.02)
    parking_threshold: PositiveFloat = Field(
        default=1.0, description="Parking ratio gap (spaces per 1,000 SF) before adjusting."
    )
    parking_factor: PositiveFloat = Field(default=0.01)
    dock_factor: PositiveFloat = Field(default=0.005)
    dock_property_types: List[PropertyTypeEnum] = Field(
        default_factory=lambda: [INDUSTRIAL, WAREHOUSE]
    )
    functional_cap: FloatBetween0And1 = Field(default=0.10)
    lease_term_factor: PositiveFloat = Field(default=0.001)
    lease_term_cap: FloatBetween0And1 = Field(default=0.05)
    credit_scores: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_CREDIT_SCORES)
    )
    default_tenant_score: PositiveFloat = Field(default=3.0)
    long_lease_months: PositiveFloat = Field(default=60.0)
    short_lease_months: PositiveFloat = Field(default=12.0)
    lease_length_bonus: PositiveFloat = Field(default=0.5)
    tenant_factor: PositiveFloat = Field(default=0.02)
    tenant_cap: FloatBetween0And1 = Field(default=0.10)

    # Weighting and aggregation
    weight_location_threshold: FloatBetween0And1 = Field(default=0.10)
    weight_market_threshold: FloatBetween0And1 = Field(default=0.10)
    weight_penalty_multiplier: FloatBetween0And1 = Field(default=0.9)
    weight_floor: FloatBetween0And1 = Field(default=0.1)
    range_floor: FloatBetween0And1 = Field(default=0.05)
    range_cap: FloatBetween0And1 = Field(default=0.15)
    confidence_level: FloatBetween0And1 = Field(
        default=0.95, description="Confidence level for the adjusted $/SF interval."
    )

    # Reliability
    few_comparables_penalty: PositiveFloat = Field(default=10.0)
    very_few_comparables_penalty: PositiveFloat = Field(default=20.0)
    adjustment_penalty_bands: List[Tuple[float, float]] = Field(
        default_factory=lambda: [(0.40, 25.0), (0.30, 15.0)]
    )
    dispersion_threshold: FloatBetween0And1 = Field(default=0.15)
    dispersion_penalty: PositiveFloat = Field(default=20.0)
    staleness_penalty_bands: List[Tuple[float, float]] = Field(
        default_factory=lambda: [(24.0, 20.0), (18.0, 10.0)]
    )


class ExpenseRatioTable(Model):
    """Operating expense line items as a share of effective gross income."""

    taxes: FloatBetween0And1 = 0.025
    insurance: FloatBetween0And1 = 0.005
    utilities: FloatBetween0And1 = 0.03
    maintenance: FloatBetween0And1 = 0.02
    management: FloatBetween0And1 = 0.05
    reserves: FloatBetween0And1 = 0.02


class IncomeSettings(Model):
    """Direct capitalization and DCF assumptions."""

    default_cap_rate: FloatBetween0And1 = Field(default=0.07)
    min_cap_rate: FloatBetween0And1 = Field(default=0.04)
    max_cap_rate: FloatBetween0And1 = Field(default=0.12)
    superior_grade_adjustment: float = Field(default=-0.005)
    inferior_grade_adjustment: float = Field(default=0.005)
    strong_tenant_threshold: PositiveFloat = Field(default=4.0)
    strong_tenant_adjustment: float = Field(default=-0.0025)
    weak_tenant_threshold: PositiveFloat = Field(default=3.0)
    weak_tenant_adjustment: float = Field(default=0.005)
    old_building_age: PositiveInt = Field(default=30)
    old_building_adjustment: float = Field(default=0.0025)
    poor_condition_threshold: PositiveFloat = Field(default=3.0)
    poor_condition_adjustment: float = Field(default=0.005)
    default_vacancy_rate: FloatBetween0And1 = Field(default=0.05)
    expense_ratios: Dict[PropertyTypeEnum, ExpenseRatioTable] = Field(
        default_factory=lambda: {
            OFFICE: ExpenseRatioTable(),
            RETAIL: ExpenseRatioTable(
                taxes=0.02, insurance=0.005, utilities=0.025,
                maintenance=0.025, management=0.04, reserves=0.025,
            ),
            INDUSTRIAL: ExpenseRatioTable(
                taxes=0.02, insurance=0.004, utilities=0.015,
                maintenance=0.015, management=0.03, reserves=0.015,
            ),
            MULTIFAMILY: ExpenseRatioTable(
                taxes=0.025, insurance=0.008, utilities=0.035,
                maintenance=0.03, management=0.06, reserves=0.03,
            ),
        },
        description="Fallback expense ratios by type; types not listed use Office.",
    )
    projection_years: PositiveInt = Field(default=10)
    income_growth: float = Field(default=0.03)
    expense_growth: float = Field(default=0.03)
    terminal_growth: float = Field(default=0.02)
    terminal_cap_spread: FloatBetween0And1 = Field(default=0.005)
    discount_rate_spread: FloatBetween0And1 = Field(
        default=0.02, description="Added to the cap rate when no market discount rate is known."
    )
    direct_cap_weight: FloatBetween0And1 = Field(
        default=0.6, description="Share of the income value taken from direct capitalization."
    )
    no_rent_roll_penalty: PositiveFloat = Field(default=20.0)
    assumed_expenses_penalty: PositiveFloat = Field(default=15.0)
    no_market_cap_penalty: PositiveFloat = Field(default=15.0)
    assumed_vacancy_penalty: PositiveFloat = Field(default=5.0)


class ShortLivedComponent(Model):
    """Building component that wears out before the structure."""

    name: str
    life: PositiveFloat = Field(..., description="Typical life in years.")
    cost_share: FloatBetween0And1 = Field(..., description="Share of building cost.")


class CurableItemRule(Model):
    """Repair identified when the building is in fair or poor condition."""

    name: str
    cost_per_sf: PositiveFloat
    min_age: float = Field(default=float("inf"), description="Required when age exceeds this.")
    when_poor: bool = Field(default=False, description="Always required in poor condition.")


class CostSettings(Model):
    """Land, replacement cost and depreciation tables for the cost approach."""

    base_costs: Dict[PropertyTypeEnum, float] = Field(
        default_factory=lambda: {
            OFFICE: 120.0,
            RETAIL: 100.0,
            INDUSTRIAL: 60.0,
            WAREHOUSE: 45.0,
            MULTIFAMILY: 110.0,
        }
    )
    default_base_cost: PositiveFloat = Field(default=100.0)
    construction_multipliers: Dict[ConstructionTypeEnum, float] = Field(
        default_factory=lambda: {
            ConstructionTypeEnum.STEEL_FRAME: 1.10,
            ConstructionTypeEnum.STRUCTURAL_STEEL: 1.10,
            ConstructionTypeEnum.CONCRETE: 1.05,
            ConstructionTypeEnum.REINFORCED_CONCRETE: 1.05,
            ConstructionTypeEnum.MASONRY: 1.00,
            ConstructionTypeEnum.WOOD_FRAME: 0.90,
            ConstructionTypeEnum.METAL: 0.85,
        }
    )
    finish_multipliers: Dict[ExteriorFinishEnum, float] = Field(
        default_factory=lambda: {
            ExteriorFinishEnum.GLASS: 1.10,
            ExteriorFinishEnum.STONE: 1.10,
            ExteriorFinishEnum.METAL: 0.90,
            ExteriorFinishEnum.VINYL: 0.90,
        }
    )
    size_bands: List[Tuple[float, float]] = Field(
        default_factory=lambda: [(100_000.0, 0.95), (50_000.0, 0.97), (20_000.0, 0.99)],
        description="(gross area above, multiplier) checked in order.",
    )
    small_building_area: PositiveFloat = Field(default=5_000.0)
    small_building_multiplier: PositiveFloat = Field(default=1.05)
    parking_cost_per_space: PositiveFloat = Field(default=3_500.0)
    site_prep_per_sf: PositiveFloat = Field(default=2.0)
    utilities_per_sf: PositiveFloat = Field(default=1.5)
    min_utilities_cost: PositiveFloat = Field(default=25_000.0)
    landscaping_per_sf: PositiveFloat = Field(default=1.2)
    access_per_sf: PositiveFloat = Field(default=0.8)
    soft_cost_rate: FloatBetween0And1 = Field(default=0.15)
    developer_profit_rate: FloatBetween0And1 = Field(default=0.20)

    # Land
    min_land_sales: PositiveInt = Field(default=2)
    land_size_band: PositiveFloat = Field(
        default=2.0, description="Land sales within this relative size difference qualify."
    )
    land_allocation_ratio: FloatBetween0And1 = Field(
        default=0.25, description="Land share of an improved sale when no split is reported."
    )
    zoning_land_values: List[Tuple[str, float]] = Field(
        default_factory=lambda: [
            ("commercial", 25.0),
            ("office", 30.0),
            ("retail", 35.0),
            ("industrial", 15.0),
            ("mixed use", 28.0),
            ("warehouse", 12.0),
            ("flex", 20.0),
        ],
        description="(zoning keyword, $/SF) matched in order.",
    )
    default_land_value: PositiveFloat = Field(default=20.0)
    neighborhood_land_multipliers: List[Tuple[str, float]] = Field(
        default_factory=lambda: [("a", 1.3), ("b", 1.0), ("c", 0.8), ("d", 0.6)]
    )

    # Physical deterioration
    effective_age_multipliers: Dict[ConditionEnum, float] = Field(
        default_factory=lambda: {
            ConditionEnum.EXCELLENT: 0.6,
            ConditionEnum.GOOD: 0.8,
            ConditionEnum.AVERAGE: 1.0,
            ConditionEnum.FAIR: 1.3,
            ConditionEnum.POOR: 1.6,
        }
    )
    economic_life: Dict[ConstructionTypeEnum, float] = Field(
        default_factory=lambda: {
            ConstructionTypeEnum.WOOD_FRAME: 50.0,
            ConstructionTypeEnum.STEEL_FRAME: 60.0,
            ConstructionTypeEnum.CONCRETE: 75.0,
            ConstructionTypeEnum.MASONRY: 70.0,
            ConstructionTypeEnum.REINFORCED_CONCRETE: 80.0,
            ConstructionTypeEnum.STRUCTURAL_STEEL: 65.0,
        }
    )
    default_economic_life: PositiveFloat = Field(default=55.0)
    economic_life_factors: Dict[PropertyTypeEnum, float] = Field(
        default_factory=lambda: {
            OFFICE: 1.0,
            RETAIL: 0.9,
            WAREHOUSE: 1.1,
            INDUSTRIAL: 1.2,
            PropertyTypeEnum.HOTEL: 0.8,
            PropertyTypeEnum.RESTAURANT: 0.7,
            PropertyTypeEnum.MEDICAL: 0.9,
        }
    )
    curable_items: List[CurableItemRule] = Field(
        default_factory=lambda: [
            CurableItemRule(name="HVAC system repairs", cost_per_sf=5.0, min_age=15),
            CurableItemRule(name="Roof repairs", cost_per_sf=12.0, min_age=10, when_poor=True),
            CurableItemRule(name="Flooring replacement", cost_per_sf=8.0, when_poor=True),
            CurableItemRule(name="Electrical updates", cost_per_sf=3.0, min_age=20),
            CurableItemRule(name="Plumbing repairs", cost_per_sf=4.0, min_age=25, when_poor=True),
        ]
    )
    short_lived_components: List[ShortLivedComponent] = Field(
        default_factory=lambda: [
            ShortLivedComponent(name="Paint", life=7, cost_share=0.03),
            ShortLivedComponent(name="Carpet", life=10, cost_share=0.05),
            ShortLivedComponent(name="HVAC", life=20, cost_share=0.15),
            ShortLivedComponent(name="Plumbing fixtures", life=25, cost_share=0.08),
            ShortLivedComponent(name="Electrical", life=30, cost_share=0.10),
        ]
    )
    long_lived_share: FloatBetween0And1 = Field(default=0.60)

    # Functional and external obsolescence
    low_ceiling_height: PositiveFloat = Field(default=9.0)
    low_ceiling_cost: PositiveFloat = Field(default=5_000.0)
    hvac_replacement_per_sf: PositiveFloat = Field(default=8.0)
    floor_plan_rent_loss_per_sf: PositiveFloat = Field(default=2.0)
    floor_plan_cap_rate: FloatBetween0And1 = Field(default=0.07)
    declining_market_per_sf: PositiveFloat = Field(default=5.0)
    declining_neighborhood_per_sf: PositiveFloat = Field(default=8.0)
    environmental_per_sf: PositiveFloat = Field(default=3.0)

    # Applicability by building age: (age below, label, confidence)
    applicability_bands: List[Tuple[float, str, float]] = Field(
        default_factory=lambda: [
            (5.0, "high", 85.0),
            (15.0, "medium", 70.0),
            (30.0, "low", 55.0),
        ]
    )
    applicability_floor: Tuple[str, float] = Field(default=("very_low", 40.0))


class ReconciliationSettings(Model):
    """Weighting, rounding and dispersion rules for reconciliation."""

    base_weights: Dict[PropertyTypeEnum, Tuple[float, float, float]] = Field(
        default_factory=lambda: {
            OFFICE: (0.5, 0.4, 0.1),
            RETAIL: (0.4, 0.5, 0.1),
            INDUSTRIAL: (0.6, 0.3, 0.1),
            WAREHOUSE: (0.6, 0.3, 0.1),
            MULTIFAMILY: (0.3, 0.6, 0.1),
            MIXED_USE: (0.4, 0.5, 0.1),
        },
        description="(sales, income, cost) weights before reliability scaling.",
    )
    fallback_weights: Tuple[float, float, float] = Field(default=(0.5, 0.4, 0.1))
    preferred_approach_boost: PositiveFloat = Field(default=1.5)
    income_property_types: List[PropertyTypeEnum] = Field(
        default_factory=lambda: [OFFICE, RETAIL, INDUSTRIAL, MULTIFAMILY]
    )
    rounding_tiers: List[Tuple[float, float]] = Field(
        default_factory=lambda: [
            (10_000_000.0, 100_000.0),
            (1_000_000.0, 10_000.0),
            (100_000.0, 1_000.0),
            (10_000.0, 500.0),
        ],
        description="(value at least, denomination) checked in order.",
    )
    default_denomination: PositiveFloat = Field(default=100.0)
    acceptable_variance_range: FloatBetween0And1 = Field(default=0.25)
    variance_labels: List[Tuple[float, str]] = Field(
        default_factory=lambda: [(0.10, "excellent"), (0.20, "good"), (0.30, "acceptable")]
    )
    base_range: FloatBetween0And1 = Field(default=0.05)
    range_step: FloatBetween0And1 = Field(default=0.05)
    max_range: FloatBetween0And1 = Field(default=0.20)
    range_variance_thresholds: List[float] = Field(default_factory=lambda: [0.20, 0.30])
    range_reliability_thresholds: List[float] = Field(default_factory=lambda: [70.0, 50.0])
    confidence_discounts: List[Tuple[float, float]] = Field(
        default_factory=lambda: [(0.30, 0.8), (0.20, 0.9)],
        description="(variance range above, multiplier) checked in order.",
    )
    # Reliability scoring, each approach starting from its base score
    low_reliability_score: PositiveFloat = Field(
        default=60.0, description="Scores below this are rated low reliability."
    )
    sales_min_comparables: PositiveInt = Field(default=3)
    few_comparables_penalty: PositiveFloat = Field(default=20.0)
    high_adjustment_threshold: FloatBetween0And1 = Field(
        default=0.30, description="Average net adjustment above which sales are penalized."
    )
    high_adjustment_penalty: PositiveFloat = Field(default=25.0)
    sales_stale_months: PositiveFloat = Field(default=18.0)
    stale_sales_penalty: PositiveFloat = Field(default=15.0)
    no_rent_roll_penalty: PositiveFloat = Field(default=30.0)
    no_cap_rate_support_penalty: PositiveFloat = Field(default=20.0)
    non_income_type_penalty: PositiveFloat = Field(default=25.0)
    cost_base_score: Score0To100 = Field(default=70.0)
    cost_new_building_age: PositiveFloat = Field(default=5.0)
    cost_new_building_score: Score0To100 = Field(default=90.0)
    cost_old_building_age: PositiveFloat = Field(default=20.0)
    cost_old_building_score: Score0To100 = Field(default=50.0)
    special_use_bonus: PositiveFloat = Field(default=15.0)


class UseProfile(Model):
    """Development and market assumptions for one candidate use."""

    min_land_area: PositiveFloat = 5_000.0
    min_frontage: PositiveFloat = 50.0
    requires_highway_access: bool = False
    development_cost_per_sf: PositiveFloat = 120.0
    rent_per_sf: PositiveFloat = Field(default=20.0, description="Annual rent per SF.")
    market_stability: FloatBetween0And1 = 0.7


class Modification(Model):
    """Candidate modification of the existing improvements."""

    name: str
    description: str = ""
    applies_to: List[PropertyTypeEnum] = Field(
        default_factory=list, description="Current uses the modification applies to; empty means all."
    )
    target_use: Optional[PropertyTypeEnum] = None
    cost_per_sf: PositiveFloat
    income_increase: float
    feasibility: FloatBetween0And1


class HBUSettings(Model):
    """Highest and best use funnel assumptions."""

    zoning_uses: List[Tuple[List[str], List[PropertyTypeEnum]]] = Field(
        default_factory=lambda: [
            (["commercial", "c-", "retail"], [OFFICE, RETAIL, PropertyTypeEnum.RESTAURANT, MIXED_USE]),
            (["industrial", "i-", "manufacturing"], [INDUSTRIAL, WAREHOUSE]),
            (["office", "professional"], [OFFICE, PropertyTypeEnum.MEDICAL]),
            (["mixed", "mu-"], [MIXED_USE, OFFICE, RETAIL, MULTIFAMILY]),
            (["residential", "r-"], [MULTIFAMILY]),
        ],
        description="(zoning keywords, permitted uses) matched against the lower-cased zoning.",
    )
    use_profiles: Dict[PropertyTypeEnum, UseProfile] = Field(
        default_factory=lambda: {
            OFFICE: UseProfile(min_land_area=5_000, min_frontage=50, development_cost_per_sf=150, rent_per_sf=25, market_stability=0.8),
            RETAIL: UseProfile(min_land_area=3_000, min_frontage=100, development_cost_per_sf=120, rent_per_sf=20, market_stability=0.6),
            INDUSTRIAL: UseProfile(min_land_area=20_000, min_frontage=150, requires_highway_access=True, development_cost_per_sf=80, rent_per_sf=8, market_stability=0.9),
            WAREHOUSE: UseProfile(min_land_area=15_000, min_frontage=100, requires_highway_access=True, development_cost_per_sf=60, rent_per_sf=6, market_stability=0.85),
            MULTIFAMILY: UseProfile(min_land_area=8_000, min_frontage=80, development_cost_per_sf=130, rent_per_sf=14.4, market_stability=0.9),
            MIXED_USE: UseProfile(min_land_area=6_000, min_frontage=75, development_cost_per_sf=140, rent_per_sf=22, market_stability=0.7),
        }
    )
    default_frontage: PositiveFloat = Field(default=100.0)
    low_traffic_count: PositiveFloat = Field(default=10_000.0)
    low_traffic_factor: FloatBetween0And1 = Field(default=0.8)
    no_rail_factor: FloatBetween0And1 = Field(default=0.9)
    tight_site_ratio: PositiveFloat = Field(default=1.5)
    tight_site_factor: FloatBetween0And1 = Field(default=0.9)
    min_suitability: FloatBetween0And1 = Field(default=0.5)
    zoning_land_values: List[Tuple[str, float]] = Field(
        default_factory=lambda: [
            ("commercial", 25.0),
            ("industrial", 8.0),
            ("office", 30.0),
            ("mixed", 35.0),
            ("residential", 15.0),
        ]
    )
    default_land_value: PositiveFloat = Field(default=20.0)
    site_coverage: FloatBetween0And1 = Field(default=0.6)
    development_soft_cost_factor: PositiveFloat = Field(default=1.35)
    vacancy_rate: FloatBetween0And1 = Field(default=0.05)
    expense_ratio: FloatBetween0And1 = Field(default=0.35)
    default_cap_rate: FloatBetween0And1 = Field(default=0.08)
    min_roi: float = Field(default=0.15)
    value_weight: FloatBetween0And1 = Field(default=0.7)
    stability_weight: FloatBetween0And1 = Field(default=0.3)
    current_rents: Dict[PropertyTypeEnum, float] = Field(
        default_factory=lambda: {
            OFFICE: 25.0,
            RETAIL: 20.0,
            WAREHOUSE: 8.0,
            INDUSTRIAL: 10.0,
            PropertyTypeEnum.FLEX: 15.0,
            MIXED_USE: 22.0,
        },
        description="Annual market rent per SF used when the subject reports no NOI.",
    )
    default_rent: PositiveFloat = Field(default=20.0)
    capital_by_age: List[Tuple[float, float]] = Field(
        default_factory=lambda: [(20.0, 15.0), (10.0, 8.0), (5.0, 3.0)]
    )
    capital_by_condition: Dict[ConditionEnum, float] = Field(
        default_factory=lambda: {
            ConditionEnum.POOR: 25.0,
            ConditionEnum.FAIR: 12.0,
            ConditionEnum.AVERAGE: 5.0,
            ConditionEnum.GOOD: 2.0,
            ConditionEnum.EXCELLENT: 0.0,
        }
    )
    current_use_suitability: FloatBetween0And1 = Field(
        default=0.7, description="Starting suitability of the existing use before adjustments."
    )
    suitability_by_condition: Dict[ConditionEnum, float] = Field(
        default_factory=lambda: {
            ConditionEnum.EXCELLENT: 0.15,
            ConditionEnum.GOOD: 0.10,
            ConditionEnum.AVERAGE: 0.0,
            ConditionEnum.FAIR: -0.10,
            ConditionEnum.POOR: -0.20,
        }
    )
    suitability_age_bands: Tuple[float, float, float, float] = Field(
        default=(10.0, 0.1, 30.0, -0.2),
        description="(new below, bonus, old above, penalty) in years.",
    )
    suitability_grade_step: FloatBetween0And1 = Field(default=0.1)
    modifications: List[Modification] = Field(
        default_factory=lambda: [
            Modification(name="Mixed Use Conversion", description="Convert part of the space to retail or restaurant use", applies_to=[OFFICE], target_use=MIXED_USE, cost_per_sf=25, income_increase=0.15, feasibility=0.7),
            Modification(name="Medical Office Conversion", description="Convert to medical office with specialized HVAC and layouts", applies_to=[OFFICE], target_use=PropertyTypeEnum.MEDICAL, cost_per_sf=35, income_increase=0.25, feasibility=0.6),
            Modification(name="Restaurant Conversion", description="Add kitchen facilities for restaurant use", applies_to=[RETAIL], target_use=PropertyTypeEnum.RESTAURANT, cost_per_sf=45, income_increase=0.30, feasibility=0.5),
            Modification(name="Flex Space Conversion", description="Add office areas and improve finishes for flex use", applies_to=[WAREHOUSE, INDUSTRIAL], target_use=PropertyTypeEnum.FLEX, cost_per_sf=20, income_increase=0.40, feasibility=0.8),
            Modification(name="Energy Efficiency Upgrades", description="HVAC, lighting and insulation improvements", cost_per_sf=15, income_increase=0.08, feasibility=0.9),
            Modification(name="Technology Infrastructure", description="Electrical, telecommunications and smart building systems", cost_per_sf=12, income_increase=0.06, feasibility=0.85),
        ]
    )
    modification_condition_multipliers: Dict[ConditionEnum, float] = Field(
        default_factory=lambda: {
            ConditionEnum.POOR: 1.4,
            ConditionEnum.FAIR: 1.2,
            ConditionEnum.AVERAGE: 1.0,
            ConditionEnum.GOOD: 0.9,
            ConditionEnum.EXCELLENT: 0.8,
        }
    )
    modification_age_multipliers: List[Tuple[float, float]] = Field(
        default_factory=lambda: [(30.0, 1.3), (20.0, 1.15), (10.0, 1.05)]
    )
    demolition_costs: Dict[ConstructionTypeEnum, float] = Field(
        default_factory=lambda: {
            ConstructionTypeEnum.WOOD_FRAME: 6.0,
            ConstructionTypeEnum.STEEL_FRAME: 10.0,
            ConstructionTypeEnum.STRUCTURAL_STEEL: 10.0,
            ConstructionTypeEnum.CONCRETE: 12.0,
            ConstructionTypeEnum.MASONRY: 12.0,
            ConstructionTypeEnum.REINFORCED_CONCRETE: 15.0,
        }
    )
    default_demolition_cost: PositiveFloat = Field(default=8.0)
    story_cost_step: PositiveFloat = Field(default=0.15)
    demolition_permit_factor: PositiveFloat = Field(default=1.25)
    redevelopment_margin: PositiveFloat = Field(
        default=1.2, description="Vacant value must exceed improved value by this multiple."
    )


class EngineSettings(Model):
    """Orchestration switches."""

    cost_age_threshold: PositiveFloat = Field(
        default=10.0, description="Cost approach runs automatically for buildings newer than this."
    )
    parallel_approaches: bool = Field(
        default=False, description="Evaluate the three approaches on a thread pool."
    )
    max_workers: PositiveInt = Field(default=3)

    # Quality score points, awarded per rule and capped at 100
    quality_min_comparables: PositiveInt = Field(default=5)
    quality_comparables_points: PositiveFloat = Field(default=20.0)
    quality_income_points: PositiveFloat = Field(
        default=25.0, description="Awarded when the income approach has high data quality."
    )
    quality_cost_points: PositiveFloat = Field(
        default=15.0, description="Awarded when the cost approach is highly applicable."
    )
    quality_variance_threshold: FloatBetween0And1 = Field(default=0.10)
    quality_variance_points: PositiveFloat = Field(default=25.0)
    quality_market_weight_threshold: FloatBetween0And1 = Field(
        default=0.80, description="Combined sales and income weight for the market points."
    )
    quality_market_weight_points: PositiveFloat = Field(default=15.0)


class AppraisalSettings(Model):
    """
    Configuration for a full appraisal run.

    Groups every tunable constant by component. Components receive the whole
    settings object and read their own group, so a single override reaches
    every place a constant is used.

    Example:
        ```python
        settings = AppraisalSettings(as_of_date=date(2025, 6, 30))
        settings = settings.model_copy(
            update={"income": IncomeSettings(default_cap_rate=0.065)}
        )
        ```
    """

    as_of_date: date = Field(
        default_factory=date.today,
        description="Effective date of value; all ages and sale recency are measured to it.",
    )
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    comparables: ComparableSettings = Field(default_factory=ComparableSettings)
    sales: SalesComparisonSettings = Field(default_factory=SalesComparisonSettings)
    income: IncomeSettings = Field(default_factory=IncomeSettings)
    cost: CostSettings = Field(default_factory=CostSettings)
    reconciliation: ReconciliationSettings = Field(default_factory=ReconciliationSettings)
    hbu: HBUSettings = Field(default_factory=HBUSettings)
    engine: EngineSettings = Field(default_factory=EngineSettings)
