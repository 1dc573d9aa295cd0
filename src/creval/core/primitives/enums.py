# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum


class PropertyTypeEnum(str, Enum):
    """
    Commercial property types recognized by the valuation approaches.

    Values match the labels used in market data feeds and comparable records,
    so `PropertyTypeEnum("Mixed Use")` parses directly from upstream input.
    """

    OFFICE = "Office"
    RETAIL = "Retail"
    INDUSTRIAL = "Industrial"
    WAREHOUSE = "Warehouse"
    MULTIFAMILY = "Multifamily"
    APARTMENT = "Apartment"
    MIXED_USE = "Mixed Use"
    FLEX = "Flex"
    HOTEL = "Hotel"
    RESTAURANT = "Restaurant"
    MEDICAL = "Medical"
    SPECIAL_PURPOSE = "Special Purpose"


class ConditionEnum(str, Enum):
    """Overall physical condition on the conventional five-point scale."""

    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    FAIR = "fair"
    POOR = "poor"

    @property
    def score(self) -> int:
        """Condition rating on a 1 (poor) to 5 (excellent) scale."""
        return _CONDITION_SCORES[self]

    @classmethod
    def from_score(cls, score: float) -> "ConditionEnum":
        """Map a 1-5 rating onto the nearest condition label."""
        rounded = int(max(1, min(5, round(score))))
        for condition, value in _CONDITION_SCORES.items():
            if value == rounded:
                return condition
        raise ValueError(f"Invalid condition score: {score}")


_CONDITION_SCORES = {
    ConditionEnum.EXCELLENT: 5,
    ConditionEnum.GOOD: 4,
    ConditionEnum.AVERAGE: 3,
    ConditionEnum.FAIR: 2,
    ConditionEnum.POOR: 1,
}


class ConstructionTypeEnum(str, Enum):
    """Structural construction class."""

    STEEL_FRAME = "steel_frame"
    STRUCTURAL_STEEL = "structural_steel"
    CONCRETE = "concrete"
    REINFORCED_CONCRETE = "reinforced_concrete"
    MASONRY = "masonry"
    WOOD_FRAME = "wood_frame"
    METAL = "metal"


class RoofTypeEnum(str, Enum):
    NEW = "new"
    MEMBRANE = "membrane"
    BUILT_UP = "built_up"
    SHINGLE = "shingle"
    METAL = "metal"


class ExteriorFinishEnum(str, Enum):
    GLASS = "glass"
    STONE = "stone"
    BRICK = "brick"
    STUCCO = "stucco"
    METAL = "metal"
    VINYL = "vinyl"


class HVACTypeEnum(str, Enum):
    """HVAC system class, ordered loosely by functional utility."""

    GEOTHERMAL = "geothermal"
    CHILLED_WATER = "chilled_water"
    CENTRAL_AIR = "central_air"
    PACKAGE_UNITS = "package_units"
    WINDOW_UNITS = "window_units"
    NONE = "none"


class FloorPlanEnum(str, Enum):
    OPEN = "open"
    CELLULAR = "cellular"


class PropertyRightsEnum(str, Enum):
    """Interest conveyed in a transaction."""

    FEE_SIMPLE = "fee_simple"
    LEASED_FEE = "leased_fee"
    LEASEHOLD = "leasehold"


class SaleConditionEnum(str, Enum):
    """Conditions of sale; anything other than arms-length warrants adjustment."""

    ARMS_LENGTH = "arms_length"
    DISTRESSED = "distressed"
    FORECLOSURE = "foreclosure"
    RELATED_PARTY = "related_party"
    FAMILY = "family"
    AUCTION = "auction"


class FinancingTypeEnum(str, Enum):
    CASH = "cash"
    CASH_EQUIVALENT = "cash_equivalent"
    CONVENTIONAL = "conventional"
    SELLER = "seller"
    ASSUMED = "assumed"


class MarketConditionEnum(str, Enum):
    """Prevailing market conditions at the time of a sale."""

    STRONG = "strong"
    BALANCED = "balanced"
    WEAK = "weak"
    DECLINING = "declining"


class ConfidenceLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AdjustmentKind(str, Enum):
    """How an adjustment is applied to a sale price."""

    PERCENT = "percent"  # Compounds multiplicatively
    DOLLAR = "dollar"  # Sums additively


class AdjustmentRisk(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class MarketSupport(str, Enum):
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"


class ApproachKind(str, Enum):
    """The three independent valuation approaches."""

    SALES = "sales"
    INCOME = "income"
    COST = "cost"


class CostApplicability(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    VERY_LOW = "very_low"


class VarianceRating(str, Enum):
    """Qualitative label for the spread between approach indications."""

    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"


class Severity(str, Enum):
    """Severity attached to a validation issue."""

    ERROR = "error"
    WARNING = "warning"
    HIGH = "high"  # High-weight warning


class AssumptionSource(str, Enum):
    """Where a resolved input value came from."""

    SUPPLIED = "supplied"
    MARKET_DATA = "market_data"
    HIGHEST_BEST_USE = "highest_best_use"
    DEFAULT = "default"


class ImprovedUseEnum(str, Enum):
    """Alternatives considered for the property as improved."""

    CONTINUE = "continue_current_use"
    MODIFY = "modify"
    REDEVELOP = "demolish_and_redevelop"
