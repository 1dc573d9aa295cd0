# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Cost Approach

Value = Land Value + Replacement Cost New - Accrued Depreciation

Land is valued from comparable land sales when at least two match the
subject's zoning and size, else by extraction from improved sales, else
from a zoning and neighborhood table. Replacement cost builds up from a
base cost per SF through quality, size and regional multipliers, adds site
improvements, then soft costs and developer profit.

The approach is most reliable for new buildings; applicability and
confidence fall with building age.
"""

from __future__ import annotations

import logging
from typing import ClassVar, List, Literal, Optional, Tuple

from pydantic import Field

from ..core.base import ImprovedSale, LandSale, MarketData, SubjectProperty
from ..core.calculations import ValuationCalculations
from ..core.errors import InsufficientDataError
from ..core.primitives import (
    ApproachKind,
    AssumptionSource,
    AssumptionTracker,
    ConfidenceLevel,
    CostApplicability,
    CostSettings,
    Model,
    PropertyTypeEnum,
)
from .base import ApproachResult, BaseApproach, with_applicable_use
from .depreciation import DepreciationAnalysis, DepreciationCalculator

logger = logging.getLogger(__name__)

LandMethod = Literal["comparable_land_sales", "extraction", "market_estimate"]


class LandValuation(Model):
    method: LandMethod
    price_per_sf: float
    land_area: float
    indication: float
    confidence: ConfidenceLevel
    sales_used: int = 0


class SiteImprovements(Model):
    """Site improvement costs by component."""

    parking: float = 0.0
    site_preparation: float = 0.0
    utilities: float = 0.0
    landscaping: float = 0.0
    access: float = 0.0

    @property
    def total(self) -> float:
        return self.parking + self.site_preparation + self.utilities + self.landscaping + self.access


class ReplacementCost(Model):
    """Replacement cost new of the improvements."""

    base_cost_per_sf: float
    quality_multiplier: float
    size_multiplier: float
    location_multiplier: float
    gross_building_area: float
    site_improvements: SiteImprovements
    soft_costs: float
    developer_profit: float

    @property
    def cost_per_sf(self) -> float:
        return (
            self.base_cost_per_sf
            * self.quality_multiplier
            * self.size_multiplier
            * self.location_multiplier
        )

    @property
    def building_cost(self) -> float:
        return self.gross_building_area * self.cost_per_sf

    @property
    def total(self) -> float:
        return self.building_cost + self.site_improvements.total + self.soft_costs + self.developer_profit


class CostApproachResult(ApproachResult):
    """Cost approach indication with land, cost and depreciation detail."""

    kind: ClassVar[ApproachKind] = ApproachKind.COST

    land_value: LandValuation
    replacement_cost: ReplacementCost
    depreciation: DepreciationAnalysis
    applicability: CostApplicability
    building_age: int = Field(..., description="Actual age at the valuation date.")


class CostApproach(BaseApproach):
    """
    Cost approach for the subject improvements.

    Example:
        ```python
        result = CostApproach(settings).compute(subject, market_data)
        result.applicability, result.depreciation.total
        ```
    """

    kind: ClassVar[ApproachKind] = ApproachKind.COST

    @property
    def rules(self) -> CostSettings:
        return self.settings.cost

    def compute(
        self,
        subject: SubjectProperty,
        market_data: Optional[MarketData] = None,
        applicable_use: Optional[PropertyTypeEnum] = None,
    ) -> CostApproachResult:
        market_data = market_data or MarketData()
        area = subject.gross_building_area
        if not area or area <= 0:
            raise InsufficientDataError(
                "Gross building area is required for the cost approach", stage="cost"
            )
        if subject.year_built is None:
            raise InsufficientDataError("Year built is required for the cost approach", stage="cost")
        if not subject.land_area or subject.land_area <= 0:
            raise InsufficientDataError("Land area is required for the cost approach", stage="cost")
        tracker = AssumptionTracker("cost")
        subject = with_applicable_use(subject, applicable_use, tracker)

        # Step 1: Land value
        land = self.land_value(subject, market_data, tracker)

        # Step 2: Replacement cost new
        replacement = self.replacement_cost(subject, market_data, tracker)

        # Step 3: Depreciation
        depreciation = DepreciationCalculator(self.settings).analyze(
            subject, market_data, replacement.building_cost
        )

        # Step 4: Value indication
        value = ValuationCalculations.round_half_up(
            land.indication + replacement.total - depreciation.total
        )

        # Step 5: Applicability
        age = max(0, subject.age(self.settings.as_of_date))
        applicability, confidence = self.applicability(age)
        logger.info(
            f"Cost approach: land {land.indication:,.0f} + RCN {replacement.total:,.0f} - "
            f"depreciation {depreciation.total:,.0f} = {value:,.0f} ({applicability.value})"
        )

        return CostApproachResult(
            value_indication=value,
            confidence=confidence,
            data_quality=self.confidence_label(confidence),
            land_value=land,
            replacement_cost=replacement,
            depreciation=depreciation,
            applicability=applicability,
            building_age=age,
            assumptions=tracker.records,
            narrative=self.narrative(land, replacement, depreciation, value, applicability),
        )

    # === LAND ===

    def land_value(
        self, subject: SubjectProperty, market_data: MarketData, tracker: AssumptionTracker
    ) -> LandValuation:
        rules = self.rules
        land_area = subject.land_area

        # Method 1: Comparable land sales
        compatible = self.compatible_land_sales(subject, market_data.land_sales)
        if len(compatible) >= rules.min_land_sales:
            price = sum(sale.price_per_sf for sale in compatible) / len(compatible)
            tracker.record("land_value_per_sf", price, AssumptionSource.MARKET_DATA)
            return LandValuation(
                method="comparable_land_sales",
                price_per_sf=price,
                land_area=land_area,
                indication=land_area * price,
                confidence=ConfidenceLevel.HIGH,
                sales_used=len(compatible),
            )

        # Method 2: Extraction from improved sales
        extractable = [sale for sale in market_data.improved_sales if sale.land_area > 0]
        if extractable:
            price = self.extract_land_value(extractable)
            tracker.record("land_value_per_sf", price, AssumptionSource.MARKET_DATA)
            return LandValuation(
                method="extraction",
                price_per_sf=price,
                land_area=land_area,
                indication=land_area * price,
                confidence=ConfidenceLevel.MEDIUM,
                sales_used=len(extractable),
            )

        # Method 3: Zoning and location estimate
        price = self.market_land_value(subject, market_data)
        tracker.record("land_value_per_sf", price, AssumptionSource.DEFAULT)
        return LandValuation(
            method="market_estimate",
            price_per_sf=price,
            land_area=land_area,
            indication=land_area * price,
            confidence=ConfidenceLevel.LOW,
        )

    def compatible_land_sales(
        self, subject: SubjectProperty, land_sales: List[LandSale]
    ) -> List[LandSale]:
        """Land sales with the subject's zoning and a size within the band."""
        zoning = subject.legal.zoning
        land_area = subject.land_area
        return [
            sale
            for sale in land_sales
            if zoning is not None
            and sale.zoning is not None
            and sale.zoning.strip().lower() == zoning.strip().lower()
            and abs(sale.land_area - land_area) / land_area < self.rules.land_size_band
        ]

    def extract_land_value(self, improved_sales: List[ImprovedSale]) -> float:
        """
        Average land value per SF implied by improved sales.

        Land is the price less the improvement value when one is reported,
        else the price times the land allocation (default 25%).
        """
        values = []
        for sale in improved_sales:
            if sale.improvement_value is not None:
                land = max(0.0, sale.sale_price - sale.improvement_value)
            else:
                allocation = (
                    sale.land_allocation
                    if sale.land_allocation is not None
                    else self.rules.land_allocation_ratio
                )
                land = sale.sale_price * allocation
            values.append(land / sale.land_area)
        return sum(values) / len(values)

    def market_land_value(self, subject: SubjectProperty, market_data: MarketData) -> float:
        rules = self.rules
        zoning = (subject.legal.zoning or "").lower()
        base = rules.default_land_value
        for keyword, value in rules.zoning_land_values:
            if keyword in zoning:
                base = value
                break

        grade = (subject.location.grade_letter or "B").lower()
        multiplier = 1.0
        for letter, factor in rules.neighborhood_land_multipliers:
            if grade == letter:
                multiplier = factor
                break

        market_multiplier = market_data.conditions.land_value_multiplier or 1.0
        return base * multiplier * market_multiplier

    # === REPLACEMENT COST ===

    def replacement_cost(
        self, subject: SubjectProperty, market_data: MarketData, tracker: AssumptionTracker
    ) -> ReplacementCost:
        rules = self.rules
        area = subject.gross_building_area
        base = tracker.resolve(
            "construction_cost_per_sf",
            market=market_data.construction_costs.get(subject.property_type),
            default=rules.base_costs.get(subject.property_type, rules.default_base_cost),
        )
        market_key = subject.location.market
        location_multiplier = tracker.resolve(
            "cost_multiplier",
            market=market_data.cost_multipliers.get(market_key) if market_key else None,
            default=1.0,
        )

        site = self.site_improvements(subject)
        building_cost = (
            area
            * base
            * self.quality_multiplier(subject)
            * self.size_multiplier(area)
            * location_multiplier
        )
        soft_costs = (building_cost + site.total) * rules.soft_cost_rate
        developer_profit = (building_cost + site.total + soft_costs) * rules.developer_profit_rate
        return ReplacementCost(
            base_cost_per_sf=base,
            quality_multiplier=self.quality_multiplier(subject),
            size_multiplier=self.size_multiplier(area),
            location_multiplier=location_multiplier,
            gross_building_area=area,
            site_improvements=site,
            soft_costs=soft_costs,
            developer_profit=developer_profit,
        )

    def quality_multiplier(self, subject: SubjectProperty) -> float:
        construction = subject.physical.construction
        multiplier = self.rules.construction_multipliers.get(construction.construction_type, 1.0)
        multiplier *= self.rules.finish_multipliers.get(construction.exterior_finish, 1.0)
        return multiplier

    def size_multiplier(self, area: float) -> float:
        rules = self.rules
        if area < rules.small_building_area:
            return rules.small_building_multiplier
        return ValuationCalculations.band_value(area, rules.size_bands, default=1.0)

    def site_improvements(self, subject: SubjectProperty) -> SiteImprovements:
        rules = self.rules
        land_area = subject.land_area or 0.0
        spaces = subject.physical.parking.spaces or 0
        return SiteImprovements(
            parking=spaces * rules.parking_cost_per_space,
            site_preparation=land_area * rules.site_prep_per_sf,
            utilities=max(rules.min_utilities_cost, land_area * rules.utilities_per_sf),
            landscaping=land_area * rules.landscaping_per_sf,
            access=land_area * rules.access_per_sf,
        )

    # === APPLICABILITY ===

    def applicability(self, age: int) -> Tuple[CostApplicability, float]:
        """Applicability label and confidence score from building age."""
        for max_age, label, confidence in self.rules.applicability_bands:
            if age < max_age:
                return CostApplicability(label), confidence
        label, confidence = self.rules.applicability_floor
        return CostApplicability(label), confidence

    @staticmethod
    def narrative(
        land: LandValuation,
        replacement: ReplacementCost,
        depreciation: DepreciationAnalysis,
        value: float,
        applicability: CostApplicability,
    ) -> str:
        physical = depreciation.physical
        return "\n".join(
            [
                f"The Cost Approach estimates the value at ${value:,.0f}, based on land value of "
                f"${land.indication:,.0f}, replacement cost of ${replacement.total:,.0f}, less "
                f"depreciation of ${depreciation.total:,.0f}.",
                f"Land was valued by {land.method.replace('_', ' ')} at ${land.price_per_sf:,.2f}/SF.",
                f"Effective age of {physical.effective_age} years against an economic life of "
                f"{physical.economic_life} years; depreciation equals "
                f"{depreciation.percent_of_cost:.1%} of building cost.",
                f"Applicability is {applicability.value.replace('_', ' ')}: the Cost Approach is most "
                f"reliable for newer properties or special-use buildings where sales data is limited.",
            ]
        )
