# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Highest and best use of the site as though vacant.

Candidate uses pass through the four tests in order:

1. **Legally permissible**: uses the zoning allows
2. **Physically possible**: uses the site's area and frontage can hold
3. **Financially feasible**: uses whose developed value beats land plus
   development cost by the minimum return
4. **Maximally productive**: the feasible use with the best blend of value
   and market stability
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import Field

from ..core.base import MarketData, SubjectProperty
from ..core.primitives import (
    AppraisalSettings,
    FloatBetween0And1,
    HBUSettings,
    Model,
    PropertyTypeEnum,
    UseProfile,
)

logger = logging.getLogger(__name__)


class PhysicalUse(Model):
    """A permissible use the site can physically accommodate."""

    use: PropertyTypeEnum
    suitability: FloatBetween0And1
    limitations: List[str] = Field(default_factory=list)


class FeasibleUse(Model):
    use: PropertyTypeEnum
    suitability: FloatBetween0And1
    estimated_value: float = Field(..., description="Capitalized NOI of the developed use.")
    total_cost: float = Field(..., description="Land value plus development cost.")
    roi: float
    market_stability: FloatBetween0And1


class ProductiveUse(Model):
    """Conclusion of the as-vacant analysis."""

    use: Optional[PropertyTypeEnum] = None
    estimated_value: float = 0.0
    roi: Optional[float] = None
    market_stability: Optional[float] = None
    reasoning: str = ""


class VacantAnalysis(Model):
    legally_permissible: List[PropertyTypeEnum]
    physically_possible: List[PhysicalUse]
    financially_feasible: List[FeasibleUse]
    conclusion: ProductiveUse
    land_value: float
    market_demand: str = "moderate"


class VacantSiteAnalyzer:
    """Runs the four-test funnel for the site as though vacant."""

    def __init__(self, settings: Optional[AppraisalSettings] = None):
        self.settings = settings or AppraisalSettings()
        self.rules: HBUSettings = self.settings.hbu

    def analyze(self, subject: SubjectProperty, market_data: MarketData) -> VacantAnalysis:
        permissible = self.legally_permissible(subject)
        possible = self.physically_possible(permissible, subject)
        feasible = self.financially_feasible(possible, subject, market_data)
        conclusion = self.maximally_productive(feasible, subject, permissible)
        logger.debug(
            f"As vacant: {len(permissible)} permissible, {len(possible)} possible, "
            f"{len(feasible)} feasible; concluded {conclusion.use}"
        )
        return VacantAnalysis(
            legally_permissible=permissible,
            physically_possible=possible,
            financially_feasible=feasible,
            conclusion=conclusion,
            land_value=self.land_value(subject, market_data),
            market_demand=self.market_demand(conclusion.use, market_data),
        )

    # === FOUR TESTS ===

    def legally_permissible(self, subject: SubjectProperty) -> List[PropertyTypeEnum]:
        """Uses allowed by the zoning keywords; the current use when none match."""
        zoning = (subject.legal.zoning or "").lower()
        uses: List[PropertyTypeEnum] = []
        for keywords, permitted in self.rules.zoning_uses:
            if any(keyword in zoning for keyword in keywords):
                uses.extend(use for use in permitted if use not in uses)
        if not uses:
            uses.append(subject.property_type or PropertyTypeEnum.OFFICE)
        return uses

    def physically_possible(
        self, uses: List[PropertyTypeEnum], subject: SubjectProperty
    ) -> List[PhysicalUse]:
        land_area = subject.land_area or 0.0
        frontage = subject.physical.frontage or self.rules.default_frontage
        possible = []
        for use in uses:
            profile = self.profile(use)
            if land_area < profile.min_land_area or frontage < profile.min_frontage:
                continue
            limitations = []
            if profile.requires_highway_access and not subject.physical.highway_access:
                limitations.append("No direct highway access")
            possible.append(
                PhysicalUse(
                    use=use,
                    suitability=self.physical_suitability(use, subject),
                    limitations=limitations,
                )
            )
        return possible

    def financially_feasible(
        self, uses: List[PhysicalUse], subject: SubjectProperty, market_data: MarketData
    ) -> List[FeasibleUse]:
        """Feasible uses ordered by estimated value, highest first."""
        land_value = self.land_value(subject, market_data)
        feasible = []
        for candidate in uses:
            use = candidate.use
            total_cost = land_value + self.development_cost(use, subject)
            if total_cost <= 0:
                continue
            value = self.projected_income(use, subject) / self.cap_rate(use, market_data)
            roi = (value - total_cost) / total_cost
            if roi > self.rules.min_roi:
                feasible.append(
                    FeasibleUse(
                        use=use,
                        suitability=candidate.suitability,
                        estimated_value=value,
                        total_cost=total_cost,
                        roi=roi,
                        market_stability=self.profile(use).market_stability,
                    )
                )
        return sorted(feasible, key=lambda u: u.estimated_value, reverse=True)

    def maximally_productive(
        self,
        feasible: List[FeasibleUse],
        subject: SubjectProperty,
        permissible: Optional[List[PropertyTypeEnum]] = None,
    ) -> ProductiveUse:
        if not feasible:
            fallback = permissible[0] if permissible else PropertyTypeEnum.OFFICE
            return ProductiveUse(
                use=subject.property_type or fallback,
                reasoning="No financially feasible alternatives identified",
            )
        best = max(feasible, key=self.productivity_score)
        return ProductiveUse(
            use=best.use,
            estimated_value=best.estimated_value,
            roi=best.roi,
            market_stability=best.market_stability,
            reasoning=self.productivity_reasoning(best, feasible),
        )

    def productivity_score(self, candidate: FeasibleUse) -> float:
        rules = self.rules
        return (
            candidate.estimated_value * rules.value_weight
            + candidate.market_stability * candidate.estimated_value * rules.stability_weight
        )

    # === SITE ECONOMICS ===

    def profile(self, use: Optional[PropertyTypeEnum]) -> UseProfile:
        return self.rules.use_profiles.get(use, UseProfile())

    def physical_suitability(self, use: PropertyTypeEnum, subject: SubjectProperty) -> float:
        rules = self.rules
        physical = subject.physical
        suitability = 1.0
        if (
            use is PropertyTypeEnum.RETAIL
            and physical.traffic_count is not None
            and physical.traffic_count < rules.low_traffic_count
        ):
            suitability *= rules.low_traffic_factor
        if use is PropertyTypeEnum.INDUSTRIAL and not physical.rail_access:
            suitability *= rules.no_rail_factor
        if (subject.land_area or 0.0) < self.profile(use).min_land_area * rules.tight_site_ratio:
            suitability *= rules.tight_site_factor
        return max(rules.min_suitability, suitability)

    def land_value(self, subject: SubjectProperty, market_data: MarketData) -> float:
        """Site value from the zoning land value table."""
        rules = self.rules
        zoning = (subject.legal.zoning or "").lower()
        price = rules.default_land_value
        for keyword, value in rules.zoning_land_values:
            if keyword in zoning:
                price = value
                break
        price *= market_data.conditions.land_value_multiplier or 1.0
        return (subject.land_area or 0.0) * price

    def buildable_area(self, subject: SubjectProperty) -> float:
        return (subject.land_area or 0.0) * self.rules.site_coverage

    def development_cost(self, use: Optional[PropertyTypeEnum], subject: SubjectProperty) -> float:
        """Hard cost of the buildable area grossed up for soft costs and profit."""
        hard_cost = self.profile(use).development_cost_per_sf * self.buildable_area(subject)
        return hard_cost * self.rules.development_soft_cost_factor

    def projected_income(self, use: PropertyTypeEnum, subject: SubjectProperty) -> float:
        """Stabilized NOI of the use developed on the buildable area."""
        rules = self.rules
        annual_rent = self.profile(use).rent_per_sf * self.buildable_area(subject)
        return annual_rent * (1 - rules.vacancy_rate) - annual_rent * rules.expense_ratio

    def cap_rate(self, use: Optional[PropertyTypeEnum], market_data: MarketData) -> float:
        return market_data.cap_rates.get(use) or self.rules.default_cap_rate

    @staticmethod
    def market_demand(use: Optional[PropertyTypeEnum], market_data: MarketData) -> str:
        return market_data.demand.get(use, "moderate") if use is not None else "moderate"

    @staticmethod
    def productivity_reasoning(best: FeasibleUse, feasible: List[FeasibleUse]) -> str:
        reasons = [
            f"Selected {best.use.value} as the maximally productive use:",
            f"- Estimated market value: ${best.estimated_value:,.0f}",
            f"- Expected return on investment: {best.roi:.1%}",
        ]
        if best.market_stability > 0.7:
            reasons.append(f"- High market stability for this use ({best.market_stability:.0%})")
        elif best.market_stability > 0.5:
            reasons.append(f"- Moderate market stability for this use ({best.market_stability:.0%})")

        others = [u for u in feasible if u.use is not best.use]
        if others:
            average = sum(u.estimated_value for u in others) / len(others)
            if average > 0 and best.estimated_value > average * 1.1:
                reasons.append(
                    f"- Outperforms other feasible uses by {best.estimated_value / average - 1:.0%}"
                )
        return " ".join(reasons)
