# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Accrued Depreciation

Breakdown of the loss in value from replacement cost new:

- **Physical deterioration**: curable repairs, short-lived components
  decayed against their own lives, and the long-lived structure decayed
  against the economic life using the effective age
- **Functional obsolescence**: per-deficiency cure costs and capitalized
  rent loss
- **External obsolescence**: per-SF penalties for market, neighborhood and
  environmental conditions

Percentages of cost apply to the building cost only; site improvements and
soft costs are not depreciated.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import Field

from ..core.base import MarketData, SubjectProperty
from ..core.calculations import ValuationCalculations
from ..core.primitives import (
    AppraisalSettings,
    ConditionEnum,
    CostSettings,
    FloorPlanEnum,
    HVACTypeEnum,
    Model,
    PropertyTypeEnum,
)

logger = logging.getLogger(__name__)


class CurableItem(Model):
    name: str
    cost: float


class ComponentDepreciation(Model):
    """Straight-line depreciation of one building component."""

    name: str
    value: float = Field(..., description="Component share of building cost.")
    life: float
    rate: float = Field(..., description="Depreciated fraction, capped at 1.")
    depreciation: float


class PhysicalDeterioration(Model):
    actual_age: int
    effective_age: int
    condition_multiplier: float
    economic_life: int
    curable_items: List[CurableItem] = Field(default_factory=list)
    short_lived: List[ComponentDepreciation] = Field(default_factory=list)
    long_lived: ComponentDepreciation

    @property
    def curable(self) -> float:
        return sum(item.cost for item in self.curable_items)

    @property
    def short_lived_total(self) -> float:
        return sum(c.depreciation for c in self.short_lived)

    @property
    def total(self) -> float:
        return self.curable + self.short_lived_total + self.long_lived.depreciation


class FunctionalObsolescence(Model):
    curable: float = 0.0
    incurable: float = 0.0
    issues: List[str] = Field(default_factory=list)

    @property
    def total(self) -> float:
        return self.curable + self.incurable


class ExternalObsolescence(Model):
    total: float = 0.0
    factors: List[str] = Field(default_factory=list)


class DepreciationAnalysis(Model):
    """Total accrued depreciation and its three components."""

    physical: PhysicalDeterioration
    functional: FunctionalObsolescence
    external: ExternalObsolescence
    building_cost: float

    @property
    def total(self) -> float:
        return self.physical.total + self.functional.total + self.external.total

    @property
    def percent_of_cost(self) -> float:
        return self.total / self.building_cost if self.building_cost > 0 else 0.0


class DepreciationCalculator:
    """Computes accrued depreciation from the cost tables in `CostSettings`."""

    def __init__(self, settings: Optional[AppraisalSettings] = None):
        self.settings = settings or AppraisalSettings()
        self.rules: CostSettings = self.settings.cost

    def analyze(
        self, subject: SubjectProperty, market_data: MarketData, building_cost: float
    ) -> DepreciationAnalysis:
        return DepreciationAnalysis(
            physical=self.physical(subject, building_cost),
            functional=self.functional(subject, market_data),
            external=self.external(subject, market_data),
            building_cost=building_cost,
        )

    # === PHYSICAL ===

    def physical(self, subject: SubjectProperty, building_cost: float) -> PhysicalDeterioration:
        rules = self.rules
        actual_age = max(0, subject.age(self.settings.as_of_date) or 0)
        condition = subject.condition
        multiplier = rules.effective_age_multipliers.get(condition, 1.0)
        effective_age = int(ValuationCalculations.round_half_up(max(0.0, actual_age * multiplier)))
        economic_life = self.economic_life(subject)

        short_lived = [
            self._component(c.name, building_cost * c.cost_share, c.life, effective_age)
            for c in rules.short_lived_components
        ]
        long_lived = self._component(
            "Structure", building_cost * rules.long_lived_share, economic_life, effective_age
        )
        return PhysicalDeterioration(
            actual_age=actual_age,
            effective_age=effective_age,
            condition_multiplier=multiplier,
            economic_life=economic_life,
            curable_items=self.curable_items(subject, actual_age),
            short_lived=short_lived,
            long_lived=long_lived,
        )

    def economic_life(self, subject: SubjectProperty) -> int:
        """Economic life by construction type scaled by a property-type factor."""
        rules = self.rules
        construction_type = subject.physical.construction.construction_type
        life = rules.economic_life.get(construction_type, rules.default_economic_life)
        life *= rules.economic_life_factors.get(subject.property_type, 1.0)
        return int(ValuationCalculations.round_half_up(life))

    def curable_items(self, subject: SubjectProperty, actual_age: int) -> List[CurableItem]:
        """Repairs worth curing; only identified for fair or poor condition."""
        condition = subject.condition
        if condition not in (ConditionEnum.FAIR, ConditionEnum.POOR):
            return []
        area = subject.gross_building_area or 0.0
        poor = condition is ConditionEnum.POOR
        return [
            CurableItem(name=rule.name, cost=rule.cost_per_sf * area)
            for rule in self.rules.curable_items
            if actual_age > rule.min_age or (poor and rule.when_poor)
        ]

    @staticmethod
    def _component(name: str, value: float, life: float, effective_age: int) -> ComponentDepreciation:
        rate = min(effective_age / life, 1.0) if life > 0 else 1.0
        return ComponentDepreciation(
            name=name, value=value, life=life, rate=rate, depreciation=value * rate
        )

    # === FUNCTIONAL ===

    def functional(self, subject: SubjectProperty, market_data: MarketData) -> FunctionalObsolescence:
        rules = self.rules
        physical = subject.physical
        curable = 0.0
        incurable = 0.0
        issues: List[str] = []

        if (
            subject.property_type is PropertyTypeEnum.OFFICE
            and physical.ceiling_height is not None
            and physical.ceiling_height < rules.low_ceiling_height
        ):
            curable += rules.low_ceiling_cost
            issues.append("Low ceiling height")

        if physical.hvac_type in (None, HVACTypeEnum.WINDOW_UNITS, HVACTypeEnum.NONE):
            curable += (physical.gross_building_area or 0.0) * rules.hvac_replacement_per_sf
            issues.append("Inadequate HVAC system")

        if physical.floor_plan is FloorPlanEnum.CELLULAR and market_data.prefers_open_floor_plan:
            rent_loss = (subject.rentable_area or 0.0) * rules.floor_plan_rent_loss_per_sf
            incurable += rent_loss / rules.floor_plan_cap_rate
            issues.append("Outdated floor plan")

        return FunctionalObsolescence(curable=curable, incurable=incurable, issues=issues)

    # === EXTERNAL ===

    def external(self, subject: SubjectProperty, market_data: MarketData) -> ExternalObsolescence:
        rules = self.rules
        area = subject.gross_building_area or 0.0
        total = 0.0
        factors: List[str] = []

        if market_data.conditions.declining:
            total += area * rules.declining_market_per_sf
            factors.append("Declining market conditions")

        if subject.location.declining or subject.location.grade_letter == "D":
            total += area * rules.declining_neighborhood_per_sf
            factors.append("Declining neighborhood")

        environmental = subject.environmental
        if environmental is not None and (environmental.has_issues or environmental.issues):
            total += area * rules.environmental_per_sf
            factors.append("Environmental issues")

        return ExternalObsolescence(total=total, factors=factors)
