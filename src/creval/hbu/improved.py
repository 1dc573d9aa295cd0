# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Highest and best use of the property as improved.

Three alternatives are priced on a capitalized-income basis net of the
capital they require: continuing the current use, the best available
modification, and demolition followed by the as-vacant use. The option
with the highest net value sets the contributory value of the improvements.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import Field

from ..core.base import MarketData, SubjectProperty
from ..core.calculations import ValuationCalculations
from ..core.primitives import (
    AppraisalSettings,
    HBUSettings,
    ImprovedUseEnum,
    Model,
    Modification,
    PropertyTypeEnum,
)
from .vacant import VacantAnalysis, VacantSiteAnalyzer

logger = logging.getLogger(__name__)


class IncomeEstimate(Model):
    annual_income: float
    source: str = Field(..., description="'actual' or 'estimated'.")
    confidence: float


class ContinueUseOption(Model):
    gross_value: float
    capital_improvements: float
    net_value: float
    income: IncomeEstimate
    suitability: float
    market_demand: str = "moderate"


class ModificationOption(Model):
    name: str
    description: str = ""
    target_use: Optional[PropertyTypeEnum] = None
    cost: float
    annual_income: float
    gross_value: float
    net_value: float
    feasibility: float


class DemolitionCost(Model):
    base_cost: float
    story_multiplier: float
    permit_costs: float = Field(..., description="Environmental and permit allowance.")

    @property
    def total(self) -> float:
        return self.base_cost * self.story_multiplier + self.permit_costs


class RedevelopmentOption(Model):
    new_use: Optional[PropertyTypeEnum] = None
    land_value: float
    demolition: DemolitionCost
    development_cost: float
    development_value: float

    @property
    def total_cost(self) -> float:
        return self.demolition.total + self.development_cost

    @property
    def net_value(self) -> float:
        return self.development_value - self.total_cost

    @property
    def feasible(self) -> bool:
        return self.net_value > 0


class ImprovedAnalysis(Model):
    continue_use: ContinueUseOption
    modification: Optional[ModificationOption] = None
    redevelopment: RedevelopmentOption
    best: ImprovedUseEnum
    contributory_value: float


class ImprovedPropertyAnalyzer:
    """Compares continuing, modifying and redeveloping the improvements."""

    def __init__(self, settings: Optional[AppraisalSettings] = None):
        self.settings = settings or AppraisalSettings()
        self.rules: HBUSettings = self.settings.hbu
        self.site = VacantSiteAnalyzer(self.settings)

    def analyze(
        self, subject: SubjectProperty, market_data: MarketData, as_vacant: VacantAnalysis
    ) -> ImprovedAnalysis:
        continue_use = self.continue_current_use(subject, market_data)
        modification = self.best_modification(subject, market_data)
        redevelopment = self.redevelop(subject, market_data, as_vacant)

        options = [(ImprovedUseEnum.CONTINUE, continue_use.net_value)]
        if modification is not None:
            options.append((ImprovedUseEnum.MODIFY, modification.net_value))
        options.append((ImprovedUseEnum.REDEVELOP, redevelopment.net_value))

        # First option wins ties
        best, value = options[0]
        for kind, net_value in options[1:]:
            if net_value > value:
                best, value = kind, net_value

        return ImprovedAnalysis(
            continue_use=continue_use,
            modification=modification,
            redevelopment=redevelopment,
            best=best,
            contributory_value=max(0.0, value),
        )

    # === CONTINUE ===

    def continue_current_use(
        self, subject: SubjectProperty, market_data: MarketData
    ) -> ContinueUseOption:
        income = self.current_income(subject)
        gross_value = income.annual_income / self.site.cap_rate(subject.property_type, market_data)
        capital = self.capital_improvements(subject)
        return ContinueUseOption(
            gross_value=gross_value,
            capital_improvements=capital,
            net_value=gross_value - capital,
            income=income,
            suitability=self.current_use_suitability(subject),
            market_demand=self.site.market_demand(subject.property_type, market_data),
        )

    def current_income(self, subject: SubjectProperty) -> IncomeEstimate:
        """Reported NOI, else NOI estimated from market rent on the rentable area."""
        if subject.income is not None and subject.income.net_operating_income:
            return IncomeEstimate(
                annual_income=subject.income.net_operating_income, source="actual", confidence=0.9
            )
        rules = self.rules
        rent = rules.current_rents.get(subject.property_type, rules.default_rent)
        gross = (subject.rentable_area or 0.0) * rent
        net = gross * (1 - rules.vacancy_rate) - gross * rules.expense_ratio
        return IncomeEstimate(annual_income=net, source="estimated", confidence=0.6)

    def building_age(self, subject: SubjectProperty) -> int:
        return max(0, subject.age(self.settings.as_of_date) or 0)

    def capital_improvements(self, subject: SubjectProperty) -> float:
        rules = self.rules
        per_sf = ValuationCalculations.band_value(self.building_age(subject), rules.capital_by_age)
        per_sf += rules.capital_by_condition.get(subject.condition, 0.0)
        return (subject.gross_building_area or 0.0) * per_sf

    def current_use_suitability(self, subject: SubjectProperty) -> float:
        rules = self.rules
        suitability = rules.current_use_suitability
        new_age, new_bonus, old_age, old_penalty = rules.suitability_age_bands
        age = self.building_age(subject)
        if age < new_age:
            suitability += new_bonus
        elif age > old_age:
            suitability += old_penalty

        suitability += rules.suitability_by_condition.get(subject.condition, 0.0)

        grade = subject.location.grade_letter
        if grade == "A":
            suitability += rules.suitability_grade_step
        elif grade in ("C", "D"):
            suitability -= rules.suitability_grade_step
        return ValuationCalculations.clamp(suitability, 0.1, 1.0)

    # === MODIFY ===

    def candidate_modifications(self, subject: SubjectProperty) -> List[Modification]:
        return [
            m
            for m in self.rules.modifications
            if not m.applies_to or subject.property_type in m.applies_to
        ]

    def modification_cost(self, modification: Modification, subject: SubjectProperty) -> float:
        rules = self.rules
        base = (subject.gross_building_area or 0.0) * modification.cost_per_sf
        condition = rules.modification_condition_multipliers.get(subject.condition, 1.0)
        age = ValuationCalculations.band_value(
            self.building_age(subject), rules.modification_age_multipliers, default=1.0
        )
        return base * condition * age

    def best_modification(
        self, subject: SubjectProperty, market_data: MarketData
    ) -> Optional[ModificationOption]:
        """The modification with the highest positive net value, if any."""
        current = self.current_income(subject).annual_income
        best: Optional[ModificationOption] = None
        for modification in self.candidate_modifications(subject):
            target = modification.target_use or subject.property_type
            income = current * (1 + modification.income_increase)
            gross_value = income / self.site.cap_rate(target, market_data)
            cost = self.modification_cost(modification, subject)
            net_value = gross_value - cost
            if net_value > 0 and (best is None or net_value > best.net_value):
                best = ModificationOption(
                    name=modification.name,
                    description=modification.description,
                    target_use=modification.target_use,
                    cost=cost,
                    annual_income=income,
                    gross_value=gross_value,
                    net_value=net_value,
                    feasibility=modification.feasibility,
                )
        return best

    # === REDEVELOP ===

    def demolition_cost(self, subject: SubjectProperty) -> DemolitionCost:
        rules = self.rules
        construction_type = subject.physical.construction.construction_type
        per_sf = rules.demolition_costs.get(construction_type, rules.default_demolition_cost)
        base = (subject.gross_building_area or 0.0) * per_sf
        story_multiplier = 1 + (max(subject.physical.stories, 1) - 1) * rules.story_cost_step
        return DemolitionCost(
            base_cost=base,
            story_multiplier=story_multiplier,
            permit_costs=base * story_multiplier * (rules.demolition_permit_factor - 1),
        )

    def redevelop(
        self, subject: SubjectProperty, market_data: MarketData, as_vacant: VacantAnalysis
    ) -> RedevelopmentOption:
        new_use = as_vacant.conclusion.use
        return RedevelopmentOption(
            new_use=new_use,
            land_value=as_vacant.land_value,
            demolition=self.demolition_cost(subject),
            development_cost=self.site.development_cost(new_use, subject),
            development_value=as_vacant.conclusion.estimated_value,
        )
