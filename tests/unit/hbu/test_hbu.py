# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tests for highest and best use analysis.

The fixture office sits on a 100,000 SF commercial site worth $2.5M. No
ground-up development pencils at default rents, so the as-vacant value is
zero and the improvements carry the conclusion.
"""

import pytest

from creval.core.base import IncomeData, LegalCharacteristics, LocationDetails
from creval.core.primitives import ConditionEnum, ImprovedUseEnum, PropertyTypeEnum
from creval.hbu import ImprovedPropertyAnalyzer, VacantSiteAnalyzer, analyze_highest_best_use
from creval.hbu.vacant import FeasibleUse
from tests.conftest import create_office_subject

CONTINUE_NET = 675_000 / 0.07 - 250_000
ENERGY_UPGRADE_NET = 675_000 * 1.08 / 0.07 - 675_000


@pytest.fixture
def vacant(settings):
    return VacantSiteAnalyzer(settings)


@pytest.fixture
def improved(settings):
    return ImprovedPropertyAnalyzer(settings)


@pytest.fixture
def high_rent_settings(settings):
    """Office rents high enough that ground-up development is feasible."""
    profiles = dict(settings.hbu.use_profiles)
    profiles[PropertyTypeEnum.OFFICE] = profiles[PropertyTypeEnum.OFFICE].model_copy(
        update={"rent_per_sf": 60.0}
    )
    hbu = settings.hbu.model_copy(update={"use_profiles": profiles})
    return settings.model_copy(update={"hbu": hbu})


class TestAsVacant:
    """Test the four-test funnel."""

    def test_commercial_zoning_uses(self, vacant, subject):
        assert vacant.legally_permissible(subject) == [
            PropertyTypeEnum.OFFICE,
            PropertyTypeEnum.RETAIL,
            PropertyTypeEnum.RESTAURANT,
            PropertyTypeEnum.MIXED_USE,
        ]

    def test_industrial_zoning_uses(self, vacant):
        subject = create_office_subject(legal=LegalCharacteristics(zoning="Industrial I-1"))
        assert vacant.legally_permissible(subject) == [
            PropertyTypeEnum.INDUSTRIAL,
            PropertyTypeEnum.WAREHOUSE,
        ]

    def test_unrecognized_zoning_keeps_current_use(self, vacant):
        subject = create_office_subject(legal=LegalCharacteristics(zoning="Planned Development PD"))
        assert vacant.legally_permissible(subject) == [PropertyTypeEnum.OFFICE]

    def test_small_site_holds_nothing(self, vacant):
        subject = create_office_subject(land_area=2_000)
        uses = vacant.legally_permissible(subject)
        assert vacant.physically_possible(uses, subject) == []

    def test_frontage_and_access_limits(self, vacant):
        """Industrial needs 150 ft of frontage; the default site has 100."""
        subject = create_office_subject(legal=LegalCharacteristics(zoning="Industrial I-1"))
        possible = vacant.physically_possible(vacant.legally_permissible(subject), subject)

        assert [p.use for p in possible] == [PropertyTypeEnum.WAREHOUSE]
        assert possible[0].limitations == ["No direct highway access"]
        assert possible[0].suitability == 1.0

    def test_industrial_without_rail(self, vacant):
        subject = create_office_subject()
        assert vacant.physical_suitability(PropertyTypeEnum.INDUSTRIAL, subject) == pytest.approx(0.9)

    def test_land_value_from_zoning(self, vacant, subject, market_data):
        assert vacant.land_value(subject, market_data) == pytest.approx(2_500_000)

    def test_nothing_feasible_at_default_rents(self, vacant, subject, market_data):
        analysis = vacant.analyze(subject, market_data)

        assert len(analysis.physically_possible) == 4
        assert analysis.financially_feasible == []
        assert analysis.conclusion.use is PropertyTypeEnum.OFFICE
        assert analysis.conclusion.estimated_value == 0.0
        assert analysis.conclusion.reasoning == "No financially feasible alternatives identified"

    def test_feasible_office_development(self, high_rent_settings, subject, market_data):
        analysis = VacantSiteAnalyzer(high_rent_settings).analyze(subject, market_data)

        office = analysis.financially_feasible[0]
        # 60,000 SF buildable at $60 less vacancy and expenses, capped at 7%
        assert office.estimated_value == pytest.approx(60_000 * 60.0 * 0.6 / 0.07)
        assert office.total_cost == pytest.approx(2_500_000 + 150 * 60_000 * 1.35)
        assert analysis.conclusion.use is PropertyTypeEnum.OFFICE
        assert analysis.conclusion.reasoning.startswith("Selected Office as the maximally productive use")

    def test_productivity_blends_value_and_stability(self, vacant):
        candidate = FeasibleUse(
            use=PropertyTypeEnum.OFFICE,
            suitability=1.0,
            estimated_value=10_000_000,
            total_cost=8_000_000,
            roi=0.25,
            market_stability=0.8,
        )
        assert vacant.productivity_score(candidate) == pytest.approx(9_400_000)


class TestAsImproved:
    """Test the continue, modify and redevelop options."""

    def test_estimated_income_without_reported_noi(self, improved, subject):
        income = improved.current_income(subject)

        assert income.annual_income == pytest.approx(675_000)
        assert income.source == "estimated"

    def test_reported_noi_used(self, improved):
        subject = create_office_subject(income=IncomeData(net_operating_income=700_000))
        income = improved.current_income(subject)

        assert income.annual_income == 700_000
        assert income.source == "actual"
        assert income.confidence == 0.9

    def test_continue_current_use(self, improved, subject, market_data):
        option = improved.continue_current_use(subject, market_data)

        assert option.capital_improvements == pytest.approx(250_000)
        assert option.net_value == pytest.approx(CONTINUE_NET)
        assert option.suitability == pytest.approx(0.8)

    def test_capital_for_old_poor_building(self, improved):
        subject = create_office_subject(year_built=1995, condition=ConditionEnum.POOR)
        assert improved.capital_improvements(subject) == pytest.approx(40.0 * 50_000)

    @pytest.mark.parametrize(
        "year_built,condition,grade,expected",
        [
            (2023, ConditionEnum.EXCELLENT, "A", 1.0),
            (1980, ConditionEnum.POOR, "D", 0.2),
            (2000, ConditionEnum.AVERAGE, "B", 0.7),
        ],
    )
    def test_current_use_suitability(self, improved, year_built, condition, grade, expected):
        subject = create_office_subject(
            year_built=year_built,
            condition=condition,
            location=LocationDetails(city="Austin", state="TX", neighborhood_grade=grade),
        )
        assert improved.current_use_suitability(subject) == pytest.approx(expected)

    def test_best_modification(self, improved, subject, market_data):
        modification = improved.best_modification(subject, market_data)

        assert modification.name == "Energy Efficiency Upgrades"
        assert modification.target_use is None
        assert modification.cost == pytest.approx(675_000)
        assert modification.net_value == pytest.approx(ENERGY_UPGRADE_NET)

    def test_retail_candidates(self, improved):
        subject = create_office_subject(property_type=PropertyTypeEnum.RETAIL)
        names = [m.name for m in improved.candidate_modifications(subject)]
        assert names == [
            "Restaurant Conversion",
            "Energy Efficiency Upgrades",
            "Technology Infrastructure",
        ]

    def test_demolition_cost(self, improved, subject):
        demolition = improved.demolition_cost(subject)

        assert demolition.base_cost == 500_000
        assert demolition.story_multiplier == pytest.approx(1.3)
        assert demolition.total == pytest.approx(812_500)

    def test_modify_is_best_option(self, improved, vacant, subject, market_data):
        analysis = improved.analyze(subject, market_data, vacant.analyze(subject, market_data))

        assert analysis.best is ImprovedUseEnum.MODIFY
        assert analysis.contributory_value == pytest.approx(ENERGY_UPGRADE_NET)
        assert not analysis.redevelopment.feasible


class TestConclusion:
    def test_continue_with_modifications(self, settings, subject, market_data):
        result = analyze_highest_best_use(subject, market_data, settings)

        assert not result.redevelopment
        assert result.recommended_use is PropertyTypeEnum.OFFICE
        assert result.contributory_value == pytest.approx(ENERGY_UPGRADE_NET)
        assert result.conclusion == "Continue current use with modifications as appropriate"

    def test_narrative(self, settings, subject, market_data):
        narrative = analyze_highest_best_use(subject, market_data, settings).narrative

        assert narrative.startswith("Continue current use with modifications as appropriate.")
        assert "Analysis as improved supports modify" in narrative
        assert "The highest and best use is Office" in narrative

    def test_redevelopment(self, high_rent_settings, subject, market_data):
        result = analyze_highest_best_use(subject, market_data, high_rent_settings)

        assert result.redevelopment
        assert result.as_improved.best is ImprovedUseEnum.REDEVELOP
        assert result.contributory_value == pytest.approx(60_000 * 60.0 * 0.6 / 0.07)
        assert result.reasoning == "Land value exceeds improved value by significant margin"

    def test_untyped_subject_takes_first_permissible_use(self, settings, market_data):
        subject = create_office_subject(property_type=None)

        result = analyze_highest_best_use(subject, market_data, settings)

        assert result.as_vacant.conclusion.use is PropertyTypeEnum.OFFICE
        assert result.recommended_use is PropertyTypeEnum.OFFICE
