# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for AdjustmentCalculator.

Each test changes a single characteristic of an otherwise identical
comparable so only the adjustment under test moves.
"""

from datetime import date

import pytest

from creval.core.base import (
    ConstructionDetails,
    FinancingTerms,
    IncomeData,
    Lease,
    LocationDetails,
    MarketData,
)
from creval.core.primitives import (
    AssumptionSource,
    ConditionEnum,
    ConstructionTypeEnum,
    ExteriorFinishEnum,
    FinancingTypeEnum,
    HVACTypeEnum,
    PropertyRightsEnum,
    PropertyTypeEnum,
    SaleConditionEnum,
)
from creval.valuation import ADJUSTMENT_ORDER, AdjustmentCalculator
from tests.conftest import create_comparable, create_market_data, create_office_subject


def twin(**overrides):
    """A comparable matching the fixture subject, sold on the valuation date."""
    fields = dict(
        sale_price=12_000_000,
        building_size=45_000,
        sale_date=date(2025, 6, 30),
        location=LocationDetails(city="Austin", state="TX", neighborhood="Downtown"),
    )
    fields.update(overrides)
    return create_comparable("Twin Tower", **fields)


@pytest.fixture
def calculator(settings):
    return AdjustmentCalculator(settings)


class TestTransactionAdjustments:
    """Test property rights, financing, conditions of sale and market conditions."""

    def test_leased_fee_comparable_adjusted_down(self, calculator, subject):
        comparable = twin(property_rights=PropertyRightsEnum.LEASED_FEE)
        assert calculator.property_rights(subject, comparable).amount == pytest.approx(-0.05)

    def test_matching_rights_need_no_adjustment(self, calculator, subject):
        assert calculator.property_rights(subject, twin()).amount == 0.0

    def test_cash_sale_needs_no_financing_adjustment(self, calculator):
        adjustment = calculator.financing(twin(), MarketData())
        assert adjustment.amount == 0.0
        assert "Cash equivalent" in adjustment.explanation

    def test_below_market_financing(self, calculator):
        """Two points below the 7% default market rate removes 4% of price."""
        comparable = twin(
            financing=FinancingTerms(
                financing_type=FinancingTypeEnum.CONVENTIONAL, interest_rate=0.05
            )
        )
        assert calculator.financing(comparable, MarketData()).amount == pytest.approx(-0.04)

    def test_financing_within_threshold(self, calculator):
        comparable = twin(
            financing=FinancingTerms(
                financing_type=FinancingTypeEnum.CONVENTIONAL, interest_rate=0.068
            )
        )
        assert calculator.financing(comparable, MarketData()).amount == 0.0

    def test_financing_adjustment_is_capped(self, calculator):
        comparable = twin(
            financing=FinancingTerms(financing_type=FinancingTypeEnum.SELLER, interest_rate=0.0)
        )
        market_data = MarketData(market_interest_rate=0.08)
        assert calculator.financing(comparable, market_data).amount == pytest.approx(-0.10)

    @pytest.mark.parametrize(
        "conditions,expected",
        [
            (SaleConditionEnum.ARMS_LENGTH, 0.0),
            (SaleConditionEnum.DISTRESSED, 0.15),
            (SaleConditionEnum.RELATED_PARTY, 0.05),
            (SaleConditionEnum.AUCTION, 0.08),
        ],
    )
    def test_sale_conditions(self, calculator, conditions, expected):
        assert calculator.sale_conditions(twin(sale_conditions=conditions)).amount == expected

    def test_market_conditions_accrue_monthly(self, calculator):
        comparable = twin(sale_date=date(2024, 6, 30))
        adjustment = calculator.market_conditions(comparable, MarketData())
        assert adjustment.amount == pytest.approx(365 / 30.44 * 0.03 / 12)

    def test_market_conditions_clamped(self, calculator):
        comparable = twin(sale_date=date(2022, 6, 30))

        rising = calculator.market_conditions(comparable, MarketData(appreciation_rate=0.5))
        falling = calculator.market_conditions(comparable, MarketData(appreciation_rate=-0.2))

        assert rising.amount == pytest.approx(0.25)
        assert falling.amount == pytest.approx(-0.15)


class TestLocationAdjustment:
    def test_neighborhood_and_distance(self, calculator, subject):
        """An inferior, farther-out neighborhood is adjusted upward."""
        comparable = twin(
            location=LocationDetails(
                city="Austin", state="TX", neighborhood="Suburb", distance_from_cbd=5.0
            )
        )
        market_data = create_market_data(neighborhoods={"Downtown": 4.5, "Suburb": 3.0})

        adjustment = calculator.location(subject, comparable, market_data)

        assert adjustment.amount == pytest.approx(1.5 * 0.02 + 5.0 * 0.005)

    def test_unknown_neighborhood_uses_default_rating(self, calculator, subject, market_data):
        comparable = twin(
            location=LocationDetails(city="Austin", state="TX", neighborhood="Unrated")
        )
        adjustment = calculator.location(subject, comparable, market_data)
        assert adjustment.amount == pytest.approx((4.5 - 3.0) * 0.02)

    def test_small_distance_ignored(self, calculator, subject):
        comparable = twin(location=LocationDetails(distance_from_cbd=1.5))
        assert calculator.location(subject, comparable, MarketData()).amount == 0.0

    def test_location_capped(self, calculator, subject):
        comparable = twin(location=LocationDetails(distance_from_cbd=80.0))
        assert calculator.location(subject, comparable, MarketData()).amount == pytest.approx(0.2)


class TestResolvedInputs:
    """Test that market and default inputs are recorded for disclosure."""

    def test_default_appreciation_recorded_once(self, calculator):
        calculator.market_conditions(twin(sale_date=date(2025, 1, 31)), MarketData())
        calculator.market_conditions(twin(sale_date=date(2024, 6, 30)), MarketData())

        records = calculator.tracker.records
        assert [r.name for r in records] == ["sales.appreciation_rate"]
        assert records[0].value == 0.03
        assert records[0].source is AssumptionSource.DEFAULT

    def test_market_interest_rate_from_market_data(self, calculator):
        comparable = twin(
            financing=FinancingTerms(
                financing_type=FinancingTypeEnum.CONVENTIONAL, interest_rate=0.05
            )
        )
        calculator.financing(comparable, MarketData(market_interest_rate=0.065))

        (record,) = calculator.tracker.records
        assert record.name == "sales.market_interest_rate"
        assert record.source is AssumptionSource.MARKET_DATA

    def test_neighborhood_ratings(self, calculator, market_data):
        assert calculator.neighborhood_rating("Downtown", market_data) == 4.5
        assert calculator.neighborhood_rating("Unrated", market_data) == 3.0

        sources = {r.name: r.source for r in calculator.tracker.records}
        assert sources == {
            "sales.neighborhood_rating.Downtown": AssumptionSource.MARKET_DATA,
            "sales.neighborhood_rating.Unrated": AssumptionSource.DEFAULT,
        }


class TestPhysicalAdjustments:
    """Test size, age, condition, quality and functional utility."""

    def test_larger_comparable_adjusted_up(self, calculator, subject):
        assert calculator.size(subject, twin(building_size=90_000)).amount == pytest.approx(0.10)

    def test_smaller_comparable_adjusted_down(self, calculator, subject):
        amount = calculator.size(subject, twin(building_size=20_000)).amount
        assert amount == pytest.approx(-(1 - 20_000 / 45_000) * 0.1)

    def test_similar_size_not_adjusted(self, calculator, subject):
        assert calculator.size(subject, twin(building_size=60_000)).amount == 0.0

    def test_older_comparable_adjusted_down(self, calculator, subject):
        """Ten years older at half a percent per year."""
        assert calculator.age(subject, twin(year_built=2005)).amount == pytest.approx(-0.05)

    def test_age_capped(self, calculator, subject):
        assert calculator.age(subject, twin(year_built=1900)).amount == pytest.approx(-0.2)

    def test_inferior_condition(self, calculator, subject):
        comparable = twin(condition=ConditionEnum.POOR)
        assert calculator.condition(subject, comparable).amount == pytest.approx(0.15)

    def test_inferior_construction(self, calculator, subject):
        comparable = twin(
            construction=ConstructionDetails(construction_type=ConstructionTypeEnum.WOOD_FRAME)
        )
        assert calculator.quality(subject, comparable).amount == pytest.approx(0.09)

    def test_quality_score_capped_at_five(self, calculator):
        construction = ConstructionDetails(
            construction_type=ConstructionTypeEnum.STEEL_FRAME,
            exterior_finish=ExteriorFinishEnum.GLASS,
        )
        assert calculator.construction_quality_score(construction) == 5.0

    def test_window_units(self, calculator, subject):
        comparable = twin(hvac_type=HVACTypeEnum.WINDOW_UNITS)
        assert calculator.functional_utility(subject, comparable).amount == pytest.approx(0.06)

    def test_parking_gap(self, calculator, subject):
        comparable = twin(parking_ratio=1.5)
        assert calculator.functional_utility(subject, comparable).amount == pytest.approx(0.015)

    def test_loading_docks_for_industrial(self, calculator):
        subject = create_office_subject(property_type=PropertyTypeEnum.INDUSTRIAL)
        physical = subject.physical.model_copy(update={"loading_docks": 10})
        subject = subject.model_copy(update={"physical": physical})

        comparable = twin(property_type=PropertyTypeEnum.INDUSTRIAL, loading_docks=2)

        assert calculator.functional_utility(subject, comparable).amount == pytest.approx(0.04)


class TestIncomeAdjustments:
    def test_tenant_quality_score(self, calculator, subject):
        """Area-weighted credit score with the long-lease bonus."""
        score = calculator.tenant_quality_score(subject.income)
        assert score == pytest.approx((4.5 * 20_000 + 4.0 * 15_000 + 2.5 * 10_000) / 45_000)

    def test_income_adjustments_need_both_incomes(self, calculator, subject, market_data):
        without_income = calculator.calculate_all(subject, twin(), market_data)
        assert "lease_terms" not in without_income

        comp_income = IncomeData(
            rent_roll=[
                Lease(
                    tenant="Single Tenant",
                    area=45_000,
                    monthly_rent=100_000,
                    lease_start=date(2024, 1, 1),
                    lease_end=date(2025, 12, 31),
                )
            ]
        )
        with_income = calculator.calculate_all(subject, twin(income=comp_income), market_data)

        assert tuple(with_income) == ADJUSTMENT_ORDER
        tenant = with_income["tenant_quality"].amount
        assert tenant == pytest.approx((calculator.tenant_quality_score(subject.income) - 3.0) * 0.02)
        assert with_income["lease_terms"].amount > 0


class TestCalculateAll:
    def test_identical_comparable_needs_no_adjustment(self, calculator, subject, market_data):
        adjustments = calculator.calculate_all(subject, twin(), market_data)

        assert tuple(adjustments) == ADJUSTMENT_ORDER[:10]
        assert all(adj.amount == 0.0 for adj in adjustments.values())
        assert all(adj.is_percent for adj in adjustments.values())
