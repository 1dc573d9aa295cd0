# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Tests for input records, options, settings and assumption tracking."""

from datetime import date

import pytest
from pydantic import ValidationError

from creval.core.base import (
    Adjustment,
    AppraisalOptions,
    Comparable,
    LocationDetails,
    MarketData,
    PhysicalCharacteristics,
    SubjectProperty,
    TransportationAccess,
)
from creval.core.primitives import (
    AdjustmentKind,
    ApproachKind,
    AssumptionSource,
    AssumptionTracker,
    ComparableSettings,
    ConditionEnum,
    PropertyTypeEnum,
)
from tests.conftest import AS_OF, create_office_subject


class TestSubjectProperty:
    """Test SubjectProperty parsing and accessors."""

    def test_condition_accepts_label_or_score(self):
        """Condition parses from a label in any case or a 1-5 rating."""
        by_label = PhysicalCharacteristics(condition="Good")
        by_score = PhysicalCharacteristics(condition=2)

        assert by_label.condition is ConditionEnum.GOOD
        assert by_score.condition is ConditionEnum.FAIR

    def test_condition_defaults_to_average(self):
        assert SubjectProperty().condition is ConditionEnum.AVERAGE

    def test_property_type_parses_from_label(self):
        subject = SubjectProperty.model_validate({"property_type": "Mixed Use"})
        assert subject.property_type is PropertyTypeEnum.MIXED_USE

    def test_rentable_area_falls_back_to_gross(self):
        subject = create_office_subject(net_rentable_area=None)
        assert subject.rentable_area == 50_000

    def test_age_at_valuation_date(self):
        assert create_office_subject(year_built=2023).age(AS_OF) == 2
        assert SubjectProperty().age(AS_OF) is None

    def test_income_producing(self):
        assert create_office_subject().is_income_producing
        assert not create_office_subject(with_income=False).is_income_producing

    def test_annual_rent_roll(self):
        assert create_office_subject().income.annual_rent_roll == pytest.approx(1_350_000)

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError):
            SubjectProperty.model_validate({"squre_feet": 10_000})

    def test_records_are_immutable(self):
        subject = create_office_subject()
        with pytest.raises(ValidationError):
            subject.name = "Renamed"


class TestLocation:
    def test_grade_letter(self):
        assert LocationDetails(neighborhood_grade=" b+ ").grade_letter == "B"
        assert LocationDetails().grade_letter is None

    def test_transportation_score(self):
        access = TransportationAccess(
            highways=["I-35"], public_transit=["MetroRail"], airport="AUS", walk_score=85
        )
        assert access.score == 5
        assert TransportationAccess(airport="none").score == 0


class TestComparable:
    def test_price_per_sf(self):
        comparable = Comparable(sale_price=12_480_000, building_size=48_000)
        assert comparable.price_per_sf == pytest.approx(260.0)
        assert Comparable(sale_price=1_000_000).price_per_sf is None

    def test_key_prefers_id(self):
        assert Comparable(comparable_id="c-1").key(3) == "c-1"
        assert Comparable().key(3) == "3"

    def test_sale_age_months(self):
        comparable = Comparable(sale_date=date(2025, 3, 15))
        assert comparable.sale_age_months(AS_OF, 30.0) == pytest.approx(107 / 30)
        assert Comparable().sale_age_months(AS_OF) is None


class TestAdjustment:
    def test_percent_dollar_value(self):
        adjustment = Adjustment(name="location", amount=0.05)
        assert adjustment.dollar_value(1_000_000) == pytest.approx(50_000)

    def test_dollar_value_is_absolute(self):
        adjustment = Adjustment(name="site", kind=AdjustmentKind.DOLLAR, amount=-25_000)
        assert adjustment.dollar_value(1_000_000) == -25_000


class TestAppraisalOptions:
    """Test option parsing and approach selection."""

    def test_defaults_request_every_approach(self):
        options = AppraisalOptions()

        assert all(options.requested(kind) for kind in ApproachKind)
        assert options.sole_approach is None

    def test_sole_approach(self):
        options = AppraisalOptions.model_validate({"approaches": ["sales"]})

        assert options.sole_approach is ApproachKind.SALES
        assert not options.requested(ApproachKind.INCOME)

    def test_user_adjustments_accept_numbers_and_records(self):
        options = AppraisalOptions.model_validate(
            {
                "user_adjustments": {
                    "c-1": {"site": 25_000, "view": {"name": "view", "amount": 0.02}},
                }
            }
        )
        overrides = options.user_adjustments["c-1"]

        assert overrides["site"] == 25_000
        assert isinstance(overrides["view"], Adjustment)


class TestSettings:
    def test_ranking_weights_must_sum_to_one(self):
        with pytest.raises(ValueError, match="Ranking weights must sum to 1.0"):
            ComparableSettings(similarity_weight=0.5)

    def test_empty_market_data(self):
        assert MarketData().is_empty
        assert not MarketData(cap_rates={PropertyTypeEnum.OFFICE: 0.07}).is_empty


class TestAssumptionTracker:
    """Test supplied, market and default resolution."""

    def test_resolution_order(self):
        tracker = AssumptionTracker("income")

        assert tracker.resolve("vacancy_rate", supplied=0.04, market=0.06, default=0.05) == 0.04
        assert tracker.resolve("cap_rate", market=0.07, default=0.08) == 0.07
        assert tracker.resolve("discount_rate", default=0.09) == 0.09

        sources = [record.source for record in tracker.records]
        assert sources == [
            AssumptionSource.SUPPLIED,
            AssumptionSource.MARKET_DATA,
            AssumptionSource.DEFAULT,
        ]
        assert [record.name for record in tracker.assumed] == [
            "income.cap_rate",
            "income.discount_rate",
        ]
