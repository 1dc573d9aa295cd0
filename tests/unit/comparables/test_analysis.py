# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Tests for ComparableAnalyzer scoring and ranking."""

from datetime import date

import pytest

from creval.comparables import ComparableAnalyzer, rank
from creval.core.base import Comparable, FinancingTerms, LocationDetails
from creval.core.primitives import (
    AdjustmentRisk,
    FinancingTypeEnum,
    MarketSupport,
    PropertyTypeEnum,
)
from tests.conftest import create_comparable, create_office_subject


def create_poor_match() -> Comparable:
    """Older Dallas retail sale, twice the subject's size, two years old."""
    return create_comparable(
        "Dallas Strip Center",
        9_000_000,
        100_000,
        date(2023, 6, 30),
        year_built=1990,
        property_type=PropertyTypeEnum.RETAIL,
        location=LocationDetails(city="Dallas", state="TX"),
        cap_rate=None,
    )


class TestSimilarity:
    """Test the similarity score penalties and bonus."""

    def test_close_match_is_capped_at_100(self, settings, subject, comparables):
        analyzer = ComparableAnalyzer(settings)
        assert analyzer.similarity_score(subject, comparables[0]) == 100.0

    def test_every_penalty_applies(self, settings, subject):
        """Type, size, age, city and recency penalties accumulate."""
        analyzer = ComparableAnalyzer(settings)
        assert analyzer.similarity_score(subject, create_poor_match()) == 20.0

    def test_neighborhood_grade_distance(self, settings):
        subject = create_office_subject(with_income=False)
        comparable = create_comparable(
            "Eastside Office",
            12_000_000,
            50_000,
            date(2025, 3, 15),
            location=LocationDetails(city="Austin", state="TX", neighborhood_grade="C"),
        )
        # B+ to C is four grades apart
        assert ComparableAnalyzer(settings).similarity_score(subject, comparable) == 90.0

    def test_cap_rate_bonus_requires_subject_income(self, settings):
        subject = create_office_subject(with_income=False)
        comparable = create_comparable("Domain Office", 13_250_000, 50_000, date(2024, 10, 10))
        # 8.8 months old costs 3 points; no bonus without subject income
        assert ComparableAnalyzer(settings).similarity_score(subject, comparable) == 97.0

    def test_grade_score_lookup(self, settings):
        analyzer = ComparableAnalyzer(settings)
        assert analyzer.grade_score("a+") == 10
        assert analyzer.grade_score("D-") == -1
        assert analyzer.grade_score("Z") == 5


class TestAdjustmentRisk:
    def test_low_risk_for_close_match(self, settings, subject, comparables):
        assert ComparableAnalyzer(settings).adjustment_risk(subject, comparables[0]) is AdjustmentRisk.LOW

    def test_high_risk_for_poor_match(self, settings, subject):
        risk = ComparableAnalyzer(settings).adjustment_risk(subject, create_poor_match())
        assert risk is AdjustmentRisk.HIGH

    def test_moderate_risk(self, settings, subject):
        comparable = create_comparable(
            "Round Rock Office",
            8_000_000,
            32_000,
            date(2025, 1, 1),
            location=LocationDetails(city="Round Rock", state="TX"),
        )
        # 36% smaller and in another city: two factors
        risk = ComparableAnalyzer(settings).adjustment_risk(subject, comparable)
        assert risk is AdjustmentRisk.MODERATE


class TestDataQuality:
    def test_complete_record(self, settings, comparables):
        assert ComparableAnalyzer(settings).data_quality(comparables[0]) == 100.0

    def test_required_fields_only_partially_present(self, settings):
        comparable = Comparable(
            sale_price=5_000_000, building_size=20_000, property_type=PropertyTypeEnum.OFFICE
        )
        assert ComparableAnalyzer(settings).data_quality(comparable) == 45.0


class TestMarketSupport:
    """Test market support points and labels."""

    def test_strong_support(self, settings, comparables):
        analyzer = ComparableAnalyzer(settings)

        assert analyzer.market_support_points(comparables[0]) == 10
        assert analyzer.market_support(comparables[0]) is MarketSupport.STRONG

    def test_weak_support_for_bare_record(self, settings):
        comparable = Comparable(sale_price=5_000_000, building_size=20_000)
        analyzer = ComparableAnalyzer(settings)

        assert analyzer.market_support_points(comparable) == 2
        assert analyzer.market_support(comparable) is MarketSupport.WEAK

    def test_seller_financing_earns_no_points(self, settings):
        comparable = create_comparable(
            "Seller Financed",
            12_000_000,
            50_000,
            date(2025, 3, 15),
            financing=FinancingTerms(financing_type=FinancingTypeEnum.SELLER),
        )
        assert ComparableAnalyzer(settings).market_support_points(comparable) == 8

    def test_support_never_rises_with_sale_age(self, settings):
        analyzer = ComparableAnalyzer(settings)
        sale_dates = [
            date(2025, 6, 1),
            date(2025, 1, 1),
            date(2024, 9, 1),
            date(2024, 3, 1),
            date(2023, 1, 1),
        ]
        points = [
            analyzer.market_support_points(
                create_comparable("Aging Sale", 12_000_000, 50_000, sale_date)
            )
            for sale_date in sale_dates
        ]
        assert points == sorted(points, reverse=True)
        assert points[0] - points[-1] == 3


class TestRanking:
    def test_ranking_blend(self, settings):
        analyzer = ComparableAnalyzer(settings)
        score = analyzer.ranking_score(80.0, 60.0, AdjustmentRisk.MODERATE, MarketSupport.WEAK)
        assert score == pytest.approx(0.4 * 80 + 0.3 * 60 + 0.2 * 70 + 0.1 * 40)

    def test_close_match_ranks_first(self, settings, subject, comparables):
        candidates = [create_poor_match(), *comparables]

        ranked = rank(subject, candidates, settings)

        assert ranked[0].ranking_score == 100.0
        assert ranked[-1].comparable.property_name == "Dallas Strip Center"
        assert ranked[-1].index == 0

    def test_ties_keep_input_order(self, settings, subject):
        twins = [
            create_comparable("First Twin", 12_500_000, 50_000, date(2025, 4, 1)),
            create_comparable("Second Twin", 12_500_000, 50_000, date(2025, 4, 1)),
        ]
        ranked = rank(subject, twins, settings)
        assert [r.key for r in ranked] == ["first-twin", "second-twin"]
