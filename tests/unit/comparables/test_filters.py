# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from datetime import date

from creval.comparables import FilterCriteria, filter_comparables
from creval.core.base import Comparable, LocationDetails
from creval.core.primitives import PropertyTypeEnum
from tests.conftest import create_comparable, create_office_subject


def _names(comparables):
    return [c.property_name for c in comparables]


class TestFilterComparables:
    def test_defaults_keep_recent_complete_sales(self, settings, comparables):
        assert filter_comparables(comparables, settings=settings) == comparables

    def test_incomplete_records_dropped(self, settings, comparables):
        candidates = [
            Comparable(property_name="No Date", sale_price=10_000_000, building_size=40_000),
            Comparable(property_name="No Size", sale_price=10_000_000, sale_date=date(2025, 1, 1)),
            *comparables,
        ]
        assert filter_comparables(candidates, settings=settings) == comparables

    def test_sales_beyond_horizon_dropped(self, settings):
        old = create_comparable("Old Sale", 10_000_000, 40_000, date(2022, 1, 1))
        assert filter_comparables([old], settings=settings) == []

    def test_custom_horizon(self, settings, comparables):
        kept = filter_comparables(
            comparables, FilterCriteria(max_sale_age_months=6), settings=settings
        )
        assert _names(kept) == ["Congress Plaza", "Riverside Center", "Mopac Place"]

    def test_size_band_around_subject(self, settings):
        candidates = [
            create_comparable("Too Small", 5_000_000, 20_000, date(2025, 1, 1)),
            create_comparable("Right Size", 12_000_000, 48_000, date(2025, 1, 1)),
            create_comparable("Too Large", 25_000_000, 110_000, date(2025, 1, 1)),
        ]
        kept = filter_comparables(
            candidates, FilterCriteria(subject_size=50_000), settings=settings
        )
        assert _names(kept) == ["Right Size"]

    def test_similarity_floor_uses_subject(self, settings, comparables):
        """The subject supplies both the size band and the similarity baseline."""
        dissimilar = create_comparable(
            "Dallas Retail",
            12_000_000,
            60_000,
            date(2023, 9, 1),
            year_built=1990,
            property_type=PropertyTypeEnum.RETAIL,
            location=LocationDetails(city="Dallas", state="TX"),
        )
        criteria = FilterCriteria(subject=create_office_subject(), min_similarity=50)

        kept = filter_comparables([dissimilar, *comparables], criteria, settings=settings)

        assert kept == comparables
