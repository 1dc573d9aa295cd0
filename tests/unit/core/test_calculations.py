# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Tests for ValuationCalculations - shared appraisal arithmetic."""

import math
from datetime import date

import pytest

from creval.core.calculations import ValuationCalculations

ROUNDING_TIERS = [
    (10_000_000.0, 100_000.0),
    (1_000_000.0, 10_000.0),
    (100_000.0, 1_000.0),
    (10_000.0, 500.0),
]


class TestRounding:
    """Test half-up and denomination rounding."""

    def test_round_half_up_rounds_halves_up(self):
        """Halves round up, unlike the built-in banker's rounding."""
        assert ValuationCalculations.round_half_up(72.5) == 73
        assert ValuationCalculations.round_half_up(2.5) == 3
        assert ValuationCalculations.round_half_up(2.4) == 2

    def test_round_half_up_with_digits(self):
        assert ValuationCalculations.round_half_up(1.25, 1) == pytest.approx(1.3)
        assert ValuationCalculations.round_half_up(265.456, 2) == pytest.approx(265.46)

    @pytest.mark.parametrize(
        "value,expected",
        [
            (14_178_571, 14_200_000),
            (1_234_567, 1_230_000),
            (123_456, 123_000),
            (12_345, 12_500),
            (9_876, 9_900),
        ],
    )
    def test_round_to_denomination_by_magnitude(self, value, expected):
        """Denomination grows with the magnitude of the value."""
        assert ValuationCalculations.round_to_denomination(value, ROUNDING_TIERS, 100.0) == expected


class TestBandsAndDates:
    def test_band_value_returns_first_exceeded_threshold(self):
        bands = [(20.0, 15.0), (10.0, 8.0), (5.0, 3.0)]

        assert ValuationCalculations.band_value(25, bands) == 15.0
        assert ValuationCalculations.band_value(12, bands) == 8.0
        assert ValuationCalculations.band_value(10, bands) == 3.0
        assert ValuationCalculations.band_value(2, bands, default=1.0) == 1.0

    def test_clamp(self):
        assert ValuationCalculations.clamp(0.3, -0.2, 0.2) == 0.2
        assert ValuationCalculations.clamp(-0.3, -0.2, 0.2) == -0.2
        assert ValuationCalculations.clamp(0.1, -0.2, 0.2) == 0.1

    def test_months_between_uses_fixed_day_count(self):
        months = ValuationCalculations.months_between(date(2024, 6, 30), date(2025, 6, 30), 30.0)
        assert months == pytest.approx(365 / 30)

    def test_years_between_is_whole_years(self):
        assert ValuationCalculations.years_between(2015, date(2025, 6, 30)) == 10


class TestStatistics:
    """Test dispersion statistics and intervals."""

    def test_population_statistics(self):
        """Variance and standard deviation use the population formula."""
        stats = ValuationCalculations.population_statistics([1.0, 2.0, 3.0, 4.0])

        assert stats["mean"] == pytest.approx(2.5)
        assert stats["median"] == pytest.approx(2.5)
        assert stats["variance"] == pytest.approx(1.25)
        assert stats["std_dev"] == pytest.approx(math.sqrt(1.25))
        assert stats["coefficient_of_variation"] == pytest.approx(math.sqrt(1.25) / 2.5)
        assert stats["min"] == 1.0
        assert stats["max"] == 4.0
        assert stats["count"] == 4

    def test_population_statistics_empty(self):
        stats = ValuationCalculations.population_statistics([])
        assert stats["mean"] == 0.0
        assert stats["count"] == 0

    def test_weighted_average(self):
        assert ValuationCalculations.weighted_average([100.0, 200.0], [3.0, 1.0]) == pytest.approx(125.0)

    def test_weighted_average_requires_positive_weight(self):
        with pytest.raises(ValueError, match="positive weight"):
            ValuationCalculations.weighted_average([100.0, 200.0], [0.0, 0.0])

    def test_confidence_interval_brackets_mean(self):
        low, high = ValuationCalculations.confidence_interval([250.0, 255.0, 260.0, 265.0])
        assert low < 257.5 < high

    def test_confidence_interval_needs_two_observations(self):
        assert ValuationCalculations.confidence_interval([250.0]) is None


class TestPresentValue:
    def test_first_flow_discounted_one_period(self):
        """Cash flows are end of period."""
        assert ValuationCalculations.present_value(0.10, [110.0]) == pytest.approx(100.0)

    def test_multi_period(self):
        flows = [100.0, 100.0, 100.0]
        expected = sum(cf / 1.08 ** (year + 1) for year, cf in enumerate(flows))
        assert ValuationCalculations.present_value(0.08, flows) == pytest.approx(expected)

    def test_no_flows(self):
        assert ValuationCalculations.present_value(0.08, []) == 0.0
