# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Invariants that hold across appraisal runs.
"""

from datetime import date

import pytest

from creval.analysis import AppraisalEngine, AppraisalOptions
from creval.comparables import ComparableAnalyzer
from creval.core.primitives import ConditionEnum
from creval.valuation import SalesComparisonApproach
from tests.conftest import create_comparable, create_office_subject, weights_total

SUBJECTS = {
    "fixture": dict(),
    "new": dict(year_built=2023),
    "old_poor": dict(year_built=1980, condition=ConditionEnum.POOR),
    "special_use": dict(special_use=True),
    "no_income": dict(with_income=False),
}


@pytest.fixture(params=sorted(SUBJECTS))
def any_subject(request):
    return create_office_subject(**SUBJECTS[request.param])


class TestDeterminism:
    def test_identical_inputs_identical_results(self, settings, comparables, market_data):
        options = AppraisalOptions(include_all_approaches=True)
        engine = AppraisalEngine(settings)

        first = engine.run(create_office_subject(), comparables, market_data, options)
        second = engine.run(create_office_subject(), comparables, market_data, options)

        assert first.sales_comparison == second.sales_comparison
        assert first.income == second.income
        assert first.cost == second.cost
        assert first.reconciliation == second.reconciliation


class TestReconciliationInvariants:
    """Weight normalization and range containment on varied subjects."""

    @pytest.mark.parametrize("include_all", [False, True])
    def test_weights_sum_to_one(self, settings, any_subject, comparables, market_data, include_all):
        options = AppraisalOptions(include_all_approaches=include_all)

        result = AppraisalEngine(settings).run(any_subject, comparables, market_data, options)

        assert weights_total(result.reconciliation.weights) == pytest.approx(1.0, abs=1e-6)

    def test_final_value_within_range(self, settings, any_subject, comparables, market_data):
        options = AppraisalOptions(include_all_approaches=True)

        result = AppraisalEngine(settings).run(any_subject, comparables, market_data, options)

        assert result.value_range.low <= result.final_value <= result.value_range.high

    def test_parallel_matches_sequential(self, settings, any_subject, comparables, market_data):
        options = AppraisalOptions(include_all_approaches=True)
        parallel_settings = settings.model_copy(
            update={"engine": settings.engine.model_copy(update={"parallel_approaches": True})}
        )

        sequential = AppraisalEngine(settings).run(any_subject, comparables, market_data, options)
        parallel = AppraisalEngine(parallel_settings).run(
            any_subject, comparables, market_data, options
        )

        assert parallel.final_value == sequential.final_value
        assert parallel.reconciliation == sequential.reconciliation


class TestAdjustmentCap:
    def test_over_limit_comparable_excluded_from_value(
        self, settings, subject, comparables, market_data
    ):
        approach = SalesComparisonApproach(settings)

        with_oversized = approach.compute(
            subject, comparables, market_data, {"mopac-place": {"site": 7_000_000.0}}
        )
        without = approach.compute(
            subject, [c for c in comparables if c.property_name != "Mopac Place"], market_data
        )

        assert all(c.total_net_adjustment <= 0.5 for c in with_oversized.valid_comparables)
        assert with_oversized.value_indication == pytest.approx(without.value_indication, abs=1)


class TestMarketSupportMonotonicity:
    def test_more_recent_sale_never_scores_lower(self, settings):
        analyzer = ComparableAnalyzer(settings)
        sale_dates = [
            date(2021, 6, 1),
            date(2023, 6, 1),
            date(2024, 6, 1),
            date(2024, 12, 1),
            date(2025, 3, 1),
            date(2025, 6, 1),
        ]

        points = [
            analyzer.market_support_points(
                create_comparable("Recency Test", 12_000_000, 45_000, sale_date)
            )
            for sale_date in sale_dates
        ]

        assert points == sorted(points)
        assert points[-1] > points[0]
