# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
End-to-end appraisal scenarios.

Each scenario runs the full pipeline (validation, highest and best use,
approaches, reconciliation) through the public entry points.
"""

from datetime import date

import pytest

from creval.analysis import AppraisalEngine, AppraisalFailure, AppraisalOptions, appraise
from creval.core.errors import ValidationFailedError
from creval.core.primitives import ApproachKind, CostApplicability, VarianceRating
from creval.validation import AppraisalValidator
from creval.valuation import reconcile
from tests.conftest import (
    create_comparable,
    create_office_subject,
    make_cost_result,
    make_income_result,
    make_sales_result,
    weights_total,
)


@pytest.fixture
def engine(settings):
    return AppraisalEngine(settings)


@pytest.fixture
def closely_matched_comparables():
    """Five arms-length office sales within 10% of the subject's size and 3 months of the date."""
    return [
        create_comparable("Alpha Tower", 11_700_000, 45_000, date(2025, 6, 15)),
        create_comparable("Bravo Center", 11_500_000, 44_000, date(2025, 5, 20)),
        create_comparable("Charlie Plaza", 12_300_000, 47_000, date(2025, 4, 30)),
        create_comparable("Delta Office", 11_400_000, 43_500, date(2025, 4, 10)),
        create_comparable("Echo Point", 12_150_000, 46_500, date(2025, 6, 1)),
    ]


class TestScenarioA:
    """Closely matched comparables support a reliable sales comparison."""

    def test_sales_comparison_reliable(
        self, engine, subject, closely_matched_comparables, market_data
    ):
        result = engine.run(subject, closely_matched_comparables, market_data)
        sales = result.sales_comparison

        assert sales.confidence >= 80
        assert len(sales.comparables) == 5
        assert all(comp.adjustment_valid for comp in sales.comparables)
        assert sales.excluded == []

    def test_value_near_comparable_prices(
        self, engine, subject, closely_matched_comparables, market_data
    ):
        sales = engine.run(subject, closely_matched_comparables, market_data).sales_comparison
        assert 250 * 45_000 < sales.value_indication < 285 * 45_000


class TestScenarioB:
    """Net rentable area larger than gross building area is fatal."""

    def test_validation_names_the_field(self, settings, comparables, market_data):
        subject = create_office_subject(net_rentable_area=55_000)

        validation = AppraisalValidator(settings).validate(subject, comparables, market_data)

        assert not validation.is_valid
        fields = [issue.field for issue in validation.issues if issue.is_error]
        assert fields == ["physical.net_rentable_area"]
        assert "Net rentable area cannot exceed gross building area" in validation.errors[0]

    def test_run_halts(self, engine, comparables, market_data):
        subject = create_office_subject(net_rentable_area=55_000)
        with pytest.raises(ValidationFailedError):
            engine.run(subject, comparables, market_data)

    def test_structured_failure(self, settings, comparables, market_data):
        subject = create_office_subject(net_rentable_area=55_000)

        failure = appraise(subject, comparables, market_data, settings=settings)

        assert isinstance(failure, AppraisalFailure)
        assert failure.stage == "validation"
        assert not failure.validation.is_valid


class TestScenarioC:
    """Two comparables: sales comparison is omitted, or fails when it is the only approach."""

    def test_sales_omitted_and_weights_renormalized(self, engine, subject, comparables, market_data):
        options = AppraisalOptions(include_all_approaches=True)

        result = engine.run(subject, comparables[:2], market_data, options)

        weights = result.reconciliation.weights
        assert ApproachKind.SALES in result.omitted
        assert weights.sales == 0.0
        assert weights.income > 0 and weights.cost > 0
        assert weights_total(weights) == pytest.approx(1.0)

    def test_sole_sales_approach_fails(self, settings, subject, comparables, market_data):
        options = AppraisalOptions(approaches=[ApproachKind.SALES])

        failure = appraise(subject, comparables[:2], market_data, options, settings=settings)

        assert isinstance(failure, AppraisalFailure)
        assert failure.stage == "sales"
        assert "At least 3 comparable sales are required, 2 provided" in failure.message


class TestScenarioD:
    """A two-year-old building gets a highly applicable cost approach."""

    def test_cost_applicability(self, engine, comparables, market_data):
        subject = create_office_subject(year_built=2023)

        cost = engine.run(subject, comparables, market_data).cost

        assert cost is not None
        assert cost.building_age == 2
        assert cost.applicability is CostApplicability.HIGH
        assert cost.confidence == 85.0


class TestScenarioE:
    """Indications of $1.00M, $1.05M and $0.95M are consistent."""

    def test_variance(self, settings, subject):
        result = reconcile(
            make_sales_result(1_000_000),
            make_income_result(1_050_000),
            make_cost_result(950_000),
            subject,
            settings=settings,
        )
        variance = result.variance

        assert variance.mean == pytest.approx(1_000_000)
        assert variance.range == pytest.approx(0.10)
        assert variance.rating is VarianceRating.EXCELLENT
        assert variance.acceptable
