# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the public `appraise` entry point.
"""

from creval.analysis import AppraisalEngine, AppraisalFailure, AppraisalResult, appraise
from creval.analysis import orchestrator
from creval.core.primitives import ApproachKind
from tests.conftest import create_office_subject


class TestAppraise:
    def test_typed_inputs(self, settings, subject, comparables, market_data):
        result = appraise(subject, comparables, market_data, settings=settings)

        assert isinstance(result, AppraisalResult)
        assert result.final_value > 0

    def test_mapping_inputs_match_typed_inputs(self, settings, subject, comparables, market_data):
        typed = AppraisalEngine(settings).run(subject, comparables, market_data)

        result = appraise(
            subject.model_dump(mode="json"),
            [c.model_dump(mode="json") for c in comparables],
            market_data.model_dump(mode="json"),
            {"include_all_approaches": False},
            settings=settings,
        )

        assert isinstance(result, AppraisalResult)
        assert result.final_value == typed.final_value
        assert result.reconciliation == typed.reconciliation

    def test_unparseable_input(self, settings, comparables):
        result = appraise({"property_type": "Spaceship"}, comparables, settings=settings)

        assert isinstance(result, AppraisalFailure)
        assert result.stage == "input"
        assert result.message == "Appraisal input could not be parsed"
        assert result.errors[0].startswith("property_type:")

    def test_no_comparables(self, settings, subject):
        result = appraise(subject, [], settings=settings)

        assert isinstance(result, AppraisalFailure)
        assert result.stage == "input"
        assert "at least one comparable" in result.message

    def test_validation_failure(self, settings, comparables, market_data):
        subject = create_office_subject(year_built=2030)

        result = appraise(subject, comparables, market_data, settings=settings)

        assert isinstance(result, AppraisalFailure)
        assert result.error is True
        assert result.stage == "validation"
        assert result.validation is not None
        assert result.errors == ["Year built cannot be in the future"]

    def test_sole_approach_failure(self, settings, comparables, market_data):
        subject = create_office_subject(expenses=None)

        result = appraise(
            subject, comparables, market_data, {"approaches": ["income"]}, settings=settings
        )

        assert isinstance(result, AppraisalFailure)
        assert result.stage == ApproachKind.INCOME.value
        assert "Income and expense data required" in result.message

    def test_unexpected_error_returned_as_failure(
        self, settings, subject, comparables, market_data, monkeypatch
    ):
        def broken(*args, **kwargs):
            raise RuntimeError("zoning table unavailable")

        monkeypatch.setattr(orchestrator, "analyze_highest_best_use", broken)

        result = appraise(subject, comparables, market_data, settings=settings)

        assert isinstance(result, AppraisalFailure)
        assert result.stage == "engine"
        assert result.message == "RuntimeError: zoning table unavailable"
