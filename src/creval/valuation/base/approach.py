# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Base Valuation Approach Classes

Provides the foundation for the three appraisal approaches (sales
comparison, income capitalization and cost). Every approach is an
independent, read-only computation over the subject, the comparables and
market data, and returns an `ApproachResult` carrying a value indication, a
0-100 confidence score and a narrative.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, List, Optional

from pydantic import Field

from ...core.base import SubjectProperty
from ...core.calculations import ValuationCalculations
from ...core.primitives import (
    ApproachKind,
    AppraisalSettings,
    Assumption,
    AssumptionSource,
    AssumptionTracker,
    ConfidenceLevel,
    Model,
    PropertyTypeEnum,
    Score0To100,
)


def with_applicable_use(
    subject: SubjectProperty,
    applicable_use: Optional[PropertyTypeEnum],
    tracker: Optional[AssumptionTracker] = None,
) -> SubjectProperty:
    """
    The subject typed by the highest and best use when it reports no type.

    Cap rate, expense ratio, construction cost and weighting lookups are keyed
    by property type; an untyped subject takes the concluded use instead.
    """
    if subject.property_type is not None or applicable_use is None:
        return subject
    if tracker is not None:
        tracker.record("property_type", applicable_use.value, AssumptionSource.HIGHEST_BEST_USE)
    return subject.model_copy(update={"property_type": applicable_use})


class ValueRange(Model):
    """Low and high bounds of a value indication."""

    low: float
    high: float

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high

    @property
    def spread(self) -> float:
        return self.high - self.low


class ApproachResult(Model):
    """
    Common output of a valuation approach.

    Subclasses add the approach-specific supporting detail (adjusted
    comparables, income statement, cost breakdown).
    """

    kind: ClassVar[ApproachKind]

    value_indication: float = Field(..., description="Indicated market value.")
    confidence: Score0To100 = Field(..., description="Reliability of the indication.")
    data_quality: ConfidenceLevel = ConfidenceLevel.MEDIUM
    narrative: str = ""
    assumptions: List[Assumption] = Field(
        default_factory=list, description="Inputs resolved from market data or defaults."
    )

    @property
    def approach(self) -> ApproachKind:
        return self.kind


class BaseApproach(ABC):
    """
    Abstract base class for valuation approaches.

    Approaches hold no per-run state; `compute` may be called concurrently
    from different threads with independent inputs.
    """

    kind: ClassVar[ApproachKind]

    def __init__(self, settings: Optional[AppraisalSettings] = None):
        self.settings = settings or AppraisalSettings()

    @abstractmethod
    def compute(self, *args, **kwargs) -> ApproachResult:
        """
        Compute the approach's value indication.

        Raises:
            InsufficientDataError: If a precondition of the approach is not met
        """
        pass

    @staticmethod
    def confidence_label(score: float, medium: float = 60.0, high: float = 80.0) -> ConfidenceLevel:
        """Map a 0-100 score onto low/medium/high."""
        if score < medium:
            return ConfidenceLevel.LOW
        if score < high:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.HIGH

    @staticmethod
    def clamp_score(score: float) -> float:
        return ValuationCalculations.clamp(score, 0.0, 100.0)
