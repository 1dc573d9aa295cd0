# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Comparable Analysis & Ranking

Scores each comparable against the subject on four independent axes and
orders them for selection by the sales comparison approach:

- Similarity (0-100): penalties for type, size, age, location and recency
  differences, plus a bonus for cap rate evidence on income properties
- Adjustment risk (low/moderate/high): count of discrete risk factors
- Data quality (0-100): weighted presence of required and useful fields
- Market support (strong/moderate/weak): points for recency, market
  conditions, financing and property rights

The ranking score is a fixed-weight blend of the four.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Sequence

from pydantic import Field

from ..core.base import Comparable, SubjectProperty
from ..core.calculations import ValuationCalculations
from ..core.primitives import (
    AdjustmentRisk,
    AppraisalSettings,
    ComparableSettings,
    MarketSupport,
    Model,
    PropertyRightsEnum,
    Score0To100,
)

logger = logging.getLogger(__name__)


class RankedComparable(Model):
    """A comparable with its analysis scores."""

    comparable: Comparable
    index: int = Field(..., description="Position in the caller's comparable list.")
    similarity: Score0To100
    adjustment_risk: AdjustmentRisk
    data_quality: Score0To100
    market_support: MarketSupport
    support_points: int
    ranking_score: float

    @property
    def key(self) -> str:
        return self.comparable.key(self.index)


class ComparableAnalyzer:
    """Scores and ranks comparables relative to a subject property."""

    def __init__(self, settings: Optional[AppraisalSettings] = None):
        self.settings = settings or AppraisalSettings()
        self.rules: ComparableSettings = self.settings.comparables

    @property
    def as_of(self) -> date:
        return self.settings.as_of_date

    def rank(
        self, subject: SubjectProperty, comparables: Sequence[Comparable]
    ) -> List[RankedComparable]:
        """Analyze every comparable and sort by ranking score, best first."""
        ranked = [self.analyze(subject, comp, index) for index, comp in enumerate(comparables)]
        # Stable sort keeps caller order for ties, so ranking is deterministic
        ranked.sort(key=lambda r: r.ranking_score, reverse=True)
        return ranked

    def analyze(
        self, subject: SubjectProperty, comparable: Comparable, index: int = 0
    ) -> RankedComparable:
        similarity = self.similarity_score(subject, comparable)
        risk = self.adjustment_risk(subject, comparable)
        quality = self.data_quality(comparable)
        points = self.market_support_points(comparable)
        support = self.market_support(comparable)
        ranking = self.ranking_score(similarity, quality, risk, support)
        logger.debug(
            f"{comparable.label}: similarity={similarity:.0f} risk={risk.value} "
            f"quality={quality:.0f} support={support.value} rank={ranking:.0f}"
        )
        return RankedComparable(
            comparable=comparable,
            index=index,
            similarity=similarity,
            adjustment_risk=risk,
            data_quality=quality,
            market_support=support,
            support_points=points,
            ranking_score=ranking,
        )

    # === SIMILARITY ===

    def similarity_score(self, subject: SubjectProperty, comparable: Comparable) -> float:
        rules = self.rules
        band = ValuationCalculations.band_value
        score = 100.0

        if subject.property_type != comparable.property_type:
            score -= rules.type_mismatch_penalty

        size_delta = self._size_delta(subject, comparable)
        if size_delta is not None:
            score -= band(size_delta, rules.size_penalty_bands)

        age_delta = self._age_delta(subject, comparable)
        if age_delta is not None:
            score -= band(age_delta, rules.age_penalty_bands)

        if subject.city and comparable.city:
            if subject.city.strip().lower() != comparable.city.strip().lower():
                score -= rules.city_mismatch_penalty

        subject_grade = subject.location.neighborhood_grade
        comp_grade = comparable.location.neighborhood_grade
        if subject_grade and comp_grade:
            distance = abs(self.grade_score(subject_grade) - self.grade_score(comp_grade))
            score -= band(distance, rules.grade_penalty_bands)

        months = comparable.sale_age_months(self.as_of, rules.days_per_month)
        if months is not None:
            score -= band(months, rules.recency_penalty_bands)

        if subject.income is not None and comparable.cap_rate:
            score += rules.cap_rate_bonus

        return ValuationCalculations.clamp(score, 0.0, 100.0)

    def grade_score(self, grade: str) -> int:
        """Numeric position of a neighborhood letter grade (A+ = 10 ... D- = -1)."""
        return self.rules.neighborhood_grades.get(
            grade.strip().upper(), self.rules.default_grade_score
        )

    # === ADJUSTMENT RISK ===

    def adjustment_risk(self, subject: SubjectProperty, comparable: Comparable) -> AdjustmentRisk:
        rules = self.rules
        factors = 0

        size_delta = self._size_delta(subject, comparable)
        if size_delta is not None:
            if size_delta > rules.size_high_risk_delta:
                factors += 2
            elif size_delta > rules.size_moderate_risk_delta:
                factors += 1

        if subject.property_type != comparable.property_type:
            factors += rules.type_mismatch_risk_factors

        age_delta = self._age_delta(subject, comparable)
        if age_delta is not None and age_delta > rules.age_risk_delta:
            factors += 1

        if subject.city and comparable.city:
            if subject.city.strip().lower() != comparable.city.strip().lower():
                factors += 1

        months = comparable.sale_age_months(self.as_of, rules.days_per_month)
        if months is not None and months > rules.stale_risk_months:
            factors += 1

        if factors >= rules.high_risk_factors:
            return AdjustmentRisk.HIGH
        if factors >= rules.moderate_risk_factors:
            return AdjustmentRisk.MODERATE
        return AdjustmentRisk.LOW

    # === DATA QUALITY ===

    def data_quality(self, comparable: Comparable) -> float:
        rules = self.rules
        required = [
            comparable.sale_price,
            comparable.sale_date,
            comparable.building_size,
            comparable.property_type,
            comparable.address,
        ]
        useful = [
            comparable.year_built,
            comparable.land_area,
            comparable.cap_rate,
            comparable.city,
            comparable.location.state,
        ]
        max_score = len(required) * rules.required_field_points + len(useful) * rules.useful_field_points
        score = sum(rules.required_field_points for v in required if v) + sum(
            rules.useful_field_points for v in useful if v
        )
        return ValuationCalculations.round_half_up(score / max_score * 100)

    # === MARKET SUPPORT ===

    def market_support_points(self, comparable: Comparable) -> int:
        rules = self.rules
        points = 0

        months = comparable.sale_age_months(self.as_of, rules.days_per_month)
        if months is not None:
            for horizon, recency_points in rules.support_recency_points:
                if months <= horizon:
                    points += recency_points
                    break

        if comparable.market_conditions in rules.favorable_market_conditions:
            points += rules.favorable_market_points

        financing_type = comparable.financing.financing_type if comparable.financing else None
        if financing_type in rules.favorable_financing:
            points += rules.favorable_financing_points

        if comparable.property_rights is PropertyRightsEnum.FEE_SIMPLE:
            points += rules.fee_simple_points

        if (comparable.sale_price or 0) > 0 and (comparable.building_size or 0) > 0:
            points += rules.complete_data_points
        return points

    def market_support(self, comparable: Comparable) -> MarketSupport:
        points = self.market_support_points(comparable)
        if points >= self.rules.strong_support_points:
            return MarketSupport.STRONG
        if points >= self.rules.moderate_support_points:
            return MarketSupport.MODERATE
        return MarketSupport.WEAK

    # === RANKING ===

    def ranking_score(
        self,
        similarity: float,
        data_quality: float,
        risk: AdjustmentRisk,
        support: MarketSupport,
    ) -> float:
        rules = self.rules
        score = (
            rules.similarity_weight * similarity
            + rules.data_quality_weight * data_quality
            + rules.risk_weight * rules.risk_scores[risk.value]
            + rules.support_weight * rules.support_scores[support.value]
        )
        return ValuationCalculations.round_half_up(score)

    # === HELPERS ===

    @staticmethod
    def _size_delta(subject: SubjectProperty, comparable: Comparable) -> Optional[float]:
        subject_size = subject.gross_building_area or subject.net_rentable_area
        comp_size = comparable.building_size
        if not subject_size or not comp_size or subject_size <= 0 or comp_size <= 0:
            return None
        return abs(subject_size - comp_size) / subject_size

    @staticmethod
    def _age_delta(subject: SubjectProperty, comparable: Comparable) -> Optional[float]:
        if subject.year_built is None or comparable.year_built is None:
            return None
        return float(abs(subject.year_built - comparable.year_built))


def rank(
    subject: SubjectProperty,
    comparables: Sequence[Comparable],
    settings: Optional[AppraisalSettings] = None,
) -> List[RankedComparable]:
    """Score every comparable against the subject and order best first."""
    return ComparableAnalyzer(settings).rank(subject, comparables)
