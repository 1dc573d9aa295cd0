# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Comparable filtering utilities.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from pydantic import Field

from ..core.base import Comparable, SubjectProperty
from ..core.primitives import AppraisalSettings, Model, PositiveFloat
from .analysis import ComparableAnalyzer

logger = logging.getLogger(__name__)


class FilterCriteria(Model):
    """
    Screening thresholds; unset values fall back to `ComparableSettings`.

    The size band is only applied when `subject_size` is known. A similarity
    floor requires a `subject` to score against.
    """

    max_sale_age_months: Optional[PositiveFloat] = None
    subject_size: Optional[PositiveFloat] = Field(
        default=None, description="Subject building area for the size-ratio band."
    )
    min_size_ratio: Optional[PositiveFloat] = None
    max_size_ratio: Optional[PositiveFloat] = None
    min_similarity: Optional[PositiveFloat] = None
    subject: Optional[SubjectProperty] = None


def filter_comparables(
    comparables: Sequence[Comparable],
    criteria: Optional[FilterCriteria] = None,
    settings: Optional[AppraisalSettings] = None,
) -> List[Comparable]:
    """
    Remove unusable comparables, keeping the input order.

    A comparable is dropped when it has no usable price, size or sale date,
    when the sale is older than the horizon, when its size falls outside the
    ratio band around the subject, or when it scores below the similarity
    floor.
    """
    settings = settings or AppraisalSettings()
    criteria = criteria or FilterCriteria()
    defaults = settings.comparables
    horizon = criteria.max_sale_age_months or defaults.max_sale_age_months
    low = criteria.min_size_ratio or defaults.min_size_ratio
    high = criteria.max_size_ratio or defaults.max_size_ratio
    min_similarity = (
        criteria.min_similarity if criteria.min_similarity is not None else defaults.min_similarity
    )
    subject_size = criteria.subject_size
    if subject_size is None and criteria.subject is not None:
        subject_size = criteria.subject.gross_building_area
    analyzer = ComparableAnalyzer(settings) if criteria.subject is not None else None

    kept: List[Comparable] = []
    for comparable in comparables:
        if not comparable.sale_price or not comparable.building_size or comparable.sale_date is None:
            logger.debug(f"Filtered {comparable.label}: missing price, size or sale date")
            continue
        months = comparable.sale_age_months(settings.as_of_date, defaults.days_per_month)
        if months > horizon:
            logger.debug(f"Filtered {comparable.label}: sale {months:.1f} months old")
            continue
        if subject_size:
            ratio = comparable.building_size / subject_size
            if ratio < low or ratio > high:
                logger.debug(f"Filtered {comparable.label}: size ratio {ratio:.2f}")
                continue
        if analyzer is not None and min_similarity > 0:
            similarity = analyzer.similarity_score(criteria.subject, comparable)
            if similarity < min_similarity:
                logger.debug(f"Filtered {comparable.label}: similarity {similarity:.0f}")
                continue
        kept.append(comparable)
    return kept
