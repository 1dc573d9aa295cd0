# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Highest and best use conclusion.

Combines the as-vacant and as-improved analyses. Redevelopment is concluded
when the as-vacant value exceeds the improved contributory value by the
configured margin; otherwise the current use continues, or the modified use
when a modification is the best improved option.

The conclusion informs which approaches apply (the cost approach is omitted
when the improvements contribute no value) but never enters the reconciled
value directly.
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import Field

from ..core.base import MarketData, SubjectProperty
from ..core.primitives import AppraisalSettings, ImprovedUseEnum, Model, PropertyTypeEnum
from .improved import ImprovedAnalysis, ImprovedPropertyAnalyzer
from .vacant import VacantAnalysis, VacantSiteAnalyzer

logger = logging.getLogger(__name__)


class HighestBestUseResult(Model):
    """
    Highest and best use of the subject.

    Attributes:
        as_vacant: Four-test funnel for the site as though vacant
        as_improved: Continue, modify and redevelop options
        recommended_use: Use the conclusion supports
        contributory_value: Value of the concluded use
        redevelopment: True when the improvements should be replaced
        conclusion: One-line conclusion
        reasoning: Why the conclusion was reached
        narrative: Summary paragraph for the report
    """

    as_vacant: VacantAnalysis
    as_improved: ImprovedAnalysis
    recommended_use: Optional[PropertyTypeEnum] = None
    contributory_value: float = 0.0
    redevelopment: bool = Field(
        default=False, description="As-vacant value exceeds the improved value by the margin."
    )
    conclusion: str = ""
    reasoning: str = ""
    narrative: str = ""


def analyze_highest_best_use(
    subject: SubjectProperty,
    market_data: Optional[MarketData] = None,
    settings: Optional[AppraisalSettings] = None,
) -> HighestBestUseResult:
    """Run the as-vacant and as-improved analyses and conclude."""
    settings = settings or AppraisalSettings()
    market_data = market_data or MarketData()

    as_vacant = VacantSiteAnalyzer(settings).analyze(subject, market_data)
    as_improved = ImprovedPropertyAnalyzer(settings).analyze(subject, market_data, as_vacant)

    vacant_value = as_vacant.conclusion.estimated_value
    improved_value = as_improved.contributory_value
    if vacant_value > improved_value * settings.hbu.redevelopment_margin:
        result = HighestBestUseResult(
            as_vacant=as_vacant,
            as_improved=as_improved,
            recommended_use=as_vacant.conclusion.use,
            contributory_value=vacant_value,
            redevelopment=True,
            conclusion="Redevelopment to highest and best use as vacant",
            reasoning="Land value exceeds improved value by significant margin",
        )
    else:
        recommended = subject.property_type or as_vacant.conclusion.use
        if as_improved.best is ImprovedUseEnum.MODIFY and as_improved.modification is not None:
            recommended = as_improved.modification.target_use or recommended
        result = HighestBestUseResult(
            as_vacant=as_vacant,
            as_improved=as_improved,
            recommended_use=recommended,
            contributory_value=improved_value,
            conclusion="Continue current use with modifications as appropriate",
            reasoning="Current use maximizes property value",
        )

    logger.info(
        f"Highest and best use: {_use_label(result.recommended_use)} "
        f"({'redevelop' if result.redevelopment else 'as improved'}, "
        f"contributory value {result.contributory_value:,.0f})"
    )
    return result.model_copy(update={"narrative": _narrative(result)})


def _use_label(use: Optional[PropertyTypeEnum]) -> str:
    return use.value if use is not None else "the current use"


def _narrative(result: HighestBestUseResult) -> str:
    vacant = result.as_vacant.conclusion
    improved = result.as_improved
    return "\n".join(
        [
            f"{result.conclusion}.",
            f"Analysis as vacant land supports {_use_label(vacant.use)} use with an estimated "
            f"value of ${vacant.estimated_value:,.0f}.",
            f"Analysis as improved supports {improved.best.value.replace('_', ' ')} with a "
            f"contributory value of ${improved.contributory_value:,.0f}.",
            f"{result.reasoning}.",
            f"The highest and best use is {_use_label(result.recommended_use)} with an estimated "
            f"contributory value of ${result.contributory_value:,.0f}.",
        ]
    )
