# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Highest and best use analysis, as vacant and as improved.
"""

from .analysis import HighestBestUseResult, analyze_highest_best_use
from .improved import ImprovedAnalysis, ImprovedPropertyAnalyzer
from .vacant import VacantAnalysis, VacantSiteAnalyzer

__all__ = [
    "HighestBestUseResult",
    "ImprovedAnalysis",
    "ImprovedPropertyAnalyzer",
    "VacantAnalysis",
    "VacantSiteAnalyzer",
    "analyze_highest_best_use",
]
