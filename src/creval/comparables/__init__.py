# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Comparable analysis, ranking and filtering.
"""

from .analysis import ComparableAnalyzer, RankedComparable, rank
from .filters import FilterCriteria, filter_comparables

__all__ = [
    "ComparableAnalyzer",
    "FilterCriteria",
    "RankedComparable",
    "filter_comparables",
    "rank",
]
