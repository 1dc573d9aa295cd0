# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Creval Analysis Engine

Orchestrates a full appraisal: validation, highest and best use, the three
approaches to value and reconciliation.
"""

from ..core.base import AppraisalOptions
from .api import appraise
from .orchestrator import AppraisalEngine
from .results import AppraisalFailure, AppraisalResult, ComplianceSummary

__all__ = [
    # Main API function
    "appraise",
    # Core orchestration
    "AppraisalEngine",
    "AppraisalOptions",
    # Results
    "AppraisalFailure",
    "AppraisalResult",
    "ComplianceSummary",
]
