# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Base classes for valuation approaches.
"""

from .approach import ApproachResult, BaseApproach, ValueRange, with_applicable_use

__all__ = ["ApproachResult", "BaseApproach", "ValueRange", "with_applicable_use"]
