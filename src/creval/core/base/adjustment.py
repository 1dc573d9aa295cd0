# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Sale price adjustments.
"""

from __future__ import annotations

from typing import Dict, Union

from pydantic import Field

from ..primitives import AdjustmentKind, ConfidenceLevel, Model


class Adjustment(Model):
    """
    A named delta applied to a comparable's sale price.

    Percent adjustments are fractions of price (0.05 = +5%) and compound
    multiplicatively; dollar adjustments are absolute and sum additively.
    """

    name: str = Field(..., description="Adjustment category, e.g. 'location'.")
    kind: AdjustmentKind = AdjustmentKind.PERCENT
    amount: float = Field(..., description="Fraction for percent, currency for dollar.")
    explanation: str = ""
    confidence: ConfidenceLevel = ConfidenceLevel.MEDIUM

    @property
    def is_percent(self) -> bool:
        return self.kind is AdjustmentKind.PERCENT

    def dollar_value(self, sale_price: float) -> float:
        """Adjustment expressed in currency against a sale price."""
        if self.is_percent:
            return self.amount * sale_price
        return self.amount


# Caller overrides keyed by comparable id (or list index), then adjustment name.
# A bare number is a dollar adjustment.
UserAdjustments = Dict[str, Dict[str, Union[float, Adjustment]]]
