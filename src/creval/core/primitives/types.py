# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Annotated

from pydantic import BeforeValidator, Field

from .enums import ConditionEnum

PositiveInt = Annotated[int, Field(ge=0)]
PositiveFloat = Annotated[float, Field(ge=0)]
FloatBetween0And1 = Annotated[float, Field(ge=0, le=1)]
Score0To100 = Annotated[float, Field(ge=0, le=100)]


def _coerce_condition(value):
    # Accept either the label or the 1-5 rating scale
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return ConditionEnum.from_score(value)
    if isinstance(value, str):
        return value.strip().lower()
    return value


ConditionInput = Annotated[ConditionEnum, BeforeValidator(_coerce_condition)]
