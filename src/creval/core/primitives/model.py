# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base Pydantic model with common configuration.

    Immutable records parsed once at the system boundary. Appraisal inputs are
    never mutated by the engine; derived state lives in result records.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,  # Inputs are read-only for the duration of a run
        extra="forbid",  # Catches typos and missing field definitions immediately
    )
