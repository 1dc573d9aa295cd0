# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Default resolution tracking.

Every "use the supplied value, else market data, else a documented default"
step goes through an `AssumptionTracker`, which records the outcome so a
result can disclose which inputs were assumed rather than supplied.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, TypeVar

from pydantic import Field

from .enums import AssumptionSource
from .model import Model

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Assumption(Model):
    """A resolved input and where it came from."""

    name: str = Field(..., description="Dotted name of the resolved input.")
    value: Any = Field(..., description="Value used by the computation.")
    source: AssumptionSource


class AssumptionTracker:
    """Collects default-resolution records for one component run."""

    def __init__(self, scope: str):
        self.scope = scope
        self._records: List[Assumption] = []

    def resolve(
        self,
        name: str,
        supplied: Optional[T] = None,
        market: Optional[T] = None,
        default: Optional[T] = None,
    ) -> Optional[T]:
        """Return the first available of supplied, market and default values."""
        if supplied is not None:
            value, source = supplied, AssumptionSource.SUPPLIED
        elif market is not None:
            value, source = market, AssumptionSource.MARKET_DATA
        else:
            value, source = default, AssumptionSource.DEFAULT
        self.record(name, value, source)
        return value

    def record(self, name: str, value: Any, source: AssumptionSource) -> None:
        if source is not AssumptionSource.SUPPLIED:
            logger.debug(f"{self.scope}: {name} resolved from {source.value} ({value})")
        self._records.append(
            Assumption(name=f"{self.scope}.{name}", value=value, source=source)
        )

    @property
    def records(self) -> List[Assumption]:
        return list(self._records)

    @property
    def assumed(self) -> List[Assumption]:
        """Records whose value was not supplied by the caller."""
        return [r for r in self._records if r.source is not AssumptionSource.SUPPLIED]
