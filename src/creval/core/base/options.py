# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Run options for an appraisal.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import Field

from ..primitives import ApproachKind, Model
from .adjustment import Adjustment


class AppraisalOptions(Model):
    """
    Caller preferences for one appraisal run.

    Attributes:
        include_all_approaches: Run the cost approach regardless of building
            age or highest and best use
        preferred_approach: Approach whose reconciliation weight is boosted
        uspap_compliance: Request the detailed reconciliation narrative
        user_adjustments: Per-comparable adjustment overrides, keyed by
            comparable id (or list position) then adjustment name
        approaches: Restrict the run to these approaches; None runs every
            applicable approach
    """

    include_all_approaches: bool = False
    preferred_approach: Optional[ApproachKind] = None
    uspap_compliance: bool = False
    user_adjustments: Dict[str, Dict[str, Union[float, Adjustment]]] = Field(
        default_factory=dict
    )
    approaches: Optional[List[ApproachKind]] = Field(
        default=None, description="Requested subset of approaches."
    )

    def requested(self, kind: ApproachKind) -> bool:
        return self.approaches is None or kind in self.approaches

    @property
    def sole_approach(self) -> Optional[ApproachKind]:
        """The only requested approach, when exactly one was requested."""
        if self.approaches is not None and len(set(self.approaches)) == 1:
            return self.approaches[0]
        return None
