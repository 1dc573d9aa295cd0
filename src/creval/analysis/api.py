# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Appraisal API

Public entry point for running a full appraisal. Inputs may be typed records
or plain mappings; mappings are parsed once here, at the boundary. Failures
come back as an `AppraisalFailure` record rather than an exception.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from ..core.base import (
    AppraisalOptions,
    Comparable,
    MarketData,
    RentalComparable,
    SubjectProperty,
)
from ..core.errors import AppraisalError, ValidationFailedError
from ..core.primitives import AppraisalSettings
from .orchestrator import AppraisalEngine
from .results import AppraisalFailure, AppraisalResult

logger = logging.getLogger(__name__)


def appraise(
    subject: Union[SubjectProperty, Mapping[str, Any]],
    comparables: Sequence[Union[Comparable, Mapping[str, Any]]],
    market_data: Optional[Union[MarketData, Mapping[str, Any]]] = None,
    options: Optional[Union[AppraisalOptions, Mapping[str, Any]]] = None,
    settings: Optional[AppraisalSettings] = None,
    rental_comparables: Optional[Sequence[Union[RentalComparable, Mapping[str, Any]]]] = None,
) -> Union[AppraisalResult, AppraisalFailure]:
    """
    Run an appraisal and return its result or a structured failure.

    Workflow:
      1) Parse any mapping inputs into typed records
      2) Run the engine (validation, HBU, approaches, reconciliation)
      3) Convert a run-level failure into an `AppraisalFailure`

    Args:
        subject: The property under appraisal.
        comparables: Comparable sales; at least one is required.
        market_data: Market evidence and assumptions; may be empty.
        options: Run options.
        settings: Engine settings; defaults value the property as of today.
        rental_comparables: Rent evidence for the income approach.

    Returns:
        AppraisalResult on success, else AppraisalFailure naming the missing
        precondition.
    """
    # Step 1: Parse at the boundary
    try:
        subject = SubjectProperty.model_validate(subject)
        comparables = [Comparable.model_validate(c) for c in comparables or []]
        market_data = MarketData.model_validate(market_data) if market_data else None
        options = AppraisalOptions.model_validate(options) if options else None
        rental_comparables = [
            RentalComparable.model_validate(r) for r in rental_comparables or []
        ]
    except ValidationError as e:
        logger.warning(f"Appraisal input could not be parsed: {e.error_count()} error(s)")
        return AppraisalFailure(
            message="Appraisal input could not be parsed",
            stage="input",
            errors=[
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ],
        )

    # Step 2: Run
    try:
        return AppraisalEngine(settings).run(
            subject, comparables, market_data, options, rental_comparables
        )
    # Step 3: Structured failure
    except ValidationFailedError as e:
        return AppraisalFailure(
            message=e.message, stage=e.stage, errors=e.validation.errors, validation=e.validation
        )
    except AppraisalError as e:
        logger.error(f"Appraisal failed at {e.stage}: {e.message}")
        return AppraisalFailure(message=e.message, stage=e.stage, errors=[e.message])
    except Exception as e:
        logger.exception("Appraisal failed unexpectedly")
        message = f"{type(e).__name__}: {e}"
        return AppraisalFailure(message=message, stage="engine", errors=[message])
