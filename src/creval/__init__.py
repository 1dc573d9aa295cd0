# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Creval - Commercial Real Estate Valuation Engine

Produces a reconciled market value for a commercial property from the three
approaches to value (sales comparison, income capitalization and cost),
supported by input validation, comparable ranking and a highest and best use
analysis.

Key Entry Points:
- creval.analysis.appraise() - Full appraisal returning a result or a structured failure
- creval.analysis.AppraisalEngine - Orchestrator that raises on failure
- creval.valuation.* - The individual approaches and reconciliation
- creval.core.* - Input records, settings and shared calculations

Example Usage:
    ```python
    from datetime import date

    from creval.analysis import appraise
    from creval.core import AppraisalSettings

    settings = AppraisalSettings(as_of_date=date(2025, 6, 30))
    result = appraise(subject, comparables, market_data, settings=settings)
    if not getattr(result, "error", False):
        print(f"Final value: ${result.final_value:,.0f}")
    ```
"""

import importlib
import logging

# Libraries leave handler configuration to the application
logging.getLogger(__name__).addHandler(logging.NullHandler())


# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "analysis",
    "comparables",
    "core",
    "hbu",
    "validation",
    "valuation",
]


_LAZY_MODULES = {
    "analysis": "creval.analysis",
    "comparables": "creval.comparables",
    "core": "creval.core",
    "hbu": "creval.hbu",
    "validation": "creval.validation",
    "valuation": "creval.valuation",
}


def __getattr__(name: str):
    module_path = _LAZY_MODULES.get(name)
    if module_path is None:
        raise AttributeError(f"module 'creval' has no attribute '{name}'")
    module = importlib.import_module(module_path)
    globals()[name] = module
    return module
