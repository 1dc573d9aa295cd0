# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Valuation calculation functions.

Contains static methods for the arithmetic shared across approaches:
clamping, rounding, date spans, dispersion statistics and discounting. These
functions are pure (math-only); components delegate to them so each formula
has a single source of truth.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from pyxirr import npv
from scipy import stats as scipy_stats


class ValuationCalculations:
    """
    Pure mathematical helpers for appraisal computations.

    Static methods, independent of any record type or business rule.
    """

    @staticmethod
    def clamp(value: float, lower: float, upper: float) -> float:
        """Constrain value to the closed interval [lower, upper]."""
        return max(lower, min(upper, value))

    @staticmethod
    def round_half_up(value: float, digits: int = 0) -> float:
        """
        Round half away from negative infinity, as spreadsheet tools do.

        Python's built-in `round` uses banker's rounding, which makes scores
        like 72.5 round to 72. Appraisal scores are reported with half-up
        rounding instead.
        """
        factor = 10**digits
        return math.floor(value * factor + 0.5) / factor

    @staticmethod
    def months_between(start: date, end: date, days_per_month: float = 30.44) -> float:
        """Elapsed months between two dates on a fixed day-count basis."""
        return (end - start).days / days_per_month

    @staticmethod
    def years_between(start_year: int, as_of: date) -> int:
        """Whole-year age of a building constructed in start_year."""
        return as_of.year - start_year

    @staticmethod
    def band_value(
        value: float, bands: Iterable[Tuple[float, float]], default: float = 0.0
    ) -> float:
        """
        Return the result of the first (threshold, result) band value exceeds.

        Bands must be ordered from the highest threshold to the lowest.
        """
        for threshold, result in bands:
            if value > threshold:
                return result
        return default

    @staticmethod
    def round_to_denomination(
        value: float, tiers: Iterable[Tuple[float, float]], default: float
    ) -> float:
        """
        Round value to the denomination appropriate to its magnitude.

        Tiers are (minimum value, denomination) ordered from largest to smallest.
        """
        denomination = default
        for minimum, step in tiers:
            if value >= minimum:
                denomination = step
                break
        return ValuationCalculations.round_half_up(value / denomination) * denomination

    @staticmethod
    def population_statistics(values: Sequence[float]) -> Dict[str, float]:
        """
        Population dispersion statistics of a set of values.

        Returns:
            Dictionary with mean, median, std_dev, variance, coefficient of
            variation, min, max and count. An empty input yields zeros.
        """
        if len(values) == 0:
            return {
                "mean": 0.0,
                "median": 0.0,
                "std_dev": 0.0,
                "variance": 0.0,
                "coefficient_of_variation": 0.0,
                "min": 0.0,
                "max": 0.0,
                "count": 0,
            }
        series = pd.Series(values, dtype=float)
        mean = float(series.mean())
        std_dev = float(series.std(ddof=0))
        return {
            "mean": mean,
            "median": float(series.median()),
            "std_dev": std_dev,
            "variance": float(series.var(ddof=0)),
            "coefficient_of_variation": std_dev / mean if mean > 0 else 0.0,
            "min": float(series.min()),
            "max": float(series.max()),
            "count": len(series),
        }

    @staticmethod
    def weighted_average(values: Sequence[float], weights: Sequence[float]) -> float:
        """Weighted arithmetic mean; raises ValueError when weights sum to zero."""
        if len(values) == 0 or float(np.sum(weights)) <= 0:
            raise ValueError("Weighted average requires at least one positive weight")
        return float(np.average(np.asarray(values, dtype=float), weights=weights))

    @staticmethod
    def confidence_interval(
        values: Sequence[float], confidence_level: float = 0.95
    ) -> Optional[Tuple[float, float]]:
        """
        Student-t confidence interval for the mean of a small sample.

        Returns None when fewer than two observations are available.
        """
        sample_size = len(values)
        if sample_size < 2:
            return None
        series = pd.Series(values, dtype=float)
        mean = float(series.mean())
        std_error = float(series.std()) / math.sqrt(sample_size)
        t_value = scipy_stats.t.ppf((1 + confidence_level) / 2, sample_size - 1)
        margin = float(t_value) * std_error
        return (mean - margin, mean + margin)

    @staticmethod
    def present_value(rate: float, cash_flows: List[float]) -> float:
        """
        Present value of end-of-period cash flows.

        The first cash flow is discounted one full period, matching annual
        projections that start one year after the valuation date.
        """
        if not cash_flows:
            return 0.0
        return float(npv(rate, cash_flows, start_from_zero=False))
