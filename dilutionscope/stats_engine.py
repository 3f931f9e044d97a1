"""Robust descriptive statistics over a ladder's step ratios."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy import stats


# ------------------------------------------------------------------
# Result container
# ------------------------------------------------------------------

@dataclass(frozen=True)
class RatioStatistics:
    """Descriptive profile of a ratio sequence.

    These numbers describe the evidence; they are identical for every
    candidate built from the same input and are never used to pick a type.
    """
    median: float
    robust_std_dev: float
    coefficient_of_variation: float
    skewness: float
    kurtosis: float          # excess (Fisher) kurtosis
    autocorrelation: float   # lag-1

    @classmethod
    def empty(cls) -> RatioStatistics:
        return cls(0.0, 0.0, 0.0, 0.0, 0.0, 0.0)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

# Relative spread below which a sequence counts as constant.  Perfect ladders
# still carry ~1e-16 rounding noise, which would otherwise turn into
# arbitrary skewness / autocorrelation values.
_FLAT_RTOL = 1e-9


def _is_flat(values: np.ndarray) -> bool:
    return float(np.ptp(values)) <= _FLAT_RTOL * abs(float(np.mean(values)))


def _lag1_autocorrelation(values: np.ndarray) -> float:
    """Sum of lag-1 cross products over total sum of squares about the mean."""
    if len(values) < 2 or _is_flat(values):
        return 0.0
    centered = values - values.mean()
    denominator = float(np.sum(centered ** 2))
    if denominator == 0:
        return 0.0
    return float(np.sum(centered[:-1] * centered[1:]) / denominator)


# ------------------------------------------------------------------
# Profiler
# ------------------------------------------------------------------

def profile_ratios(ratios: Sequence[float]) -> RatioStatistics:
    """Compute the robust profile of *ratios* (non-finite entries ignored)."""
    x = np.asarray(ratios, dtype=float)
    x = x[np.isfinite(x)]
    if x.size == 0:
        return RatioStatistics.empty()

    median = float(np.median(x))
    robust_sd = float(stats.median_abs_deviation(x, scale="normal"))
    cv = robust_sd / median if median > 0 else 0.0

    if x.size < 2 or _is_flat(x):
        skewness = kurtosis = 0.0
    else:
        skewness = float(stats.skew(x))
        kurtosis = float(stats.kurtosis(x))

    return RatioStatistics(
        median=median,
        robust_std_dev=robust_sd,
        coefficient_of_variation=cv,
        skewness=skewness,
        kurtosis=kurtosis,
        autocorrelation=_lag1_autocorrelation(x),
    )
