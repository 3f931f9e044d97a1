"""Measure how well one dilution factor explains a ladder."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from scipy import stats

from .config import DetectionConfig
from .data_handler import DilutionLadder, SanitizedInput

# Converts a median absolute deviation into a normal-consistent SD (≈1.4826).
_MAD_TO_SD = 1.0 / float(stats.norm.ppf(0.75))


@dataclass(frozen=True)
class PatternEvidence:
    """Evidence behind one candidate, fixed at creation time.

    ``outliers`` index into ``data_points`` (the sanitized input order);
    ``gaps`` index into ``ratios``, gap ``i`` lying between ladder rungs
    ``i`` and ``i + 1``.  ``missing_concentrations`` holds, per gap, the
    rungs the ideal ladder predicts inside it.
    """
    data_points: tuple[float, ...]
    ratios: tuple[float, ...]
    consistency: float
    completeness: float
    outliers: tuple[int, ...]
    gaps: tuple[int, ...]
    ladder: tuple[float, ...]
    expected_points: int
    missing_concentrations: tuple[tuple[float, ...], ...]


def _flag_outliers(
    deviating: np.ndarray,
    log_ratios: np.ndarray,
    residuals: np.ndarray,
    log_factor: float,
    threshold: float,
    ladder: DilutionLadder,
) -> list[int]:
    """Map deviating ratios to the ladder positions that most likely caused them.

    Two adjacent deviating ratios point at the rung they share when that rung
    explains both: either their residuals have opposite signs (a misplaced
    value) or, merged, they span a whole number of steps (a stray value
    inserted between two real rungs).  A lone deviating ratio points at its
    lower rung, except at the top of the ladder where the top value is the
    odd one out (unless the two top values are duplicates, in which case the
    repeat is flagged).
    """
    positions: list[int] = []
    n_ratios = len(deviating)
    i = 0
    while i < n_ratios:
        if not deviating[i]:
            i += 1
            continue
        if i + 1 < n_ratios and deviating[i + 1]:
            merged = log_ratios[i] + log_ratios[i + 1]
            merged_steps = max(1.0, round(merged / log_factor))
            if (
                residuals[i] * residuals[i + 1] < 0
                or abs(merged - merged_steps * log_factor) <= threshold
            ):
                positions.append(i + 1)
                i += 2
                continue
        if i == 0 and ladder.values[0] != ladder.values[1]:
            positions.append(0)
        else:
            positions.append(i + 1)
        i += 1
    return positions


def build_evidence(
    sanitized: SanitizedInput,
    ladder: DilutionLadder,
    factor: float,
    config: DetectionConfig | None = None,
) -> PatternEvidence:
    """Score *ladder* against a constant step of *factor*.

    Each ratio is read as ``k`` whole steps of the factor (``k >= 2`` means
    skipped rungs) and judged on its log residual from ``factor ** k``.
    """
    cfg = config or DetectionConfig()
    log_factor = math.log(factor)
    log_ratios = np.asarray(ladder.log_ratios, dtype=float)
    n_points = len(ladder)

    steps = np.maximum(1.0, np.rint(log_ratios / log_factor))
    residuals = log_ratios - steps * log_factor
    scale = _MAD_TO_SD * float(np.median(np.abs(residuals)))

    threshold = min(
        max(cfg.outlier_sd_multiple * scale, math.log1p(cfg.ratio_tolerance)),
        math.log1p(cfg.max_ratio_tolerance),
    )
    deviating = (np.abs(residuals) > threshold) | (log_ratios < 0.5 * log_factor)
    consistent = ~deviating
    gap_mask = consistent & (steps >= 2)

    consistency = float(np.mean(consistent)) * max(0.0, 1.0 - scale)

    expected = max(2, int(round(ladder.log_span / log_factor)) + 1)
    missing_steps = int(np.sum(steps[gap_mask] - 1))
    completeness = min(
        1.0,
        n_points / expected,
        max(0.0, (expected - missing_steps) / expected),
    )

    gaps = [int(i) for i in np.flatnonzero(gap_mask)]
    missing = tuple(
        tuple(ladder.values[i] / factor ** j for j in range(1, int(steps[i])))
        for i in gaps
    )

    outlier_positions = _flag_outliers(
        deviating, log_ratios, residuals, log_factor, threshold, ladder
    )
    outliers = sorted({ladder.order[p] for p in outlier_positions})

    return PatternEvidence(
        data_points=sanitized.values,
        ratios=ladder.ratios,
        consistency=min(1.0, max(0.0, consistency)),
        completeness=completeness,
        outliers=tuple(outliers),
        gaps=tuple(gaps),
        ladder=ladder.values,
        expected_points=expected,
        missing_concentrations=missing,
    )
