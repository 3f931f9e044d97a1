"""Propose dilution-factor hypotheses and label them with a pattern type."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from .config import DetectionConfig, PatternType
from .data_handler import DilutionLadder
from .stats_engine import RatioStatistics

logger = logging.getLogger(__name__)

HALF_LOG_FACTOR = math.sqrt(10.0)

# Lab-common integer / half-integer fold steps.  10 is deliberately absent:
# it always classifies as log-scale.
SERIAL_FACTORS = (1.5, 2.0, 2.5, 3.0, 3.5, 4.0, 4.5, 5.0, 6.0, 7.0, 8.0, 9.0)

# Canonical factors in classification priority order.
ANCHORS: tuple[tuple[PatternType, float], ...] = (
    (PatternType.LOG_SCALE, 10.0),
    (PatternType.HALF_LOG, HALF_LOG_FACTOR),
    *((PatternType.SERIAL, f) for f in SERIAL_FACTORS),
)


@dataclass(frozen=True)
class FactorHypothesis:
    """One candidate explanation of the ladder, before any evidence is scored."""
    pattern_type: PatternType
    factor: float           # factor the evidence is measured against
    observed_factor: float  # empirical estimate the hypothesis came from
    source: str             # "median" / "span" / "lattice"


def _log_distance(a: float, b: float) -> float:
    return abs(math.log(a / b))


def classify_factor(
    factor: float, config: DetectionConfig | None = None
) -> list[tuple[PatternType, float]]:
    """Return every (type, factor) label that fits *factor*, most canonical first.

    Anchored labels carry the anchor value; a ``custom`` label with the raw
    factor is appended unless the factor sits on an anchor.
    """
    cfg = config or DetectionConfig()
    if not math.isfinite(factor) or factor < cfg.min_dilution_factor:
        return []

    class_band = math.log1p(cfg.class_tolerance)
    snap_band = math.log1p(cfg.snap_tolerance)

    labels = [
        (ptype, anchor) for ptype, anchor in ANCHORS
        if _log_distance(factor, anchor) <= class_band
    ]
    if not any(_log_distance(factor, anchor) <= snap_band for _, anchor in labels):
        labels.append((PatternType.CUSTOM, factor))
    return labels


def _in_band_fraction(log_ratios: np.ndarray, factor: float, band: float) -> float:
    if not math.isfinite(factor) or factor <= 1.0:
        return 0.0
    return float(np.mean(np.abs(log_ratios - math.log(factor)) <= band))


def _lattice_factor(log_ratios: np.ndarray, config: DetectionConfig) -> float | None:
    """Largest factor of which every ratio is a whole number of steps (some ≥ 2).

    Recovers the true step of a ladder whose intermediate rungs are missing,
    e.g. ratios 4 and 8 are 2 and 3 steps of a 2-fold ladder.
    """
    band = math.log1p(config.ratio_tolerance)
    bases = [anchor for _, anchor in ANCHORS]
    smallest = float(np.exp(log_ratios.min()))
    if smallest >= config.min_dilution_factor:
        bases.append(smallest)

    for base in sorted(bases, reverse=True):
        log_base = math.log(base)
        steps = np.rint(log_ratios / log_base)
        residuals = np.abs(log_ratios - steps * log_base)
        if np.all(steps >= 1) and np.all(residuals <= band) and np.any(steps >= 2):
            return base
    return None


def generate_hypotheses(
    ladder: DilutionLadder,
    statistics: RatioStatistics,
    config: DetectionConfig | None = None,
) -> list[FactorHypothesis]:
    """Combine the span factor, the median ratio and (if needed) a gap lattice.

    Returns de-duplicated hypotheses in generation order; an empty list means
    the ratios show no usable central tendency.
    """
    cfg = config or DetectionConfig()
    log_ratios = np.asarray(ladder.log_ratios, dtype=float)
    if log_ratios.size == 0:
        return []

    span_factor = float(np.exp(ladder.log_span / log_ratios.size))
    estimates = [("median", statistics.median), ("span", span_factor)]

    band = math.log1p(cfg.ratio_tolerance)
    if _in_band_fraction(log_ratios, statistics.median, band) < cfg.lattice_trigger:
        lattice = _lattice_factor(log_ratios, cfg)
        if lattice is not None:
            estimates.append(("lattice", lattice))

    snap_band = math.log1p(cfg.snap_tolerance)
    hypotheses: list[FactorHypothesis] = []
    for source, estimate in estimates:
        for ptype, factor in classify_factor(estimate, cfg):
            duplicate = any(
                h.pattern_type == ptype and _log_distance(h.factor, factor) <= snap_band
                for h in hypotheses
            )
            if not duplicate:
                hypotheses.append(FactorHypothesis(ptype, factor, estimate, source))

    logger.debug(
        "Generated %d hypotheses: %s",
        len(hypotheses),
        ", ".join(f"{h.pattern_type.value}@{h.factor:.4g}" for h in hypotheses),
    )
    return hypotheses
