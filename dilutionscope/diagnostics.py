"""Turn candidate evidence into quality grades and messages for the scientist."""

from __future__ import annotations

import math
from typing import Sequence

from .config import DetectionConfig, QualityGrade
from .detector import PatternCandidate


def quality_grade(confidence: float, config: DetectionConfig | None = None) -> QualityGrade:
    cfg = config or DetectionConfig()
    if confidence >= cfg.excellent_confidence:
        return QualityGrade.EXCELLENT
    if confidence >= cfg.good_confidence:
        return QualityGrade.GOOD
    if confidence >= cfg.acceptable_confidence:
        return QualityGrade.ACCEPTABLE
    return QualityGrade.POOR


def _format_factor(candidate: PatternCandidate) -> str:
    """Short human label, e.g. ``"2-fold serial"`` or ``"half-log (3.162-fold)"``."""
    ptype = candidate.pattern_type.value
    factor = candidate.dilution_factor
    if ptype in ("serial", "custom"):
        return f"{factor:.4g}-fold {ptype}"
    return f"{ptype} ({factor:.4g}-fold)"


def describe_candidate(
    candidate: PatternCandidate, config: DetectionConfig | None = None
) -> list[str]:
    """Actionable diagnostics for one candidate, most important first."""
    cfg = config or DetectionConfig()
    ev = candidate.evidence
    label = _format_factor(candidate)
    grade = quality_grade(candidate.confidence, cfg)

    messages = [
        f"{label} dilution, {candidate.confidence:.0%} confidence ({grade.value})."
    ]

    n_points = len(ev.data_points)
    if n_points < cfg.recommended_points:
        messages.append(
            f"Only {n_points} concentrations; {cfg.recommended_points} or more "
            "are recommended for a reliable fit."
        )

    span = math.log10(ev.ladder[0] / ev.ladder[-1])
    if span < cfg.narrow_span_decades:
        messages.append(
            f"Concentration range spans only {span:.1f} log units; expand it to at least "
            f"{10 ** cfg.narrow_span_decades:.0f}-fold ({cfg.narrow_span_decades:g} log units)."
        )
    elif span > cfg.wide_span_decades:
        messages.append(
            f"Very wide concentration range ({span:.1f} log units); "
            "ensure instrument sensitivity across it."
        )

    for idx in ev.outliers:
        messages.append(
            f"Concentration {ev.data_points[idx]:.4g} (position {idx + 1}) does not "
            f"fit the {label} ladder."
        )

    if ev.outliers and len(ev.outliers) / n_points > cfg.max_outlier_fraction:
        messages.append(
            f"{len(ev.outliers) / n_points:.0%} of concentrations are outliers; "
            "check the plate layout."
        )

    for i, missing in zip(ev.gaps, ev.missing_concentrations):
        upper, lower = ev.ladder[i], ev.ladder[i + 1]
        expected = ", ".join(f"{c:.4g}" for c in missing)
        messages.append(
            f"Missing {len(missing)} step(s) between {upper:.4g} and {lower:.4g} "
            f"(expected {expected})."
        )

    return messages


def describe_detection(
    candidates: Sequence[PatternCandidate], config: DetectionConfig | None = None
) -> list[str]:
    """Messages for a whole detection run: the top candidate, or advice if none."""
    if not candidates:
        return [
            "No dilution pattern found; consider using a standard dilution series "
            "(e.g. 3-fold or 10-fold)."
        ]
    return describe_candidate(candidates[0], config)
