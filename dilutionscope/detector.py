"""Dilution-pattern detection: the public entry point.

Pipeline (one direction only)::

    raw values → sanitize → guard → ladder → profile
               → hypotheses → evidence → score → rank

Every degenerate input (empty, fewer than three valid points, no variation,
nothing classifiable) produces an empty list rather than an exception.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Generator, Iterable

import numpy as np
import pandas as pd

from .classifier import generate_hypotheses
from .config import DetectionConfig, PatternType
from .data_handler import ConcentrationHandler
from .evidence import PatternEvidence, build_evidence
from .scoring import score_candidate
from .stats_engine import RatioStatistics, profile_ratios

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Result containers
# ------------------------------------------------------------------

@dataclass(frozen=True)
class PatternParameters:
    dilution_factor: float   # nominal step (anchor value, or fitted factor for custom)
    observed_factor: float   # empirical estimate behind the hypothesis
    start_value: float
    end_value: float
    step_count: int          # rungs a complete ladder would have


@dataclass(frozen=True)
class PatternCandidate:
    """One ranked explanation of a concentration column."""
    pattern_type: PatternType
    parameters: PatternParameters
    confidence: float
    evidence: PatternEvidence
    statistical_metrics: RatioStatistics

    @property
    def dilution_factor(self) -> float:
        return self.parameters.dilution_factor

    def expected_series(self) -> np.ndarray:
        """Ideal ladder from the top concentration down, one value per rung."""
        p = self.parameters
        return p.start_value / p.dilution_factor ** np.arange(p.step_count)


def candidates_to_dataframe(candidates: Iterable[PatternCandidate]) -> pd.DataFrame:
    """Return a summary DataFrame, one row per candidate in rank order."""
    rows = []
    for c in candidates:
        rows.append({
            "Type": c.pattern_type.value,
            "Dilution factor": c.dilution_factor,
            "Confidence": c.confidence,
            "Consistency": c.evidence.consistency,
            "Completeness": c.evidence.completeness,
            "Outliers": len(c.evidence.outliers),
            "Gaps": len(c.evidence.gaps),
        })
    columns = [
        "Type", "Dilution factor", "Confidence", "Consistency",
        "Completeness", "Outliers", "Gaps",
    ]
    return pd.DataFrame(rows, columns=columns)


# ------------------------------------------------------------------
# Engine
# ------------------------------------------------------------------

class PatternDetector:
    """Run the detection pipeline with one fixed configuration."""

    def __init__(self, config: DetectionConfig | None = None) -> None:
        self.config = config or DetectionConfig()
        self.config.validate()

    def detect(self, concentrations: Iterable) -> list[PatternCandidate]:
        """Main entry point.  Returns candidates by descending confidence."""
        stages = self._stages(concentrations)
        while True:
            try:
                next(stages)
            except StopIteration as done:
                return done.value

    async def detect_async(self, concentrations: Iterable) -> list[PatternCandidate]:
        """Same as :meth:`detect`, yielding to the event loop between stages."""
        stages = self._stages(concentrations)
        while True:
            try:
                next(stages)
            except StopIteration as done:
                return done.value
            await asyncio.sleep(0)

    def _stages(
        self, concentrations: Iterable
    ) -> Generator[str, None, list[PatternCandidate]]:
        """The pipeline, pausing (``yield``) only at stage boundaries."""
        cfg = self.config

        sanitized = ConcentrationHandler.sanitize(concentrations)
        if not sanitized.is_sufficient(cfg.min_points):
            logger.debug("Insufficient data: %d valid points", sanitized.n_valid)
            return []
        if sanitized.is_degenerate:
            logger.debug("Degenerate data: all %d values identical", sanitized.n_valid)
            return []
        yield "sanitize"

        ladder = ConcentrationHandler.build_ladder(sanitized.values)
        yield "ladder"

        statistics = profile_ratios(ladder.ratios)
        yield "profile"

        hypotheses = generate_hypotheses(ladder, statistics, cfg)
        if not hypotheses:
            return []
        yield "classify"

        evidence = [build_evidence(sanitized, ladder, h.factor, cfg) for h in hypotheses]
        yield "evidence"

        candidates: list[PatternCandidate] = []
        for hyp, ev in zip(hypotheses, evidence):
            confidence = score_candidate(hyp.pattern_type, hyp.factor, ev, statistics, cfg)
            if confidence < cfg.min_confidence:
                logger.debug(
                    "Discarded %s@%.4g (confidence %.3f)",
                    hyp.pattern_type.value, hyp.factor, confidence,
                )
                continue
            candidates.append(PatternCandidate(
                pattern_type=hyp.pattern_type,
                parameters=PatternParameters(
                    dilution_factor=hyp.factor,
                    observed_factor=hyp.observed_factor,
                    start_value=ladder.values[0],
                    end_value=ladder.values[-1],
                    step_count=ev.expected_points,
                ),
                confidence=confidence,
                evidence=ev,
                statistical_metrics=statistics,
            ))

        candidates.sort(key=lambda c: (-c.confidence, c.pattern_type.simplicity))
        return candidates


def detect_pattern(
    concentrations: Iterable, config: DetectionConfig | None = None
) -> list[PatternCandidate]:
    """Detect the dilution pattern in *concentrations* (any iterable of numbers)."""
    return PatternDetector(config).detect(concentrations)


async def detect_pattern_async(
    concentrations: Iterable, config: DetectionConfig | None = None
) -> list[PatternCandidate]:
    """Awaitable :func:`detect_pattern` for hosts that must stay responsive."""
    return await PatternDetector(config).detect_async(concentrations)
