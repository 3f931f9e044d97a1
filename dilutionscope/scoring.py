"""Bayesian confidence: laboratory priors updated by ladder evidence."""

from __future__ import annotations

from .config import DetectionConfig, PatternType
from .evidence import PatternEvidence
from .stats_engine import RatioStatistics

# Prior belief that a ladder was built with a given step, from how often the
# step is used at the bench.
SERIAL_PRIORS: dict[float, float] = {
    2.0: 0.60,
    3.0: 0.50,
    5.0: 0.45,
    4.0: 0.35,
}
TYPE_PRIORS: dict[PatternType, float] = {
    PatternType.LOG_SCALE: 0.60,
    PatternType.HALF_LOG: 0.50,
    PatternType.SERIAL: 0.20,  # uncommon fold steps (1.5, 6, 7, 8, ...)
    PatternType.CUSTOM: 0.15,
}


def lab_prior(pattern_type: PatternType, factor: float) -> float:
    """Prior probability for a (type, factor) hypothesis."""
    if pattern_type == PatternType.SERIAL:
        return SERIAL_PRIORS.get(round(factor, 6), TYPE_PRIORS[PatternType.SERIAL])
    return TYPE_PRIORS[pattern_type]


def autocorrelation_factor(
    statistics: RatioStatistics, config: DetectionConfig | None = None
) -> float:
    """Penalty multiplier for ratios that drift systematically.

    An additive (linear) series has ratios creeping upward along the ladder,
    which shows up as positive lag-1 autocorrelation.
    """
    cfg = config or DetectionConfig()
    excess = statistics.autocorrelation - cfg.autocorrelation_threshold
    if excess <= 0:
        return 1.0
    span = 1.0 - cfg.autocorrelation_threshold
    return 1.0 - cfg.autocorrelation_penalty * min(1.0, excess / span)


def evidence_likelihood(
    evidence: PatternEvidence,
    statistics: RatioStatistics,
    config: DetectionConfig | None = None,
) -> float:
    """Consistency × completeness, discounted for outliers and drift."""
    n_points = len(evidence.data_points)
    outlier_discount = 1.0 - len(evidence.outliers) / n_points if n_points else 0.0
    likelihood = (
        evidence.consistency
        * evidence.completeness
        * outlier_discount
        * autocorrelation_factor(statistics, config)
    )
    return min(1.0, max(0.0, likelihood))


def posterior_confidence(
    prior: float, likelihood: float, config: DetectionConfig | None = None
) -> float:
    """Update *prior* with evidence strength derived from *likelihood*.

    Strength ``e`` is the likelihood mapped onto [floor, ceiling]; the
    posterior odds are the prior odds times ``e / (1 - e)``.  Clean evidence
    (e → ceiling) overrides a weak prior, while e = 0.5 leaves the prior
    unchanged, so equally weak evidence favours the more common factor.
    """
    cfg = config or DetectionConfig()
    strength = cfg.evidence_floor + (cfg.evidence_ceiling - cfg.evidence_floor) * likelihood
    support = prior * strength
    against = (1.0 - prior) * (1.0 - strength)
    return support / (support + against)


def score_candidate(
    pattern_type: PatternType,
    factor: float,
    evidence: PatternEvidence,
    statistics: RatioStatistics,
    config: DetectionConfig | None = None,
) -> float:
    """Posterior confidence for one classified candidate."""
    likelihood = evidence_likelihood(evidence, statistics, config)
    return posterior_confidence(lab_prior(pattern_type, factor), likelihood, config)
