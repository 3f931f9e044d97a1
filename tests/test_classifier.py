"""Tests for factor classification and hypothesis generation."""

import math

import pytest

from dilutionscope.classifier import (
    ANCHORS,
    HALF_LOG_FACTOR,
    classify_factor,
    generate_hypotheses,
)
from dilutionscope.config import DetectionConfig, PatternType
from dilutionscope.data_handler import ConcentrationHandler
from dilutionscope.stats_engine import profile_ratios


def _hypotheses(values, config=None):
    ladder = ConcentrationHandler.build_ladder(values)
    return generate_hypotheses(ladder, profile_ratios(ladder.ratios), config)


class TestClassifyFactor:
    def test_exact_serial(self):
        assert classify_factor(2.0) == [(PatternType.SERIAL, 2.0)]
        assert classify_factor(5.0) == [(PatternType.SERIAL, 5.0)]

    def test_log_scale(self):
        assert classify_factor(10.0) == [(PatternType.LOG_SCALE, 10.0)]

    def test_half_log(self):
        assert classify_factor(math.sqrt(10)) == [(PatternType.HALF_LOG, HALF_LOG_FACTOR)]

    def test_snaps_close_factor_without_custom(self):
        assert classify_factor(2.02) == [(PatternType.SERIAL, 2.0)]

    def test_ambiguous_factor_yields_several_labels(self):
        labels = classify_factor(3.1)
        assert labels == [
            (PatternType.HALF_LOG, HALF_LOG_FACTOR),
            (PatternType.SERIAL, 3.0),
            (PatternType.CUSTOM, 3.1),
        ]

    def test_near_anchor_keeps_custom(self):
        assert classify_factor(10.3) == [
            (PatternType.LOG_SCALE, 10.0),
            (PatternType.CUSTOM, 10.3),
        ]

    def test_uncommon_factor_is_custom(self):
        assert classify_factor(1.3) == [(PatternType.CUSTOM, 1.3)]

    @pytest.mark.parametrize("factor", [1.05, 1.0, 0.5, float("nan"), float("inf")])
    def test_unclassifiable(self, factor):
        assert classify_factor(factor) == []

    def test_tighter_tolerance(self):
        cfg = DetectionConfig(class_tolerance=0.01)
        assert (PatternType.SERIAL, 3.0) not in classify_factor(3.1, cfg)

    def test_anchor_priority_order(self):
        types = [t for t, _ in ANCHORS]
        assert types[0] == PatternType.LOG_SCALE
        assert types[1] == PatternType.HALF_LOG
        assert set(types[2:]) == {PatternType.SERIAL}


class TestGenerateHypotheses:
    def test_perfect_ladder_single_hypothesis(self, twofold_ladder):
        hyps = _hypotheses(twofold_ladder)
        assert len(hyps) == 1
        assert hyps[0].pattern_type == PatternType.SERIAL
        assert hyps[0].factor == 2.0
        assert hyps[0].source == "median"

    def test_half_log(self, half_log_ladder):
        hyps = _hypotheses(half_log_ladder)
        assert [h.pattern_type for h in hyps] == [PatternType.HALF_LOG]
        assert hyps[0].observed_factor == pytest.approx(HALF_LOG_FACTOR, rel=1e-3)

    def test_gap_lattice(self, gapped_ladder):
        hyps = _hypotheses(gapped_ladder)
        lattice = [h for h in hyps if h.source == "lattice"]
        assert len(lattice) == 1
        assert lattice[0].pattern_type == PatternType.SERIAL
        assert lattice[0].factor == 2.0

    def test_no_lattice_for_regular_ladder(self, outlier_ladder):
        hyps = _hypotheses(outlier_ladder)
        assert all(h.source != "lattice" for h in hyps)

    def test_deduplicated(self, twofold_ladder):
        hyps = _hypotheses(twofold_ladder)
        keys = [(h.pattern_type, h.factor) for h in hyps]
        assert len(keys) == len(set(keys))

    def test_unclassifiable_ratios(self):
        # every step is ~1.02-fold, below the minimum dilution factor
        assert _hypotheses([100.0, 98.0, 96.0, 94.1]) == []
