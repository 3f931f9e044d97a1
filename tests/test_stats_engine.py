"""Tests for stats_engine module."""

import math

import numpy as np
import pytest

from dilutionscope.data_handler import ConcentrationHandler
from dilutionscope.stats_engine import RatioStatistics, profile_ratios


class TestProfileRatios:
    def test_constant_ratios(self):
        result = profile_ratios([2.0, 2.0, 2.0, 2.0])
        assert result.median == 2.0
        assert result.robust_std_dev == 0.0
        assert result.coefficient_of_variation == 0.0
        assert result.skewness == 0.0
        assert result.kurtosis == 0.0
        assert result.autocorrelation == 0.0

    def test_empty(self):
        assert profile_ratios([]) == RatioStatistics.empty()

    def test_ignores_non_finite(self):
        result = profile_ratios([2.0, np.nan, 2.0, np.inf, 4.0])
        assert result.median == 2.0

    def test_robust_sd_is_normal_scaled_mad(self):
        result = profile_ratios([1.0, 2.0, 3.0, 4.0, 100.0])
        # MAD = 1, scaled by 1 / Phi^-1(0.75)
        assert result.robust_std_dev == pytest.approx(1.4826, rel=1e-3)
        assert result.coefficient_of_variation == pytest.approx(1.4826 / 3, rel=1e-3)

    def test_skew_sign(self):
        right = profile_ratios([2.0, 2.0, 2.1, 2.0, 5.0])
        assert right.skewness > 0

    def test_single_ratio(self):
        result = profile_ratios([3.0])
        assert result.median == 3.0
        assert result.skewness == 0.0
        assert result.autocorrelation == 0.0

    def test_rounding_noise_is_flat(self):
        values = [1000.0 / 3.1 ** k for k in range(8)]
        ladder = ConcentrationHandler.build_ladder(values)
        result = profile_ratios(ladder.ratios)
        assert result.median == pytest.approx(3.1)
        assert result.autocorrelation == 0.0
        assert result.skewness == 0.0


class TestAutocorrelation:
    def test_linear_series_exceeds_geometric(self):
        linear = ConcentrationHandler.build_ladder([100, 90, 80, 70, 60, 50, 40, 30, 20, 10])
        geometric = ConcentrationHandler.build_ladder([1000 / 2 ** k for k in range(10)])
        linear_ac = profile_ratios(linear.ratios).autocorrelation
        geometric_ac = profile_ratios(geometric.ratios).autocorrelation
        assert abs(linear_ac) > abs(geometric_ac)
        assert linear_ac > 0

    def test_alternating_is_negative(self):
        result = profile_ratios([2.0, 3.0, 2.0, 3.0, 2.0, 3.0])
        assert result.autocorrelation < 0
        assert not math.isnan(result.autocorrelation)
