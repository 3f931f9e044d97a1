"""Shared test fixtures for dilutionscope."""

import pytest

from dilutionscope.config import DetectionConfig


@pytest.fixture
def twofold_ladder() -> list[float]:
    """Complete 2-fold serial dilution, 8 concentrations."""
    return [1000.0, 500.0, 250.0, 125.0, 62.5, 31.25, 15.625, 7.8125]


@pytest.fixture
def tenfold_ladder() -> list[float]:
    return [100000.0, 10000.0, 1000.0, 100.0, 10.0, 1.0]


@pytest.fixture
def half_log_ladder() -> list[float]:
    """Half-log series as typed by hand (rounded to a few digits)."""
    return [10000, 3162, 1000, 316, 100, 32, 10]


@pytest.fixture
def outlier_ladder() -> list[float]:
    """2-fold ladder whose third value was mis-typed (300 instead of 250)."""
    return [1000.0, 500.0, 300.0, 125.0, 62.5, 31.25, 15.625, 7.8125]


@pytest.fixture
def gapped_ladder() -> list[float]:
    """2-fold ladder with 500, 125 and 62.5 missing."""
    return [1000.0, 250.0, 31.25]


@pytest.fixture
def duplicate_ladder() -> list[float]:
    return [1000.0, 500.0, 500.0, 250.0, 125.0]


@pytest.fixture
def random_values() -> list[float]:
    """Values with no constant step between them."""
    return [100.0, 37.0, 29.0, 4.1, 3.9]


@pytest.fixture
def default_config() -> DetectionConfig:
    return DetectionConfig()
