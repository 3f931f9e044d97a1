"""End-to-end: plate DataFrame → detection → summary table, report and figure."""

import matplotlib
matplotlib.use("Agg")

import asyncio

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from dilutionscope.config import DetectionConfig, PatternType
from dilutionscope.data_handler import ConcentrationHandler
from dilutionscope.detector import PatternDetector, candidates_to_dataframe
from dilutionscope.diagnostics import describe_candidate
from dilutionscope.plot_engine import plot_ladder


@pytest.fixture
def plate() -> pd.DataFrame:
    """Absorbance readings, one column per dose plus a blank column."""
    rng = np.random.default_rng(42)
    headers = ["1000", "500", "250", "125", "62.5", "31.25", "Blank"]
    return pd.DataFrame(rng.uniform(0.05, 2.0, size=(3, len(headers))), columns=headers)


class TestPipeline:
    def test_headers_to_report(self, plate):
        concentrations = ConcentrationHandler.from_headers(plate)
        detector = PatternDetector()
        result = detector.detect(concentrations)

        assert result[0].pattern_type == PatternType.SERIAL
        assert result[0].dilution_factor == 2.0
        assert result[0].evidence.data_points == (1000.0, 500.0, 250.0, 125.0, 62.5, 31.25)

        table = candidates_to_dataframe(result)
        assert table.loc[0, "Type"] == "serial"
        assert table.loc[0, "Outliers"] == 0

        messages = describe_candidate(result[0])
        assert messages[0].startswith("2-fold serial dilution")
        assert messages[1].startswith("Only 6 concentrations")

        fig = plot_ladder(result[0])
        assert len(fig.axes) == 1
        plt.close(fig)

    def test_saved_config_drives_detection(self, plate, tmp_path):
        path = tmp_path / "settings.json"
        DetectionConfig(min_points=7).save(path)
        detector = PatternDetector(DetectionConfig.load(path))
        assert detector.detect(ConcentrationHandler.from_headers(plate)) == []

    def test_async_pipeline(self, plate):
        concentrations = ConcentrationHandler.from_headers(plate)
        result = asyncio.run(PatternDetector().detect_async(concentrations))
        assert result == PatternDetector().detect(concentrations)
