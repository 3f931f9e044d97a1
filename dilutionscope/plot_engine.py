"""Diagnostic figure: observed concentrations against the ideal dilution ladder."""

from __future__ import annotations

from typing import TYPE_CHECKING

import matplotlib.pyplot as plt
import numpy as np

from .detector import PatternCandidate

if TYPE_CHECKING:
    from matplotlib.axes import Axes
    from matplotlib.figure import Figure

_OBSERVED_COLOR = "#1f77b4"
_OUTLIER_COLOR = "#d62728"
_MISSING_COLOR = "#7f7f7f"


def export_figure(fig: "Figure", path: str, dpi: int = 300) -> None:
    """Save figure to file. Format is inferred from extension by matplotlib."""
    fig.savefig(path, dpi=dpi, bbox_inches="tight")


def plot_ladder(
    candidate: PatternCandidate,
    ax: "Axes | None" = None,
    figsize: tuple[float, float] = (4.0, 3.5),
) -> "Figure":
    """Plot each observed rung at its position on the fitted ladder.

    X = number of dilution steps below the top concentration, Y = concentration
    (log scale).  Outliers are drawn in red, missing rungs as grey crosses.
    """
    ev = candidate.evidence
    factor = candidate.dilution_factor
    start = candidate.parameters.start_value

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    # Ideal ladder
    expected = candidate.expected_series()
    ax.plot(
        np.arange(len(expected)), expected,
        color="black", linestyle="--", linewidth=0.8, zorder=1,
        label=f"{factor:.4g}-fold ladder",
    )

    # Observed concentrations at their (fractional) step positions
    values = np.asarray(ev.data_points, dtype=float)
    steps = np.log(start / values) / np.log(factor)
    is_outlier = np.zeros(len(values), dtype=bool)
    is_outlier[list(ev.outliers)] = True
    ax.scatter(
        steps[~is_outlier], values[~is_outlier],
        color=_OBSERVED_COLOR, s=36, zorder=5, label="observed",
    )
    if is_outlier.any():
        ax.scatter(
            steps[is_outlier], values[is_outlier],
            color=_OUTLIER_COLOR, s=48, zorder=6, label="outlier",
        )

    missing = np.array([c for gap in ev.missing_concentrations for c in gap], dtype=float)
    if missing.size:
        ax.scatter(
            np.log(start / missing) / np.log(factor), missing,
            marker="x", color=_MISSING_COLOR, s=36, zorder=4, label="missing",
        )

    ax.set_yscale("log")
    ax.set_xlabel("Dilution step")
    ax.set_ylabel("Concentration")
    ax.set_title(f"{candidate.pattern_type.value} ({candidate.confidence:.0%})")
    ax.legend(frameon=False, fontsize="small")
    fig.tight_layout()
    return fig
