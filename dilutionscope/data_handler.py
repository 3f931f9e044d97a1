"""Sanitize raw concentration values and arrange them into a dilution ladder."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SanitizedInput:
    """Strictly positive, finite concentrations in their original order."""
    values: tuple[float, ...]
    n_dropped: int

    @property
    def n_valid(self) -> int:
        return len(self.values)

    def is_sufficient(self, min_points: int = 3) -> bool:
        return self.n_valid >= min_points

    @property
    def is_degenerate(self) -> bool:
        """True when there is no variation to infer a dilution step from."""
        return self.n_valid == 0 or max(self.values) == min(self.values)


@dataclass(frozen=True)
class DilutionLadder:
    """Sanitized values sorted high → low, plus the step ratios between them."""
    values: tuple[float, ...]
    order: tuple[int, ...]        # ladder position -> index into the sanitized values
    ratios: tuple[float, ...]
    log_ratios: tuple[float, ...]

    def __len__(self) -> int:
        return len(self.values)

    @property
    def log_span(self) -> float:
        """Natural log of max / min."""
        return math.log(self.values[0]) - math.log(self.values[-1])


def _coerce_cell(value):
    """Pre-convert the cells pandas would misread as concentrations.

    Booleans (spreadsheet TRUE/FALSE) are not doses; integers beyond float
    range are treated as infinite so they are dropped like any other
    non-finite value.
    """
    if isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            return math.copysign(math.inf, value)
    return value


class ConcentrationHandler:
    """Turn a loosely-typed concentration column into analysis-ready ladders."""

    # ------------------------------------------------------------------
    # Spreadsheet hand-off
    # ------------------------------------------------------------------

    @staticmethod
    def from_headers(df: pd.DataFrame) -> list[float]:
        """Read concentration labels from the column headers of a wide DataFrame.

        Columns = doses, rows = replicate readings.  Headers that are not
        numeric come back as NaN and are dropped later by :meth:`sanitize`.
        """
        headers = pd.Series([str(c).strip() for c in df.columns], dtype=object)
        return pd.to_numeric(headers, errors="coerce").astype(float).tolist()

    # ------------------------------------------------------------------
    # Sanitizing & ladder construction
    # ------------------------------------------------------------------

    @staticmethod
    def sanitize(raw: Iterable) -> SanitizedInput:
        """Coerce to numbers and keep only finite, strictly positive values.

        Invalid entries (NaN, ±inf, zero, negative, non-numeric text,
        booleans, integers too large for a float) are dropped silently;
        their count is kept in ``n_dropped``.
        """
        series = pd.Series([_coerce_cell(v) for v in raw], dtype=object)
        numeric = pd.to_numeric(series, errors="coerce").to_numpy(dtype=float)
        with np.errstate(invalid="ignore"):
            keep = np.isfinite(numeric) & (numeric > 0)
        n_dropped = int((~keep).sum())
        if n_dropped:
            logger.debug("Dropped %d invalid concentration values", n_dropped)
        return SanitizedInput(
            values=tuple(float(v) for v in numeric[keep]),
            n_dropped=n_dropped,
        )

    @staticmethod
    def build_ladder(values: Iterable[float]) -> DilutionLadder:
        """Sort descending (stable) and compute consecutive ratios.

        ``ratios[i] = ladder[i] / ladder[i + 1]``.  Log ratios are taken as
        differences of logs so they stay finite even when a raw ratio
        overflows.
        """
        arr = np.asarray(list(values), dtype=float)
        order = np.argsort(-arr, kind="stable")
        ladder = arr[order]
        logs = np.log(ladder)
        log_ratios = logs[:-1] - logs[1:]
        with np.errstate(over="ignore"):
            ratios = ladder[:-1] / ladder[1:]
        return DilutionLadder(
            values=tuple(ladder.tolist()),
            order=tuple(int(i) for i in order),
            ratios=tuple(ratios.tolist()),
            log_ratios=tuple(log_ratios.tolist()),
        )
