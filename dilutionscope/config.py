"""Default configuration for dilution-pattern detection."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path

DEFAULT_SETTINGS_PATH = Path.home() / ".dilutionscope" / "settings.json"


class PatternType(Enum):
    LOG_SCALE = "log-scale"  # 10-fold steps
    HALF_LOG = "half-log"    # sqrt(10)-fold steps
    SERIAL = "serial"        # integer / half-integer fold steps
    CUSTOM = "custom"        # any other constant ratio

    @property
    def simplicity(self) -> int:
        """Rank used to break confidence ties (lower = simpler)."""
        return list(PatternType).index(self)


class QualityGrade(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"


@dataclass
class DetectionConfig:
    """All tunable tolerances and thresholds for a detection run."""

    # Input guards
    min_points: int = 3
    min_dilution_factor: float = 1.1

    # Factor classification (relative, measured in log space)
    class_tolerance: float = 0.05
    snap_tolerance: float = 0.015

    # Ratio evidence
    ratio_tolerance: float = 0.10
    max_ratio_tolerance: float = 0.20
    outlier_sd_multiple: float = 2.0
    lattice_trigger: float = 0.5  # in-band fraction below which gap lattices are searched

    # Scoring
    autocorrelation_threshold: float = 0.3
    autocorrelation_penalty: float = 0.5
    evidence_floor: float = 0.01
    evidence_ceiling: float = 0.99
    min_confidence: float = 0.1

    # Quality grading / diagnostics
    excellent_confidence: float = 0.95
    good_confidence: float = 0.85
    acceptable_confidence: float = 0.70
    recommended_points: int = 8
    max_outlier_fraction: float = 0.15
    narrow_span_decades: float = 2.0   # log10(max / min) below this is too narrow
    wide_span_decades: float = 6.0     # above this the range strains the instrument

    def validate(self) -> None:
        """Raise ``ValueError`` if any setting is outside its usable range."""
        if self.min_points < 3:
            raise ValueError(f"min_points must be at least 3, got {self.min_points}.")
        if self.min_dilution_factor <= 1.0:
            raise ValueError(
                f"min_dilution_factor must be > 1, got {self.min_dilution_factor}."
            )
        for name in (
            "class_tolerance", "snap_tolerance", "ratio_tolerance",
            "max_ratio_tolerance", "outlier_sd_multiple",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}.")
        if self.max_ratio_tolerance < self.ratio_tolerance:
            raise ValueError("max_ratio_tolerance must not be below ratio_tolerance.")
        for name in (
            "lattice_trigger", "autocorrelation_threshold", "autocorrelation_penalty",
            "min_confidence", "max_outlier_fraction",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must lie in [0, 1], got {value}.")
        if not 0.0 < self.evidence_floor < self.evidence_ceiling < 1.0:
            raise ValueError(
                "evidence_floor and evidence_ceiling must satisfy 0 < floor < ceiling < 1."
            )
        if not (
            self.acceptable_confidence <= self.good_confidence <= self.excellent_confidence
        ):
            raise ValueError("Quality cut-offs must be ordered acceptable <= good <= excellent.")
        if not 0.0 < self.narrow_span_decades < self.wide_span_decades:
            raise ValueError(
                "Span cut-offs must satisfy 0 < narrow_span_decades < wide_span_decades."
            )

    # ---- persistence ----

    def to_dict(self) -> dict:
        """Serialize to a JSON-friendly dict."""
        return asdict(self)

    def save(self, path: Path | None = None) -> None:
        """Save current settings to a JSON file."""
        path = path or DEFAULT_SETTINGS_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")

    @classmethod
    def load(cls, path: Path | None = None) -> DetectionConfig:
        """Load settings from JSON, falling back to defaults for missing keys."""
        path = path or DEFAULT_SETTINGS_PATH
        if not path.exists():
            return cls()
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return cls()
        if not isinstance(raw, dict):
            return cls()
        kwargs: dict = {}
        defaults = cls()
        for f in cls.__dataclass_fields__:
            if f not in raw:
                continue
            default = getattr(defaults, f)
            try:
                kwargs[f] = type(default)(raw[f])
            except (TypeError, ValueError):
                kwargs[f] = default
        return cls(**kwargs)
