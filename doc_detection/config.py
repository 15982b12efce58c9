"""
Detector configuration

All thresholds and weights of the pipeline are design constants collected
here, so a caller can tune them without touching the geometry code.
"""

import os
from dataclasses import dataclass, fields, replace as dc_replace
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

from .exceptions import ConfigError

EDGE_STRATEGIES = ("canny", "adaptive")


@dataclass(frozen=True)
class DetectorConfig:
    """
    Parameters for one detection loop.

    Args:
        downsample_factor: Scale applied to video frames before processing
        cadence_ms: Delay between two detection passes
        enabled: When False, start() schedules nothing
        blur_kernel: Gaussian blur kernel size (odd)
        edge_strategy: "canny" for direct gradient edges, "adaptive" for
            adaptive thresholding followed by Canny
        canny_low: Lower hysteresis threshold
        canny_high: Upper hysteresis threshold
        adaptive_block_size: Neighbourhood size for adaptive thresholding (odd)
        adaptive_c: Constant subtracted from the local mean
        close_kernel: Structuring element size for morphological closing
        min_area_ratio: Contours smaller than this share of the frame are dropped
        approx_epsilon: Polygon approximation tolerance (ratio of perimeter)
        size_band: Area ratio band rewarded by the size score
        aspect_band: Width/height band rewarded by the aspect score
        acceptance_threshold: Score a candidate must exceed to be reported
        good_threshold: Score above which a detection is "good"
        excellent_threshold: Score above which a detection is "excellent"
    """
    downsample_factor: float = 0.5
    cadence_ms: int = 100
    enabled: bool = True

    blur_kernel: int = 5
    edge_strategy: str = "canny"
    canny_low: int = 50
    canny_high: int = 150
    adaptive_block_size: int = 11
    adaptive_c: int = 2
    close_kernel: int = 3

    min_area_ratio: float = 0.05
    approx_epsilon: float = 0.02

    size_band: Tuple[float, float] = (0.10, 0.80)
    aspect_band: Tuple[float, float] = (0.3, 3.0)
    size_weight: float = 30.0
    aspect_weight: float = 25.0
    rectangularity_weight: float = 25.0
    convexity_weight: float = 20.0

    acceptance_threshold: float = 40.0
    good_threshold: float = 60.0
    excellent_threshold: float = 80.0

    def __post_init__(self):
        self.validate()

    @property
    def cadence_s(self) -> float:
        return self.cadence_ms / 1000.0

    def validate(self) -> None:
        """Raise ConfigError if any value is unusable by the pipeline"""
        if not 0 < self.downsample_factor <= 1:
            raise ConfigError(f"downsample_factor must be in (0, 1], got {self.downsample_factor}")
        if self.cadence_ms < 0:
            raise ConfigError(f"cadence_ms must not be negative, got {self.cadence_ms}")
        for name in ("blur_kernel", "adaptive_block_size", "close_kernel"):
            value = getattr(self, name)
            if value < 1 or value % 2 == 0:
                raise ConfigError(f"{name} must be a positive odd number, got {value}")
        if self.adaptive_block_size < 3:
            raise ConfigError("adaptive_block_size must be at least 3")
        if self.edge_strategy not in EDGE_STRATEGIES:
            raise ConfigError(f"edge_strategy must be one of {EDGE_STRATEGIES}, got {self.edge_strategy!r}")
        if not 0 <= self.canny_low <= self.canny_high:
            raise ConfigError("canny thresholds must satisfy 0 <= low <= high")
        if not 0 <= self.min_area_ratio < 1:
            raise ConfigError(f"min_area_ratio must be in [0, 1), got {self.min_area_ratio}")
        if self.approx_epsilon <= 0:
            raise ConfigError("approx_epsilon must be positive")
        for name in ("size_band", "aspect_band"):
            low, high = getattr(self, name)
            if not 0 <= low < high:
                raise ConfigError(f"{name} must be an increasing pair, got ({low}, {high})")
        if not self.acceptance_threshold <= self.good_threshold <= self.excellent_threshold:
            raise ConfigError("thresholds must satisfy acceptance <= good <= excellent")

    def replace(self, **changes) -> "DetectorConfig":
        """Return a validated copy with the given fields changed"""
        return dc_replace(self, **changes)

    @classmethod
    def from_env(cls, prefix: str = "DOC_DETECT_", env: Optional[Dict[str, str]] = None) -> "DetectorConfig":
        """
        Build a config from environment variables.

        Each field can be overridden by PREFIX + FIELD_NAME in upper case,
        e.g. DOC_DETECT_DOWNSAMPLE_FACTOR=0.25. Band fields take two comma
        separated numbers. Variables from a .env file are loaded first.

        Args:
            prefix: Variable name prefix
            env: Mapping to read instead of os.environ (tests)

        Returns:
            DetectorConfig with overrides applied
        """
        if env is None:
            load_dotenv()
            env = os.environ

        overrides = {}
        for f in fields(cls):
            raw = env.get(prefix + f.name.upper())
            if raw is None or raw == "":
                continue
            overrides[f.name] = _parse_value(f.name, raw, getattr(cls, f.name))

        return cls(**overrides)


def _parse_value(name: str, raw: str, default):
    try:
        if isinstance(default, bool):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        if isinstance(default, tuple):
            low, high = (float(part) for part in raw.split(","))
            return (low, high)
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
        return raw.strip()
    except ValueError as e:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from e
