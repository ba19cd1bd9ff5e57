"""
Configuration constants for the exercise analytics engine.

All adjustable parameters are centralized here; values in the bundled
analytics.yaml (and ~/.liftlog/analytics.yaml) override them at runtime
through load_settings().
"""

from dataclasses import dataclass
from typing import Any, Final

from .engine.config_loader import load_model_config

# =============================================================================
# TREND CLASSIFICATION
# =============================================================================

TREND_SLOPE_THRESHOLD: Final[float] = 0.1  # |slope| per session index above this is a trend
TREND_MIN_POINTS: Final[int] = 2  # Non-zero points needed before a trend is reported

# =============================================================================
# REP-MAX ESTIMATION
# =============================================================================

EPLEY_DIVISOR: Final[float] = 30.0  # 1RM = load * (1 + reps / 30)
EST_3RM_FACTOR: Final[float] = 0.93  # Empirical 3RM as a fraction of 1RM
EST_5RM_FACTOR: Final[float] = 0.87  # Empirical 5RM as a fraction of 1RM

# =============================================================================
# TIME WINDOW
# =============================================================================

DEFAULT_TIME_FRAME: Final[str] = "1M"
DEFAULT_CUSTOM_DAYS: Final[int] = 30

# Months subtracted from "now" for each rolling time frame
TIME_FRAME_MONTHS: Final[dict[str, int]] = {
    "1M": 1,
    "3M": 3,
    "6M": 6,
    "1Y": 12,
}

# =============================================================================
# CHART AXIS
# =============================================================================

AXIS_SECTIONS: Final[int] = 10  # Horizontal gridline sections per axis
MIN_REASONABLE_MAX: Final[float] = 10.0  # Axis ceiling floor when all values are <= 0
NICE_STEP_MANTISSAS: Final[tuple[int, ...]] = (1, 2, 5, 10)

CHART_WIDTH: Final[int] = 60
CHART_HEIGHT: Final[int] = 20


@dataclass(frozen=True)
class AnalyticsSettings:
    """Resolved analytics tunables (Python defaults overridden by YAML)."""

    trend_slope_threshold: float = TREND_SLOPE_THRESHOLD
    est_3rm_factor: float = EST_3RM_FACTOR
    est_5rm_factor: float = EST_5RM_FACTOR
    default_time_frame: str = DEFAULT_TIME_FRAME
    default_custom_days: int = DEFAULT_CUSTOM_DAYS
    axis_sections: int = AXIS_SECTIONS
    min_reasonable_max: float = MIN_REASONABLE_MAX
    chart_width: int = CHART_WIDTH
    chart_height: int = CHART_HEIGHT

    def __post_init__(self) -> None:
        """Validate settings."""
        if self.trend_slope_threshold < 0:
            raise ValueError("trend_slope_threshold must be non-negative")
        if self.default_custom_days < 0:
            raise ValueError("default_custom_days must be non-negative")
        if self.axis_sections <= 0:
            raise ValueError("axis_sections must be positive")
        if self.min_reasonable_max <= 0:
            raise ValueError("min_reasonable_max must be positive")
        if self.default_time_frame not in ("1M", "3M", "6M", "1Y", "ALL", "CUSTOM"):
            raise ValueError(f"Invalid default_time_frame: {self.default_time_frame}")


def settings_from_dict(cfg: dict[str, Any]) -> AnalyticsSettings:
    """
    Build AnalyticsSettings from a merged YAML config dict.

    Unknown keys are ignored; missing keys keep the Python defaults.

    Args:
        cfg: Dict with optional "analytics" and "chart" sections

    Returns:
        AnalyticsSettings instance

    Raises:
        ValueError: If a value has the wrong type or is out of range
    """
    analytics = cfg.get("analytics") or {}
    chart = cfg.get("chart") or {}
    try:
        return AnalyticsSettings(
            trend_slope_threshold=float(
                analytics.get("trend_slope_threshold", TREND_SLOPE_THRESHOLD)
            ),
            est_3rm_factor=float(analytics.get("est_3rm_factor", EST_3RM_FACTOR)),
            est_5rm_factor=float(analytics.get("est_5rm_factor", EST_5RM_FACTOR)),
            default_time_frame=str(analytics.get("default_time_frame", DEFAULT_TIME_FRAME)),
            default_custom_days=int(analytics.get("default_custom_days", DEFAULT_CUSTOM_DAYS)),
            axis_sections=int(chart.get("axis_sections", AXIS_SECTIONS)),
            min_reasonable_max=float(chart.get("min_reasonable_max", MIN_REASONABLE_MAX)),
            chart_width=int(chart.get("width", CHART_WIDTH)),
            chart_height=int(chart.get("height", CHART_HEIGHT)),
        )
    except (TypeError, AttributeError) as e:
        raise ValueError(f"Invalid analytics config: {e}") from e


def load_settings() -> AnalyticsSettings:
    """Load settings from the bundled and user YAML files."""
    return settings_from_dict(load_model_config())
