"""Self-play calibration models and ETA helpers."""

from gomokie.selfplay.eta import estimate_remaining_seconds, format_duration
from gomokie.selfplay.models import (
    MAX_LEVEL,
    MIN_LEVEL,
    SelfPlayConfig,
    SelfPlayProgress,
    SelfPlayReport,
)

__all__ = [
    "MAX_LEVEL",
    "MIN_LEVEL",
    "SelfPlayConfig",
    "SelfPlayProgress",
    "SelfPlayReport",
    "estimate_remaining_seconds",
    "format_duration",
]
