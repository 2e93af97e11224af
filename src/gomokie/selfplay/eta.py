"""Remaining-time estimation for self-play runs."""

from __future__ import annotations

import math

_MINUTE = 60
_HOUR = 60 * _MINUTE


def estimate_remaining_seconds(
    completed: int, total: int, elapsed_seconds: float
) -> float | None:
    """Linear throughput extrapolation of the time left.

    Returns ``None`` (undefined, never zero) while nothing has completed
    or the total is unknown.
    """
    if completed <= 0 or total <= 0:
        return None
    remaining_games = max(0, total - completed)
    return remaining_games * (elapsed_seconds / completed)


def format_duration(seconds: float) -> str:
    """Coarse human string: ``42s``, ``3m 07s`` or ``2h 05m``."""
    if not math.isfinite(seconds) or seconds <= 0:
        return "0s"
    mins = int(seconds // _MINUTE)
    secs = int(seconds % _MINUTE)
    if seconds >= _HOUR:
        hours, rem_mins = divmod(mins, 60)
        return f"{hours}h {rem_mins:02d}m"
    if mins > 0:
        return f"{mins}m {secs:02d}s"
    return f"{secs}s"
