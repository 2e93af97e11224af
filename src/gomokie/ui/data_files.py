"""Default file names for saved games and training exports."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

GAME_PREFIX = "gomoku"
TRAINING_PREFIX = "gomoku-training"


def timestamp(moment: datetime | None = None) -> str:
    """``YYYYMMDD-HHMMSS`` in local time."""
    return (moment or datetime.now()).strftime("%Y%m%d-%H%M%S")


def default_save_path(
    data_dir: str | Path | None, moment: datetime | None = None
) -> Path:
    return _in_dir(data_dir, f"{GAME_PREFIX}-{timestamp(moment)}.json")


def default_export_path(
    data_dir: str | Path | None, moment: datetime | None = None
) -> Path:
    return _in_dir(data_dir, f"{TRAINING_PREFIX}-{timestamp(moment)}.json")


def _in_dir(data_dir: str | Path | None, name: str) -> Path:
    # Bare file name when the active user's directory is not known yet.
    if not data_dir:
        return Path(name)
    return Path(data_dir) / name
