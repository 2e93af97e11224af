"""User-configurable client settings."""

from __future__ import annotations

from dataclasses import dataclass, field

from gomokie.selfplay.models import MAX_LEVEL, MIN_LEVEL, SelfPlayConfig
from gomokie.ui.autoplay import AutoPlaySpeed

# ── Settings data class ──────────────────────────────────────────────────────


@dataclass
class AppSettings:
    """All user-configurable settings."""

    # Engine
    engine_program: str = "gomoku-engine"
    engine_args: list[str] = field(default_factory=list)
    engine_first_move_delay_ms: int = 300

    # Watch mode
    autoplay_speed: AutoPlaySpeed = AutoPlaySpeed.MEDIUM

    # Sound
    sound_enabled: bool = False
    sound_volume: int = 80  # 0–100

    # Self-play
    games_per_pair: int = 30
    parallelism: int = 4
    min_level: int = MIN_LEVEL
    max_level: int = MAX_LEVEL

    def self_play_config(self) -> SelfPlayConfig:
        return SelfPlayConfig(
            games_per_pair=self.games_per_pair,
            parallelism=self.parallelism,
            min_level=self.min_level,
            max_level=self.max_level,
        )
