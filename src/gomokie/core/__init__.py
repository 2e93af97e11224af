"""Core domain layer — immutable value models decoded from engine payloads.

Quick start::

    from gomokie.core import GameSnapshot

    snapshot = GameSnapshot.from_payload(payload)
    if snapshot.reply_owed:
        ...
"""

from gomokie.core.enums import GameModeKind, GameResult, Player, ProfileKind, RuleSet
from gomokie.core.payload import PayloadError
from gomokie.core.ratings import (
    BLACK_ADVANTAGE,
    AiConfig,
    LlmConfig,
    ProfileRating,
    RatingEntry,
    RatingsSnapshot,
    expected_score,
    format_record,
    format_win_rate,
)
from gomokie.core.snapshot import (
    AiVsAi,
    GameMode,
    GameSnapshot,
    HumanVsAi,
    HumanVsHuman,
    Move,
    game_mode_from_payload,
)
from gomokie.core.users import UserInfo, UsersSnapshot

__all__ = [
    # Enums
    "GameModeKind",
    "GameResult",
    "Player",
    "ProfileKind",
    "RuleSet",
    # Game
    "AiVsAi",
    "GameMode",
    "GameSnapshot",
    "HumanVsAi",
    "HumanVsHuman",
    "Move",
    "PayloadError",
    "game_mode_from_payload",
    # Ratings
    "BLACK_ADVANTAGE",
    "AiConfig",
    "LlmConfig",
    "ProfileRating",
    "RatingEntry",
    "RatingsSnapshot",
    "expected_score",
    "format_record",
    "format_win_rate",
    # Users
    "UserInfo",
    "UsersSnapshot",
]
