"""Core enumerations for the gomoku client domain."""

from __future__ import annotations

from enum import StrEnum


class Player(StrEnum):
    """Stone colour. Black always moves first."""

    BLACK = "B"
    WHITE = "W"

    @property
    def opposite(self) -> Player:
        return Player.WHITE if self is Player.BLACK else Player.BLACK


class GameResult(StrEnum):
    """Terminal outcome of a game."""

    BLACK_WINS = "B_WIN"
    WHITE_WINS = "W_WIN"
    DRAW = "DRAW"

    @property
    def winner(self) -> Player | None:
        if self is GameResult.BLACK_WINS:
            return Player.BLACK
        if self is GameResult.WHITE_WINS:
            return Player.WHITE
        return None


class RuleSet(StrEnum):
    """Rule variants understood by the engine."""

    STANDARD = "standard"


class GameModeKind(StrEnum):
    """Who controls each side of the board."""

    HUMAN_VS_AI = "human_vs_ai"
    AI_VS_AI = "ai_vs_ai"
    HUMAN_VS_HUMAN = "human_vs_human"


class ProfileKind(StrEnum):
    """Engine opponent family."""

    HEURISTIC = "heuristic"
    LLM = "llm"
