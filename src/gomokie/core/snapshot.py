"""Immutable game snapshot as reported by the engine.

The engine is the single source of truth: every successful mutating call
returns a complete snapshot, which replaces the previous one wholesale.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from gomokie.core.enums import GameModeKind, GameResult, Player, RuleSet
from gomokie.core.payload import (
    PayloadError,
    as_list,
    as_mapping,
    field,
    optional_field,
)

DEFAULT_BOARD_SIZE = 15

# ── Game modes ───────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class HumanVsAi:
    """Local human against the active engine profile."""

    human_color: Player = Player.BLACK

    @property
    def kind(self) -> GameModeKind:
        return GameModeKind.HUMAN_VS_AI

    def to_payload(self) -> dict[str, Any]:
        return {"type": self.kind.value, "humanColor": self.human_color.value}


@dataclass(frozen=True, slots=True)
class AiVsAi:
    """Two engine profiles playing each other unattended."""

    black_id: str
    white_id: str

    @property
    def kind(self) -> GameModeKind:
        return GameModeKind.AI_VS_AI

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "blackId": self.black_id,
            "whiteId": self.white_id,
        }


@dataclass(frozen=True, slots=True)
class HumanVsHuman:
    """Two humans sharing the board."""

    @property
    def kind(self) -> GameModeKind:
        return GameModeKind.HUMAN_VS_HUMAN

    def to_payload(self) -> dict[str, Any]:
        return {"type": self.kind.value}


GameMode = HumanVsAi | AiVsAi | HumanVsHuman


def game_mode_from_payload(value: object) -> GameMode:
    payload = as_mapping(value, "mode")
    kind = field(payload, "type", str)
    if kind == GameModeKind.HUMAN_VS_AI:
        return HumanVsAi(_player(field(payload, "humanColor", str)))
    if kind == GameModeKind.AI_VS_AI:
        return AiVsAi(
            black_id=field(payload, "blackId", str),
            white_id=field(payload, "whiteId", str),
        )
    if kind == GameModeKind.HUMAN_VS_HUMAN:
        return HumanVsHuman()
    raise PayloadError(f"unknown game mode {kind!r}")


# ── Moves ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Move:
    """A stone placed at (*x*, *y*) by *player*."""

    x: int
    y: int
    player: Player
    t: int | None = None

    @classmethod
    def from_payload(cls, value: object) -> Move:
        payload = as_mapping(value, "move")
        return cls(
            x=field(payload, "x", int),
            y=field(payload, "y", int),
            player=_player(field(payload, "player", str)),
            t=optional_field(payload, "t", int, None),  # type: ignore[arg-type]
        )


# ── Snapshot ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class GameSnapshot:
    """Authoritative game state after the last successful engine call.

    Invariants: ``len(board) == board_size ** 2``; a snapshot with a
    ``result`` accepts no further moves.
    """

    board_size: int
    board: tuple[Player | None, ...]
    rule_set: RuleSet
    to_move: Player
    result: GameResult | None
    moves: tuple[Move, ...]
    mode: GameMode
    can_human_move: bool

    def __post_init__(self) -> None:
        if self.board_size <= 0:
            raise PayloadError(f"invalid board size {self.board_size}")
        if len(self.board) != self.board_size * self.board_size:
            raise PayloadError(
                f"board has {len(self.board)} cells, "
                f"expected {self.board_size * self.board_size}"
            )

    @classmethod
    def initial(cls, board_size: int = DEFAULT_BOARD_SIZE) -> GameSnapshot:
        """Empty board shown before the engine has reported anything."""
        return cls(
            board_size=board_size,
            board=(None,) * (board_size * board_size),
            rule_set=RuleSet.STANDARD,
            to_move=Player.BLACK,
            result=None,
            moves=(),
            mode=HumanVsAi(),
            can_human_move=True,
        )

    @classmethod
    def from_payload(cls, value: object) -> GameSnapshot:
        payload = as_mapping(value, "snapshot")
        cells = as_list(payload.get("board"), "board")
        board = tuple(None if cell is None else _player(cell) for cell in cells)
        raw_result = payload.get("result")
        try:
            rule_set = RuleSet(field(payload, "ruleSet", str))
            result = None if raw_result is None else GameResult(raw_result)
        except ValueError as exc:
            raise PayloadError(str(exc)) from exc
        return cls(
            board_size=field(payload, "boardSize", int),
            board=board,
            rule_set=rule_set,
            to_move=_player(field(payload, "toMove", str)),
            result=result,
            moves=tuple(
                Move.from_payload(m) for m in as_list(payload.get("moves"), "moves")
            ),
            mode=game_mode_from_payload(payload.get("mode")),
            can_human_move=field(payload, "canHumanMove", bool),
        )

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def is_terminal(self) -> bool:
        return self.result is not None

    @property
    def last_move(self) -> Move | None:
        return self.moves[-1] if self.moves else None

    @property
    def reply_owed(self) -> bool:
        """True when the engine must answer before the human may move again."""
        return (
            self.result is None
            and self.mode.kind == GameModeKind.HUMAN_VS_AI
            and not self.can_human_move
        )

    def cell(self, x: int, y: int) -> Player | None:
        if not self.in_bounds(x, y):
            raise IndexError(f"cell ({x}, {y}) outside {self.board_size}x board")
        return self.board[y * self.board_size + x]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.board_size and 0 <= y < self.board_size

    def is_empty(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and self.cell(x, y) is None


def _player(value: object) -> Player:
    try:
        return Player(value)
    except ValueError as exc:
        raise PayloadError(f"unknown player {value!r}") from exc
