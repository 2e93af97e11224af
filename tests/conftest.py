"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest
from PyQt6.QtCore import QObject, pyqtSignal

from gomokie.engine.gateway import CallFailure, EngineCall, EngineCallError

SnapshotFactory = Callable[..., dict[str, Any]]


@pytest.fixture(scope="session")
def qapp() -> Iterator[object]:
    """Provide a singleton QCoreApplication for timer-based tests."""
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


class FakeGateway(QObject):
    """Records engine calls; tests settle them in any order they like."""

    event_received = pyqtSignal(str, object)

    def __init__(self) -> None:
        super().__init__()
        self.available = True
        self.calls: list[tuple[str, dict[str, Any], EngineCall]] = []

    def call(self, command: str, args: Any = None) -> EngineCall:
        if not self.available:
            return EngineCall.failed(command, EngineCallError.unavailable())
        call = EngineCall(command, len(self.calls) + 1)
        self.calls.append((str(command), dict(args or {}), call))
        return call

    # ── Test helpers ─────────────────────────────────────────────────────

    @property
    def commands(self) -> list[str]:
        return [command for command, _args, _call in self.calls]

    def pending(self) -> list[EngineCall]:
        return [call for _cmd, _args, call in self.calls if not call.is_done]

    def last(self, command: str | None = None) -> EngineCall:
        for name, _args, call in reversed(self.calls):
            if command is None or name == command:
                return call
        raise AssertionError(f"no {command or 'engine'} call was made")

    def last_args(self, command: str) -> dict[str, Any]:
        for name, args, _call in reversed(self.calls):
            if name == command:
                return args
        raise AssertionError(f"no {command} call was made")

    def reply(self, command: str, result: Any) -> None:
        self.last(command).resolve(result)

    def fail(
        self,
        command: str,
        message: str = "boom",
        failure: CallFailure = CallFailure.REJECTED,
    ) -> None:
        self.last(command).reject(EngineCallError(message, failure))

    def push(self, name: str, payload: Any) -> None:
        self.event_received.emit(name, payload)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


def snapshot_payload(
    *,
    size: int = 15,
    stones: dict[tuple[int, int], str] | None = None,
    to_move: str = "B",
    result: str | None = None,
    mode: dict[str, Any] | None = None,
    can_human_move: bool = True,
) -> dict[str, Any]:
    """Engine ``GameSnapshot`` payload with *stones* placed on the board."""
    stones = stones or {}
    board: list[str | None] = [None] * (size * size)
    for (x, y), player in stones.items():
        board[y * size + x] = player
    return {
        "boardSize": size,
        "board": board,
        "ruleSet": "standard",
        "toMove": to_move,
        "result": result,
        "moves": [
            {"x": x, "y": y, "player": player} for (x, y), player in stones.items()
        ],
        "mode": mode or {"type": "human_vs_ai", "humanColor": "B"},
        "canHumanMove": can_human_move,
    }


@pytest.fixture
def make_snapshot() -> SnapshotFactory:
    return snapshot_payload


def ai_vs_ai_mode(black: str = "lvl-3", white: str = "lvl-5") -> dict[str, Any]:
    return {"type": "ai_vs_ai", "blackId": black, "whiteId": white}


@pytest.fixture
def watch_mode() -> dict[str, Any]:
    return ai_vs_ai_mode()
