"""Move pipeline: sequences human moves, engine replies and game lifecycle.

The session owns the authoritative :class:`GameSnapshot`.  Every engine
call that returns a snapshot replaces it wholesale; nothing is ever
patched locally.  One in-flight guard serialises moves and engine steps so
two requests can never race against the engine's single game state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from gomokie.core.enums import RuleSet
from gomokie.core.snapshot import GameMode, GameSnapshot
from gomokie.engine.commands import Command
from gomokie.engine.gateway import CallSurface, EngineCallError
from gomokie.ui.pipeline import Flow, InFlightGuard, expect, run_flow
from gomokie.ui.session_errors import (
    GAME_SOURCES,
    ErrorSlot,
    ErrorSource,
    SessionError,
)

_LOGGER = logging.getLogger(__name__)


def _ignore_result(_payload: Any) -> None:
    return None


class GameSession(QObject):
    """Owns the game snapshot and every engine call that changes it."""

    snapshot_changed = pyqtSignal(object)  # GameSnapshot
    busy_changed = pyqtSignal(bool)
    move_accepted = pyqtSignal(object)  # GameSnapshot after a placed stone

    ENGINE_FIRST_MOVE_DELAY_MS = 300

    def __init__(
        self,
        *,
        gateway: CallSurface,
        errors: ErrorSlot,
        on_ratings_changed: Callable[[], None] | None = None,
        parent: QObject | None = None,
        engine_first_move_delay_ms: int = ENGINE_FIRST_MOVE_DELAY_MS,
    ) -> None:
        super().__init__(parent)
        self._gateway = gateway
        self._errors = errors
        self._on_ratings_changed = on_ratings_changed
        self._snapshot = GameSnapshot.initial()
        # Bumped by new/load so replies for an older game are discarded.
        self._epoch = 0

        self._move_guard = InFlightGuard("move pipeline", self.busy_changed.emit)
        self._reset_guard = InFlightGuard("game reset")

        self._engine_first_timer = QTimer(self)
        self._engine_first_timer.setSingleShot(True)
        self._engine_first_timer.setInterval(engine_first_move_delay_ms)
        self._engine_first_timer.timeout.connect(self._on_engine_first_move)

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def snapshot(self) -> GameSnapshot:
        return self._snapshot

    @property
    def busy(self) -> bool:
        return self._move_guard.busy

    @property
    def can_retry_reply(self) -> bool:
        """True when the UI should offer a retry of the engine reply."""
        return self._errors.can_retry and not self._snapshot.is_terminal

    # ── Moves ────────────────────────────────────────────────────────────

    def submit_move(self, x: int, y: int) -> None:
        """Place a human stone at (*x*, *y*) and let the engine answer.

        Calls that would be refused locally are silent no-ops; the UI is
        expected to have disabled the control already.
        """
        snapshot = self._snapshot
        if self._move_guard.busy or self._reset_guard.busy:
            return
        if snapshot.is_terminal or not snapshot.can_human_move:
            return
        if not snapshot.is_empty(x, y):
            return
        run_flow(self._submit_move_flow(x, y), self._on_flow_crash)

    def request_engine_step(self, force: bool = False) -> None:
        """Ask the engine to play one move for the side to move.

        *force* skips the terminal-result check; used when a fresh game
        starts with the engine to move.
        """
        if self._move_guard.busy or self._reset_guard.busy:
            return
        if not force and self._snapshot.is_terminal:
            return
        run_flow(self._engine_step_flow(ErrorSource.STEP), self._on_flow_crash)

    def retry_reply(self) -> None:
        """Re-issue the engine reply after a retryable failure."""
        if not (self.can_retry_reply or self._snapshot.reply_owed):
            return
        self.request_engine_step()

    # ── Game lifecycle ───────────────────────────────────────────────────

    def new_game(
        self, mode: GameMode | None = None, rule_set: RuleSet = RuleSet.STANDARD
    ) -> None:
        if self._reset_guard.busy:
            return
        args: dict[str, Any] = {"ruleSet": rule_set.value}
        if mode is not None:
            args["mode"] = mode.to_payload()
        run_flow(
            self._reset_flow(Command.NEW_GAME, args, ErrorSource.GAME),
            self._on_flow_crash,
        )

    def load_game(self, path: str) -> None:
        if self._reset_guard.busy:
            return
        run_flow(
            self._reset_flow(Command.LOAD_GAME, {"path": path}, ErrorSource.DATA),
            self._on_flow_crash,
        )

    def refresh_state(self) -> None:
        run_flow(self._refresh_flow(), self._on_flow_crash)

    def save_game(self, path: str) -> None:
        run_flow(self._write_flow(Command.SAVE_GAME, path), self._on_flow_crash)

    def export_training(self, path: str) -> None:
        run_flow(self._write_flow(Command.EXPORT_TRAINING, path), self._on_flow_crash)

    def clear_error(self) -> None:
        self._errors.clear()

    # ── Flows ────────────────────────────────────────────────────────────

    def _submit_move_flow(self, x: int, y: int) -> Flow:
        epoch = self._epoch
        with self._move_guard.hold():
            try:
                snapshot = yield from expect(
                    self._gateway.call(Command.MAKE_MOVE, {"x": x, "y": y}),
                    GameSnapshot.from_payload,
                )
            except EngineCallError as exc:
                self._fail(ErrorSource.MOVE, exc)
                return
            if not self._apply(snapshot, epoch):
                return
            self.move_accepted.emit(snapshot)

            if snapshot.is_terminal:
                self._notify_ratings_changed()
                return
            if snapshot.reply_owed:
                yield from self._engine_reply(ErrorSource.AUTO_REPLY, epoch)

    def _engine_step_flow(self, source: ErrorSource) -> Flow:
        epoch = self._epoch
        with self._move_guard.hold():
            yield from self._engine_reply(source, epoch)

    def _engine_reply(self, source: ErrorSource, epoch: int) -> Flow:
        try:
            snapshot = yield from expect(
                self._gateway.call(Command.AI_MOVE), GameSnapshot.from_payload
            )
        except EngineCallError as exc:
            # The human move stays applied; the reply can be retried.
            self._fail(source, exc)
            return
        if not self._apply(snapshot, epoch):
            return
        self.move_accepted.emit(snapshot)
        if snapshot.is_terminal:
            self._notify_ratings_changed()

    def _reset_flow(
        self, command: Command, args: dict[str, Any], source: ErrorSource
    ) -> Flow:
        with self._reset_guard.hold():
            try:
                snapshot = yield from expect(
                    self._gateway.call(command, args), GameSnapshot.from_payload
                )
            except EngineCallError as exc:
                self._fail(source, exc)
                return
            self._epoch += 1
            self._engine_first_timer.stop()
        # Observers run with the reset guard released.
        self._apply(snapshot, self._epoch)
        self._notify_ratings_changed()
        if snapshot.reply_owed:
            _LOGGER.debug("Engine moves first, scheduling its opening move")
            self._engine_first_timer.start()

    def _refresh_flow(self) -> Flow:
        epoch = self._epoch
        try:
            snapshot = yield from expect(
                self._gateway.call(Command.GET_STATE), GameSnapshot.from_payload
            )
        except EngineCallError as exc:
            self._fail(ErrorSource.GAME, exc)
            return
        self._apply(snapshot, epoch)

    def _write_flow(self, command: Command, path: str) -> Flow:
        try:
            yield from expect(
                self._gateway.call(command, {"path": path}), _ignore_result
            )
        except EngineCallError as exc:
            self._fail(ErrorSource.DATA, exc)
            return
        _LOGGER.info("%s -> %s", command, path)
        self._errors.supersede(GAME_SOURCES)

    # ── Internal helpers ─────────────────────────────────────────────────

    def _on_engine_first_move(self) -> None:
        if self._move_guard.busy or self._reset_guard.busy:
            # A step from the previous game is still settling; try again.
            if self._snapshot.reply_owed:
                self._engine_first_timer.start()
            return
        self.request_engine_step(force=True)

    def _apply(self, snapshot: GameSnapshot, epoch: int) -> bool:
        if epoch != self._epoch:
            _LOGGER.debug("Discarding snapshot from a previous game")
            return False
        self._snapshot = snapshot
        self._errors.supersede(GAME_SOURCES)
        self.snapshot_changed.emit(snapshot)
        return True

    def _fail(self, source: ErrorSource, error: EngineCallError) -> None:
        _LOGGER.warning("%s failed (%s): %s", source, error.failure, error.message)
        self._errors.report(SessionError.from_call_error(source, error))

    def _notify_ratings_changed(self) -> None:
        if self._on_ratings_changed is not None:
            self._on_ratings_changed()

    def _on_flow_crash(self, exc: Exception) -> None:
        self._errors.report(SessionError(ErrorSource.GAME, str(exc)))
