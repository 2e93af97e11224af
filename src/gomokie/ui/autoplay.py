"""Timer-driven engine-vs-engine playback."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import StrEnum

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from gomokie.core.enums import GameModeKind
from gomokie.core.snapshot import GameSnapshot
from gomokie.ui.game_session import GameSession

_LOGGER = logging.getLogger(__name__)


class AutoPlaySpeed(StrEnum):
    """Playback speed presets."""

    SLOW = "slow"
    MEDIUM = "medium"
    FAST = "fast"

    @property
    def interval_ms(self) -> int:
        return _INTERVALS_MS[self]


_INTERVALS_MS: dict[AutoPlaySpeed, int] = {
    AutoPlaySpeed.SLOW: 2000,
    AutoPlaySpeed.MEDIUM: 1000,
    AutoPlaySpeed.FAST: 500,
}


@dataclass(frozen=True, slots=True)
class AutoPlayState:
    is_playing: bool = False
    speed: AutoPlaySpeed = AutoPlaySpeed.MEDIUM


class AutoPlayScheduler(QObject):
    """Drives :meth:`GameSession.request_engine_step` on a repeating timer.

    A tick never queues behind a slow step: if the previous step is still
    in flight the tick is skipped.  Stopping cancels the timer only; a
    step already sent to the engine completes and its snapshot is applied.
    Playback stops by itself as soon as the game is over or the mode is no
    longer engine-vs-engine.
    """

    state_changed = pyqtSignal(object)  # AutoPlayState

    def __init__(
        self,
        *,
        session: GameSession,
        speed: AutoPlaySpeed = AutoPlaySpeed.MEDIUM,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._session = session
        self._state = AutoPlayState(speed=speed)
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._on_tick)
        session.snapshot_changed.connect(self._on_snapshot_changed)

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def state(self) -> AutoPlayState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def speed(self) -> AutoPlaySpeed:
        return self._state.speed

    @property
    def is_stepping(self) -> bool:
        """A step (timer-driven or manual) is waiting on the engine."""
        return self._session.busy

    @property
    def can_play(self) -> bool:
        return _is_playable(self._session.snapshot)

    # ── Controls ─────────────────────────────────────────────────────────

    def start(self) -> None:
        if self._state.is_playing or not self.can_play:
            return
        _LOGGER.info("Auto-play started at %s speed", self._state.speed)
        self._set_state(replace(self._state, is_playing=True))
        self._timer.start(self._state.speed.interval_ms)
        self._on_tick()

    def stop(self) -> None:
        self._timer.stop()
        if not self._state.is_playing:
            return
        _LOGGER.info("Auto-play stopped")
        self._set_state(replace(self._state, is_playing=False))

    def set_speed(self, speed: AutoPlaySpeed) -> None:
        if speed == self._state.speed:
            return
        self._set_state(replace(self._state, speed=speed))
        if self._state.is_playing:
            # Restart at the new interval without an extra immediate step.
            self._timer.start(speed.interval_ms)

    def step(self) -> None:
        """Single manual step; shares the session's in-flight guard."""
        if not self.can_play:
            return
        self._session.request_engine_step()

    # ── Internal ─────────────────────────────────────────────────────────

    def _on_tick(self) -> None:
        if not self._state.is_playing:
            return
        if not self.can_play:
            self.stop()
            return
        if self._session.busy:
            _LOGGER.debug("Previous step still in flight, skipping tick")
            return
        self._session.request_engine_step()

    def _on_snapshot_changed(self, snapshot: GameSnapshot) -> None:
        if self._state.is_playing and not _is_playable(snapshot):
            self.stop()

    def _set_state(self, state: AutoPlayState) -> None:
        self._state = state
        self.state_changed.emit(state)


def _is_playable(snapshot: GameSnapshot) -> bool:
    return snapshot.mode.kind == GameModeKind.AI_VS_AI and not snapshot.is_terminal
