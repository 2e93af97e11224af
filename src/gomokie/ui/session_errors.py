"""The single user-visible error slot shared by all sessions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from PyQt6.QtCore import QObject, pyqtSignal

from gomokie.engine.gateway import CallFailure, EngineCallError

_LOGGER = logging.getLogger(__name__)


class ErrorSource(StrEnum):
    """Which operation produced an error."""

    MOVE = "move"  # human move rejected
    AUTO_REPLY = "autoreply"  # engine reply after a human move
    STEP = "step"  # manual or auto-play engine step
    GAME = "game"  # new game / state refresh
    DATA = "data"  # save, load, export
    RATINGS = "ratings"
    USERS = "users"
    SELF_PLAY = "selfplay"


# Sources owned by the game session; a successful game call clears them.
GAME_SOURCES = frozenset(
    {
        ErrorSource.MOVE,
        ErrorSource.AUTO_REPLY,
        ErrorSource.STEP,
        ErrorSource.GAME,
        ErrorSource.DATA,
    }
)

# Only the engine-reply call may be retried, and only if the engine was reachable.
_RETRYABLE_SOURCES = frozenset({ErrorSource.AUTO_REPLY, ErrorSource.STEP})


@dataclass(frozen=True, slots=True)
class SessionError:
    """An error surfaced to the user."""

    source: ErrorSource
    message: str
    retryable: bool = False

    @classmethod
    def from_call_error(
        cls, source: ErrorSource, error: EngineCallError
    ) -> SessionError:
        retryable = (
            source in _RETRYABLE_SOURCES and error.failure != CallFailure.UNAVAILABLE
        )
        return cls(source=source, message=error.message, retryable=retryable)


class ErrorSlot(QObject):
    """Holds at most one visible error; the last report wins."""

    changed = pyqtSignal(object)  # SessionError | None

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._current: SessionError | None = None

    @property
    def current(self) -> SessionError | None:
        return self._current

    @property
    def can_retry(self) -> bool:
        return self._current is not None and self._current.retryable

    def report(self, error: SessionError) -> None:
        _LOGGER.info("%s error: %s", error.source, error.message)
        self._set(error)

    def clear(self) -> None:
        """User dismissal."""
        self._set(None)

    def supersede(self, sources: frozenset[ErrorSource]) -> None:
        """Clear the current error if it came from one of *sources*."""
        if self._current is not None and self._current.source in sources:
            self._set(None)

    def _set(self, error: SessionError | None) -> None:
        if error == self._current:
            return
        self._current = error
        self.changed.emit(error)
