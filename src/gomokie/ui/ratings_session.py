"""Rating ladder and engine-profile management."""

from __future__ import annotations

import logging
from typing import Any

from PyQt6.QtCore import QObject, pyqtSignal

from gomokie.core.ratings import LlmConfig, RatingsSnapshot
from gomokie.engine.commands import Command
from gomokie.engine.gateway import CallSurface, EngineCallError
from gomokie.ui.pipeline import Flow, expect, run_flow
from gomokie.ui.session_errors import ErrorSlot, ErrorSource, SessionError

_LOGGER = logging.getLogger(__name__)

_RATINGS_SOURCES = frozenset({ErrorSource.RATINGS})


class RatingsSession(QObject):
    """Holds the latest :class:`RatingsSnapshot` for the active user.

    Every mutating command answers with a full snapshot.  Replies are
    numbered and one older than the snapshot already applied is dropped,
    so a slow ``get_ratings`` cannot overwrite a newer profile change.
    """

    ratings_changed = pyqtSignal(object)  # RatingsSnapshot
    # (command name, succeeded) for forms that close on success.
    command_finished = pyqtSignal(str, bool)

    def __init__(
        self,
        *,
        gateway: CallSurface,
        errors: ErrorSlot,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._gateway = gateway
        self._errors = errors
        self._ratings: RatingsSnapshot | None = None
        self._issued = 0
        self._applied = 0

    @property
    def ratings(self) -> RatingsSnapshot | None:
        return self._ratings

    # ── Operations ───────────────────────────────────────────────────────

    def refresh(self) -> None:
        self._run(Command.GET_RATINGS)

    def set_match_mode(self, auto_match: bool, match_offset: int) -> None:
        self._run(
            Command.SET_MATCH_MODE,
            {"autoMatch": auto_match, "matchOffset": match_offset},
        )

    def toggle_auto_match(self) -> None:
        if self._ratings is None:
            return
        self.set_match_mode(not self._ratings.auto_match, self._ratings.match_offset)

    def set_match_offset(self, offset: int) -> None:
        """Choose an opponent relative to the player's rating (enables auto-match)."""
        self.set_match_mode(True, offset)

    def set_active_profile(self, profile_id: str) -> None:
        self._run(Command.SET_ACTIVE_PROFILE, {"id": profile_id})

    def create_llm_profile(self, name: str, config: LlmConfig, api_key: str) -> None:
        self._run(
            Command.CREATE_LLM_PROFILE,
            {"name": name, "config": config.to_payload(), "apiKey": api_key},
        )

    def update_llm_profile(
        self, profile_id: str, name: str, config: LlmConfig, api_key: str | None
    ) -> None:
        """Update a profile; ``api_key=None`` keeps the stored credential."""
        self._run(
            Command.UPDATE_LLM_PROFILE,
            {
                "id": profile_id,
                "name": name,
                "config": config.to_payload(),
                "apiKey": api_key,
            },
        )

    def delete_llm_profile(self, profile_id: str, delete_key: bool) -> None:
        self._run(
            Command.DELETE_LLM_PROFILE, {"id": profile_id, "deleteKey": delete_key}
        )

    # ── Internal ─────────────────────────────────────────────────────────

    def _run(self, command: Command, args: dict[str, Any] | None = None) -> None:
        self._issued += 1
        run_flow(self._command_flow(command, args, self._issued), self._on_flow_crash)

    def _command_flow(
        self, command: Command, args: dict[str, Any] | None, seq: int
    ) -> Flow:
        try:
            ratings = yield from expect(
                self._gateway.call(command, args), RatingsSnapshot.from_payload
            )
        except EngineCallError as exc:
            self._errors.report(SessionError.from_call_error(ErrorSource.RATINGS, exc))
            self.command_finished.emit(str(command), False)
            return
        self._errors.supersede(_RATINGS_SOURCES)
        if seq < self._applied:
            _LOGGER.debug("Dropping stale %s reply (#%d)", command, seq)
        else:
            self._applied = seq
            self._ratings = ratings
            self.ratings_changed.emit(ratings)
        self.command_finished.emit(str(command), True)

    def _on_flow_crash(self, exc: Exception) -> None:
        self._errors.report(SessionError(ErrorSource.RATINGS, str(exc)))
