"""Local user accounts: listing, switching and housekeeping."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from PyQt6.QtCore import QObject, pyqtSignal

from gomokie.core.users import UserInfo, UsersSnapshot
from gomokie.engine.commands import Command
from gomokie.engine.gateway import CallSurface, EngineCallError
from gomokie.ui.pipeline import Flow, expect, run_flow
from gomokie.ui.session_errors import ErrorSlot, ErrorSource, SessionError

_LOGGER = logging.getLogger(__name__)

_USERS_SOURCES = frozenset({ErrorSource.USERS})

# Commands after which the active user's ratings may differ.
_CHANGES_ACTIVE_USER = frozenset(
    {Command.CREATE_USER, Command.SET_ACTIVE_USER, Command.DELETE_USER}
)


class UsersSession(QObject):
    users_changed = pyqtSignal(object)  # UsersSnapshot
    command_finished = pyqtSignal(str, bool)

    def __init__(
        self,
        *,
        gateway: CallSurface,
        errors: ErrorSlot,
        on_users_changed: Callable[[], None] | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._gateway = gateway
        self._errors = errors
        self._on_users_changed = on_users_changed
        self._users: UsersSnapshot | None = None
        self._issued = 0
        self._applied = 0

    @property
    def users(self) -> UsersSnapshot | None:
        return self._users

    @property
    def active_user(self) -> UserInfo | None:
        return None if self._users is None else self._users.active_user

    @property
    def active_user_dir(self) -> str | None:
        user = self.active_user
        return None if user is None else user.data_dir

    def refresh(self) -> None:
        self._run(Command.GET_USERS)

    def create_user(self, name: str) -> None:
        self._run(Command.CREATE_USER, {"name": name})

    def switch_user(self, user_id: str) -> None:
        self._run(Command.SET_ACTIVE_USER, {"id": user_id})

    def delete_user(self, user_id: str, delete_data: bool) -> None:
        self._run(Command.DELETE_USER, {"id": user_id, "deleteData": delete_data})

    def update_user(self, user_id: str, name: str) -> None:
        self._run(Command.UPDATE_USER, {"id": user_id, "name": name})

    def _run(self, command: Command, args: dict[str, Any] | None = None) -> None:
        self._issued += 1
        run_flow(self._command_flow(command, args, self._issued), self._on_flow_crash)

    def _command_flow(
        self, command: Command, args: dict[str, Any] | None, seq: int
    ) -> Flow:
        try:
            users = yield from expect(
                self._gateway.call(command, args), UsersSnapshot.from_payload
            )
        except EngineCallError as exc:
            self._errors.report(SessionError.from_call_error(ErrorSource.USERS, exc))
            self.command_finished.emit(str(command), False)
            return
        self._errors.supersede(_USERS_SOURCES)
        if seq < self._applied:
            _LOGGER.debug("Dropping stale %s reply (#%d)", command, seq)
        else:
            self._applied = seq
            self._users = users
            self.users_changed.emit(users)
        if command in _CHANGES_ACTIVE_USER and self._on_users_changed is not None:
            self._on_users_changed()
        self.command_finished.emit(str(command), True)

    def _on_flow_crash(self, exc: Exception) -> None:
        self._errors.report(SessionError(ErrorSource.USERS, str(exc)))
