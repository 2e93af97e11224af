"""Screen navigation state machine.

The transitions are pure functions over :class:`NavigationState`;
:class:`Navigator` only stores the current state and announces changes.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

from PyQt6.QtCore import QObject, pyqtSignal

# ── States ───────────────────────────────────────────────────────────────────


class AppMode(StrEnum):
    WELCOME = "welcome"
    PLAY = "play"
    SETTINGS = "settings"


class SettingsPage(StrEnum):
    HOME = "home"
    PROFILE = "profile"
    AI = "ai"
    DATA = "data"
    USERS = "users"


@dataclass(frozen=True, slots=True)
class NavigationState:
    mode: AppMode = AppMode.WELCOME
    settings_page: SettingsPage = SettingsPage.HOME


# ── Transitions ──────────────────────────────────────────────────────────────


def go_to_welcome(state: NavigationState) -> NavigationState:
    return replace(state, mode=AppMode.WELCOME)


def go_to_play(state: NavigationState) -> NavigationState:
    return replace(state, mode=AppMode.PLAY)


def go_to_settings(state: NavigationState) -> NavigationState:
    """Enter settings; always lands on the settings home page."""
    return NavigationState(AppMode.SETTINGS, SettingsPage.HOME)


def go_to_settings_page(state: NavigationState, page: SettingsPage) -> NavigationState:
    return NavigationState(AppMode.SETTINGS, page)


def go_back(state: NavigationState) -> NavigationState:
    """Settings sub-page → settings home; settings home or play → welcome."""
    if state.mode == AppMode.SETTINGS and state.settings_page != SettingsPage.HOME:
        return replace(state, settings_page=SettingsPage.HOME)
    return replace(state, mode=AppMode.WELCOME)


# ── Holder ───────────────────────────────────────────────────────────────────


class Navigator(QObject):
    state_changed = pyqtSignal(object)  # NavigationState

    def __init__(
        self,
        state: NavigationState | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._state = state or NavigationState()

    @property
    def state(self) -> NavigationState:
        return self._state

    def go_to_welcome(self) -> None:
        self._set(go_to_welcome(self._state))

    def go_to_play(self) -> None:
        self._set(go_to_play(self._state))

    def go_to_settings(self) -> None:
        self._set(go_to_settings(self._state))

    def go_to_settings_page(self, page: SettingsPage) -> None:
        self._set(go_to_settings_page(self._state, page))

    def go_back(self) -> None:
        self._set(go_back(self._state))

    def _set(self, state: NavigationState) -> None:
        if state == self._state:
            return
        self._state = state
        self.state_changed.emit(state)
