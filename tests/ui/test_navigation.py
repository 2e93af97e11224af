"""Tests for the screen navigation state machine."""

from __future__ import annotations

import pytest
from PyQt6.QtTest import QSignalSpy

from gomokie.ui.navigation import (
    AppMode,
    NavigationState,
    Navigator,
    SettingsPage,
    go_back,
    go_to_play,
    go_to_settings,
    go_to_settings_page,
    go_to_welcome,
)

WELCOME = NavigationState()
PLAY = NavigationState(AppMode.PLAY)
SETTINGS_HOME = NavigationState(AppMode.SETTINGS, SettingsPage.HOME)


class TestTransitions:
    @pytest.mark.parametrize(
        "page",
        [SettingsPage.PROFILE, SettingsPage.AI, SettingsPage.DATA, SettingsPage.USERS],
    )
    def test_back_from_settings_page_goes_home(self, page: SettingsPage) -> None:
        state = NavigationState(AppMode.SETTINGS, page)

        assert go_back(state) == SETTINGS_HOME

    def test_back_from_settings_home_goes_to_welcome(self) -> None:
        assert go_back(SETTINGS_HOME).mode is AppMode.WELCOME

    def test_back_from_play_goes_to_welcome(self) -> None:
        assert go_back(PLAY).mode is AppMode.WELCOME

    def test_back_from_welcome_stays(self) -> None:
        assert go_back(WELCOME) == WELCOME

    def test_settings_always_lands_on_home(self) -> None:
        state = NavigationState(AppMode.SETTINGS, SettingsPage.DATA)

        assert go_to_settings(go_to_play(state)) == SETTINGS_HOME

    def test_direct_jump_to_settings_page(self) -> None:
        assert go_to_settings_page(PLAY, SettingsPage.AI) == NavigationState(
            AppMode.SETTINGS, SettingsPage.AI
        )

    def test_welcome_and_play(self) -> None:
        assert go_to_play(WELCOME).mode is AppMode.PLAY
        assert go_to_welcome(PLAY).mode is AppMode.WELCOME


class TestNavigator:
    def test_emits_only_on_change(self) -> None:
        navigator = Navigator()
        spy = QSignalSpy(navigator.state_changed)

        navigator.go_to_settings_page(SettingsPage.USERS)
        navigator.go_back()
        navigator.go_back()
        navigator.go_back()

        assert navigator.state.mode is AppMode.WELCOME
        assert len(spy) == 3
