"""Tests for rating ladder and profile management."""

from __future__ import annotations

from typing import Any

from PyQt6.QtTest import QSignalSpy

from conftest import FakeGateway
from gomokie.core.ratings import LlmConfig
from gomokie.ui.ratings_session import RatingsSession
from gomokie.ui.session_errors import ErrorSlot, ErrorSource


def _ratings(active: str = "lvl-1", auto: bool = False, offset: int = 0) -> dict:
    return {
        "player": {"rating": 1000, "games": 0},
        "profiles": [
            {"id": "lvl-1", "name": "Level 1", "rating": 800, "games": 4},
            {"id": "lvl-2", "name": "Level 2", "rating": 900, "games": 4},
        ],
        "activeProfile": active,
        "autoMatch": auto,
        "matchOffset": offset,
    }


def _session(gateway: FakeGateway) -> tuple[RatingsSession, ErrorSlot]:
    errors = ErrorSlot()
    return RatingsSession(gateway=gateway, errors=errors), errors


class TestRatingsSession:
    def test_refresh_stores_snapshot(self, gateway: FakeGateway) -> None:
        session, _errors = _session(gateway)
        spy = QSignalSpy(session.ratings_changed)

        session.refresh()
        gateway.reply("get_ratings", _ratings())

        assert session.ratings is not None
        assert session.ratings.active_profile == "lvl-1"
        assert len(spy) == 1

    def test_match_offset_turns_auto_match_on(self, gateway: FakeGateway) -> None:
        session, _errors = _session(gateway)

        session.set_match_offset(-100)

        assert gateway.last_args("set_match_mode") == {
            "autoMatch": True,
            "matchOffset": -100,
        }

    def test_toggle_auto_match_keeps_offset(self, gateway: FakeGateway) -> None:
        session, _errors = _session(gateway)
        session.refresh()
        gateway.reply("get_ratings", _ratings(auto=True, offset=50))

        session.toggle_auto_match()

        assert gateway.last_args("set_match_mode") == {
            "autoMatch": False,
            "matchOffset": 50,
        }

    def test_toggle_auto_match_without_ratings_is_noop(
        self, gateway: FakeGateway
    ) -> None:
        session, _errors = _session(gateway)

        session.toggle_auto_match()

        assert gateway.commands == []

    def test_stale_refresh_does_not_overwrite_newer_change(
        self, gateway: FakeGateway
    ) -> None:
        session, _errors = _session(gateway)
        session.refresh()
        session.set_active_profile("lvl-2")

        gateway.reply("set_active_profile", _ratings(active="lvl-2"))
        gateway.reply("get_ratings", _ratings(active="lvl-1"))

        assert session.ratings is not None
        assert session.ratings.active_profile == "lvl-2"

    def test_update_profile_can_keep_stored_key(self, gateway: FakeGateway) -> None:
        session, _errors = _session(gateway)

        session.update_llm_profile("llm-a", "Model A", LlmConfig(model="m"), None)

        args: dict[str, Any] = gateway.last_args("update_llm_profile")
        assert args["apiKey"] is None
        assert args["config"]["model"] == "m"
        assert args["id"] == "llm-a"

    def test_create_and_delete_profile_arguments(self, gateway: FakeGateway) -> None:
        session, _errors = _session(gateway)

        session.create_llm_profile("Model B", LlmConfig(model="m-2"), "sk-test")
        session.delete_llm_profile("llm-b", True)

        assert gateway.last_args("create_llm_profile")["apiKey"] == "sk-test"
        assert gateway.last_args("delete_llm_profile") == {
            "id": "llm-b",
            "deleteKey": True,
        }

    def test_failure_reports_ratings_error(self, gateway: FakeGateway) -> None:
        session, errors = _session(gateway)
        finished = QSignalSpy(session.command_finished)

        session.create_llm_profile("Model B", LlmConfig(model="m-2"), "")
        gateway.fail("create_llm_profile", "API key required")

        assert errors.current is not None
        assert errors.current.source is ErrorSource.RATINGS
        assert not errors.current.retryable
        assert finished[0] == ["create_llm_profile", False]

    def test_success_clears_ratings_error(self, gateway: FakeGateway) -> None:
        session, errors = _session(gateway)
        session.refresh()
        gateway.fail("get_ratings")

        session.refresh()
        gateway.reply("get_ratings", _ratings())

        assert errors.current is None
