"""Tests for the self-play start/stop lifecycle and ETA tracking."""

from __future__ import annotations

import pytest
from PyQt6.QtTest import QSignalSpy

from conftest import FakeGateway
from gomokie.engine.commands import EngineEvent
from gomokie.selfplay.models import SelfPlayConfig, SelfPlayProgress
from gomokie.ui.selfplay_session import SelfPlaySession
from gomokie.ui.session_errors import ErrorSlot, ErrorSource, SessionError

_REPORT = {"gamesPerPair": 2, "totalGames": 20, "completedGames": 20, "stopped": False}


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class _Harness:
    def __init__(self, gateway: FakeGateway) -> None:
        self.gateway = gateway
        self.clock = _Clock()
        self.errors = ErrorSlot()
        self.ratings_refreshes = 0
        self.session = SelfPlaySession(
            gateway=gateway,
            events=gateway.event_received,
            errors=self.errors,
            on_ratings_changed=self._on_ratings_changed,
            clock=self.clock,
        )

    def _on_ratings_changed(self) -> None:
        self.ratings_refreshes += 1

    def start(self) -> None:
        self.session.start()
        self.gateway.reply("start_self_play", True)

    def progress(self, completed: int, total: int = 100) -> None:
        self.gateway.push(
            EngineEvent.SELF_PLAY_PROGRESS,
            {
                "completed": completed,
                "total": total,
                "percent": 100.0 * completed / total if total else 0.0,
            },
        )


@pytest.fixture
def harness(gateway: FakeGateway) -> _Harness:
    return _Harness(gateway)


class TestStart:
    def test_start_sends_config(self, harness: _Harness) -> None:
        harness.session.set_config(SelfPlayConfig(games_per_pair=2, parallelism=1))

        harness.session.start()

        assert harness.session.busy
        assert harness.gateway.last_args("start_self_play") == {
            "gamesPerPair": 2,
            "parallelism": 1,
            "includeLlm": False,
            "llmIds": [],
            "minLevel": 1,
            "maxLevel": 12,
        }

    def test_start_while_busy_is_noop(self, harness: _Harness) -> None:
        harness.start()
        harness.session.start()
        harness.session.start()

        assert harness.gateway.commands == ["start_self_play"]

    def test_failed_start_clears_busy(self, harness: _Harness) -> None:
        harness.session.start()
        harness.gateway.fail("start_self_play", "already running")

        assert not harness.session.busy
        assert harness.errors.current == SessionError(
            ErrorSource.SELF_PLAY, "already running"
        )

    @pytest.mark.parametrize("reply", [False, None])
    def test_not_started_clears_busy_without_error(
        self, harness: _Harness, reply: object
    ) -> None:
        harness.session.start()
        harness.gateway.reply("start_self_play", reply)

        assert not harness.session.busy
        assert harness.errors.current is None
        assert harness.session.progress is None

    def test_restart_clears_previous_report(self, harness: _Harness) -> None:
        harness.start()
        harness.gateway.push(EngineEvent.SELF_PLAY_DONE, _REPORT)
        assert harness.session.report is not None

        harness.session.start()

        assert harness.session.report is None
        assert harness.session.busy


class TestProgress:
    def test_eta_is_linear_extrapolation(self, harness: _Harness) -> None:
        harness.start()
        harness.clock.now += 30.0

        harness.progress(10)

        assert harness.session.progress == SelfPlayProgress(10, 100, 10.0)
        assert harness.session.eta_seconds == pytest.approx(90 * (30.0 / 10))
        assert harness.session.eta == "4m 30s"

    def test_eta_undefined_without_completed_games(self, harness: _Harness) -> None:
        harness.start()
        harness.clock.now += 5.0
        harness.progress(10)

        harness.progress(0)

        assert harness.session.eta_seconds is None
        assert harness.session.eta is None

    def test_eta_updates_on_every_event(self, harness: _Harness) -> None:
        harness.start()
        spy = QSignalSpy(harness.session.eta_changed)

        harness.clock.now += 10.0
        harness.progress(10)
        harness.clock.now += 10.0
        harness.progress(20)

        assert len(spy) == 2
        assert harness.session.eta_seconds == pytest.approx(80 * (20.0 / 20))

    def test_malformed_progress_is_ignored(self, harness: _Harness) -> None:
        harness.start()
        harness.progress(10)

        harness.gateway.push(EngineEvent.SELF_PLAY_PROGRESS, {"completed": "x"})

        assert harness.session.progress == SelfPlayProgress(10, 100, 10.0)
        assert harness.session.busy

    def test_events_before_start_are_ignored(self, harness: _Harness) -> None:
        harness.progress(5)
        harness.gateway.push(EngineEvent.SELF_PLAY_DONE, _REPORT)

        assert harness.session.progress is None
        assert harness.session.report is None
        assert harness.ratings_refreshes == 0


class TestCompletion:
    def test_done_sets_report_and_refreshes_ratings(self, harness: _Harness) -> None:
        harness.start()
        harness.progress(50)

        harness.gateway.push(EngineEvent.SELF_PLAY_DONE, _REPORT)

        assert not harness.session.busy
        assert harness.session.progress is None
        assert harness.session.eta is None
        assert harness.session.report is not None
        assert harness.session.report.completed_games == 20
        assert harness.ratings_refreshes == 1

    def test_error_event_surfaces_in_shared_slot(self, harness: _Harness) -> None:
        harness.start()
        harness.progress(50)

        harness.gateway.push(EngineEvent.SELF_PLAY_ERROR, "worker panicked")

        assert not harness.session.busy
        assert harness.session.progress is None
        assert harness.session.eta is None
        assert harness.errors.current == SessionError(
            ErrorSource.SELF_PLAY, "worker panicked"
        )

    def test_events_after_completion_are_ignored(self, harness: _Harness) -> None:
        harness.start()
        harness.gateway.push(EngineEvent.SELF_PLAY_DONE, _REPORT)

        harness.gateway.push(EngineEvent.SELF_PLAY_DONE, _REPORT)
        harness.progress(3)

        assert harness.ratings_refreshes == 1
        assert harness.session.progress is None


class TestStop:
    def test_stop_when_idle_is_noop(self, harness: _Harness) -> None:
        harness.session.stop()

        assert harness.gateway.commands == []

    def test_stop_is_cooperative(self, harness: _Harness) -> None:
        harness.start()

        harness.session.stop()
        harness.gateway.reply("stop_self_play", None)

        assert "stop_self_play" in harness.gateway.commands
        assert harness.session.busy
        assert harness.session.stop_requested

        stopped = {**_REPORT, "completedGames": 4, "stopped": True}
        harness.gateway.push(EngineEvent.SELF_PLAY_DONE, stopped)

        assert not harness.session.busy
        assert not harness.session.stop_requested
        assert harness.session.report is not None
        assert harness.session.report.stopped

    def test_stop_is_sent_once_while_in_flight(self, harness: _Harness) -> None:
        harness.start()

        harness.session.stop()
        harness.session.stop()

        assert harness.gateway.commands.count("stop_self_play") == 1

    def test_stop_during_start_is_sent_after_start(self, harness: _Harness) -> None:
        harness.session.start()

        harness.session.stop()

        assert harness.gateway.commands == ["start_self_play"]
        assert harness.session.stop_requested

        harness.gateway.reply("start_self_play", True)

        assert harness.gateway.commands.count("stop_self_play") == 1
        assert harness.session.busy

    def test_stop_during_refused_start_is_dropped(self, harness: _Harness) -> None:
        harness.session.start()
        harness.session.stop()

        harness.gateway.reply("start_self_play", False)

        assert "stop_self_play" not in harness.gateway.commands
        assert not harness.session.busy
        assert not harness.session.stop_requested

    def test_failed_stop_can_be_retried(self, harness: _Harness) -> None:
        harness.start()
        harness.session.stop()

        harness.gateway.fail("stop_self_play", "engine busy")

        assert not harness.session.stop_requested
        assert harness.errors.current is not None

        harness.session.stop()

        assert harness.gateway.commands.count("stop_self_play") == 2


class TestConfiguration:
    def test_level_range_is_clamped(self, harness: _Harness) -> None:
        harness.session.set_level_range(0, 40)

        assert harness.session.config.min_level == 1
        assert harness.session.config.max_level == 12

        harness.session.set_level_range(9, 3)

        config = harness.session.config
        assert (config.min_level, config.max_level) == (9, 9)

    def test_toggle_llm_id(self, harness: _Harness) -> None:
        spy = QSignalSpy(harness.session.config_changed)

        harness.session.toggle_include_llm(True, [])
        harness.session.toggle_llm_id("llm-a", True)

        assert harness.session.config.include_llm
        assert harness.session.config.llm_ids == ("llm-a",)
        assert len(spy) == 2

    def test_games_and_parallelism_have_a_floor(self, harness: _Harness) -> None:
        harness.session.set_games_per_pair(0)
        harness.session.set_parallelism(-2)

        assert harness.session.config.games_per_pair == 1
        assert harness.session.config.parallelism == 1
