"""Headless Qt bootstrap: drive a watch game or a calibration run."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from PyQt6.QtCore import QCoreApplication, QTimer

from gomokie.core.snapshot import AiVsAi, GameSnapshot
from gomokie.engine.gateway import EngineGateway
from gomokie.selfplay.models import SelfPlayProgress, SelfPlayReport
from gomokie.ui.client import GameClient
from gomokie.ui.session_errors import ErrorSource, SessionError
from gomokie.ui.settings import AppSettings

if TYPE_CHECKING:
    from gomokie.ui.sounds import SoundPlayer

_LOGGER = logging.getLogger(__name__)

# Failures after which a headless run cannot make progress on its own.
_FATAL_SOURCES = frozenset({ErrorSource.GAME, ErrorSource.SELF_PLAY})


def _configure_application(app: QCoreApplication) -> None:
    app.setApplicationName("Gomokie")
    app.setOrganizationName("Gomokie")


def _make_sound(settings: AppSettings) -> SoundPlayer | None:
    if not settings.sound_enabled:
        return None
    # QtMultimedia is only imported when a cue was requested.
    from gomokie.ui.sounds import SoundPlayer

    return SoundPlayer(volume=settings.sound_volume)


class _HeadlessRun:
    """Connects client signals to logging and to the application's exit."""

    def __init__(self, app: QCoreApplication, client: GameClient) -> None:
        self._app = app
        self._client = client
        self.exit_code = 0
        client.errors.changed.connect(self._on_error)

    # ── Watch mode ───────────────────────────────────────────────────────

    def watch(self, black_id: str, white_id: str) -> None:
        client = self._client
        client.game.snapshot_changed.connect(self._on_watch_snapshot)
        client.game_over.connect(self._on_game_over)
        client.start_new_game(AiVsAi(black_id=black_id, white_id=white_id))

    def _on_watch_snapshot(self, snapshot: GameSnapshot) -> None:
        move = snapshot.last_move
        if move is not None:
            _LOGGER.info("%s plays (%d, %d)", move.player.name, move.x, move.y)
        autoplay = self._client.autoplay
        if not autoplay.is_playing and autoplay.can_play:
            autoplay.start()

    def _on_game_over(self, snapshot: GameSnapshot) -> None:
        _LOGGER.info("Result: %s after %d moves", snapshot.result, len(snapshot.moves))
        self._app.quit()

    # ── Self-play mode ───────────────────────────────────────────────────

    def self_play(self, games_per_pair: int) -> None:
        session = self._client.self_play
        session.set_games_per_pair(games_per_pair)
        session.progress_changed.connect(self._on_progress)
        session.report_changed.connect(self._on_report)
        session.busy_changed.connect(self._on_self_play_busy)
        session.start()

    def _on_progress(self, progress: SelfPlayProgress | None) -> None:
        if progress is None:
            return
        _LOGGER.info(
            "Self-play %d/%d (%.1f%%), ETA %s",
            progress.completed,
            progress.total,
            progress.percent,
            self._client.self_play.eta or "unknown",
        )

    def _on_report(self, report: SelfPlayReport | None) -> None:
        if report is not None:
            _LOGGER.info(
                "Self-play report: %d of %d games%s",
                report.completed_games,
                report.total_games,
                ", stopped early" if report.stopped else "",
            )

    def _on_self_play_busy(self, busy: bool) -> None:
        if not busy:
            self._app.quit()

    # ── Errors ───────────────────────────────────────────────────────────

    def on_engine_availability(self, available: bool) -> None:
        if not available:
            _LOGGER.error("Engine process went away")
            self.exit_code = 1
            self._app.quit()

    def _on_error(self, error: SessionError | None) -> None:
        if error is None:
            return
        _LOGGER.error("[%s] %s", error.source, error.message)
        if error.source in _FATAL_SOURCES:
            self.exit_code = 1
            self._app.quit()


def run_headless(
    settings: AppSettings,
    *,
    black_id: str | None = None,
    white_id: str | None = None,
    self_play_games: int | None = None,
    argv: list[str] | None = None,
) -> int:
    """Run one watch game (or one calibration job) and return an exit code."""
    app = QCoreApplication.instance() or QCoreApplication(
        sys.argv if argv is None else argv
    )
    _configure_application(app)

    gateway = EngineGateway(settings.engine_program, settings.engine_args)
    if not gateway.start():
        _LOGGER.error("Could not start engine %r", settings.engine_program)
        return 1

    client = GameClient(gateway, settings, sound=_make_sound(settings))
    run = _HeadlessRun(app, client)
    gateway.availability_changed.connect(run.on_engine_availability)
    if self_play_games is not None:
        QTimer.singleShot(0, lambda: run.self_play(self_play_games))
    else:
        QTimer.singleShot(0, lambda: run.watch(black_id or "", white_id or ""))

    try:
        code = app.exec()
    finally:
        gateway.availability_changed.disconnect(run.on_engine_availability)
        client.shutdown()
        gateway.shutdown()
    return run.exit_code or code
