"""Composition root wiring every session object to one engine gateway."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from PyQt6.QtCore import QObject, pyqtSignal

from gomokie.core.enums import RuleSet
from gomokie.core.snapshot import GameMode, GameSnapshot
from gomokie.engine.gateway import CallSurface, EventSignal
from gomokie.ui.autoplay import AutoPlayScheduler
from gomokie.ui.data_files import default_export_path, default_save_path
from gomokie.ui.game_session import GameSession
from gomokie.ui.navigation import Navigator
from gomokie.ui.ratings_session import RatingsSession
from gomokie.ui.selfplay_session import SelfPlaySession
from gomokie.ui.session_errors import ErrorSlot
from gomokie.ui.settings import AppSettings
from gomokie.ui.users_session import UsersSession

if TYPE_CHECKING:
    from gomokie.ui.sounds import SoundPlayer

_LOGGER = logging.getLogger(__name__)


class EngineLink(CallSurface, Protocol):
    """What the client needs from a gateway: calls plus pushed events."""

    event_received: EventSignal


class GameClient(QObject):
    """Owns the session objects of one client window (or headless run).

    Cross-session effects live here: a finished game, a calibration run or
    a user switch refreshes the ratings, and starting a game moves the
    navigation to the board.
    """

    game_over = pyqtSignal(object)  # GameSnapshot with a result

    def __init__(
        self,
        gateway: EngineLink,
        settings: AppSettings | None = None,
        *,
        sound: SoundPlayer | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings or AppSettings()
        self._gateway = gateway

        self.errors = ErrorSlot(self)
        self.ratings = RatingsSession(gateway=gateway, errors=self.errors, parent=self)
        self.users = UsersSession(
            gateway=gateway,
            errors=self.errors,
            on_users_changed=self.ratings.refresh,
            parent=self,
        )
        self.game = GameSession(
            gateway=gateway,
            errors=self.errors,
            on_ratings_changed=self.ratings.refresh,
            engine_first_move_delay_ms=self._settings.engine_first_move_delay_ms,
            parent=self,
        )
        self.autoplay = AutoPlayScheduler(
            session=self.game, speed=self._settings.autoplay_speed, parent=self
        )
        self.self_play = SelfPlaySession(
            gateway=gateway,
            events=gateway.event_received,
            errors=self.errors,
            on_ratings_changed=self.ratings.refresh,
            config=self._settings.self_play_config(),
            parent=self,
        )
        self.navigation = Navigator(parent=self)

        self._sound = sound
        if sound is not None:
            sound.set_enabled(self._settings.sound_enabled)
            sound.set_volume(self._settings.sound_volume)
            self.game.move_accepted.connect(sound.play_stone)

        self.game.snapshot_changed.connect(self._on_snapshot_changed)

    @property
    def settings(self) -> AppSettings:
        return self._settings

    # ── Startup / teardown ───────────────────────────────────────────────

    def load_initial_state(self) -> None:
        """Fetch game, ratings and users once the engine is up."""
        self.game.refresh_state()
        self.ratings.refresh()
        self.users.refresh()

    def shutdown(self) -> None:
        self.autoplay.stop()
        self.self_play.shutdown()

    # ── Cross-session actions ────────────────────────────────────────────

    def start_new_game(
        self, mode: GameMode | None = None, rule_set: RuleSet = RuleSet.STANDARD
    ) -> None:
        self.autoplay.stop()
        self.game.new_game(mode, rule_set)
        self.navigation.go_to_play()

    def save_game(self, path: str | None = None, now: datetime | None = None) -> str:
        """Save the current game; without *path* use a timestamped default."""
        target = path or str(default_save_path(self.users.active_user_dir, now))
        self.game.save_game(target)
        return target

    def export_training(
        self, path: str | None = None, now: datetime | None = None
    ) -> str:
        target = path or str(default_export_path(self.users.active_user_dir, now))
        self.game.export_training(target)
        return target

    def _on_snapshot_changed(self, snapshot: GameSnapshot) -> None:
        if snapshot.is_terminal:
            _LOGGER.info("Game over: %s", snapshot.result)
            self.game_over.emit(snapshot)
