"""Qt session layer: engine-call sequencing, scheduling and navigation.

Everything here is a non-visual ``QObject``; widgets (or the headless
runner) observe the sessions through their signals.
"""

from gomokie.ui.autoplay import AutoPlayScheduler, AutoPlaySpeed, AutoPlayState
from gomokie.ui.client import GameClient
from gomokie.ui.game_session import GameSession
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
from gomokie.ui.pipeline import GuardBusyError, InFlightGuard, run_flow
from gomokie.ui.ratings_session import RatingsSession
from gomokie.ui.selfplay_session import SelfPlaySession
from gomokie.ui.session_errors import ErrorSlot, ErrorSource, SessionError
from gomokie.ui.settings import AppSettings
from gomokie.ui.users_session import UsersSession

__all__ = [
    "AppMode",
    "AppSettings",
    "AutoPlayScheduler",
    "AutoPlaySpeed",
    "AutoPlayState",
    "ErrorSlot",
    "ErrorSource",
    "GameClient",
    "GameSession",
    "GuardBusyError",
    "InFlightGuard",
    "NavigationState",
    "Navigator",
    "RatingsSession",
    "SelfPlaySession",
    "SessionError",
    "SettingsPage",
    "UsersSession",
    "go_back",
    "go_to_play",
    "go_to_settings",
    "go_to_settings_page",
    "go_to_welcome",
    "run_flow",
]
