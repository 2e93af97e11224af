"""Background self-play calibration: start/stop and progress tracking."""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import replace

from PyQt6.QtCore import QObject, pyqtSignal

from gomokie.core.payload import PayloadError
from gomokie.core.ratings import ProfileRating
from gomokie.engine.commands import Command, EngineEvent
from gomokie.engine.gateway import CallSurface, EngineCallError, EventSignal
from gomokie.selfplay.eta import estimate_remaining_seconds, format_duration
from gomokie.selfplay.models import (
    MAX_LEVEL,
    MIN_LEVEL,
    SelfPlayConfig,
    SelfPlayProgress,
    SelfPlayReport,
)
from gomokie.ui.pipeline import Flow, InFlightGuard, run_flow
from gomokie.ui.session_errors import ErrorSlot, ErrorSource, SessionError

_LOGGER = logging.getLogger(__name__)

_SELF_PLAY_SOURCES = frozenset({ErrorSource.SELF_PLAY})

RunEventHandler = Callable[[int, str, object], None]


class RunSubscription:
    """Engine event subscription bound to a single self-play run."""

    __slots__ = ("__weakref__", "run_id", "_events", "_handler", "_active")

    def __init__(
        self, run_id: int, events: EventSignal, handler: RunEventHandler
    ) -> None:
        self.run_id = run_id
        self._events = events
        self._handler = handler
        self._active = True
        events.connect(self._deliver)

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        with contextlib.suppress(TypeError, RuntimeError):
            self._events.disconnect(self._deliver)

    def _deliver(self, name: str, payload: object) -> None:
        if self._active:
            self._handler(self.run_id, name, payload)


class SelfPlaySession(QObject):
    """Runs one calibration job at a time and turns its events into state.

    ``busy`` is set when a run starts and cleared only by the run's done or
    error event (or a refused start); stopping is a cooperative request.
    """

    busy_changed = pyqtSignal(bool)
    progress_changed = pyqtSignal(object)  # SelfPlayProgress | None
    eta_changed = pyqtSignal(object)  # str | None
    report_changed = pyqtSignal(object)  # SelfPlayReport | None
    config_changed = pyqtSignal(object)  # SelfPlayConfig

    def __init__(
        self,
        *,
        gateway: CallSurface,
        events: EventSignal,
        errors: ErrorSlot,
        on_ratings_changed: Callable[[], None] | None = None,
        config: SelfPlayConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._gateway = gateway
        self._events = events
        self._errors = errors
        self._on_ratings_changed = on_ratings_changed
        self._config = config or SelfPlayConfig()
        self._clock = clock

        self._control_guard = InFlightGuard("self-play control")
        self._busy = False
        self._stop_requested = False
        self._progress: SelfPlayProgress | None = None
        self._report: SelfPlayReport | None = None
        self._eta_seconds: float | None = None
        self._anchor: float | None = None
        self._run_id = 0
        self._subscription: RunSubscription | None = None

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    @property
    def progress(self) -> SelfPlayProgress | None:
        return self._progress

    @property
    def report(self) -> SelfPlayReport | None:
        return self._report

    @property
    def eta_seconds(self) -> float | None:
        return self._eta_seconds

    @property
    def eta(self) -> str | None:
        if self._eta_seconds is None:
            return None
        return format_duration(self._eta_seconds)

    @property
    def config(self) -> SelfPlayConfig:
        return self._config

    # ── Configuration ────────────────────────────────────────────────────

    def set_config(self, config: SelfPlayConfig) -> None:
        if config == self._config:
            return
        self._config = config
        self.config_changed.emit(config)

    def set_games_per_pair(self, games: int) -> None:
        self.set_config(replace(self._config, games_per_pair=max(1, games)))

    def set_parallelism(self, workers: int) -> None:
        self.set_config(replace(self._config, parallelism=max(1, workers)))

    def set_level_range(self, min_level: int, max_level: int) -> None:
        low = min(max(min_level, MIN_LEVEL), MAX_LEVEL)
        high = min(max(max_level, low), MAX_LEVEL)
        self.set_config(replace(self._config, min_level=low, max_level=high))

    def toggle_include_llm(
        self, include: bool, profiles: Iterable[ProfileRating]
    ) -> None:
        self.set_config(self._config.with_include_llm(include, profiles))

    def toggle_llm_id(self, profile_id: str, selected: bool) -> None:
        self.set_config(self._config.with_llm_id(profile_id, selected))

    # ── Run control ──────────────────────────────────────────────────────

    def start(self) -> None:
        if self._busy or self._control_guard.busy:
            return
        self._run_id += 1
        run_id = self._run_id
        self._subscribe(run_id)

        self._stop_requested = False
        self._set_busy(True)
        self._set_report(None)
        self._set_progress(None)
        self._set_eta(None)
        self._anchor = self._clock()
        self._errors.supersede(_SELF_PLAY_SOURCES)
        _LOGGER.info("Self-play run %d starting: %s", run_id, self._config)
        run_flow(self._start_flow(run_id, self._config), self._on_flow_crash)

    def stop(self) -> None:
        """Ask the running job to wind down; ``busy`` clears on its last event."""
        if not self._busy or self._stop_requested:
            return
        self._stop_requested = True
        if self._control_guard.busy:
            # Sent once the pending start call settles.
            return
        run_flow(self._stop_flow(), self._on_flow_crash)

    def shutdown(self) -> None:
        """Drop the event subscription (owner going away)."""
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    # ── Flows ────────────────────────────────────────────────────────────

    def _start_flow(self, run_id: int, config: SelfPlayConfig) -> Flow:
        with self._control_guard.hold():
            try:
                started = yield self._gateway.call(
                    Command.START_SELF_PLAY, config.to_args()
                )
            except EngineCallError as exc:
                if self._is_current(run_id):
                    self._end_run()
                    self._report_error(exc.message)
                return
            if not started and self._is_current(run_id):
                _LOGGER.info("Engine did not start self-play run %d", run_id)
                self._end_run()
                return
        if self._stop_requested and self._is_current(run_id):
            _LOGGER.debug("Sending stop deferred during start of run %d", run_id)
            run_flow(self._stop_flow(), self._on_flow_crash)

    def _stop_flow(self) -> Flow:
        with self._control_guard.hold():
            try:
                yield self._gateway.call(Command.STOP_SELF_PLAY)
            except EngineCallError as exc:
                self._stop_requested = False
                self._report_error(exc.message)

    # ── Events ───────────────────────────────────────────────────────────

    def _subscribe(self, run_id: int) -> None:
        self.shutdown()
        self._subscription = RunSubscription(run_id, self._events, self._on_run_event)

    def _on_run_event(self, run_id: int, name: str, payload: object) -> None:
        if not self._is_current(run_id):
            return
        if name == EngineEvent.SELF_PLAY_PROGRESS:
            self._on_progress(payload)
        elif name == EngineEvent.SELF_PLAY_DONE:
            self._on_done(payload)
        elif name == EngineEvent.SELF_PLAY_ERROR:
            self._on_error(str(payload))

    def _on_progress(self, payload: object) -> None:
        try:
            progress = SelfPlayProgress.from_payload(payload)
        except PayloadError as exc:
            _LOGGER.warning("Ignoring malformed self-play progress: %s", exc)
            return

        now = self._clock()
        if self._anchor is None and progress.completed > 0:
            self._anchor = now
        elapsed = 0.0 if self._anchor is None else now - self._anchor
        self._set_progress(progress)
        self._set_eta(
            estimate_remaining_seconds(progress.completed, progress.total, elapsed)
        )

    def _on_done(self, payload: object) -> None:
        try:
            report = SelfPlayReport.from_payload(payload)
        except PayloadError as exc:
            self._end_run()
            self._report_error(f"Malformed self-play report: {exc}")
            return
        _LOGGER.info(
            "Self-play finished: %d/%d games%s",
            report.completed_games,
            report.total_games,
            " (stopped)" if report.stopped else "",
        )
        self._end_run()
        self._set_report(report)
        if self._on_ratings_changed is not None:
            self._on_ratings_changed()

    def _on_error(self, message: str) -> None:
        self._end_run()
        self._report_error(message)

    # ── Internal helpers ─────────────────────────────────────────────────

    def _is_current(self, run_id: int) -> bool:
        return self._busy and run_id == self._run_id

    def _end_run(self) -> None:
        self.shutdown()
        self._anchor = None
        self._stop_requested = False
        self._set_progress(None)
        self._set_eta(None)
        self._set_busy(False)

    def _report_error(self, message: str) -> None:
        self._errors.report(SessionError(ErrorSource.SELF_PLAY, message))

    def _on_flow_crash(self, exc: Exception) -> None:
        if self._busy:
            self._end_run()
        self._report_error(str(exc))

    def _set_busy(self, busy: bool) -> None:
        if busy == self._busy:
            return
        self._busy = busy
        self.busy_changed.emit(busy)

    def _set_progress(self, progress: SelfPlayProgress | None) -> None:
        if progress == self._progress:
            return
        self._progress = progress
        self.progress_changed.emit(progress)

    def _set_eta(self, seconds: float | None) -> None:
        self._eta_seconds = seconds
        self.eta_changed.emit(self.eta)

    def _set_report(self, report: SelfPlayReport | None) -> None:
        if report == self._report:
            return
        self._report = report
        self.report_changed.emit(report)
