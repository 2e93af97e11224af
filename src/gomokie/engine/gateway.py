"""Asynchronous request/response gateway to the engine process.

The engine runs as a child process speaking newline-delimited JSON on its
stdio (see :mod:`gomokie.engine.protocol`).  Every request returns an
:class:`EngineCall` that settles exactly once on the Qt event loop.  The
gateway never retries and never interprets results; that is the caller's
policy.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from enum import StrEnum
from typing import Any, Protocol

from PyQt6.QtCore import QObject, QProcess, pyqtSignal

from gomokie.engine.protocol import (
    Event,
    ProtocolError,
    Request,
    decode_message,
    encode_request,
)

_LOGGER = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = (
    "Engine process is not running. Start the client with an engine "
    "to enable game commands."
)


class CallFailure(StrEnum):
    """Why an engine call did not produce a result."""

    UNAVAILABLE = "unavailable"  # no running engine at call time
    REJECTED = "rejected"  # engine answered with an error
    DISCONNECTED = "disconnected"  # engine exited while the call was pending
    MALFORMED = "malformed"  # reply did not decode into the expected shape


class EngineCallError(Exception):
    """Failure of a single engine call."""

    def __init__(self, message: str, failure: CallFailure) -> None:
        super().__init__(message)
        self.message = message
        self.failure = failure

    @classmethod
    def unavailable(cls) -> EngineCallError:
        return cls(UNAVAILABLE_MESSAGE, CallFailure.UNAVAILABLE)


class EngineCall(QObject):
    """One outstanding engine request, settled at most once."""

    finished = pyqtSignal()

    def __init__(self, command: str, request_id: int = 0) -> None:
        super().__init__()
        self.command = command
        self.request_id = request_id
        self._done = False
        self._result: Any = None
        self._error: EngineCallError | None = None
        self._callbacks: list[Callable[[EngineCall], None]] = []

    @classmethod
    def failed(cls, command: str, error: EngineCallError) -> EngineCall:
        """Return a call that is already rejected with *error*."""
        call = cls(command)
        call.reject(error)
        return call

    @property
    def is_done(self) -> bool:
        return self._done

    @property
    def result(self) -> Any:
        return self._result

    @property
    def error(self) -> EngineCallError | None:
        return self._error

    def resolve(self, result: Any) -> None:
        if self._done:
            return
        self._result = result
        self._settle()

    def reject(self, error: EngineCallError) -> None:
        if self._done:
            return
        self._error = error
        self._settle()

    def when_done(self, callback: Callable[[EngineCall], None]) -> None:
        """Run *callback* once settled (immediately if already settled)."""
        if self._done:
            callback(self)
            return
        self._callbacks.append(callback)

    def _settle(self) -> None:
        self._done = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)
        self.finished.emit()

    def __repr__(self) -> str:
        state = "pending"
        if self._done:
            state = "failed" if self._error is not None else "ok"
        return f"EngineCall({self.command!r}, id={self.request_id}, {state})"


class CallSurface(Protocol):
    """The single call primitive the sessions depend on."""

    def call(
        self, command: str, args: Mapping[str, Any] | None = None
    ) -> EngineCall: ...


class EventSignal(Protocol):
    """Minimal bound-signal interface for engine push events."""

    def connect(self, slot: Callable[..., object]) -> object: ...

    def disconnect(self, slot: Callable[..., object]) -> object: ...


class EngineGateway(QObject):
    """Owns the engine child process and multiplexes calls over its stdio."""

    event_received = pyqtSignal(str, object)  # name, payload
    availability_changed = pyqtSignal(bool)

    _START_TIMEOUT_MS = 5000
    _STOP_TIMEOUT_MS = 2000

    def __init__(
        self,
        program: str | None = None,
        arguments: Sequence[str] = (),
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._program = program
        self._arguments = list(arguments)
        self._process: QProcess | None = None
        self._pending: dict[int, EngineCall] = {}
        self._next_id = 0

    # ── Lifecycle ────────────────────────────────────────────────────────

    @property
    def is_available(self) -> bool:
        return (
            self._process is not None
            and self._process.state() == QProcess.ProcessState.Running
        )

    def start(self) -> bool:
        """Launch the engine process. Returns True when it is running."""
        if self.is_available:
            return True
        if not self._program:
            _LOGGER.warning("No engine program configured")
            return False

        proc = QProcess(self)
        proc.setProcessChannelMode(QProcess.ProcessChannelMode.SeparateChannels)
        proc.readyReadStandardOutput.connect(self._on_ready_read)
        proc.readyReadStandardError.connect(self._on_stderr)
        proc.errorOccurred.connect(self._on_process_error)
        proc.finished.connect(self._on_finished)
        proc.start(self._program, self._arguments)
        if not proc.waitForStarted(self._START_TIMEOUT_MS):
            _LOGGER.error("Engine failed to start: %s", self._program)
            proc.finished.disconnect(self._on_finished)
            proc.deleteLater()
            return False

        _LOGGER.info("Engine started: %s (pid %s)", self._program, proc.processId())
        self._process = proc
        self.availability_changed.emit(True)
        return True

    def shutdown(self) -> None:
        """Close the engine's stdin and wait for it to exit."""
        proc = self._process
        if proc is None:
            return
        self._process = None
        proc.finished.disconnect(self._on_finished)
        proc.closeWriteChannel()
        if not proc.waitForFinished(self._STOP_TIMEOUT_MS):
            _LOGGER.warning("Engine did not exit in time, killing it")
            proc.kill()
            proc.waitForFinished(self._STOP_TIMEOUT_MS)
        proc.deleteLater()
        self._fail_pending("Engine process was shut down")
        self.availability_changed.emit(False)

    # ── Calls ────────────────────────────────────────────────────────────

    def call(self, command: str, args: Mapping[str, Any] | None = None) -> EngineCall:
        """Send *command* to the engine and return its pending call."""
        proc = self._process
        if proc is None or not self.is_available:
            _LOGGER.debug("Engine unavailable for %s", command)
            return EngineCall.failed(command, EngineCallError.unavailable())

        self._next_id += 1
        request = Request(id=self._next_id, command=command, args=dict(args or {}))
        call = EngineCall(command, request.id)
        if proc.write(encode_request(request)) < 0:
            call.reject(
                EngineCallError(
                    f"Could not write {command} to the engine",
                    CallFailure.DISCONNECTED,
                )
            )
            return call
        self._pending[request.id] = call
        return call

    # ── Process I/O ──────────────────────────────────────────────────────

    def _on_ready_read(self) -> None:
        proc = self._process
        if proc is None:
            return
        while proc.canReadLine():
            line = bytes(proc.readLine()).decode("utf-8", errors="replace").strip()
            if line:
                self._handle_line(line)

    def _on_stderr(self) -> None:
        proc = self._process
        if proc is None:
            return
        text = bytes(proc.readAllStandardError()).decode("utf-8", errors="replace")
        for line in text.splitlines():
            if line.strip():
                _LOGGER.debug("engine: %s", line.rstrip())

    def _handle_line(self, line: str) -> None:
        try:
            message = decode_message(line)
        except ProtocolError as exc:
            _LOGGER.warning("Ignoring engine output (%s): %.200s", exc, line)
            return

        if isinstance(message, Event):
            self.event_received.emit(message.name, message.payload)
            return

        call = self._pending.pop(message.id, None)
        if call is None:
            _LOGGER.warning("Reply for unknown request id %d", message.id)
            return
        if message.error is not None:
            call.reject(EngineCallError(message.error, CallFailure.REJECTED))
        else:
            call.resolve(message.result)

    def _on_process_error(self, error: QProcess.ProcessError) -> None:
        _LOGGER.warning("Engine process error: %s", error.name)

    def _on_finished(self, exit_code: int, exit_status: QProcess.ExitStatus) -> None:
        _LOGGER.warning("Engine exited (code %d, %s)", exit_code, exit_status.name)
        proc = self._process
        self._process = None
        if proc is not None:
            proc.deleteLater()
        self._fail_pending(f"Engine process exited with code {exit_code}")
        self.availability_changed.emit(False)

    def _fail_pending(self, message: str) -> None:
        pending, self._pending = self._pending, {}
        for call in pending.values():
            call.reject(EngineCallError(message, CallFailure.DISCONNECTED))
