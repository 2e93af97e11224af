"""In-flight guards and the generator-flow driver used by the sessions.

A *flow* is a generator that yields :class:`EngineCall` objects and is
resumed with each call's result (or has the call's
:class:`EngineCallError` thrown into it).  Flows run synchronously up to
their first ``yield``, so a guard taken at the top of a flow is set before
any engine call leaves the process::

    def _flow(self):
        with self._guard.hold():
            snapshot = yield from expect(self._gateway.call("get_state"), parse)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from gomokie.core.payload import PayloadError
from gomokie.engine.gateway import CallFailure, EngineCall, EngineCallError

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")

Flow = Generator[EngineCall, Any, None]
CrashHandler = Callable[[Exception], None]


class GuardBusyError(RuntimeError):
    """Raised when a guard is entered while already held."""


class InFlightGuard:
    """At-most-one-in-flight latch for one logical pipeline."""

    __slots__ = ("_name", "_held", "_on_change")

    def __init__(
        self, name: str, on_change: Callable[[bool], None] | None = None
    ) -> None:
        self._name = name
        self._held = False
        self._on_change = on_change

    @property
    def busy(self) -> bool:
        return self._held

    @contextmanager
    def hold(self) -> Iterator[None]:
        """Hold the latch for the duration of the ``with`` block."""
        if self._held:
            raise GuardBusyError(f"{self._name} already in flight")
        self._set(True)
        try:
            yield
        finally:
            self._set(False)

    def _set(self, held: bool) -> None:
        self._held = held
        if self._on_change is not None:
            self._on_change(held)

    def __repr__(self) -> str:
        return f"InFlightGuard({self._name!r}, busy={self._held})"


def expect(
    call: EngineCall, parse: Callable[[Any], _T]
) -> Generator[EngineCall, Any, _T]:
    """Await *call* inside a flow and decode its result with *parse*.

    Decoding failures surface as :class:`EngineCallError` (MALFORMED) so
    flows handle a single exception type.
    """
    payload = yield call
    try:
        return parse(payload)
    except PayloadError as exc:
        raise EngineCallError(
            f"Unexpected reply to {call.command}: {exc}", CallFailure.MALFORMED
        ) from exc


def run_flow(flow: Flow, on_crash: CrashHandler | None = None) -> None:
    """Drive *flow* to completion across engine-call settlements.

    Exceptions escaping the flow are logged and handed to *on_crash*;
    they never propagate into Qt's event dispatch.
    """
    _step(flow, None, None, on_crash)


def _step(
    flow: Flow,
    value: Any,
    error: EngineCallError | None,
    on_crash: CrashHandler | None,
) -> None:
    try:
        call = flow.throw(error) if error is not None else flow.send(value)
    except StopIteration:
        return
    except Exception as exc:
        _LOGGER.exception("Session flow failed")
        if on_crash is not None:
            on_crash(exc)
        return
    call.when_done(lambda done: _step(flow, done.result, done.error, on_crash))
