"""Newline-delimited JSON framing between the client and the engine.

Request::

    {"id": 3, "cmd": "make_move", "args": {"x": 7, "y": 7}}

Replies carry the same id and either ``result`` or ``error``.  Messages
without an id are push events: ``{"event": name, "payload": ...}``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


class ProtocolError(ValueError):
    """Raised for a line that is not a valid engine message."""


@dataclass(frozen=True, slots=True)
class Request:
    id: int
    command: str
    args: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Response:
    id: int
    result: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class Event:
    name: str
    payload: Any = None


def encode_request(request: Request) -> bytes:
    """Serialize *request* as one UTF-8 line terminated by ``\\n``."""
    line = json.dumps(
        {"id": request.id, "cmd": request.command, "args": dict(request.args)},
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return line.encode("utf-8") + b"\n"


def decode_message(line: str) -> Response | Event:
    """Parse one line received from the engine."""
    try:
        message = json.loads(line)
    except json.JSONDecodeError as exc:
        raise ProtocolError(f"invalid JSON: {exc.msg}") from exc
    if not isinstance(message, dict):
        raise ProtocolError("message must be a JSON object")

    if "event" in message:
        name = message["event"]
        if not isinstance(name, str) or not name:
            raise ProtocolError("event name must be a non-empty string")
        return Event(name=name, payload=message.get("payload"))

    request_id = message.get("id")
    if not isinstance(request_id, int) or isinstance(request_id, bool):
        raise ProtocolError("reply is missing an integer id")
    if "error" in message and message["error"] is not None:
        return Response(id=request_id, error=str(message["error"]))
    return Response(id=request_id, result=message.get("result"))
