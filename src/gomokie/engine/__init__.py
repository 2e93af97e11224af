"""Engine package: wire protocol, command names and the process gateway."""

from gomokie.engine.commands import Command, EngineEvent
from gomokie.engine.gateway import (
    UNAVAILABLE_MESSAGE,
    CallFailure,
    CallSurface,
    EngineCall,
    EngineCallError,
    EngineGateway,
    EventSignal,
)
from gomokie.engine.protocol import (
    Event,
    ProtocolError,
    Request,
    Response,
    decode_message,
    encode_request,
)

__all__ = [
    "UNAVAILABLE_MESSAGE",
    "CallFailure",
    "CallSurface",
    "Command",
    "EngineCall",
    "EngineCallError",
    "EngineEvent",
    "EngineGateway",
    "Event",
    "EventSignal",
    "ProtocolError",
    "Request",
    "Response",
    "decode_message",
    "encode_request",
]
