"""Helpers for decoding engine payloads into typed models."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

_T = TypeVar("_T")


class PayloadError(ValueError):
    """Raised when an engine payload does not have the expected shape."""


def as_mapping(value: object, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise PayloadError(f"{what}: expected an object, got {type(value).__name__}")
    return value


def as_list(value: object, what: str) -> Sequence[Any]:
    if not isinstance(value, list | tuple):
        raise PayloadError(f"{what}: expected a list, got {type(value).__name__}")
    return value


def field(payload: Mapping[str, Any], key: str, kind: type[_T]) -> _T:
    """Return ``payload[key]`` checked against *kind*.

    ``bool`` is rejected where an ``int`` is expected, and ``int`` is
    accepted where a ``float`` is expected.
    """
    if key not in payload:
        raise PayloadError(f"missing field {key!r}")
    value = payload[key]
    if kind is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)  # type: ignore[return-value]
    if kind is int and isinstance(value, bool):
        raise PayloadError(f"field {key!r}: expected int, got bool")
    if not isinstance(value, kind):
        raise PayloadError(
            f"field {key!r}: expected {kind.__name__}, got {type(value).__name__}"
        )
    return value


def optional_field(
    payload: Mapping[str, Any],
    key: str,
    kind: type[_T],
    default: _T,
) -> _T:
    if payload.get(key) is None:
        return default
    return field(payload, key, kind)
