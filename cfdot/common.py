"""Helpers shared by commands: trace ids and line-delimited JSON output."""

from __future__ import annotations

import base64
import dataclasses
import enum
import json
import secrets
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, TextIO

__all__ = ["generate_trace_id", "to_jsonable", "write_json"]

_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def generate_trace_id() -> str:
    """Return a new random 128-bit trace id as 32 lower-case hex digits."""
    return secrets.token_hex(16)


def _key(key: Any) -> str:
    if isinstance(key, enum.Enum):
        key = key.value
    if isinstance(key, (str, int)) and not isinstance(key, bool):
        return str(key)
    raise TypeError(f"unsupported mapping key type: {type(key).__name__}")


def to_jsonable(value: Any) -> Any:
    """Convert a value built from dataclasses, enums and containers to plain JSON data.

    Dataclass fields holding None are left out; a field may rename its key
    with ``metadata={"json": name}``. Mapping keys are sorted.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, enum.Enum):
        return to_jsonable(value.value)
    to_json = getattr(value, "to_json", None)
    if callable(to_json):
        return to_jsonable(to_json())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        result = {}
        for field in dataclasses.fields(value):
            item = getattr(value, field.name)
            if item is None:
                continue
            result[field.metadata.get("json", field.name)] = to_jsonable(item)
        return result
    if isinstance(value, Mapping):
        items = {_key(k): to_jsonable(v) for k, v in value.items()}
        return dict(sorted(items.items()))
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, timedelta):
        return (value.days * 86_400 + value.seconds) * 1_000_000_000 + value.microseconds * 1_000
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(item) for item in value]
    raise TypeError(f"cannot encode value of type {type(value).__name__} as JSON")


def write_json(stream: TextIO, value: Any) -> None:
    """Write ``value`` to ``stream`` as one compact JSON line."""
    text = json.dumps(
        to_jsonable(value), separators=(",", ":"), ensure_ascii=False, allow_nan=False
    )
    for raw, escaped in _ESCAPES.items():
        text = text.replace(raw, escaped)
    stream.write(text + "\n")