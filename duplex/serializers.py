"""Message serializers and the decode result used by the adapter.

A serializer turns values into text frames and back. ``decode`` must raise
on malformed input; ``try_decode`` turns that failure into an explicit
``DecodeResult`` so callers branch on the outcome instead of catching.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any

from duplex.protocols.channels import Serializer


@dataclass(frozen=True, slots=True)
class DecodeResult:
    ok: bool
    value: Any = None
    error: Exception | None = None

    @classmethod
    def success(cls, value: Any) -> DecodeResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Exception) -> DecodeResult:
        return cls(ok=False, error=error)


def _check_json_value(value: Any, path: str = "$") -> None:
    """Reject values that JSON would silently reshape on the way back."""
    if value is None or isinstance(value, (str, bool, int)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"{path}: non-finite float {value!r} has no JSON form")
        return
    if isinstance(value, list):
        for index, item in enumerate(value):
            _check_json_value(item, f"{path}[{index}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"{path}: object key {key!r} is not a str")
            _check_json_value(item, f"{path}.{key}")
        return
    raise TypeError(f"{path}: {type(value).__name__} is not a JSON value")


class JsonSerializer:
    """Default serializer: compact UTF-8 JSON text frames.

    Only values that decode back unchanged are accepted; tuples, sets,
    non-str keys and non-finite floats raise instead of being reshaped.
    """

    def __init__(self, *, sort_keys: bool = False) -> None:
        self._sort_keys = sort_keys

    def encode(self, value: Any) -> str:
        _check_json_value(value)
        return json.dumps(
            value,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
            sort_keys=self._sort_keys,
        )

    def decode(self, text: str) -> Any:
        return json.loads(text)


def try_decode(serializer: Serializer, text: str) -> DecodeResult:
    """Decode ``text``, reporting malformed input as a failed result.

    Only the decode call itself is guarded. Anything the caller does with the
    value afterwards is outside this boundary.
    """
    try:
        value = serializer.decode(text)
    except Exception as exc:  # noqa: BLE001 - any decode failure means a malformed frame
        return DecodeResult.failure(exc)
    return DecodeResult.success(value)


__all__ = ["DecodeResult", "JsonSerializer", "try_decode"]
