from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from duplex.serializers import JsonSerializer


@dataclass(slots=True)
class FakeChannel:
    """Scriptable raw channel: tests drive the native callbacks directly."""

    endpoint_uri: str
    subprotocol: str | None = None
    on_open: Callable[[], None] | None = None
    on_error: Callable[[object], None] | None = None
    on_message: Callable[[str], None] | None = None
    on_close: Callable[[], None] | None = None
    sent: list[str] = field(default_factory=list)
    close_calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = field(default_factory=list)

    def send(self, text: str) -> None:
        self.sent.append(text)

    def close(self, *args: Any, **kwargs: Any) -> None:
        self.close_calls.append((args, kwargs))

    # Transport side

    def emit_open(self) -> None:
        assert self.on_open is not None
        self.on_open()

    def emit_error(self, error: object) -> None:
        assert self.on_error is not None
        self.on_error(error)

    def emit_message(self, text: str) -> None:
        assert self.on_message is not None
        self.on_message(text)

    def emit_close(self) -> None:
        assert self.on_close is not None
        self.on_close()

    @property
    def wired(self) -> bool:
        return any(
            slot is not None for slot in (self.on_open, self.on_error, self.on_message, self.on_close)
        )


@dataclass(slots=True)
class RecordingFactory:
    """Channel factory that records the positional arguments of every call."""

    calls: list[tuple[Any, ...]] = field(default_factory=list)
    channels: list[FakeChannel] = field(default_factory=list)

    def __call__(self, *args: Any) -> FakeChannel:
        self.calls.append(args)
        channel = FakeChannel(*args)
        self.channels.append(channel)
        return channel

    @property
    def last(self) -> FakeChannel:
        return self.channels[-1]


class ExplodingSerializer:
    """Encodes like JSON but refuses to decode anything."""

    def __init__(self) -> None:
        self.decode_calls = 0

    def encode(self, value: Any) -> str:
        return JsonSerializer().encode(value)

    def decode(self, text: str) -> Any:
        self.decode_calls += 1
        raise ValueError(f"cannot decode {text!r}")


@dataclass(slots=True)
class CallLog:
    """Records an ordered trail of labelled calls across collaborators."""

    entries: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)

    def record(self, label: str, *args: Any) -> None:
        self.entries.append((label, args))

    @property
    def labels(self) -> list[str]:
        return [label for label, _ in self.entries]


class TracingSerializer:
    """JSON serializer that reports encode/decode calls to a shared CallLog."""

    def __init__(self, log: CallLog) -> None:
        self._log = log
        self._inner = JsonSerializer()

    def encode(self, value: Any) -> str:
        text = self._inner.encode(value)
        self._log.record("encode", value)
        return text

    def decode(self, text: str) -> Any:
        value = self._inner.decode(text)
        self._log.record("decode", text)
        return value
