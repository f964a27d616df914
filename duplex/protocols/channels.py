from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, TypeAlias, runtime_checkable

from duplex.models.channel import InterceptDirection

InterceptHook: TypeAlias = Callable[[InterceptDirection, str, Any], None]


@runtime_checkable
class RawChannel(Protocol):
    """A live full-duplex connection owned by a ``ChannelAdapter``.

    The four ``on_*`` slots are plain assignable attributes. The transport
    calls them; the adapter wires and unwires them.
    """

    on_open: Callable[[], None] | None
    on_error: Callable[[object], None] | None
    on_message: Callable[[str], None] | None
    on_close: Callable[[], None] | None

    def send(self, text: str) -> None: ...

    def close(self, *args: Any, **kwargs: Any) -> None: ...


@runtime_checkable
class ChannelFactory(Protocol):
    def __call__(self, endpoint_uri: str, subprotocol: str = ..., /) -> RawChannel: ...


@runtime_checkable
class Serializer(Protocol):
    def encode(self, value: Any) -> str: ...

    def decode(self, text: str) -> Any: ...


@runtime_checkable
class Scheduler(Protocol):
    """Runs deferred callbacks in FIFO order relative to each other."""

    def call_soon(self, callback: Callable[..., object], *args: object) -> None: ...


__all__ = ["ChannelFactory", "InterceptHook", "RawChannel", "Scheduler", "Serializer"]
