from __future__ import annotations

from duplex.models.channel import (
    ChannelConfig,
    ChannelState,
    InterceptDirection,
    SocketEvent,
    TransportKind,
)

__all__ = [
    "ChannelConfig",
    "ChannelState",
    "InterceptDirection",
    "SocketEvent",
    "TransportKind",
]
