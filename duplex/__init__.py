from duplex.config import SocketOptions, build_channel_config, load_config, open_socket
from duplex.core import ChannelAdapter, EventEmitter, FifoScheduler, LoopScheduler, OrderedWorkQueue
from duplex.errors import (
    ConfigurationError,
    DuplexError,
    IllegalStateError,
    NoActiveChannelError,
    TypeMismatchError,
    UnsupportedTransportError,
)
from duplex.models import ChannelConfig, ChannelState, InterceptDirection, SocketEvent, TransportKind
from duplex.serializers import DecodeResult, JsonSerializer, try_decode

__all__ = [
    "ChannelAdapter",
    "ChannelConfig",
    "ChannelState",
    "ConfigurationError",
    "DecodeResult",
    "DuplexError",
    "EventEmitter",
    "FifoScheduler",
    "IllegalStateError",
    "InterceptDirection",
    "JsonSerializer",
    "LoopScheduler",
    "NoActiveChannelError",
    "OrderedWorkQueue",
    "SocketEvent",
    "SocketOptions",
    "TransportKind",
    "TypeMismatchError",
    "UnsupportedTransportError",
    "build_channel_config",
    "load_config",
    "open_socket",
    "try_decode",
]
