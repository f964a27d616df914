"""Core runtime: scheduling, events, the channel adapter and the work queue."""

from duplex.core.events import EventEmitter
from duplex.core.queue import OrderedWorkQueue
from duplex.core.scheduler import FifoScheduler, LoopScheduler
from duplex.core.socket import ChannelAdapter, validate_channel_config

__all__ = [
    "ChannelAdapter",
    "EventEmitter",
    "FifoScheduler",
    "LoopScheduler",
    "OrderedWorkQueue",
    "validate_channel_config",
]
