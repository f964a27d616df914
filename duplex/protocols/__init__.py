from duplex.protocols.channels import (
    ChannelFactory,
    InterceptHook,
    RawChannel,
    Scheduler,
    Serializer,
)

__all__ = [
    "ChannelFactory",
    "InterceptHook",
    "RawChannel",
    "Scheduler",
    "Serializer",
]
