"""Error taxonomy for the socket adapter and work queue.

Configuration and shape errors are raised synchronously at the point of
misuse. Transport failures are never raised: the adapter surfaces them as
``error`` events instead.
"""

from __future__ import annotations


class DuplexError(Exception):
    """Base class for every error raised by duplex."""


class ConfigurationError(DuplexError, ValueError):
    """A required configuration field is missing or malformed."""


class UnsupportedTransportError(ConfigurationError):
    """The configured transport kind is not one of the known kinds."""


class TypeMismatchError(DuplexError, TypeError):
    """A supplied capability (hook, serializer, factory, consumer) has the wrong shape."""


class NoActiveChannelError(DuplexError, RuntimeError):
    """An operation needing a live channel was attempted without one."""


class IllegalStateError(DuplexError, RuntimeError):
    """The adapter is in a state that does not permit the requested operation."""


__all__ = [
    "ConfigurationError",
    "DuplexError",
    "IllegalStateError",
    "NoActiveChannelError",
    "TypeMismatchError",
    "UnsupportedTransportError",
]
