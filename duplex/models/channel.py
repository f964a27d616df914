from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError


class TransportKind(StrEnum):
    """The two supported channel implementations.

    Values match the names the option layer has always used on the wire.
    """

    RAW_SOCKET = "websocket"
    POLYFILL_SOCKET = "sockjs"


class ChannelState(StrEnum):
    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class SocketEvent(StrEnum):
    OPENED = "opened"
    CLOSED = "closed"
    ERROR = "error"
    MESSAGE_RECEIVED = "message_received"


class InterceptDirection(StrEnum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class ChannelConfig(BaseModel):
    """Finished connection record consumed by ``ChannelAdapter``.

    Produced by ``duplex.config.build_channel_config`` in the normal flow, but
    the adapter validates it again when handed one directly.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, extra="forbid")

    transport_kind: TransportKind
    endpoint_uri: str
    subprotocol: str | None = None
    channel_factory: Any
    serializer: Any
    auto_reconnect: bool = True
    reconnect_interval_ms: int = Field(default=10_000, ge=0)

    @field_validator("endpoint_uri")
    @classmethod
    def _validate_endpoint(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("endpoint_uri must not be empty")
        return cleaned

    @field_validator("subprotocol")
    @classmethod
    def _validate_subprotocol(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("subprotocol must not be blank")
        return value

    @field_validator("channel_factory")
    @classmethod
    def _validate_factory(cls, value: object) -> Callable[..., Any]:
        if not callable(value):
            raise PydanticCustomError("type_mismatch", "channel_factory is not callable")
        return value

    @field_validator("serializer")
    @classmethod
    def _validate_serializer(cls, value: object) -> object:
        if value is None:
            raise PydanticCustomError("missing", "serializer is required")
        for method in ("encode", "decode"):
            if not callable(getattr(value, method, None)):
                raise PydanticCustomError(
                    "type_mismatch",
                    "serializer does not provide a callable {method}()",
                    {"method": method},
                )
        return value

    @property
    def uses_subprotocol(self) -> bool:
        return self.transport_kind is TransportKind.RAW_SOCKET and self.subprotocol is not None


__all__ = [
    "ChannelConfig",
    "ChannelState",
    "InterceptDirection",
    "SocketEvent",
    "TransportKind",
]
