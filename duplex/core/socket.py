"""Channel adapter: one event-driven interface over either transport kind.

The adapter owns at most one raw channel. It wires the channel's four native
callbacks to deferred ``opened``/``error``/``message_received``/``closed``
events, decodes inbound frames, encodes outbound values, and lets an
intercept hook observe every frame in both directions.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from contextlib import AbstractContextManager
from typing import Any, NoReturn, Self

from pydantic import ValidationError

from duplex.core.events import EventEmitter
from duplex.core.logging import ConnectionContext, connection_scope
from duplex.errors import (
    ConfigurationError,
    IllegalStateError,
    NoActiveChannelError,
    TypeMismatchError,
    UnsupportedTransportError,
)
from duplex.models.channel import ChannelConfig, ChannelState, InterceptDirection, SocketEvent
from duplex.protocols.channels import InterceptHook, RawChannel, Scheduler
from duplex.serializers import try_decode

logger = logging.getLogger(__name__)

_CALLBACK_SLOTS = ("on_open", "on_error", "on_message", "on_close")


def _raise_config_error(exc: ValidationError) -> NoReturn:
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "config"
        if error["type"] == "type_mismatch":
            raise TypeMismatchError(f"{field}: {error['msg']}") from exc
        if field == "transport_kind" and error["type"] == "enum" and error.get("input") is not None:
            raise UnsupportedTransportError(
                f"unknown transport_kind: {error['input']!r}",
            ) from exc
    raise ConfigurationError(f"invalid channel config: {exc}") from exc


def validate_channel_config(config: ChannelConfig | Mapping[str, Any]) -> ChannelConfig:
    """Re-validate a config handed to the adapter directly.

    Accepts a mapping or a ``ChannelConfig``, including one built with
    ``model_construct`` that never went through validation.
    """
    if isinstance(config, ChannelConfig):
        raw = {name: getattr(config, name) for name in ChannelConfig.model_fields if hasattr(config, name)}
    elif isinstance(config, Mapping):
        raw = dict(config)
    else:
        raise ConfigurationError(f"channel config must be a ChannelConfig or mapping, got {type(config).__name__}")

    try:
        return ChannelConfig.model_validate(raw)
    except ValidationError as exc:
        _raise_config_error(exc)


class ChannelAdapter(EventEmitter):
    """Event-driven wrapper around a single raw channel.

    Lifecycle: ``UNCONNECTED`` -> ``CONNECTING`` on ``connect()``, ``OPEN``
    when the transport reports open, ``CLOSED`` when it reports close.
    Transport errors do not change state. Once closed, the channel reference
    and its callbacks are released and ``connect()`` may start a new one.

    Events are always delivered on a later scheduler turn than the native
    callback that produced them. Events scheduled before ``disconnect()``
    still fire afterwards.
    """

    def __init__(
        self,
        config: ChannelConfig | Mapping[str, Any],
        *,
        scheduler: Scheduler | None = None,
    ) -> None:
        super().__init__(scheduler)
        self._config = validate_channel_config(config)
        self._live_channel: RawChannel | None = None
        self._intercept_hook: InterceptHook | None = None
        self._state = ChannelState.UNCONNECTED
        self._connection_id: str | None = None

    @property
    def config(self) -> ChannelConfig:
        return self._config

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def live_channel(self) -> RawChannel | None:
        return self._live_channel

    @property
    def connection_id(self) -> str | None:
        return self._connection_id

    def _scope(self) -> AbstractContextManager[ConnectionContext]:
        return connection_scope(
            connection_id=self._connection_id,
            endpoint=self._config.endpoint_uri,
            transport=str(self._config.transport_kind),
        )

    # ── Lifecycle ────────────────────────────────────────────────────

    def connect(self) -> Self:
        if self._live_channel is not None:
            raise IllegalStateError(
                f"channel already live in state {self._state}; call disconnect() and wait for close",
            )

        config = self._config
        if config.uses_subprotocol:
            channel = config.channel_factory(config.endpoint_uri, config.subprotocol)
        else:
            channel = config.channel_factory(config.endpoint_uri)

        self._live_channel = channel
        self._connection_id = uuid.uuid4().hex
        self._state = ChannelState.CONNECTING

        channel.on_close = self._handle_close
        channel.on_error = self._handle_error
        channel.on_message = self._handle_message
        channel.on_open = self._handle_open

        with self._scope():
            logger.info("Connecting %s channel", config.transport_kind)
        return self

    def disconnect(self, *args: Any, **kwargs: Any) -> Self:
        """Ask the live channel to close; the reference is released on close."""
        channel = self._require_channel("disconnect")
        with self._scope():
            logger.info("Disconnect requested")
        channel.close(*args, **kwargs)
        return self

    def send(self, value: Any) -> Self:
        channel = self._require_channel("send")
        text = self._config.serializer.encode(value)
        self._intercept(InterceptDirection.OUTBOUND, text, value)
        channel.send(text)
        return self

    # ── Intercept hook ───────────────────────────────────────────────

    def get_intercept_hook(self) -> InterceptHook | None:
        return self._intercept_hook

    def set_intercept_hook(self, hook: InterceptHook) -> None:
        if not callable(hook):
            raise TypeMismatchError("intercept hook is not callable")
        self._intercept_hook = hook

    def clear_intercept_hook(self) -> None:
        self._intercept_hook = None

    def _intercept(self, direction: InterceptDirection, raw_text: str, value: Any) -> None:
        hook = self._intercept_hook
        if hook is None:
            return
        try:
            hook(direction, raw_text, value)
        except Exception:  # noqa: BLE001
            with self._scope():
                logger.warning("Intercept hook failed for %s frame", direction, exc_info=True)

    # ── Native callbacks ─────────────────────────────────────────────

    def _handle_open(self) -> None:
        self._state = ChannelState.OPEN
        with self._scope():
            logger.info("Channel open")
        self.trigger_deferred(SocketEvent.OPENED)

    def _handle_error(self, error: object) -> None:
        with self._scope():
            logger.warning("Transport error: %r", error)
        self.trigger_deferred(SocketEvent.ERROR, error)

    def _handle_message(self, raw_text: str) -> None:
        result = try_decode(self._config.serializer, raw_text)
        if not result.ok:
            with self._scope():
                logger.debug("Dropped undecodable frame: %s", result.error)
            return

        self._intercept(InterceptDirection.INBOUND, raw_text, result.value)
        self.trigger_deferred(SocketEvent.MESSAGE_RECEIVED, result.value)

    def _handle_close(self) -> None:
        self._state = ChannelState.CLOSED
        channel = self._live_channel
        if channel is not None:
            for slot in _CALLBACK_SLOTS:
                setattr(channel, slot, None)
        self._live_channel = None
        with self._scope():
            logger.info("Channel closed")
        self.trigger_deferred(SocketEvent.CLOSED)

    def _require_channel(self, operation: str) -> RawChannel:
        if self._live_channel is None:
            raise NoActiveChannelError(f"{operation}() requires a live channel; call connect() first")
        return self._live_channel


__all__ = ["ChannelAdapter", "validate_channel_config"]
