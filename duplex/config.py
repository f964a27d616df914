"""Socket options and the collaborator that turns them into a ChannelConfig.

``SocketOptions`` holds the user-facing settings (host, TLS, paths, reconnect
surface). ``build_channel_config`` resolves them into the finished record the
adapter consumes: it picks the transport from the factories it is given,
builds the endpoint URI and drops the subprotocol for polyfill transports.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, get_args

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from duplex.core.socket import ChannelAdapter
from duplex.errors import ConfigurationError, TypeMismatchError
from duplex.models.channel import ChannelConfig, TransportKind
from duplex.protocols.channels import ChannelFactory, Scheduler, Serializer
from duplex.serializers import JsonSerializer

logger = logging.getLogger(__name__)

_ENV_PREFIX = "DUPLEX_"


class SocketOptions(BaseSettings):
    host: str
    ssl: bool = False
    auto_connect: bool = True
    auto_reconnect: bool = True
    reconnect_interval_ms: int = Field(default=10_000, ge=0)
    protocol: str | None = None
    websocket_path: str = "websocket"
    sockjs_path: str = "sockjs"

    model_config = SettingsConfigDict(
        env_prefix=_ENV_PREFIX,
        extra="ignore",
    )

    @field_validator("host")
    @classmethod
    def _validate_host(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("host must not be empty")
        return cleaned

    @field_validator("websocket_path", "sockjs_path")
    @classmethod
    def _strip_path(cls, value: str) -> str:
        return value.strip("/")


def build_endpoint(kind: TransportKind, host: str, ssl: bool, path: str) -> str:
    if kind is TransportKind.RAW_SOCKET:
        scheme = "wss://" if ssl else "ws://"
    else:
        scheme = "https://" if ssl else "http://"
    return f"{scheme}{host}/{path}"


def build_channel_config(
    options: SocketOptions,
    *,
    websocket_factory: ChannelFactory | None = None,
    sockjs_factory: ChannelFactory | None = None,
    serializer: Serializer | None = None,
) -> ChannelConfig:
    """Resolve options into a finished ``ChannelConfig``.

    The polyfill transport wins when its factory is supplied; otherwise the
    raw websocket factory is used.
    """
    if sockjs_factory is not None:
        kind = TransportKind.POLYFILL_SOCKET
        factory = sockjs_factory
        path = options.sockjs_path
    elif websocket_factory is not None:
        kind = TransportKind.RAW_SOCKET
        factory = websocket_factory
        path = options.websocket_path
    else:
        raise ConfigurationError("no channel factory supplied; pass websocket_factory or sockjs_factory")

    if not callable(factory):
        raise TypeMismatchError(f"{kind} channel factory is not callable")

    endpoint = build_endpoint(kind, options.host, options.ssl, path)
    logger.debug("Resolved %s endpoint %s", kind, endpoint)
    return ChannelConfig(
        transport_kind=kind,
        endpoint_uri=endpoint,
        subprotocol=options.protocol if kind is TransportKind.RAW_SOCKET else None,
        channel_factory=factory,
        serializer=serializer if serializer is not None else JsonSerializer(),
        auto_reconnect=options.auto_reconnect,
        reconnect_interval_ms=options.reconnect_interval_ms,
    )


def open_socket(
    options: SocketOptions,
    *,
    websocket_factory: ChannelFactory | None = None,
    sockjs_factory: ChannelFactory | None = None,
    serializer: Serializer | None = None,
    scheduler: Scheduler | None = None,
) -> ChannelAdapter:
    """Build an adapter from options, connecting it when ``auto_connect`` is set."""
    config = build_channel_config(
        options,
        websocket_factory=websocket_factory,
        sockjs_factory=sockjs_factory,
        serializer=serializer,
    )
    adapter = ChannelAdapter(config, scheduler=scheduler)
    if options.auto_connect:
        adapter.connect()
    return adapter


def _text_fields() -> frozenset[str]:
    names: set[str] = set()
    for name, field in SocketOptions.model_fields.items():
        annotation = field.annotation
        if annotation is str or str in get_args(annotation):
            names.add(name)
    return frozenset(names)


def _coerce_env_value(value: str) -> object:
    parsed = yaml.safe_load(value)
    return value if parsed is None else parsed


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay ``DUPLEX_*`` variables; text-typed fields keep the raw string."""
    merged = dict(data)
    text_fields = _text_fields()
    for key, raw_value in os.environ.items():
        if not key.startswith(_ENV_PREFIX):
            continue
        name = key[len(_ENV_PREFIX) :].lower()
        merged[name] = raw_value if name in text_fields else _coerce_env_value(raw_value)
    return merged


def load_config(path: str | Path = "config/duplex.yaml") -> SocketOptions:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"config file not found: {config_path}")

    loaded = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(loaded, dict):
        raise ValueError("config file must contain a top-level mapping")

    raw = loaded.get("duplex", loaded)
    if not isinstance(raw, dict):
        raise ValueError("duplex config section must be a mapping")

    return SocketOptions.model_validate(_apply_env_overrides(raw))


__all__ = [
    "SocketOptions",
    "build_channel_config",
    "build_endpoint",
    "load_config",
    "open_socket",
]
