"""Structured logging setup with connection correlation.

Every record emitted while a connection scope is active carries that
connection's id, endpoint and transport kind, so interleaved traffic from
several adapters can be told apart in one log stream. Frames logged by
``logging_intercept`` additionally carry their direction and encoded size.
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass, fields, replace
from datetime import UTC, datetime
from typing import Any

from duplex.models.channel import InterceptDirection
from duplex.protocols.channels import InterceptHook

TRAFFIC_LOGGER = "duplex.traffic"

# Attributes set via ``extra=`` by the traffic hook; absent on other records.
_FRAME_FIELDS = ("direction", "frame_bytes")


@dataclass(frozen=True, slots=True)
class ConnectionContext:
    """Correlation fields for one adapter connection."""

    connection_id: str | None = None
    endpoint: str | None = None
    transport: str | None = None

    def merged(self, **overrides: str | None) -> ConnectionContext:
        """Return a copy where every non-``None`` override replaces the current value."""
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})


_CONTEXT_FIELDS = tuple(field.name for field in fields(ConnectionContext))
_EMPTY_CONTEXT = ConnectionContext()
_CONNECTION_CONTEXT: contextvars.ContextVar[ConnectionContext | None] = contextvars.ContextVar(
    "duplex_connection_context",
    default=None,
)


def get_connection_context() -> ConnectionContext:
    context = _CONNECTION_CONTEXT.get()
    if context is None:
        return _EMPTY_CONTEXT
    return context


class CorrelationFilter(logging.Filter):
    """Copy the active connection context onto each ``LogRecord``."""

    def filter(self, record: logging.LogRecord) -> bool:
        for name, value in asdict(get_connection_context()).items():
            setattr(record, name, value)
        return True


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object | None] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in _CONTEXT_FIELDS:
            payload[name] = getattr(record, name, None)
        for name in _FRAME_FIELDS:
            if hasattr(record, name):
                payload[name] = getattr(record, name)
        if record.exc_info is not None:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


_TEXT_FORMAT = " ".join(
    ["%(asctime)s %(levelname)s %(name)s"]
    + [f"{name}=%({name})s" for name in _CONTEXT_FIELDS]
    + ["%(message)s"]
)


def setup_logging(level: int | str = logging.INFO, json_output: bool = False) -> None:
    """Configure root logging once with correlation-aware handlers."""

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.filters.clear()

    handler = logging.StreamHandler(stream=sys.stdout)
    formatter = _JsonFormatter() if json_output else logging.Formatter(_TEXT_FORMAT)
    handler.setFormatter(formatter)

    correlation_filter = CorrelationFilter()
    handler.addFilter(correlation_filter)
    root_logger.addFilter(correlation_filter)
    root_logger.addHandler(handler)


@contextmanager
def connection_scope(
    *,
    connection_id: str | None = None,
    endpoint: str | None = None,
    transport: str | None = None,
) -> Iterator[ConnectionContext]:
    """Apply connection fields to the current context for the block's duration.

    Fields left as ``None`` keep the value of the enclosing scope.
    """

    updated = get_connection_context().merged(
        connection_id=connection_id,
        endpoint=endpoint,
        transport=transport,
    )
    token = _CONNECTION_CONTEXT.set(updated)
    try:
        yield updated
    finally:
        _CONNECTION_CONTEXT.reset(token)


def logging_intercept(
    target: logging.Logger | None = None,
    level: int = logging.DEBUG,
    *,
    max_chars: int | None = None,
) -> InterceptHook:
    """Build an intercept hook that logs every frame crossing the adapter.

    Frames longer than ``max_chars`` are shortened in the message; the
    ``frame_bytes`` attribute always reports the full UTF-8 size.
    """

    log = target or logging.getLogger(TRAFFIC_LOGGER)

    def _hook(direction: InterceptDirection, raw_text: str, value: Any) -> None:
        if not log.isEnabledFor(level):
            return
        arrow = "<-" if direction == InterceptDirection.INBOUND else "->"
        shown = raw_text
        if max_chars is not None and len(raw_text) > max_chars:
            shown = f"{raw_text[:max_chars]}...(+{len(raw_text) - max_chars} chars)"
        log.log(
            level,
            "%s %s %s",
            arrow,
            direction,
            shown,
            extra={"direction": str(direction), "frame_bytes": len(raw_text.encode("utf-8"))},
        )

    return _hook


__all__ = [
    "TRAFFIC_LOGGER",
    "ConnectionContext",
    "CorrelationFilter",
    "connection_scope",
    "get_connection_context",
    "logging_intercept",
    "setup_logging",
]
