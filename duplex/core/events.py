"""Minimal publish/subscribe emitter with deferred triggering."""

from __future__ import annotations

from collections.abc import Callable
from typing import Self, TypeAlias

from duplex.core.scheduler import LoopScheduler
from duplex.errors import TypeMismatchError
from duplex.protocols.channels import Scheduler

Listener: TypeAlias = Callable[..., object]


class EventEmitter:
    """Named-event emitter.

    Listeners are resolved when an event fires, not when it is scheduled, so a
    listener registered after ``trigger_deferred`` but before the scheduler
    runs still receives the event.
    """

    def __init__(self, scheduler: Scheduler | None = None) -> None:
        self._scheduler: Scheduler = scheduler or LoopScheduler.for_current_loop()
        self._listeners: dict[str, list[Listener]] = {}

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    def on(self, event: str, callback: Listener) -> Self:
        if not callable(callback):
            raise TypeMismatchError(f"listener for {event!r} is not callable")
        self._listeners.setdefault(event, []).append(callback)
        return self

    def once(self, event: str, callback: Listener) -> Self:
        if not callable(callback):
            raise TypeMismatchError(f"listener for {event!r} is not callable")

        def _once(*args: object) -> object:
            self.off(event, _once)
            return callback(*args)

        _once.__wrapped__ = callback  # type: ignore[attr-defined]
        return self.on(event, _once)

    def off(self, event: str | None = None, callback: Listener | None = None) -> Self:
        """Remove listeners.

        With no arguments every listener is removed. With only ``event`` all of
        that event's listeners go. With ``callback`` only matching entries go,
        including ``once`` wrappers around it.
        """
        if event is None and callback is None:
            self._listeners.clear()
            return self

        names = [event] if event is not None else list(self._listeners)
        for name in names:
            if callback is None:
                self._listeners.pop(name, None)
                continue
            remaining = [
                listener
                for listener in self._listeners.get(name, [])
                if listener != callback and getattr(listener, "__wrapped__", None) != callback
            ]
            if remaining:
                self._listeners[name] = remaining
            else:
                self._listeners.pop(name, None)
        return self

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def trigger(self, event: str, *args: object) -> Self:
        """Invoke listeners synchronously. Listener exceptions propagate."""
        for listener in list(self._listeners.get(event, [])):
            listener(*args)
        return self

    def trigger_deferred(self, event: str, *args: object) -> Self:
        """Schedule ``trigger`` on the next scheduler turn."""
        self._scheduler.call_soon(self.trigger, event, *args)
        return self


__all__ = ["EventEmitter", "Listener"]
