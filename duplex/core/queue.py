"""Single-consumer, acknowledgment-driven work queue.

The consumer is offered the head item on each drain step. A truthy return
acknowledges the item: it is removed and the next drain step is scheduled
straight away. A falsy return leaves the item at the head and nothing more
happens until the queue is prompted again by ``push`` or ``process``.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from typing import Any, Self, TypeAlias

from duplex.core.scheduler import LoopScheduler
from duplex.errors import TypeMismatchError
from duplex.protocols.channels import Scheduler

logger = logging.getLogger(__name__)

Consumer: TypeAlias = Callable[[Any], object]


class OrderedWorkQueue:
    """FIFO queue drained by exactly one consumer.

    Drain steps are deferred to the scheduler and run one at a time, so the
    consumer is never re-entered and item N+1 is never offered before item N
    has been acknowledged.
    """

    def __init__(self, consumer: Consumer, *, scheduler: Scheduler | None = None) -> None:
        if not callable(consumer):
            raise TypeMismatchError("queue consumer is not callable")
        self._consumer = consumer
        self._scheduler: Scheduler = scheduler or LoopScheduler.for_current_loop()
        self._items: deque[Any] = deque()
        self._generation = 0

    def __len__(self) -> int:
        return len(self._items)

    @property
    def consumer(self) -> Consumer:
        return self._consumer

    @property
    def pending(self) -> tuple[Any, ...]:
        return tuple(self._items)

    def push(self, item: Any) -> Self:
        self._items.append(item)
        return self.process()

    def process(self) -> Self:
        self._scheduler.call_soon(self._drain_step)
        return self

    def empty(self) -> Self:
        if self._items:
            logger.debug("Discarding %d queued item(s)", len(self._items))
        self._items.clear()
        self._generation += 1
        return self

    def _drain_step(self) -> None:
        if not self._items:
            return

        generation = self._generation
        acknowledged = self._consumer(self._items[0])
        if not acknowledged:
            logger.debug("Consumer declined head item; %d item(s) waiting", len(self._items))
            return

        # An empty() issued by the consumer already discarded the head.
        if generation == self._generation:
            self._items.popleft()
        self.process()


__all__ = ["Consumer", "OrderedWorkQueue"]
