"""Deferred-callback executors.

Both the adapter's event emission and the queue's drain steps are deferred
to "the next turn" of a single-threaded executor. Any executor used here must
run callbacks in the order they were scheduled.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable

from duplex.errors import IllegalStateError

logger = logging.getLogger(__name__)


class LoopScheduler:
    """Schedules callbacks on an asyncio event loop.

    Without an explicit loop the running loop is looked up at scheduling time,
    so one scheduler can be created before the loop starts. A bound loop is
    scheduled onto thread-safely, which lets transports that run their own
    I/O thread hand callbacks back to the loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @classmethod
    def for_current_loop(cls) -> LoopScheduler:
        """Bind to the running loop if there is one, else resolve it per call.

        Binding at construction keeps callbacks fired from a transport's own
        thread on the loop that created the owner.
        """
        try:
            return cls(asyncio.get_running_loop())
        except RuntimeError:
            return cls()

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        return self._loop

    def call_soon(self, callback: Callable[..., object], *args: object) -> None:
        if self._loop is not None:
            self._loop.call_soon_threadsafe(callback, *args)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise IllegalStateError(
                "no running event loop; bind a loop or use FifoScheduler",
            ) from exc
        loop.call_soon(callback, *args)


class FifoScheduler:
    """Manually drained FIFO executor for hosts without an asyncio loop.

    Callbacks accumulate until ``run_pending`` or ``run_until_idle`` is
    called. A callback that raises propagates to the caller of the drain
    method; callbacks behind it stay queued.
    """

    def __init__(self) -> None:
        self._pending: deque[tuple[Callable[..., object], tuple[object, ...]]] = deque()

    def __len__(self) -> int:
        return len(self._pending)

    def call_soon(self, callback: Callable[..., object], *args: object) -> None:
        self._pending.append((callback, args))

    def run_pending(self) -> int:
        """Run only the callbacks queued before this call. Returns how many ran."""
        ran = 0
        for _ in range(len(self._pending)):
            callback, args = self._pending.popleft()
            ran += 1
            callback(*args)
        return ran

    def run_until_idle(self, max_steps: int = 10_000) -> int:
        """Run callbacks, including newly scheduled ones, until none remain."""
        ran = 0
        while self._pending:
            if ran >= max_steps:
                raise IllegalStateError(f"scheduler still busy after {max_steps} callbacks")
            callback, args = self._pending.popleft()
            ran += 1
            callback(*args)
        logger.debug("FifoScheduler idle after %d callback(s)", ran)
        return ran

    def clear(self) -> None:
        self._pending.clear()


__all__ = ["FifoScheduler", "LoopScheduler"]
