import heapq
import itertools
import logging
import time
from typing import Callable, List, Tuple

logger = logging.getLogger(__name__)


class ScheduledCall:
    """Handle for a deferred callback. Cancelling twice is harmless."""

    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.done = False

    def cancel(self):
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.done)


class DeferredScheduler:
    """Runs callbacks once their deadline has passed.

    Nothing runs on its own: the owner calls :meth:`run_due` whenever it is
    about to look at state (the web layer does so at the start of every
    request), so a pending call fires on the first request after its delay.
    The clock is injectable so tests never sleep.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._queue: List[Tuple[float, int, ScheduledCall]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(self.clock() + max(0.0, delay), callback)
        heapq.heappush(self._queue, (call.when, next(self._counter), call))
        return call

    @property
    def pending(self) -> int:
        return sum(1 for _, _, call in self._queue if call.active)

    def run_due(self) -> int:
        now = self.clock()
        fired = 0
        while self._queue and self._queue[0][0] <= now:
            _, _, call = heapq.heappop(self._queue)
            if not call.active:
                continue
            call.done = True
            call.callback()
            fired += 1
        if fired:
            logger.debug(f"Ran {fired} deferred call(s)")
        return fired
