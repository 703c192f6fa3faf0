"""Keyed one-shot timers.

Two implementations of :class:`~groupchat.core.interfaces.Scheduler`:

* :class:`LoopScheduler` arms timers on the running asyncio event loop
  with ``loop.call_later``.  Expiries run as ordinary loop callbacks, so
  they interleave with frame processing one step at a time.
* :class:`ManualScheduler` keeps a virtual millisecond clock that only
  moves when :meth:`ManualScheduler.advance` is called.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class LoopScheduler:
    """Scheduler backed by an asyncio event loop.

    Parameters
    ----------
    loop:
        Event loop to arm timers on.  Defaults to the loop running when
        the first timer is scheduled.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._handles: dict[str, asyncio.TimerHandle] = {}

    @property
    def pending(self) -> frozenset[str]:
        return frozenset(self._handles)

    def schedule(
        self, key: str, delay_ms: int, callback: Callable[[], None]
    ) -> None:
        loop = self._loop or asyncio.get_running_loop()
        self.cancel(key)
        self._handles[key] = loop.call_later(
            delay_ms / 1000, self._fire, key, callback
        )

    def cancel(self, key: str) -> bool:
        handle = self._handles.pop(key, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()

    def _fire(self, key: str, callback: Callable[[], None]) -> None:
        self._handles.pop(key, None)
        callback()


@dataclass(order=True)
class _ManualTimer:
    deadline_ms: int
    seq: int
    key: str = field(compare=False)
    callback: Callable[[], None] = field(compare=False)


class ManualScheduler:
    """Scheduler driven by a virtual clock, for tests and simulations.

    Timers fire in deadline order (ties in scheduling order) as
    :meth:`advance` moves the clock past them.  A callback may arm new
    timers; those fire within the same ``advance`` call if they fall due.
    """

    def __init__(self) -> None:
        self._now_ms = 0
        self._seq = 0
        self._timers: dict[str, _ManualTimer] = {}

    @property
    def now_ms(self) -> int:
        return self._now_ms

    @property
    def pending(self) -> frozenset[str]:
        return frozenset(self._timers)

    def schedule(
        self, key: str, delay_ms: int, callback: Callable[[], None]
    ) -> None:
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        self._seq += 1
        self._timers[key] = _ManualTimer(
            deadline_ms=self._now_ms + delay_ms,
            seq=self._seq,
            key=key,
            callback=callback,
        )

    def cancel(self, key: str) -> bool:
        return self._timers.pop(key, None) is not None

    def cancel_all(self) -> None:
        self._timers.clear()

    def advance(self, delta_ms: int) -> int:
        """Move the clock forward by *delta_ms*, firing every timer that falls due.

        Returns the number of callbacks that ran.
        """
        if delta_ms < 0:
            raise ValueError(f"delta_ms must be >= 0, got {delta_ms}")
        target = self._now_ms + delta_ms
        fired = 0
        while self._timers:
            timer = min(self._timers.values())
            if timer.deadline_ms > target:
                break
            del self._timers[timer.key]
            self._now_ms = timer.deadline_ms
            logger.debug("timer %s fired at %d ms", timer.key, self._now_ms)
            timer.callback()
            fired += 1
        self._now_ms = target
        return fired
