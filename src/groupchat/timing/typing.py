"""Typing-indicator tracker.

Each remote participant named by a ``typing`` envelope stays in the set
for a fixed time-to-live.  Every new envelope for the same participant
re-arms that participant's timer; timers for different participants are
independent, so one sender expiring never clears another.
"""
from __future__ import annotations

import logging
from collections.abc import Callable

from groupchat.core.interfaces import Scheduler

logger = logging.getLogger(__name__)

DEFAULT_TYPING_TTL_MS: int = 3000

_KEY_PREFIX = "typing:"


class TypingTracker:
    """Ordered set of participants currently believed to be typing.

    Parameters
    ----------
    scheduler:
        Timer backend used for per-participant expiry.
    on_change:
        Called after every change to the set, including expiries.
    ttl_ms:
        Time-to-live of one ``typing`` envelope.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_change: Callable[[], None],
        *,
        ttl_ms: int = DEFAULT_TYPING_TTL_MS,
    ) -> None:
        self._scheduler = scheduler
        self._on_change = on_change
        self._ttl_ms = ttl_ms
        # dict preserves first-seen order for display
        self._names: dict[str, None] = {}

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def touch(self, name: str) -> None:
        """Mark *name* as typing and restart its expiry timer."""
        self._names.setdefault(name, None)
        self._scheduler.schedule(
            _KEY_PREFIX + name, self._ttl_ms, lambda: self._expire(name)
        )
        self._on_change()

    def clear(self) -> None:
        """Drop every participant and disarm their timers without notifying."""
        for name in self._names:
            self._scheduler.cancel(_KEY_PREFIX + name)
        self._names.clear()

    def _expire(self, name: str) -> None:
        if name not in self._names:
            return
        del self._names[name]
        logger.debug("typing indicator for %r expired", name)
        self._on_change()
