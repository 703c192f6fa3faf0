"""Group chat abstract interfaces and in-memory implementations.

This module defines the *structural* interfaces (``typing.Protocol``) for
the collaborators consumed by the session -- the transport and the timer
scheduler -- plus an in-memory transport suitable for testing and local
development.

Every Protocol class is decorated with ``@runtime_checkable`` so that
``isinstance`` checks work at run-time in addition to static analysis.

In-memory implementations are **not** thread-safe.  They are meant to be
driven from a single event loop, like the session itself.
"""
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Protocol, runtime_checkable

from groupchat.core.errors import SendFailure

# ===================================================================
# Protocol (interface) definitions
# ===================================================================

@runtime_checkable
class Transport(Protocol):
    """A bidirectional text channel to the chat server.

    ``send`` is a synchronous enqueue, not a delivery confirmation.
    """

    def send(self, text: str) -> None:
        """Enqueue *text* for delivery.

        Raises :class:`SendFailure` if the transport refuses the frame.
        """
        ...

    def frames(self) -> AsyncIterator[str | bytes]:
        """Yield inbound frames in the order they were received.

        Binary frames are passed through undecoded.

        Iteration ends when the connection closes normally.
        """
        ...

    async def close(self) -> None:
        """Close the channel.  Idempotent."""
        ...


@runtime_checkable
class Scheduler(Protocol):
    """One-shot keyed timers.

    At most one timer is armed per key; arming a key again replaces the
    previous timer, whose callback then never runs.
    """

    def schedule(
        self, key: str, delay_ms: int, callback: Callable[[], None]
    ) -> None:
        """Run *callback* once after *delay_ms*, replacing any timer for *key*."""
        ...

    def cancel(self, key: str) -> bool:
        """Disarm the timer for *key*.  Return ``True`` if one was armed."""
        ...

    def cancel_all(self) -> None:
        """Disarm every timer."""
        ...


# ===================================================================
# In-memory implementations
# ===================================================================

class InMemoryTransport:
    """Transport that records outbound frames and replays fed inbound ones.

    Parameters
    ----------
    max_queue:
        Optional cap on the number of recorded outbound frames.  Sends
        beyond the cap raise :class:`SendFailure`, mimicking a full
        outbound buffer.
    """

    def __init__(self, *, max_queue: int | None = None) -> None:
        self.sent: list[str] = []
        self.reject_sends = False
        self._max_queue = max_queue
        self._inbound: asyncio.Queue[str | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, text: str) -> None:
        if self._closed:
            raise SendFailure("Transport is closed")
        if self.reject_sends:
            raise SendFailure("Transport is rejecting sends")
        if self._max_queue is not None and len(self.sent) >= self._max_queue:
            raise SendFailure(
                "Outbound queue is full",
                details={"max_queue": self._max_queue},
            )
        self.sent.append(text)

    def feed(self, text: str) -> None:
        """Queue *text* as if it had arrived from the server."""
        self._inbound.put_nowait(text)

    def end(self) -> None:
        """Simulate the server closing the connection after queued frames."""
        self._inbound.put_nowait(None)

    async def frames(self) -> AsyncIterator[str]:
        while True:
            frame = await self._inbound.get()
            if frame is None:
                return
            yield frame

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._inbound.put_nowait(None)
