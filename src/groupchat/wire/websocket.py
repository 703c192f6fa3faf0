"""WebSocket transport binding for the group chat client.

This module provides :class:`WebSocketTransport`, the production
implementation of :class:`~groupchat.core.interfaces.Transport`:

* ``send`` is a synchronous enqueue onto a bounded :class:`asyncio.Queue`.
  A writer task drains the queue onto the socket, so frames sent before
  the connection opens are delivered once it does.
* ``frames`` yields inbound frames in arrival order; binary frames are
  passed through as ``bytes``.  A normal close ends the iteration; an
  abnormal one raises :class:`ConnectionLost`.

Reconnection is the caller's concern.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedError,
    InvalidHandshake,
    InvalidURI,
)

from groupchat.core.errors import ConnectionLost, SendFailure

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_QUEUE_SIZE: int = 64
DEFAULT_OPEN_TIMEOUT: float = 10.0  # seconds


# ---------------------------------------------------------------------------
# WebSocketTransport
# ---------------------------------------------------------------------------


class WebSocketTransport:
    """Bidirectional text transport over a single WebSocket connection.

    Parameters
    ----------
    url:
        ``ws://`` or ``wss://`` URL of the chat server.
    max_queue:
        Maximum number of outbound frames waiting for the writer task.
        Sends beyond this limit raise :class:`SendFailure`.
    open_timeout:
        Seconds to wait for the opening handshake.
    """

    def __init__(
        self,
        url: str,
        *,
        max_queue: int = DEFAULT_QUEUE_SIZE,
        open_timeout: float = DEFAULT_OPEN_TIMEOUT,
    ) -> None:
        self._url = url
        self._open_timeout = open_timeout
        self._outbound: asyncio.Queue[str] = asyncio.Queue(maxsize=max_queue)
        self._ws: ClientConnection | None = None
        self._writer: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def url(self) -> str:
        return self._url

    @property
    def closed(self) -> bool:
        return self._closed

    async def open(self) -> None:
        """Perform the opening handshake and start the writer task."""
        if self._ws is not None:
            return
        try:
            self._ws = await connect(self._url, open_timeout=self._open_timeout)
        except (OSError, TimeoutError, InvalidURI, InvalidHandshake) as exc:
            raise ConnectionLost(
                f"Could not connect to {self._url}: {exc}",
                details={"url": self._url},
            ) from exc
        self._writer = asyncio.create_task(self._drain_outbound())
        logger.info("connected to %s", self._url)

    def send(self, text: str) -> None:
        if self._closed:
            raise SendFailure("Transport is closed", details={"url": self._url})
        try:
            self._outbound.put_nowait(text)
        except asyncio.QueueFull as exc:
            raise SendFailure(
                "Outbound queue is full",
                details={"url": self._url, "max_queue": self._outbound.maxsize},
            ) from exc

    async def frames(self) -> AsyncIterator[str | bytes]:
        if self._ws is None:
            await self.open()
        ws = self._connection()
        try:
            async for frame in ws:
                yield frame
        except ConnectionClosedError as exc:
            self._closed = True
            raise ConnectionLost(
                f"Connection to {self._url} closed abnormally: {exc}",
                details={"url": self._url},
            ) from exc
        self._closed = True
        logger.info("connection to %s closed by server", self._url)

    async def close(self) -> None:
        self._closed = True
        if self._writer is not None:
            self._writer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._writer
            self._writer = None
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
            logger.info("closed connection to %s", self._url)

    def _connection(self) -> ClientConnection:
        if self._ws is None:
            raise ConnectionLost("Transport is not open", details={"url": self._url})
        return self._ws

    async def _drain_outbound(self) -> None:
        ws = self._connection()
        while True:
            text = await self._outbound.get()
            try:
                await ws.send(text)
            except ConnectionClosed:
                # Frames still queued are dropped with the connection.
                self._closed = True
                logger.warning(
                    "connection to %s closed with %d frame(s) unsent",
                    self._url,
                    self._outbound.qsize() + 1,
                )
                return
