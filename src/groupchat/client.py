"""Group chat client -- wires a transport to a session.

:class:`ChatClient` is the entry point for applications.  It owns a
:class:`~groupchat.session.machine.ChatSession` and pumps every inbound
frame from the transport into it, in delivery order, on the running
event loop.

Usage
-----
::

    from groupchat import ChatClientConfig, open_websocket_client

    client = await open_websocket_client(ChatClientConfig())
    client.session.subscribe(redraw)
    await client.run("alice")

Presentation code calls ``client.session.submit(...)`` and friends from
callbacks on the same loop.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from groupchat.core.config import ChatClientConfig
from groupchat.session.machine import ChatSession
from groupchat.wire.websocket import WebSocketTransport

if TYPE_CHECKING:
    from groupchat.core.interfaces import Scheduler, Transport

logger = logging.getLogger(__name__)


class ChatClient:
    """Runs one chat session over one transport.

    Parameters
    ----------
    transport:
        Connected (or lazily connecting) transport.
    config:
        Client configuration.  Defaults to ``ChatClientConfig()``.
    scheduler:
        Timer backend passed to the session.
    clock:
        Wall clock passed to the session.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        config: ChatClientConfig | None = None,
        scheduler: Scheduler | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config or ChatClientConfig()
        self._transport = transport
        self.session = ChatSession(
            transport,
            config=self._config,
            scheduler=scheduler,
            clock=clock,
        )

    @property
    def transport(self) -> Transport:
        return self._transport

    async def run(self, username: str) -> int:
        """Register *username* and apply inbound frames until the transport ends.

        Returns the number of frames received.  A
        :class:`~groupchat.core.errors.ConnectionLost` raised by the
        transport propagates after the session has been closed.
        """
        self.session.connect(username)
        logger.info("session started as %r", username)
        received = 0
        try:
            async for frame in self._transport.frames():
                received += 1
                self.session.receive(frame)
        finally:
            self.session.close()
            logger.info("session for %r ended after %d frame(s)", username, received)
        return received

    async def close(self) -> None:
        self.session.close()
        await self._transport.close()


async def open_websocket_client(
    config: ChatClientConfig | None = None,
    *,
    scheduler: Scheduler | None = None,
) -> ChatClient:
    """Connect a :class:`WebSocketTransport` to ``config.server_url`` and wrap it in a client."""
    config = config or ChatClientConfig()
    transport = WebSocketTransport(
        config.server_url,
        max_queue=config.outbound_queue_size,
        open_timeout=config.open_timeout,
    )
    await transport.open()
    return ChatClient(transport, config=config, scheduler=scheduler)
