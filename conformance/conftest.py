"""Shared fixtures for group chat protocol conformance tests.

Provides a connected-or-not session wired to an in-memory transport and
a virtual-clock scheduler, plus helpers that build server-side frames.
"""
from __future__ import annotations

import json
from datetime import datetime

import pytest

from groupchat.core.interfaces import InMemoryTransport
from groupchat.session import ChatSession
from groupchat.timing import ManualScheduler
from groupchat.wire.messages import (
    encode_chat_message,
    encode_envelope,
    reaction_envelope,
    typing_envelope,
    users_envelope,
)

# ---------------------------------------------------------------------------
# Common values used across tests
# ---------------------------------------------------------------------------
RECEIPT_TIME = datetime(2025, 1, 2, 8, 30, 0)
RECEIPT_DISPLAY = "08:30"


# ---------------------------------------------------------------------------
# Frame builders (server -> client)
# ---------------------------------------------------------------------------
def users_frame(*names: str) -> str:
    return encode_envelope(users_envelope(list(names)))


def message_frame(sender: str, text: str, timestamp: str | None = None) -> str:
    return json.dumps(
        {
            "messageType": "message",
            "dataArray": None,
            "data": encode_chat_message(sender, text, timestamp),
        }
    )


def typing_frame(sender: str) -> str:
    return encode_envelope(typing_envelope(sender))


def reaction_frame(index: int, symbol: str) -> str:
    return encode_envelope(reaction_envelope(index, symbol))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def transport() -> InMemoryTransport:
    return InMemoryTransport()


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def session(transport: InMemoryTransport, scheduler: ManualScheduler) -> ChatSession:
    return ChatSession(transport, scheduler=scheduler, clock=lambda: RECEIPT_TIME)


@pytest.fixture()
def connected(session: ChatSession, transport: InMemoryTransport) -> ChatSession:
    session.connect("me")
    transport.sent.clear()
    return session


def outbound_kinds(transport: InMemoryTransport) -> list[str]:
    return [json.loads(frame)["messageType"] for frame in transport.sent]
