"""Group chat core -- shared types, errors, configuration and interfaces."""
from __future__ import annotations

from groupchat.core.config import DEFAULT_REACTION_PALETTE, ChatClientConfig
from groupchat.core.errors import (
    AlreadyConnected,
    ChatProtocolError,
    ConnectionLost,
    DecodeError,
    EmptyUsername,
    MalformedEnvelope,
    MissingField,
    NotConnected,
    SendFailure,
    SessionError,
    TransportError,
    UnknownKind,
)
from groupchat.core.interfaces import InMemoryTransport, Scheduler, Transport
from groupchat.core.types import (
    ChangeKind,
    ChatMessage,
    MessageKind,
    Participant,
    Reaction,
)

__all__ = [
    # Config
    "DEFAULT_REACTION_PALETTE",
    "ChatClientConfig",
    # Errors
    "ChatProtocolError",
    "DecodeError",
    "TransportError",
    "SessionError",
    "MalformedEnvelope",
    "UnknownKind",
    "MissingField",
    "SendFailure",
    "ConnectionLost",
    "EmptyUsername",
    "NotConnected",
    "AlreadyConnected",
    # Interfaces
    "Transport",
    "Scheduler",
    "InMemoryTransport",
    # Types
    "MessageKind",
    "ChangeKind",
    "Participant",
    "ChatMessage",
    "Reaction",
]
