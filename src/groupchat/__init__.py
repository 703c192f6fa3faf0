"""groupchat -- client for a real-time group chat service.

Keeps a local view of participants, message history, typing indicators
and reactions in sync with a chat server over one persistent connection.

Layers
------
1. Core types, errors, config, interfaces (:mod:`groupchat.core`)
2. Wire protocol codec and WebSocket transport (:mod:`groupchat.wire`)
3. Timing subsystem (:mod:`groupchat.timing`)
4. Session state machine (:mod:`groupchat.session`)
5. Client orchestrator (:mod:`groupchat.client`)
"""
from __future__ import annotations

__version__ = "0.1.0"

from groupchat.client import ChatClient, open_websocket_client
from groupchat.core.config import ChatClientConfig
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
from groupchat.session import ChatSession
from groupchat.timing import LoopScheduler, ManualScheduler, TypingTracker
from groupchat.wire import (
    Envelope,
    WebSocketTransport,
    decode_envelope,
    decode_reaction_payload,
    encode_envelope,
    encode_reaction_payload,
)

__all__ = [
    "__version__",
    # Client
    "ChatClient",
    "open_websocket_client",
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
    # Session and timing
    "ChatSession",
    "LoopScheduler",
    "ManualScheduler",
    "TypingTracker",
    # Wire
    "Envelope",
    "WebSocketTransport",
    "encode_envelope",
    "decode_envelope",
    "encode_reaction_payload",
    "decode_reaction_payload",
]
