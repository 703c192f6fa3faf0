"""Group chat wire-protocol subpackage -- envelopes, payload codecs and transport.

This subpackage provides:

* **Message models** -- envelope, nested payload codecs and envelope
  constructors (:mod:`~groupchat.wire.messages`).
* **WebSocket transport** -- the production transport binding
  (:mod:`~groupchat.wire.websocket`).
"""
from __future__ import annotations

# -- Messages ---------------------------------------------------------------
from groupchat.wire.messages import (
    VALID_MESSAGE_KINDS,
    Envelope,
    MessageBody,
    decode_chat_message,
    decode_envelope,
    decode_reaction_payload,
    encode_chat_message,
    encode_envelope,
    encode_reaction_payload,
    envelope_summary,
    message_envelope,
    reaction_envelope,
    register_envelope,
    typing_envelope,
    users_envelope,
)

# -- WebSocket transport ----------------------------------------------------
from groupchat.wire.websocket import (
    DEFAULT_OPEN_TIMEOUT,
    DEFAULT_QUEUE_SIZE,
    WebSocketTransport,
)

__all__ = [
    # Messages
    "VALID_MESSAGE_KINDS",
    "Envelope",
    "MessageBody",
    "encode_envelope",
    "decode_envelope",
    "encode_reaction_payload",
    "decode_reaction_payload",
    "encode_chat_message",
    "decode_chat_message",
    "envelope_summary",
    "users_envelope",
    "register_envelope",
    "message_envelope",
    "typing_envelope",
    "reaction_envelope",
    # WebSocket
    "DEFAULT_OPEN_TIMEOUT",
    "DEFAULT_QUEUE_SIZE",
    "WebSocketTransport",
]
