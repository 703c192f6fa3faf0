"""Group chat client error-code hierarchy.

Every failure the client can observe is represented as a concrete
exception class carrying a stable error code.

Hierarchy
---------
::

    ChatProtocolError
    +-- DecodeError           (CHAT-E1xx)
    +-- TransportError        (CHAT-E2xx)
    +-- SessionError          (CHAT-E3xx)

Usage
-----
Raise concrete subclasses directly::

    raise MissingField("Envelope of kind 'users' has no dataArray")

Catch by category::

    try:
        envelope = decode_envelope(frame)
    except DecodeError:
        # handles MalformedEnvelope, UnknownKind and MissingField
        ...
"""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class ChatProtocolError(Exception):
    """Base exception for all group chat client errors.

    Attributes
    ----------
    code : str
        Error code, e.g. ``"CHAT-E100"``.
    message : str
        Human-readable description.
    details : dict[str, Any]
        Machine-readable context specific to the error instance.
    """

    code: str = "CHAT-E000"
    message: str = "Unknown chat protocol error"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.details: dict[str, Any] = details or {}
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the error to a flat dict suitable for structured logs."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["detail"] = self.details
        return payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


# ===================================================================
# Category base classes
# ===================================================================

class DecodeError(ChatProtocolError):
    """CHAT-E1xx -- An inbound frame could not be turned into an envelope.

    The session drops the offending frame and continues with the next.
    """

    code = "CHAT-E1XX"


class TransportError(ChatProtocolError):
    """CHAT-E2xx -- The transport rejected an operation."""

    code = "CHAT-E2XX"


class SessionError(ChatProtocolError):
    """CHAT-E3xx -- A local action was invoked out of order or with bad input."""

    code = "CHAT-E3XX"


# ===================================================================
# CHAT-E1xx  Decode Errors
# ===================================================================

class MalformedEnvelope(DecodeError):
    """CHAT-E100 -- Frame is not valid JSON or violates the envelope schema."""

    code = "CHAT-E100"
    message = "Malformed envelope"


class UnknownKind(DecodeError):
    """CHAT-E101 -- ``messageType`` is outside the closed set of kinds."""

    code = "CHAT-E101"
    message = "Unknown message kind"


class MissingField(DecodeError):
    """CHAT-E102 -- The field required by the envelope's kind is absent."""

    code = "CHAT-E102"
    message = "Envelope is missing a field required by its kind"


# ===================================================================
# CHAT-E2xx  Transport Errors
# ===================================================================

class SendFailure(TransportError):
    """CHAT-E200 -- The transport refused to enqueue an outbound frame."""

    code = "CHAT-E200"
    message = "Transport rejected outbound frame"


class ConnectionLost(TransportError):
    """CHAT-E201 -- The underlying connection closed abnormally."""

    code = "CHAT-E201"
    message = "Connection to the chat server was lost"


# ===================================================================
# CHAT-E3xx  Session Errors
# ===================================================================

class EmptyUsername(SessionError):
    """CHAT-E300 -- ``connect`` was called with a blank username."""

    code = "CHAT-E300"
    message = "Username must not be empty"


class NotConnected(SessionError):
    """CHAT-E301 -- An action was invoked before ``connect``."""

    code = "CHAT-E301"
    message = "Session has not been connected; call connect() first"


class AlreadyConnected(SessionError):
    """CHAT-E302 -- ``connect`` was called twice on one session."""

    code = "CHAT-E302"
    message = "Session is already connected"
