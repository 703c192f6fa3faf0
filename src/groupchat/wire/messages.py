"""Group chat wire-protocol message models and helpers.

This module provides:

* **Envelope** -- the wire wrapper ``{"messageType", "dataArray", "data"}``
  with its per-kind population rules enforced at construction time.
* **Encoding / decoding** of envelopes to and from JSON text.
* **Nested payload codecs** -- the ``(index, symbol)`` pair carried by
  ``reaction`` envelopes and the ``{"from", "message", "timestamp"}``
  object carried by inbound ``message`` envelopes.
* **Constructors** for every envelope kind.

All helpers are *synchronous* and side-effect-free.
"""
from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    model_validator,
)

from groupchat.core.errors import MalformedEnvelope, MissingField, UnknownKind
from groupchat.core.types import MessageKind

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VALID_MESSAGE_KINDS: frozenset[str] = frozenset(kind.value for kind in MessageKind)
"""Wire spellings accepted in ``messageType``."""

ENVELOPE_FIELDS: tuple[str, ...] = ("messageType", "dataArray", "data")

# Kinds whose ``data`` field must be present.  ``typing`` is absent on
# purpose: the client sends it with ``data: null`` and the server stamps
# the sender before relaying.
_PAYLOAD_REQUIRED: frozenset[MessageKind] = frozenset(
    {MessageKind.REGISTER, MessageKind.MESSAGE, MessageKind.REACTION}
)


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------

class Envelope(BaseModel):
    """One discrete unit of protocol exchange.

    ``items`` is populated only for ``users``; ``payload`` is populated
    for every other kind except outbound ``typing``.  Envelopes that break
    these rules cannot be constructed.
    """

    model_config = ConfigDict(strict=True, frozen=True, populate_by_name=True)

    kind: MessageKind = Field(alias="messageType")
    items: tuple[str, ...] | None = Field(default=None, alias="dataArray")
    payload: str | None = Field(default=None, alias="data")

    @model_validator(mode="after")
    def _check_population(self) -> Envelope:
        if self.kind is MessageKind.USERS:
            if self.items is None:
                raise ValueError("users envelope requires dataArray")
            if self.payload is not None:
                raise ValueError("users envelope must not carry data")
            return self
        if self.items is not None:
            raise ValueError(f"{self.kind.value} envelope must not carry dataArray")
        if self.kind in _PAYLOAD_REQUIRED and self.payload is None:
            raise ValueError(f"{self.kind.value} envelope requires data")
        return self


class MessageBody(BaseModel):
    """Nested object carried in the ``data`` field of inbound ``message`` envelopes."""

    model_config = ConfigDict(strict=True, frozen=True, populate_by_name=True)

    sender: str = Field(alias="from")
    message: str
    timestamp: str | None = None


_REACTION_PAIR: TypeAdapter[tuple[int, str]] = TypeAdapter(
    tuple[Annotated[int, Field(ge=0)], str],
    config=ConfigDict(strict=True),
)


def _dump_json(obj: Any) -> str:
    """Compact JSON text that always encodes to UTF-8.

    Non-ASCII text is written as-is unless a string holds a lone
    surrogate, in which case the whole document falls back to ``\\uXXXX``
    escapes.
    """
    text = json.dumps(obj, separators=(",", ":"), ensure_ascii=False)
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        text = json.dumps(obj, separators=(",", ":"))
    return text


# ---------------------------------------------------------------------------
# Envelope serialisation
# ---------------------------------------------------------------------------

def encode_envelope(envelope: Envelope) -> str:
    """Serialise an :class:`Envelope` to compact JSON text.

    Absent fields are written as ``null`` so every frame carries all
    three keys.
    """
    data = envelope.model_dump(by_alias=True)
    data["messageType"] = envelope.kind.value
    return _dump_json(data)


def decode_envelope(raw: str | bytes) -> Envelope:
    """Parse one transport frame into an :class:`Envelope`.

    Raises
    ------
    MalformedEnvelope
        If the input is not a JSON object or a field has the wrong type.
    UnknownKind
        If ``messageType`` is not one of the five known kinds.
    MissingField
        If the field required by the kind is absent or null.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedEnvelope(f"Frame is not UTF-8: {exc}") from exc

    raw = raw.strip()
    if not raw:
        raise MalformedEnvelope("Empty frame")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedEnvelope(f"Invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise MalformedEnvelope(
            "Envelope must be a JSON object",
            details={"type": type(data).__name__},
        )

    kind = data.get("messageType")
    if not isinstance(kind, str) or kind not in VALID_MESSAGE_KINDS:
        raise UnknownKind(
            f"Unknown message kind: {kind!r}",
            details={"messageType": kind},
        )

    kind = MessageKind(kind)
    if kind is MessageKind.USERS and data.get("dataArray") is None:
        raise MissingField(
            "users envelope has no dataArray",
            details={"messageType": kind.value, "field": "dataArray"},
        )
    if kind in _PAYLOAD_REQUIRED and data.get("data") is None:
        raise MissingField(
            f"{kind.value} envelope has no data",
            details={"messageType": kind.value, "field": "data"},
        )

    # Validate the parsed object so escaped surrogates survive; lax mode
    # only to accept JSON arrays and enum spellings.
    try:
        return Envelope.model_validate(data, strict=False)
    except ValidationError as exc:
        raise MalformedEnvelope(
            f"Envelope validation failed: {exc}",
            details={"messageType": kind.value},
        ) from exc


# ---------------------------------------------------------------------------
# Nested payloads
# ---------------------------------------------------------------------------

def encode_reaction_payload(target_index: int, symbol: str) -> str:
    """Serialise a reaction as the nested JSON array ``[index, symbol]``."""
    return _dump_json([target_index, symbol])


def decode_reaction_payload(raw: str) -> tuple[int, str]:
    """Recover the ``(index, symbol)`` pair from a reaction payload.

    Raises :class:`MalformedEnvelope` unless *raw* is a two-element JSON
    array holding a non-negative integer and a string.
    """
    try:
        pair = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedEnvelope(
            f"Invalid reaction payload: {exc}",
            details={"payload": raw},
        ) from exc
    if not isinstance(pair, list):
        raise MalformedEnvelope(
            "Reaction payload must be a JSON array",
            details={"payload": raw},
        )
    try:
        return _REACTION_PAIR.validate_python(tuple(pair))
    except ValidationError as exc:
        raise MalformedEnvelope(
            f"Invalid reaction payload: {exc}",
            details={"payload": raw},
        ) from exc


def encode_chat_message(sender: str, message: str, timestamp: str | None = None) -> str:
    """Serialise a message body the way the server relays it to clients."""
    body = MessageBody(sender=sender, message=message, timestamp=timestamp)
    return _dump_json(body.model_dump(by_alias=True, exclude_none=True))


def decode_chat_message(raw: str) -> MessageBody:
    """Parse the nested body of an inbound ``message`` envelope.

    Raises
    ------
    MissingField
        If ``from`` or ``message`` is absent.
    MalformedEnvelope
        If the body is not a JSON object or a field has the wrong type.
    """
    try:
        return MessageBody.model_validate_json(raw)
    except ValidationError as exc:
        missing = [
            str(err["loc"][0])
            for err in exc.errors()
            if err["type"] == "missing" and err["loc"]
        ]
        if missing:
            raise MissingField(
                f"Message body is missing {', '.join(missing)}",
                details={"fields": missing},
            ) from exc
        raise MalformedEnvelope(f"Invalid message body: {exc}") from exc


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------

def users_envelope(names: list[str] | tuple[str, ...]) -> Envelope:
    """Build the ``users`` envelope the server sends with the full roster."""
    return Envelope(kind=MessageKind.USERS, items=tuple(names))


def register_envelope(username: str) -> Envelope:
    return Envelope(kind=MessageKind.REGISTER, payload=username)


def message_envelope(text: str) -> Envelope:
    return Envelope(kind=MessageKind.MESSAGE, payload=text)


def typing_envelope(sender: str | None = None) -> Envelope:
    """Build a ``typing`` envelope.

    Clients send it without a sender; the server fills *sender* in when
    relaying it to everyone else.
    """
    return Envelope(kind=MessageKind.TYPING, payload=sender)


def reaction_envelope(target_index: int, symbol: str) -> Envelope:
    return Envelope(
        kind=MessageKind.REACTION,
        payload=encode_reaction_payload(target_index, symbol),
    )


def envelope_summary(envelope: Envelope) -> dict[str, Any]:
    """Return a short, log-friendly description of *envelope*."""
    summary: dict[str, Any] = {"kind": envelope.kind.value}
    if envelope.items is not None:
        summary["items"] = len(envelope.items)
    if envelope.payload is not None:
        summary["payload_len"] = len(envelope.payload)
    return summary
