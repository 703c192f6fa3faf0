"""Tests for the wire protocol codec.

Covers:

1. **Envelope model** -- per-kind population rules, aliases, immutability.
2. **encode_envelope / decode_envelope** -- canonical form, round-trip,
   malformed frames, unknown kinds, missing fields.
3. **Reaction payload** -- nested ``[index, symbol]`` encoding.
4. **Message body** -- nested ``{"from", "message", "timestamp"}`` object.
5. **Constructors** and **wire __init__** re-exports.
"""
from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from groupchat.core.errors import (
    DecodeError,
    MalformedEnvelope,
    MissingField,
    UnknownKind,
)
from groupchat.core.types import MessageKind
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

# =========================================================================
# Envelope model
# =========================================================================


class TestEnvelopeModel:
    """Construction-time invariants of Envelope."""

    def test_users_requires_items(self) -> None:
        """A users envelope without items cannot be built."""
        with pytest.raises(ValidationError):
            Envelope(kind=MessageKind.USERS)

    def test_users_rejects_payload(self) -> None:
        with pytest.raises(ValidationError):
            Envelope(kind=MessageKind.USERS, items=("a",), payload="x")

    def test_items_only_for_users(self) -> None:
        """Every other kind must leave items empty."""
        with pytest.raises(ValidationError):
            Envelope(kind=MessageKind.MESSAGE, items=("a",), payload="hi")

    @pytest.mark.parametrize(
        "kind", [MessageKind.REGISTER, MessageKind.MESSAGE, MessageKind.REACTION]
    )
    def test_payload_required(self, kind: MessageKind) -> None:
        with pytest.raises(ValidationError):
            Envelope(kind=kind)

    def test_typing_payload_optional(self) -> None:
        """Outbound typing carries no sender."""
        env = Envelope(kind=MessageKind.TYPING)
        assert env.payload is None
        assert env.items is None

    def test_populate_by_wire_alias(self) -> None:
        env = Envelope(messageType=MessageKind.REGISTER, data="alice")
        assert env.kind is MessageKind.REGISTER
        assert env.payload == "alice"

    def test_frozen(self) -> None:
        env = register_envelope("alice")
        with pytest.raises(ValidationError):
            env.payload = "mallory"  # type: ignore[misc]

    def test_valid_kinds_match_enum(self) -> None:
        assert VALID_MESSAGE_KINDS == {
            "users", "register", "message", "typing", "reaction",
        }


# =========================================================================
# encode_envelope / decode_envelope
# =========================================================================


class TestEncodeEnvelope:
    """Canonical text form."""

    def test_wire_field_names(self) -> None:
        data = json.loads(encode_envelope(register_envelope("alice")))
        assert data == {"messageType": "register", "dataArray": None, "data": "alice"}

    def test_users_form(self) -> None:
        data = json.loads(encode_envelope(users_envelope(["a", "b"])))
        assert data == {"messageType": "users", "dataArray": ["a", "b"], "data": None}

    def test_outbound_typing_has_null_data(self) -> None:
        data = json.loads(encode_envelope(typing_envelope()))
        assert data == {"messageType": "typing", "dataArray": None, "data": None}

    def test_compact_single_line(self) -> None:
        text = encode_envelope(message_envelope("hello\nworld"))
        assert "\n" not in text
        assert ", " not in text

    def test_non_ascii_written_as_is(self) -> None:
        assert "\U0001F600" in encode_envelope(message_envelope("hi \U0001F600"))

    def test_unpaired_surrogate_escaped(self) -> None:
        """Text that cannot be UTF-8 encoded is written with JSON escapes."""
        text = encode_envelope(message_envelope("a\udfffb"))
        assert "\\udfff" in text
        text.encode("utf-8")


class TestDecodeEnvelope:
    """Parsing and error classification."""

    @pytest.mark.parametrize(
        "envelope",
        [
            users_envelope([]),
            users_envelope(["alice", "bob"]),
            register_envelope("alice"),
            message_envelope("hi there \U0001F600"),
            message_envelope("lone \udfff surrogate"),
            typing_envelope(),
            typing_envelope("bob"),
            reaction_envelope(3, "\U0001F44D"),
            reaction_envelope(2, "\ud83d"),
        ],
    )
    def test_round_trip(self, envelope: Envelope) -> None:
        """decode(encode(e)) == e for every kind."""
        assert decode_envelope(encode_envelope(envelope)) == envelope

    def test_accepts_bytes(self) -> None:
        raw = encode_envelope(register_envelope("alice")).encode("utf-8")
        assert decode_envelope(raw) == register_envelope("alice")

    def test_missing_optional_keys_default_to_none(self) -> None:
        env = decode_envelope('{"messageType": "typing", "data": "bob"}')
        assert env == typing_envelope("bob")

    def test_extra_keys_ignored(self) -> None:
        env = decode_envelope(
            '{"messageType": "register", "data": "a", "dataArray": null, "v": 2}'
        )
        assert env.payload == "a"

    def test_not_json(self) -> None:
        with pytest.raises(MalformedEnvelope, match="Invalid JSON"):
            decode_envelope("hello there")

    def test_empty_frame(self) -> None:
        with pytest.raises(MalformedEnvelope, match="Empty"):
            decode_envelope("   ")

    def test_invalid_utf8_bytes(self) -> None:
        with pytest.raises(MalformedEnvelope):
            decode_envelope(b"\xff\xfe{}")

    @pytest.mark.parametrize("raw", ["[1, 2]", '"users"', "42", "null"])
    def test_non_object(self, raw: str) -> None:
        with pytest.raises(MalformedEnvelope, match="JSON object"):
            decode_envelope(raw)

    def test_unknown_kind(self) -> None:
        with pytest.raises(UnknownKind) as exc_info:
            decode_envelope('{"messageType": "presence", "data": "x"}')
        assert exc_info.value.details == {"messageType": "presence"}

    def test_kind_is_case_sensitive(self) -> None:
        with pytest.raises(UnknownKind):
            decode_envelope('{"messageType": "Users", "dataArray": []}')

    def test_missing_kind(self) -> None:
        with pytest.raises(UnknownKind):
            decode_envelope('{"data": "x"}')

    def test_non_string_kind(self) -> None:
        with pytest.raises(UnknownKind):
            decode_envelope('{"messageType": ["users"], "dataArray": []}')

    def test_users_without_data_array(self) -> None:
        with pytest.raises(MissingField) as exc_info:
            decode_envelope('{"messageType": "users", "dataArray": null, "data": null}')
        assert exc_info.value.details["field"] == "dataArray"

    @pytest.mark.parametrize("kind", ["register", "message", "reaction"])
    def test_payload_kinds_without_data(self, kind: str) -> None:
        with pytest.raises(MissingField):
            decode_envelope(json.dumps({"messageType": kind, "dataArray": None}))

    def test_wrong_field_type(self) -> None:
        with pytest.raises(MalformedEnvelope, match="validation failed"):
            decode_envelope('{"messageType": "register", "data": 42}')

    def test_data_array_of_non_strings(self) -> None:
        with pytest.raises(MalformedEnvelope):
            decode_envelope('{"messageType": "users", "dataArray": [1, 2]}')

    def test_population_rule_violation(self) -> None:
        with pytest.raises(MalformedEnvelope):
            decode_envelope('{"messageType": "message", "dataArray": ["x"], "data": "hi"}')

    def test_all_failures_are_decode_errors(self) -> None:
        for raw in ("nope", '{"messageType": "x"}', '{"messageType": "users"}'):
            with pytest.raises(DecodeError):
                decode_envelope(raw)


# =========================================================================
# Reaction payload
# =========================================================================


class TestReactionPayload:
    """Nested (index, symbol) encoding."""

    def test_encoded_form(self) -> None:
        assert encode_reaction_payload(0, "\U0001F44D") == '[0,"\U0001F44D"]'

    def test_unpaired_surrogate_escaped(self) -> None:
        assert encode_reaction_payload(3, "\ud83d") == '[3,"\\ud83d"]'

    @pytest.mark.parametrize(
        ("index", "symbol"),
        [
            (0, ""),
            (7, "❤️"),
            (2**40, 'quote " and \\ backslash'),
            (1, "[1,\"nested\"]"),
            (3, "\ud83d"),
            (5, "a\udfffb"),
        ],
    )
    def test_round_trip(self, index: int, symbol: str) -> None:
        assert decode_reaction_payload(encode_reaction_payload(index, symbol)) == (
            index,
            symbol,
        )

    def test_survives_envelope_layer(self) -> None:
        """Both encoding layers round-trip together."""
        env = decode_envelope(encode_envelope(reaction_envelope(4, "\U0001F389")))
        assert decode_reaction_payload(env.payload or "") == (4, "\U0001F389")

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "[1]",
            '[1, "a", 2]',
            '[-1, "a"]',
            '[1.5, "a"]',
            '[true, "a"]',
            '["1", "a"]',
            "[1, 2]",
            '{"index": 1, "symbol": "a"}',
        ],
    )
    def test_invalid(self, raw: str) -> None:
        with pytest.raises(MalformedEnvelope):
            decode_reaction_payload(raw)


# =========================================================================
# Message body
# =========================================================================


class TestMessageBody:
    """Nested body of inbound message envelopes."""

    def test_decode_with_timestamp(self) -> None:
        body = decode_chat_message('{"from": "alice", "message": "hi", "timestamp": "09:15"}')
        assert body == MessageBody(sender="alice", message="hi", timestamp="09:15")

    def test_decode_without_timestamp(self) -> None:
        body = decode_chat_message('{"from": "alice", "message": "hi"}')
        assert body.timestamp is None

    def test_encode_uses_wire_names(self) -> None:
        data = json.loads(encode_chat_message("bob", "yo", "10:00"))
        assert data == {"from": "bob", "message": "yo", "timestamp": "10:00"}

    def test_encode_omits_absent_timestamp(self) -> None:
        assert "timestamp" not in json.loads(encode_chat_message("bob", "yo"))

    def test_round_trip(self) -> None:
        body = decode_chat_message(encode_chat_message("bob", "line\nbreak", "11:11"))
        assert (body.sender, body.message, body.timestamp) == ("bob", "line\nbreak", "11:11")

    def test_missing_sender(self) -> None:
        with pytest.raises(MissingField) as exc_info:
            decode_chat_message('{"message": "hi"}')
        assert exc_info.value.details == {"fields": ["from"]}

    def test_missing_both(self) -> None:
        with pytest.raises(MissingField) as exc_info:
            decode_chat_message("{}")
        assert sorted(exc_info.value.details["fields"]) == ["from", "message"]

    @pytest.mark.parametrize(
        "raw",
        ["plain text", '"quoted"', '{"from": 1, "message": "hi"}', "[]"],
    )
    def test_malformed(self, raw: str) -> None:
        with pytest.raises(MalformedEnvelope):
            decode_chat_message(raw)


# =========================================================================
# Constructors and helpers
# =========================================================================


class TestConstructors:
    """Envelope constructors."""

    def test_users(self) -> None:
        env = users_envelope(["a", "b"])
        assert env.kind is MessageKind.USERS
        assert env.items == ("a", "b")

    def test_register(self) -> None:
        assert register_envelope("alice").payload == "alice"

    def test_message_is_raw_text(self) -> None:
        """Outbound message data is the text itself, not a nested object."""
        assert message_envelope("hello").payload == "hello"

    def test_typing_with_sender(self) -> None:
        assert typing_envelope("bob").payload == "bob"

    def test_reaction_payload_is_nested(self) -> None:
        assert reaction_envelope(2, "x").payload == '[2,"x"]'

    def test_summary(self) -> None:
        assert envelope_summary(users_envelope(["a", "b"])) == {"kind": "users", "items": 2}
        assert envelope_summary(typing_envelope()) == {"kind": "typing"}
        assert envelope_summary(register_envelope("abc")) == {
            "kind": "register",
            "payload_len": 3,
        }


class TestWireInit:
    """Re-exports from groupchat.wire."""

    def test_reexports(self) -> None:
        import groupchat.wire as wire

        for name in wire.__all__:
            assert hasattr(wire, name), name
