"""Group chat session state machine.

:class:`ChatSession` owns the authoritative local view of a chat room --
roster, message history, typing set and reactions -- and is the only
producer of outbound envelopes.

Inbound
-------
Each frame is decoded and applied in one run-to-completion step:

* ``users`` -- the roster is swapped wholesale for the listed names.
* ``message`` -- the nested body is appended to the history; a missing
  timestamp is filled from the local wall clock.
* ``typing`` -- the sender joins the typing set and its expiry timer
  restarts.
* ``reaction`` -- the ``(index, symbol)`` pair is appended, without any
  range check on the index.
* ``register`` -- never sent by the server; ignored.

Frames that fail to decode are logged and dropped; the session carries on.

Outbound
--------
:meth:`ChatSession.connect`, :meth:`ChatSession.submit`,
:meth:`ChatSession.react` and :meth:`ChatSession.set_composing` build
envelopes and hand them to the transport.  Sends are fire-and-forget: a
rejected send is logged and reported to send-failure listeners, never
retried.  Nothing is applied locally; the server's echo is what updates
state.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING, TypeVar

from groupchat.core.config import ChatClientConfig
from groupchat.core.errors import (
    AlreadyConnected,
    DecodeError,
    EmptyUsername,
    MissingField,
    NotConnected,
    SendFailure,
)
from groupchat.core.types import (
    ChangeKind,
    ChatMessage,
    MessageKind,
    Participant,
    Reaction,
)
from groupchat.session.signals import ChangeNotifier, Listener
from groupchat.timing.scheduler import LoopScheduler
from groupchat.timing.typing import TypingTracker
from groupchat.wire.messages import (
    Envelope,
    decode_chat_message,
    decode_envelope,
    decode_reaction_payload,
    encode_envelope,
    envelope_summary,
    message_envelope,
    reaction_envelope,
    register_envelope,
    typing_envelope,
)

if TYPE_CHECKING:
    from groupchat.core.interfaces import Scheduler, Transport

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

SendFailureListener = Callable[[Envelope, SendFailure], None]


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _required(value: _T | None, envelope: Envelope, field: str) -> _T:
    if value is None:
        raise MissingField(
            f"{envelope.kind.value} envelope has no {field}",
            details={"messageType": envelope.kind.value, "field": field},
        )
    return value


class ChatSession:
    """Single-writer view of one chat room.

    Parameters
    ----------
    transport:
        Outbound channel to the server.  Only ``send`` is used here;
        inbound frames are passed to :meth:`receive` by the caller.
    config:
        Client configuration.  Defaults to ``ChatClientConfig()``.
    scheduler:
        Timer backend for typing expiry.  Defaults to a
        :class:`~groupchat.timing.scheduler.LoopScheduler` on the running
        event loop.
    clock:
        Wall clock used to stamp messages that arrive without a
        timestamp.  Defaults to local time.
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
        self._scheduler = scheduler or LoopScheduler()
        self._clock = clock or _local_now
        self._notifier = ChangeNotifier()
        self._send_failure_listeners: list[SendFailureListener] = []

        self._username: str | None = None
        self._composing = False

        self._roster: tuple[Participant, ...] = ()
        self._messages: list[ChatMessage] = []
        self._reactions: list[Reaction] = []
        self._typing = TypingTracker(
            self._scheduler,
            lambda: self._notifier.emit(ChangeKind.TYPING),
            ttl_ms=self._config.typing_ttl_ms,
        )

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    @property
    def config(self) -> ChatClientConfig:
        return self._config

    @property
    def username(self) -> str | None:
        return self._username

    @property
    def connected(self) -> bool:
        return self._username is not None

    @property
    def composing(self) -> bool:
        """The local user's typing flag (composition box is non-empty)."""
        return self._composing

    @property
    def roster(self) -> tuple[Participant, ...]:
        return self._roster

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def typing(self) -> tuple[str, ...]:
        """Names of remote participants currently typing, first-seen first."""
        return self._typing.names

    @property
    def reactions(self) -> tuple[Reaction, ...]:
        return tuple(self._reactions)

    def participant(self, name: str) -> Participant | None:
        """Look up *name* in the current roster.

        Returns ``None`` for senders who have since left the room.
        """
        for participant in self._roster:
            if participant.name == name:
                return participant
        return None

    def reactions_for(self, target_index: int) -> tuple[str, ...]:
        """Symbols attached to the message at *target_index*, in arrival order."""
        return tuple(
            reaction.symbol
            for reaction in self._reactions
            if reaction.target_index == target_index
        )

    def typing_summary(self) -> str:
        """One-line typing indicator, e.g. ``"alice, bob is typing..."``."""
        names = self._typing.names
        if not names:
            return ""
        return f"{', '.join(names)} is typing..."

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener, *kinds: ChangeKind) -> Callable[[], None]:
        """Register *listener* for change signals.  See :class:`ChangeNotifier`."""
        return self._notifier.subscribe(listener, *kinds)

    def on_send_failure(self, listener: SendFailureListener) -> None:
        """Register *listener* to be told about rejected outbound envelopes."""
        self._send_failure_listeners.append(listener)

    # ------------------------------------------------------------------
    # Local actions
    # ------------------------------------------------------------------

    def connect(self, username: str) -> None:
        """Start the session by registering *username* with the server.

        Raises
        ------
        EmptyUsername
            If *username* is blank.
        AlreadyConnected
            If the session was already started.
        """
        if not username.strip():
            raise EmptyUsername()
        if self._username is not None:
            raise AlreadyConnected(details={"username": self._username})
        self._username = username
        self._send(register_envelope(username))

    def submit(self, text: str) -> bool:
        """Send *text* as a chat message.

        Blank text is ignored.  Returns ``True`` when a message envelope
        was handed to the transport, in which case the caller should
        clear its composition box.
        """
        self._require_connected()
        if not text.strip():
            return False
        self._composing = False
        return self._send(message_envelope(text))

    def react(self, target_index: int, symbol: str) -> bool:
        """Send a reaction to the message at *target_index*.

        The reaction is not recorded locally; it appears once the server
        relays it back.
        """
        self._require_connected()
        if target_index < 0:
            raise ValueError(f"target_index must be >= 0, got {target_index}")
        return self._send(reaction_envelope(target_index, symbol))

    def set_composing(self, is_non_empty: bool) -> None:
        """Track the composition box; announce typing on the false -> true edge only."""
        self._require_connected()
        was_composing = self._composing
        self._composing = is_non_empty
        if is_non_empty and not was_composing:
            self._send(typing_envelope())

    def close(self) -> None:
        """Disarm outstanding typing timers.  State snapshots stay readable."""
        self._typing.clear()

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def receive(self, frame: str | bytes) -> bool:
        """Decode and apply one transport frame.

        Returns ``True`` if the frame changed state.  Frames that fail to
        decode are logged and dropped.
        """
        try:
            return self.apply(decode_envelope(frame))
        except DecodeError as exc:
            logger.warning("dropping inbound frame: %s", exc.to_dict())
            return False

    def apply(self, envelope: Envelope) -> bool:
        """Apply a decoded envelope to local state.

        Returns ``True`` if state changed.

        Raises
        ------
        DecodeError
            If the envelope's nested payload cannot be decoded, or an
            inbound ``typing`` envelope names no sender.  State is left
            untouched.
        """
        logger.debug("applying %s", envelope_summary(envelope))
        match envelope.kind:
            case MessageKind.USERS:
                self._replace_roster(_required(envelope.items, envelope, "dataArray"))
                self._notifier.emit(ChangeKind.ROSTER)
            case MessageKind.MESSAGE:
                self._append_message(_required(envelope.payload, envelope, "data"))
                self._notifier.emit(ChangeKind.MESSAGES)
            case MessageKind.TYPING:
                if envelope.payload is None:
                    raise MissingField(
                        "Inbound typing envelope names no sender",
                        details={"messageType": envelope.kind.value, "field": "data"},
                    )
                # The tracker emits typing-changed itself.
                self._typing.touch(envelope.payload)
            case MessageKind.REACTION:
                index, symbol = decode_reaction_payload(
                    _required(envelope.payload, envelope, "data")
                )
                self._reactions.append(Reaction(target_index=index, symbol=symbol))
                self._notifier.emit(ChangeKind.REACTIONS)
            case MessageKind.REGISTER:
                logger.debug("ignoring inbound register envelope")
                return False
        return True

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _replace_roster(self, names: tuple[str, ...]) -> None:
        template = self._config.avatar_url_template
        # Swap in a fresh tuple; duplicates keep their first position.
        self._roster = tuple(
            Participant.from_name(name, template) for name in dict.fromkeys(names)
        )

    def _append_message(self, payload: str) -> None:
        body = decode_chat_message(payload)
        sent_at = body.timestamp
        if sent_at is None:
            sent_at = self._clock().strftime(self._config.timestamp_format)
        self._messages.append(
            ChatMessage(sender=body.sender, body=body.message, sent_at=sent_at)
        )

    def _require_connected(self) -> None:
        if self._username is None:
            raise NotConnected()

    def _send(self, envelope: Envelope) -> bool:
        try:
            frame = encode_envelope(envelope)
            self._transport.send(frame)
        except SendFailure as exc:
            logger.warning(
                "send of %s envelope failed: %s", envelope.kind.value, exc.to_dict()
            )
            for listener in list(self._send_failure_listeners):
                listener(envelope, exc)
            return False
        logger.debug("sent %s", envelope_summary(envelope))
        return True
