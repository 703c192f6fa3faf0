"""Group chat shared domain types.

This module defines every value type, enum, and Pydantic model that is
shared across the client.  All public symbols are re-exported from
``groupchat.core``.

Key design decisions:
* All models are frozen: a ``ChatMessage`` never changes after receipt,
  and snapshots handed to the presentation layer cannot be mutated.
* Enums use *string* values so they serialise cleanly to JSON and match
  the wire spelling exactly.
"""
from __future__ import annotations

import enum
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class MessageKind(enum.StrEnum):
    """The closed set of envelope kinds carried in ``messageType``."""

    USERS = "users"
    REGISTER = "register"
    MESSAGE = "message"
    TYPING = "typing"
    REACTION = "reaction"


class ChangeKind(enum.StrEnum):
    """Change-notification signals emitted by the session."""

    ROSTER = "roster-changed"
    MESSAGES = "messages-changed"
    TYPING = "typing-changed"
    REACTIONS = "reactions-changed"


# ---------------------------------------------------------------------------
# Roster
# ---------------------------------------------------------------------------

class Participant(BaseModel):
    """A chat participant as listed in the most recent roster."""

    model_config = ConfigDict(frozen=True)

    name: str
    avatar_url: str
    online: bool = True

    @classmethod
    def from_name(cls, name: str, avatar_url_template: str) -> Participant:
        """Build an online participant whose avatar is derived from *name*."""
        return cls(
            name=name,
            avatar_url=avatar_url_template.format(name=quote(name, safe="")),
            online=True,
        )


# ---------------------------------------------------------------------------
# Messages and reactions
# ---------------------------------------------------------------------------

class ChatMessage(BaseModel):
    """One entry in the append-only message history."""

    model_config = ConfigDict(frozen=True)

    sender: str
    body: str
    sent_at: str | None = None

    @property
    def is_gif(self) -> bool:
        """``True`` when the body is a link to a GIF and renders as an image."""
        return self.body.endswith(".gif")


class Reaction(BaseModel):
    """A reaction symbol attached to a message by its position in history.

    ``target_index`` is a positional reference: it is only meaningful
    while the message history is never reordered or pruned.
    """

    model_config = ConfigDict(frozen=True)

    target_index: int = Field(ge=0)
    symbol: str
