"""Group chat client configuration.

Defines the validated configuration model consumed by the session,
the timing subsystem and the WebSocket transport.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_REACTION_PALETTE: tuple[str, ...] = (
    "\U0001F600",  # grinning face
    "\U0001F60D",  # heart eyes
    "\U0001F44D",  # thumbs up
    "\u2764\ufe0f",  # red heart
    "\U0001F602",  # tears of joy
    "\U0001F60E",  # sunglasses
    "\U0001F914",  # thinking face
    "\U0001F389",  # party popper
)


class ChatClientConfig(BaseModel):
    """Configuration for a group chat client.

    All fields carry defaults matching the reference chat server, so an
    empty ``ChatClientConfig()`` is enough for local development.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    server_url: str = Field(
        default="ws://127.0.0.1:8080",
        description="WebSocket URL of the chat server.",
    )
    typing_ttl_ms: int = Field(
        default=3000,
        ge=1,
        description=(
            "How long a remote participant stays in the typing set after "
            "their most recent typing envelope, in milliseconds."
        ),
    )
    timestamp_format: str = Field(
        default="%H:%M",
        description=(
            "strftime format used for the local receipt time of messages "
            "that arrive without a timestamp."
        ),
    )
    avatar_url_template: str = Field(
        default="https://avatars.dicebear.com/api/adventurer-neutral/{name}.svg",
        description="Avatar URL template; ``{name}`` is the URL-quoted participant name.",
    )
    reaction_palette: tuple[str, ...] = Field(
        default=DEFAULT_REACTION_PALETTE,
        min_length=1,
        description="Reaction symbols offered by the picker.",
    )
    outbound_queue_size: int = Field(
        default=64,
        ge=1,
        description=(
            "Maximum number of outbound frames buffered by the transport "
            "before sends are rejected."
        ),
    )
    open_timeout: float = Field(
        default=10.0,
        gt=0.0,
        description="Seconds to wait for the WebSocket opening handshake.",
    )
