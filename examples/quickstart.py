#!/usr/bin/env python3
"""groupchat quickstart -- a scripted chat room without a server.

Demonstrates the core workflow of the client:

1. Create a session over an in-memory transport and a virtual clock.
2. Register a username.
3. Feed the frames a server would send (roster, messages, typing, reactions).
4. Act locally (type, submit, react) and inspect the outbound frames.
5. Let typing indicators expire.

Run:
    python examples/quickstart.py
"""
from __future__ import annotations

import json
import logging

from groupchat import ChangeKind, ChatSession, InMemoryTransport, ManualScheduler
from groupchat.wire.messages import (
    encode_chat_message,
    encode_envelope,
    reaction_envelope,
    typing_envelope,
    users_envelope,
)


def message_frame(sender: str, text: str) -> str:
    return json.dumps(
        {"messageType": "message", "dataArray": None, "data": encode_chat_message(sender, text)}
    )


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # -- Step 1: Session over an in-memory transport -------------------------
    transport = InMemoryTransport()
    clock = ManualScheduler()
    session = ChatSession(transport, scheduler=clock)
    session.subscribe(lambda kind: print(f"    <{kind}>"))
    print("[1] Session created")

    # -- Step 2: Register ----------------------------------------------------
    session.connect("alice")
    print(f"[2] Sent: {transport.sent[-1]}")

    # -- Step 3: Server traffic ----------------------------------------------
    print("[3] Server frames:")
    session.receive(encode_envelope(users_envelope(["alice", "bob", "carol"])))
    session.receive(message_frame("bob", "hi alice!"))
    session.receive(encode_envelope(typing_envelope("carol")))
    session.receive(encode_envelope(reaction_envelope(0, "\U0001F44D")))
    session.receive("this frame is garbage and will be dropped")

    for idx, msg in enumerate(session.messages):
        who = session.participant(msg.sender)
        avatar = who.avatar_url if who else "(left)"
        reactions = " ".join(session.reactions_for(idx))
        print(f"    [{msg.sent_at}] {msg.sender}: {msg.body} {reactions}  {avatar}")
    print(f"    {session.typing_summary()}")

    # -- Step 4: Local actions -----------------------------------------------
    session.set_composing(True)
    session.set_composing(True)  # debounced
    session.submit("hey bob")
    session.submit("   ")  # ignored
    session.react(0, session.config.reaction_palette[4])
    print("[4] Outbound frames:")
    for frame in transport.sent[1:]:
        print(f"    {frame}")

    # -- Step 5: Typing expiry -----------------------------------------------
    clock.advance(session.config.typing_ttl_ms)
    print(f"[5] Typing after {clock.now_ms} ms: {session.typing or 'nobody'}")

    changes = ", ".join(kind.value for kind in ChangeKind)
    print(f"\nSignals available to a renderer: {changes}")


if __name__ == "__main__":
    main()
