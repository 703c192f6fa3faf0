#!/usr/bin/env python3
"""Minimal line-oriented chat client over WebSocket.

Lines typed on stdin are submitted as messages.  ``/react N SYMBOL``
reacts to message N.  Every change signal reprints the affected part of
the room.

Run:
    python examples/terminal_chat.py alice --url ws://127.0.0.1:8080
"""
from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys

from groupchat import ChangeKind, ChatClientConfig, ConnectionLost, open_websocket_client
from groupchat.session import ChatSession


def render(session: ChatSession, kind: ChangeKind) -> None:
    match kind:
        case ChangeKind.ROSTER:
            print("* online: " + ", ".join(p.name for p in session.roster))
        case ChangeKind.MESSAGES:
            idx = len(session.messages) - 1
            msg = session.messages[idx]
            print(f"{idx:>3} [{msg.sent_at}] {msg.sender}: {msg.body}")
        case ChangeKind.TYPING:
            if summary := session.typing_summary():
                print(f"* {summary}")
        case ChangeKind.REACTIONS:
            last = session.reactions[-1]
            print(f"* reaction {last.symbol} on message {last.target_index}")


REACT_USAGE = "usage: /react INDEX SYMBOL"


def handle_line(session: ChatSession, line: str) -> None:
    """Submit *line*, or react when it is a ``/react`` command."""
    if line.startswith("/react"):
        try:
            _, index, symbol = line.split(" ", 2)
            session.react(int(index), symbol)
        except ValueError:
            print(REACT_USAGE, file=sys.stderr)
        return
    session.set_composing(bool(line))
    session.submit(line)


async def read_input(session: ChatSession) -> None:
    # POSIX only: stdin is watched by the event loop, so input is handled
    # between frames like any other step.
    loop = asyncio.get_running_loop()
    lines: asyncio.Queue[str] = asyncio.Queue()
    loop.add_reader(sys.stdin, lambda: lines.put_nowait(sys.stdin.readline()))
    try:
        while line := await lines.get():
            handle_line(session, line.rstrip("\n"))
    finally:
        loop.remove_reader(sys.stdin)


async def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("username")
    parser.add_argument("--url", default=ChatClientConfig().server_url)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    client = await open_websocket_client(ChatClientConfig(server_url=args.url))
    client.session.subscribe(lambda kind: render(client.session, kind))
    run = asyncio.create_task(client.run(args.username))
    await asyncio.sleep(0)  # let run() register before reading input
    typer = asyncio.create_task(read_input(client.session))
    try:
        await run
    except ConnectionLost as exc:
        print(f"connection lost: {exc}", file=sys.stderr)
        return 1
    finally:
        typer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await typer
        await client.close()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
