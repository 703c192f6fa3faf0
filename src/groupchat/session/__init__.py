"""Group chat session subpackage -- the client-side state machine."""
from __future__ import annotations

from groupchat.session.machine import ChatSession, SendFailureListener
from groupchat.session.signals import ChangeNotifier, Listener

__all__ = [
    "ChangeNotifier",
    "ChatSession",
    "Listener",
    "SendFailureListener",
]
