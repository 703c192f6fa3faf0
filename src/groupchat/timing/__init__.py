"""Group chat timing subsystem -- keyed expiry timers and the typing tracker."""
from __future__ import annotations

from groupchat.timing.scheduler import LoopScheduler, ManualScheduler
from groupchat.timing.typing import DEFAULT_TYPING_TTL_MS, TypingTracker

__all__ = [
    "DEFAULT_TYPING_TTL_MS",
    "LoopScheduler",
    "ManualScheduler",
    "TypingTracker",
]
