"""Change-notification fan-out for the session state machine."""
from __future__ import annotations

from collections.abc import Callable

from groupchat.core.types import ChangeKind

Listener = Callable[[ChangeKind], None]


class ChangeNotifier:
    """Delivers :class:`ChangeKind` signals to subscribed listeners.

    Listeners run synchronously, in subscription order, inside the step
    that caused the change.  Exceptions raised by a listener propagate to
    whoever triggered the change.
    """

    def __init__(self) -> None:
        self._listeners: dict[ChangeKind, list[Listener]] = {
            kind: [] for kind in ChangeKind
        }

    def subscribe(self, listener: Listener, *kinds: ChangeKind) -> Callable[[], None]:
        """Register *listener* for *kinds* (every kind when none are given).

        Returns a callable that removes the subscription.
        """
        selected = kinds or tuple(ChangeKind)
        for kind in selected:
            self._listeners[kind].append(listener)

        def unsubscribe() -> None:
            for kind in selected:
                if listener in self._listeners[kind]:
                    self._listeners[kind].remove(listener)

        return unsubscribe

    def emit(self, kind: ChangeKind) -> None:
        # Copy so a listener may unsubscribe itself while being notified.
        for listener in list(self._listeners[kind]):
            listener(kind)
