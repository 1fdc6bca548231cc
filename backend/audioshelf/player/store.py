"""
Player Store

Single owner of PlayerState. Subscribers are notified in registration
order with (previous, current). Actions dispatched while subscribers run
are queued and applied after the current notification round.
"""
from collections import deque
from typing import Callable, Optional

from audioshelf.player.state import PlayerState, reduce

Subscriber = Callable[[PlayerState, PlayerState], None]


class PlayerStore:
    """Reducer-driven state container."""

    def __init__(self, initial: Optional[PlayerState] = None):
        self._state = initial or PlayerState()
        self._subscribers: list[Subscriber] = []
        self._pending = deque()
        self._dispatching = False

    @property
    def state(self) -> PlayerState:
        return self._state

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a subscriber; returns a function that removes it."""
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def dispatch(self, action) -> PlayerState:
        self._pending.append(action)
        if self._dispatching:
            return self._state

        self._dispatching = True
        try:
            while self._pending:
                previous = self._state
                current = reduce(previous, self._pending.popleft())
                if current is previous:
                    continue
                self._state = current
                for subscriber in list(self._subscribers):
                    subscriber(previous, current)
        finally:
            self._dispatching = False
            self._pending.clear()
        return self._state
