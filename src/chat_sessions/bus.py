"""
Invalidation bus. Tells views that their cached sessions are stale.

Owned by the top-level client and injected into controllers. Publishing is
fire-and-forget: subscribers run synchronously in subscription order and must
tolerate duplicate or out-of-order signals.
"""

import logging
from typing import Callable

ALL = "all"

logger = logging.getLogger(__name__)


class Invalidation:
    __slots__ = ("target", "membership_changed")

    def __init__(self, target: str, membership_changed: bool = False):
        self.target = target
        # The session moved between the archived and active lists.
        self.membership_changed = membership_changed

    @property
    def is_all(self) -> bool:
        return self.target == ALL

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Invalidation):
            return NotImplemented
        return (self.target, self.membership_changed) == (other.target, other.membership_changed)

    def __hash__(self) -> int:
        return hash((self.target, self.membership_changed))

    def __repr__(self) -> str:
        return f"Invalidation(target={self.target!r}, membership_changed={self.membership_changed!r})"


Subscriber = Callable[[Invalidation], None]


class InvalidationBus:
    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, handler: Subscriber) -> Callable[[], None]:
        """Register a handler. Returns a function that unregisters it."""
        self._subscribers.append(handler)

        def remove() -> None:
            try:
                self._subscribers.remove(handler)
            except ValueError:
                pass
        return remove

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, target: str, membership_changed: bool = False) -> Invalidation:
        signal = Invalidation(target, membership_changed)
        logger.debug(f"publish {signal!r} to {len(self._subscribers)} subscriber(s)")
        for handler in list(self._subscribers):
            try:
                handler(signal)
            except Exception:
                logger.exception(f"Invalidation subscriber failed for {signal!r}")
        return signal
