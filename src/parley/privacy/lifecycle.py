"""Lifecycle signal raised when an editing surface closes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Handler = Callable[[], Any]


class LifecycleSignal:
    """A "closed" event source.

    ``emit`` delivers to whoever is subscribed at that moment. It does not
    refuse a second emit; subscribers that must act once guard themselves.
    """

    def __init__(self, name: str = "closed"):
        self.name = name
        self.fired_count = 0
        self._handlers: list[tuple[Handler, bool]] = []

    @property
    def closed(self) -> bool:
        return self.fired_count > 0

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: Handler, *, once: bool = False) -> Callable[[], None]:
        """Register ``handler``; ``once`` drops it after its first delivery.

        Returns:
            A callable that removes the subscription
        """
        entry = (handler, once)
        self._handlers.append(entry)

        def unsubscribe() -> None:
            if entry in self._handlers:
                self._handlers.remove(entry)

        return unsubscribe

    def emit(self) -> None:
        self.fired_count += 1
        entries = list(self._handlers)
        self._handlers = [entry for entry in entries if not entry[1]]
        logger.debug(f"Signal {self.name!r} fired ({self.fired_count}), {len(entries)} handlers")
        for handler, _ in entries:
            handler()
