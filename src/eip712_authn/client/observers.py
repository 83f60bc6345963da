"""Observer registry with per-subscription disposers."""

import itertools
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Disposer = Callable[[], None]


class ObserverRegistry:
    """Ordered set of handlers notified synchronously.

    Handlers are keyed by a monotonically increasing subscription id, so
    dispatch follows registration order and subscribing the same callable
    twice yields two independent subscriptions.
    """

    def __init__(self, name: str = "observers"):
        self.name = name
        self._handlers: dict[int, Callable[..., Any]] = {}
        self._ids = itertools.count()

    def __len__(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: Callable[..., Any]) -> Disposer:
        """Register a handler.

        Args:
            handler: Callable invoked with the notification arguments

        Returns:
            Disposer removing exactly this subscription
        """
        subscription_id = next(self._ids)
        self._handlers[subscription_id] = handler

        def dispose() -> None:
            self._handlers.pop(subscription_id, None)

        return dispose

    def notify(self, *args: Any) -> None:
        """Call every handler with args in registration order.

        A failing handler is logged and does not stop the others.
        """
        for subscription_id, handler in list(self._handlers.items()):
            if subscription_id not in self._handlers:
                continue
            try:
                handler(*args)
            except Exception as e:
                logger.error(f"{self.name} handler {subscription_id} failed: {e}")

    def clear(self) -> None:
        """Remove all handlers."""
        self._handlers.clear()
