"""Synchronous in-process event bus."""

from __future__ import annotations

from typing import Any, Callable

import structlog

logger = structlog.get_logger(__name__)


class EventBus:
    """Publish/subscribe bus for domain events.

    A handler subscribed to a class also receives its subclasses, so one
    subscription to ``EventChange`` sees every create, update and delete.
    Handlers run synchronously in subscription order.
    """

    def __init__(self) -> None:
        self._subscriptions: list[tuple[type, Callable[[Any], None]]] = []

    def subscribe(self, event_type: type, handler: Callable[[Any], None]) -> Callable[[], None]:
        """Register *handler*; the returned callable removes it again."""
        entry = (event_type, handler)
        self._subscriptions.append(entry)

        def unsubscribe() -> None:
            if entry in self._subscriptions:
                self._subscriptions.remove(entry)

        return unsubscribe

    def publish(self, event: Any) -> None:
        matching = [h for t, h in self._subscriptions if isinstance(event, t)]
        logger.debug("domain_event_published", type=type(event).__name__, handlers=len(matching))
        for handler in matching:
            handler(event)
