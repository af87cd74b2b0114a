"""In-process publish/subscribe for crop notifications."""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

_LOGGER = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(kw_only=True)
class Event:
    """Base class of everything published on an :class:`EventBus`."""

    timestamp: datetime = field(default_factory=datetime.now)
    event_id: str = field(default_factory=_new_id)


EventHandler = Callable[[Event], None]


@dataclass
class Subscription:
    """Handle returned by :meth:`EventBus.subscribe`."""

    event_type: type[Event]
    handler: EventHandler
    id: str = field(default_factory=_new_id)
    active: bool = True

    def cancel(self) -> None:
        """Stop delivery without touching the bus."""
        self.active = False


class EventBus:
    """Synchronous publish/subscribe channel.

    Crop sessions run on a single thread of control, so handlers are invoked
    inline in subscription order.  Delivery is keyed on the exact event class.
    A failing handler is logged and the remaining handlers still run.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or _LOGGER
        self._subscriptions: dict[type[Event], list[Subscription]] = defaultdict(list)

    def subscribe(self, event_type: type[Event], handler: EventHandler) -> Subscription:
        subscription = Subscription(event_type=event_type, handler=handler)
        self._subscriptions[event_type].append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.cancel()
        registered = self._subscriptions.get(subscription.event_type, [])
        if subscription in registered:
            registered.remove(subscription)

    def publish(self, event: Event) -> None:
        event_type = type(event)
        # Handlers may subscribe or unsubscribe while the event is delivered.
        for subscription in list(self._subscriptions.get(event_type, ())):
            if not subscription.active:
                continue
            try:
                subscription.handler(event)
            except Exception as exc:  # noqa: BLE001
                self._logger.error("Handler failed for %s: %s", event_type.__name__, exc)
