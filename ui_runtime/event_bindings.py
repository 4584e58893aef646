"""Explicit callback registration for converted-scene behaviours.

The hosting application owns the event loop and calls :meth:`EventRegistry.emit`;
behaviours subscribe their handlers and keep the returned handle to unsubscribe.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

LOGGER = logging.getLogger("SpatialUIConverter.Runtime")

SLIDER_MOVED = "slider_moved"
TEXT_EDITED = "text_edited"
IDLE_TICK = "idle_tick"
ACTIVATED = "activated"


@dataclass(eq=False)
class Subscription:
    """Handle returned by :meth:`EventRegistry.subscribe`."""

    registry: "EventRegistry"
    event_name: str
    handler: Callable
    source: Optional[object] = None
    active: bool = field(default=True)

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self.registry._discard(self)


class EventRegistry:
    """Routes named events (optionally scoped to a source object) to handlers."""

    def __init__(self) -> None:
        self._subscriptions: Dict[str, List[Subscription]] = {}

    def subscribe(self, event_name: str, handler: Callable, *, source: Optional[object] = None) -> Subscription:
        """Associate ``handler`` with ``event_name``; ``source`` restricts delivery to one emitter."""

        subscription = Subscription(registry=self, event_name=event_name, handler=handler, source=source)
        self._subscriptions.setdefault(event_name, []).append(subscription)
        return subscription

    def emit(self, event_name: str, payload: object = None, *, source: Optional[object] = None) -> int:
        """Invoke matching handlers in subscription order; returns how many ran."""

        delivered = 0
        for subscription in list(self._subscriptions.get(event_name, ())):
            if not subscription.active:
                continue
            if subscription.source is not None and subscription.source is not source:
                continue
            self._invoke(subscription, payload)
            delivered += 1
        if not delivered:
            LOGGER.debug("Event '%s' had no subscribers", event_name)
        return delivered

    def has_subscribers(self, event_name: str) -> bool:
        return any(sub.active for sub in self._subscriptions.get(event_name, ()))

    def _discard(self, subscription: Subscription) -> None:
        handlers = self._subscriptions.get(subscription.event_name)
        if not handlers:
            return
        try:
            handlers.remove(subscription)
        except ValueError:
            return
        if not handlers:
            del self._subscriptions[subscription.event_name]

    @staticmethod
    def _invoke(subscription: Subscription, payload: object) -> None:
        handler = subscription.handler
        if not _accepts_argument(handler):
            handler()
            return
        handler(payload)


def _accepts_argument(handler: Callable) -> bool:
    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError):
        return False
    return len(signature.parameters) >= 1
