"""
Explicit publish/subscribe bus shared by dashboard components.

Parts of the application that create notifications publish
``NOTIFICATIONS_REFRESH`` on the bus they were handed; the bell widget
subscribes to it. Browser signals (page visibility, window focus, pointer
presses outside the dropdown) are republished by the widget's JavaScript
bridge on a separate bus owned by that widget, so one browser tab never
triggers another tab's bell.
"""
import asyncio
import inspect
from typing import Any, Callable, Dict, List, Optional

from notibell.utils.log_service import error

NOTIFICATIONS_REFRESH = "notifications:refresh"
PAGE_VISIBLE = "page:visible"
WINDOW_FOCUS = "window:focus"
POINTER_OUTSIDE = "pointer:outside"

Handler = Callable[..., Any]


class Subscription:
    """Handle returned by :meth:`EventBus.subscribe`; call ``cancel()`` to release it"""

    def __init__(self, bus: "EventBus", topic: str, handler: Handler):
        self.bus = bus
        self.topic = topic
        self.handler = handler
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.bus._remove(self)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()


class EventBus:
    """Minimal synchronous pub/sub with per-topic handler lists"""

    def __init__(self, name: str = "events"):
        self.name = name
        self._subscribers: Dict[str, List[Subscription]] = {}

    def subscribe(self, topic: str, handler: Handler) -> Subscription:
        subscription = Subscription(self, topic, handler)
        self._subscribers.setdefault(topic, []).append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        handlers = self._subscribers.get(subscription.topic, [])
        if subscription in handlers:
            handlers.remove(subscription)
        if not handlers:
            self._subscribers.pop(subscription.topic, None)

    def subscriber_count(self, topic: Optional[str] = None) -> int:
        if topic is not None:
            return len(self._subscribers.get(topic, []))
        return sum(len(subs) for subs in self._subscribers.values())

    def publish(self, topic: str, payload: Any = None) -> int:
        """Deliver ``payload`` to every handler of ``topic``; returns the count.

        Handlers returning an awaitable are scheduled on the running loop. A
        failing handler is logged and does not stop delivery to the others.
        """
        delivered = 0
        for subscription in list(self._subscribers.get(topic, [])):
            try:
                result = subscription.handler(payload)
                if inspect.isawaitable(result):
                    asyncio.ensure_future(result)
                delivered += 1
            except Exception as e:
                error(f"Event handler for '{topic}' failed: {e}", exc_info=e)
        return delivered


# Global bus instance
_event_bus: Optional[EventBus] = None


def get_event_bus() -> EventBus:
    """Get the application-wide event bus, creating it on first use"""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus("app")
    return _event_bus


def request_notifications_refresh(bus: Optional[EventBus] = None) -> int:
    """Ask every mounted bell widget to refresh (after creating a notification)"""
    return (bus or get_event_bus()).publish(NOTIFICATIONS_REFRESH)
