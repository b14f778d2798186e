"""
Refresh coordination for the notification bell.

Every trigger source (mount, page visibility, window focus, the application
refresh signal, dropdown open, periodic poll) calls the same ``refresh()``.
Nothing is debounced: refresh is idempotent, and overlapping calls are
ordered by a sequence number so that a response which started earlier never
overwrites the state derived from one that started later.
"""
from enum import Enum
from typing import Any, Callable, List, Optional

from notibell.notifications.client import NotificationClient
from notibell.notifications.events import (
    EventBus,
    Subscription,
    NOTIFICATIONS_REFRESH,
    PAGE_VISIBLE,
    WINDOW_FOCUS,
)
from notibell.notifications.models import ReconciliationResult, WidgetState
from notibell.notifications.normalizer import extract_pagination, normalize
from notibell.notifications.reconciler import PREVIEW_SIZE, build_result
from notibell.utils.concurrency.async_utils import AsyncTaskManager, TaskHandle
from notibell.utils.log_service import debug, error, info, structured, timer

DEFAULT_PAGE_SIZE = 1000
DEFAULT_FILTER = "all"


class TriggerSource(Enum):
    """Origins that may start a refresh"""
    MOUNT = "mount"
    VISIBILITY_RESTORED = "visibility_restored"
    APP_SIGNAL = "app_signal"
    WINDOW_FOCUS = "window_focus"
    DROPDOWN_OPEN = "dropdown_open"
    POLL = "poll"
    MANUAL = "manual"


StateListener = Callable[[WidgetState], None]


class RefreshCoordinator:
    """Owns the refresh pipeline and the bus subscriptions that drive it"""

    def __init__(
        self,
        client: NotificationClient,
        bus: EventBus,
        signals: Optional[EventBus] = None,
        state: Optional[WidgetState] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        preview_size: int = PREVIEW_SIZE,
    ):
        self.client = client
        self.bus = bus
        # browser signals may arrive on a bus local to one page
        self.signals = signals or bus
        self.state = state or WidgetState()
        self.page_size = page_size
        self.preview_size = preview_size

        self._listeners: List[StateListener] = []
        self._subscriptions: List[Subscription] = []
        self._tasks = AsyncTaskManager("notification_refresh")

        self._sequence = 0
        self._applied_sequence = 0
        self._in_flight = 0
        self.refresh_count = 0

    # -- listeners --------------------------------------------------------
    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.state)
            except Exception as e:
                error(f"Notification state listener failed: {e}", exc_info=e)

    # -- refresh ----------------------------------------------------------
    async def refresh(self, source: TriggerSource = TriggerSource.MANUAL) -> WidgetState:
        """Fetch, normalize and reconcile; never raises for fetch failures."""
        self._sequence += 1
        sequence = self._sequence
        self._in_flight += 1
        self.refresh_count += 1
        self.state.is_loading = True
        self._notify()
        debug(f"Notification refresh #{sequence} started", source=source.value)

        try:
            result = await self._fetch()
            if self._apply(sequence, result):
                structured("notification_refresh", {
                    "source": source.value,
                    "sequence": sequence,
                    "unread_count": result.unread_count,
                    "preview_size": len(result.preview),
                })
        finally:
            self._in_flight -= 1
            if self._in_flight == 0:
                self.state.is_loading = False
            self._notify()
        return self.state

    async def _fetch(self) -> ReconciliationResult:
        try:
            with timer("NOTIFICATION_REFRESH", {"page_size": self.page_size}):
                response = await self.client.list_notifications(1, self.page_size, DEFAULT_FILTER)
            records = normalize(response)
            return build_result(records, extract_pagination(response), self.preview_size)
        except Exception as e:
            error(f"Failed to fetch notifications: {e}", exc_info=e)
            return ReconciliationResult(unread_count=0, preview=[])

    def _apply(self, sequence: int, result: ReconciliationResult) -> bool:
        if sequence < self._applied_sequence:
            debug(f"Dropping stale notification refresh #{sequence}")
            return False
        self._applied_sequence = sequence
        self.state.notifications = result.preview
        self.state.unread_count = result.unread_count
        return True

    def trigger(self, source: TriggerSource) -> TaskHandle:
        """Schedule a refresh from synchronous code (event callbacks, timers)."""
        return self._tasks.create_task(self.refresh(source))

    # -- subscriptions ----------------------------------------------------
    def attach(self) -> None:
        """Subscribe to the bus topics that trigger a refresh."""
        if self._subscriptions:
            return
        self._subscriptions = [
            self.bus.subscribe(NOTIFICATIONS_REFRESH, self._on_app_signal),
            self.signals.subscribe(PAGE_VISIBLE, self._on_visibility_change),
            self.signals.subscribe(WINDOW_FOCUS, self._on_window_focus),
        ]

    def detach(self) -> None:
        """Release every subscription and cancel refreshes still running."""
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
        self._tasks.cancel_all()

    async def shutdown(self) -> None:
        """Detach and wait for cancelled refreshes to finish."""
        self.detach()
        await self._tasks.stop_all_tasks()

    @property
    def attached(self) -> bool:
        return bool(self._subscriptions)

    def _on_app_signal(self, _payload: Any = None) -> None:
        self.trigger(TriggerSource.APP_SIGNAL)

    def _on_visibility_change(self, payload: Any = None) -> None:
        if payload in (None, True, "visible"):
            self.trigger(TriggerSource.VISIBILITY_RESTORED)

    def _on_window_focus(self, _payload: Any = None) -> None:
        self.trigger(TriggerSource.WINDOW_FOCUS)

    # -- mark all read ----------------------------------------------------
    async def mark_all_read(self) -> bool:
        """Mark everything read on the server and zero the local count.

        The local reset happens even when the server call fails; the failure
        is only logged. Returns whether the server call succeeded.
        """
        succeeded = True
        try:
            await self.client.mark_all_read()
            info("All notifications marked as read")
        except Exception as e:
            succeeded = False
            error(f"Failed to mark all notifications as read: {e}", exc_info=e)
        structured("notifications_mark_all_read", {"succeeded": succeeded})
        self.state.unread_count = 0
        self._notify()
        return succeeded
