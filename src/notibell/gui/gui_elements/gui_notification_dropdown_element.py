"""
Notification Dropdown Component for the admin dashboard header

Bell icon with an unread badge and a dropdown previewing the most recent
notifications.

Features:
- Unread badge reconciled from server pagination metadata or the fetched list
- Preview of the three most recent notifications
- Refresh on mount, dropdown open, page visibility, window focus,
  the application refresh signal and a periodic poll
- Dismissal on pointer presses outside the widget while open
- "View All" marks everything read and navigates to the listing page
"""

from enum import Enum
from typing import Any, Callable, Optional

from nicegui import ui

from notibell.gui.gui_tab_components.gui_tab_base_component import (
    TimedComponent,
    ComponentConfig,
)
from notibell.gui.notifications.ui import DropdownView, NotificationDropdownUIMixin
from notibell.notifications.client import NotificationClient
from notibell.notifications.coordinator import RefreshCoordinator, TriggerSource
from notibell.notifications.events import EventBus, Subscription, POINTER_OUTSIDE, get_event_bus
from notibell.notifications.formatting import badge_label
from notibell.notifications.models import WidgetState
from notibell.utils.config_service import ConfigurationService
from notibell.utils.log_service import info, debug


class DropdownPhase(Enum):
    """Open/closed state of the dropdown"""
    CLOSED = "closed"
    OPEN = "open"


class NotificationDropdown(NotificationDropdownUIMixin, TimedComponent):
    """Notification bell with dropdown preview"""

    timer_attributes = ["_update_timer"]

    def __init__(self,
                 config_service: ConfigurationService,
                 client: Optional[NotificationClient] = None,
                 bus: Optional[EventBus] = None,
                 navigate: Optional[Callable[[str], Any]] = None,
                 component_id: str = "notification_dropdown"):
        """Initialize notification dropdown"""

        component_config = ComponentConfig(
            component_id=component_id,
            title="Notifications",
            classes="notification-dropdown"
        )
        super().__init__(component_config)

        self.config_service = config_service
        self.client = client or NotificationClient.from_config(config_service)
        self.bus = bus or get_event_bus()
        # page-local bus for browser signals of this client only
        self.signals = EventBus("browser")
        self._navigate = navigate or ui.navigate.to

        self.poll_interval = float(config_service.get('notifications.poll_interval_s', default=30) or 0)
        self.listing_route = config_service.get('notifications.listing_route', str, '/notifications')
        self.badge_cap = config_service.get('notifications.badge_cap', int, 99)
        self.word_limit = config_service.get('notifications.message_word_limit', int, 6)

        self.coordinator = RefreshCoordinator(
            client=self.client,
            bus=self.bus,
            signals=self.signals,
            state=WidgetState(),
            page_size=config_service.get('notifications.page_size', int, 1000),
            preview_size=config_service.get('notifications.preview_size', int, 3),
        )
        self.coordinator.add_listener(self._on_state_change)

        # UI elements
        self._container: Optional[Any] = None
        self._badge: Optional[Any] = None
        self._panel: Optional[Any] = None
        self._list_container: Optional[Any] = None

        self._outside_subscription: Optional[Subscription] = None
        self._update_timer = None
        self._mounted = False

    @property
    def state(self) -> WidgetState:
        return self.coordinator.state

    @property
    def phase(self) -> DropdownPhase:
        return DropdownPhase.OPEN if self.state.is_open else DropdownPhase.CLOSED

    @property
    def view(self) -> DropdownView:
        if self.state.is_loading:
            return DropdownView.LOADING
        if not self.state.notifications:
            return DropdownView.EMPTY
        return DropdownView.LIST

    @property
    def badge_text(self) -> str:
        return badge_label(self.state.unread_count, self.badge_cap)

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    # -- lifecycle --------------------------------------------------------
    def mount(self) -> None:
        """Subscribe to every trigger source and run the initial refresh"""
        if self._mounted:
            return
        self._mounted = True
        self.coordinator.attach()
        if self.poll_interval > 0 and not self._update_timer:
            self._update_timer = ui.timer(self.poll_interval, self._on_poll)
        self.coordinator.trigger(TriggerSource.MOUNT)
        info("Notification dropdown mounted")

    def unmount(self) -> None:
        """Release subscriptions, timers and the outside-pointer listener"""
        if not self._mounted:
            return
        self._mounted = False
        self._release_outside_listener()
        self.coordinator.detach()
        self.cancel_timers()
        info("Notification dropdown unmounted")

    def _on_poll(self) -> None:
        self.coordinator.trigger(TriggerSource.POLL)

    # -- open/close state machine ----------------------------------------
    def toggle(self) -> None:
        """Bell activation: CLOSED <-> OPEN"""
        if self.state.is_open:
            self.close()
        else:
            self.open()

    def open(self) -> None:
        if self.state.is_open:
            return
        self.state.is_open = True
        self._outside_subscription = self.signals.subscribe(POINTER_OUTSIDE, self.dismiss)
        self._update_ui()
        self.coordinator.trigger(TriggerSource.DROPDOWN_OPEN)

    def close(self) -> None:
        if not self.state.is_open:
            return
        self.state.is_open = False
        self._release_outside_listener()
        self._update_ui()

    def dismiss(self, _payload: Any = None) -> None:
        """Pointer pressed outside the widget"""
        if self.state.is_open:
            debug("Notification dropdown dismissed by outside pointer")
            self.close()

    def _release_outside_listener(self) -> None:
        if self._outside_subscription is not None:
            self._outside_subscription.cancel()
            self._outside_subscription = None

    # -- actions ----------------------------------------------------------
    async def refresh(self) -> WidgetState:
        return await self.coordinator.refresh(TriggerSource.MANUAL)

    async def mark_all_read(self) -> None:
        """Mark all read (best effort), close and go to the listing page"""
        await self.coordinator.mark_all_read()
        self.close()
        self._navigate(self.listing_route)

    def _on_state_change(self, _state: WidgetState) -> None:
        self._update_ui()

    # -- component plumbing -----------------------------------------------
    def render(self) -> Any:
        """Render the bell and subscribe to its trigger sources"""
        element = self.create_notification_button()
        self.mount()
        return element

    def _update_element(self, data: Any) -> None:
        """Handle BaseComponent.update calls by refreshing UI elements"""
        self._update_ui()

    def cleanup(self) -> None:
        """Cleanup component resources"""
        self.unmount()
        self._container = None
        self._badge = None
        self._panel = None
        self._list_container = None
        super().cleanup()


def create_notification_dropdown(config_service: ConfigurationService,
                                 client: Optional[NotificationClient] = None,
                                 bus: Optional[EventBus] = None,
                                 component_id: str = "notification_dropdown") -> NotificationDropdown:
    """Factory function to create the notification dropdown"""
    return NotificationDropdown(config_service=config_service, client=client, bus=bus,
                                component_id=component_id)


__all__ = ["NotificationDropdown", "DropdownPhase", "create_notification_dropdown"]
