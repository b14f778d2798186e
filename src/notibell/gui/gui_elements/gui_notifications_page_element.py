"""
Notifications listing page.

Opening the page marks every notification as read, then lists them one page
at a time with a type filter. Other mounted bells are told to refresh so
their badges drop to zero.
"""

from typing import Any, List, Optional

from nicegui import ui

from notibell.gui.gui_tab_components.gui_tab_base_component import (
    BaseComponent,
    ComponentConfig,
)
from notibell.gui.notifications.ui import TYPE_ICONS
from notibell.notifications.client import NotificationClient
from notibell.notifications.events import EventBus, get_event_bus, request_notifications_refresh
from notibell.notifications.formatting import display_title, time_ago
from notibell.notifications.models import NotificationRecord, NotificationType, PaginationInfo
from notibell.notifications.normalizer import extract_pagination, normalize
from notibell.utils.config_service import ConfigurationService
from notibell.utils.log_service import info, error

FILTERS = ['all', 'unread', 'property', 'lead', 'broker']


def resolve_pagination(raw: Optional[PaginationInfo], current_page: int, list_length: int) -> PaginationInfo:
    """Fill gaps in server pagination; without any, the list is a single page"""
    if raw is None:
        return PaginationInfo(
            total_notifications=list_length,
            current_page=current_page,
            total_pages=1,
        )
    return PaginationInfo(
        total_unread=raw.total_unread,
        total_notifications=raw.total_notifications or list_length,
        current_page=raw.current_page or current_page,
        total_pages=raw.total_pages or 1,
        has_next_page=raw.has_next_page,
        has_prev_page=raw.has_prev_page,
    )


class NotificationsPage(BaseComponent):
    """Full notification listing with filter and pagination"""

    def __init__(self,
                 config_service: ConfigurationService,
                 client: Optional[NotificationClient] = None,
                 bus: Optional[EventBus] = None):
        super().__init__(ComponentConfig(component_id="notifications_page", title="Notifications"))
        self.config_service = config_service
        self.client = client or NotificationClient.from_config(config_service)
        self.bus = bus or get_event_bus()
        self.page_size = config_service.get('notifications.listing_page_size', int, 50)

        self.notifications: List[NotificationRecord] = []
        self.pagination = PaginationInfo(current_page=1, total_pages=1, total_notifications=0)
        self.filter = 'all'
        self.current_page = 1
        self.loading = False
        self.error_message = ''
        self._content: Optional[Any] = None

    async def load(self) -> None:
        """Mark everything read, then fetch the first page"""
        try:
            await self.client.mark_all_read()
            info("All notifications marked as read")
            request_notifications_refresh(self.bus)
        except Exception as e:
            error(f"Failed to mark all notifications as read: {e}", exc_info=e)
            ui.notify('Failed to mark all notifications as read', type='negative')
        await self.fetch_page()

    async def fetch_page(self) -> None:
        self.loading = True
        self.error_message = ''
        self._update_element(None)
        try:
            response = await self.client.list_notifications(self.current_page, self.page_size, self.filter)
            self.notifications = normalize(response)
            self.pagination = resolve_pagination(
                extract_pagination(response), self.current_page, len(self.notifications)
            )
        except Exception as e:
            error(f"Error fetching notifications: {e}", exc_info=e)
            self.error_message = str(e) or 'Failed to fetch notifications'
            self.notifications = []
            ui.notify(self.error_message, type='negative')
        finally:
            self.loading = False
            self._update_element(None)

    async def set_filter(self, value: str) -> None:
        if value not in FILTERS:
            value = 'all'
        self.filter = value
        self.current_page = 1
        await self.fetch_page()

    async def go_to_page(self, page: int) -> None:
        total_pages = self.pagination.total_pages or 1
        page = max(1, min(page, total_pages))
        if page == self.current_page:
            return
        self.current_page = page
        await self.fetch_page()

    def render(self) -> Any:
        with ui.column().classes('w-full max-w-3xl mx-auto gap-4') as page:
            with ui.row().classes('w-full items-center justify-between'):
                with ui.column().classes('gap-0'):
                    ui.label('Notifications').classes('text-2xl font-semibold')
                    ui.label('View and manage all your notifications').classes('text-sm text-gray-500')
                ui.select(FILTERS, value=self.filter,
                          on_change=lambda e: self.set_filter(e.value)).props('dense outlined').classes('w-36')
            with ui.card().classes('w-full p-0') as content:
                self._content = content
                self._create_content()
        return page

    def _create_content(self) -> None:
        if self.loading:
            ui.label('Loading notifications...').classes('w-full text-center text-gray-500 py-12')
            return
        if not self.notifications:
            ui.label('No notifications found').classes('w-full text-center text-gray-500 py-12')
            return
        total = self.pagination.total_notifications or len(self.notifications)
        ui.label(f'{total} notifications').classes('px-4 pt-3 text-sm text-gray-500')
        for notification in self.notifications:
            self._create_row(notification)
        total_pages = self.pagination.total_pages or 1
        if total_pages > 1:
            ui.pagination(1, total_pages, direction_links=True, value=self.current_page,
                          on_change=lambda e: self.go_to_page(e.value)).classes('p-4')

    def _create_row(self, notification: NotificationRecord) -> None:
        icon, icon_class = TYPE_ICONS.get(notification.type, TYPE_ICONS[NotificationType.GENERAL])
        with ui.row().classes('w-full items-start gap-3 px-4 py-3 no-wrap'):
            ui.icon(icon).classes(icon_class)
            with ui.column().classes('gap-0 flex-1'):
                ui.label(display_title(notification)).classes('text-sm font-medium')
                if notification.title and notification.message:
                    ui.label(notification.message).classes('text-sm text-gray-600')
            ui.label(time_ago(notification.created_at)).classes('text-xs text-gray-400')

    def _update_element(self, data: Any) -> None:
        if self._content is None:
            return
        self._content.clear()
        with self._content:
            self._create_content()


__all__ = ["NotificationsPage", "resolve_pagination", "FILTERS"]
