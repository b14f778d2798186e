"""
Main web application class for managing the NiceGUI interface.
"""

from typing import Any, Optional

from nicegui import app, ui

from notibell.gui.gui_elements.gui_notification_dropdown_element import (
    NotificationDropdown,
    create_notification_dropdown,
)
from notibell.gui.gui_elements.gui_notifications_page_element import NotificationsPage
from notibell.gui.gui_tab_components.gui_tab_base_component import get_component_registry
from notibell.notifications.client import NotificationClient
from notibell.notifications.events import EventBus, get_event_bus
from notibell.utils.config_service import ConfigurationService
from notibell.utils.log_service import info


class WebApplication:
    """Main web application managing NiceGUI interface and routing"""

    def __init__(self,
                 config_service: ConfigurationService,
                 client: Optional[NotificationClient] = None,
                 bus: Optional[EventBus] = None):
        self.config_service = config_service
        self.client = client or NotificationClient.from_config(config_service)
        self.bus = bus or get_event_bus()
        self.component_registry = get_component_registry()
        self.title = config_service.get('ui.title', str, 'Admin Dashboard')
        self.listing_route = config_service.get('notifications.listing_route', str, '/notifications')
        self._routes_registered = False

    def register_routes(self) -> None:
        """Register NiceGUI pages once"""
        if self._routes_registered:
            return

        @ui.page('/')
        def index():
            self._create_main_layout()
            ui.label('Dashboard').classes('text-2xl font-semibold')

        @ui.page(self.listing_route)
        async def notifications():
            self._create_main_layout()
            page = NotificationsPage(self.config_service, client=self.client, bus=self.bus)
            page.get_element()
            await page.load()

        app.on_shutdown(self.shutdown)
        self._routes_registered = True

    def _create_main_layout(self) -> NotificationDropdown:
        """Header with title and bell; one dropdown per connected page"""
        page_client = ui.context.client
        component_id = f"notification_dropdown:{page_client.id}"
        with ui.header().classes('bg-white text-gray-900 shadow-sm items-center justify-between px-6'):
            ui.link(self.title, '/').classes('text-lg font-semibold no-underline text-gray-900')
            dropdown = create_notification_dropdown(
                self.config_service, client=self.client, bus=self.bus, component_id=component_id
            )
            dropdown.get_element()
        self.track_dropdown(page_client, dropdown)
        return dropdown

    def track_dropdown(self, page_client: Any, dropdown: NotificationDropdown) -> None:
        """Register the bell until its page client is deleted.

        A websocket reconnect keeps the client, so the bell keeps polling
        through short connection drops.
        """
        self.component_registry.register(dropdown)
        page_client.on_delete(lambda: self.component_registry.unregister(dropdown.component_id))

    async def shutdown(self) -> None:
        """Async shutdown for web application"""
        info("Web application shutting down...")
        for component in self.component_registry.get_all_components():
            if isinstance(component, NotificationDropdown):
                await component.coordinator.shutdown()
        self.component_registry.cleanup_all()
        await self.client.aclose()
        info("Web application shutdown complete")

    def run(self, port: Optional[int] = None) -> None:
        self.register_routes()
        ui.run(
            title=self.title,
            port=port or self.config_service.get('ui.port', int, 8080),
            reload=False,
            show=False,
        )
