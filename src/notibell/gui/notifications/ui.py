"""UI helper mixin for the NotificationDropdown."""
from enum import Enum
from typing import Any, Optional

from nicegui import ui

from notibell.notifications.events import EventBus, PAGE_VISIBLE, POINTER_OUTSIDE, WINDOW_FOCUS
from notibell.notifications.formatting import display_title, time_ago, truncate_message
from notibell.notifications.models import NotificationRecord, NotificationType, WidgetState

# Forwards document/window events to NiceGUI so they reach the widget's
# signal bus. ``%(root)s`` is the DOM id of the bell container.
BROWSER_BRIDGE_JS = """
(() => {
  const root = () => document.getElementById('%(root)s');
  document.addEventListener('visibilitychange', () => {
    emitEvent('notibell_visibility', {state: document.visibilityState});
  });
  window.addEventListener('focus', () => emitEvent('notibell_focus'));
  document.addEventListener('pointerdown', (event) => {
    const el = root();
    if (el && !el.contains(event.target)) emitEvent('notibell_pointer_outside');
  });
})();
"""


class DropdownView(Enum):
    """What the dropdown body currently shows"""
    LOADING = "loading"
    EMPTY = "empty"
    LIST = "list"


TYPE_ICONS = {
    NotificationType.PROPERTY: ('home', 'text-green-600'),
    NotificationType.LEAD: ('person', 'text-blue-600'),
    NotificationType.BROKER: ('groups', 'text-purple-600'),
    NotificationType.GENERAL: ('notifications', 'text-gray-600'),
}


class NotificationDropdownUIMixin:
    """Mixin providing UI rendering helpers for NotificationDropdown."""

    state: WidgetState
    signals: EventBus
    word_limit: int
    _container: Optional[Any]
    _badge: Optional[Any]
    _panel: Optional[Any]
    _list_container: Optional[Any]

    def create_notification_button(self) -> Any:
        with ui.element('div').classes('relative') as container:
            self._container = container
            ui.button(icon='notifications', on_click=self.toggle).props('flat round color=grey-8')
            self._badge = ui.badge(self.badge_text, color='red').props('floating')
            self._badge.set_visibility(bool(self.badge_text))
            with ui.card().classes('absolute right-0 mt-2 w-80 z-50 p-0') as panel:
                self._panel = panel
                with ui.row().classes('w-full items-center justify-between px-4 py-3'):
                    ui.label('Notifications').classes('text-sm font-semibold')
                    ui.button('View All', on_click=self.mark_all_read).props('flat dense no-caps')
                with ui.column().classes('w-full max-h-96 overflow-y-auto gap-0') as list_container:
                    self._list_container = list_container
                    self._create_notification_list()
            panel.set_visibility(self.state.is_open)
        self._install_browser_bridge()
        return container

    def _install_browser_bridge(self) -> None:
        ui.on('notibell_visibility', lambda e: self.signals.publish(PAGE_VISIBLE, (e.args or {}).get('state')))
        ui.on('notibell_focus', lambda e: self.signals.publish(WINDOW_FOCUS))
        ui.on('notibell_pointer_outside', lambda e: self.signals.publish(POINTER_OUTSIDE))
        ui.add_body_html(f'<script>{BROWSER_BRIDGE_JS % {"root": f"c{self._container.id}"}}</script>')

    def _create_notification_list(self) -> None:
        view = self.view
        if view is DropdownView.LOADING:
            ui.label('Loading notifications...').classes('w-full text-center text-sm text-gray-500 py-8')
            return
        if view is DropdownView.EMPTY:
            ui.label('No notifications').classes('w-full text-center text-sm text-gray-500 py-8')
            return
        for notification in self.state.notifications:
            self._create_notification_item(notification)

    def _create_notification_item(self, notification: NotificationRecord) -> None:
        icon, icon_class = TYPE_ICONS.get(notification.type, TYPE_ICONS[NotificationType.GENERAL])
        with ui.row().classes('w-full items-start gap-2 px-4 py-3 hover:bg-gray-50 cursor-pointer no-wrap'):
            ui.icon(icon, size='sm').classes(icon_class)
            with ui.column().classes('gap-0'):
                ui.label(display_title(notification)).classes('text-sm font-medium')
                if notification.title and notification.message:
                    ui.label(truncate_message(notification.message, self.word_limit)).classes('text-xs text-gray-600')
                ui.label(time_ago(notification.created_at)).classes('text-xs text-gray-400')

    def _update_ui(self) -> None:
        if self._badge:
            self._badge.set_text(self.badge_text)
            self._badge.set_visibility(bool(self.badge_text))
        if self._panel:
            self._panel.set_visibility(self.state.is_open)
        if self._list_container:
            self._list_container.clear()
            with self._list_container:
                self._create_notification_list()

