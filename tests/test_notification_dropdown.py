import asyncio

import pytest

from notibell.gui.gui_elements import gui_notification_dropdown_element as dropdown_module
from notibell.gui.gui_elements.gui_notification_dropdown_element import (
    DropdownPhase,
    NotificationDropdown,
)
from notibell.gui.notifications.ui import DropdownView
from notibell.notifications.events import (
    NOTIFICATIONS_REFRESH,
    POINTER_OUTSIDE,
    WINDOW_FOCUS,
    EventBus,
)

from fakes import FakeNotificationClient, GatedNotificationClient, drain, records


class FakeTimer:
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


@pytest.fixture
def timers(monkeypatch):
    created = []

    def fake_timer(interval, callback):
        timer = FakeTimer(interval, callback)
        created.append(timer)
        return timer

    monkeypatch.setattr(dropdown_module.ui, "timer", fake_timer)
    return created


@pytest.fixture
def make_dropdown(config_service, timers):
    navigations = []

    def factory(client):
        dropdown = NotificationDropdown(
            config_service, client=client, bus=EventBus("app"), navigate=navigations.append
        )
        dropdown.navigations = navigations
        return dropdown

    return factory


@pytest.mark.asyncio
async def test_initial_state(make_dropdown):
    dropdown = make_dropdown(FakeNotificationClient())
    assert dropdown.phase is DropdownPhase.CLOSED
    assert dropdown.state.is_loading is False
    assert dropdown.state.notifications == []
    assert dropdown.state.unread_count == 0
    assert dropdown.badge_text == ""
    assert dropdown.view is DropdownView.EMPTY


@pytest.mark.asyncio
async def test_mount_refreshes_and_starts_poll_timer(make_dropdown, timers):
    client = FakeNotificationClient(response={"data": records(40, unread=5)})
    dropdown = make_dropdown(client)

    dropdown.mount()
    await drain(dropdown.coordinator)

    assert dropdown.is_mounted
    assert client.list_calls == [(1, 1000, "all")]
    assert dropdown.badge_text == "5"
    assert [r.id for r in dropdown.state.notifications] == ["0", "1", "2"]
    assert dropdown.view is DropdownView.LIST
    assert timers[0].interval == 30

    timers[0].callback()
    await drain(dropdown.coordinator)
    assert len(client.list_calls) == 2


@pytest.mark.asyncio
async def test_badge_caps_large_counts(make_dropdown):
    response = {"data": records(3), "pagination": {"totalUnread": 150}}
    dropdown = make_dropdown(FakeNotificationClient(response=response))
    await dropdown.refresh()
    assert dropdown.badge_text == "99+"


@pytest.mark.asyncio
async def test_toggle_opens_and_refreshes(make_dropdown):
    client = FakeNotificationClient(response=records(2, unread=1))
    dropdown = make_dropdown(client)

    dropdown.toggle()
    assert dropdown.phase is DropdownPhase.OPEN
    await drain(dropdown.coordinator)
    assert len(client.list_calls) == 1

    dropdown.toggle()
    assert dropdown.phase is DropdownPhase.CLOSED
    await drain(dropdown.coordinator)
    assert len(client.list_calls) == 1


@pytest.mark.asyncio
async def test_outside_pointer_listener_only_while_open(make_dropdown):
    dropdown = make_dropdown(FakeNotificationClient())
    assert dropdown.signals.subscriber_count(POINTER_OUTSIDE) == 0
    assert dropdown.signals.publish(POINTER_OUTSIDE) == 0

    dropdown.open()
    assert dropdown.signals.subscriber_count(POINTER_OUTSIDE) == 1

    dropdown.signals.publish(POINTER_OUTSIDE)
    assert dropdown.phase is DropdownPhase.CLOSED
    assert dropdown.signals.subscriber_count(POINTER_OUTSIDE) == 0
    await drain(dropdown.coordinator)


@pytest.mark.asyncio
async def test_dismiss_when_closed_is_noop(make_dropdown):
    dropdown = make_dropdown(FakeNotificationClient())
    dropdown.dismiss()
    assert dropdown.phase is DropdownPhase.CLOSED


@pytest.mark.asyncio
async def test_app_signal_and_focus_refresh_mounted_widget(make_dropdown):
    client = FakeNotificationClient(response=[])
    dropdown = make_dropdown(client)
    dropdown.mount()
    await drain(dropdown.coordinator)

    dropdown.bus.publish(NOTIFICATIONS_REFRESH)
    dropdown.signals.publish(WINDOW_FOCUS)
    await drain(dropdown.coordinator)
    assert len(client.list_calls) == 3


@pytest.mark.asyncio
async def test_mark_all_read_failure_still_zeroes_and_navigates(make_dropdown):
    client = FakeNotificationClient(
        response={"data": records(10, unread=10)}, mark_error=RuntimeError("server error")
    )
    dropdown = make_dropdown(client)
    await dropdown.refresh()
    dropdown.open()
    await drain(dropdown.coordinator)
    assert dropdown.state.unread_count == 10

    await dropdown.mark_all_read()

    assert client.mark_calls == 1
    assert dropdown.state.unread_count == 0
    assert dropdown.badge_text == ""
    assert dropdown.phase is DropdownPhase.CLOSED
    assert dropdown.navigations == ["/notifications"]


@pytest.mark.asyncio
async def test_unmount_releases_subscriptions_and_timers(make_dropdown, timers):
    client = FakeNotificationClient(response=[])
    dropdown = make_dropdown(client)
    dropdown.mount()
    dropdown.open()
    await drain(dropdown.coordinator)

    dropdown.cleanup()

    assert not dropdown.is_mounted
    assert dropdown.bus.subscriber_count() == 0
    assert dropdown.signals.subscriber_count() == 0
    assert timers[0].cancelled
    assert dropdown._update_timer is None

    calls = len(client.list_calls)
    dropdown.bus.publish(NOTIFICATIONS_REFRESH)
    await drain(dropdown.coordinator)
    assert len(client.list_calls) == calls


@pytest.mark.asyncio
async def test_poll_disabled_with_zero_interval(config_service, timers):
    config_service._config_cache["notifications"]["poll_interval_s"] = 0
    dropdown = NotificationDropdown(
        config_service, client=FakeNotificationClient(), bus=EventBus("app"), navigate=lambda route: None
    )
    dropdown.mount()
    await drain(dropdown.coordinator)
    assert timers == []
    dropdown.unmount()


@pytest.mark.asyncio
async def test_view_shows_loading_while_refresh_in_flight(make_dropdown):
    client = GatedNotificationClient()
    dropdown = make_dropdown(client)

    dropdown.open()
    while not client.pending:
        await asyncio.sleep(0)
    assert dropdown.state.is_loading is True
    assert dropdown.view is DropdownView.LOADING

    client.pending[0].set_result(records(4, unread=2))
    await drain(dropdown.coordinator)
    assert dropdown.state.is_loading is False
    assert dropdown.view is DropdownView.LIST
    assert dropdown.badge_text == "2"


@pytest.mark.asyncio
async def test_view_empty_after_refresh_with_no_notifications(make_dropdown):
    dropdown = make_dropdown(FakeNotificationClient(response={"data": []}))
    await dropdown.refresh()
    assert dropdown.view is DropdownView.EMPTY
