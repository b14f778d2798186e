"""Notification-state pipeline: normalization, unread reconciliation, refresh coordination."""

from .models import (
    NotificationRecord,
    NotificationType,
    PaginationInfo,
    ReconciliationResult,
    WidgetState,
)
from .normalizer import extract_notification_list, extract_pagination, normalize
from .reconciler import build_result, count_unread, is_read, reconcile
from .formatting import badge_label, display_title, time_ago, truncate_message
from .events import EventBus, get_event_bus, request_notifications_refresh
from .client import NotificationClient, NotificationServiceError
from .coordinator import RefreshCoordinator, TriggerSource

__all__ = [
    "NotificationRecord",
    "NotificationType",
    "PaginationInfo",
    "ReconciliationResult",
    "WidgetState",
    "extract_notification_list",
    "extract_pagination",
    "normalize",
    "build_result",
    "count_unread",
    "is_read",
    "reconcile",
    "badge_label",
    "display_title",
    "time_ago",
    "truncate_message",
    "EventBus",
    "get_event_bus",
    "request_notifications_refresh",
    "NotificationClient",
    "NotificationServiceError",
    "RefreshCoordinator",
    "TriggerSource",
]
