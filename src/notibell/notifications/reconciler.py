"""Derive the unread badge count from fetched records and server metadata."""
from typing import Optional, Sequence

from notibell.notifications.models import (
    NotificationRecord,
    PaginationInfo,
    ReconciliationResult,
)

PREVIEW_SIZE = 3


def is_read(record: NotificationRecord) -> bool:
    """True when any of the known read markers says so; absence means unread."""
    return (
        record.read is True
        or record.extra.get("isRead") is True
        or record.extra.get("readStatus") == "read"
    )


def count_unread(records: Sequence[NotificationRecord]) -> int:
    return sum(1 for record in records if not is_read(record))


def reconcile(
    records: Sequence[NotificationRecord],
    pagination: Optional[PaginationInfo] = None,
) -> int:
    """Return the unread count to display.

    A server-reported ``totalUnread`` wins, zero included, since it reflects
    state the fetched page may not contain. Otherwise the count comes from the
    records themselves.
    """
    if pagination is not None and pagination.total_unread is not None:
        return max(0, pagination.total_unread)
    # totalNotifications alone never overrides the local tally
    return count_unread(records)


def build_result(
    records: Sequence[NotificationRecord],
    pagination: Optional[PaginationInfo] = None,
    preview_size: int = PREVIEW_SIZE,
) -> ReconciliationResult:
    """Reconcile the count and slice the preview (server order, read or not)."""
    return ReconciliationResult(
        unread_count=reconcile(records, pagination),
        preview=list(records[:preview_size]),
    )
