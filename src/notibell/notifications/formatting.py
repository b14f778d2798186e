"""Render helpers for notification rows and the unread badge."""
from datetime import datetime, timezone
from typing import Optional, Union

from notibell.notifications.models import NotificationRecord

MINUTE = 60
HOUR = 3600
DAY = 86400


def _parse_timestamp(timestamp: Union[str, datetime]) -> Optional[datetime]:
    if isinstance(timestamp, datetime):
        parsed = timestamp
    else:
        try:
            parsed = datetime.fromisoformat(str(timestamp).strip())
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def time_ago(timestamp: Union[str, datetime], now: Optional[datetime] = None) -> str:
    """Abbreviated age label: ``45S``, ``3M``, ``5H``, ``2D``."""
    created = _parse_timestamp(timestamp)
    if created is None:
        return ""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    seconds = max(0, int((now - created).total_seconds()))
    if seconds < MINUTE:
        return f"{seconds}S"
    if seconds < HOUR:
        return f"{seconds // MINUTE}M"
    if seconds < DAY:
        return f"{seconds // HOUR}H"
    return f"{seconds // DAY}D"


def truncate_message(text: str, word_limit: int = 6) -> str:
    words = (text or "").split()
    if len(words) <= word_limit:
        return " ".join(words)
    return " ".join(words[:word_limit]) + "..."


def badge_label(count: int, cap: int = 99) -> str:
    """Text for the unread badge; empty when there is nothing unread."""
    if count <= 0:
        return ""
    if count > cap:
        return f"{cap}+"
    return str(count)


def display_title(record: NotificationRecord) -> str:
    return record.title or record.message or "Notification"
