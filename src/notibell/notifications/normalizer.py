"""Extract notification records from loosely shaped service responses.

The notification service does not commit to a single envelope: depending on
endpoint and version the array may be the whole body, sit under ``data``,
under ``data.notifications`` or somewhere else entirely. Extraction is a chain
of matchers tried in priority order; each returns the array it recognises or
``None``. An unrecognised shape is not an error and yields an empty list.
"""
from typing import Any, Callable, Dict, List, Optional

from notibell.notifications.models import NotificationRecord, PaginationInfo
from notibell.utils.log_service import debug

Matcher = Callable[[Any], Optional[list]]

TOP_LEVEL_LIST_KEYS = ("notifications", "results", "items")


def _match_bare_list(response: Any) -> Optional[list]:
    return response if isinstance(response, list) else None


def _match_data_list(response: Any) -> Optional[list]:
    if isinstance(response, dict) and isinstance(response.get("data"), list):
        return response["data"]
    return None


def _match_nested_data(response: Any) -> Optional[list]:
    if not isinstance(response, dict):
        return None
    data = response.get("data")
    if not isinstance(data, dict):
        return None
    for key in ("notifications", "data"):
        if isinstance(data.get(key), list):
            return data[key]
    longest: Optional[list] = None
    for value in data.values():
        # strict comparison keeps the first of equally long arrays
        if isinstance(value, list) and (longest is None or len(value) > len(longest)):
            longest = value
    return longest


def _match_top_level_keys(response: Any) -> Optional[list]:
    if not isinstance(response, dict):
        return None
    for key in TOP_LEVEL_LIST_KEYS:
        if isinstance(response.get(key), list):
            return response[key]
    return None


MATCHERS: List[Matcher] = [
    _match_bare_list,
    _match_data_list,
    _match_nested_data,
    _match_top_level_keys,
]


def extract_notification_list(response: Any) -> list:
    """Return the raw notification array found in ``response`` (or ``[]``)."""
    for matcher in MATCHERS:
        found = matcher(response)
        if found is not None:
            return found
    return []


def normalize(response: Any) -> List[NotificationRecord]:
    """Return the notifications in ``response`` as records, in server order."""
    records = []
    for entry in extract_notification_list(response):
        if not isinstance(entry, dict):
            debug(f"Skipping non-object notification entry: {entry!r}")
            continue
        records.append(NotificationRecord.from_dict(entry))
    return records


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _find_pagination(response: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(response, dict):
        return None
    if isinstance(response.get("pagination"), dict):
        return response["pagination"]
    data = response.get("data")
    if isinstance(data, dict) and isinstance(data.get("pagination"), dict):
        return data["pagination"]
    if isinstance(response.get("paginationInfo"), dict):
        return response["paginationInfo"]
    return None


def extract_pagination(response: Any) -> Optional[PaginationInfo]:
    """Return pagination metadata from the top level or one level under ``data``."""
    raw = _find_pagination(response)
    if raw is None:
        return None
    return PaginationInfo(
        total_unread=_as_int(raw.get("totalUnread")),
        total_notifications=_as_int(raw.get("totalNotifications")),
        current_page=_as_int(raw.get("currentPage")),
        total_pages=_as_int(raw.get("totalPages")),
        has_next_page=raw.get("hasNextPage") is True,
        has_prev_page=raw.get("hasPrevPage") is True,
    )
