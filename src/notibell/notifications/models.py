from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class NotificationType(Enum):
    """Kinds of notifications emitted by the dashboard backend"""
    PROPERTY = "property"
    LEAD = "lead"
    BROKER = "broker"
    GENERAL = "general"

    @classmethod
    def parse(cls, value: Any) -> "NotificationType":
        """Map a raw ``type`` value to a member, defaulting to GENERAL"""
        try:
            return cls(value)
        except ValueError:
            return cls.GENERAL


# Keys interpreted by NotificationRecord; everything else lands in ``extra``
_KNOWN_KEYS = ("title", "message", "type", "read", "createdAt")


@dataclass
class NotificationRecord:
    """Single notification as returned by the notification service"""
    id: str
    title: str = ""
    message: str = ""
    type: NotificationType = NotificationType.GENERAL
    read: Optional[bool] = None
    created_at: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)
    # key the id was read from, so to_dict() writes it back
    id_key: str = "_id"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "NotificationRecord":
        id_key = "_id" if "_id" in raw else "id"
        raw_id = raw.get(id_key)
        raw_type = raw.get("type")
        extra = {k: v for k, v in raw.items() if k != id_key and k not in _KNOWN_KEYS}
        # keep unrecognized type values so nothing the server sent is lost
        if raw_type is not None and NotificationType.parse(raw_type).value != raw_type:
            extra["type"] = raw_type
        read = raw.get("read")
        if "read" in raw and not isinstance(read, bool):
            extra["read"] = read
        return cls(
            id="" if raw_id is None else str(raw_id),
            title=_as_text(raw.get("title")),
            message=_as_text(raw.get("message")),
            type=NotificationType.parse(raw_type),
            read=read if isinstance(read, bool) else None,
            created_at=_as_text(raw.get("createdAt")),
            extra=extra,
            id_key=id_key,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            self.id_key: self.id,
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "createdAt": self.created_at,
        }
        if self.read is not None:
            data["read"] = self.read
        data.update(self.extra)
        return data


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class PaginationInfo:
    """Pagination metadata optionally attached to a notification response"""
    total_unread: Optional[int] = None
    total_notifications: Optional[int] = None
    current_page: Optional[int] = None
    total_pages: Optional[int] = None
    has_next_page: bool = False
    has_prev_page: bool = False


@dataclass
class ReconciliationResult:
    """Unread count plus the preview slice shown in the dropdown"""
    unread_count: int
    preview: List[NotificationRecord] = field(default_factory=list)


@dataclass
class WidgetState:
    """Mutable state owned by the notification dropdown"""
    is_open: bool = False
    is_loading: bool = False
    notifications: List[NotificationRecord] = field(default_factory=list)
    unread_count: int = 0
