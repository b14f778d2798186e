import pytest

from notibell.notifications.models import NotificationRecord, NotificationType
from notibell.notifications.normalizer import (
    extract_notification_list,
    extract_pagination,
    normalize,
)


def _items(*ids):
    return [{"_id": i, "title": f"t{i}"} for i in ids]


def test_bare_list_returned_in_order():
    response = _items("a", "b", "c")
    assert extract_notification_list(response) is response
    assert [r.id for r in normalize(response)] == ["a", "b", "c"]


def test_data_array():
    assert [r.id for r in normalize({"data": _items("x", "y")})] == ["x", "y"]


def test_nested_notifications_preferred_over_longer_sibling():
    response = {"data": {"notifications": _items("n1"), "other": _items("o1", "o2", "o3")}}
    assert [r.id for r in normalize(response)] == ["n1"]


def test_nested_data_array_used_when_no_notifications_key():
    response = {"data": {"data": _items("d1"), "other": _items("o1", "o2")}}
    assert [r.id for r in normalize(response)] == ["d1"]


def test_longest_nested_array_wins():
    response = {"data": {"a": _items("a1"), "b": _items("b1", "b2", "b3"), "c": "text"}}
    assert [r.id for r in normalize(response)] == ["b1", "b2", "b3"]


def test_longest_nested_array_tie_keeps_first():
    response = {"data": {"first": _items("f1", "f2"), "second": _items("s1", "s2")}}
    assert [r.id for r in normalize(response)] == ["f1", "f2"]


def test_nested_object_without_arrays_falls_through_to_top_level_keys():
    response = {"data": {"count": 3}, "results": _items("r1")}
    assert [r.id for r in normalize(response)] == ["r1"]


@pytest.mark.parametrize("key", ["notifications", "results", "items"])
def test_top_level_keys(key):
    assert [r.id for r in normalize({key: _items("k1")})] == ["k1"]


def test_top_level_key_priority():
    response = {"items": _items("i1"), "notifications": _items("n1")}
    assert [r.id for r in normalize(response)] == ["n1"]


@pytest.mark.parametrize(
    "response",
    [None, 42, "text", {}, {"data": None}, {"data": "x"}, {"notifications": {"a": 1}}, True],
)
def test_unexpected_shapes_yield_empty_list(response):
    assert normalize(response) == []


def test_non_object_entries_are_skipped():
    records = normalize([{"_id": "1"}, "junk", None, 7, {"id": "2"}])
    assert [r.id for r in records] == ["1", "2"]


def test_record_fields_and_unknown_fields_preserved():
    raw = {
        "_id": "abc",
        "title": "New lead",
        "message": "Someone is interested",
        "type": "lead",
        "read": False,
        "createdAt": "2024-01-01T10:00:00Z",
        "priority": "high",
        "isRead": False,
    }
    record = normalize([raw])[0]
    assert isinstance(record, NotificationRecord)
    assert record.type is NotificationType.LEAD
    assert record.read is False
    assert record.extra == {"priority": "high", "isRead": False}
    assert record.to_dict() == raw


def test_unknown_type_defaults_to_general_but_is_kept():
    record = NotificationRecord.from_dict({"id": 5, "type": "system"})
    assert record.id == "5"
    assert record.id_key == "id"
    assert record.type is NotificationType.GENERAL
    assert record.to_dict()["type"] == "system"


def test_missing_read_is_unknown():
    record = NotificationRecord.from_dict({"_id": "1"})
    assert record.read is None
    assert record.type is NotificationType.GENERAL


def test_pagination_top_level():
    info = extract_pagination({"data": [], "pagination": {"totalUnread": 4, "totalNotifications": 40}})
    assert info.total_unread == 4
    assert info.total_notifications == 40


def test_pagination_nested_under_data():
    info = extract_pagination({"data": {"notifications": [], "pagination": {"totalUnread": 0}}})
    assert info.total_unread == 0
    assert info.total_notifications is None


def test_pagination_ignores_non_integer_values():
    info = extract_pagination({"pagination": {"totalUnread": "7", "totalNotifications": True, "totalPages": 2.0}})
    assert info.total_unread == 7
    assert info.total_notifications is None
    assert info.total_pages == 2


@pytest.mark.parametrize("response", [[], {"data": []}, {"pagination": "x"}, None])
def test_pagination_absent(response):
    assert extract_pagination(response) is None


@pytest.mark.parametrize("value", ["--5", "²", "12abc", "", " "])
def test_pagination_unparsable_strings_are_ignored(value):
    info = extract_pagination({"pagination": {"totalUnread": value, "totalNotifications": 9}})
    assert info.total_unread is None
    assert info.total_notifications == 9


def test_secondary_id_field_is_preserved():
    raw = {"_id": "mongo-1", "id": 42, "title": "t"}
    record = NotificationRecord.from_dict(raw)
    assert record.id == "mongo-1"
    assert record.extra == {"id": 42}
    assert record.to_dict()["id"] == 42
    assert record.to_dict()["_id"] == "mongo-1"
