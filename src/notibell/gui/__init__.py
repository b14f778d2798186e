"""Web GUI built with NiceGUI.

The heavy modules are imported lazily so that importing the package does not
pull in NiceGUI during test collection.
"""

from __future__ import annotations

import importlib
from typing import Any

_LAZY_ATTRS = {
    "application": ".application",
    "WebApplication": ".application",
    "NotificationDropdown": ".gui_elements.gui_notification_dropdown_element",
    "NotificationsPage": ".gui_elements.gui_notifications_page_element",
}


def __getattr__(name: str) -> Any:  # pragma: no cover - simple passthrough
    """Lazily import submodules and classes on first access."""

    module_path = _LAZY_ATTRS.get(name)
    if module_path is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = importlib.import_module(module_path, __name__)
    attr = getattr(module, name) if hasattr(module, name) else module
    globals()[name] = attr
    return attr


__all__ = list(_LAZY_ATTRS.keys())
