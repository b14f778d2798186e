"""Notibell: notification bell widget for the NiceGUI admin dashboard.

The :mod:`notibell.notifications` package holds the notification-state
pipeline (normalization, unread reconciliation, refresh coordination) and
:mod:`notibell.gui` the NiceGUI elements built on top of it.
"""

__version__ = "0.1.0"
