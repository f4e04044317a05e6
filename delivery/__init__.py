"""
Client-side notification delivery: toasts, polling and confirmation dialogs.
"""

from delivery.feeds import HttpNotificationFeed, NotificationFeed, StoreFeed
from delivery.notifier import ICONS, LogRenderer, NotificationCenter, Toast
from delivery.confirm import ConfirmDialog, ConfirmPrompt, ConfirmRequest

__all__ = [
    "NotificationFeed",
    "StoreFeed",
    "HttpNotificationFeed",
    "NotificationCenter",
    "Toast",
    "LogRenderer",
    "ICONS",
    "ConfirmDialog",
    "ConfirmPrompt",
    "ConfirmRequest",
]
