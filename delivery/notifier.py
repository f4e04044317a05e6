"""
Client-side notification center.

Pulls a customer's notifications from a feed and turns them into transient
toasts: each one is shown for a configurable duration, disappears on its own,
and can be dismissed by hand. Dismissing (or explicitly marking read) is what
acknowledges a notification back to the server; a toast that merely times out
stays unread.

Design decisions:
- No durable state here: the set of toasts already shown or dismissed lives
  only for the lifetime of this object
- Time is read from an injectable clock so expiry is testable without sleeping
- Rendering is delegated to a renderer object; LogRenderer logs and records
  what was shown, like a mock channel
- Periodic polling is optional and runs on one background thread
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from itertools import count
from typing import Callable, Optional, Protocol

from shared.config import get_settings
from shared.errors import FreshDairyError
from shared.models import Notification
from delivery.feeds import NotificationFeed

logger = logging.getLogger("notification_center")


# Icons for different notification kinds
ICONS = {
    "success": "✓",
    "error": "✕",
    "warning": "⚠",
    "info": "ℹ",
    "cart": "🛒",
    "order": "📦",
    "login": "👤",
    "milk": "🥛",
}

# Notification.type -> toast kind; unknown types show as info
_KIND_FOR_TYPE = {
    "order": "order",
    "cart": "cart",
    "login": "login",
    "system": "info",
}


@dataclass
class Toast:
    """One visible notification element."""
    id: int
    kind: str
    title: str
    message: str
    icon: str
    duration: float  # seconds; 0 means it stays until dismissed
    shown_at: float
    show_progress: bool = True
    notification_id: Optional[int] = None
    on_close: Optional[Callable[["Toast"], None]] = field(default=None, repr=False)
    closed: bool = False

    @property
    def expires_at(self) -> Optional[float]:
        if self.duration <= 0:
            return None
        return self.shown_at + self.duration

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class ToastRenderer(Protocol):
    def show(self, toast: Toast) -> None:
        ...

    def hide(self, toast: Toast) -> None:
        ...


class LogRenderer:
    """Renders toasts to the log and keeps a history for assertions."""

    def __init__(self):
        self.shown: list[Toast] = []
        self.hidden: list[Toast] = []

    def show(self, toast: Toast) -> None:
        self.shown.append(toast)
        logger.info(f"[TOAST {toast.kind.upper()}] {toast.icon} {toast.title} | {toast.message}")

    def hide(self, toast: Toast) -> None:
        self.hidden.append(toast)
        logger.debug(f"[TOAST HIDDEN] {toast.id}")


class NotificationCenter:
    """
    Shows notifications as toasts and acknowledges them on dismissal.

    Example:
        center = NotificationCenter(StoreFeed(store.notifications))
        center.poll("a@x.com")      # shows unread notifications
        center.tick()               # hides the ones whose time is up
        center.dismiss(toast.id)    # hides and acknowledges
    """

    def __init__(
        self,
        feed: Optional[NotificationFeed] = None,
        renderer: Optional[ToastRenderer] = None,
        default_duration: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.feed = feed
        self.renderer = renderer or LogRenderer()
        self.default_duration = get_settings().toast_duration if default_duration is None else default_duration
        self.clock = clock

        self._ids = count(1)
        self._lock = threading.RLock()
        self._toasts: dict[int, Toast] = {}
        self._shown_notifications: set[int] = set()
        self._dismissed_notifications: set[int] = set()

        self._poll_thread: Optional[threading.Thread] = None
        self._stop_polling = threading.Event()

    # =========================================================================
    # Showing toasts
    # =========================================================================

    def show(
        self,
        kind: str = "success",
        title: str = "",
        message: str = "",
        duration: Optional[float] = None,
        icon: Optional[str] = None,
        show_progress: bool = True,
        on_close: Optional[Callable[[Toast], None]] = None,
        notification_id: Optional[int] = None,
    ) -> Toast:
        """
        Display a toast.

        Args:
            kind: success, error, warning, info, cart, order, login, ...
            duration: Seconds before it hides itself; 0 keeps it until dismissed
            icon: Overrides the icon for `kind`
            on_close: Called once when the toast goes away, however that happens
            notification_id: Server notification this toast stands for, if any
        """
        toast = Toast(
            id=next(self._ids),
            kind=kind,
            title=title,
            message=message,
            icon=icon or ICONS.get(kind, ICONS["info"]),
            duration=self.default_duration if duration is None else max(duration, 0),
            shown_at=self.clock(),
            show_progress=show_progress,
            notification_id=notification_id,
            on_close=on_close,
        )
        with self._lock:
            self._toasts[toast.id] = toast
            if notification_id is not None:
                self._shown_notifications.add(notification_id)
        self.renderer.show(toast)
        return toast

    def success(self, title: str, message: str = "", **options) -> Toast:
        return self.show("success", title, message, **options)

    def error(self, title: str, message: str = "", **options) -> Toast:
        return self.show("error", title, message, **options)

    def warning(self, title: str, message: str = "", **options) -> Toast:
        return self.show("warning", title, message, **options)

    def info(self, title: str, message: str = "", **options) -> Toast:
        return self.show("info", title, message, **options)

    def toast(self, message: str, kind: str = "success", duration: float = 3.0) -> Toast:
        """Short one-line toast without a title."""
        return self.show(kind, "", message, duration=duration, show_progress=False)

    def cart_added(self, product_name: str, price: float) -> Toast:
        return self.show(
            "cart",
            "Added to Cart!",
            f"{product_name} (₹{price}) has been added to your cart.",
            duration=3.0,
        )

    def order_placed(self, order_id: Optional[int] = None) -> Toast:
        if order_id:
            message = f"Your order #{order_id} has been confirmed. Thank you!"
        else:
            message = "Your order has been confirmed. Thank you!"
        return self.show("success", "Order Placed Successfully!", message, icon=ICONS["order"], duration=5.0)

    def login_success(self, user_name: str) -> Toast:
        return self.show(
            "success",
            f"Welcome back, {user_name}!",
            "You have successfully signed in.",
            icon=ICONS["login"],
            duration=3.0,
        )

    def signup_success(self, user_name: str) -> Toast:
        return self.show(
            "success",
            "Account Created!",
            f"Welcome to FreshDairy, {user_name}! Your account is ready.",
            icon="🎉",
            duration=4.0,
        )

    # =========================================================================
    # Server notifications
    # =========================================================================

    def poll(self, email: str) -> list[Toast]:
        """
        Fetch the customer's notifications and show the unread ones.

        Notifications already shown or dismissed during this session are not
        shown again. Returns the toasts created by this poll, oldest first.
        """
        notifications = self._require_feed().list_notifications(email)
        created = []
        # Feed is newest first; show oldest first so the newest ends up on top
        for notification in reversed(notifications):
            if not self._should_show(notification):
                continue
            created.append(self.show(
                _KIND_FOR_TYPE.get(notification.type, "info"),
                notification.title,
                notification.message,
                notification_id=notification.id,
            ))
        if created:
            logger.info(f"Showing {len(created)} new notifications for {email}")
        return created

    def _should_show(self, notification: Notification) -> bool:
        with self._lock:
            return not (
                notification.is_read
                or notification.id in self._shown_notifications
                or notification.id in self._dismissed_notifications
            )

    def mark_read(self, notification_id: int) -> bool:
        """Acknowledge a notification and hide its toast if one is visible."""
        acknowledged = self._require_feed().acknowledge(notification_id)
        with self._lock:
            self._dismissed_notifications.add(notification_id)
            toasts = [t for t in self._toasts.values() if t.notification_id == notification_id]
        for toast in toasts:
            self._close(toast)
        return acknowledged

    # =========================================================================
    # Hiding toasts
    # =========================================================================

    def dismiss(self, toast_id: int) -> bool:
        """
        Manually close a toast.

        If the toast stands for a server notification, that notification is
        acknowledged. Returns False if the toast is no longer visible.
        """
        with self._lock:
            toast = self._toasts.get(toast_id)
        if toast is None:
            return False
        if toast.notification_id is not None:
            self.mark_read(toast.notification_id)
        else:
            self._close(toast)
        return True

    def tick(self, now: Optional[float] = None) -> list[Toast]:
        """Hide every toast whose display time has run out. Returns them."""
        now = self.clock() if now is None else now
        with self._lock:
            expired = [t for t in self._toasts.values() if t.is_expired(now)]
        for toast in expired:
            self._close(toast)
        return expired

    def _close(self, toast: Toast) -> None:
        with self._lock:
            if self._toasts.pop(toast.id, None) is None:
                return
            toast.closed = True
        self.renderer.hide(toast)
        if toast.on_close:
            toast.on_close(toast)

    def active(self) -> list[Toast]:
        """Visible toasts, oldest first."""
        with self._lock:
            return sorted(self._toasts.values(), key=lambda t: t.id)

    # =========================================================================
    # Periodic polling
    # =========================================================================

    def start_polling(self, email: str, interval: float = 30.0) -> None:
        """Poll and expire toasts every `interval` seconds on a background thread."""
        if self._poll_thread and self._poll_thread.is_alive():
            logger.warning("Polling already running")
            return
        self._stop_polling.clear()
        self._poll_thread = threading.Thread(
            target=self._poll_loop,
            args=(email, interval),
            name="notification-poller",
            daemon=True,
        )
        self._poll_thread.start()

    def stop_polling(self, join: bool = True) -> None:
        self._stop_polling.set()
        if join and self._poll_thread:
            self._poll_thread.join()
        self._poll_thread = None

    def _poll_loop(self, email: str, interval: float) -> None:
        while not self._stop_polling.is_set():
            try:
                self.poll(email)
            except FreshDairyError as e:
                # Keep polling; the next round may succeed
                logger.warning(f"Polling notifications for {email} failed: {e.message}")
            self.tick()
            self._stop_polling.wait(interval)

    def _require_feed(self) -> NotificationFeed:
        if self.feed is None:
            raise RuntimeError("NotificationCenter has no feed to poll")
        return self.feed
