"""
Tests for the client-side notification center.

A fake clock drives toast expiry so nothing here sleeps.
"""

import pytest

from shared.data_store import DataStore
from shared.models import NewNotification
from delivery.feeds import StoreFeed
from delivery.notifier import ICONS, LogRenderer, NotificationCenter


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def renderer() -> LogRenderer:
    return LogRenderer()


@pytest.fixture
def center(data_store: DataStore, renderer: LogRenderer, clock: FakeClock) -> NotificationCenter:
    return NotificationCenter(StoreFeed(data_store.notifications), renderer=renderer, clock=clock)


def _notify(data_store: DataStore, title: str, email: str = "a@x.com", type: str = "order") -> int:
    return data_store.notifications.create(
        NewNotification(customer_email=email, title=title, message=f"{title} body", type=type)
    )


class TestPoll:
    """Tests for pulling notifications into toasts."""

    def test_shows_unread_oldest_first(self, center: NotificationCenter, data_store: DataStore):
        _notify(data_store, "first")
        _notify(data_store, "second")

        toasts = center.poll("a@x.com")

        assert [t.title for t in toasts] == ["first", "second"]
        assert all(t.kind == "order" for t in toasts)
        assert toasts[0].icon == ICONS["order"]

    def test_read_notifications_are_not_shown(self, center: NotificationCenter, data_store: DataStore):
        read_id = _notify(data_store, "old")
        data_store.notifications.acknowledge(read_id)
        _notify(data_store, "new")

        assert [t.title for t in center.poll("a@x.com")] == ["new"]

    def test_second_poll_does_not_repeat(self, center: NotificationCenter, data_store: DataStore):
        _notify(data_store, "first")
        center.poll("a@x.com")
        _notify(data_store, "second")

        assert [t.title for t in center.poll("a@x.com")] == ["second"]

    def test_only_the_customers_notifications(self, center: NotificationCenter, data_store: DataStore):
        _notify(data_store, "mine")
        _notify(data_store, "theirs", email="b@x.com")

        assert [t.title for t in center.poll("a@x.com")] == ["mine"]

    def test_system_type_shows_as_info(self, center: NotificationCenter, data_store: DataStore):
        _notify(data_store, "hello", type="system")
        _notify(data_store, "promo", type="promo")

        assert [t.kind for t in center.poll("a@x.com")] == ["info", "info"]

    def test_poll_without_feed(self):
        with pytest.raises(RuntimeError):
            NotificationCenter().poll("a@x.com")


class TestExpiry:
    """Tests for toasts hiding themselves."""

    def test_toast_hides_after_duration(self, center: NotificationCenter, clock: FakeClock):
        toast = center.success("Saved", duration=4)

        clock.advance(3.9)
        assert center.tick() == []
        clock.advance(0.2)
        assert center.tick() == [toast]
        assert toast.closed
        assert center.active() == []

    def test_zero_duration_is_sticky(self, center: NotificationCenter, clock: FakeClock):
        toast = center.warning("Heads up", duration=0)

        clock.advance(10_000)

        assert center.tick() == []
        assert center.active() == [toast]

    def test_default_duration(self, center: NotificationCenter):
        assert center.info("Note").duration == 4.0

    def test_expiry_does_not_acknowledge(self, center: NotificationCenter, data_store: DataStore,
                                         clock: FakeClock):
        notification_id = _notify(data_store, "order placed")
        center.poll("a@x.com")

        clock.advance(5)
        center.tick()

        assert data_store.notifications.get(notification_id).is_read is False
        assert center.poll("a@x.com") == []

    def test_on_close_runs_once(self, center: NotificationCenter, clock: FakeClock):
        closed = []
        toast = center.show("info", "Bye", "", duration=1, on_close=closed.append)

        clock.advance(2)
        center.tick()
        center.tick()
        center.dismiss(toast.id)

        assert closed == [toast]


class TestDismiss:
    """Tests for closing toasts by hand."""

    def test_dismiss_acknowledges_notification(self, center: NotificationCenter, data_store: DataStore,
                                               renderer: LogRenderer):
        notification_id = _notify(data_store, "order placed")
        toast = center.poll("a@x.com")[0]

        assert center.dismiss(toast.id) is True

        assert data_store.notifications.get(notification_id).is_read is True
        assert renderer.hidden == [toast]
        assert center.active() == []

    def test_dismiss_local_toast(self, center: NotificationCenter):
        toast = center.toast("Copied")

        assert center.dismiss(toast.id) is True
        assert center.dismiss(toast.id) is False

    def test_dismissed_notification_not_shown_again(self, center: NotificationCenter, data_store: DataStore):
        _notify(data_store, "order placed")
        toast = center.poll("a@x.com")[0]
        center.dismiss(toast.id)

        assert center.poll("a@x.com") == []

    def test_mark_read_hides_visible_toast(self, center: NotificationCenter, data_store: DataStore):
        notification_id = _notify(data_store, "order placed")
        center.poll("a@x.com")

        assert center.mark_read(notification_id) is True

        assert center.active() == []
        assert data_store.notifications.get(notification_id).is_read is True


class TestShorthands:

    def test_cart_added(self, center: NotificationCenter):
        toast = center.cart_added("Paneer", 90)

        assert toast.kind == "cart"
        assert toast.icon == ICONS["cart"]
        assert "Paneer" in toast.message
        assert toast.duration == 3.0

    def test_order_placed(self, center: NotificationCenter):
        toast = center.order_placed(7)

        assert toast.title == "Order Placed Successfully!"
        assert "#7" in toast.message
        assert toast.icon == ICONS["order"]

    def test_login_and_signup(self, center: NotificationCenter, renderer: LogRenderer):
        center.login_success("Asha")
        center.signup_success("Asha")

        assert [t.title for t in renderer.shown] == ["Welcome back, Asha!", "Account Created!"]

    def test_custom_icon(self, center: NotificationCenter):
        assert center.error("Oops", icon="!").icon == "!"
