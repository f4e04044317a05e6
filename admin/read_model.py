"""
Admin read model.

Projects the Order Store, Notification Store, customer directory and contact
messages into the views the admin console shows, and carries the one admin
write: changing an order's status.

Design decisions:
- display_id ("FD000007") is decoration only; every write addresses orders by
  their integer storage id, and display ids are rejected as write keys
- Status changes go straight to the store (last-write-wins) and then,
  optionally, notify the customer through the order service
"""

import logging
from typing import Optional, Union

from shared.data_store import DataStore
from shared.errors import ValidationError
from shared.models import ContactMessage, Customer, DashboardStats, DisplayOrder, Order, OrderStatus
from ordering.service import OrderService

logger = logging.getLogger("admin_read_model")


def make_display_id(order_id: int, prefix: str = "FD", width: int = 6) -> str:
    """
    Human-facing id for an order: fixed prefix plus zero-padded storage id.

    make_display_id(7) == "FD000007". Ids wider than `width` are written out in
    full rather than truncated, so distinct ids never share a display id.
    """
    if order_id < 0:
        raise ValueError("order ids are non-negative")
    return f"{prefix}{order_id:0{width}d}"


class AdminReadModelBuilder:
    """
    Builds admin-facing views on demand.

    Example:
        admin = AdminReadModelBuilder(data_store, order_service)
        for order in admin.list_orders():
            print(order.display_id, order.status)
        admin.set_order_status(7, "Shipped")
    """

    def __init__(self, data_store: DataStore, order_service: Optional[OrderService] = None):
        self.data_store = data_store
        self.order_service = order_service or OrderService(data_store)

    @property
    def settings(self):
        return self.data_store.settings

    def display_id(self, order_id: int) -> str:
        return make_display_id(order_id, self.settings.display_id_prefix, self.settings.display_id_width)

    def build_order_view(self, order: Order) -> DisplayOrder:
        return DisplayOrder(**order.model_dump(), display_id=self.display_id(order.id))

    # =========================================================================
    # Orders
    # =========================================================================

    def list_orders(self, customer_email: Optional[str] = None) -> list[DisplayOrder]:
        """Orders newest first; every order when no customer is given."""
        if customer_email:
            orders = self.data_store.orders.list_by_customer(customer_email)
        else:
            orders = self.data_store.orders.list_all()
        return [self.build_order_view(order) for order in orders]

    def get_order(self, order_id: int) -> DisplayOrder:
        return self.build_order_view(self.data_store.orders.get(order_id))

    def set_order_status(self, order_id: Union[int, str], status: str) -> DisplayOrder:
        """
        Move an order to a new status.

        Any configured status may follow any other (unless forward-only mode is
        on). When notify_on_status_change is set, the customer gets an "order"
        notification afterwards; failing to write it does not undo the change.
        Setting the status an order already has writes no notification.

        Raises:
            ValidationError: order_id is not a storage id (e.g. a display id) or
                the status is unknown
            NotFound: No such order
        """
        storage_id = self._storage_id(order_id)
        previous = self.data_store.orders.get(storage_id).status
        updated = self.data_store.orders.set_status(storage_id, status)
        if self.settings.notify_on_status_change and updated.status != previous:
            self.order_service.notify_status_change(updated)
        return self.build_order_view(updated)

    def _storage_id(self, order_id: Union[int, str]) -> int:
        if isinstance(order_id, bool):
            raise ValidationError("order id must be an integer")
        if isinstance(order_id, int):
            return order_id
        text = str(order_id).strip()
        if text.isdigit():
            return int(text)
        raise ValidationError(
            f"'{order_id}' is not an order id; use the numeric id, not the display id"
        )

    # =========================================================================
    # Customers and messages
    # =========================================================================

    def list_customers(self) -> list[Customer]:
        """Registered customers, newest first. No credential fields."""
        return self.data_store.customers.list_all()

    def list_messages(self) -> list[ContactMessage]:
        """Contact-form messages, newest first."""
        return self.data_store.messages.list_all()

    # =========================================================================
    # Dashboard
    # =========================================================================

    def dashboard_stats(self) -> DashboardStats:
        orders = self.data_store.orders
        by_status = orders.count_by_status()
        pending_label = self.settings.default_status
        return DashboardStats(
            total_orders=orders.count(),
            pending_orders=by_status.get(pending_label, 0),
            total_customers=self.data_store.customers.count(),
            total_messages=self.data_store.messages.count(),
            total_revenue=orders.revenue(exclude_status=OrderStatus.CANCELLED.value),
            orders_by_status=by_status,
        )
