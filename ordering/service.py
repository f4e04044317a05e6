"""
Order service: accepts orders and emits their notifications.

Placing an order is two writes, in a fixed order:
1. The order itself, through the Order Store
2. An "order" notification to the customer, through the Notification Store

The second write is only attempted after the first one succeeded. They are not
one transaction: losing an order is fatal to the request, losing its
notification is logged and the order still stands.

Both storefront entry points (customerEmail and legacy userEmail) end up in
the same place_order path, so orders from either are indistinguishable
afterwards.
"""

import logging
from typing import Any, Optional

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from shared.data_store import DataStore
from shared.errors import FreshDairyError, ValidationError
from shared.models import NewNotification, NewOrder, NotificationType, Order
from shared.templates import TemplateKey, render_notification, template_for_status
from ordering.requests import (
    CreateNotificationRequest,
    LegacyOrderRequest,
    PlaceOrderRequest,
    parse_order_payload,
)

logger = logging.getLogger("order_service")


class PlacedOrder(BaseModel):
    """Result of placing an order."""
    order_id: int
    notification_id: Optional[int] = None


class OrderService:
    """
    Creates orders and the notifications that go with order lifecycle events.

    Example:
        service = OrderService(data_store)
        placed = service.place_order(PlaceOrderRequest(
            customerEmail="a@x.com",
            items=[{"name": "Milk", "price": 40, "quantity": 2}],
            totalAmount=80,
        ))
    """

    def __init__(self, data_store: DataStore):
        self.data_store = data_store

    # =========================================================================
    # Placing orders
    # =========================================================================

    def place_order(self, request: PlaceOrderRequest) -> PlacedOrder:
        """
        Write one Pending order, then its confirmation notification.

        Raises:
            ValidationError: Only for requests built without validation
            StorageUnavailable: The order could not be written
        """
        new_order = NewOrder(
            customer_email=request.customer_email,
            customer_name=request.customer_name,
            items=request.line_items(),
            total_amount=request.total_amount,
            delivery_address=request.delivery_address,
            mobile=request.mobile,
            payment_method=request.payment_method or self.data_store.settings.default_payment_method,
        )
        if not new_order.customer_email.strip():
            raise ValidationError("customerEmail is required")
        if not new_order.items:
            raise ValidationError("items must contain at least one entry")

        # Step 1: the order. Any failure here propagates to the caller.
        order_id = self.data_store.orders.create(new_order)
        logger.info(
            f"Order {order_id} placed by {new_order.customer_email}: "
            f"{len(new_order.items)} items, total {new_order.total_amount:.2f}"
        )

        # Step 2: the notification, only now that the order exists
        title, message = render_notification(
            TemplateKey.ORDER_PLACED,
            order_id=order_id,
            total_amount=new_order.total_amount,
        )
        notification_id = self.notify(new_order.customer_email, title, message, NotificationType.ORDER.value)
        return PlacedOrder(order_id=order_id, notification_id=notification_id)

    def place_legacy_order(self, request: LegacyOrderRequest) -> PlacedOrder:
        """Legacy storefront order: userEmail is the customer email."""
        return self.place_order(PlaceOrderRequest(
            customerEmail=request.user_email,
            customerName=request.customer_name,
            items=request.items,
            totalAmount=request.total_amount,
            deliveryAddress=request.delivery_address,
            mobile=request.mobile,
            paymentMethod=request.payment_method,
        ))

    def place_order_from_payload(self, payload: Any) -> PlacedOrder:
        """
        Place an order from an untyped body using either email spelling.

        Raises:
            ValidationError: Malformed body (see parse_order_payload)
        """
        request = parse_order_payload(payload)
        if isinstance(request, LegacyOrderRequest):
            return self.place_legacy_order(request)
        return self.place_order(request)

    # =========================================================================
    # Notifications
    # =========================================================================

    def notify(
        self,
        customer_email: str,
        title: str,
        message: str,
        notification_type: str = NotificationType.SYSTEM.value,
    ) -> Optional[int]:
        """
        Best-effort notification write used after a lifecycle change.

        Returns the notification id, or None if the write failed (logged).
        """
        try:
            return self.data_store.notifications.create(NewNotification(
                customer_email=customer_email,
                title=title,
                message=message,
                type=notification_type,
            ))
        except FreshDairyError as e:
            logger.error(f"Failed to write notification for {customer_email}: {e.message}")
            return None
        except SQLAlchemyError as e:
            logger.error(f"Failed to write notification for {customer_email}: {type(e).__name__}: {e}")
            return None

    def notify_status_change(self, order: Order) -> Optional[int]:
        """Tell the customer their order moved to order.status."""
        title, message = render_notification(
            template_for_status(order.status),
            order_id=order.id,
            status=order.status,
        )
        return self.notify(order.customer_email, title, message, NotificationType.ORDER.value)

    def create_notification(self, request: CreateNotificationRequest) -> int:
        """
        Explicitly requested notification.

        Unlike notify(), failures propagate: the caller asked for this write.
        """
        return self.data_store.notifications.create(NewNotification(
            customer_email=request.customer_email,
            title=request.title,
            message=request.message,
            type=request.type or NotificationType.SYSTEM.value,
        ))
