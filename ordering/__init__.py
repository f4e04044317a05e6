"""
Order placement.

The Order Service writes orders and the notifications that accompany
lifecycle events; the request models describe every accepted input field.
"""

from ordering.requests import (
    CreateNotificationRequest,
    LegacyOrderRequest,
    OrderLineIn,
    PlaceOrderRequest,
    parse_order_payload,
)
from ordering.service import OrderService, PlacedOrder

__all__ = [
    "CreateNotificationRequest",
    "LegacyOrderRequest",
    "OrderLineIn",
    "PlaceOrderRequest",
    "parse_order_payload",
    "OrderService",
    "PlacedOrder",
]
