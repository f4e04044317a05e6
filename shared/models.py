"""
Domain models for the FreshDairy order lifecycle.

These are the shapes that cross the store boundary. The store hands back
fully-populated models; callers hand it the "New*" variants, which carry only
what the caller is allowed to choose.

Design decisions:
- Using Pydantic for validation and serialization
- Identifiers are integers assigned by the store
- Status is a plain string because the label set is configurable; OrderStatus
  holds the default labels
- Line items keep any extra keys the caller sent so they round-trip unchanged
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums - default label sets
# =============================================================================

class OrderStatus(str, Enum):
    """
    Default order lifecycle labels.
    The store accepts any label from the configured set, in any order.
    """
    PENDING = "Pending"           # Order placed, not yet looked at
    CONFIRMED = "Confirmed"       # Accepted by the shop
    SHIPPED = "Shipped"           # Out for delivery
    DELIVERED = "Delivered"       # Handed to the customer
    CANCELLED = "Cancelled"       # Will not be fulfilled


class NotificationType(str, Enum):
    """
    Known notification types.
    Notification.type is an open set: values outside this enum pass through.
    """
    SYSTEM = "system"
    ORDER = "order"
    CART = "cart"
    LOGIN = "login"


# =============================================================================
# Orders
# =============================================================================

class LineItem(BaseModel):
    """
    A single entry in an order.

    Never checked against the catalog. Zero quantities are representable here;
    the order service is the one that insists on positive quantities.
    """
    name: str = Field(..., description="Product name as shown to the customer")
    price: float = Field(default=0, description="Unit price at time of order")
    quantity: int = Field(..., ge=0, description="Quantity ordered")

    model_config = ConfigDict(extra="allow")


class NewOrder(BaseModel):
    """Everything the caller supplies when an order is created."""
    customer_email: str
    customer_name: Optional[str] = None
    items: list[LineItem] = Field(default_factory=list)
    total_amount: float = Field(..., ge=0, description="Trusted from the caller")
    delivery_address: Optional[str] = None
    mobile: Optional[str] = None
    payment_method: Optional[str] = None


class Order(NewOrder):
    """
    A stored order.

    id, created_at, items and total_amount are write-once; status is the only
    field that changes after creation.
    """
    id: int
    status: str
    created_at: datetime


class DisplayOrder(Order):
    """Order decorated for the admin console. display_id is cosmetic only."""
    display_id: str


# =============================================================================
# Notifications
# =============================================================================

class NewNotification(BaseModel):
    customer_email: str
    title: str
    message: str
    type: str = NotificationType.SYSTEM.value


class Notification(NewNotification):
    """
    A stored notification.

    is_read flips to True through acknowledge and never flips back.
    """
    id: int
    is_read: bool = False
    created_at: datetime


# =============================================================================
# Customers, contact messages, catalog
# =============================================================================

class Customer(BaseModel):
    """Customer as listed to admins. The password hash never leaves the store."""
    id: int
    name: str
    email: str
    created_at: datetime


class CustomerIdentity(BaseModel):
    """What a successful login returns."""
    id: int
    name: str
    email: str


class NewContactMessage(BaseModel):
    name: str
    email: str
    message: str


class ContactMessage(NewContactMessage):
    id: int
    created_at: datetime


class Product(BaseModel):
    """Catalog entry. Read-only from this system's point of view."""
    id: int
    name: str
    price: float = Field(..., ge=0)
    description: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    is_available: bool = True


# =============================================================================
# Admin dashboard
# =============================================================================

class DashboardStats(BaseModel):
    total_orders: int
    pending_orders: int
    total_customers: int
    total_messages: int
    total_revenue: float
    orders_by_status: dict[str, int] = Field(default_factory=dict)
