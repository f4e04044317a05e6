"""
Shared infrastructure for the FreshDairy backend.

This package contains code used by the ordering, admin and delivery layers:
- Domain models (Order, Notification, Customer, Product, etc.)
- Data store over SQLAlchemy
- Configuration, error taxonomy and notification templates
- Customer directory and the legacy order import
"""

from shared.models import (
    ContactMessage,
    Customer,
    CustomerIdentity,
    DashboardStats,
    DisplayOrder,
    LineItem,
    NewNotification,
    NewOrder,
    Notification,
    NotificationType,
    Order,
    OrderStatus,
    Product,
)
from shared.config import Settings, get_settings
from shared.data_store import DataStore
from shared.errors import (
    DuplicateEmail,
    FreshDairyError,
    InvalidCredentials,
    InvalidStatusTransition,
    NotFound,
    StorageUnavailable,
    ValidationError,
)

__all__ = [
    "ContactMessage",
    "Customer",
    "CustomerIdentity",
    "DashboardStats",
    "DisplayOrder",
    "LineItem",
    "NewNotification",
    "NewOrder",
    "Notification",
    "NotificationType",
    "Order",
    "OrderStatus",
    "Product",
    "Settings",
    "get_settings",
    "DataStore",
    "FreshDairyError",
    "ValidationError",
    "InvalidStatusTransition",
    "DuplicateEmail",
    "InvalidCredentials",
    "NotFound",
    "StorageUnavailable",
]
