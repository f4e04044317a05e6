"""
Notification message templates.

Templates are plain strings with {variable} placeholders, keyed by the
lifecycle event that produces them. The order service and the admin status
write path render these into the title/message pair stored on a Notification.

Design decisions:
- One title and one message per template; notifications are in-app only
- Status changes to a label without a dedicated template fall back to a
  generic "status updated" template, so custom label sets still notify
"""

from dataclasses import dataclass
from typing import Optional
from enum import Enum


class TemplateKey(str, Enum):
    """Lifecycle events that have a notification template."""
    ORDER_PLACED = "order_placed"
    ORDER_CONFIRMED = "order_confirmed"
    ORDER_SHIPPED = "order_shipped"
    ORDER_DELIVERED = "order_delivered"
    ORDER_CANCELLED = "order_cancelled"
    ORDER_STATUS_CHANGED = "order_status_changed"


@dataclass
class NotificationTemplate:
    key: TemplateKey
    title: str
    message: str

    def render(self, **kwargs) -> tuple[str, str]:
        """
        Render the template with provided variables.

        Returns:
            Tuple of (title, message)
        """
        return (
            self.title.format(**kwargs),
            self.message.format(**kwargs),
        )


# =============================================================================
# Template Definitions
# =============================================================================

TEMPLATES: dict[TemplateKey, NotificationTemplate] = {

    TemplateKey.ORDER_PLACED: NotificationTemplate(
        key=TemplateKey.ORDER_PLACED,
        title="Order Placed Successfully!",
        message="Your order #{order_id} has been confirmed. Total: ₹{total_amount:.2f}. Thank you!",
    ),

    TemplateKey.ORDER_CONFIRMED: NotificationTemplate(
        key=TemplateKey.ORDER_CONFIRMED,
        title="Order Confirmed",
        message="Good news! Your order #{order_id} has been confirmed and is being prepared.",
    ),

    TemplateKey.ORDER_SHIPPED: NotificationTemplate(
        key=TemplateKey.ORDER_SHIPPED,
        title="Order On Its Way",
        message="Your order #{order_id} has been shipped and will reach you soon.",
    ),

    TemplateKey.ORDER_DELIVERED: NotificationTemplate(
        key=TemplateKey.ORDER_DELIVERED,
        title="Order Delivered",
        message="Your order #{order_id} has been delivered. Enjoy your fresh dairy!",
    ),

    TemplateKey.ORDER_CANCELLED: NotificationTemplate(
        key=TemplateKey.ORDER_CANCELLED,
        title="Order Cancelled",
        message="Your order #{order_id} has been cancelled. Contact us if this is unexpected.",
    ),

    TemplateKey.ORDER_STATUS_CHANGED: NotificationTemplate(
        key=TemplateKey.ORDER_STATUS_CHANGED,
        title="Order Status Updated",
        message="Your order #{order_id} is now {status}.",
    ),
}

_STATUS_TEMPLATES: dict[str, TemplateKey] = {
    "confirmed": TemplateKey.ORDER_CONFIRMED,
    "shipped": TemplateKey.ORDER_SHIPPED,
    "delivered": TemplateKey.ORDER_DELIVERED,
    "cancelled": TemplateKey.ORDER_CANCELLED,
}


# =============================================================================
# Template Access Functions
# =============================================================================

def get_template(key: TemplateKey) -> Optional[NotificationTemplate]:
    """Get a template by key."""
    return TEMPLATES.get(key)


def render_notification(key: TemplateKey, **context) -> tuple[str, str]:
    """
    Render a notification.

    Args:
        key: Which template to use
        **context: Variables to substitute in the template

    Returns:
        (title, message)

    Raises:
        ValueError: If template not found
    """
    template = get_template(key)
    if not template:
        raise ValueError(f"No template found for key: {key}")
    return template.render(**context)


def template_for_status(status: str) -> TemplateKey:
    """Pick the template for a status label, falling back to the generic one."""
    return _STATUS_TEMPLATES.get(status.strip().lower(), TemplateKey.ORDER_STATUS_CHANGED)
