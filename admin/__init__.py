"""
Admin console read side.

Builds order, customer and message views for administrators and carries the
order status write path.
"""

from admin.read_model import AdminReadModelBuilder, make_display_id

__all__ = ["AdminReadModelBuilder", "make_display_id"]
