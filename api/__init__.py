"""
HTTP API for the FreshDairy order lifecycle.

This package provides a single FastAPI application that exposes:
- Storefront endpoints for orders, notifications, accounts and the catalog
- Admin endpoints for order status changes and dashboard views
"""

from api.main import app, create_app

__all__ = ["app", "create_app"]
