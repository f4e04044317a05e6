"""
FreshDairy HTTP API.

This application provides:
1. Storefront endpoints: orders, notifications, signup/login, contact, products
2. Admin endpoints: order list and status changes, customers, messages, stats
3. Health check

Run with:
    uv run uvicorn api.main:app --reload

Then visit http://localhost:5000/docs for interactive API documentation.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import APIRouter, Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.config import Settings, get_settings
from shared.customer_directory import CustomerDirectory
from shared.data_store import DataStore
from shared.errors import FreshDairyError, format_validation_errors
from shared.models import (
    ContactMessage,
    Customer,
    CustomerIdentity,
    DashboardStats,
    DisplayOrder,
    NewContactMessage,
    Notification,
    Order,
    Product,
)
from ordering.requests import (
    ContactMessageRequest,
    CreateNotificationRequest,
    LoginRequest,
    SignupRequest,
    StatusUpdateRequest,
)
from ordering.service import OrderService
from admin.read_model import AdminReadModelBuilder

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger("freshdairy_api")


router = APIRouter()


# Services live on app.state; these pull them out for the route handlers
def _store(request: Request) -> DataStore:
    return request.app.state.data_store


def _orders(request: Request) -> OrderService:
    return request.app.state.order_service


def _admin(request: Request) -> AdminReadModelBuilder:
    return request.app.state.admin


def _directory(request: Request) -> CustomerDirectory:
    return request.app.state.directory


# =============================================================================
# Health Check
# =============================================================================

@router.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "freshdairy-api"}


# =============================================================================
# Orders
# =============================================================================

@router.post("/api/orders", status_code=201, tags=["Orders"])
def place_order(request: Request, payload: Any = Body(None)):
    """
    Place an order.

    Accepts the current storefront body (customerEmail) and the legacy one
    (userEmail). Either way the order starts as Pending and the customer gets
    an "order" notification.
    """
    placed = _orders(request).place_order_from_payload(payload)
    return {"message": "Order placed successfully!", "orderId": placed.order_id}


@router.get("/api/orders", response_model=list[Order], tags=["Orders"])
def list_orders(request: Request, email: Optional[str] = None):
    """A customer's orders, newest first. Every order when no email is given."""
    store = _store(request)
    if email:
        return store.orders.list_by_customer(email)
    return store.orders.list_all()


@router.get("/api/orders/{order_id}", response_model=Order, tags=["Orders"])
def get_order(request: Request, order_id: int):
    return _store(request).orders.get(order_id)


@router.get("/api/order-statuses", tags=["Orders"])
def order_statuses(request: Request) -> list[str]:
    """The configured status labels, in lifecycle order."""
    return _store(request).settings.status_labels


# =============================================================================
# Notifications
# =============================================================================

@router.post("/api/notifications", status_code=201, tags=["Notifications"])
def create_notification(request: Request, body: CreateNotificationRequest):
    notification_id = _orders(request).create_notification(body)
    return {"success": True, "id": notification_id}


@router.get("/api/notifications", response_model=list[Notification], tags=["Notifications"])
def list_notifications(request: Request, email: str, limit: Optional[int] = None):
    """Most recent notifications for one customer, newest first, at most notification_limit."""
    store = _store(request)
    cap = store.settings.notification_limit
    limit = cap if limit is None else min(limit, cap)
    return store.notifications.list_by_customer(email, limit=limit)


@router.post("/api/notifications/{notification_id}/read", tags=["Notifications"])
def acknowledge_notification(request: Request, notification_id: int):
    """Mark a notification read. Acknowledging twice is not an error."""
    return {"success": _store(request).notifications.acknowledge(notification_id)}


# =============================================================================
# Customers
# =============================================================================

@router.post("/api/signup", status_code=201, tags=["Customers"])
def signup(request: Request, body: SignupRequest):
    directory = _directory(request)
    customer_id = directory.register(body.name, body.email, body.password)
    user = CustomerIdentity(id=customer_id, name=body.name.strip(), email=body.email.strip())
    return {"message": "User Created", "user": user.model_dump()}


@router.post("/api/login", response_model=CustomerIdentity, tags=["Customers"])
def login(request: Request, body: LoginRequest):
    return _directory(request).verify(body.email, body.password)


@router.post("/api/contact", tags=["Customers"])
def submit_contact_message(request: Request, body: ContactMessageRequest):
    _store(request).messages.create(NewContactMessage(**body.model_dump()))
    return {"success": True}


@router.get("/api/products", response_model=list[Product], tags=["Catalog"])
def list_products(request: Request):
    """Products currently available for ordering."""
    return _store(request).catalog.list_available()


# =============================================================================
# Admin
# =============================================================================

@router.get("/api/admin/orders", response_model=list[DisplayOrder], tags=["Admin"])
def admin_list_orders(request: Request, email: Optional[str] = None):
    return _admin(request).list_orders(customer_email=email)


@router.put("/api/admin/orders/{order_id}", response_model=DisplayOrder, tags=["Admin"])
def admin_set_order_status(request: Request, order_id: str, body: StatusUpdateRequest):
    """
    Change an order's status.

    order_id is the numeric storage id; display ids such as FD000007 are
    rejected with 400.
    """
    return _admin(request).set_order_status(order_id, body.status)


@router.get("/api/admin/customers", response_model=list[Customer], tags=["Admin"])
def admin_list_customers(request: Request):
    return _admin(request).list_customers()


@router.get("/api/admin/messages", response_model=list[ContactMessage], tags=["Admin"])
def admin_list_messages(request: Request):
    return _admin(request).list_messages()


@router.get("/api/admin/stats", response_model=DashboardStats, tags=["Admin"])
def admin_stats(request: Request):
    return _admin(request).dashboard_stats()


# =============================================================================
# Error handling
# =============================================================================

def _error_response(error: FreshDairyError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"message": error.message, "error": type(error).__name__},
    )


async def _handle_domain_error(request: Request, exc: FreshDairyError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    return _error_response(exc)


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = format_validation_errors(list(exc.errors()))
    logger.info(f"{request.method} {request.url.path} rejected (400): {message}")
    return JSONResponse(status_code=400, content={"message": message, "error": "ValidationError"})


# =============================================================================
# Application factory
# =============================================================================

def create_app(data_store: Optional[DataStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        data_store: Use this store instead of building one from settings.
            The caller keeps ownership and disposes it.
        settings: Configuration; defaults to the environment-derived settings
    """
    settings = settings or (data_store.settings if data_store else get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application startup and shutdown."""
        logger.info("Starting FreshDairy API")
        store = data_store or DataStore(settings)
        store.migrate()
        if data_store is None:
            added = store.catalog.seed_from_fixture()
            if added:
                logger.info(f"Seeded {added} catalog products")

        order_service = OrderService(store)
        app.state.data_store = store
        app.state.order_service = order_service
        app.state.admin = AdminReadModelBuilder(store, order_service)
        app.state.directory = CustomerDirectory(store)
        yield
        if data_store is None:
            store.dispose()
        logger.info("Shutting down")

    app = FastAPI(
        title="FreshDairy API",
        description="""
    Order lifecycle and notifications for the FreshDairy storefront.

    ## Endpoints

    - `/api/orders` - Place and look up orders
    - `/api/notifications` - Per-customer notification feed
    - `/api/signup`, `/api/login` - Customer accounts
    - `/api/admin/*` - Admin console views and order status changes
    """,
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(FreshDairyError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.include_router(router)
    return app


app = create_app()
