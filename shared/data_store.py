"""
Relational data store for the FreshDairy order lifecycle.

This module owns every durable record: orders, notifications, customers,
contact messages and the product catalog. It is backed by SQLAlchemy and works
against any URL SQLAlchemy understands (SQLite by default, MySQL/Postgres in
deployment).

Design decisions:
- One explicitly constructed DataStore owns the engine and session factory;
  services receive it at construction time, nothing is module-global
- Schema bootstrap is DataStore.migrate(), an idempotent call made by the CLI
  or the API lifespan, never an import side effect
- Each store operation runs in its own short transaction (per-row atomicity);
  there is no transaction spanning the order and notification writes
- set_status is last-write-wins: no version column, no row locks
- Driver-level connection failures surface as StorageUnavailable, with the
  details logged rather than returned
"""

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    func,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from shared.config import Settings, get_settings
from shared.errors import (
    DuplicateEmail,
    InvalidStatusTransition,
    NotFound,
    StorageUnavailable,
    ValidationError,
)
from shared.models import (
    ContactMessage,
    Customer,
    CustomerIdentity,
    LineItem,
    NewContactMessage,
    NewNotification,
    NewOrder,
    Notification,
    Order,
    OrderStatus,
    Product,
)

logger = logging.getLogger("data_store")


def _now() -> datetime:
    """Naive UTC timestamp; every backend stores it the same way."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =============================================================================
# Schema
# =============================================================================

class Base(DeclarativeBase):
    pass


class OrderRow(Base):
    __tablename__ = "orders"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_email: Mapped[str] = mapped_column(String(255), index=True)
    customer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # Serialized list of line items, stored as an opaque JSON blob
    items: Mapped[str] = mapped_column(Text)
    total_amount: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False))
    delivery_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    mobile: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(50), default=OrderStatus.PENDING.value)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now, index=True)


class NotificationRow(Base):
    __tablename__ = "notifications"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_email: Mapped[str] = mapped_column(String(255), index=True)
    title: Mapped[str] = mapped_column(String(255))
    message: Mapped[str] = mapped_column(Text)
    type: Mapped[str] = mapped_column(String(50), default="system")
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now, index=True)


class CustomerRow(Base):
    __tablename__ = "customers"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), unique=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)


class ContactMessageRow(Base):
    __tablename__ = "contact_messages"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255))
    message: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)


class ProductRow(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    unit: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True)


# =============================================================================
# Row conversion
# =============================================================================

def serialize_items(items: list[LineItem]) -> str:
    """Line items to the stored JSON blob. Order, duplicates and extras kept."""
    return json.dumps([item.model_dump() for item in items])


def deserialize_items(blob: Optional[str]) -> list[LineItem]:
    if not blob:
        return []
    return [LineItem.model_validate(entry) for entry in json.loads(blob)]


def _order_from_row(row: OrderRow) -> Order:
    return Order(
        id=row.id,
        customer_email=row.customer_email,
        customer_name=row.customer_name,
        items=deserialize_items(row.items),
        total_amount=float(row.total_amount),
        delivery_address=row.delivery_address,
        mobile=row.mobile,
        payment_method=row.payment_method,
        status=row.status,
        created_at=row.created_at,
    )


def _notification_from_row(row: NotificationRow) -> Notification:
    return Notification(
        id=row.id,
        customer_email=row.customer_email,
        title=row.title,
        message=row.message,
        type=row.type,
        is_read=bool(row.is_read),
        created_at=row.created_at,
    )


# =============================================================================
# Status transitions
# =============================================================================

# Only consulted when enforce_forward_transitions is switched on.
FORWARD_TRANSITIONS: dict[str, set[str]] = {
    "Pending": {"Confirmed", "Shipped", "Delivered", "Cancelled"},
    "Confirmed": {"Shipped", "Delivered", "Cancelled"},
    "Shipped": {"Delivered", "Cancelled"},
    "Delivered": set(),
    "Cancelled": set(),
}


def is_forward_transition(current: str, new: str, labels: list[str]) -> bool:
    """
    True if moving from current to new never goes backwards.

    Labels covered by FORWARD_TRANSITIONS use that table; any other label is
    ordered by its position in the configured label list.
    """
    if current == new:
        return True
    if current in FORWARD_TRANSITIONS and new in FORWARD_TRANSITIONS:
        return new in FORWARD_TRANSITIONS[current]
    if current not in labels or new not in labels:
        return True
    return labels.index(new) > labels.index(current)


# =============================================================================
# Stores
# =============================================================================

class OrderStore:
    """
    Durable record of orders, keyed by a store-assigned integer id.

    Owns status transitions. By default any configured status may follow any
    other; see is_forward_transition for the optional stricter mode.
    """

    def __init__(self, db: "DataStore"):
        self._db = db

    @property
    def status_labels(self) -> list[str]:
        return self._db.settings.status_labels

    def normalize_status(self, status: str) -> str:
        """
        Map a caller-supplied label onto the configured label set.

        Matching is case-insensitive; the configured spelling is returned.

        Raises:
            ValidationError: If the label is empty or not configured
        """
        wanted = (status or "").strip()
        if not wanted:
            raise ValidationError("status is required")
        for label in self.status_labels:
            if label.lower() == wanted.lower():
                return label
        raise ValidationError(
            f"Unknown status '{wanted}'. Expected one of: {', '.join(self.status_labels)}"
        )

    def create(
        self,
        order: NewOrder,
        status: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> int:
        """
        Persist a new order and return its id.

        New orders start in the default status with created_at = now. The
        status/created_at overrides exist for importing historical orders
        from the legacy document store and are not used by the order service.
        """
        initial_status = self.normalize_status(status) if status else self._db.settings.default_status
        row = OrderRow(
            customer_email=order.customer_email,
            customer_name=order.customer_name,
            items=serialize_items(order.items),
            total_amount=order.total_amount,
            delivery_address=order.delivery_address,
            mobile=order.mobile,
            payment_method=order.payment_method,
            status=initial_status,
            created_at=created_at or _now(),
        )
        with self._db.session() as session:
            session.add(row)
            session.flush()
            order_id = row.id
        logger.info(f"Order {order_id} created for {order.customer_email}")
        return order_id

    def get(self, order_id: int) -> Order:
        """Raises NotFound for unknown ids."""
        with self._db.session() as session:
            row = session.get(OrderRow, order_id)
            if row is None:
                raise NotFound("Order", order_id)
            return _order_from_row(row)

    def list_by_customer(self, email: str) -> list[Order]:
        """Orders for one customer, most recent first."""
        stmt = (
            select(OrderRow)
            .where(OrderRow.customer_email == email)
            .order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
        )
        with self._db.session() as session:
            return [_order_from_row(row) for row in session.scalars(stmt)]

    def list_all(self, limit: Optional[int] = None, offset: int = 0) -> list[Order]:
        """
        Every order, most recent first.

        Unbounded unless limit is given.
        """
        stmt = select(OrderRow).order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._db.session() as session:
            return [_order_from_row(row) for row in session.scalars(stmt)]

    def set_status(self, order_id: int, new_status: str) -> Order:
        """
        Overwrite an order's status and return the updated order.

        No transition graph is checked unless enforce_forward_transitions is
        set. Concurrent calls on the same order are last-write-wins.

        Raises:
            NotFound: Unknown order id
            ValidationError: Status not in the configured label set
            InvalidStatusTransition: Backwards move with forward-only mode on
        """
        label = self.normalize_status(new_status)
        with self._db.session() as session:
            row = session.get(OrderRow, order_id)
            if row is None:
                raise NotFound("Order", order_id)
            previous = row.status
            if self._db.settings.enforce_forward_transitions and not is_forward_transition(
                previous, label, self.status_labels
            ):
                raise InvalidStatusTransition(
                    f"Order {order_id} cannot move from {previous} to {label}"
                )
            row.status = label
            session.flush()
            updated = _order_from_row(row)
        logger.info(f"Order {order_id} status {previous} -> {label}")
        return updated

    def count(self) -> int:
        with self._db.session() as session:
            return session.scalar(select(func.count()).select_from(OrderRow)) or 0

    def count_by_status(self) -> dict[str, int]:
        """Order counts per status label. Configured labels always appear."""
        counts = {label: 0 for label in self.status_labels}
        stmt = select(OrderRow.status, func.count()).group_by(OrderRow.status)
        with self._db.session() as session:
            for status, n in session.execute(stmt):
                counts[status] = n
        return counts

    def revenue(self, exclude_status: str = OrderStatus.CANCELLED.value) -> float:
        """Sum of order totals, ignoring orders in exclude_status."""
        stmt = select(func.coalesce(func.sum(OrderRow.total_amount), 0)).where(
            OrderRow.status != exclude_status
        )
        with self._db.session() as session:
            return round(float(session.scalar(stmt) or 0), 2)


class NotificationStore:
    """
    Durable per-customer notifications.

    Append-only apart from the read flag, which only ever goes from False to True.
    """

    def __init__(self, db: "DataStore"):
        self._db = db

    def create(self, notification: NewNotification) -> int:
        if not notification.customer_email.strip():
            raise ValidationError("customer_email is required")
        row = NotificationRow(
            customer_email=notification.customer_email,
            title=notification.title,
            message=notification.message,
            type=notification.type or "system",
            is_read=False,
            created_at=_now(),
        )
        with self._db.session() as session:
            session.add(row)
            session.flush()
            notification_id = row.id
        logger.debug(f"Notification {notification_id} ({row.type}) for {notification.customer_email}")
        return notification_id

    def get(self, notification_id: int) -> Notification:
        with self._db.session() as session:
            row = session.get(NotificationRow, notification_id)
            if row is None:
                raise NotFound("Notification", notification_id)
            return _notification_from_row(row)

    def list_by_customer(self, email: str, limit: Optional[int] = None) -> list[Notification]:
        """
        Most recent notifications for a customer.

        Args:
            email: Owning customer
            limit: Maximum number returned; defaults to the configured limit (20)

        Ties on created_at are broken by insertion order, newest insert first.
        """
        if limit is None:
            limit = self._db.settings.notification_limit
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        stmt = (
            select(NotificationRow)
            .where(NotificationRow.customer_email == email)
            .order_by(NotificationRow.created_at.desc(), NotificationRow.id.desc())
            .limit(limit)
        )
        with self._db.session() as session:
            return [_notification_from_row(row) for row in session.scalars(stmt)]

    def acknowledge(self, notification_id: int) -> bool:
        """
        Mark a notification as read.

        Acknowledging an already-read notification succeeds and changes nothing.

        Raises:
            NotFound: Unknown notification id
        """
        with self._db.session() as session:
            row = session.get(NotificationRow, notification_id)
            if row is None:
                raise NotFound("Notification", notification_id)
            if not row.is_read:
                row.is_read = True
        return True

    def unread_count(self, email: str) -> int:
        stmt = (
            select(func.count())
            .select_from(NotificationRow)
            .where(NotificationRow.customer_email == email, NotificationRow.is_read.is_(False))
        )
        with self._db.session() as session:
            return session.scalar(stmt) or 0


class CustomerStore:
    """
    Storage behind the customer directory.

    Holds password hashes but only ever returns them through credentials_for,
    which the directory uses for verification.
    """

    def __init__(self, db: "DataStore"):
        self._db = db

    def add(self, name: str, email: str, password_hash: str) -> int:
        """Raises DuplicateEmail if the email is already registered."""
        try:
            with self._db.session() as session:
                exists = session.scalar(select(CustomerRow.id).where(CustomerRow.email == email))
                if exists is not None:
                    raise DuplicateEmail()
                row = CustomerRow(name=name, email=email, password_hash=password_hash, created_at=_now())
                session.add(row)
                session.flush()
                return row.id
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same email
            raise DuplicateEmail() from e

    def credentials_for(self, email: str) -> Optional[tuple[CustomerIdentity, str]]:
        with self._db.session() as session:
            row = session.scalar(select(CustomerRow).where(CustomerRow.email == email))
            if row is None:
                return None
            return CustomerIdentity(id=row.id, name=row.name, email=row.email), row.password_hash

    def get_by_email(self, email: str) -> Optional[Customer]:
        with self._db.session() as session:
            row = session.scalar(select(CustomerRow).where(CustomerRow.email == email))
            if row is None:
                return None
            return Customer(id=row.id, name=row.name, email=row.email, created_at=row.created_at)

    def list_all(self) -> list[Customer]:
        """All customers, most recently registered first."""
        stmt = select(CustomerRow).order_by(CustomerRow.created_at.desc(), CustomerRow.id.desc())
        with self._db.session() as session:
            return [
                Customer(id=row.id, name=row.name, email=row.email, created_at=row.created_at)
                for row in session.scalars(stmt)
            ]

    def count(self) -> int:
        with self._db.session() as session:
            return session.scalar(select(func.count()).select_from(CustomerRow)) or 0


class MessageStore:
    """Append-only log of contact-form messages."""

    def __init__(self, db: "DataStore"):
        self._db = db

    def create(self, message: NewContactMessage) -> int:
        row = ContactMessageRow(
            name=message.name,
            email=message.email,
            message=message.message,
            created_at=_now(),
        )
        with self._db.session() as session:
            session.add(row)
            session.flush()
            return row.id

    def list_all(self) -> list[ContactMessage]:
        stmt = select(ContactMessageRow).order_by(
            ContactMessageRow.created_at.desc(), ContactMessageRow.id.desc()
        )
        with self._db.session() as session:
            return [
                ContactMessage(
                    id=row.id,
                    name=row.name,
                    email=row.email,
                    message=row.message,
                    created_at=row.created_at,
                )
                for row in session.scalars(stmt)
            ]

    def count(self) -> int:
        with self._db.session() as session:
            return session.scalar(select(func.count()).select_from(ContactMessageRow)) or 0


class Catalog:
    """
    Read-only product listing.

    Products are loaded from a JSON fixture by seed(); nothing in the order
    lifecycle writes here.
    """

    def __init__(self, db: "DataStore"):
        self._db = db

    def list_available(self) -> list[Product]:
        stmt = select(ProductRow).where(ProductRow.is_available.is_(True)).order_by(ProductRow.id)
        with self._db.session() as session:
            return [Product.model_validate(row, from_attributes=True) for row in session.scalars(stmt)]

    def seed(self, products: list[dict]) -> int:
        """
        Insert catalog entries that are not present yet (matched by name).

        Safe to run repeatedly. Returns how many products were added.
        """
        added = 0
        with self._db.session() as session:
            existing = set(session.scalars(select(ProductRow.name)))
            for entry in products:
                if entry["name"] in existing:
                    continue
                session.add(ProductRow(
                    name=entry["name"],
                    price=entry["price"],
                    description=entry.get("description"),
                    category=entry.get("category"),
                    unit=entry.get("unit"),
                    is_available=entry.get("is_available", True),
                ))
                existing.add(entry["name"])
                added += 1
        logger.info(f"Catalog seeded with {added} new products")
        return added

    def seed_from_fixture(self, path: Optional[Path] = None) -> int:
        """Load a JSON fixture file (a list of product objects) into the catalog."""
        filepath = Path(path or self._db.settings.catalog_fixture)
        if not filepath.exists():
            logger.warning(f"Catalog fixture not found: {filepath}")
            return 0
        with open(filepath, "r", encoding="utf-8") as f:
            return self.seed(json.load(f))


# =============================================================================
# DataStore
# =============================================================================

class DataStore:
    """
    Explicitly owned handle on the relational backend.

    Example:
        store = DataStore(Settings(database_url="sqlite:///freshdairy.db"))
        store.migrate()
        order_id = store.orders.create(new_order)
    """

    def __init__(self, settings: Optional[Settings] = None, engine: Optional[Engine] = None):
        """
        Args:
            settings: Configuration; defaults to the environment-derived settings
            engine: Pre-built SQLAlchemy engine; built from settings.database_url if omitted
        """
        self.settings = settings or get_settings()
        self.engine = engine or self._build_engine(self.settings.database_url)
        self._session_factory = sessionmaker(self.engine, expire_on_commit=False)

        self.orders = OrderStore(self)
        self.notifications = NotificationStore(self)
        self.customers = CustomerStore(self)
        self.messages = MessageStore(self)
        self.catalog = Catalog(self)

    @staticmethod
    def _build_engine(url: str) -> Engine:
        if url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, otherwise every session sees an empty database
                kwargs["poolclass"] = StaticPool
            return create_engine(url, **kwargs)
        return create_engine(url, pool_pre_ping=True)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        A session wrapped in its own transaction.

        Commits on success, rolls back on any exception. Connection-level
        failures are logged and re-raised as StorageUnavailable.
        """
        try:
            with self._session_factory.begin() as session:
                yield session
        except (OperationalError, InterfaceError) as e:
            logger.error(f"Storage error: {e}")
            raise StorageUnavailable() from e

    def migrate(self) -> None:
        """Create any missing tables. Idempotent."""
        try:
            Base.metadata.create_all(self.engine)
        except (OperationalError, InterfaceError) as e:
            logger.error(f"Schema bootstrap failed: {e}")
            raise StorageUnavailable() from e
        logger.info("Schema is up to date")

    def dispose(self) -> None:
        """Close pooled connections."""
        self.engine.dispose()
