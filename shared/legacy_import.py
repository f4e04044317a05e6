"""
One-way import of orders from the legacy document store.

The old backend kept orders as documents shaped like
    {"_id": ..., "userEmail": ..., "items": [...], "totalAmount": ..., "status": ..., "date": ...}
This module turns such documents (typically a JSON export) into rows in the
relational Order Store. It is a migration path, not a second write target:
nothing writes to the document store anymore.

Imported orders keep their original status and date. No notifications are
emitted for them.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from shared.data_store import DataStore
from shared.errors import ValidationError
from shared.models import LineItem, NewOrder

logger = logging.getLogger("legacy_import")


@dataclass
class ImportReport:
    """Outcome of an import run."""
    imported: list[tuple[str, int]] = field(default_factory=list)  # (legacy id, new order id)
    skipped: list[tuple[str, str]] = field(default_factory=list)   # (legacy id, reason)

    @property
    def imported_count(self) -> int:
        return len(self.imported)


def _legacy_id(document: dict[str, Any], position: int) -> str:
    raw = document.get("_id")
    if isinstance(raw, dict):
        raw = raw.get("$oid")
    return str(raw) if raw is not None else f"#{position}"


def _parse_date(value: Any) -> Optional[datetime]:
    """Accept ISO strings, epoch milliseconds, or extended-JSON {"$date": ...}."""
    if isinstance(value, dict):
        value = value.get("$date")
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(tzinfo=None)
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _email(document: dict[str, Any]) -> str:
    """The customer email, or "" when it is absent or not a string."""
    for key in ("userEmail", "customerEmail"):
        value = document.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _line_item(entry: dict[str, Any]) -> LineItem:
    data = dict(entry)
    if "quantity" not in data:
        data["quantity"] = data.pop("qty", 1)
    data.setdefault("price", 0)
    return LineItem.model_validate(data)


def import_legacy_orders(store: DataStore, documents: list[dict[str, Any]]) -> ImportReport:
    """
    Create one order per legacy document.

    Non-object entries, documents without a string email and documents with
    unreadable items are skipped and reported. An unknown status label falls
    back to the default status.
    """
    report = ImportReport()
    settings = store.settings

    for position, document in enumerate(documents):
        if not isinstance(document, dict):
            report.skipped.append((f"#{position}", "not an order document"))
            continue

        legacy_id = _legacy_id(document, position)
        email = _email(document)
        if not email:
            report.skipped.append((legacy_id, "missing userEmail"))
            continue

        try:
            items = [_line_item(entry) for entry in document.get("items") or []]
            order = NewOrder(
                customer_email=email,
                customer_name=document.get("customerName") or "",
                items=items,
                total_amount=float(document.get("totalAmount") or 0),
                delivery_address=document.get("deliveryAddress") or "",
                mobile=document.get("mobile") or "",
                payment_method=document.get("paymentMethod") or settings.default_payment_method,
            )
            created_at = _parse_date(document.get("date"))
        except (PydanticValidationError, TypeError, ValueError) as e:
            report.skipped.append((legacy_id, f"unreadable document: {e}"))
            continue

        status = document.get("status")
        try:
            if status is not None and not isinstance(status, str):
                raise ValidationError(f"status must be a string, got {status!r}")
            status = store.orders.normalize_status(status) if status else None
        except ValidationError:
            logger.warning(f"Legacy order {legacy_id}: unknown status {status!r}, using default")
            status = None

        order_id = store.orders.create(order, status=status, created_at=created_at)
        report.imported.append((legacy_id, order_id))

    logger.info(f"Legacy import: {report.imported_count} imported, {len(report.skipped)} skipped")
    return report


def import_legacy_file(store: DataStore, path: Path) -> ImportReport:
    """Import a JSON export (a list of order documents, or one per line)."""
    text = Path(path).read_text(encoding="utf-8").strip()
    if text.startswith("["):
        documents = json.loads(text)
    else:
        documents = [json.loads(line) for line in text.splitlines() if line.strip()]
    return import_legacy_orders(store, documents)
