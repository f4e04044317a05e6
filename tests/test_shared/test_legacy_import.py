"""
Tests for importing orders exported from the legacy document store.
"""

import json
from datetime import datetime

import pytest

from shared.data_store import DataStore
from shared.legacy_import import import_legacy_file, import_legacy_orders


@pytest.fixture
def legacy_documents() -> list[dict]:
    return [
        {
            "_id": {"$oid": "65a1"},
            "userEmail": "a@x.com",
            "items": [{"name": "Milk", "price": 40, "qty": 2}],
            "totalAmount": 80,
            "status": "Delivered",
            "date": {"$date": "2024-01-15T08:30:00Z"},
        },
        {
            "_id": "65a2",
            "userEmail": "b@x.com",
            "items": [{"name": "Curd", "price": 35, "quantity": 1}],
            "totalAmount": 35,
            "status": "Lost in transit",
            "date": 1705312800000,
        },
        {
            "_id": "65a3",
            "items": [{"name": "Ghee", "price": 320, "quantity": 1}],
            "totalAmount": 320,
        },
    ]


class TestImportLegacyOrders:

    def test_imports_with_original_status_and_date(self, data_store: DataStore, legacy_documents):
        report = import_legacy_orders(data_store, legacy_documents)

        legacy_id, order_id = report.imported[0]
        order = data_store.orders.get(order_id)
        assert legacy_id == "65a1"
        assert order.status == "Delivered"
        assert order.created_at == datetime(2024, 1, 15, 8, 30)
        assert order.items[0].quantity == 2
        assert order.payment_method == "Cash on Delivery"

    def test_unknown_status_falls_back_to_default(self, data_store: DataStore, legacy_documents):
        report = import_legacy_orders(data_store, legacy_documents)

        _, order_id = report.imported[1]
        assert data_store.orders.get(order_id).status == "Pending"

    def test_documents_without_email_are_skipped(self, data_store: DataStore, legacy_documents):
        report = import_legacy_orders(data_store, legacy_documents)

        assert report.imported_count == 2
        assert report.skipped == [("65a3", "missing userEmail")]

    def test_import_sends_no_notifications(self, data_store: DataStore, legacy_documents):
        import_legacy_orders(data_store, legacy_documents)

        assert data_store.notifications.list_by_customer("a@x.com") == []

    def test_unreadable_items_are_skipped(self, data_store: DataStore):
        report = import_legacy_orders(data_store, [
            {"_id": "bad", "userEmail": "a@x.com", "items": [{"price": 10}], "totalAmount": 10},
        ])

        assert report.imported_count == 0
        assert report.skipped[0][0] == "bad"


class TestImportLegacyFile:

    def test_json_array(self, data_store: DataStore, legacy_documents, tmp_path):
        path = tmp_path / "orders.json"
        path.write_text(json.dumps(legacy_documents), encoding="utf-8")

        assert import_legacy_file(data_store, path).imported_count == 2

    def test_json_lines(self, data_store: DataStore, legacy_documents, tmp_path):
        path = tmp_path / "orders.jsonl"
        path.write_text("\n".join(json.dumps(d) for d in legacy_documents) + "\n", encoding="utf-8")

        report = import_legacy_file(data_store, path)

        assert report.imported_count == 2
        assert len(data_store.orders.list_by_customer("b@x.com")) == 1


class TestMalformedDocuments:
    """Bad documents are reported without stopping the rest of the import."""

    def _doc(self, email, total: int = 40) -> dict:
        return {"userEmail": email, "items": [{"name": "Milk", "price": 40, "quantity": 1}], "totalAmount": total}

    def test_non_string_email_is_skipped(self, data_store: DataStore):
        report = import_legacy_orders(data_store, [
            self._doc("a@x.com"),
            {**self._doc(12345), "_id": "num"},
            self._doc("c@x.com"),
        ])

        assert report.imported_count == 2
        assert report.skipped == [("num", "missing userEmail")]
        assert len(data_store.orders.list_by_customer("c@x.com")) == 1

    def test_non_object_entries_are_skipped(self, data_store: DataStore):
        report = import_legacy_orders(data_store, [self._doc("a@x.com"), "garbage", None, self._doc("b@x.com")])

        assert report.imported_count == 2
        assert report.skipped == [("#1", "not an order document"), ("#2", "not an order document")]

    def test_non_string_status_falls_back_to_default(self, data_store: DataStore):
        report = import_legacy_orders(data_store, [{**self._doc("a@x.com"), "status": 3}])

        _, order_id = report.imported[0]
        assert data_store.orders.get(order_id).status == "Pending"

    def test_non_string_name_is_skipped(self, data_store: DataStore):
        report = import_legacy_orders(data_store, [{**self._doc("a@x.com"), "_id": "n", "customerName": 7}])

        assert report.imported_count == 0
        assert report.skipped[0][0] == "n"
