"""
Shared pytest fixtures for the FreshDairy tests.

Every test gets its own SQLite database under tmp_path, so tests never see
each other's orders or notifications.
"""

import pytest
from pathlib import Path
from fastapi.testclient import TestClient

from shared.config import Settings
from shared.customer_directory import CustomerDirectory
from shared.data_store import DataStore
from ordering.service import OrderService
from admin.read_model import AdminReadModelBuilder
from api.main import create_app


@pytest.fixture
def data_dir() -> Path:
    """Path to the fixture data directory."""
    return Path(__file__).parent.parent / "data"


@pytest.fixture
def settings(tmp_path: Path, data_dir: Path) -> Settings:
    """Settings pointing at a throwaway database."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'freshdairy.db'}",
        catalog_fixture=data_dir / "products.json",
    )


@pytest.fixture
def data_store(settings: Settings) -> DataStore:
    """
    Fresh, migrated DataStore for each test.
    """
    store = DataStore(settings)
    store.migrate()
    yield store
    store.dispose()


@pytest.fixture
def order_service(data_store: DataStore) -> OrderService:
    return OrderService(data_store)


@pytest.fixture
def admin(data_store: DataStore, order_service: OrderService) -> AdminReadModelBuilder:
    return AdminReadModelBuilder(data_store, order_service)


@pytest.fixture
def directory(data_store: DataStore) -> CustomerDirectory:
    """Customer directory with the cheapest bcrypt cost, to keep tests fast."""
    return CustomerDirectory(data_store, rounds=4)


@pytest.fixture
def api_client(data_store: DataStore):
    """Test client running the full app (lifespan included) on the test store."""
    app = create_app(data_store=data_store)
    with TestClient(app) as client:
        app.state.directory = CustomerDirectory(data_store, rounds=4)
        yield client


# =============================================================================
# Order Fixtures
# =============================================================================

@pytest.fixture
def customer_email() -> str:
    return "a@x.com"


@pytest.fixture
def order_payload(customer_email: str) -> dict:
    """
    The checkout body from the storefront: two litres of milk.
    """
    return {
        "customerEmail": customer_email,
        "customerName": "Asha",
        "items": [{"name": "Milk", "price": 40, "quantity": 2}],
        "totalAmount": 80,
        "deliveryAddress": "12 Dairy Lane",
        "mobile": "9876543210",
    }


@pytest.fixture
def legacy_order_payload(customer_email: str) -> dict:
    """Same order as sent by the legacy storefront."""
    return {
        "userEmail": customer_email,
        "items": [{"name": "Milk", "price": 40, "quantity": 2}],
        "totalAmount": 80,
    }


@pytest.fixture
def place_order(order_service: OrderService, order_payload: dict):
    """Factory placing an order; keyword arguments override payload fields."""
    def _place(**overrides) -> int:
        payload = {**order_payload, **overrides}
        return order_service.place_order_from_payload(payload).order_id
    return _place
