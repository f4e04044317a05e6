"""
Tests for the HTTP API.

These tests run the FastAPI app against the per-test SQLite store.
"""

from shared.data_store import DataStore
from shared.models import NewNotification


class TestHealthEndpoint:

    def test_health_check(self, api_client):
        response = api_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestOrderEndpoints:
    """Tests for placing and reading orders."""

    def test_place_order(self, api_client, order_payload, data_store: DataStore):
        response = api_client.post("/api/orders", json=order_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Order placed successfully!"
        assert data_store.orders.get(body["orderId"]).status == "Pending"

    def test_place_legacy_order(self, api_client, legacy_order_payload, data_store: DataStore):
        response = api_client.post("/api/orders", json=legacy_order_payload)

        assert response.status_code == 201
        order = data_store.orders.get(response.json()["orderId"])
        assert order.customer_email == "a@x.com"

    def test_place_order_then_notification_visible(self, api_client, order_payload):
        order_id = api_client.post("/api/orders", json=order_payload).json()["orderId"]

        notifications = api_client.get("/api/notifications", params={"email": "a@x.com"}).json()

        assert len(notifications) == 1
        assert notifications[0]["type"] == "order"
        assert f"#{order_id}" in notifications[0]["message"]

    def test_missing_email_is_400(self, api_client, order_payload, data_store: DataStore):
        del order_payload["customerEmail"]

        response = api_client.post("/api/orders", json=order_payload)

        assert response.status_code == 400
        assert response.json()["message"] == "customerEmail is required"
        assert data_store.orders.count() == 0

    def test_malformed_json_is_400(self, api_client):
        response = api_client.post(
            "/api/orders", content="{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400

    def test_zero_quantity_is_400(self, api_client, order_payload):
        order_payload["items"][0]["quantity"] = 0

        assert api_client.post("/api/orders", json=order_payload).status_code == 400

    def test_list_orders_for_customer(self, api_client, place_order):
        first = place_order()
        second = place_order()
        place_order(customerEmail="b@x.com")

        response = api_client.get("/api/orders", params={"email": "a@x.com"})

        assert [o["id"] for o in response.json()] == [second, first]

    def test_get_order(self, api_client, place_order):
        order_id = place_order()

        response = api_client.get(f"/api/orders/{order_id}")

        assert response.status_code == 200
        assert response.json()["items"] == [{"name": "Milk", "price": 40.0, "quantity": 2}]

    def test_get_unknown_order(self, api_client):
        response = api_client.get("/api/orders/999")

        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"

    def test_order_statuses(self, api_client):
        assert api_client.get("/api/order-statuses").json() == [
            "Pending", "Confirmed", "Shipped", "Delivered", "Cancelled",
        ]


class TestNotificationEndpoints:

    def test_create_notification(self, api_client, data_store: DataStore):
        response = api_client.post("/api/notifications", json={
            "customerEmail": "a@x.com",
            "title": "Welcome",
            "message": "Fresh milk every morning",
        })

        assert response.status_code == 201
        assert response.json()["success"] is True
        assert data_store.notifications.get(response.json()["id"]).type == "system"

    def test_create_notification_missing_title(self, api_client):
        response = api_client.post("/api/notifications", json={"customerEmail": "a@x.com", "message": "x"})

        assert response.status_code == 400
        assert "title" in response.json()["message"]

    def test_list_respects_limit(self, api_client):
        for i in range(3):
            api_client.post("/api/notifications", json={
                "customerEmail": "a@x.com", "title": f"n{i}", "message": "body",
            })

        response = api_client.get("/api/notifications", params={"email": "a@x.com", "limit": 2})

        assert [n["title"] for n in response.json()] == ["n2", "n1"]

    def test_limit_is_capped_at_configured_maximum(self, api_client, data_store: DataStore):
        for i in range(25):
            data_store.notifications.create(NewNotification(
                customer_email="a@x.com", title=f"n{i}", message="body",
            ))

        response = api_client.get("/api/notifications", params={"email": "a@x.com", "limit": 10000})

        assert len(response.json()) == 20
        assert response.json()[0]["title"] == "n24"

    def test_zero_limit_is_400(self, api_client):
        response = api_client.get("/api/notifications", params={"email": "a@x.com", "limit": 0})

        assert response.status_code == 400

    def test_acknowledge_twice(self, api_client):
        notification_id = api_client.post("/api/notifications", json={
            "customerEmail": "a@x.com", "title": "Hi", "message": "there",
        }).json()["id"]

        first = api_client.post(f"/api/notifications/{notification_id}/read")
        second = api_client.post(f"/api/notifications/{notification_id}/read")

        assert first.json() == second.json() == {"success": True}

    def test_acknowledge_unknown(self, api_client):
        assert api_client.post("/api/notifications/999/read").status_code == 404


class TestAccountEndpoints:

    def test_signup_and_login(self, api_client):
        signup = api_client.post("/api/signup", json={"name": "Asha", "email": "a@x.com", "password": "secret"})

        assert signup.status_code == 201
        assert signup.json()["message"] == "User Created"
        user = signup.json()["user"]
        assert user["email"] == "a@x.com"
        assert "password" not in user

        login = api_client.post("/api/login", json={"email": "a@x.com", "password": "secret"})
        assert login.status_code == 200
        assert login.json()["id"] == user["id"]

    def test_duplicate_signup_is_409(self, api_client):
        body = {"name": "Asha", "email": "a@x.com", "password": "secret"}
        api_client.post("/api/signup", json=body)

        response = api_client.post("/api/signup", json=body)

        assert response.status_code == 409

    def test_bad_login_is_401(self, api_client):
        api_client.post("/api/signup", json={"name": "Asha", "email": "a@x.com", "password": "secret"})

        wrong = api_client.post("/api/login", json={"email": "a@x.com", "password": "nope"})
        unknown = api_client.post("/api/login", json={"email": "z@x.com", "password": "secret"})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json()["message"] == unknown.json()["message"] == "Invalid Credentials"

    def test_contact_message(self, api_client):
        response = api_client.post("/api/contact", json={
            "name": "Asha", "email": "a@x.com", "message": "Please deliver before 7",
        })

        assert response.json() == {"success": True}
        messages = api_client.get("/api/admin/messages").json()
        assert messages[0]["message"] == "Please deliver before 7"

    def test_products(self, api_client, data_store: DataStore):
        data_store.catalog.seed_from_fixture()

        products = api_client.get("/api/products").json()

        assert len(products) == 7
        assert all(p["is_available"] for p in products)


class TestAdminEndpoints:

    def test_admin_order_list_has_display_ids(self, api_client, place_order):
        order_id = place_order()

        orders = api_client.get("/api/admin/orders").json()

        assert orders[0]["display_id"] == f"FD{order_id:06d}"

    def test_set_status(self, api_client, place_order, data_store: DataStore):
        order_id = place_order()

        response = api_client.put(f"/api/admin/orders/{order_id}", json={"status": "Delivered"})

        assert response.status_code == 200
        assert response.json()["status"] == "Delivered"
        assert data_store.notifications.list_by_customer("a@x.com")[0].title == "Order Delivered"

    def test_set_status_by_display_id_is_400(self, api_client, place_order):
        order_id = place_order()

        response = api_client.put(f"/api/admin/orders/FD{order_id:06d}", json={"status": "Shipped"})

        assert response.status_code == 400

    def test_set_unknown_status_is_400(self, api_client, place_order):
        order_id = place_order()

        response = api_client.put(f"/api/admin/orders/{order_id}", json={"status": "Teleported"})

        assert response.status_code == 400

    def test_set_status_unknown_order_is_404(self, api_client):
        response = api_client.put("/api/admin/orders/999", json={"status": "Shipped"})

        assert response.status_code == 404

    def test_customers_have_no_password_hash(self, api_client):
        api_client.post("/api/signup", json={"name": "Asha", "email": "a@x.com", "password": "secret"})

        customers = api_client.get("/api/admin/customers").json()

        assert customers[0]["email"] == "a@x.com"
        assert "password_hash" not in customers[0]

    def test_stats(self, api_client, place_order):
        place_order()
        place_order(totalAmount=20)

        stats = api_client.get("/api/admin/stats").json()

        assert stats["total_orders"] == 2
        assert stats["pending_orders"] == 2
        assert stats["total_revenue"] == 100
