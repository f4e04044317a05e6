"""
Where the client-side notification center pulls notifications from.

StoreFeed reads the Notification Store in-process (tests, CLI, server-side
rendering). HttpNotificationFeed talks to the API with httpx, which is what a
storefront running elsewhere uses.
"""

import logging
from typing import Optional, Protocol

import httpx

from shared.data_store import NotificationStore
from shared.errors import NotFound, StorageUnavailable, ValidationError
from shared.models import Notification

logger = logging.getLogger("notification_feed")


class NotificationFeed(Protocol):
    """Anything the notification center can poll and acknowledge through."""

    def list_notifications(self, email: str, limit: Optional[int] = None) -> list[Notification]:
        ...

    def acknowledge(self, notification_id: int) -> bool:
        ...


class StoreFeed:
    """Feed backed directly by a NotificationStore."""

    def __init__(self, store: NotificationStore):
        self.store = store

    def list_notifications(self, email: str, limit: Optional[int] = None) -> list[Notification]:
        return self.store.list_by_customer(email, limit=limit)

    def acknowledge(self, notification_id: int) -> bool:
        return self.store.acknowledge(notification_id)


class HttpNotificationFeed:
    """
    Feed backed by the HTTP API.

    Args:
        base_url: Root of the API, e.g. "http://localhost:5000"
        client: Pre-built httpx.Client (a FastAPI TestClient works too)
        timeout: Per-request timeout in seconds when no client is given
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        client: Optional[httpx.Client] = None,
        timeout: float = 5.0,
    ):
        self.client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            logger.error(f"Notification API unreachable: {e}")
            raise StorageUnavailable() from e

        if response.status_code == 404:
            raise NotFound("Notification", url.rsplit("/", 2)[-2] if url.endswith("/read") else url)
        if response.status_code == 400:
            raise ValidationError(response.json().get("message"))
        if response.status_code >= 500:
            logger.error(f"Notification API returned {response.status_code} for {method} {url}")
            raise StorageUnavailable()
        response.raise_for_status()
        return response

    def list_notifications(self, email: str, limit: Optional[int] = None) -> list[Notification]:
        params = {"email": email}
        if limit is not None:
            params["limit"] = limit
        response = self._request("GET", "/api/notifications", params=params)
        return [Notification.model_validate(entry) for entry in response.json()]

    def acknowledge(self, notification_id: int) -> bool:
        response = self._request("POST", f"/api/notifications/{notification_id}/read")
        return bool(response.json().get("success"))

    def close(self) -> None:
        self.client.close()
