"""
Runtime configuration.

Settings are read from the environment (prefix FRESHDAIRY_) and an optional
.env file. Tests and embedders build a Settings instance directly and pass it
to the store and services, so nothing here is read at import time except by
get_settings().
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ORDER_STATUSES = ["Pending", "Confirmed", "Shipped", "Delivered", "Cancelled"]
DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]
DEFAULT_CATALOG_FIXTURE = Path(__file__).parent.parent / "data" / "products.json"


def _parse_list(v: Optional[Union[str, List[str]]], default: List[str]) -> List[str]:
    """
    Accept JSON array (e.g. '["Pending","Shipped"]') or
    comma-separated string ('Pending,Shipped').
    """
    if v is None:
        return list(default)
    if isinstance(v, list):
        return [str(x).strip() for x in v if str(x).strip()]
    s = v.strip()
    if not s:
        return list(default)
    try:
        parsed = json.loads(s)
    except ValueError:
        parsed = None
    if isinstance(parsed, list) and all(isinstance(x, str) for x in parsed):
        return [x.strip() for x in parsed if x.strip()]
    return [p.strip() for p in s.split(",") if p.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FRESHDAIRY_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # --- Storage ---
    database_url: str = "sqlite:///freshdairy.db"
    catalog_fixture: Path = DEFAULT_CATALOG_FIXTURE

    # --- Order lifecycle ---
    order_statuses: Union[List[str], str] = Field(default_factory=lambda: list(DEFAULT_ORDER_STATUSES))
    default_status: str = "Pending"
    default_payment_method: str = "Cash on Delivery"
    enforce_forward_transitions: bool = False
    notify_on_status_change: bool = True

    # --- Admin read model ---
    display_id_prefix: str = "FD"
    display_id_width: int = Field(default=6, ge=1)

    # --- Notifications ---
    notification_limit: int = Field(default=20, ge=1)
    toast_duration: float = Field(default=4.0, ge=0)

    # --- API ---
    api_host: str = "127.0.0.1"
    api_port: int = 5000
    cors_origins: Union[List[str], str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"

    @field_validator("order_statuses")
    @classmethod
    def _split_statuses(cls, v):
        labels = _parse_list(v, DEFAULT_ORDER_STATUSES)
        if not labels:
            raise ValueError("order_statuses must name at least one status")
        return labels

    @field_validator("cors_origins")
    @classmethod
    def _split_origins(cls, v):
        return _parse_list(v, DEFAULT_CORS_ORIGINS)

    @property
    def status_labels(self) -> List[str]:
        """The configured status label set, default status first if present."""
        labels = list(self.order_statuses)
        if self.default_status not in labels:
            labels.insert(0, self.default_status)
        return labels


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings read from the environment."""
    return Settings()
