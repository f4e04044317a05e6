"""
Input structs for the order lifecycle operations.

Each operation gets one model that lists every field it recognizes together
with its default. Field names follow the storefront's camelCase JSON; the
snake_case names are accepted too.

Design decisions:
- Required fields have no default, so their absence is a validation error
  instead of a silently substituted empty string
- customerEmail (current storefront) and userEmail (legacy storefront) are two
  spellings of the same field; parse_order_payload picks the matching model
- Extra keys on line items are kept; extra keys on the order are ignored
"""

import math
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from shared.errors import ValidationError, format_validation_errors
from shared.models import LineItem, NotificationType


class OrderLineIn(BaseModel):
    """A line item as submitted by the storefront."""
    name: str
    price: float = Field(default=0, ge=0)
    quantity: int = Field(..., gt=0)

    model_config = ConfigDict(extra="allow")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be empty")
        return v

    def to_line_item(self) -> LineItem:
        return LineItem.model_validate(self.model_dump())


class _OrderFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    items: list[OrderLineIn] = Field(..., min_length=1)
    total_amount: float = Field(..., ge=0, alias="totalAmount")

    @field_validator("total_amount")
    @classmethod
    def _finite_total(cls, v: float) -> float:
        if math.isnan(v) or math.isinf(v):
            raise ValueError("totalAmount must be a finite number")
        return v

    def line_items(self) -> list[LineItem]:
        return [line.to_line_item() for line in self.items]


class PlaceOrderRequest(_OrderFields):
    """Order from the current storefront checkout."""
    customer_email: str = Field(..., alias="customerEmail")
    customer_name: Optional[str] = Field(default=None, alias="customerName")
    delivery_address: Optional[str] = Field(default=None, alias="deliveryAddress")
    mobile: Optional[str] = None
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")

    @field_validator("customer_email")
    @classmethod
    def _email_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("customerEmail must not be empty")
        return v.strip()


class LegacyOrderRequest(_OrderFields):
    """
    Order from the legacy storefront, keyed by userEmail.

    Everything except the email, items and total is optional here.
    """
    user_email: str = Field(..., alias="userEmail")
    customer_name: str = Field(default="", alias="customerName")
    delivery_address: str = Field(default="", alias="deliveryAddress")
    mobile: str = ""
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")

    @field_validator("user_email")
    @classmethod
    def _email_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("userEmail must not be empty")
        return v.strip()


class CreateNotificationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    customer_email: str = Field(..., alias="customerEmail")
    title: str
    message: str
    type: str = NotificationType.SYSTEM.value

    @field_validator("customer_email", "title")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


class StatusUpdateRequest(BaseModel):
    status: str


class ContactMessageRequest(BaseModel):
    name: str
    email: str
    message: str

    @field_validator("name", "email", "message")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


class SignupRequest(BaseModel):
    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


_EMAIL_KEYS = ("customerEmail", "customer_email")
_LEGACY_EMAIL_KEYS = ("userEmail", "user_email")


def validate_model(model: type[BaseModel], payload: Any) -> Any:
    """Validate a payload, reporting failures as the project's ValidationError."""
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(format_validation_errors(e.errors())) from e


def parse_order_payload(payload: Any) -> Union[PlaceOrderRequest, LegacyOrderRequest]:
    """
    Build the right request model from an untyped order body.

    Raises:
        ValidationError: Not an object, no email under either spelling, the two
            spellings disagree, or any field is malformed
    """
    if not isinstance(payload, dict):
        raise ValidationError("Order body must be a JSON object")

    email = next((payload[k] for k in _EMAIL_KEYS if payload.get(k)), None)
    legacy_email = next((payload[k] for k in _LEGACY_EMAIL_KEYS if payload.get(k)), None)

    if email and legacy_email and str(email).strip() != str(legacy_email).strip():
        raise ValidationError("customerEmail and userEmail refer to different customers")
    if email:
        return validate_model(PlaceOrderRequest, payload)
    if legacy_email:
        return validate_model(LegacyOrderRequest, payload)
    raise ValidationError("customerEmail is required")
