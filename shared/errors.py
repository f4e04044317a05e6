"""
Error taxonomy for the order lifecycle.

Every error carries the HTTP-equivalent status code and a message that is safe
to show to the caller. The API layer translates these into responses; the
services and stores only raise them.
"""

from typing import Optional


class FreshDairyError(Exception):
    """Base class for all errors surfaced to callers."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(FreshDairyError):
    """Missing or malformed required fields. Never retried."""

    status_code = 400
    default_message = "Invalid request"


class InvalidStatusTransition(ValidationError):
    """Raised only when forward-only transitions are switched on."""

    default_message = "Status transition not allowed"


class DuplicateEmail(FreshDairyError):
    status_code = 409
    default_message = "Email already exists"


class InvalidCredentials(FreshDairyError):
    """
    Login failed.

    The message is the same whether the email or the password was wrong.
    """

    status_code = 401
    default_message = "Invalid Credentials"

    def __init__(self):
        super().__init__(self.default_message)


class NotFound(FreshDairyError):
    status_code = 404
    default_message = "No such resource"

    def __init__(self, resource: str, identifier: object):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class StorageUnavailable(FreshDairyError):
    """
    The underlying store cannot be reached.

    The public message is fixed; connection details go to the log only.
    """

    status_code = 503
    default_message = "Storage unavailable"

    def __init__(self):
        super().__init__(self.default_message)


def format_validation_errors(errors: list[dict]) -> str:
    """
    Turn pydantic's error list into one readable line.

    e.g. "items.0.quantity: Input should be greater than 0; totalAmount: Field required"
    """
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"
