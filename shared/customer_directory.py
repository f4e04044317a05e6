"""
Customer directory: registration and login by email.

Passwords are bcrypt-hashed before they reach the store and are never logged.
Verification always performs one bcrypt comparison, even for unknown emails,
so a failed login takes the same time and returns the same error either way.
"""

import logging

import bcrypt

from shared.data_store import DataStore
from shared.errors import InvalidCredentials, ValidationError
from shared.models import CustomerIdentity

logger = logging.getLogger("customer_directory")

# Compared against when the email is unknown
_DUMMY_HASH = bcrypt.hashpw(b"freshdairy-placeholder", bcrypt.gensalt()).decode()


class CustomerDirectory:

    def __init__(self, data_store: DataStore, rounds: int = 12):
        self.data_store = data_store
        self.rounds = rounds

    def register(self, name: str, email: str, password: str) -> int:
        """
        Register a customer and return the new id.

        Raises:
            ValidationError: Missing name, email or password
            DuplicateEmail: Email already registered (existing record untouched)
        """
        name, email = (name or "").strip(), (email or "").strip()
        if not name or not email or not password:
            raise ValidationError("All fields are required")

        password_hash = bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()
        customer_id = self.data_store.customers.add(name, email, password_hash)
        logger.info(f"Customer {customer_id} registered: {email}")
        return customer_id

    def verify(self, email: str, password: str) -> CustomerIdentity:
        """
        Check credentials.

        Raises:
            InvalidCredentials: Unknown email or wrong password (indistinguishable)
        """
        record = self.data_store.customers.credentials_for((email or "").strip())
        stored_hash = record[1] if record else _DUMMY_HASH
        matches = bcrypt.checkpw((password or "").encode(), stored_hash.encode())
        if record is None or not matches:
            logger.info("Login failed")
            raise InvalidCredentials()
        return record[0]
