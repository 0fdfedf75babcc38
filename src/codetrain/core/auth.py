"""Credential validation and password hashing."""

from __future__ import annotations

import re

from werkzeug.security import check_password_hash, generate_password_hash

MIN_PASSWORD_LENGTH = 6

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")

# Unknown usernames are verified against this hash
DUMMY_PASSWORD_HASH = generate_password_hash("codetrain-unknown-user")


class RegistrationError(ValueError):
    """Raised when registration fields fail validation."""


def validate_email(email: str) -> bool:
    """Validate email format."""
    return bool(EMAIL_PATTERN.match(email))


def validate_registration(username: str, email: str, password: str) -> None:
    """Check registration fields.

    Raises:
        RegistrationError: With a message suitable for the client
    """
    if not username or not email or not password:
        raise RegistrationError("All fields are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise RegistrationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    if not validate_email(email):
        raise RegistrationError("Invalid email format")


def hash_password(password: str) -> str:
    """Return a salted hash for storage."""
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)
