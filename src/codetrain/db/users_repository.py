"""Repository functions for the users table.

Provides insert, lookup, listing and deletion of user accounts.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

import structlog

from codetrain.db.database import Database

logger = structlog.get_logger(__name__)


class DuplicateUserError(Exception):
    """Raised when the username or email is already registered."""


@dataclass
class UserRecord:
    """User record from database."""

    id: int
    username: str
    email: str
    password_hash: str
    created_at: str

    def public_dict(self) -> dict[str, int | str]:
        """Fields safe to return to clients."""
        return {"id": self.id, "username": self.username, "email": self.email}


def insert_user(db: Database, username: str, email: str, password_hash: str) -> UserRecord:
    """Insert a new user record.

    Args:
        db: Database handle
        username: Unique login name
        email: Unique email address
        password_hash: Salted hash of the password

    Returns:
        The created UserRecord

    Raises:
        DuplicateUserError: If username or email already exists
        sqlite3.Error: On any other database failure
    """
    try:
        with db.connect() as conn:
            cursor = conn.execute(
                "INSERT INTO users (username, email, password_hash) VALUES (?, ?, ?)",
                (username, email, password_hash),
            )
            row = conn.execute(
                "SELECT * FROM users WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()
    except sqlite3.IntegrityError as e:
        if "UNIQUE" in str(e):
            raise DuplicateUserError("Username or email already exists") from e
        raise

    logger.debug("users.inserted", user_id=row["id"], username=username)
    return _row_to_record(row)


def get_user_by_username(db: Database, username: str) -> UserRecord | None:
    """Get user by username.

    Returns:
        UserRecord if found, None otherwise
    """
    with db.connect() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE username = ?", (username,)
        ).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def get_user_by_id(db: Database, user_id: int) -> UserRecord | None:
    """Get user by ID."""
    with db.connect() as conn:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()

    if row is None:
        return None

    return _row_to_record(row)


def get_all_users(db: Database) -> list[UserRecord]:
    """Get all users ordered by id."""
    with db.connect() as conn:
        rows = conn.execute("SELECT * FROM users ORDER BY id").fetchall()

    return [_row_to_record(row) for row in rows]


def delete_user(db: Database, username: str) -> bool:
    """Delete a user and, through the foreign key cascade, their progress.

    Returns:
        True if a user was deleted, False if not found
    """
    with db.connect() as conn:
        cursor = conn.execute("DELETE FROM users WHERE username = ?", (username,))
        deleted = cursor.rowcount > 0

    if deleted:
        logger.info("users.deleted", username=username)
    return deleted


def _row_to_record(row: sqlite3.Row) -> UserRecord:
    """Convert database row to UserRecord."""
    return UserRecord(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        created_at=row["created_at"],
    )
