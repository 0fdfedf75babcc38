"""SQLite database connection and schema management.

Provides connection management and schema initialization for CodeTrain.
A single Database handle is created at startup and shared by all requests;
every operation opens its own short-lived connection.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("database/students.db")


class Database:
    """Handle to the SQLite database file."""

    def __init__(self, db_path: Path | None = None, busy_timeout: float = 5.0):
        self.path = Path(db_path or DEFAULT_DB_PATH)
        self.busy_timeout = busy_timeout

    def init(self) -> None:
        """Initialize database with schema.

        Creates the database file and all required tables if they don't exist.

        Raises:
            sqlite3.Error: If the database file cannot be opened
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        with self.connect() as conn:
            _create_schema(conn)

        logger.info("database_initialized", path=str(self.path))

    def exists(self) -> bool:
        return self.path.exists()

    @contextmanager
    def connect(self) -> Generator[sqlite3.Connection, None, None]:
        """Get database connection as context manager.

        Yields:
            SQLite connection with row factory set to sqlite3.Row

        Example:
            with db.connect() as conn:
                rows = conn.execute("SELECT * FROM users").fetchall()
        """
        conn = sqlite3.connect(self.path, timeout=self.busy_timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")

        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def list_tables(self) -> list[str]:
        """Return the names of user tables."""
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT name FROM sqlite_master "
                "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
            ).fetchall()
        return [row["name"] for row in rows]

    def table_definitions(self) -> list[str]:
        """Return CREATE statements for tables and indexes."""
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT sql FROM sqlite_master "
                "WHERE sql IS NOT NULL AND name NOT LIKE 'sqlite_%' ORDER BY type DESC, name"
            ).fetchall()
        return [row["sql"] for row in rows]


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT UNIQUE NOT NULL,
            email TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        -- Mirror of the module catalog, synced at startup
        CREATE TABLE IF NOT EXISTS modules (
            id INTEGER PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            difficulty TEXT,
            estimated_time TEXT,
            order_index INTEGER NOT NULL DEFAULT 0
        );

        -- One row per (user, module); saves overwrite
        CREATE TABLE IF NOT EXISTS user_progress (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            module_id INTEGER NOT NULL REFERENCES modules(id),
            completed INTEGER NOT NULL DEFAULT 0,
            score INTEGER,
            time_spent INTEGER,
            last_accessed TEXT NOT NULL DEFAULT (datetime('now')),
            UNIQUE (user_id, module_id)
        );

        CREATE INDEX IF NOT EXISTS idx_progress_user ON user_progress(user_id);
        """
    )
