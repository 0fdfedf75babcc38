"""Repository functions for the user_progress table."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any

import structlog

from codetrain.db.database import Database

logger = structlog.get_logger(__name__)


@dataclass
class ProgressRecord:
    """Progress of one user on one module, joined with the module title."""

    module_id: int
    title: str
    completed: bool
    score: int | float | None
    time_spent: int | float | None
    last_accessed: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "module_id": self.module_id,
            "title": self.title,
            "completed": self.completed,
            "score": self.score,
            "time_spent": self.time_spent,
            "last_accessed": self.last_accessed,
        }


def upsert_progress(
    db: Database,
    user_id: int,
    module_id: int,
    completed: bool,
    score: float | None,
    time_spent: float | None,
) -> None:
    """Insert or replace the progress row for (user_id, module_id).

    Last write wins: a second save for the same pair overwrites every
    column of the existing row.
    """
    with db.connect() as conn:
        conn.execute(
            """
            INSERT INTO user_progress (
                user_id, module_id, completed, score, time_spent, last_accessed
            ) VALUES (?, ?, ?, ?, ?, datetime('now'))
            ON CONFLICT (user_id, module_id) DO UPDATE SET
                completed = excluded.completed,
                score = excluded.score,
                time_spent = excluded.time_spent,
                last_accessed = excluded.last_accessed
            """,
            (user_id, module_id, int(completed), score, time_spent),
        )

    logger.debug("progress.upserted", user_id=user_id, module_id=module_id)


def get_progress_for_user(db: Database, user_id: int) -> list[ProgressRecord]:
    """Get all progress rows for a user, ordered like the catalog."""
    with db.connect() as conn:
        rows = conn.execute(
            """
            SELECT up.module_id, m.title, up.completed, up.score,
                   up.time_spent, up.last_accessed
            FROM user_progress up
            JOIN modules m ON m.id = up.module_id
            WHERE up.user_id = ?
            ORDER BY m.order_index, up.module_id
            """,
            (user_id,),
        ).fetchall()

    return [_row_to_record(row) for row in rows]


def _row_to_record(row: sqlite3.Row) -> ProgressRecord:
    """Convert database row to ProgressRecord."""
    return ProgressRecord(
        module_id=row["module_id"],
        title=row["title"],
        completed=bool(row["completed"]),
        score=row["score"],
        time_spent=row["time_spent"],
        last_accessed=row["last_accessed"],
    )
