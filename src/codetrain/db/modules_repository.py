"""Repository functions for the modules table.

The table mirrors the in-memory catalog so progress rows can be joined
with module titles. The catalog stays the source of truth.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from codetrain.db.database import Database

if TYPE_CHECKING:
    from codetrain.core.catalog import Module

logger = structlog.get_logger(__name__)


def sync_modules(db: Database, modules: list[Module]) -> int:
    """Insert or update one row per catalog module.

    Rows for modules no longer in the catalog are kept, since progress
    rows may still reference them.

    Returns:
        Number of modules synced
    """
    with db.connect() as conn:
        conn.executemany(
            """
            INSERT INTO modules (id, title, description, difficulty, estimated_time, order_index)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT (id) DO UPDATE SET
                title = excluded.title,
                description = excluded.description,
                difficulty = excluded.difficulty,
                estimated_time = excluded.estimated_time,
                order_index = excluded.order_index
            """,
            [
                (m.id, m.title, m.description, m.difficulty, m.estimated_time, m.order_index)
                for m in modules
            ],
        )

    logger.info("modules.synced", count=len(modules))
    return len(modules)
