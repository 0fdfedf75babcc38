"""Database module for SQLite persistence.

Provides:
- Database handle with connection management and schema initialization
- Repository functions for users, modules and user_progress tables
"""

from codetrain.db.database import Database

__all__ = ["Database"]
