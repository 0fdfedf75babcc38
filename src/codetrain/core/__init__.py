"""Core business logic.

Modules:
- auth: credential validation and password hashing
- catalog: read-only learning module catalog
"""

__all__ = [
    "auth",
    "catalog",
]
