"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and routes do
the work. The token identity type lives with the token service in
auth/tokens.py because it is never persisted.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A player account that can log in and own inventory items.

    hashed_password is a bcrypt hash; the plaintext is never stored.
    id is None before the record is written to the database.
    """

    username: str
    hashed_password: str
    id: int | None = None
    created_at: str | None = None
