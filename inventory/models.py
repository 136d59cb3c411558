"""
inventory/models.py -- Domain dataclasses for player inventories.

Pure data containers. Persistence and JSON handling live in inventory/store.py.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class InventoryItem:
    """One stack of items owned by a user.

    properties is free-form item metadata (damage, durability, ...). It is
    stored as JSON text and is always a dict once read back -- unparsable or
    empty values come back as {}.

    id is None before the record is written to the database.
    """

    user_id: int
    item_name: str
    item_type: str  # "weapon" | "armor" | "consumable" | "special" | ...
    quantity: int = 1
    properties: dict = field(default_factory=dict)
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
