"""
inventory/store.py -- SQLAlchemy-backed persistence for player inventories.

Uses SQLAlchemy Core (not ORM) so the dataclass in inventory/models.py remains
the authoritative domain representation.

Pattern: Repository + Data Mapper. InventoryStore is the repository;
_row_to_item is the mapper. Route handlers never touch SQL directly.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = InventoryStore("sqlite:///gameserver.db")
    store.add_item(InventoryItem(user_id=1, item_name="Iron Sword", item_type="weapon"))
    items = store.list_for_user(1)
    store.close()
"""

import json
import logging
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text
from sqlalchemy.engine import Engine

from auth.store import make_engine
from inventory.models import InventoryItem

logger = logging.getLogger("gameserver.inventory")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

# user_id references users.id. The reference is enforced in code (items are
# only created for users the seeder or caller just looked up), matching the
# way the users table is owned by auth/store.py.
_inventory = Table(
    "inventory",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("item_name", String(100), nullable=False),
    Column("item_type", String(50), nullable=False),
    Column("quantity", Integer, nullable=False, server_default="1"),
    Column("properties", Text),  # JSON object serialized as text
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _decode_properties(raw) -> dict:
    """Return the stored properties as a dict.

    Empty, unparsable and non-object values all become {} so the API always
    returns an object for this field.
    """
    if raw is None or not str(raw).strip():
        return {}
    try:
        value = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring unparsable inventory properties: %.50r", raw)
        return {}
    return value if isinstance(value, dict) else {}


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class InventoryStore:
    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        metadata.create_all(self.engine)

    def add_item(self, item: InventoryItem) -> int:
        """Insert an inventory row and return its ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _inventory.insert().values(
                    user_id=item.user_id,
                    item_name=item.item_name,
                    item_type=item.item_type,
                    quantity=item.quantity,
                    properties=json.dumps(item.properties) if item.properties else None,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def list_for_user(self, user_id: int) -> list[InventoryItem]:
        """Return every item owned by user_id, ordered by item name."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _inventory.select().where(_inventory.c.user_id == user_id).order_by(_inventory.c.item_name)
            ).fetchall()
        return [_row_to_item(r) for r in rows]

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_item(row) -> InventoryItem:
    return InventoryItem(
        id=row.id,
        user_id=row.user_id,
        item_name=row.item_name,
        item_type=row.item_type,
        quantity=row.quantity,
        properties=_decode_properties(row.properties),
        created_at=row.created_at,
    )
