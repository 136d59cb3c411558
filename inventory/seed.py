"""
inventory/seed.py -- Sample players and items for a fresh database.

Three demo accounts and a handful of items. Passwords are hashed before they
are stored, same as any other account.

Seeding is idempotent: it only runs against an empty users table, so a
restart never duplicates rows.
"""

import logging

from auth.models import User
from auth.passwords import hash_password
from auth.store import UserStore
from inventory.models import InventoryItem
from inventory.store import InventoryStore

logger = logging.getLogger("gameserver.inventory")

SAMPLE_USERS: list[tuple[str, str]] = [
    ("player1", "password123"),
    ("player2", "password456"),
    ("admin", "admin123"),
]

# (owner username, item_name, item_type, quantity, properties)
SAMPLE_ITEMS: list[tuple[str, str, str, int, dict]] = [
    ("player1", "Iron Sword", "weapon", 1, {"damage": 50, "durability": 100}),
    ("player1", "Health Potion", "consumable", 5, {"healing": 25}),
    ("player1", "Leather Armor", "armor", 1, {"defense": 20, "durability": 80}),
    ("player2", "Magic Staff", "weapon", 1, {"damage": 75, "mana_cost": 10}),
    ("player2", "Mana Potion", "consumable", 3, {"mana_restore": 50}),
    ("admin", "Admin Key", "special", 1, {"access_level": "admin"}),
]


def seed_sample_data(user_store: UserStore, inventory_store: InventoryStore) -> bool:
    """Insert the sample accounts and items if no users exist yet.

    Returns True if data was inserted, False if the database already had users.
    """
    if user_store.has_users():
        logger.info("Users already present -- skipping sample data")
        return False

    user_ids: dict[str, int] = {}
    for username, password in SAMPLE_USERS:
        user_ids[username] = user_store.create_user(User(username=username, hashed_password=hash_password(password)))

    for owner, name, item_type, quantity, properties in SAMPLE_ITEMS:
        inventory_store.add_item(
            InventoryItem(
                user_id=user_ids[owner],
                item_name=name,
                item_type=item_type,
                quantity=quantity,
                properties=properties,
            )
        )

    logger.info("Seeded %d sample users and %d items", len(SAMPLE_USERS), len(SAMPLE_ITEMS))
    return True
