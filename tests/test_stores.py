"""Unit tests for auth/store.py, inventory/store.py, inventory/seed.py and
auth/passwords.py.

Covers:
- UserStore create/lookup, duplicate usernames, has_users, ping
- InventoryStore ordering, per-user isolation, properties decoding
- Sample data seeding (contents, hashing, idempotency)
- authenticate_user success and failure paths
"""

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.passwords import authenticate_user, hash_password, verify_password
from auth.store import UserStore
from inventory.models import InventoryItem
from inventory.seed import SAMPLE_ITEMS, SAMPLE_USERS, seed_sample_data
from inventory.store import InventoryStore

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store():
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def inventory_store():
    s = InventoryStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture(scope="module")
def seeded():
    """Seeded stores shared by the slower (bcrypt-heavy) tests in this module."""
    users = UserStore("sqlite:///:memory:")
    items = InventoryStore("sqlite:///:memory:")
    seed_sample_data(users, items)
    yield users, items
    items.close()
    users.close()


def _insert_raw_properties(store: InventoryStore, user_id: int, name: str, raw) -> None:
    with store.engine.connect() as conn:
        conn.execute(
            text(
                "INSERT INTO inventory (user_id, item_name, item_type, quantity, properties, created_at) "
                "VALUES (:user_id, :name, 'misc', 1, :raw, '2024-01-01T00:00:00+00:00')"
            ),
            {"user_id": user_id, "name": name, "raw": raw},
        )
        conn.commit()


# ---------------------------------------------------------------------------
# UserStore
# ---------------------------------------------------------------------------


class TestUserStore:
    def test_create_and_lookup(self, user_store: UserStore) -> None:
        uid = user_store.create_user(User(username="alice", hashed_password="hash"))
        by_name = user_store.get_by_username("alice")
        by_id = user_store.get_by_id(uid)
        assert by_name is not None and by_id is not None
        assert by_name.id == uid
        assert by_id.username == "alice"
        assert by_id.created_at

    def test_lookup_is_case_sensitive(self, user_store: UserStore) -> None:
        user_store.create_user(User(username="alice", hashed_password="hash"))
        assert user_store.get_by_username("ALICE") is None

    def test_unknown_user(self, user_store: UserStore) -> None:
        assert user_store.get_by_username("nobody") is None
        assert user_store.get_by_id(999) is None

    def test_duplicate_username(self, user_store: UserStore) -> None:
        user_store.create_user(User(username="alice", hashed_password="hash"))
        with pytest.raises(IntegrityError):
            user_store.create_user(User(username="alice", hashed_password="other"))

    def test_has_users(self, user_store: UserStore) -> None:
        assert not user_store.has_users()
        user_store.create_user(User(username="alice", hashed_password="hash"))
        assert user_store.has_users()

    def test_ping(self, user_store: UserStore) -> None:
        assert user_store.ping()


# ---------------------------------------------------------------------------
# InventoryStore
# ---------------------------------------------------------------------------


class TestInventoryStore:
    def test_items_ordered_by_name(self, inventory_store: InventoryStore) -> None:
        for name in ["Zweihander", "Apple", "Mace"]:
            inventory_store.add_item(InventoryItem(user_id=1, item_name=name, item_type="weapon"))
        assert [i.item_name for i in inventory_store.list_for_user(1)] == ["Apple", "Mace", "Zweihander"]

    def test_items_scoped_to_owner(self, inventory_store: InventoryStore) -> None:
        inventory_store.add_item(InventoryItem(user_id=1, item_name="Mine", item_type="misc"))
        inventory_store.add_item(InventoryItem(user_id=2, item_name="Theirs", item_type="misc"))
        assert [i.item_name for i in inventory_store.list_for_user(1)] == ["Mine"]
        assert inventory_store.list_for_user(3) == []

    def test_fields_round_trip(self, inventory_store: InventoryStore) -> None:
        item_id = inventory_store.add_item(
            InventoryItem(
                user_id=1,
                item_name="Health Potion",
                item_type="consumable",
                quantity=5,
                properties={"healing": 25},
            )
        )
        (item,) = inventory_store.list_for_user(1)
        assert item.id == item_id
        assert item.quantity == 5
        assert item.properties == {"healing": 25}
        assert item.created_at

    def test_default_quantity_and_empty_properties(self, inventory_store: InventoryStore) -> None:
        inventory_store.add_item(InventoryItem(user_id=1, item_name="Rock", item_type="misc"))
        (item,) = inventory_store.list_for_user(1)
        assert item.quantity == 1
        assert item.properties == {}

    @pytest.mark.parametrize("raw", [None, "", "   ", "{not json", "[1, 2]", '"text"'])
    def test_unusable_properties_become_empty(self, inventory_store: InventoryStore, raw) -> None:
        _insert_raw_properties(inventory_store, 1, "Odd", raw)
        (item,) = inventory_store.list_for_user(1)
        assert item.properties == {}


# ---------------------------------------------------------------------------
# Seeding and authentication
# ---------------------------------------------------------------------------


class TestSeed:
    def test_sample_users_created(self, seeded) -> None:
        users, _ = seeded
        for username, _password in SAMPLE_USERS:
            assert users.get_by_username(username) is not None

    def test_passwords_are_hashed(self, seeded) -> None:
        users, _ = seeded
        for username, password in SAMPLE_USERS:
            stored = users.get_by_username(username)
            assert stored.hashed_password != password
            assert stored.hashed_password.startswith("$2")

    def test_item_counts_per_user(self, seeded) -> None:
        users, items = seeded
        expected = {"player1": 3, "player2": 2, "admin": 1}
        for username, count in expected.items():
            assert len(items.list_for_user(users.get_by_username(username).id)) == count

    def test_player1_inventory(self, seeded) -> None:
        users, items = seeded
        inventory = items.list_for_user(users.get_by_username("player1").id)
        assert [i.item_name for i in inventory] == ["Health Potion", "Iron Sword", "Leather Armor"]
        sword = inventory[1]
        assert sword.item_type == "weapon"
        assert sword.properties == {"damage": 50, "durability": 100}

    def test_total_items(self, seeded) -> None:
        users, items = seeded
        total = sum(len(items.list_for_user(users.get_by_username(u).id)) for u, _ in SAMPLE_USERS)
        assert total == len(SAMPLE_ITEMS)

    def test_seed_is_idempotent(self, seeded) -> None:
        users, items = seeded
        assert seed_sample_data(users, items) is False
        assert len(items.list_for_user(users.get_by_username("player1").id)) == 3


class TestAuthenticate:
    def test_valid_credentials(self, seeded) -> None:
        users, _ = seeded
        user = authenticate_user(users, "player1", "password123")
        assert user is not None
        assert user.username == "player1"

    def test_wrong_password(self, seeded) -> None:
        users, _ = seeded
        assert authenticate_user(users, "player1", "password456") is None

    def test_unknown_user(self, seeded) -> None:
        users, _ = seeded
        assert authenticate_user(users, "ghost", "password123") is None

    def test_malformed_stored_hash(self) -> None:
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_hash_verifies(self) -> None:
        hashed = hash_password("s3cret")
        assert verify_password("s3cret", hashed)
        assert not verify_password("S3cret", hashed)
