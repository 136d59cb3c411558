"""
tests/conftest.py -- Shared test fixtures for the game server test suite.

This module provides:
  - test_secret: the signing secret the test app is wired with
  - _make_test_stores(): isolated shared-memory SQLite stores
  - _patch_lifespan(): wires test stores and token service into app.state
  - api_client: (TestClient, TokenService) against seeded sample data

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.
UserStore and InventoryStore open the same named URI so they share one
in-memory database, exactly as they share one file in production.

DEBUG must be set before any app import so get_settings() auto-generates
SECRET_KEY instead of raising ValueError. The login rate limit is raised so
the suite never trips it.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set env before any core/api import -- Settings are read at import time.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.store import UserStore
from auth.tokens import TokenService
from inventory.seed import seed_sample_data
from inventory.store import InventoryStore

TEST_SECRET = "test-signing-secret-0123456789abcdef"


@pytest.fixture(scope="session")
def test_secret() -> str:
    return TEST_SECRET


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, InventoryStore]:
    """Create user + inventory stores on one named shared-memory database.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    url = f"sqlite:///file:test_gameserver_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(url), InventoryStore(url)


def _patch_lifespan(user_store: UserStore, inventory_store: InventoryStore, tokens: TokenService):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.inventory_store = inventory_store
        app.state.token_service = tokens
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Module-scoped fixtures -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, TokenService], None, None]:
    """Yield (client, tokens) backed by a freshly seeded database.

    Sample accounts: player1/password123, player2/password456, admin/admin123.
    base_url uses localhost so TrustedHostMiddleware accepts the requests.
    """
    user_store, inventory_store = _make_test_stores(request.module.__name__.rsplit(".", 1)[-1])
    seed_sample_data(user_store, inventory_store)
    tokens = TokenService(TEST_SECRET)

    app.router.lifespan_context = _patch_lifespan(user_store, inventory_store, tokens)

    with TestClient(app, base_url="http://localhost", raise_server_exceptions=True) as client:
        yield client, tokens

    inventory_store.close()
    user_store.close()
