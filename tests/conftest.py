"""
tests/conftest.py -- Shared test fixtures for credcore.

This module provides:
  - TEST_KEY: a 64+ byte signing key for test issuers
  - make_test_store(): isolated named shared-memory SQLite UserStore
  - patch_lifespan(): wires test store + issuer into app.state
  - issuer / store: function-scoped unit-test fixtures
  - api_client: TestClient with a pre-registered user for route tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format shares one in-memory instance across all
connections in the same process.
"""

from __future__ import annotations

import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.accounts import register_account
from auth.store import UserStore
from auth.tokens import TokenIssuer

TEST_KEY = "test-signing-key-" + "0123456789abcdef" * 4  # 81 ASCII bytes

TEST_EMAIL = "testuser@example.com"
TEST_PASSWORD = "testpass123"


def make_test_store(db_suffix: str) -> UserStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    return UserStore(db_url=f"sqlite:///file:test_users_{db_suffix}?mode=memory&cache=shared&uri=true")


def patch_lifespan(user_store: UserStore, issuer: TokenIssuer):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.token_issuer = issuer
        yield

    return test_lifespan


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer.configure(TEST_KEY)


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    s = make_test_store(uuid.uuid4().hex)
    yield s
    s.close()


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, TokenIssuer, str], None, None]:
    """Yield (client, issuer, token) for API integration tests.

    A user TEST_EMAIL / TEST_PASSWORD is registered before the client starts;
    token is a valid bearer token for that user.
    """
    user_store = make_test_store(uuid.uuid4().hex)
    test_issuer = TokenIssuer.configure(TEST_KEY)
    _user, token = register_account(user_store, test_issuer, "Test User", TEST_EMAIL, TEST_PASSWORD)

    app.router.lifespan_context = patch_lifespan(user_store, test_issuer)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, test_issuer, token.encoded

    user_store.close()
