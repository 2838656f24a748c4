"""Pytest configuration and fixtures."""

import os
import secrets
import tempfile
from pathlib import Path

import pytest

# Generate a unique test secret for this test run to prevent token forgery
_TEST_JWT_SECRET = f"test-only-{secrets.token_urlsafe(32)}"
_TEST_DB_DIR = tempfile.mkdtemp(prefix="ohabits-test-")

os.environ.setdefault("JWT_SECRET_KEY", _TEST_JWT_SECRET)
os.environ.setdefault("DATABASE_PATH", str(Path(_TEST_DB_DIR) / "ohabits.db"))

from app.database import get_store  # noqa: E402
from app.main import app  # noqa: E402
from app.rate_limit import limiter  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from ohabits.storage import SQLiteStore  # noqa: E402

TEST_OWNER = "usr_TEST_ONLY_000000"


@pytest.fixture
def store(tmp_path):
    """Fresh store per test."""
    return SQLiteStore(tmp_path / "api.db")


@pytest.fixture
def client(store):
    """Create a test client wired to the per-test store."""
    app.dependency_overrides[get_store] = lambda: store
    limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_auth_headers(owner_id: str) -> dict:
    from app.auth import create_access_token
    from app.config import get_settings

    token = create_access_token(owner_id, get_settings())
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Create auth headers with a test token."""
    # Use clearly invalid test ID that cannot collide with production IDs
    return make_auth_headers(TEST_OWNER)


@pytest.fixture
def other_auth_headers():
    return make_auth_headers("usr_TEST_ONLY_111111")
