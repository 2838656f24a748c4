"""
Pytest fixtures and test configuration for ohabits sync tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from ohabits.storage import SQLiteStore
from ohabits.sync import PushReconciler, default_catalog
from ohabits.types import PushItem, format_timestamp

OWNER = "usr_test_owner_0001"
OTHER_OWNER = "usr_test_owner_0002"


class TickingClock:
    """Deterministic clock: every reading is one second after the last."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> str:
        value = format_timestamp(self.current)
        self.current += timedelta(seconds=1)
        return value


@pytest.fixture
def temp_db_path(tmp_path):
    """Path to a fresh SQLite database file."""
    return tmp_path / "ohabits.db"


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def store(temp_db_path, clock):
    """SQLite store on a temp database with a ticking clock."""
    s = SQLiteStore(temp_db_path, now_fn=clock)
    yield s
    s.close()


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def reconciler(catalog, store):
    return PushReconciler(catalog, store)


@pytest.fixture
def owner():
    return OWNER


@pytest.fixture
def other_owner():
    return OTHER_OWNER


def item(local_id, type, data=None, server_id=None, is_deleted=False, updated_at=None):
    """Shorthand for building a PushItem in tests."""
    return PushItem(
        local_id=local_id,
        type=type,
        server_id=server_id,
        is_deleted=is_deleted,
        updated_at=updated_at,
        data=data,
    )


@pytest.fixture
def make_item():
    return item
