"""SQLite-backed store for ohabits.

One connection per operation: each public method is its own transaction,
committed on success and rolled back on any exception. This is what gives
the push reconciler its per-item isolation.
"""

import contextlib
import logging
import sqlite3
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..types import utc_now
from .records import (
    count_records,
    get_record,
    insert_record,
    record_exists,
    select_records,
    soft_delete_record,
    update_record,
    upsert_by_natural_key,
)
from .schema import init_db
from .tables import TableSpec, get_table

logger = logging.getLogger(__name__)

TableRef = Union[str, TableSpec]


class SQLiteStore:
    """Relational store for every synced kind.

    Args:
        db_path: Path to the SQLite database file. Parent directories are
            created on first use.
        now_fn: Returns the current canonical UTC timestamp. Used for every
            ``created_at``/``updated_at`` and for sync cursors, so all
            watermarks come from one clock.
        busy_timeout_ms: How long a writer waits on a locked database.
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        now_fn: Optional[Callable[[], str]] = None,
        busy_timeout_ms: int = 5000,
    ):
        self.db_path = Path(db_path)
        self._now_fn = now_fn or utc_now
        self._busy_timeout_ms = busy_timeout_ms

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        """Open a new connection. Prefer ``_connect()``, which also closes it."""
        conn = sqlite3.connect(str(self.db_path), timeout=self._busy_timeout_ms / 1000)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute(f"PRAGMA busy_timeout={int(self._busy_timeout_ms)}")
        return conn

    @contextlib.contextmanager
    def _connect(self):
        """Context manager that handles transactions AND closes connection.

        - Transaction commit on success
        - Transaction rollback on exception
        - Connection close in all cases
        """
        conn = self._get_conn()
        try:
            yield conn
            conn.commit()
        except Exception as e:
            logger.debug(f"Transaction failed, rolling back: {e}")
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self):
        with self._connect() as conn:
            init_db(conn)

    def close(self):
        """Release resources.

        Connections are opened per operation, so there is nothing to hold
        open; this exists for symmetry with other stores.
        """

    def now(self) -> str:
        """Current timestamp in the canonical storage format."""
        return self._now_fn()

    def ping(self) -> bool:
        """Check the database answers a trivial query."""
        with self._connect() as conn:
            conn.execute("SELECT 1").fetchone()
        return True

    # === Writes ===

    def create(self, table: TableRef, owner: str, values: Mapping[str, Any]) -> str:
        """Create a row and return its new id."""
        spec = get_table(table)
        with self._connect() as conn:
            return insert_record(conn, spec, owner, values, self.now())

    def update(self, table: TableRef, owner: str, record_id: str, values: Mapping[str, Any]) -> bool:
        """Update an owned row. Returns False when it does not exist."""
        spec = get_table(table)
        with self._connect() as conn:
            return update_record(conn, spec, owner, record_id, values, self.now())

    def soft_delete(self, table: TableRef, owner: str, record_id: str) -> bool:
        """Tombstone an owned row. Returns False when it does not exist."""
        spec = get_table(table)
        with self._connect() as conn:
            return soft_delete_record(conn, spec, owner, record_id, self.now())

    def upsert(self, table: TableRef, owner: str, values: Mapping[str, Any]) -> str:
        """Insert or replace by natural key and return the row id.

        Raises:
            ParentNotFoundError: If a referenced parent is not the owner's.
        """
        spec = get_table(table)
        with self._connect() as conn:
            return upsert_by_natural_key(conn, spec, owner, values, self.now())

    # === Reads ===

    def exists(self, table: TableRef, owner: str, record_id: str) -> bool:
        spec = get_table(table)
        with self._connect() as conn:
            return record_exists(conn, spec, owner, record_id)

    def get(self, table: TableRef, owner: str, record_id: str) -> Optional[Dict[str, Any]]:
        spec = get_table(table)
        with self._connect() as conn:
            return get_record(conn, spec, owner, record_id)

    def list_all(self, table: TableRef, owner: str) -> List[Dict[str, Any]]:
        """Every row the owner holds, tombstones included."""
        spec = get_table(table)
        with self._connect() as conn:
            return select_records(conn, spec, owner)

    def list_since(self, table: TableRef, owner: str, since: str) -> List[Dict[str, Any]]:
        """Rows modified strictly after ``since``, tombstones included."""
        spec = get_table(table)
        with self._connect() as conn:
            return select_records(conn, spec, owner, since=since)

    def list_current(self, table: TableRef, owner: str) -> List[Dict[str, Any]]:
        """Live rows only, as the UI sees them."""
        spec = get_table(table)
        with self._connect() as conn:
            return select_records(conn, spec, owner, include_deleted=False)

    def count(self, table: TableRef, owner: str, include_deleted: bool = True) -> int:
        spec = get_table(table)
        with self._connect() as conn:
            return count_records(conn, spec, owner, include_deleted=include_deleted)
