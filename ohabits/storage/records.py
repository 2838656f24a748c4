"""Generic record operations for the synced tables.

Every synced table shares the same lifecycle (create, update, soft delete,
natural-key upsert, owner-scoped listing), so the SQL is driven by a
``TableSpec`` instead of being repeated per table.

All functions receive their dependencies explicitly (an open connection and
the current timestamp) so the caller owns the transaction boundary. Every
statement is scoped by ``user_id``; a row owned by someone else behaves
exactly like a missing row.
"""

import json
import logging
import sqlite3
import uuid
from typing import Any, Dict, List, Mapping, Optional

from .schema import validate_table_name
from .tables import TableSpec

logger = logging.getLogger(__name__)


class ParentNotFoundError(ValueError):
    """A natural-key row references a parent the owner does not hold."""

    def __init__(self, column: str, record_id: Optional[str]):
        super().__init__(f"{column} {record_id} not found")
        self.column = column
        self.record_id = record_id


# =============================================================================
# Row Codecs
# =============================================================================


def encode_values(table: TableSpec, values: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert payload values to column values for ``table``.

    Unknown keys are dropped; JSON columns are serialized and booleans stored
    as 0/1.
    """
    encoded: Dict[str, Any] = {}
    for column in table.columns:
        if column not in values:
            continue
        value = values[column]
        if column in table.json_columns:
            value = json.dumps(value if value is not None else [])
        elif column in table.bool_columns:
            value = 1 if value else 0
        encoded[column] = value
    return encoded


def row_to_record(table: TableSpec, row: sqlite3.Row) -> Dict[str, Any]:
    """Convert a database row to the JSON shape exported by sync."""
    record: Dict[str, Any] = {"id": row["id"], "user_id": row["user_id"]}
    for column in table.columns:
        value = row[column]
        if column in table.json_columns:
            try:
                value = json.loads(value) if value else []
            except json.JSONDecodeError:
                logger.warning(f"Corrupt JSON in {table.name}.{column} for {row['id']}")
                value = []
        elif column in table.bool_columns:
            value = bool(value)
        record[column] = value
    record["is_deleted"] = bool(row["is_deleted"])
    record["created_at"] = row["created_at"]
    record["updated_at"] = row["updated_at"]
    return record


# =============================================================================
# Writes
# =============================================================================


def insert_record(
    conn: sqlite3.Connection,
    table: TableSpec,
    owner: str,
    values: Mapping[str, Any],
    now: str,
) -> str:
    """Insert a new row and return its id.

    For ``owner_unique`` tables an existing row for the owner is updated (and
    revived) instead, and its id is returned.
    """
    encoded = encode_values(table, values)
    record_id = str(uuid.uuid4())
    columns = ["id", "user_id", *encoded.keys(), "is_deleted", "created_at", "updated_at"]
    params = [record_id, owner, *encoded.values(), 0, now, now]
    placeholders = ", ".join("?" * len(columns))
    sql = f"INSERT INTO {table.name} ({', '.join(columns)}) VALUES ({placeholders})"

    if table.owner_unique:
        assignments = [f"{c} = excluded.{c}" for c in encoded]
        assignments += ["is_deleted = 0", "updated_at = excluded.updated_at"]
        sql += f" ON CONFLICT(user_id) DO UPDATE SET {', '.join(assignments)}"
        conn.execute(sql, params)
        row = conn.execute(
            f"SELECT id FROM {table.name} WHERE user_id = ?", (owner,)
        ).fetchone()
        return row["id"]

    conn.execute(sql, params)
    return record_id


def update_record(
    conn: sqlite3.Connection,
    table: TableSpec,
    owner: str,
    record_id: str,
    values: Mapping[str, Any],
    now: str,
) -> bool:
    """Update an owned row in place. Returns False if no such row exists."""
    encoded = encode_values(table, values)
    assignments = [f"{c} = ?" for c in encoded] + ["updated_at = ?"]
    cursor = conn.execute(
        f"UPDATE {table.name} SET {', '.join(assignments)} WHERE id = ? AND user_id = ?",
        [*encoded.values(), now, record_id, owner],
    )
    return cursor.rowcount > 0


def soft_delete_record(
    conn: sqlite3.Connection,
    table: TableSpec,
    owner: str,
    record_id: str,
    now: str,
) -> bool:
    """Tombstone an owned row. Returns False if no such row exists.

    The row stays in place so snapshot and delta exports carry the deletion
    to other devices.
    """
    cursor = conn.execute(
        f"UPDATE {table.name} SET is_deleted = 1, updated_at = ? WHERE id = ? AND user_id = ?",
        (now, record_id, owner),
    )
    return cursor.rowcount > 0


def upsert_by_natural_key(
    conn: sqlite3.Connection,
    table: TableSpec,
    owner: str,
    values: Mapping[str, Any],
    now: str,
) -> str:
    """Insert or replace the row addressed by the table's natural key.

    The existing row keeps its id and ``created_at``; everything outside the
    key is replaced and a tombstoned row is revived. Returns the row's id.

    For tables with a parent reference, the parent must be held by the same
    owner; the check runs on ``conn`` so it shares the upsert's transaction.

    Raises:
        ParentNotFoundError: If the referenced parent is missing or foreign.
    """
    if not table.is_natural_key:
        raise ValueError(f"{table.name} has no natural key")

    encoded = encode_values(table, values)
    missing = [c for c in table.natural_key if encoded.get(c) is None]
    if missing:
        raise ValueError(f"Missing natural key fields: {', '.join(missing)}")

    parent = table.parent
    if parent is not None:
        parent_id = encoded.get(parent.column)
        owned = conn.execute(
            f"SELECT 1 FROM {validate_table_name(parent.table)} WHERE id = ? AND user_id = ?",
            (parent_id, owner),
        ).fetchone()
        if owned is None:
            raise ParentNotFoundError(parent.column, parent_id)

    columns = ["id", "user_id", *encoded.keys(), "is_deleted", "created_at", "updated_at"]
    params = [str(uuid.uuid4()), owner, *encoded.values(), 0, now, now]
    conflict_target = ", ".join(["user_id", *table.natural_key])
    assignments = [f"{c} = excluded.{c}" for c in encoded if c not in table.natural_key]
    assignments += ["is_deleted = 0", "updated_at = excluded.updated_at"]

    conn.execute(
        f"""INSERT INTO {table.name} ({', '.join(columns)})
            VALUES ({', '.join('?' * len(columns))})
            ON CONFLICT({conflict_target}) DO UPDATE SET {', '.join(assignments)}""",
        params,
    )

    key_filter = " AND ".join(f"{c} = ?" for c in table.natural_key)
    row = conn.execute(
        f"SELECT id FROM {table.name} WHERE user_id = ? AND {key_filter}",
        [owner, *(encoded[c] for c in table.natural_key)],
    ).fetchone()
    return row["id"]


# =============================================================================
# Reads
# =============================================================================


def record_exists(
    conn: sqlite3.Connection,
    table: TableSpec,
    owner: str,
    record_id: str,
) -> bool:
    """Check whether the owner holds a row with this id (tombstones included)."""
    row = conn.execute(
        f"SELECT 1 FROM {table.name} WHERE id = ? AND user_id = ?",
        (record_id, owner),
    ).fetchone()
    return row is not None


def get_record(
    conn: sqlite3.Connection,
    table: TableSpec,
    owner: str,
    record_id: str,
) -> Optional[Dict[str, Any]]:
    """Get one owned row by id, or None."""
    row = conn.execute(
        f"SELECT * FROM {table.name} WHERE id = ? AND user_id = ?",
        (record_id, owner),
    ).fetchone()
    return row_to_record(table, row) if row else None


def select_records(
    conn: sqlite3.Connection,
    table: TableSpec,
    owner: str,
    since: Optional[str] = None,
    include_deleted: bool = True,
) -> List[Dict[str, Any]]:
    """List an owner's rows.

    Args:
        since: Only rows with ``updated_at`` strictly greater than this
            canonical timestamp.
        include_deleted: Include tombstones. Sync exports always do;
            "current state" reads do not.
    """
    query = f"SELECT * FROM {table.name} WHERE user_id = ?"
    params: List[Any] = [owner]

    if since is not None:
        query += " AND updated_at > ?"
        params.append(since)

    if not include_deleted:
        query += " AND is_deleted = 0"

    query += f" ORDER BY {table.order_by}"

    rows = conn.execute(query, params).fetchall()
    return [row_to_record(table, row) for row in rows]


def count_records(
    conn: sqlite3.Connection,
    table: TableSpec,
    owner: str,
    include_deleted: bool = True,
) -> int:
    """Count an owner's rows."""
    query = f"SELECT COUNT(*) FROM {table.name} WHERE user_id = ?"
    if not include_deleted:
        query += " AND is_deleted = 0"
    return conn.execute(query, (owner,)).fetchone()[0]
