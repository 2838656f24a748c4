"""Snapshot and delta readers.

Both capture the cursor before touching any table, then read every kind in
catalog order. Neither is partial-tolerant: if one kind's read fails, the
whole export fails with ``SyncReadError`` naming that bucket.
"""

import logging
from datetime import datetime
from typing import Optional, Union

from ..storage import SQLiteStore
from ..types import SyncExport
from .catalog import Catalog
from .cursor import capture_cursor, normalize_since
from .errors import SyncReadError

logger = logging.getLogger(__name__)


def read_snapshot(catalog: Catalog, store: SQLiteStore, owner: str) -> SyncExport:
    """Read the owner's complete state.

    Every bucket is present, even when empty, and identity-addressed kinds
    include their tombstones so a fresh install learns about deletions the
    same way a resuming client does.
    """
    export = SyncExport(cursor=capture_cursor(store.now))

    for kind in catalog:
        try:
            export.data[kind.bucket] = kind.list_all(store, owner)
        except Exception as e:
            logger.error(f"Snapshot read of {kind.bucket} failed for {owner}: {e}")
            raise SyncReadError(kind.bucket, e) from e

    logger.debug(f"Snapshot for {owner}: {export.record_count} records, cursor={export.cursor}")
    return export


def read_delta(
    catalog: Catalog,
    store: SQLiteStore,
    owner: str,
    since: Optional[Union[str, datetime]] = None,
) -> SyncExport:
    """Read what changed after ``since``.

    Only rows with ``updated_at`` strictly after ``since`` are returned, and
    buckets with nothing new are left out entirely.
    """
    since_value = normalize_since(since)
    export = SyncExport(cursor=capture_cursor(store.now))

    for kind in catalog:
        try:
            records = kind.list_since(store, owner, since_value)
        except Exception as e:
            logger.error(f"Delta read of {kind.bucket} failed for {owner}: {e}")
            raise SyncReadError(kind.bucket, e) from e
        if records:
            export.data[kind.bucket] = records

    logger.debug(
        f"Delta for {owner} since {since_value}: "
        f"{export.record_count} records in {len(export.data)} buckets"
    )
    return export
