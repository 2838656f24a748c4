"""Write policies for synced kinds.

Two strategies sit behind one interface, and each kind picks one at
registration time:

- ``IdentityPolicy``: rows are addressed by server id. A push without an id
  creates, a push with an id updates.
- ``NaturalKeyPolicy``: rows are addressed by a business key such as
  (owner, date). Every push is an insert-or-replace on that key and any
  supplied server id is ignored.

Both soft-delete by server id, so every deletion is visible to sync.
"""

import logging
from typing import Any, Dict, List, Optional

from ..storage import ParentNotFoundError, SQLiteStore, TableSpec
from ..types import WritePolicy
from .errors import RecordNotFoundError
from .payloads import Payload

logger = logging.getLogger(__name__)


class IdentityPolicy:
    """Create-or-update by server id."""

    policy = WritePolicy.IDENTITY

    def __init__(self, table: TableSpec):
        if table.is_natural_key:
            raise ValueError(f"{table.name} is natural-key addressed")
        self.table = table

    def write(
        self, store: SQLiteStore, owner: str, server_id: Optional[str], payload: Payload
    ) -> Optional[str]:
        """Apply a non-delete push. Returns the row id, or None if the
        addressed row does not exist for this owner."""
        if server_id:
            return server_id if self.update(store, owner, server_id, payload) else None
        return self.create(store, owner, payload)

    def create(self, store: SQLiteStore, owner: str, payload: Payload) -> str:
        return store.create(self.table, owner, payload.to_values())

    def update(self, store: SQLiteStore, owner: str, server_id: str, payload: Payload) -> bool:
        return store.update(self.table, owner, server_id, payload.to_values())

    def delete(self, store: SQLiteStore, owner: str, server_id: str) -> bool:
        return store.soft_delete(self.table, owner, server_id)

    def list_all(self, store: SQLiteStore, owner: str) -> List[Dict[str, Any]]:
        return store.list_all(self.table, owner)

    def list_since(self, store: SQLiteStore, owner: str, since: str) -> List[Dict[str, Any]]:
        return store.list_since(self.table, owner, since)


class NaturalKeyPolicy:
    """Insert-or-replace keyed by the table's natural key tuple."""

    policy = WritePolicy.NATURAL_KEY

    def __init__(self, table: TableSpec):
        if not table.is_natural_key:
            raise ValueError(f"{table.name} has no natural key")
        self.table = table

    def write(
        self, store: SQLiteStore, owner: str, server_id: Optional[str], payload: Payload
    ) -> Optional[str]:
        """Upsert on the natural key; ``server_id`` is ignored."""
        return self.upsert(store, owner, payload)

    def upsert(self, store: SQLiteStore, owner: str, payload: Payload) -> str:
        try:
            return store.upsert(self.table, owner, payload.to_values())
        except ParentNotFoundError as e:
            raise RecordNotFoundError(e.column, str(e.record_id)) from e

    # A natural-key row has no separate create/update branch.
    def create(self, store: SQLiteStore, owner: str, payload: Payload) -> str:
        return self.upsert(store, owner, payload)

    def update(self, store: SQLiteStore, owner: str, server_id: str, payload: Payload) -> bool:
        self.upsert(store, owner, payload)
        return True

    def delete(self, store: SQLiteStore, owner: str, server_id: str) -> bool:
        return store.soft_delete(self.table, owner, server_id)

    def list_all(self, store: SQLiteStore, owner: str) -> List[Dict[str, Any]]:
        return store.list_all(self.table, owner)

    def list_since(self, store: SQLiteStore, owner: str, since: str) -> List[Dict[str, Any]]:
        return store.list_since(self.table, owner, since)
