"""Push reconciler: applies a client's batch of offline edits.

Items are applied one at a time, in the order received, each in its own
store transaction. Every item yields exactly one result and no item's
failure touches any other item. Writes are last-write-wins by arrival; the
client's ``updated_at`` is logged but never compared.
"""

import logging
from typing import Iterable, List, Optional

from ..logging_config import log_sync_operation
from ..storage import SQLiteStore
from ..types import PushItem, PushResult
from .catalog import Catalog

logger = logging.getLogger(__name__)

# Returned to the client in place of internal storage errors.
GENERIC_STORAGE_ERROR = "Database error: operation failed"


class PushReconciler:
    """Route push items to their kind's write policy.

    Args:
        catalog: Registry of kinds the server accepts.
        store: Shared relational store.
    """

    def __init__(self, catalog: Catalog, store: SQLiteStore):
        self.catalog = catalog
        self.store = store

    def push(
        self, owner: str, items: Iterable[PushItem], log_prefix: Optional[str] = None
    ) -> List[PushResult]:
        """Apply a batch and return one result per item."""
        prefix = log_prefix or owner
        results = []
        for item in items:
            results.append(self.apply(owner, item, prefix))

        failed = sum(1 for r in results if not r.success)
        logger.debug(f"PUSH APPLIED | {prefix} | items={len(results)} failed={failed}")
        return results

    def apply(self, owner: str, item: PushItem, log_prefix: Optional[str] = None) -> PushResult:
        """Apply a single item. Never raises for item-level problems."""
        prefix = log_prefix or owner
        operation = "delete" if item.is_deleted else ("update" if item.server_id else "create")

        try:
            server_id = self._apply(owner, item)
        except ValueError as e:
            log_sync_operation(prefix, operation, item.type, item.server_id, False, str(e))
            return PushResult(local_id=item.local_id, success=False, error=str(e))
        except Exception as e:
            # Full detail stays server-side
            logger.error(
                f"Database error during {operation} on {item.type}/{item.server_id} "
                f"(local {item.local_id}): {e}"
            )
            log_sync_operation(prefix, operation, item.type, item.server_id, False, str(e))
            return PushResult(local_id=item.local_id, success=False, error=GENERIC_STORAGE_ERROR)

        log_sync_operation(prefix, operation, item.type, server_id, True)
        return PushResult(local_id=item.local_id, success=True, server_id=server_id)

    def _apply(self, owner: str, item: PushItem) -> Optional[str]:
        kind = self.catalog.get(item.type)

        if item.updated_at is not None:
            logger.debug(f"{item.type}/{item.local_id} client updated_at={item.updated_at}")

        if item.is_deleted:
            if not item.server_id:
                # Created and deleted while offline: nothing exists server-side
                return None
            return kind.delete(self.store, owner, item.server_id)

        payload = kind.decode(item.data)
        return kind.write(self.store, owner, item.server_id, payload)
