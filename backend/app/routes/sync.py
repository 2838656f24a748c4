"""Sync routes: snapshot, delta, push and status for the native clients."""

import asyncio

from fastapi import APIRouter, HTTPException, Request, status

from ohabits.logging_config import get_logger
from ohabits.sync import PushReconciler, read_delta, read_snapshot

from ..auth import CurrentOwner
from ..config import get_settings
from ..database import Store, SyncCatalog
from ..models import (
    SyncChangesRequest,
    SyncDataResponse,
    SyncPushRequest,
    SyncPushResponse,
    SyncPushResult,
    SyncStatusResponse,
)
from ..rate_limit import limiter

logger = get_logger("sync.routes")
router = APIRouter(prefix="/api/sync", tags=["sync"])

SYNC_RATE_LIMIT = get_settings().sync_rate_limit


@router.get("/all", response_model=SyncDataResponse)
@limiter.limit(SYNC_RATE_LIMIT)
async def sync_all(
    request: Request,
    owner: CurrentOwner,
    store: Store,
    catalog: SyncCatalog,
):
    """
    Full snapshot of everything the owner holds.

    Use for:
    - Initial setup on a new device
    - Recovery after local data loss

    Every bucket is present and tombstones are included.
    """
    logger.info(f"FULL | {owner}")
    export = await asyncio.to_thread(read_snapshot, catalog, store, owner)
    logger.info(f"FULL COMPLETE | {owner} | {export.record_count} records")
    return SyncDataResponse(data=export.data, last_sync_timestamp=export.cursor)


@router.post("/changes", response_model=SyncDataResponse)
@limiter.limit(SYNC_RATE_LIMIT)
async def sync_changes(
    request: Request,
    owner: CurrentOwner,
    store: Store,
    catalog: SyncCatalog,
    body: SyncChangesRequest | None = None,
):
    """
    Changes after ``since``, which is the last ``lastSyncTimestamp`` the
    client received. A missing ``since`` (or no body at all) returns
    everything.
    """
    since = body.since if body else None
    logger.info(f"PULL | {owner} | since={since}")
    export = await asyncio.to_thread(read_delta, catalog, store, owner, since)
    logger.info(
        f"PULL COMPLETE | {owner} | {export.record_count} records in {len(export.data)} buckets"
    )
    return SyncDataResponse(data=export.data, last_sync_timestamp=export.cursor)


@router.post("/push", response_model=SyncPushResponse)
@limiter.limit(SYNC_RATE_LIMIT)
async def sync_push(
    request: Request,
    body: SyncPushRequest,
    owner: CurrentOwner,
    store: Store,
    catalog: SyncCatalog,
):
    """
    Push local changes.

    Items are applied in order, each on its own. The response carries one
    result per item, in the same order, and a failed item never blocks the
    rest of the batch.
    """
    if not body.items:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No items to sync")

    max_items = get_settings().sync_max_push_items
    if len(body.items) > max_items:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Too many items: {len(body.items)} (max {max_items})",
        )

    logger.info(f"PUSH | {owner} | {len(body.items)} items")
    reconciler = PushReconciler(catalog, store)
    items = [item.to_push_item() for item in body.items]
    results = await asyncio.to_thread(reconciler.push, owner, items)

    failed = sum(1 for r in results if not r.success)
    logger.info(f"PUSH COMPLETE | {owner} | applied={len(results) - failed} failed={failed}")
    return SyncPushResponse(results=[SyncPushResult.from_result(r) for r in results])


@router.get("/status", response_model=SyncStatusResponse)
async def sync_status(owner: CurrentOwner, store: Store):
    """Server clock and the authenticated owner id."""
    return SyncStatusResponse(server_timestamp=store.now(), user_id=owner)
