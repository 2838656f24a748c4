"""ohabits sync engine.

- Entity catalog: which kinds exist and how each is written
- Snapshot / delta readers: full and incremental exports
- Push reconciler: batched, per-item tolerant application of client edits
"""

from .catalog import Catalog, SyncKind, default_catalog
from .cursor import EPOCH_CURSOR, capture_cursor, normalize_since
from .errors import (
    PayloadError,
    RecordNotFoundError,
    SyncItemError,
    SyncReadError,
    UnknownKindError,
)
from .policies import IdentityPolicy, NaturalKeyPolicy
from .readers import read_delta, read_snapshot
from .reconciler import GENERIC_STORAGE_ERROR, PushReconciler

__all__ = [
    # Catalog
    "Catalog",
    "SyncKind",
    "default_catalog",
    "IdentityPolicy",
    "NaturalKeyPolicy",
    # Cursor
    "EPOCH_CURSOR",
    "capture_cursor",
    "normalize_since",
    # Readers
    "read_snapshot",
    "read_delta",
    # Push
    "PushReconciler",
    "GENERIC_STORAGE_ERROR",
    # Errors
    "SyncItemError",
    "UnknownKindError",
    "PayloadError",
    "RecordNotFoundError",
    "SyncReadError",
]
