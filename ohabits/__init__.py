"""
ohabits - Offline-first sync engine for the ohabits life tracker.

Snapshot, delta and batched push reconciliation over a shared store.
"""

from .sync import PushReconciler, default_catalog, read_delta, read_snapshot

try:
    from importlib.metadata import version

    __version__ = version("ohabits-sync")
except Exception:
    __version__ = "0.0.0"

__all__ = ["PushReconciler", "default_catalog", "read_delta", "read_snapshot"]
