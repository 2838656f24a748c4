"""Store and catalog wiring for the sync backend."""

from typing import Annotated

from fastapi import Depends

from ohabits.storage import SQLiteStore
from ohabits.sync import Catalog, default_catalog

from .config import Settings, get_settings

_store: SQLiteStore | None = None
_catalog: Catalog | None = None


def get_sqlite_store(settings: Settings | None = None) -> SQLiteStore:
    """Get cached SQLite store."""
    global _store
    if _store is None:
        if settings is None:
            settings = get_settings()
        _store = SQLiteStore(settings.database_path)
    return _store


def get_catalog() -> Catalog:
    """Get the cached catalog of synced kinds."""
    global _catalog
    if _catalog is None:
        _catalog = default_catalog()
    return _catalog


def get_store(settings: Annotated[Settings, Depends(get_settings)]) -> SQLiteStore:
    """FastAPI dependency for the store."""
    return get_sqlite_store(settings)


# Type aliases for dependency injection
Store = Annotated[SQLiteStore, Depends(get_store)]
SyncCatalog = Annotated[Catalog, Depends(get_catalog)]
