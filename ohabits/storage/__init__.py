"""ohabits storage.

SQLite-backed relational store for every synced kind, plus the table
descriptors the sync engine registers its kinds against.
"""

from .records import ParentNotFoundError
from .schema import ALLOWED_TABLES, SCHEMA_VERSION, validate_table_name
from .sqlite import SQLiteStore
from .tables import (
    CALENDAR_EVENTS,
    HABIT_COMPLETIONS,
    HABITS,
    MARKDOWN_NOTES,
    MEDICATION_LOGS,
    MEDICATIONS,
    MOOD_RATINGS,
    NOTES,
    TABLES,
    TODOS,
    USER_SETTINGS,
    WORKOUT_LOGS,
    WORKOUTS,
    ParentRef,
    TableSpec,
    get_table,
)

__all__ = [
    # Store
    "SQLiteStore",
    "ParentNotFoundError",
    # Schema
    "ALLOWED_TABLES",
    "SCHEMA_VERSION",
    "validate_table_name",
    # Table descriptors
    "TableSpec",
    "ParentRef",
    "TABLES",
    "get_table",
    "HABITS",
    "HABIT_COMPLETIONS",
    "MEDICATIONS",
    "MEDICATION_LOGS",
    "TODOS",
    "NOTES",
    "MOOD_RATINGS",
    "CALENDAR_EVENTS",
    "WORKOUTS",
    "WORKOUT_LOGS",
    "MARKDOWN_NOTES",
    "USER_SETTINGS",
]
