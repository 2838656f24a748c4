"""Table descriptors for the synced tables.

A ``TableSpec`` tells the generic record functions which columns a table
has beyond the common ones, which of them hold JSON or booleans, and how the
table is keyed. Column names here are trusted constants; they are never
built from client input.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

from .schema import validate_table_name

# Columns every synced table carries.
COMMON_COLUMNS = ("id", "user_id", "is_deleted", "created_at", "updated_at")


@dataclass(frozen=True)
class ParentRef:
    """A column that must reference a row the same owner holds."""

    column: str
    table: str


@dataclass(frozen=True)
class TableSpec:
    """Shape of one synced table."""

    name: str
    columns: Tuple[str, ...]  # kind-specific columns, in insert order
    json_columns: FrozenSet[str] = frozenset()
    bool_columns: FrozenSet[str] = frozenset()
    natural_key: Tuple[str, ...] = ()  # excludes user_id
    owner_unique: bool = False  # at most one row per owner
    order_by: str = "created_at"
    parent: Optional[ParentRef] = None

    def __post_init__(self):
        validate_table_name(self.name)
        for key_column in self.natural_key:
            if key_column not in self.columns:
                raise ValueError(f"{self.name}: natural key column {key_column} not in columns")

    @property
    def is_natural_key(self) -> bool:
        return bool(self.natural_key)

    @property
    def value_columns(self) -> Tuple[str, ...]:
        """Columns that an upsert replaces (everything outside the key)."""
        return tuple(c for c in self.columns if c not in self.natural_key)


HABITS = TableSpec(
    name="habits",
    columns=("name", "icon", "scheduled_days"),
    json_columns=frozenset({"scheduled_days"}),
)

HABIT_COMPLETIONS = TableSpec(
    name="habit_completions",
    columns=("habit_id", "completed", "date"),
    bool_columns=frozenset({"completed"}),
    natural_key=("habit_id", "date"),
    order_by="date DESC",
    parent=ParentRef(column="habit_id", table="habits"),
)

MEDICATIONS = TableSpec(
    name="medications",
    columns=(
        "name",
        "dosage",
        "scheduled_days",
        "times_per_day",
        "duration_type",
        "start_date",
        "end_date",
        "notes",
        "is_active",
    ),
    json_columns=frozenset({"scheduled_days"}),
    bool_columns=frozenset({"is_active"}),
)

MEDICATION_LOGS = TableSpec(
    name="medication_logs",
    columns=("medication_id", "taken", "dose_number", "date"),
    bool_columns=frozenset({"taken"}),
    natural_key=("medication_id", "date", "dose_number"),
    order_by="date DESC",
    parent=ParentRef(column="medication_id", table="medications"),
)

TODOS = TableSpec(
    name="todos",
    columns=("text", "completed", "date"),
    bool_columns=frozenset({"completed"}),
    order_by="date DESC, created_at ASC",
)

NOTES = TableSpec(
    name="notes",
    columns=("text", "date"),
    natural_key=("date",),
    order_by="date DESC",
)

MOOD_RATINGS = TableSpec(
    name="mood_ratings",
    columns=("rating", "date"),
    natural_key=("date",),
    order_by="date DESC",
)

CALENDAR_EVENTS = TableSpec(
    name="calendar_events",
    columns=("title", "event_type", "event_date", "end_date", "is_recurring", "notes"),
    bool_columns=frozenset({"is_recurring"}),
    order_by="event_date",
)

WORKOUTS = TableSpec(
    name="workouts",
    columns=("name", "day", "exercises", "display_order"),
    json_columns=frozenset({"exercises"}),
    order_by="display_order, created_at",
)

WORKOUT_LOGS = TableSpec(
    name="workout_logs",
    columns=("workout_name", "completed_exercises", "cardio", "weight", "date"),
    json_columns=frozenset({"completed_exercises", "cardio"}),
    natural_key=("date",),
    order_by="date DESC",
)

MARKDOWN_NOTES = TableSpec(
    name="markdown_notes",
    columns=("title", "content", "is_rtl"),
    bool_columns=frozenset({"is_rtl"}),
    order_by="updated_at DESC",
)

USER_SETTINGS = TableSpec(
    name="user_settings",
    columns=("section_configs",),
    json_columns=frozenset({"section_configs"}),
    owner_unique=True,
)

TABLES: Dict[str, TableSpec] = {
    spec.name: spec
    for spec in (
        HABITS,
        HABIT_COMPLETIONS,
        MEDICATIONS,
        MEDICATION_LOGS,
        TODOS,
        NOTES,
        MOOD_RATINGS,
        CALENDAR_EVENTS,
        WORKOUTS,
        WORKOUT_LOGS,
        MARKDOWN_NOTES,
        USER_SETTINGS,
    )
}


def get_table(table) -> TableSpec:
    """Resolve a table name or pass a TableSpec through."""
    if isinstance(table, TableSpec):
        return table
    try:
        return TABLES[validate_table_name(table)]
    except KeyError:
        raise ValueError(f"Not a synced table: {table}") from None
