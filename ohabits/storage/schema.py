"""Database schema for the ohabits SQLite store.

Contains:
- Schema DDL (SCHEMA)
- Schema version tracking (SCHEMA_VERSION)
- Table allowlist (ALLOWED_TABLES, validate_table_name)
- Database initialization (init_db)

Every synced table carries the common columns ``id``, ``user_id``,
``is_deleted``, ``created_at`` and ``updated_at``. Natural-key tables carry a
unique index on their key tuple so concurrent upserts collapse to one row.
"""

import logging
import sqlite3

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# Allowed table names for SQL queries (security: prevents SQL injection via table names)
ALLOWED_TABLES = frozenset(
    {
        "schema_version",
        "habits",
        "habit_completions",
        "medications",
        "medication_logs",
        "todos",
        "notes",
        "mood_ratings",
        "calendar_events",
        "workouts",
        "workout_logs",
        "markdown_notes",
        "user_settings",
    }
)


def validate_table_name(table: str) -> str:
    """Validate table name against allowlist to prevent SQL injection.

    Raises:
        ValueError: If table name is not in allowlist
    """
    if table not in ALLOWED_TABLES:
        raise ValueError(f"Invalid table name: {table}")
    return table


SCHEMA = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

-- Habits (identity-addressed)
CREATE TABLE IF NOT EXISTS habits (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    icon TEXT NOT NULL DEFAULT '',
    scheduled_days TEXT NOT NULL DEFAULT '[]',
    is_deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_habits_user_updated ON habits(user_id, updated_at);

-- Habit completions (natural key: owner, habit, date)
CREATE TABLE IF NOT EXISTS habit_completions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    habit_id TEXT NOT NULL,
    completed INTEGER NOT NULL DEFAULT 0,
    date TEXT NOT NULL,
    is_deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS uq_habit_completions_key
    ON habit_completions(user_id, habit_id, date);
CREATE INDEX IF NOT EXISTS idx_habit_completions_user_updated
    ON habit_completions(user_id, updated_at);

-- Medications (identity-addressed)
CREATE TABLE IF NOT EXISTS medications (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    dosage TEXT NOT NULL DEFAULT '',
    scheduled_days TEXT NOT NULL DEFAULT '[]',
    times_per_day INTEGER NOT NULL DEFAULT 1,
    duration_type TEXT NOT NULL DEFAULT 'lifetime',
    start_date TEXT,
    end_date TEXT,
    notes TEXT NOT NULL DEFAULT '',
    is_active INTEGER NOT NULL DEFAULT 1,
    is_deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_medications_user_updated ON medications(user_id, updated_at);

-- Medication logs (natural key: owner, medication, date, dose number)
CREATE TABLE IF NOT EXISTS medication_logs (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    medication_id TEXT NOT NULL,
    taken INTEGER NOT NULL DEFAULT 0,
    dose_number INTEGER NOT NULL DEFAULT 1,
    date TEXT NOT NULL,
    is_deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS uq_medication_logs_key
    ON medication_logs(user_id, medication_id, date, dose_number);
CREATE INDEX IF NOT EXISTS idx_medication_logs_user_updated
    ON medication_logs(user_id, updated_at);

-- Todos (identity-addressed)
CREATE TABLE IF NOT EXISTS todos (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    text TEXT NOT NULL,
    completed INTEGER NOT NULL DEFAULT 0,
    date TEXT NOT NULL,
    is_deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_todos_user_updated ON todos(user_id, updated_at);

-- Daily notes (natural key: owner, date)
CREATE TABLE IF NOT EXISTS notes (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    text TEXT NOT NULL DEFAULT '',
    date TEXT NOT NULL,
    is_deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS uq_notes_key ON notes(user_id, date);
CREATE INDEX IF NOT EXISTS idx_notes_user_updated ON notes(user_id, updated_at);

-- Mood ratings (natural key: owner, date)
CREATE TABLE IF NOT EXISTS mood_ratings (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    rating INTEGER NOT NULL,
    date TEXT NOT NULL,
    is_deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS uq_mood_ratings_key ON mood_ratings(user_id, date);
CREATE INDEX IF NOT EXISTS idx_mood_ratings_user_updated ON mood_ratings(user_id, updated_at);

-- Calendar events (identity-addressed)
CREATE TABLE IF NOT EXISTS calendar_events (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    event_type TEXT NOT NULL DEFAULT 'general',
    event_date TEXT NOT NULL,
    end_date TEXT,
    is_recurring INTEGER NOT NULL DEFAULT 0,
    notes TEXT NOT NULL DEFAULT '',
    is_deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_calendar_events_user_updated
    ON calendar_events(user_id, updated_at);

-- Workout templates (identity-addressed)
CREATE TABLE IF NOT EXISTS workouts (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    day TEXT NOT NULL DEFAULT '',
    exercises TEXT NOT NULL DEFAULT '[]',
    display_order INTEGER NOT NULL DEFAULT 0,
    is_deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_workouts_user_updated ON workouts(user_id, updated_at);

-- Workout logs (natural key: owner, date)
CREATE TABLE IF NOT EXISTS workout_logs (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    workout_name TEXT NOT NULL DEFAULT '',
    completed_exercises TEXT NOT NULL DEFAULT '[]',
    cardio TEXT NOT NULL DEFAULT '[]',
    weight REAL NOT NULL DEFAULT 0,
    date TEXT NOT NULL,
    is_deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS uq_workout_logs_key ON workout_logs(user_id, date);
CREATE INDEX IF NOT EXISTS idx_workout_logs_user_updated ON workout_logs(user_id, updated_at);

-- Long-form posts (identity-addressed)
CREATE TABLE IF NOT EXISTS markdown_notes (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL DEFAULT '',
    content TEXT NOT NULL DEFAULT '',
    is_rtl INTEGER NOT NULL DEFAULT 0,
    is_deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_markdown_notes_user_updated
    ON markdown_notes(user_id, updated_at);

-- User settings (identity-addressed, one row per owner)
CREATE TABLE IF NOT EXISTS user_settings (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    section_configs TEXT NOT NULL DEFAULT '[]',
    is_deleted INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE UNIQUE INDEX IF NOT EXISTS uq_user_settings_owner ON user_settings(user_id);
CREATE INDEX IF NOT EXISTS idx_user_settings_user_updated ON user_settings(user_id, updated_at);
"""


def init_db(conn: sqlite3.Connection) -> None:
    """Initialize the database schema.

    ``CREATE ... IF NOT EXISTS`` makes this safe to run on every start.
    """
    conn.executescript(SCHEMA)

    row = conn.execute("SELECT version FROM schema_version LIMIT 1").fetchone()
    if row is None:
        conn.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
        logger.info(f"Initialized schema version {SCHEMA_VERSION}")
    elif row[0] != SCHEMA_VERSION:
        logger.info(f"Upgrading schema version {row[0]} -> {SCHEMA_VERSION}")
        conn.execute("UPDATE schema_version SET version = ?", (SCHEMA_VERSION,))
