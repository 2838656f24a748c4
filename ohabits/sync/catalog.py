"""Entity catalog: the registry of synchronizable kinds.

Each entry binds a type tag (as sent in push items) to the bucket name used
in exports, a payload model and a write policy. New kinds are added by
registering another ``SyncKind``; nothing in the readers or the reconciler
branches on a kind's name.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Type, Union

from pydantic import ValidationError

from ..storage import (
    CALENDAR_EVENTS,
    HABIT_COMPLETIONS,
    HABITS,
    MARKDOWN_NOTES,
    MEDICATION_LOGS,
    MEDICATIONS,
    MOOD_RATINGS,
    NOTES,
    TODOS,
    USER_SETTINGS,
    WORKOUT_LOGS,
    WORKOUTS,
    SQLiteStore,
    TableSpec,
)
from ..types import WritePolicy
from .errors import PayloadError, RecordNotFoundError, UnknownKindError
from .payloads import (
    EventPayload,
    HabitCompletionPayload,
    HabitPayload,
    MarkdownNotePayload,
    MedicationLogPayload,
    MedicationPayload,
    MoodPayload,
    NotePayload,
    Payload,
    SettingsPayload,
    TodoPayload,
    WorkoutLogPayload,
    WorkoutPayload,
)
from .policies import IdentityPolicy, NaturalKeyPolicy

logger = logging.getLogger(__name__)

Policy = Union[IdentityPolicy, NaturalKeyPolicy]


def _format_validation_error(exc: ValidationError) -> str:
    """Compact ``field: message`` list from a pydantic error."""
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ())) or "data"
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


class SyncKind:
    """One synchronizable kind.

    Args:
        tag: Type tag used by push items (``habit``, ``mood``, ...).
        bucket: Key of this kind's record list in snapshot/delta exports.
        payload_model: Pydantic model that decodes a push item's data.
        policy: Write strategy bound to the kind's table.
    """

    def __init__(self, tag: str, bucket: str, payload_model: Type[Payload], policy: Policy):
        self.tag = tag
        self.bucket = bucket
        self.payload_model = payload_model
        self.policy = policy

    def __repr__(self) -> str:
        return f"SyncKind({self.tag!r}, bucket={self.bucket!r}, policy={self.write_policy.value})"

    @property
    def table(self) -> TableSpec:
        return self.policy.table

    @property
    def write_policy(self) -> WritePolicy:
        return self.policy.policy

    def decode(self, data: Any) -> Payload:
        """Validate a push item's data into the kind's payload model.

        Raises:
            PayloadError: If the data is missing or malformed.
        """
        if not isinstance(data, dict):
            raise PayloadError(self.tag, "data must be a JSON object")
        try:
            return self.payload_model.model_validate(data)
        except ValidationError as exc:
            raise PayloadError(self.tag, _format_validation_error(exc)) from exc

    def create(self, store: SQLiteStore, owner: str, payload: Payload) -> str:
        return self.policy.create(store, owner, payload)

    def update(self, store: SQLiteStore, owner: str, server_id: str, payload: Payload) -> str:
        if not self.policy.update(store, owner, server_id, payload):
            raise RecordNotFoundError(self.tag, server_id)
        return server_id

    def write(
        self, store: SQLiteStore, owner: str, server_id: Optional[str], payload: Payload
    ) -> str:
        """Apply a non-delete push through the kind's write policy."""
        record_id = self.policy.write(store, owner, server_id, payload)
        if record_id is None:
            raise RecordNotFoundError(self.tag, server_id or "")
        return record_id

    def delete(self, store: SQLiteStore, owner: str, server_id: str) -> str:
        """Tombstone the owner's row and echo its id."""
        if not self.policy.delete(store, owner, server_id):
            raise RecordNotFoundError(self.tag, server_id)
        return server_id

    def list_all(self, store: SQLiteStore, owner: str) -> List[Dict[str, Any]]:
        return self.policy.list_all(store, owner)

    def list_since(self, store: SQLiteStore, owner: str, since: str) -> List[Dict[str, Any]]:
        return self.policy.list_since(store, owner, since)


class Catalog:
    """Registry mapping type tags to kinds, in registration order."""

    def __init__(self):
        self._kinds: Dict[str, SyncKind] = {}

    def register(self, kind: SyncKind) -> SyncKind:
        if kind.tag in self._kinds:
            raise ValueError(f"Kind already registered: {kind.tag}")
        if any(k.bucket == kind.bucket for k in self._kinds.values()):
            raise ValueError(f"Bucket already registered: {kind.bucket}")
        self._kinds[kind.tag] = kind
        logger.debug(f"Registered sync kind {kind!r}")
        return kind

    def get(self, tag: str) -> SyncKind:
        """Look up a kind.

        Raises:
            UnknownKindError: If the tag is not registered.
        """
        try:
            return self._kinds[tag]
        except KeyError:
            raise UnknownKindError(tag) from None

    def __contains__(self, tag: object) -> bool:
        return tag in self._kinds

    def __iter__(self) -> Iterator[SyncKind]:
        return iter(self._kinds.values())

    def __len__(self) -> int:
        return len(self._kinds)

    @property
    def tags(self) -> List[str]:
        return list(self._kinds)

    @property
    def buckets(self) -> List[str]:
        return [kind.bucket for kind in self._kinds.values()]


def default_catalog() -> Catalog:
    """Catalog with every kind the native clients sync."""
    catalog = Catalog()
    catalog.register(SyncKind("habit", "habits", HabitPayload, IdentityPolicy(HABITS)))
    catalog.register(
        SyncKind(
            "habitCompletion",
            "habitCompletions",
            HabitCompletionPayload,
            NaturalKeyPolicy(HABIT_COMPLETIONS),
        )
    )
    catalog.register(
        SyncKind("medication", "medications", MedicationPayload, IdentityPolicy(MEDICATIONS))
    )
    catalog.register(
        SyncKind(
            "medicationLog",
            "medicationLogs",
            MedicationLogPayload,
            NaturalKeyPolicy(MEDICATION_LOGS),
        )
    )
    catalog.register(SyncKind("mood", "moodRatings", MoodPayload, NaturalKeyPolicy(MOOD_RATINGS)))
    catalog.register(SyncKind("note", "dailyNotes", NotePayload, NaturalKeyPolicy(NOTES)))
    catalog.register(SyncKind("todo", "todos", TodoPayload, IdentityPolicy(TODOS)))
    catalog.register(SyncKind("event", "events", EventPayload, IdentityPolicy(CALENDAR_EVENTS)))
    catalog.register(
        SyncKind("workout", "workoutTemplates", WorkoutPayload, IdentityPolicy(WORKOUTS))
    )
    catalog.register(
        SyncKind("workoutLog", "workoutLogs", WorkoutLogPayload, NaturalKeyPolicy(WORKOUT_LOGS))
    )
    catalog.register(
        SyncKind(
            "markdownNote", "markdownNotes", MarkdownNotePayload, IdentityPolicy(MARKDOWN_NOTES)
        )
    )
    catalog.register(
        SyncKind("settings", "userSettings", SettingsPayload, IdentityPolicy(USER_SETTINGS))
    )
    return catalog
