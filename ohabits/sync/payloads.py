"""Payload shapes for push items, one pydantic model per kind.

Decoding a push item's ``data`` through these models is what turns a
malformed payload into a per-item error instead of a bad row. Field names
follow the wire format the native clients already send.
"""

from datetime import date, datetime
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _calendar_date(value: Any) -> Any:
    """Accept ``YYYY-MM-DD`` or a full timestamp and keep only the date.

    Clients serialize calendar dates as midnight timestamps; the calendar
    date they meant is the date part as written, not its UTC conversion.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10 and value[10] in "T ":
        return value[:10]
    return value


def _none_to_empty(value: Any) -> Any:
    return [] if value is None else value


CalendarDate = Annotated[date, BeforeValidator(_calendar_date)]

Weekday = Literal["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class Payload(BaseModel):
    """Base for all kind payloads: unknown fields are ignored.

    Infinity and NaN are rejected; SQLite REAL columns cannot hold them.
    """

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    def to_values(self) -> Dict[str, Any]:
        """Plain JSON-ready values keyed by column name."""
        return self.model_dump(mode="json")


# =============================================================================
# Nested shapes
# =============================================================================


class Exercise(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    order: int = 0
    name: str


class Cardio(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    name: str
    minutes: int = Field(default=0, ge=0)


class SectionConfig(BaseModel):
    """Visibility and order of one home page section."""

    id: str
    is_visible: bool = True
    order: int = 0


# =============================================================================
# Identity-addressed kinds
# =============================================================================


class HabitPayload(Payload):
    name: str = Field(..., min_length=1)
    icon: str = ""
    scheduled_days: Annotated[List[Weekday], BeforeValidator(_none_to_empty)] = []


class MedicationPayload(Payload):
    name: str = Field(..., min_length=1)
    dosage: str = ""
    scheduled_days: Annotated[List[Weekday], BeforeValidator(_none_to_empty)] = []
    times_per_day: int = Field(default=1, ge=1)
    duration_type: Literal["lifetime", "limited"] = "lifetime"
    start_date: Optional[CalendarDate] = None
    end_date: Optional[CalendarDate] = None
    notes: str = ""
    is_active: bool = True


class TodoPayload(Payload):
    text: str = Field(..., min_length=1)
    completed: bool = False
    date: CalendarDate


class EventPayload(Payload):
    title: str = Field(..., min_length=1)
    event_type: Literal["birthday", "travel", "holiday", "anniversary", "general"] = "general"
    event_date: CalendarDate
    end_date: Optional[CalendarDate] = None
    is_recurring: bool = False
    notes: str = ""


class WorkoutPayload(Payload):
    name: str = Field(..., min_length=1)
    day: str = ""
    exercises: Annotated[List[Exercise], BeforeValidator(_none_to_empty)] = []
    display_order: int = 0


class MarkdownNotePayload(Payload):
    title: str = ""
    content: str = ""
    is_rtl: bool = False


class SettingsPayload(Payload):
    section_configs: Annotated[List[SectionConfig], BeforeValidator(_none_to_empty)] = []


# =============================================================================
# Natural-key kinds
# =============================================================================


class HabitCompletionPayload(Payload):
    habit_id: str = Field(..., min_length=1)
    completed: bool = False
    date: CalendarDate


class MedicationLogPayload(Payload):
    medication_id: str = Field(..., min_length=1)
    taken: bool = False
    dose_number: int = Field(default=1, ge=1)
    date: CalendarDate


class NotePayload(Payload):
    text: str = ""
    date: CalendarDate


class MoodPayload(Payload):
    rating: int = Field(..., ge=1, le=5)
    date: CalendarDate


class WorkoutLogPayload(Payload):
    workout_name: str = ""
    completed_exercises: Annotated[List[Exercise], BeforeValidator(_none_to_empty)] = []
    cardio: Annotated[List[Cardio], BeforeValidator(_none_to_empty)] = []
    weight: float = Field(default=0.0, ge=0)
    date: CalendarDate
