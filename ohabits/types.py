"""
Shared sync types for ohabits.

These are the vocabulary between the HTTP layer, the sync engine and the
store: push items and their results, export envelopes, write policies and
the timestamp helpers every layer agrees on.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

# === Shared Utility Functions ===

# Storage timestamps always carry microseconds so string order == time order.
TIMESTAMP_SPEC = "microseconds"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as the canonical UTC storage string.

    Naive datetimes are assumed to already be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec=TIMESTAMP_SPEC)


def utc_now() -> str:
    """Get current timestamp as canonical ISO string in UTC."""
    return format_timestamp(datetime.now(timezone.utc))


class ParseDatetimeError(ValueError):
    """Structured parse failure for ISO datetime strings."""

    def __init__(self, value: str, cause: Exception):
        super().__init__(f"Invalid ISO datetime string: {value!r}")
        self.value = value
        self.cause = cause


def parse_datetime(s: Optional[str]) -> Optional[datetime]:
    """Parse an ISO datetime string, accepting a trailing ``Z``.

    Raises:
        ParseDatetimeError: If the string is not a valid ISO timestamp.
    """
    if not s:
        return None
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00"))
    except (TypeError, ValueError) as exc:
        raise ParseDatetimeError(s, exc) from exc


# === Enums ===


class WritePolicy(str, Enum):
    """How a kind is addressed when a client pushes it."""

    IDENTITY = "identity"  # server id; create vs update
    NATURAL_KEY = "natural_key"  # business key; always insert-or-replace


# === Sync Types ===


@dataclass
class PushItem:
    """One client-originated change inside a push batch."""

    local_id: str
    type: str
    server_id: Optional[str] = None
    is_deleted: bool = False
    updated_at: Optional[datetime] = None  # client clock, informational only
    data: Any = None


@dataclass
class PushResult:
    """Outcome of a single push item."""

    local_id: str
    success: bool
    server_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "local_id": self.local_id,
            "server_id": self.server_id,
            "success": self.success,
        }
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class SyncExport:
    """Buckets of records keyed by kind bucket name, plus the cursor."""

    cursor: str
    data: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)

    @property
    def record_count(self) -> int:
        return sum(len(records) for records in self.data.values())
