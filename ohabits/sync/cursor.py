"""Sync cursor handling.

A cursor is one wall-clock timestamp in the canonical storage format. The
server hands it out with every snapshot or delta and takes it back as the
next delta's ``since``. Rows are included when ``updated_at > since``; a
write landing on exactly the cursor instant is not special-cased.
"""

from datetime import datetime
from typing import Callable, Optional, Union

from ..types import EPOCH, format_timestamp, parse_datetime

EPOCH_CURSOR = format_timestamp(EPOCH)


def capture_cursor(now_fn: Callable[[], str]) -> str:
    """Take a cursor from the store clock.

    Call this before reading any bucket so that every write committed before
    the read started sorts at or below the returned value.
    """
    return now_fn()


def normalize_since(value: Optional[Union[str, datetime]]) -> str:
    """Turn a client-supplied ``since`` into the canonical comparison string.

    ``None`` means "from the beginning". Naive datetimes are treated as UTC
    and offsets are converted, so a cursor passed back verbatim compares
    equal to the one issued.

    Raises:
        ValueError: If a string value is not an ISO timestamp.
    """
    if value is None or value == "":
        return EPOCH_CURSOR
    if isinstance(value, str):
        value = parse_datetime(value)
    return format_timestamp(value)
