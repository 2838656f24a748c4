"""Sync engine errors.

Per-item errors subclass ``ValueError``: the push reconciler reports their
message inline for that item and moves on. ``SyncReadError`` is
request-level and aborts a whole snapshot or delta read.
"""


class SyncItemError(ValueError):
    """A single push item could not be applied."""


class UnknownKindError(SyncItemError):
    """The item's type tag is not registered in the catalog."""

    def __init__(self, tag: str):
        super().__init__(f"Unknown item type: {tag}")
        self.tag = tag


class PayloadError(SyncItemError):
    """The item's data does not match the kind's payload shape."""

    def __init__(self, tag: str, detail: str):
        super().__init__(f"Invalid {tag} payload: {detail}")
        self.tag = tag
        self.detail = detail


class RecordNotFoundError(SyncItemError):
    """The addressed row does not exist for this owner."""

    def __init__(self, tag: str, record_id: str):
        super().__init__(f"{tag} {record_id} not found")
        self.tag = tag
        self.record_id = record_id


class SyncReadError(RuntimeError):
    """Reading one kind's bucket failed, so the whole export failed."""

    def __init__(self, bucket: str, cause: Exception):
        super().__init__(f"Failed to read {bucket}: {cause}")
        self.bucket = bucket
        self.cause = cause
