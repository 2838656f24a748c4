"""Pydantic models for API requests and responses."""

from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ohabits.types import PushItem, PushResult

# =============================================================================
# Sync Models
# =============================================================================


class SyncPushItem(BaseModel):
    """A single client change. Accepts snake_case or camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    local_id: str = Field(..., min_length=1, validation_alias=AliasChoices("local_id", "localId"))
    server_id: str | None = Field(
        default=None, validation_alias=AliasChoices("server_id", "serverId")
    )
    type: str
    is_deleted: bool = Field(default=False, validation_alias=AliasChoices("is_deleted", "isDeleted"))
    updated_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("updated_at", "updatedAt")
    )
    data: Any = None  # validated per kind by the sync catalog

    def to_push_item(self) -> PushItem:
        return PushItem(
            local_id=self.local_id,
            type=self.type,
            server_id=self.server_id or None,
            is_deleted=self.is_deleted,
            updated_at=self.updated_at,
            data=self.data,
        )


class SyncPushRequest(BaseModel):
    """Request to push local changes."""

    items: list[SyncPushItem] = []


class SyncPushResult(BaseModel):
    """Outcome of one pushed item."""

    local_id: str
    server_id: str | None = None
    success: bool
    error: str | None = None

    @classmethod
    def from_result(cls, result: PushResult) -> "SyncPushResult":
        return cls(
            local_id=result.local_id,
            server_id=result.server_id,
            success=result.success,
            error=result.error,
        )


class SyncPushResponse(BaseModel):
    """Response from sync push."""

    status: Literal["success"] = "success"
    results: list[SyncPushResult]


class SyncChangesRequest(BaseModel):
    """Request for changes since a cursor."""

    since: datetime | None = None  # None means from the epoch


class SyncDataResponse(BaseModel):
    """Snapshot or delta export."""

    model_config = ConfigDict(populate_by_name=True)

    status: Literal["success"] = "success"
    data: dict[str, list[dict[str, Any]]]
    last_sync_timestamp: str = Field(..., serialization_alias="lastSyncTimestamp")


class SyncStatusResponse(BaseModel):
    """Server clock and caller identity."""

    model_config = ConfigDict(populate_by_name=True)

    status: Literal["success"] = "success"
    server_timestamp: str = Field(..., serialization_alias="serverTimestamp")
    user_id: str = Field(..., serialization_alias="userId")


class ErrorResponse(BaseModel):
    """Error envelope shared by every endpoint."""

    status: Literal["error"] = "error"
    error: str
