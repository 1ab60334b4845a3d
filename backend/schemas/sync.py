"""Pydantic reports returned by the sync services and the sync API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SyncResult(BaseModel):
    """Outcome of an event/organization sync run.

    ``success`` turns false only when a whole stage aborted. Per-item failures
    are listed in ``errors`` and leave ``success`` untouched.
    """

    success: bool = True
    events_processed: int = 0
    fighters_processed: int = 0
    fights_processed: int = 0
    organizations_processed: int = 0
    errors: list[str] = Field(default_factory=list)


class RosterSyncResult(BaseModel):
    """Outcome of a roster sync run."""

    success: bool = True
    fighters_added: int = 0
    fighters_updated: int = 0
    errors: list[str] = Field(default_factory=list)


class SyncResponse(SyncResult):
    error_count: int = Field(0, description="Total number of errors before truncation")


class RosterSyncResponse(RosterSyncResult):
    error_count: int = Field(0, description="Total number of errors before truncation")


def _preview(errors: list[str], limit: int) -> list[str]:
    return errors[: max(limit, 0)]


def sync_response(result: SyncResult, *, error_limit: int) -> SyncResponse:
    payload = result.model_dump(exclude={"errors"})
    return SyncResponse(
        **payload,
        errors=_preview(result.errors, error_limit),
        error_count=len(result.errors),
    )


def roster_sync_response(result: RosterSyncResult, *, error_limit: int) -> RosterSyncResponse:
    payload = result.model_dump(exclude={"errors"})
    return RosterSyncResponse(
        **payload,
        errors=_preview(result.errors, error_limit),
        error_count=len(result.errors),
    )


class ProviderHealth(BaseModel):
    name: str
    healthy: bool


class HealthResponse(BaseModel):
    status: str = Field(..., description="'ok' when the database answers, else 'degraded'")
    database: str
    providers: list[ProviderHealth] = Field(default_factory=list)


__all__ = [
    "HealthResponse",
    "ProviderHealth",
    "RosterSyncResponse",
    "RosterSyncResult",
    "SyncResponse",
    "SyncResult",
    "roster_sync_response",
    "sync_response",
]
