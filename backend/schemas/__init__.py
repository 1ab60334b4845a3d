"""Pydantic schemas for sync reports and API responses."""

from backend.schemas.sync import (  # noqa: F401
    HealthResponse,
    ProviderHealth,
    RosterSyncResponse,
    RosterSyncResult,
    SyncResponse,
    SyncResult,
    roster_sync_response,
    sync_response,
)
