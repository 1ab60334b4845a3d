"""API endpoints that trigger sync runs.

Every endpoint answers HTTP 200 with the run report, whatever ``success``
says. ``errors`` is cut to ``SYNC_ERROR_PREVIEW_LIMIT`` entries while
``error_count`` keeps the real total.
"""

from fastapi import APIRouter, Depends, Query

from backend.schemas.sync import (
    RosterSyncResponse,
    SyncResponse,
    roster_sync_response,
    sync_response,
)
from backend.services.dependencies import get_mma_sync_service, get_roster_sync_service
from backend.services.sync import MmaSyncService, RosterSyncService
from backend.settings import get_settings

router = APIRouter()


def _error_limit() -> int:
    return get_settings().sync_error_preview_limit


@router.post("/", response_model=SyncResponse)
@router.post("", response_model=SyncResponse, include_in_schema=False)
async def sync_all(
    service: MmaSyncService = Depends(get_mma_sync_service),
) -> SyncResponse:
    """Run organizations, upcoming events and past events in order."""
    result = await service.sync_all()
    return sync_response(result, error_limit=_error_limit())


@router.post("/organizations", response_model=SyncResponse)
async def sync_organizations(
    service: MmaSyncService = Depends(get_mma_sync_service),
) -> SyncResponse:
    result = await service.sync_organizations()
    return sync_response(result, error_limit=_error_limit())


@router.post("/events", response_model=SyncResponse)
async def sync_upcoming_events(
    service: MmaSyncService = Depends(get_mma_sync_service),
) -> SyncResponse:
    """Sync upcoming events together with their fight cards."""
    result = await service.sync_upcoming_events()
    return sync_response(result, error_limit=_error_limit())


@router.post("/events/past", response_model=SyncResponse)
async def sync_past_events(
    limit: int | None = Query(
        None,
        ge=1,
        le=50,
        description="Number of completed events to sync (defaults to SYNC_PAST_EVENTS_LIMIT)",
    ),
    service: MmaSyncService = Depends(get_mma_sync_service),
) -> SyncResponse:
    result = await service.sync_past_events(limit)
    return sync_response(result, error_limit=_error_limit())


@router.post("/roster", response_model=RosterSyncResponse)
async def sync_full_roster(
    service: RosterSyncService = Depends(get_roster_sync_service),
) -> RosterSyncResponse:
    """Walk the UFC.com sitemap and fill in every athlete."""
    result = await service.sync_full_roster()
    return roster_sync_response(result, error_limit=_error_limit())


@router.post("/roster/top", response_model=RosterSyncResponse)
async def sync_top_fighters(
    service: RosterSyncService = Depends(get_roster_sync_service),
) -> RosterSyncResponse:
    result = await service.sync_top_fighters()
    return roster_sync_response(result, error_limit=_error_limit())


@router.post("/roster/records", response_model=RosterSyncResponse)
async def update_all_records(
    service: RosterSyncService = Depends(get_roster_sync_service),
) -> RosterSyncResponse:
    """Refresh win/loss/draw counts for fighters carrying a UFC slug."""
    result = await service.update_all_records()
    return roster_sync_response(result, error_limit=_error_limit())
