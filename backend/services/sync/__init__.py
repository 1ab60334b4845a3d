"""Sync orchestrators that reconcile provider data with the persisted store."""

from backend.services.sync.mma_sync_service import MmaSyncService  # noqa: F401
from backend.services.sync.policies import (  # noqa: F401
    authoritative_overwrite,
    fill_missing_only,
)
from backend.services.sync.roster_sync_service import RosterSyncService  # noqa: F401
