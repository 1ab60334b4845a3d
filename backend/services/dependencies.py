"""FastAPI dependency wiring for the sync services.

The CLI and the tests construct the same services directly.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends

from backend.db.connection import get_session_factory
from backend.db.store import SyncStore
from backend.services.sync import MmaSyncService, RosterSyncService
from backend.settings import AppSettings, get_settings
from scraper.providers import HttpProvider, UFCRosterScraper, get_provider


def build_event_provider(settings: AppSettings) -> HttpProvider:
    """Instantiate the adapter selected by ``SYNC_PROVIDER``."""

    name = settings.sync_provider.strip().lower()
    if name == "sportsdataio":
        return get_provider(
            name, api_key=settings.mma_api_key, base_url=settings.mma_api_base_url
        )
    return get_provider(name)


def get_sync_store() -> SyncStore:
    return SyncStore(get_session_factory())


async def get_event_provider() -> AsyncIterator[HttpProvider]:
    provider = build_event_provider(get_settings())
    try:
        yield provider
    finally:
        await provider.aclose()


async def get_roster_scraper() -> AsyncIterator[UFCRosterScraper]:
    scraper = UFCRosterScraper()
    try:
        yield scraper
    finally:
        await scraper.aclose()


def get_mma_sync_service(
    store: SyncStore = Depends(get_sync_store),
    provider: HttpProvider = Depends(get_event_provider),
) -> MmaSyncService:
    return MmaSyncService(
        store, provider, past_events_limit=get_settings().sync_past_events_limit
    )


def get_roster_sync_service(
    store: SyncStore = Depends(get_sync_store),
    scraper: UFCRosterScraper = Depends(get_roster_scraper),
) -> RosterSyncService:
    return RosterSyncService(store, scraper)


__all__ = [
    "build_event_provider",
    "get_event_provider",
    "get_mma_sync_service",
    "get_roster_scraper",
    "get_roster_sync_service",
    "get_sync_store",
]
