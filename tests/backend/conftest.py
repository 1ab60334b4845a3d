"""Shared backend fixtures for asynchronous store access."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from backend.db.models import Base
from backend.db.store import SyncStore
from scraper.models.records import ExternalOrganizationRecord


@pytest_asyncio.fixture
async def store(tmp_path: Path) -> AsyncIterator[SyncStore]:
    """Provide a :class:`SyncStore` backed by a throwaway SQLite file."""
    pytest.importorskip("aiosqlite")
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'sync.db'}", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield SyncStore(async_sessionmaker(engine, expire_on_commit=False))
    await engine.dispose()


@pytest.fixture
def ufc_organization() -> ExternalOrganizationRecord:
    return ExternalOrganizationRecord(
        external_id="UFC",
        name="Ultimate Fighting Championship",
        short_name="UFC",
        city="Las Vegas",
        website_url="https://www.ufc.com",
    )
