"""Persisted store used by the sync services.

Every public call opens its own short-lived session and commits before
returning, so the sync services never hold a transaction across an external
HTTP call. Instances come back detached (``expire_on_commit=False``) and are
safe to read after the call.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, TypeVar

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.db.models import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
Predicate = ColumnElement[bool]
UpdateValues = Mapping[str, Any] | Callable[[Any], Mapping[str, Any]]


class StoreError(Exception):
    """Base class for persisted-store failures."""


class StoreUnavailableError(StoreError):
    """The database could not be reached; a sync stage cannot continue."""


class RecordNotFoundError(StoreError):
    def __init__(self, model: type[Base], record_id: str) -> None:
        super().__init__(f"{model.__name__} {record_id} does not exist")
        self.model = model
        self.record_id = record_id


def merge_external_ids(
    existing: Mapping[str, Any] | None, incoming: Mapping[str, Any] | None
) -> dict[str, Any]:
    """Add ``incoming`` provider ids to ``existing`` without dropping any key.

    A provider re-reporting its own key overwrites the previous value; keys
    contributed by other providers are always kept. Empty incoming ids are
    ignored.
    """

    merged = dict(existing or {})
    for provider, external_id in (incoming or {}).items():
        if external_id in (None, ""):
            continue
        merged[provider] = str(external_id)
    return merged


def external_id_equals(model: type[Base], provider: str, value: str) -> Predicate:
    """Match rows whose ``external_ids[provider]`` equals ``value``."""

    return model.external_ids[provider].as_string() == str(value)


def _apply(instance: Base, values: Mapping[str, Any]) -> None:
    for key, value in values.items():
        setattr(instance, key, value)


class SyncStore:
    """Thin async CRUD layer over an ``async_sessionmaker``."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except (OperationalError, InterfaceError) as exc:
            logger.error("Store unavailable: %s", exc)
            raise StoreUnavailableError(str(exc.orig or exc)) from exc

    async def ping(self) -> None:
        """Raise :class:`StoreUnavailableError` when the database cannot answer."""
        async with self._session() as session:
            await session.execute(select(1))

    async def find_one(self, model: type[ModelT], predicate: Predicate) -> ModelT | None:
        async with self._session() as session:
            return await self._first(session, model, predicate)

    async def find_many(
        self, model: type[ModelT], predicate: Predicate | None = None
    ) -> list[ModelT]:
        stmt = select(model)
        if predicate is not None:
            stmt = stmt.where(predicate)
        async with self._session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def count(self, model: type[Base], predicate: Predicate | None = None) -> int:
        stmt = select(func.count()).select_from(model)
        if predicate is not None:
            stmt = stmt.where(predicate)
        async with self._session() as session:
            return int((await session.execute(stmt)).scalar_one())

    async def create(
        self,
        model: type[ModelT],
        values: Mapping[str, Any],
        external_ids: Mapping[str, Any] | None = None,
    ) -> ModelT:
        instance = model(**values)
        instance.external_ids = merge_external_ids(None, external_ids)
        async with self._session() as session:
            session.add(instance)
            await session.commit()
        return instance

    async def update(
        self,
        model: type[ModelT],
        record_id: str,
        values: Mapping[str, Any],
        external_ids: Mapping[str, Any] | None = None,
    ) -> ModelT:
        async with self._session() as session:
            instance = await session.get(model, record_id)
            if instance is None:
                raise RecordNotFoundError(model, record_id)
            _apply(instance, values)
            instance.external_ids = merge_external_ids(instance.external_ids, external_ids)
            await session.commit()
            return instance

    async def upsert(
        self,
        model: type[ModelT],
        predicate: Predicate,
        *,
        create: Mapping[str, Any],
        update: UpdateValues,
        external_ids: Mapping[str, Any] | None = None,
    ) -> tuple[ModelT, bool]:
        """Update the first row matching ``predicate`` or create one.

        ``update`` is either the values to write or a callable receiving the
        existing row and returning them, which is how update policies see the
        current state. Returns ``(instance, created)``.
        """

        async with self._session() as session:
            existing = await self._first(session, model, predicate)
            if existing is None:
                instance = model(**create)
                instance.external_ids = merge_external_ids(None, external_ids)
                session.add(instance)
                try:
                    await session.commit()
                except IntegrityError:
                    # Lost a race with a concurrent sync; fall through to update.
                    await session.rollback()
                    existing = await self._first(session, model, predicate)
                    if existing is None:
                        raise
                else:
                    return instance, True

            values = update(existing) if callable(update) else update
            _apply(existing, values)
            existing.external_ids = merge_external_ids(existing.external_ids, external_ids)
            await session.commit()
            return existing, False

    @staticmethod
    async def _first(
        session: AsyncSession, model: type[ModelT], predicate: Predicate
    ) -> ModelT | None:
        result = await session.execute(select(model).where(predicate).limit(1))
        return result.scalars().first()


__all__ = [
    "RecordNotFoundError",
    "StoreError",
    "StoreUnavailableError",
    "SyncStore",
    "external_id_equals",
    "merge_external_ids",
]
