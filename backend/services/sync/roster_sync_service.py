"""Bulk UFC roster reconciliation, independent of events and fight cards."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from sqlalchemy import and_, or_

from backend.db.models import Fighter, Organization
from backend.db.store import StoreUnavailableError, SyncStore, external_id_equals
from backend.schemas.sync import RosterSyncResult
from backend.services.sync.policies import fill_missing_only
from scraper.models.records import AthleteProfile, ExternalFighterRecord
from scraper.providers.ufc_roster import UFCRosterScraper
from scraper.providers.ufc_scraper import curated_organizations
from scraper.utils.ufc_parser import stub_from_slug
from scraper.utils.weight_classes import localize_weight_class

logger = logging.getLogger(__name__)

ROSTER_PROVIDER_KEY = "UFC"

SleepFunc = Callable[[float], Awaitable[None]]


class RosterSyncService:
    """Fighter roster orchestrator backed by :class:`UFCRosterScraper`.

    Roster data is sparse, so existing fighters are only filled in, never
    overwritten (see :func:`fill_missing_only`). Win/loss/draw refreshes in
    :meth:`update_all_records` are the exception: fresh counts replace old ones.
    """

    def __init__(
        self,
        store: SyncStore,
        scraper: UFCRosterScraper,
        *,
        sleep: SleepFunc | None = None,
    ) -> None:
        self.store = store
        self.scraper = scraper
        self._sleep: SleepFunc = sleep or asyncio.sleep

    @property
    def settings(self):
        return self.scraper.settings

    async def sync_full_roster(self) -> RosterSyncResult:
        result = RosterSyncResult()
        try:
            await self._ensure_default_organization()
            stubs = await self.scraper.scrape_all_fighters()
            logger.info("Syncing %d roster fighters", len(stubs))
            for stub in stubs:
                await self._sync_fighter(stub, result)
        except Exception as exc:
            self._abort(result, "full roster", exc)
        self._log_summary("Full roster", result)
        return result

    async def sync_top_fighters(self) -> RosterSyncResult:
        result = RosterSyncResult()
        try:
            await self._ensure_default_organization()
            stubs = await self.scraper.scrape_top_fighters()
            logger.info("Syncing %d ranked fighters", len(stubs))
            await self._sync_with_details(stubs, result)
        except Exception as exc:
            self._abort(result, "top fighters", exc)
        self._log_summary("Top fighters", result)
        return result

    async def sync_fighters_by_slug(self, slugs: Iterable[str]) -> RosterSyncResult:
        """Sync an explicit list of UFC.com athlete slugs with their detail pages."""
        result = RosterSyncResult()
        stubs: list[ExternalFighterRecord] = []
        for slug in slugs:
            stub = stub_from_slug(slug)
            if stub is None:
                result.errors.append(f"Invalid fighter slug: {slug!r}")
                continue
            stubs.append(stub)

        try:
            await self._ensure_default_organization()
            await self._sync_with_details(stubs, result)
        except Exception as exc:
            self._abort(result, "fighters by slug", exc)
        self._log_summary("Fighters by slug", result)
        return result

    async def update_all_records(self) -> RosterSyncResult:
        """Refresh win/loss/draw counts for every fighter carrying a UFC slug.

        Fighters are processed in windows of ``records_batch_size`` fetched
        concurrently, with ``page_delay_seconds`` between windows. A failing
        fighter counts as not updated and never stops its window.
        """
        result = RosterSyncResult()
        try:
            fighters = [
                fighter
                for fighter in await self.store.find_many(Fighter)
                if (fighter.external_ids or {}).get(ROSTER_PROVIDER_KEY)
            ]
            batch_size = max(1, self.settings.records_batch_size)
            logger.info(
                "Refreshing records for %d fighters in batches of %d", len(fighters), batch_size
            )

            for start in range(0, len(fighters), batch_size):
                batch = fighters[start : start + batch_size]
                outcomes = await asyncio.gather(
                    *(self._refresh_record(fighter) for fighter in batch),
                    return_exceptions=True,
                )
                for fighter, outcome in zip(batch, outcomes):
                    if isinstance(outcome, StoreUnavailableError):
                        raise outcome
                    if isinstance(outcome, BaseException):
                        message = f"Error updating record for {fighter.full_name}: {outcome}"
                        logger.error(message)
                        result.errors.append(message)
                    elif outcome:
                        result.fighters_updated += 1

                if start + batch_size < len(fighters):
                    await self._sleep(self.settings.page_delay_seconds)
        except Exception as exc:
            self._abort(result, "records", exc)
        self._log_summary("Record refresh", result)
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _ensure_default_organization(self) -> Organization:
        ufc = next(org for org in curated_organizations() if org.short_name == ROSTER_PROVIDER_KEY)
        existing = await self.store.find_one(
            Organization,
            or_(Organization.short_name == ufc.short_name, Organization.name == ufc.name),
        )
        if existing is not None:
            return existing

        logger.info("Creating default organization %s", ufc.name)
        return await self.store.create(
            Organization,
            ufc.model_dump(exclude={"external_id", "level"}) | {"level": ufc.level.value},
            external_ids={ROSTER_PROVIDER_KEY: ufc.external_id},
        )

    async def _sync_with_details(
        self, stubs: list[ExternalFighterRecord], result: RosterSyncResult
    ) -> None:
        for index, stub in enumerate(stubs):
            if index:
                await self._sleep(self.settings.detail_delay_seconds)
            try:
                profile = await self.scraper.scrape_fighter_details(stub.external_id)
            except Exception as exc:
                message = f"Error fetching details for {stub.external_id}: {exc}"
                logger.error(message)
                result.errors.append(message)
                profile = None
            await self._sync_fighter(_enrich(stub, profile), result)

    async def _sync_fighter(self, stub: ExternalFighterRecord, result: RosterSyncResult) -> None:
        try:
            outcome = await self._upsert_fighter(stub)
        except StoreUnavailableError:
            raise
        except Exception as exc:
            message = f"Error syncing fighter {stub.full_name}: {exc}"
            logger.error(message)
            result.errors.append(message)
            return

        if outcome == "added":
            result.fighters_added += 1
        elif outcome == "updated":
            result.fighters_updated += 1

    async def _upsert_fighter(self, stub: ExternalFighterRecord) -> str | None:
        """Create or fill in one fighter; returns ``added``, ``updated`` or ``None``."""
        values: dict[str, Any] = {
            "nickname": stub.nickname,
            "country": stub.country,
            "weight_class": localize_weight_class(stub.weight_class),
            "image_url": stub.image_url,
            "pro_wins": stub.wins,
            "pro_losses": stub.losses,
            "pro_draws": stub.draws,
        }
        external_ids = {ROSTER_PROVIDER_KEY: stub.external_id}

        existing = await self.store.find_one(
            Fighter,
            or_(
                external_id_equals(Fighter, ROSTER_PROVIDER_KEY, stub.external_id),
                and_(
                    Fighter.first_name == stub.first_name,
                    Fighter.last_name == stub.last_name,
                ),
            ),
        )
        if existing is None:
            await self.store.create(
                Fighter,
                {**values, "first_name": stub.first_name, "last_name": stub.last_name},
                external_ids=external_ids,
            )
            return "added"

        changes = fill_missing_only(existing, values)
        gained_id = (existing.external_ids or {}).get(ROSTER_PROVIDER_KEY) != stub.external_id
        if not changes and not gained_id:
            return None

        await self.store.update(Fighter, existing.id, changes, external_ids=external_ids)
        return "updated"

    async def _refresh_record(self, fighter: Fighter) -> bool:
        slug = fighter.external_ids[ROSTER_PROVIDER_KEY]
        profile = await self.scraper.fetch_fighter_record(slug)
        if profile is None or not profile.has_record:
            return False

        counts = {
            "pro_wins": profile.wins or 0,
            "pro_losses": profile.losses or 0,
            "pro_draws": profile.draws or 0,
        }
        changes = {
            field: value for field, value in counts.items() if getattr(fighter, field) != value
        }
        changes |= fill_missing_only(
            fighter,
            {
                "weight_class": (
                    localize_weight_class(profile.weight_class) if profile.weight_class else None
                ),
                "country": profile.country,
                "image_url": profile.image_url,
            },
        )
        if not changes:
            return False

        await self.store.update(Fighter, fighter.id, changes)
        return True

    @staticmethod
    def _abort(result: RosterSyncResult, stage: str, exc: Exception) -> None:
        result.success = False
        if isinstance(exc, StoreUnavailableError):
            result.errors.append(f"Store unavailable during {stage} sync: {exc}")
            logger.error("Aborting %s sync: store unavailable: %s", stage, exc)
        else:
            result.errors.append(f"{stage.capitalize()} sync failed: {exc}")
            logger.exception("Aborting %s sync", stage)

    @staticmethod
    def _log_summary(label: str, result: RosterSyncResult) -> None:
        logger.info(
            "%s sync finished: success=%s added=%d updated=%d errors=%d",
            label,
            result.success,
            result.fighters_added,
            result.fighters_updated,
            len(result.errors),
        )


def _enrich(stub: ExternalFighterRecord, profile: AthleteProfile | None) -> ExternalFighterRecord:
    if profile is None:
        return stub
    observed = {
        "nickname": profile.nickname,
        "weight_class": profile.weight_class,
        "country": profile.country,
        "image_url": profile.image_url,
    }
    return stub.model_copy(
        update={field: value for field, value in observed.items() if value is not None}
    )


__all__ = ["ROSTER_PROVIDER_KEY", "RosterSyncService"]
