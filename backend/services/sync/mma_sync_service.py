"""Reconcile provider organizations, events and fight cards with the store."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy import and_, func, or_

from backend.db.models import Event, Fight, Fighter, Organization
from backend.db.store import StoreUnavailableError, SyncStore, external_id_equals
from backend.schemas.sync import SyncResult
from backend.services.sync.policies import PLACEHOLDER_STRINGS, authoritative_overwrite
from scraper.models.records import (
    ExternalEventRecord,
    ExternalFightRecord,
    ExternalFighterRecord,
    ExternalOrganizationRecord,
    FightResultStatus,
    OrganizationLevel,
)
from scraper.providers.base import MmaDataProvider
from scraper.utils.parser import EMPTY_RECORD, RecordCounts, event_slug, parse_record

logger = logging.getLogger(__name__)

DEFAULT_PAST_EVENTS_LIMIT = 5

# Full names used when an event references an organization that was never synced.
KNOWN_ORGANIZATION_NAMES: dict[str, str] = {
    "UFC": "Ultimate Fighting Championship",
}

Stage = Callable[[SyncResult], Awaitable[None]]


class MmaSyncService:
    """Event-side sync orchestrator.

    Stages run in a fixed order (organizations, upcoming events, past events).
    Item failures are appended to ``SyncResult.errors``; a failure that
    escapes a stage (typically :class:`StoreUnavailableError`) marks the run
    unsuccessful and skips the remaining stages. No method raises.
    """

    def __init__(
        self,
        store: SyncStore,
        provider: MmaDataProvider,
        *,
        past_events_limit: int = DEFAULT_PAST_EVENTS_LIMIT,
    ) -> None:
        self.store = store
        self.provider = provider
        self.past_events_limit = past_events_limit

    @property
    def provider_key(self) -> str:
        """Key under which this provider's ids are stored in ``external_ids``."""
        return self.provider.name

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    async def sync_all(self) -> SyncResult:
        logger.info("Starting full sync with provider %s", self.provider_key)
        result = await self._run(
            ("organizations", self._sync_organizations),
            ("upcoming events", self._sync_upcoming_events),
            ("past events", self._past_events_stage(self.past_events_limit)),
        )
        logger.info(
            "Full sync finished: success=%s organizations=%d events=%d fighters=%d "
            "fights=%d errors=%d",
            result.success,
            result.organizations_processed,
            result.events_processed,
            result.fighters_processed,
            result.fights_processed,
            len(result.errors),
        )
        return result

    async def sync_organizations(self) -> SyncResult:
        return await self._run(("organizations", self._sync_organizations))

    async def sync_upcoming_events(self) -> SyncResult:
        return await self._run(("upcoming events", self._sync_upcoming_events))

    async def sync_past_events(self, limit: int | None = None) -> SyncResult:
        limit = self.past_events_limit if limit is None else limit
        return await self._run(("past events", self._past_events_stage(limit)))

    async def _run(self, *stages: tuple[str, Stage]) -> SyncResult:
        result = SyncResult()
        for stage_name, stage in stages:
            logger.info("Sync stage started: %s", stage_name)
            try:
                await stage(result)
            except StoreUnavailableError as exc:
                result.success = False
                result.errors.append(f"Store unavailable during {stage_name} sync: {exc}")
                logger.error("Aborting sync: store unavailable during %s: %s", stage_name, exc)
                break
            except Exception as exc:
                result.success = False
                result.errors.append(f"{stage_name.capitalize()} sync failed: {exc}")
                logger.exception("Aborting sync: %s stage failed", stage_name)
                break
        return result

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _sync_organizations(self, result: SyncResult) -> None:
        organizations = await self.provider.fetch_organizations()
        logger.info("Fetched %d organizations from %s", len(organizations), self.provider_key)

        for organization in organizations:
            try:
                await self._upsert_organization(organization)
            except StoreUnavailableError:
                raise
            except Exception as exc:
                message = f"Error syncing organization {organization.name}: {exc}"
                logger.error(message)
                result.errors.append(message)
                continue
            result.organizations_processed += 1

    async def _sync_upcoming_events(self, result: SyncResult) -> None:
        events = await self.provider.fetch_upcoming_events()
        logger.info("Fetched %d upcoming events from %s", len(events), self.provider_key)
        seen_fighters: set[str] = set()

        for event in events:
            try:
                stored_event = await self._upsert_event(event)
            except StoreUnavailableError:
                raise
            except Exception as exc:
                message = f"Error syncing event {event.name}: {exc}"
                logger.error(message)
                result.errors.append(message)
                continue
            result.events_processed += 1

            try:
                fights = await self.provider.fetch_fight_card_for_event(event.external_id)
            except Exception as exc:
                message = f"Error fetching fight card for {event.name}: {exc}"
                logger.error(message)
                result.errors.append(message)
                continue

            for fight in fights:
                try:
                    await self._upsert_fight(stored_event, fight, result, seen_fighters)
                except StoreUnavailableError:
                    raise
                except Exception as exc:
                    message = (
                        f"Error syncing fight {fight.fighter_a.full_name} vs "
                        f"{fight.fighter_b.full_name} ({event.name}): {exc}"
                    )
                    logger.error(message)
                    result.errors.append(message)
                    continue
                result.fights_processed += 1

    def _past_events_stage(self, limit: int) -> Stage:
        async def stage(result: SyncResult) -> None:
            events = await self.provider.fetch_past_events(limit)
            logger.info("Fetched %d past events from %s", len(events), self.provider_key)
            for event in events[:limit]:
                try:
                    await self._upsert_event(event)
                except StoreUnavailableError:
                    raise
                except Exception as exc:
                    message = f"Error syncing past event {event.name}: {exc}"
                    logger.error(message)
                    result.errors.append(message)
                    continue
                result.events_processed += 1

        return stage

    # ------------------------------------------------------------------
    # Entity upserts
    # ------------------------------------------------------------------

    async def _upsert_organization(self, record: ExternalOrganizationRecord) -> Organization:
        values = {
            "name": record.name,
            "short_name": record.short_name,
            "country": record.country,
            "city": record.city,
            "website_url": record.website_url,
            "logo_url": record.logo_url,
            "level": record.level.value,
        }
        organization, created = await self.store.upsert(
            Organization,
            or_(Organization.name == record.name, Organization.short_name == record.short_name),
            create=values,
            update=lambda existing: authoritative_overwrite(existing, values),
            external_ids={self.provider_key: record.external_id},
        )
        logger.debug("%s organization %s", "Created" if created else "Updated", record.name)
        return organization

    async def _resolve_organization(self, organization_ref: str) -> Organization:
        """Find the organization an event points at, creating it when missing.

        Args:
            organization_ref: Provider-side name or shortcode (``UFC``, ``PFL`` ...)

        Returns:
            The persisted organization
        """
        existing = await self.store.find_one(
            Organization,
            or_(
                Organization.short_name == organization_ref,
                func.lower(Organization.name).contains(organization_ref.lower(), autoescape=True),
            ),
        )
        if existing is not None:
            return existing

        logger.info("Creating missing organization %s", organization_ref)
        return await self.store.create(
            Organization,
            {
                "name": KNOWN_ORGANIZATION_NAMES.get(organization_ref, organization_ref),
                "short_name": organization_ref,
                "country": "USA",
                "level": OrganizationLevel.MAJOR.value,
            },
        )

    async def _upsert_event(self, record: ExternalEventRecord) -> Event:
        organization = await self._resolve_organization(record.organization_ref)
        slug = event_slug(record.name)
        values: dict[str, Any] = {
            "organization_id": organization.id,
            "name": record.name,
            "slug": slug,
            "date_time_utc": record.date_time_utc,
            "venue": record.venue,
            "city": record.city,
            "country": record.country,
            "status": record.status.value,
            "description": record.description,
            "poster_url": record.poster_url,
            "is_amateur_event": record.is_amateur_event,
        }
        event, created = await self.store.upsert(
            Event,
            or_(
                external_id_equals(Event, self.provider_key, record.external_id),
                Event.slug == slug,
                Event.name == record.name,
            ),
            create=values,
            update=lambda existing: authoritative_overwrite(existing, values),
            external_ids={self.provider_key: record.external_id},
        )
        logger.info("%s event %s (%s)", "Created" if created else "Updated", record.name, slug)
        return event

    async def _upsert_fighter(self, record: ExternalFighterRecord) -> Fighter:
        counts = _observed_counts(record)
        refreshed: dict[str, Any] = {
            "pro_wins": counts.wins if counts else None,
            "pro_losses": counts.losses if counts else None,
            "pro_draws": counts.draws if counts else None,
            "country": _observed_text(record.country),
            "image_url": record.image_url,
            "weight_class": _observed_text(record.weight_class),
            "nickname": record.nickname,
        }
        create_values: dict[str, Any] = {
            **refreshed,
            "pro_wins": counts.wins if counts else 0,
            "pro_losses": counts.losses if counts else 0,
            "pro_draws": counts.draws if counts else 0,
            "country": record.country,
            "weight_class": record.weight_class,
            "first_name": record.first_name,
            "last_name": record.last_name,
            "city": record.city,
            "team": record.team,
            "birth_date": record.birth_date,
            "height_cm": record.height_cm,
            "reach_cm": record.reach_cm,
            "stance": record.stance.value,
            "pro_no_contests": record.no_contests,
            "is_pro": record.is_pro,
        }

        fighter, _ = await self.store.upsert(
            Fighter,
            or_(
                external_id_equals(Fighter, self.provider_key, record.external_id),
                and_(
                    Fighter.first_name == record.first_name,
                    Fighter.last_name == record.last_name,
                ),
            ),
            create=create_values,
            update=lambda existing: authoritative_overwrite(existing, refreshed),
            external_ids={self.provider_key: record.external_id},
        )
        return fighter

    async def _upsert_fight(
        self,
        event: Event,
        record: ExternalFightRecord,
        result: SyncResult,
        seen_fighters: set[str],
    ) -> Fight:
        fighter_a = await self._upsert_fighter(record.fighter_a)
        fighter_b = await self._upsert_fighter(record.fighter_b)
        for fighter in (fighter_a, fighter_b):
            if fighter.id not in seen_fighters:
                seen_fighters.add(fighter.id)
                result.fighters_processed += 1

        outcome = record.result
        winner_id: str | None = None
        if outcome is not None and outcome.winner_external_id:
            if outcome.winner_external_id == record.fighter_a.external_id:
                winner_id = fighter_a.id
            elif outcome.winner_external_id == record.fighter_b.external_id:
                winner_id = fighter_b.id

        values: dict[str, Any] = {
            "event_id": event.id,
            "fighter_a_id": fighter_a.id,
            "fighter_b_id": fighter_b.id,
            "weight_class": record.weight_class,
            "is_title_fight": record.is_title_fight,
            "is_main_event": record.is_main_event,
            "is_co_main_event": record.is_co_main_event,
            "card_section": record.card_section.value,
            "ordinal": record.order,
            "result_status": (record.result_status or FightResultStatus.SCHEDULED).value,
            "winner_id": winner_id,
            "method": outcome.method if outcome else None,
            "method_detail": outcome.method_detail if outcome else None,
            "round": outcome.round if outcome else None,
            "time": outcome.time if outcome else None,
        }
        fight, _ = await self.store.upsert(
            Fight,
            or_(
                external_id_equals(Fight, self.provider_key, record.external_id),
                and_(
                    Fight.event_id == event.id,
                    Fight.fighter_a_id == fighter_a.id,
                    Fight.fighter_b_id == fighter_b.id,
                ),
            ),
            create=values,
            update=lambda existing: authoritative_overwrite(existing, values),
            external_ids={self.provider_key: record.external_id},
        )
        return fight


__all__ = ["DEFAULT_PAST_EVENTS_LIMIT", "KNOWN_ORGANIZATION_NAMES", "MmaSyncService"]


def _observed_counts(record: ExternalFighterRecord) -> RecordCounts | None:
    """Return the record counts a source actually reported, or ``None``.

    A corner without a parsable record string and with all-zero counts carries
    no record information at all.
    """
    parsed = parse_record(record.record)
    if parsed != EMPTY_RECORD:
        return parsed
    if record.wins or record.losses or record.draws:
        return RecordCounts(record.wins, record.losses, record.draws)
    return None


def _observed_text(value: str | None) -> str | None:
    if value is None or value.strip() in PLACEHOLDER_STRINGS:
        return None
    return value
