"""SportsData.io MMA adapter (authenticated JSON API).

Requests go through :meth:`ApiProvider.fetch_with_retry`. Listing calls
swallow the final error and return empty lists; the fight card call lets it
propagate so the sync service records a per-event error.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any

from pydantic import ValidationError

from scraper.config import ScraperSettings
from scraper.models.records import (
    CardSection,
    EventStatus,
    ExternalEventRecord,
    ExternalFightRecord,
    ExternalFighterRecord,
    ExternalOrganizationRecord,
    FightResult,
    FightResultStatus,
    OrganizationLevel,
    Stance,
)
from scraper.providers.base import ApiProvider, ProviderNotConfiguredError, ProviderRequestError
from scraper.utils.parser import clean_text, parse_event_datetime

logger = logging.getLogger(__name__)

_EVENT_STATUSES: dict[str, EventStatus] = {
    "COMPLETED": EventStatus.COMPLETED,
    "FINAL": EventStatus.COMPLETED,
    "CANCELLED": EventStatus.CANCELLED,
    "POSTPONED": EventStatus.CANCELLED,
}
_FIGHT_STATUSES: dict[str, FightResultStatus] = {
    "COMPLETED": FightResultStatus.COMPLETED,
    "FINAL": FightResultStatus.COMPLETED,
    "DRAW": FightResultStatus.DRAW,
    "NC": FightResultStatus.NO_CONTEST,
    "NO_CONTEST": FightResultStatus.NO_CONTEST,
    "CANCELLED": FightResultStatus.CANCELLED,
}


def map_event_status(status: str | None) -> EventStatus:
    return _EVENT_STATUSES.get((status or "").upper(), EventStatus.SCHEDULED)


def map_fight_status(status: str | None) -> FightResultStatus:
    return _FIGHT_STATUSES.get((status or "").upper(), FightResultStatus.SCHEDULED)


def map_stance(stance: str | None) -> Stance:
    key = (stance or "").upper()
    return Stance(key) if key in Stance.__members__ else Stance.UNKNOWN


def _as_id(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


class SportsDataIoProvider(ApiProvider):
    name = "SportsDataIO"

    def __init__(
        self,
        *args: Any,
        api_key: str | None = None,
        base_url: str | None = None,
        season: int | None = None,
        settings: ScraperSettings | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, settings=settings, **kwargs)
        self.api_key = self.settings.sportsdataio_api_key if api_key is None else api_key
        self.base_url = (base_url or self.settings.sportsdataio_base_url).rstrip("/")
        self.season = season or datetime.now(timezone.utc).year

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _get_json(self, path: str) -> Any:
        return await self.fetch_with_retry(f"{self.base_url}{path}", params={"key": self.api_key})

    async def _fetch_schedule(self) -> list[ExternalEventRecord]:
        if not self.is_configured:
            logger.warning("SportsData.io API key not configured")
            return []
        try:
            data = await self._get_json(f"/scores/json/Schedule/{self.season}")
        except ProviderRequestError as exc:
            logger.error("Failed to fetch schedule from SportsData.io: %s", exc)
            return []
        events = [self._map_event(raw_event) for raw_event in data or []]
        return [event for event in events if event is not None]

    async def fetch_upcoming_events(self) -> list[ExternalEventRecord]:
        events = [
            event for event in await self._fetch_schedule() if event.status is EventStatus.SCHEDULED
        ]
        events.sort(key=lambda event: event.date_time_utc)
        return events

    async def fetch_past_events(self, limit: int = 5) -> list[ExternalEventRecord]:
        events = [
            event for event in await self._fetch_schedule() if event.status is EventStatus.COMPLETED
        ]
        events.sort(key=lambda event: event.date_time_utc, reverse=True)
        return events[:limit]

    async def fetch_fight_card_for_event(
        self, event_external_id: str
    ) -> list[ExternalFightRecord]:
        if not self.is_configured:
            raise ProviderNotConfiguredError("SportsData.io API key not configured")

        data = await self._get_json(f"/scores/json/Event/{event_external_id}")
        fighters = {
            fighter.external_id: fighter
            for fighter in (self._map_fighter(raw) for raw in data.get("Fighters") or [])
            if fighter is not None
        }

        fights: list[ExternalFightRecord] = []
        for position, raw_fight in enumerate(data.get("Fights") or []):
            fighter_a = fighters.get(_as_id(raw_fight.get("FighterIdA")) or "")
            fighter_b = fighters.get(_as_id(raw_fight.get("FighterIdB")) or "")
            if fighter_a is None or fighter_b is None:
                logger.warning(
                    "Skipping SportsData.io fight %s: corner not in fighter list",
                    raw_fight.get("FightId"),
                )
                continue

            status = map_fight_status(raw_fight.get("ResultStatus"))
            result = None
            if status is not FightResultStatus.SCHEDULED:
                result = FightResult(
                    winner_external_id=_as_id(raw_fight.get("WinnerId")),
                    method=raw_fight.get("Method"),
                    method_detail=raw_fight.get("MethodDetail"),
                    round=raw_fight.get("Round"),
                    time=raw_fight.get("Time"),
                )
            fights.append(
                ExternalFightRecord(
                    external_id=_as_id(raw_fight.get("FightId"))
                    or f"{event_external_id}-{fighter_a.external_id}-vs-{fighter_b.external_id}",
                    event_external_id=str(event_external_id),
                    fighter_a=fighter_a,
                    fighter_b=fighter_b,
                    weight_class=raw_fight.get("WeightClass") or "Unknown",
                    is_title_fight=bool(raw_fight.get("IsTitleFight")),
                    is_main_event=bool(raw_fight.get("IsMainEvent")),
                    is_co_main_event=bool(raw_fight.get("IsCoMainEvent")),
                    card_section=CardSection.MAIN,
                    order=CardSection.MAIN.ordinal_base + position,
                    result_status=status,
                    result=result,
                )
            )
        return fights

    async def fetch_organizations(self) -> list[ExternalOrganizationRecord]:
        if not self.is_configured:
            return []
        try:
            data = await self._get_json("/scores/json/Leagues")
        except ProviderRequestError as exc:
            logger.error("Failed to fetch leagues from SportsData.io: %s", exc)
            return []

        organizations: list[ExternalOrganizationRecord] = []
        for league in data or []:
            short_name = clean_text(league.get("Key")) or clean_text(league.get("Name"))
            if not short_name:
                continue
            organizations.append(
                ExternalOrganizationRecord(
                    external_id=_as_id(league.get("LeagueId")) or short_name,
                    name=clean_text(league.get("Name")) or short_name,
                    short_name=short_name,
                    level=OrganizationLevel.MAJOR,
                )
            )
        return organizations

    async def fetch_fighter(self, external_id: str) -> ExternalFighterRecord | None:
        if not self.is_configured:
            logger.warning("SportsData.io API key not configured")
            return None
        try:
            data = await self._get_json(f"/scores/json/Fighter/{external_id}")
        except ProviderRequestError as exc:
            logger.error("Failed to fetch fighter %s from SportsData.io: %s", external_id, exc)
            return None
        return self._map_fighter(data) if data else None

    async def search_fighters(self, query: str) -> list[ExternalFighterRecord]:
        if not self.is_configured:
            return []
        try:
            data = await self._get_json("/scores/json/Fighters")
        except ProviderRequestError as exc:
            logger.error("Failed to search fighters on SportsData.io: %s", exc)
            return []

        needle = query.strip().lower()
        matches: list[ExternalFighterRecord] = []
        for raw in data or []:
            fighter = self._map_fighter(raw)
            if fighter is not None and needle in fighter.full_name.lower():
                matches.append(fighter)
        return matches

    async def health_check(self) -> bool:
        if not self.is_configured:
            return False
        try:
            await self._get_json("/scores/json/Leagues")
        except ProviderRequestError:
            return False
        return True

    def _map_event(self, raw_event: dict[str, Any]) -> ExternalEventRecord | None:
        external_id = _as_id(raw_event.get("EventId"))
        starts_at = parse_event_datetime(raw_event.get("DateTime") or raw_event.get("Day"))
        if external_id is None or starts_at is None:
            logger.warning("Skipping SportsData.io event without id/date: %s", raw_event)
            return None
        try:
            return ExternalEventRecord(
                external_id=external_id,
                organization_ref=raw_event.get("League") or "UFC",
                name=raw_event.get("Name") or "Unknown Event",
                date_time_utc=starts_at,
                venue=raw_event.get("Venue"),
                city=raw_event.get("City"),
                country=raw_event.get("Country") or "USA",
                status=map_event_status(raw_event.get("Status")),
            )
        except ValidationError as exc:
            logger.warning("Skipping malformed SportsData.io event %s: %s", external_id, exc)
            return None

    @staticmethod
    def _map_fighter(raw: dict[str, Any]) -> ExternalFighterRecord | None:
        external_id = _as_id(raw.get("FighterId"))
        if external_id is None:
            return None

        birth_date: date | None = None
        born = parse_event_datetime(raw.get("BirthDate"))
        if born is not None:
            birth_date = born.date()

        return ExternalFighterRecord(
            external_id=external_id,
            first_name=raw.get("FirstName") or "",
            last_name=raw.get("LastName") or "",
            nickname=raw.get("Nickname"),
            birth_date=birth_date,
            country=raw.get("Country") or "Unknown",
            city=raw.get("City"),
            team=raw.get("Team"),
            height_cm=raw.get("HeightCm"),
            reach_cm=raw.get("ReachCm"),
            stance=map_stance(raw.get("Stance")),
            weight_class=raw.get("WeightClass") or "Unknown",
            wins=raw.get("Wins") or 0,
            losses=raw.get("Losses") or 0,
            draws=raw.get("Draws") or 0,
            no_contests=raw.get("NoContests") or 0,
            image_url=raw.get("ImageUrl"),
        )
