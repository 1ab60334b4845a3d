"""UFC.com adapter: public events JSON, event-page HTML and curated tables.

Every failure degrades instead of raising. Event listings fall back to a
static table of real cards so a sync against an unreachable ufc.com still has
something to reconcile.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx
from pydantic import ValidationError

from scraper.models.records import (
    EventStatus,
    ExternalEventRecord,
    ExternalFightRecord,
    ExternalOrganizationRecord,
    OrganizationLevel,
)
from scraper.providers.base import HttpProvider
from scraper.utils.parser import clean_text, parse_event_datetime
from scraper.utils.ufc_parser import parse_fight_card

logger = logging.getLogger(__name__)

UFC_LOGO_URL = (
    "https://upload.wikimedia.org/wikipedia/commons/thumb/9/92/UFC_Logo.svg/"
    "1200px-UFC_Logo.svg.png"
)

_CURATED_ORGANIZATIONS: tuple[dict[str, Any], ...] = (
    {
        "external_id": "UFC",
        "name": "Ultimate Fighting Championship",
        "short_name": "UFC",
        "country": "USA",
        "city": "Las Vegas",
        "website_url": "https://www.ufc.com",
        "logo_url": UFC_LOGO_URL,
    },
    {
        "external_id": "BELLATOR",
        "name": "Bellator MMA",
        "short_name": "Bellator",
        "country": "USA",
        "city": "Hollywood",
        "website_url": "https://www.bellator.com",
    },
    {
        "external_id": "ONE",
        "name": "ONE Championship",
        "short_name": "ONE",
        "country": "Singapore",
        "city": "Singapore",
        "website_url": "https://www.onefc.com",
    },
    {
        "external_id": "PFL",
        "name": "Professional Fighters League",
        "short_name": "PFL",
        "country": "USA",
        "city": "New York",
        "website_url": "https://www.pflmma.com",
    },
)

_FALLBACK_UPCOMING_EVENTS: tuple[dict[str, Any], ...] = (
    {
        "external_id": "ufc-310",
        "name": "UFC 310: Pantoja vs. Asakura",
        "date_time_utc": "2024-12-07T22:00:00Z",
        "venue": "T-Mobile Arena",
        "city": "Las Vegas",
        "description": "UFC Flyweight Championship: Alexandre Pantoja vs Kai Asakura",
    },
    {
        "external_id": "ufc-fn-247",
        "name": "UFC Fight Night: Moreno vs. Albazi",
        "date_time_utc": "2024-12-14T22:00:00Z",
        "venue": "UFC APEX",
        "city": "Las Vegas",
        "description": "UFC Flyweight: Brandon Moreno vs Amir Albazi",
    },
    {
        "external_id": "ufc-311",
        "name": "UFC 311: Makhachev vs. Tsarukyan",
        "date_time_utc": "2025-01-18T22:00:00Z",
        "venue": "Intuit Dome",
        "city": "Inglewood",
        "description": "UFC Lightweight Championship: Islam Makhachev vs Arman Tsarukyan",
    },
    {
        "external_id": "ufc-312",
        "name": "UFC 312: Du Plessis vs. Strickland 2",
        "date_time_utc": "2025-02-08T04:00:00Z",
        "venue": "Qudos Bank Arena",
        "city": "Sydney",
        "country": "Australia",
        "description": "UFC Middleweight Championship: Dricus Du Plessis vs Sean Strickland",
    },
    {
        "external_id": "ufc-313",
        "name": "UFC 313: Pereira vs. Ankalaev",
        "date_time_utc": "2025-03-08T23:00:00Z",
        "venue": "T-Mobile Arena",
        "city": "Las Vegas",
        "description": "UFC Light Heavyweight Championship: Alex Pereira vs Magomed Ankalaev",
    },
)

_FALLBACK_PAST_EVENTS: tuple[dict[str, Any], ...] = (
    {
        "external_id": "ufc-309",
        "name": "UFC 309: Jones vs. Miocic",
        "date_time_utc": "2024-11-16T22:00:00Z",
        "venue": "Madison Square Garden",
        "city": "New York",
        "description": "UFC Heavyweight Championship: Jon Jones vs Stipe Miocic",
    },
    {
        "external_id": "ufc-308",
        "name": "UFC 308: Topuria vs. Holloway",
        "date_time_utc": "2024-10-26T18:00:00Z",
        "venue": "Etihad Arena",
        "city": "Abu Dhabi",
        "country": "UAE",
        "description": "UFC Featherweight Championship: Ilia Topuria vs Max Holloway",
    },
)


def curated_organizations() -> list[ExternalOrganizationRecord]:
    return [
        ExternalOrganizationRecord(level=OrganizationLevel.MAJOR, **entry)
        for entry in _CURATED_ORGANIZATIONS
    ]


def fallback_upcoming_events() -> list[ExternalEventRecord]:
    return [
        ExternalEventRecord(organization_ref="UFC", status=EventStatus.SCHEDULED, **entry)
        for entry in _FALLBACK_UPCOMING_EVENTS
    ]


def fallback_past_events() -> list[ExternalEventRecord]:
    return [
        ExternalEventRecord(organization_ref="UFC", status=EventStatus.COMPLETED, **entry)
        for entry in _FALLBACK_PAST_EVENTS
    ]


class UFCScraperProvider(HttpProvider):
    name = "UFC"

    @property
    def events_url(self) -> str:
        return f"{self.settings.ufc_base_url}/api/v1/events"

    async def fetch_upcoming_events(self) -> list[ExternalEventRecord]:
        events = await self._fetch_event_list(is_upcoming=True)
        if not events:
            logger.warning("UFC events API yielded nothing; using fallback upcoming events")
            return fallback_upcoming_events()
        return events

    async def fetch_past_events(self, limit: int = 5) -> list[ExternalEventRecord]:
        events = await self._fetch_event_list(is_upcoming=False)
        if not events:
            logger.info("UFC events API yielded no past events; using curated list")
            events = fallback_past_events()
        events.sort(key=lambda event: event.date_time_utc, reverse=True)
        return events[:limit]

    async def fetch_fight_card_for_event(
        self, event_external_id: str
    ) -> list[ExternalFightRecord]:
        html = await self.fetch_text(f"{self.settings.ufc_base_url}/event/{event_external_id}")
        if html is None:
            return []
        fights = parse_fight_card(html, event_external_id)
        logger.info("Parsed %d fights for %s", len(fights), event_external_id)
        return fights

    async def fetch_organizations(self) -> list[ExternalOrganizationRecord]:
        return curated_organizations()

    async def health_check(self) -> bool:
        try:
            response = await self.client.get(self.events_url, params={"is_upcoming": "true"})
        except httpx.HTTPError as exc:
            logger.warning("UFC health check failed: %s", exc)
            return False
        return response.is_success

    async def _fetch_event_list(self, *, is_upcoming: bool) -> list[ExternalEventRecord]:
        params = {"is_upcoming": "true" if is_upcoming else "false"}
        try:
            response = await self.client.get(self.events_url, params=params)
        except httpx.HTTPError as exc:
            logger.error("Error fetching UFC events: %s", exc)
            return []

        if not response.is_success:
            logger.error("UFC API error: %s", response.status_code)
            return []

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("UFC API returned invalid JSON: %s", exc)
            return []

        content = payload.get("content") if isinstance(payload, dict) else None
        items = (content or {}).get("eventList") or []
        status = EventStatus.SCHEDULED if is_upcoming else EventStatus.COMPLETED

        events: list[ExternalEventRecord] = []
        for item in items:
            event = self._map_event(item, status)
            if event is not None:
                events.append(event)
        return events

    @staticmethod
    def _map_event(item: dict[str, Any], status: EventStatus) -> ExternalEventRecord | None:
        external_id = item.get("eventId") or item.get("id")
        name = clean_text(item.get("name") or item.get("title"))
        starts_at: datetime | None = parse_event_datetime(
            item.get("startTime") or item.get("eventDttm")
        )
        if not external_id or not name or starts_at is None:
            logger.warning("Skipping UFC event with missing fields: %s", item)
            return None

        try:
            return ExternalEventRecord(
                external_id=str(external_id),
                organization_ref="UFC",
                name=name,
                date_time_utc=starts_at,
                venue=clean_text(item.get("venue")),
                city=clean_text(item.get("city")),
                country=clean_text(item.get("country")) or "USA",
                status=status,
                poster_url=clean_text(item.get("posterImage")),
            )
        except ValidationError as exc:
            logger.warning("Skipping malformed UFC event %s: %s", external_id, exc)
            return None
