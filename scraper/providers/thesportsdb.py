"""TheSportsDB adapter (free public JSON API, https://www.thesportsdb.com/api.php)."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import httpx
from pydantic import ValidationError

from scraper.models.records import (
    EventStatus,
    ExternalEventRecord,
    ExternalFightRecord,
    ExternalFighterRecord,
    ExternalOrganizationRecord,
    OrganizationLevel,
    Stance,
)
from scraper.providers.base import HttpProvider
from scraper.utils.parser import (
    clean_text,
    parse_event_datetime,
    parse_height_cm,
    split_full_name,
)
from scraper.utils.weight_classes import weight_to_division

logger = logging.getLogger(__name__)

LEAGUE_IDS: dict[str, str] = {
    "UFC": "4443",
    "BELLATOR": "4444",
    "ONE_CHAMPIONSHIP": "4445",
    "PFL": "4489",
}
# Short names line up with the curated organization table used by the UFC adapter.
_ORGANIZATION_REFS: dict[str, str] = {
    "UFC": "UFC",
    "BELLATOR": "Bellator",
    "ONE_CHAMPIONSHIP": "ONE",
    "PFL": "PFL",
}
_LEAGUE_NAMES_BY_ID = {league_id: name for name, league_id in LEAGUE_IDS.items()}

_COMPLETED_STATUSES = {"Match Finished"}
_CANCELLED_STATUSES = {"Cancelled", "Postponed"}
_MMA_MARKERS = ("mma", "fighting")


class TheSportsDBProvider(HttpProvider):
    name = "TheSportsDB"

    @property
    def base_url(self) -> str:
        return self.settings.thesportsdb_base_url

    async def _fetch_json(self, endpoint: str, **params: Any) -> dict[str, Any] | None:
        url = f"{self.base_url}/{endpoint}"
        try:
            response = await self.client.get(url, params=params)
        except httpx.HTTPError as exc:
            logger.error("TheSportsDB fetch error for %s: %s", endpoint, exc)
            return None
        if not response.is_success:
            logger.error("TheSportsDB API error: %s (%s)", response.status_code, endpoint)
            return None
        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("TheSportsDB returned invalid JSON for %s: %s", endpoint, exc)
            return None
        return payload if isinstance(payload, dict) else None

    async def fetch_upcoming_events(self) -> list[ExternalEventRecord]:
        events: list[ExternalEventRecord] = []
        for org_name, league_id in LEAGUE_IDS.items():
            data = await self._fetch_json("eventsnextleague.php", id=league_id)
            for raw_event in (data or {}).get("events") or []:
                event = self._map_event(raw_event, org_name)
                if event is not None:
                    events.append(event)

        events.sort(key=lambda event: event.date_time_utc)
        return events

    async def fetch_past_events(self, limit: int = 5) -> list[ExternalEventRecord]:
        events: list[ExternalEventRecord] = []
        for org_name, league_id in LEAGUE_IDS.items():
            data = await self._fetch_json("eventspastleague.php", id=league_id)
            for raw_event in ((data or {}).get("events") or [])[:limit]:
                event = self._map_event(raw_event, org_name)
                if event is not None:
                    events.append(event)

        events.sort(key=lambda event: event.date_time_utc, reverse=True)
        return events[:limit]

    async def fetch_event(self, external_id: str) -> ExternalEventRecord | None:
        data = await self._fetch_json("lookupevent.php", id=external_id)
        raw_events = (data or {}).get("events") or []
        if not raw_events:
            return None
        raw_event = raw_events[0]
        org_name = _LEAGUE_NAMES_BY_ID.get(str(raw_event.get("idLeague")), "")
        return self._map_event(raw_event, org_name or raw_event.get("strLeague") or "")

    async def fetch_fight_card_for_event(
        self, event_external_id: str
    ) -> list[ExternalFightRecord]:
        # Individual bouts are not published by TheSportsDB.
        return []

    async def fetch_organizations(self) -> list[ExternalOrganizationRecord]:
        organizations: list[ExternalOrganizationRecord] = []
        for org_name, league_id in LEAGUE_IDS.items():
            data = await self._fetch_json("lookupleague.php", id=league_id)
            leagues = (data or {}).get("leagues") or []
            if not leagues:
                continue
            league = leagues[0]
            website = clean_text(league.get("strWebsite"))
            organizations.append(
                ExternalOrganizationRecord(
                    external_id=str(league.get("idLeague") or league_id),
                    name=clean_text(league.get("strLeague")) or org_name,
                    short_name=_ORGANIZATION_REFS[org_name],
                    country=clean_text(league.get("strCountry")) or "USA",
                    website_url=f"https://{website}" if website else None,
                    logo_url=clean_text(league.get("strBadge") or league.get("strLogo")),
                    level=(
                        OrganizationLevel.MAJOR
                        if org_name == "UFC"
                        else OrganizationLevel.REGIONAL
                    ),
                )
            )
        return organizations

    async def search_fighters(self, query: str) -> list[ExternalFighterRecord]:
        """Search players across the MMA leagues, keeping only fighters."""
        fighters: list[ExternalFighterRecord] = []
        for org_name in LEAGUE_IDS:
            data = await self._fetch_json("searchplayers.php", t=org_name, p=query)
            for player in (data or {}).get("player") or []:
                sport = (player.get("strSport") or "").lower()
                position = (player.get("strPosition") or "").lower()
                if any(marker in sport for marker in _MMA_MARKERS) or "fighter" in position:
                    fighter = self._map_fighter(player)
                    if fighter is not None:
                        fighters.append(fighter)
        return fighters

    async def fetch_fighter(self, external_id: str) -> ExternalFighterRecord | None:
        data = await self._fetch_json("lookupplayer.php", id=external_id)
        players = (data or {}).get("players") or []
        if not players:
            return None
        return self._map_fighter(players[0])

    async def health_check(self) -> bool:
        return await self._fetch_json("lookupleague.php", id=LEAGUE_IDS["UFC"]) is not None

    @staticmethod
    def _event_timestamp(raw_event: dict[str, Any]) -> str | None:
        timestamp = clean_text(raw_event.get("strTimestamp"))
        if timestamp:
            return timestamp
        event_date = clean_text(raw_event.get("dateEvent"))
        if not event_date:
            return None
        event_time = clean_text(raw_event.get("strTime"))
        if event_time:
            if len(event_time) == 5:
                event_time = f"{event_time}:00"
            return f"{event_date}T{event_time}Z"
        return f"{event_date}T00:00:00Z"

    @staticmethod
    def _event_status(raw_event: dict[str, Any]) -> EventStatus:
        status = raw_event.get("strStatus")
        if status in _COMPLETED_STATUSES or raw_event.get("intHomeScore") is not None:
            return EventStatus.COMPLETED
        if status in _CANCELLED_STATUSES:
            return EventStatus.CANCELLED
        return EventStatus.SCHEDULED

    def _map_event(self, raw_event: dict[str, Any], org_name: str) -> ExternalEventRecord | None:
        starts_at = parse_event_datetime(self._event_timestamp(raw_event))
        if not raw_event.get("idEvent") or starts_at is None:
            logger.warning(
                "Skipping TheSportsDB event without id/date: %s", raw_event.get("idEvent")
            )
            return None
        try:
            return ExternalEventRecord(
                external_id=str(raw_event["idEvent"]),
                organization_ref=_ORGANIZATION_REFS.get(org_name, org_name),
                name=clean_text(raw_event.get("strEvent"))
                or clean_text(raw_event.get("strEventAlternate"))
                or f"{org_name} Event",
                date_time_utc=starts_at,
                venue=clean_text(raw_event.get("strVenue")),
                city=clean_text(raw_event.get("strCity")),
                country=clean_text(raw_event.get("strCountry")) or "USA",
                status=self._event_status(raw_event),
                description=clean_text(raw_event.get("strDescriptionEN")),
                poster_url=clean_text(raw_event.get("strPoster") or raw_event.get("strThumb")),
            )
        except ValidationError as exc:
            logger.warning("Skipping malformed TheSportsDB event: %s", exc)
            return None

    @staticmethod
    def _map_fighter(player: dict[str, Any]) -> ExternalFighterRecord | None:
        first_name, last_name = split_full_name(player.get("strPlayer"))
        if not player.get("idPlayer") or not first_name:
            return None

        birth_date: date | None = None
        born = clean_text(player.get("dateBorn"))
        if born and born != "0000-00-00":
            try:
                birth_date = date.fromisoformat(born)
            except ValueError:
                logger.debug("Unparseable birth date for %s: %s", player.get("idPlayer"), born)

        side = (clean_text(player.get("strSide")) or "").upper()
        stance = Stance(side) if side in Stance.__members__ else Stance.UNKNOWN

        return ExternalFighterRecord(
            external_id=str(player["idPlayer"]),
            first_name=first_name,
            last_name=last_name,
            birth_date=birth_date,
            country=clean_text(player.get("strNationality")) or "Unknown",
            city=clean_text(player.get("strBirthLocation")),
            team=clean_text(player.get("strTeam")),
            height_cm=parse_height_cm(player.get("strHeight")),
            weight_class=weight_to_division(player.get("strWeight")) or "Unknown",
            stance=stance,
            image_url=clean_text(player.get("strThumb") or player.get("strCutout")),
        )
