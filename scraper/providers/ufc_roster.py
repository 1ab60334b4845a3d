"""UFC.com roster scraper.

Walks the public sitemap, athlete listing, rankings and athlete pages. Every
request is throttled by a fixed delay and every failure yields an empty
result so the roster sync can keep going.
"""

from __future__ import annotations

import logging

from scraper.models.records import (
    AthleteProfile,
    ExternalEventRecord,
    ExternalFightRecord,
    ExternalFighterRecord,
    ExternalOrganizationRecord,
)
from scraper.providers.base import HttpProvider
from scraper.providers.ufc_scraper import curated_organizations
from scraper.utils.ufc_parser import (
    extract_country,
    extract_headshot_url,
    extract_nickname,
    extract_record,
    extract_weight_class,
    parse_rankings_athletes,
    parse_roster_cards,
    parse_sitemap_athlete_slugs,
    stub_from_slug,
)

logger = logging.getLogger(__name__)


class UFCRosterScraper(HttpProvider):
    name = "UFC"

    @property
    def base_url(self) -> str:
        return self.settings.ufc_base_url

    async def scrape_all_fighters(self) -> list[ExternalFighterRecord]:
        """Collect every athlete slug from the sitemap and turn it into a stub."""
        slugs: list[str] = []
        seen: set[str] = set()

        for page in range(1, self.settings.max_sitemap_pages + 1):
            xml = await self.fetch_text(f"{self.base_url}/sitemap.xml", page=page)
            if xml is None:
                break

            new_slugs = [slug for slug in parse_sitemap_athlete_slugs(xml) if slug not in seen]
            if not new_slugs:
                logger.info("Sitemap page %d: no athletes, stopping", page)
                break

            seen.update(new_slugs)
            slugs.extend(new_slugs)
            logger.info(
                "Sitemap page %d: %d athletes (total: %d)", page, len(new_slugs), len(slugs)
            )
            await self._sleep(self.settings.page_delay_seconds)

        fighters = [stub for stub in (stub_from_slug(slug) for slug in slugs) if stub]
        logger.info("Found %d fighters in sitemap", len(fighters))
        return fighters

    async def scrape_roster_page(self, page: int = 0) -> list[ExternalFighterRecord]:
        html = await self.fetch_text(f"{self.base_url}/athletes/all", page=page)
        if html is None:
            return []
        return parse_roster_cards(html)

    async def scrape_fighter_details(self, slug: str) -> AthleteProfile | None:
        html = await self.fetch_text(f"{self.base_url}/athlete/{slug}")
        if html is None:
            return None
        return AthleteProfile(
            slug=slug,
            nickname=extract_nickname(html),
            weight_class=extract_weight_class(html) or "Unknown",
            country=extract_country(html) or "Unknown",
            image_url=extract_headshot_url(html),
        )

    async def scrape_top_fighters(self) -> list[ExternalFighterRecord]:
        html = await self.fetch_text(f"{self.base_url}/rankings")
        if html is None:
            return []
        fighters = parse_rankings_athletes(html)
        logger.info("Found %d fighters in rankings", len(fighters))
        return fighters

    async def scrape_all_records(self) -> dict[str, AthleteProfile]:
        """Map slug -> record for every athlete listed on the roster pages."""
        records: dict[str, AthleteProfile] = {}

        for page in range(self.settings.max_roster_pages):
            cards = await self.scrape_roster_page(page)
            page_records = [card for card in cards if card.record]
            if not page_records:
                logger.info("Roster page %d: no records found, stopping", page)
                break

            for card in page_records:
                records[card.external_id] = AthleteProfile(
                    slug=card.external_id,
                    weight_class=card.weight_class,
                    wins=card.wins,
                    losses=card.losses,
                    draws=card.draws,
                )
            logger.info(
                "Roster page %d: %d records (total: %d)", page, len(page_records), len(records)
            )
            await self._sleep(self.settings.page_delay_seconds)

        return records

    async def fetch_fighter_record(self, slug: str) -> AthleteProfile | None:
        """Record, division, birthplace country and headshot from an athlete page."""
        html = await self.fetch_text(f"{self.base_url}/athlete/{slug}")
        if html is None:
            return None

        profile = AthleteProfile(
            slug=slug,
            weight_class=extract_weight_class(html),
            country=extract_country(html),
            image_url=extract_headshot_url(html),
        )
        record = extract_record(html)
        if record is not None:
            profile.wins, profile.losses, profile.draws = record
        return profile

    # The roster scraper carries no event data.

    async def fetch_upcoming_events(self) -> list[ExternalEventRecord]:
        return []

    async def fetch_past_events(self, limit: int = 5) -> list[ExternalEventRecord]:
        return []

    async def fetch_fight_card_for_event(
        self, event_external_id: str
    ) -> list[ExternalFightRecord]:
        return []

    async def fetch_organizations(self) -> list[ExternalOrganizationRecord]:
        return [org for org in curated_organizations() if org.short_name == "UFC"]

    async def health_check(self) -> bool:
        return await self.fetch_text(f"{self.base_url}/rankings") is not None
