"""Field extractors for UFC.com markup.

Every extractor is a small named function keyed on one known CSS class or
URL pattern. The markup is not a stable contract, so a missing match returns
``None`` (or an empty list) and the caller keeps going with what it has.
"""

from __future__ import annotations

import logging
import re

from parsel import Selector

from scraper.models.records import (
    CardSection,
    ExternalFightRecord,
    ExternalFighterRecord,
    FightResult,
    FightResultStatus,
)
from scraper.utils.parser import (
    EMPTY_RECORD,
    RecordCounts,
    clean_text,
    fighter_slug,
    name_from_slug,
    parse_record,
    split_full_name,
    to_headshot_url,
)

logger = logging.getLogger(__name__)

HEADSHOT_BASE_URL = "https://ufc.com/images/styles/event_results_athlete_headshot/s3/"

_SITEMAP_ATHLETE_RE = re.compile(r"<loc>https://www\.ufc\.com/athlete/([^<]+)</loc>")
_VIEW_PROFILE_RE = re.compile(r'href="/athlete/([^"]+)"[^>]*>\s*View Profile\s*</a>')
_NICKNAME_RE = re.compile(r'<p class="hero-profile__nickname">\s*"([^"]+)"\s*</p>')
_WEIGHT_CLASS_RE = re.compile(
    r'<p class="hero-profile__tag">\s*([^<]+?)\s*Division', re.IGNORECASE
)
_DIVISION_RECORD_RE = re.compile(
    r'<p class="hero-profile__division-title">[^<]*</p>[\s\S]*?'
    r"(\d+)\s*-\s*(\d+)(?:\s*-\s*(\d+))?",
    re.IGNORECASE,
)
_SPAN_RECORD_RE = re.compile(
    r"(\d+)\s*<span[^>]*>-</span>\s*(\d+)(?:\s*<span[^>]*>-</span>\s*(\d+))?"
)
_BIO_COUNTRY_RES = (
    re.compile(
        r'Place of Birth[\s\S]*?class="c-bio__text"[^>]*>([^<]+)<', re.IGNORECASE
    ),
    re.compile(
        r'Fighting out of[\s\S]*?class="c-bio__text"[^>]*>([^<]+)<', re.IGNORECASE
    ),
    re.compile(r'Venant de[\s\S]*?class="c-bio__text"[^>]*>([^<]+)<', re.IGNORECASE),
)
_HEADSHOT_RE = re.compile(r"event_results_athlete_headshot/s3/([^\"'?\s]+)")
_WEIGHT_CLASS_SUFFIX_RE = re.compile(r"\s*(?:interim\s+)?(?:title\s+)?bout\s*$", re.I)

_CARD_SECTIONS: tuple[tuple[CardSection, str], ...] = (
    (CardSection.MAIN, "#main-card, .main-card"),
    (CardSection.PRELIM, "#prelims-card, .fight-card-prelims"),
    (CardSection.EARLY_PRELIM, "#early-prelims, .fight-card-prelims-early"),
)


# -- Athlete pages ---------------------------------------------------------


def extract_nickname(html: str) -> str | None:
    match = _NICKNAME_RE.search(html)
    if match:
        return clean_text(match.group(1))
    raw = clean_text(Selector(text=html).css(".hero-profile__nickname::text").get())
    if raw:
        return clean_text(raw.strip("\"“”")) or None
    return None


def extract_weight_class(html: str) -> str | None:
    match = _WEIGHT_CLASS_RE.search(html)
    if not match:
        return None
    return clean_text(match.group(1))


def extract_record(html: str) -> RecordCounts | None:
    """Pull ``W-L-D`` from the hero block, falling back to the span-dash layout."""
    match = _DIVISION_RECORD_RE.search(html) or _SPAN_RECORD_RE.search(html)
    if not match:
        return None
    wins, losses, draws = (int(group or 0) for group in match.groups())
    return RecordCounts(wins, losses, draws)


def extract_country(html: str) -> str | None:
    """Return the country portion of the bio location (``"Dublin, Ireland"`` -> ``"Ireland"``)."""
    for pattern in _BIO_COUNTRY_RES:
        match = pattern.search(html)
        if not match:
            continue
        location = clean_text(match.group(1))
        if location:
            return location.split(",")[-1].strip()
    return None


def extract_headshot_url(html: str) -> str | None:
    match = _HEADSHOT_RE.search(html)
    if not match:
        return None
    return f"{HEADSHOT_BASE_URL}{match.group(1)}"


# -- Listing pages -----------------------------------------------------------


def parse_sitemap_athlete_slugs(xml: str) -> list[str]:
    """Return unique athlete slugs in sitemap order."""
    slugs: list[str] = []
    seen: set[str] = set()
    for raw_slug in _SITEMAP_ATHLETE_RE.findall(xml):
        slug = raw_slug.strip()
        if not slug or '"' in slug or slug in seen:
            continue
        seen.add(slug)
        slugs.append(slug)
    return slugs


def stub_from_slug(slug: str) -> ExternalFighterRecord | None:
    first_name, last_name = name_from_slug(slug)
    if not first_name or not last_name:
        return None
    return ExternalFighterRecord(external_id=slug, first_name=first_name, last_name=last_name)


def _slug_from_href(href: str | None) -> str | None:
    href = clean_text(href)
    if not href:
        return None
    slug = href.split("/athlete/", 1)[-1].strip("/")
    if not slug or "/" in slug:
        return None
    return slug


def parse_roster_cards(html: str) -> list[ExternalFighterRecord]:
    """Parse athlete flip cards from ``/athletes/all``.

    When no card matches, falls back to bare "View Profile" links and derives
    names from the slugs.
    """
    selector = Selector(text=html)
    fighters: list[ExternalFighterRecord] = []
    seen: set[str] = set()

    for card in selector.css(".c-listing-athlete-flipcard"):
        slug = _slug_from_href(card.css("a[href*='/athlete/']::attr(href)").get())
        if not slug or slug in seen:
            continue
        first_name, last_name = split_full_name(
            card.css(".c-listing-athlete__name::text").get()
        )
        if not first_name:
            first_name, last_name = name_from_slug(slug)
        record_text = clean_text(card.css(".c-listing-athlete__record::text").get())
        counts = parse_record(record_text)
        seen.add(slug)
        fighters.append(
            ExternalFighterRecord(
                external_id=slug,
                first_name=first_name,
                last_name=last_name,
                weight_class=clean_text(
                    card.css(".c-listing-athlete__title .field__item::text").get()
                )
                or "Unknown",
                record=record_text,
                wins=counts.wins,
                losses=counts.losses,
                draws=counts.draws,
            )
        )

    if fighters:
        return fighters

    for slug in _VIEW_PROFILE_RE.findall(html):
        slug = slug.strip()
        if slug in seen:
            continue
        seen.add(slug)
        stub = stub_from_slug(slug)
        if stub is not None:
            fighters.append(stub)
    return fighters


def parse_rankings_athletes(html: str) -> list[ExternalFighterRecord]:
    """Return ranked athletes from ``/rankings`` without duplicates."""
    selector = Selector(text=html)
    fighters: list[ExternalFighterRecord] = []
    seen: set[str] = set()

    for link in selector.css("a[href*='/athlete/']"):
        slug = _slug_from_href(link.attrib.get("href"))
        if not slug or slug in seen:
            continue
        name = clean_text(link.css("::text").get())
        if name and len(name) > 2:
            first_name, last_name = split_full_name(name)
        else:
            first_name, last_name = name_from_slug(slug)
        if not first_name or not last_name:
            continue
        seen.add(slug)
        fighters.append(
            ExternalFighterRecord(external_id=slug, first_name=first_name, last_name=last_name)
        )
    return fighters


# -- Event pages -----------------------------------------------------------


def normalize_bout_label(label: str | None) -> tuple[str, bool]:
    """Split ``"Flyweight Title Bout"`` into ``("Flyweight", True)``."""
    text = clean_text(label)
    if not text:
        return "Unknown", False
    is_title = "title" in text.lower()
    weight_class = _WEIGHT_CLASS_SUFFIX_RE.sub("", text).strip()
    weight_class = re.sub(r"\s*(?:interim\s+)?title$", "", weight_class, flags=re.I)
    return weight_class or "Unknown", is_title


def _parse_corner(fight: Selector, corner: str) -> ExternalFighterRecord | None:
    given = clean_text(
        fight.css(
            f".c-listing-fight__corner-name--{corner} .c-listing-fight__corner-given-name::text"
        ).get()
    )
    family = clean_text(
        fight.css(
            f".c-listing-fight__corner-name--{corner} .c-listing-fight__corner-family-name::text"
        ).get()
    )
    if not given and not family:
        given, family = split_full_name(
            " ".join(fight.css(f".c-listing-fight__corner-name--{corner} ::text").getall())
        )
    if not given and not family:
        return None

    first_name, last_name = given or "", family or ""
    record_text = clean_text(
        fight.css(f".c-listing-fight__corner-record--{corner}::text").get()
    )
    counts = parse_record(record_text) if record_text else EMPTY_RECORD
    return ExternalFighterRecord(
        external_id=fighter_slug(first_name, last_name),
        first_name=first_name,
        last_name=last_name,
        country=clean_text(
            fight.css(
                f".c-listing-fight__country--{corner} .c-listing-fight__country-text::text"
            ).get()
        )
        or "Unknown",
        record=record_text,
        wins=counts.wins,
        losses=counts.losses,
        draws=counts.draws,
        image_url=to_headshot_url(
            clean_text(
                fight.css(f".c-listing-fight__corner-image--{corner} img::attr(src)").get()
            )
        ),
    )


def _outcome(fight: Selector, corner: str) -> str | None:
    return clean_text(
        " ".join(
            fight.css(
                f".c-listing-fight__corner-body--{corner} .c-listing-fight__outcome-wrapper ::text"
            ).getall()
        )
    )


def _parse_result(
    fight: Selector, fighter_a: ExternalFighterRecord, fighter_b: ExternalFighterRecord
) -> tuple[FightResultStatus, FightResult | None]:
    outcome_a = (_outcome(fight, "red") or "").lower()
    outcome_b = (_outcome(fight, "blue") or "").lower()
    if not outcome_a and not outcome_b:
        return FightResultStatus.SCHEDULED, None

    result = FightResult(
        method=clean_text(fight.css(".c-listing-fight__result-text.method::text").get()),
        time=clean_text(fight.css(".c-listing-fight__result-text.time::text").get()),
    )
    round_text = clean_text(fight.css(".c-listing-fight__result-text.round::text").get())
    if round_text and round_text.isdigit():
        result.round = int(round_text)

    if "draw" in (outcome_a, outcome_b):
        return FightResultStatus.DRAW, result
    if {"nc", "no contest"} & {outcome_a, outcome_b}:
        return FightResultStatus.NO_CONTEST, result
    if outcome_a == "win":
        result.winner_external_id = fighter_a.external_id
    elif outcome_b == "win":
        result.winner_external_id = fighter_b.external_id
    return FightResultStatus.COMPLETED, result


def parse_fight_card(html: str, event_external_id: str) -> list[ExternalFightRecord]:
    """Parse the main, prelim and early-prelim sections of an event page.

    Each section is parsed on its own and an empty section is skipped. The
    ordinal is the section base plus the fight's position within the section;
    the first two main-card bouts are the main and co-main events.
    """
    selector = Selector(text=html)
    fights: list[ExternalFightRecord] = []

    for section, css in _CARD_SECTIONS:
        container = selector.css(css)
        if not container:
            continue
        rows = container[0].css(".c-listing-fight")
        if not rows:
            logger.debug("No fights in %s section for %s", section.value, event_external_id)
            continue

        position = 0
        for row in rows:
            fighter_a = _parse_corner(row, "red")
            fighter_b = _parse_corner(row, "blue")
            if fighter_a is None or fighter_b is None:
                logger.warning(
                    "Skipping fight with missing corner in %s (%s)",
                    event_external_id,
                    section.value,
                )
                continue

            weight_class, is_title = normalize_bout_label(
                row.css(".c-listing-fight__class-text::text").get()
            )
            status, result = _parse_result(row, fighter_a, fighter_b)
            fight_id = clean_text(row.attrib.get("data-fmid")) or (
                f"{event_external_id}-{fighter_a.external_id}-vs-{fighter_b.external_id}"
            )
            fights.append(
                ExternalFightRecord(
                    external_id=fight_id,
                    event_external_id=event_external_id,
                    fighter_a=fighter_a,
                    fighter_b=fighter_b,
                    weight_class=weight_class,
                    is_title_fight=is_title,
                    is_main_event=section is CardSection.MAIN and position == 0,
                    is_co_main_event=section is CardSection.MAIN and position == 1,
                    card_section=section,
                    order=section.ordinal_base + position,
                    result_status=status,
                    result=result,
                )
            )
            position += 1

    return fights
