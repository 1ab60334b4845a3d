"""Pydantic records produced by the provider adapters.

Each record is one observation of an entity from one external source. Records
are rebuilt on every adapter call and are reconciled against the persisted
store by the sync services in :mod:`backend.services.sync`.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class EventStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class FightResultStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    DRAW = "DRAW"
    NO_CONTEST = "NO_CONTEST"
    CANCELLED = "CANCELLED"


class OrganizationLevel(str, Enum):
    MAJOR = "MAJOR"
    REGIONAL = "REGIONAL"
    LOCAL = "LOCAL"
    AMATEUR = "AMATEUR"


class Stance(str, Enum):
    ORTHODOX = "ORTHODOX"
    SOUTHPAW = "SOUTHPAW"
    SWITCH = "SWITCH"
    OTHER = "OTHER"
    UNKNOWN = "UNKNOWN"


class CardSection(str, Enum):
    """Grouping of fights within an event, ordered main card first."""

    MAIN = "MAIN"
    PRELIM = "PRELIM"
    EARLY_PRELIM = "EARLY_PRELIM"

    @property
    def ordinal_base(self) -> int:
        return _CARD_SECTION_ORDINAL_BASES[self]


_CARD_SECTION_ORDINAL_BASES: dict[CardSection, int] = {
    CardSection.MAIN: 100,
    CardSection.PRELIM: 200,
    CardSection.EARLY_PRELIM: 300,
}


class ExternalOrganizationRecord(BaseModel):
    """Organization as described by a provider."""

    external_id: str
    name: str
    short_name: str
    country: str = "USA"
    city: str | None = None
    website_url: str | None = None
    logo_url: str | None = None
    level: OrganizationLevel = OrganizationLevel.MAJOR


class ExternalEventRecord(BaseModel):
    """Single event observation.

    ``organization_ref`` carries the provider's name or shortcode for the
    promotion (``UFC``, ``BELLATOR`` ...), never an internal store id.
    """

    external_id: str
    organization_ref: str
    name: str
    date_time_utc: datetime
    venue: str | None = None
    city: str | None = None
    country: str = "USA"
    status: EventStatus = EventStatus.SCHEDULED
    description: str | None = None
    poster_url: str | None = None
    is_amateur_event: bool = False

    @field_validator("date_time_utc")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class ExternalFighterRecord(BaseModel):
    """Fighter observation taken from a fight corner or a roster scrape."""

    external_id: str
    first_name: str
    last_name: str
    nickname: str | None = None
    birth_date: date | None = None
    country: str = "Unknown"
    city: str | None = None
    team: str | None = None
    height_cm: int | None = None
    reach_cm: int | None = None
    stance: Stance = Stance.UNKNOWN
    weight_class: str = "Unknown"
    record: str | None = Field(None, description="Raw 'W-L-D' record string")
    wins: int = 0
    losses: int = 0
    draws: int = 0
    no_contests: int = 0
    image_url: str | None = None
    is_pro: bool = True

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class AthleteProfile(BaseModel):
    """Partial fighter data scraped from a single UFC.com athlete page.

    Every field is optional; ``None`` means the page did not expose it.
    """

    slug: str
    nickname: str | None = None
    weight_class: str | None = None
    country: str | None = None
    image_url: str | None = None
    wins: int | None = None
    losses: int | None = None
    draws: int | None = None

    @property
    def has_record(self) -> bool:
        return self.wins is not None or self.losses is not None


class FightResult(BaseModel):
    winner_external_id: str | None = None
    method: str | None = None
    method_detail: str | None = None
    round: int | None = None
    time: str | None = None


class ExternalFightRecord(BaseModel):
    """Single bout observation with both corner descriptors."""

    external_id: str
    event_external_id: str
    fighter_a: ExternalFighterRecord
    fighter_b: ExternalFighterRecord
    weight_class: str = "Unknown"
    is_title_fight: bool = False
    is_main_event: bool = False
    is_co_main_event: bool = False
    card_section: CardSection = CardSection.MAIN
    order: int = 0
    result_status: FightResultStatus = FightResultStatus.SCHEDULED
    result: FightResult | None = None
