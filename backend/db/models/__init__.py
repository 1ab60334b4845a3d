from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    pass


class SyncedEntityMixin:
    """Columns shared by every synced entity.

    ``external_ids`` maps a provider name (``UFC``, ``TheSportsDB`` ...) to the
    id that provider uses for the row. Keys are only ever added, see
    :func:`backend.db.store.merge_external_ids`.
    """

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    external_ids: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )


class Organization(SyncedEntityMixin, Base):
    __tablename__ = "organizations"
    __table_args__ = (UniqueConstraint("name", name="uq_organizations_name"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    short_name: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    country: Mapped[str] = mapped_column(String(100), nullable=False, default="USA")
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    website_url: Mapped[str | None] = mapped_column(String, nullable=True)
    logo_url: Mapped[str | None] = mapped_column(String, nullable=True)
    level: Mapped[str] = mapped_column(
        String(20), nullable=False, default="MAJOR", doc="MAJOR, REGIONAL, LOCAL or AMATEUR"
    )

    events: Mapped[list[Event]] = relationship("Event", back_populates="organization")


class Event(SyncedEntityMixin, Base):
    __tablename__ = "events"
    __table_args__ = (UniqueConstraint("slug", name="uq_events_slug"),)

    organization_id: Mapped[str] = mapped_column(
        ForeignKey("organizations.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    date_time_utc: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    venue: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="SCHEDULED", index=True
    )  # SCHEDULED, COMPLETED or CANCELLED
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    poster_url: Mapped[str | None] = mapped_column(String, nullable=True)
    is_amateur_event: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    organization: Mapped[Organization] = relationship("Organization", back_populates="events")
    fights: Mapped[list[Fight]] = relationship("Fight", back_populates="event")


class Fighter(SyncedEntityMixin, Base):
    __tablename__ = "fighters"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    nickname: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country: Mapped[str] = mapped_column(String(100), nullable=False, default="Unknown")
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    team: Mapped[str | None] = mapped_column(String(255), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    height_cm: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reach_cm: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stance: Mapped[str] = mapped_column(String(20), nullable=False, default="UNKNOWN")
    weight_class: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="Unknown",
        index=True,
        doc="Stored in the localized (French) form for roster syncs",
    )
    pro_wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pro_losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pro_draws: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pro_no_contests: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    image_url: Mapped[str | None] = mapped_column(String, nullable=True)
    is_pro: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class Fight(SyncedEntityMixin, Base):
    __tablename__ = "fights"
    __table_args__ = (
        UniqueConstraint(
            "event_id",
            "fighter_a_id",
            "fighter_b_id",
            name="uq_fights_event_fighters",
        ),
    )

    event_id: Mapped[str] = mapped_column(ForeignKey("events.id"), nullable=False, index=True)
    fighter_a_id: Mapped[str] = mapped_column(ForeignKey("fighters.id"), nullable=False)
    fighter_b_id: Mapped[str] = mapped_column(ForeignKey("fighters.id"), nullable=False)
    weight_class: Mapped[str] = mapped_column(String(50), nullable=False, default="Unknown")
    is_title_fight: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_main_event: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_co_main_event: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    card_section: Mapped[str] = mapped_column(String(20), nullable=False, default="MAIN")
    ordinal: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, doc="Card section base (100/200/300) plus position"
    )
    result_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="SCHEDULED"
    )
    winner_id: Mapped[str | None] = mapped_column(ForeignKey("fighters.id"), nullable=True)
    method: Mapped[str | None] = mapped_column(String(100), nullable=True)
    method_detail: Mapped[str | None] = mapped_column(String(255), nullable=True)
    round: Mapped[int | None] = mapped_column(Integer, nullable=True)
    time: Mapped[str | None] = mapped_column(String(10), nullable=True)

    event: Mapped[Event] = relationship("Event", back_populates="fights")
    fighter_a: Mapped[Fighter] = relationship("Fighter", foreign_keys=[fighter_a_id])
    fighter_b: Mapped[Fighter] = relationship("Fighter", foreign_keys=[fighter_b_id])


__all__ = [
    "Base",
    "Event",
    "Fight",
    "Fighter",
    "Organization",
    "SyncedEntityMixin",
]
