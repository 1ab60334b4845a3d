"""Pure text helpers shared by the provider adapters.

Nothing in here raises on malformed input: unknown or unparseable values come
back as ``None`` (or a zeroed record) so one bad field never drops a row.
"""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime, timezone
from typing import NamedTuple

HEADSHOT_STYLE = "event_results_athlete_headshot"

_RECORD_RE = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*-\s*(\d+)")
_HEIGHT_CM_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*cm\s*$", re.IGNORECASE)
_HEIGHT_FT_IN_RE = re.compile(
    r"^\s*(\d+)\s*ft\s*(\d+(?:\.\d+)?)\s*in\s*$", re.IGNORECASE
)
_IMAGE_STYLE_RE = re.compile(r"/styles/[^/]+/")
# ``_L_``/``_R_`` corner marker directly before a date (``12-07``) or an
# upper-case keyword token (``BELT``).
_CORNER_SUFFIX_RE = re.compile(r"_[LR]_(?=\d|[A-Z]{2,})")


class RecordCounts(NamedTuple):
    wins: int
    losses: int
    draws: int


EMPTY_RECORD = RecordCounts(0, 0, 0)


def clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    text = " ".join(value.split())
    if not text or text == "--":
        return None
    return text


def parse_record(value: str | None) -> RecordCounts:
    """Parse ``"W-L-D"`` (optionally followed by descriptor text) into counts.

    >>> parse_record("28-5-0 (W-L-D)")
    RecordCounts(wins=28, losses=5, draws=0)
    """
    if not value:
        return EMPTY_RECORD
    match = _RECORD_RE.match(value)
    if not match:
        return EMPTY_RECORD
    wins, losses, draws = (int(group) for group in match.groups())
    return RecordCounts(wins, losses, draws)


def parse_height_cm(value: str | None) -> int | None:
    """Convert ``"<n> cm"`` or ``"<f> ft <i> in"`` into whole centimetres."""
    if not value:
        return None

    cm_match = _HEIGHT_CM_RE.match(value)
    if cm_match:
        return round(float(cm_match.group(1)))

    ft_match = _HEIGHT_FT_IN_RE.match(value)
    if ft_match:
        feet = int(ft_match.group(1))
        inches = float(ft_match.group(2))
        return round(feet * 30.48 + inches * 2.54)

    return None


def fighter_slug(first_name: str, last_name: str) -> str:
    """Synthesise a stable fighter key when the source offers none.

    Two different fighters with the same name collapse onto the same key.
    """
    full_name = f"{first_name} {last_name}".strip().lower()
    return re.sub(r"\s+", "-", full_name)


def split_full_name(full_name: str | None) -> tuple[str, str]:
    text = clean_text(full_name)
    if not text:
        return "", ""
    first, _, last = text.partition(" ")
    return first, last.strip()


def _capitalize(part: str) -> str:
    return part[:1].upper() + part[1:].lower()


def name_from_slug(slug: str) -> tuple[str, str]:
    """``"jon-jones"`` -> ``("Jon", "Jones")``; trailing parts join the last name."""
    parts = [part for part in slug.strip().split("-") if part]
    if not parts:
        return "", ""
    first = _capitalize(parts[0])
    last = " ".join(_capitalize(part) for part in parts[1:])
    return first, last


def event_slug(name: str) -> str:
    """``"UFC 310: Pantoja vs. Asakura"`` -> ``"ufc-310-pantoja-vs-asakura"``."""
    decomposed = unicodedata.normalize("NFD", name)
    ascii_name = "".join(
        char for char in decomposed if unicodedata.category(char) != "Mn"
    )
    stripped = re.sub(r"[^a-z0-9\s-]", "", ascii_name.lower())
    return re.sub(r"[\s-]+", "-", stripped).strip("-")


def to_headshot_url(url: str | None) -> str | None:
    """Rewrite a full-body UFC image URL into the canonical headshot URL.

    Both corners of a bout resolve to the same per-fighter image because the
    ``_L_``/``_R_`` marker is dropped.
    """
    if not url:
        return None
    headshot = _IMAGE_STYLE_RE.sub(f"/styles/{HEADSHOT_STYLE}/", url, count=1)
    return _CORNER_SUFFIX_RE.sub("_", headshot)


def parse_event_datetime(value: str | None) -> datetime | None:
    """Parse ISO-8601 timestamps (``Z`` suffix allowed) as aware UTC datetimes."""
    text = clean_text(value)
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
