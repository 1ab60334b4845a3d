"""JSON API adapters: retry policy, SportsData.io and TheSportsDB mapping."""

from __future__ import annotations

from datetime import date, datetime, timezone

import httpx
import pytest

from scraper.config import ScraperSettings
from scraper.models.records import EventStatus, FightResultStatus, Stance
from scraper.providers import (
    ApiProvider,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderRequestError,
    SportsDataIoProvider,
    TheSportsDBProvider,
    UFCScraperProvider,
    get_provider,
)

SETTINGS = ScraperSettings(
    retry_attempts=3,
    retry_base_delay=1.0,
    sportsdataio_base_url="https://sdio.test/v3/mma",
    sportsdataio_api_key="",
    thesportsdb_base_url="https://tsdb.test/api/v1/json/3",
)
URL = "https://api.test/resource"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _sequence(*responses: httpx.Response):
    remaining = list(responses)
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return remaining.pop(0)

    handler.calls = calls  # type: ignore[attr-defined]
    return handler


# -- retry policy ---------------------------------------------------------


@pytest.mark.asyncio
async def test_retry_waits_for_retry_after_on_rate_limit(no_sleep):
    """A 429 waits for the advertised Retry-After before trying again."""
    handler = _sequence(
        httpx.Response(429, headers={"Retry-After": "7"}),
        httpx.Response(200, json={"ok": True}),
    )

    async with _client(handler) as client:
        provider = ApiProvider(client, settings=SETTINGS, sleep=no_sleep)
        payload = await provider.fetch_with_retry(URL)

    assert payload == {"ok": True}
    assert no_sleep.delays == [7.0]
    assert len(handler.calls) == 2


@pytest.mark.asyncio
async def test_retry_backs_off_linearly_and_raises_last_error(no_sleep):
    """Server errors back off 1s, 2s and the final failure is raised without a trailing wait."""
    handler = _sequence(*(httpx.Response(500) for _ in range(3)))

    async with _client(handler) as client:
        provider = ApiProvider(client, settings=SETTINGS, sleep=no_sleep)
        with pytest.raises(ProviderRequestError) as excinfo:
            await provider.fetch_with_retry(URL)

    assert excinfo.value.status_code == 500
    assert excinfo.value.url == URL
    assert no_sleep.delays == [1.0, 2.0]
    assert len(handler.calls) == 3


@pytest.mark.asyncio
async def test_retry_exhausted_by_rate_limits_reports_429(no_sleep):
    """Persistent rate limiting surfaces as a 429 request error."""
    handler = _sequence(*(httpx.Response(429) for _ in range(3)))

    async with _client(handler) as client:
        provider = ApiProvider(client, settings=SETTINGS, sleep=no_sleep)
        with pytest.raises(ProviderRequestError) as excinfo:
            await provider.fetch_with_retry(URL)

    assert excinfo.value.status_code == 429
    assert no_sleep.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_retry_wraps_transport_errors(no_sleep):
    """Connection failures are retried and then wrapped in a request error."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _client(handler) as client:
        provider = ApiProvider(client, settings=SETTINGS, sleep=no_sleep)
        with pytest.raises(ProviderRequestError, match="after 3 attempts"):
            await provider.fetch_with_retry(URL)

    assert no_sleep.delays == [1.0, 2.0]


# -- SportsData.io --------------------------------------------------------

SCHEDULE = [
    {"EventId": 1, "Name": "UFC 300", "DateTime": "2024-04-13T22:00:00", "Status": "Final"},
    {"EventId": 2, "Name": "UFC 303", "DateTime": "2024-06-29T22:00:00", "Status": "Final"},
    {"EventId": 3, "Name": "UFC 310", "DateTime": "2024-12-07T22:00:00", "Status": "Scheduled"},
    {"EventId": 4, "Name": "UFC 309", "DateTime": "2024-11-16T22:00:00", "Status": "Scheduled"},
    {"EventId": None, "Name": "Broken", "DateTime": "2024-01-01T00:00:00"},
]

EVENT_DETAIL = {
    "EventId": 3,
    "Fighters": [
        {"FighterId": 10, "FirstName": "Alexandre", "LastName": "Pantoja", "Wins": 28, "Losses": 5},
        {"FighterId": 11, "FirstName": "Kai", "LastName": "Asakura", "Stance": "Orthodox"},
        {"FighterId": 12, "FirstName": "Shavkat", "LastName": "Rakhmonov"},
    ],
    "Fights": [
        {
            "FightId": 900,
            "FighterIdA": 10,
            "FighterIdB": 11,
            "WeightClass": "Flyweight",
            "IsTitleFight": True,
            "IsMainEvent": True,
            "ResultStatus": "Final",
            "WinnerId": 10,
            "Method": "Submission",
            "Round": 2,
            "Time": "2:05",
        },
        {"FightId": 901, "FighterIdA": 12, "FighterIdB": 99},
        {"FightId": 902, "FighterIdA": 12, "FighterIdB": 11, "WeightClass": "Welterweight"},
    ],
}


def _sportsdataio(client: httpx.AsyncClient, no_sleep, **kwargs) -> SportsDataIoProvider:
    kwargs.setdefault("api_key", "secret")
    return SportsDataIoProvider(client, season=2024, settings=SETTINGS, sleep=no_sleep, **kwargs)


@pytest.mark.asyncio
async def test_sportsdataio_without_key_sends_no_requests(no_sleep):
    """An unconfigured adapter returns empty listings and refuses fight cards."""
    handler = _sequence()

    async with _client(handler) as client:
        provider = _sportsdataio(client, no_sleep, api_key="")
        assert await provider.fetch_upcoming_events() == []
        assert await provider.fetch_past_events() == []
        assert await provider.fetch_organizations() == []
        assert await provider.health_check() is False
        with pytest.raises(ProviderNotConfiguredError):
            await provider.fetch_fight_card_for_event("3")

    assert handler.calls == []


@pytest.mark.asyncio
async def test_sportsdataio_schedule_split_by_status(no_sleep):
    """Upcoming lists scheduled events ascending; past lists completed ones newest first."""
    keys: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        keys.append(request.url.params.get("key"))
        assert request.url.path == "/v3/mma/scores/json/Schedule/2024"
        return httpx.Response(200, json=SCHEDULE)

    async with _client(handler) as client:
        provider = _sportsdataio(client, no_sleep)
        upcoming = await provider.fetch_upcoming_events()
        past = await provider.fetch_past_events(limit=1)

    assert [event.external_id for event in upcoming] == ["4", "3"]
    assert all(event.status is EventStatus.SCHEDULED for event in upcoming)
    assert [event.external_id for event in past] == ["2"]
    assert past[0].date_time_utc == datetime(2024, 6, 29, 22, 0, tzinfo=timezone.utc)
    assert set(keys) == {"secret"}


@pytest.mark.asyncio
async def test_sportsdataio_schedule_failure_returns_empty_list(no_sleep):
    """Listing calls swallow the final request error."""

    async with _client(lambda request: httpx.Response(503)) as client:
        provider = _sportsdataio(client, no_sleep)
        assert await provider.fetch_upcoming_events() == []


@pytest.mark.asyncio
async def test_sportsdataio_fight_card_joins_fighters(no_sleep):
    """Fights reference the event's fighter list; unknown corners are skipped."""

    async with _client(lambda request: httpx.Response(200, json=EVENT_DETAIL)) as client:
        provider = _sportsdataio(client, no_sleep)
        fights = await provider.fetch_fight_card_for_event("3")

    assert [fight.external_id for fight in fights] == ["900", "902"]
    main_event, other = fights
    assert main_event.fighter_a.full_name == "Alexandre Pantoja"
    assert main_event.fighter_a.wins == 28
    assert main_event.fighter_b.stance is Stance.ORTHODOX
    assert main_event.is_title_fight is True
    assert main_event.result_status is FightResultStatus.COMPLETED
    assert main_event.result.winner_external_id == "10"
    assert main_event.order == 100
    assert other.result_status is FightResultStatus.SCHEDULED
    assert other.result is None
    assert other.order == 102


@pytest.mark.asyncio
async def test_sportsdataio_fight_card_propagates_request_errors(no_sleep):
    """Fight card failures reach the caller so the sync can record them."""

    async with _client(lambda request: httpx.Response(500)) as client:
        provider = _sportsdataio(client, no_sleep)
        with pytest.raises(ProviderRequestError):
            await provider.fetch_fight_card_for_event("3")


@pytest.mark.asyncio
async def test_sportsdataio_search_matches_full_name_substring(no_sleep):
    """Fighter search filters the fighter list by name."""
    fighters = EVENT_DETAIL["Fighters"]

    async with _client(lambda request: httpx.Response(200, json=fighters)) as client:
        provider = _sportsdataio(client, no_sleep)
        matches = await provider.search_fighters("pantoja")

    assert [fighter.external_id for fighter in matches] == ["10"]


# -- TheSportsDB ----------------------------------------------------------


def _thesportsdb_handler(request: httpx.Request) -> httpx.Response:
    endpoint = request.url.path.rsplit("/", 1)[-1]
    league_id = request.url.params.get("id")

    if endpoint == "eventsnextleague.php":
        events = {
            "4443": [
                {
                    "idEvent": "2052001",
                    "strEvent": "UFC 310 Pantoja vs Asakura",
                    "strTimestamp": "2024-12-07T22:00:00",
                    "strVenue": "T-Mobile Arena",
                    "strCountry": "United States",
                }
            ],
            "4444": [
                {
                    "idEvent": "2052002",
                    "strEvent": "Bellator Champions Series",
                    "dateEvent": "2024-11-30",
                    "strTime": "19:00",
                    "strStatus": "Postponed",
                }
            ],
        }.get(league_id)
        return httpx.Response(200, json={"events": events})

    if endpoint == "lookupleague.php":
        if league_id != "4443":
            return httpx.Response(200, json={"leagues": None})
        return httpx.Response(
            200,
            json={
                "leagues": [
                    {
                        "idLeague": "4443",
                        "strLeague": "UFC",
                        "strCountry": "United States",
                        "strWebsite": "www.ufc.com",
                        "strBadge": "https://tsdb.test/badge.png",
                    }
                ]
            },
        )

    if endpoint == "lookupplayer.php":
        return httpx.Response(
            200,
            json={
                "players": [
                    {
                        "idPlayer": "34145937",
                        "strPlayer": "Jon Jones",
                        "dateBorn": "1987-07-19",
                        "strNationality": "United States",
                        "strHeight": "6 ft 4 in",
                        "strWeight": "205 lbs",
                        "strSide": "Orthodox",
                    }
                ]
            },
        )

    return httpx.Response(404)


@pytest.mark.asyncio
async def test_thesportsdb_events_tagged_with_curated_short_names():
    """League events carry the organization short name and come back in date order."""

    async with _client(_thesportsdb_handler) as client:
        provider = TheSportsDBProvider(client, settings=SETTINGS)
        events = await provider.fetch_upcoming_events()
        card = await provider.fetch_fight_card_for_event("2052001")

    assert [(event.external_id, event.organization_ref) for event in events] == [
        ("2052002", "Bellator"),
        ("2052001", "UFC"),
    ]
    assert events[0].date_time_utc == datetime(2024, 11, 30, 19, 0, tzinfo=timezone.utc)
    assert events[0].status is EventStatus.CANCELLED
    assert events[1].venue == "T-Mobile Arena"
    assert card == []


@pytest.mark.asyncio
async def test_thesportsdb_organizations_and_fighter_lookup():
    """League lookups become organizations; players map to fighter records."""

    async with _client(_thesportsdb_handler) as client:
        provider = TheSportsDBProvider(client, settings=SETTINGS)
        organizations = await provider.fetch_organizations()
        fighter = await provider.fetch_fighter("34145937")
        healthy = await provider.health_check()

    assert [(org.short_name, org.website_url) for org in organizations] == [
        ("UFC", "https://www.ufc.com")
    ]
    assert fighter is not None
    assert (fighter.first_name, fighter.last_name) == ("Jon", "Jones")
    assert fighter.birth_date == date(1987, 7, 19)
    assert fighter.height_cm == 193
    assert fighter.weight_class == "Light Heavyweight"
    assert fighter.stance is Stance.ORTHODOX
    assert healthy is True


# -- registry -------------------------------------------------------------


def test_get_provider_resolves_names_case_insensitively():
    provider = get_provider(" UFC ", settings=SETTINGS)
    assert isinstance(provider, UFCScraperProvider)


def test_get_provider_rejects_unknown_names():
    with pytest.raises(ProviderError, match="Unknown provider"):
        get_provider("sherdog")
