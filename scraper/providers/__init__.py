"""Provider adapters for external MMA data sources."""

from __future__ import annotations

from typing import Any

from scraper.providers.base import (
    ApiProvider,
    FighterLookupProvider,
    HttpProvider,
    MmaDataProvider,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderRequestError,
)
from scraper.providers.sportsdataio import SportsDataIoProvider
from scraper.providers.thesportsdb import TheSportsDBProvider
from scraper.providers.ufc_roster import UFCRosterScraper
from scraper.providers.ufc_scraper import UFCScraperProvider

PROVIDERS: dict[str, type[HttpProvider]] = {
    "ufc": UFCScraperProvider,
    "thesportsdb": TheSportsDBProvider,
    "sportsdataio": SportsDataIoProvider,
}


def get_provider(name: str, **kwargs: Any) -> HttpProvider:
    """Instantiate the adapter registered under ``name`` (case-insensitive)."""

    try:
        provider_cls = PROVIDERS[name.strip().lower()]
    except KeyError:
        known = ", ".join(sorted(PROVIDERS))
        raise ProviderError(f"Unknown provider '{name}' (expected one of: {known})") from None
    return provider_cls(**kwargs)


__all__ = [
    "PROVIDERS",
    "ApiProvider",
    "FighterLookupProvider",
    "HttpProvider",
    "MmaDataProvider",
    "ProviderError",
    "ProviderNotConfiguredError",
    "ProviderRequestError",
    "SportsDataIoProvider",
    "TheSportsDBProvider",
    "UFCRosterScraper",
    "UFCScraperProvider",
    "get_provider",
]
