"""Capability interface and shared HTTP plumbing for provider adapters."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

import httpx

from scraper.config import ScraperSettings
from scraper.config import settings as default_settings
from scraper.models.records import (
    ExternalEventRecord,
    ExternalFightRecord,
    ExternalFighterRecord,
    ExternalOrganizationRecord,
)

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class ProviderError(Exception):
    """Base class for adapter failures that callers may want to catch."""


class ProviderRequestError(ProviderError):
    def __init__(self, url: str, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ProviderNotConfiguredError(ProviderError):
    """Raised when an authenticated adapter is used without credentials."""


@runtime_checkable
class MmaDataProvider(Protocol):
    """Uniform surface every adapter exposes to the sync services.

    The fetch methods return empty (or fallback) lists for expected failures
    instead of raising. ``health_check`` never raises.
    """

    name: str

    async def fetch_upcoming_events(self) -> list[ExternalEventRecord]: ...

    async def fetch_past_events(self, limit: int = 5) -> list[ExternalEventRecord]: ...

    async def fetch_fight_card_for_event(
        self, event_external_id: str
    ) -> list[ExternalFightRecord]: ...

    async def fetch_organizations(self) -> list[ExternalOrganizationRecord]: ...

    async def health_check(self) -> bool: ...

    async def aclose(self) -> None: ...


@runtime_checkable
class FighterLookupProvider(Protocol):
    """Optional extension for adapters that can look fighters up directly."""

    async def search_fighters(self, query: str) -> list[ExternalFighterRecord]: ...

    async def fetch_fighter(self, external_id: str) -> ExternalFighterRecord | None: ...


class HttpProvider:
    """Owns (or borrows) an ``httpx.AsyncClient`` configured for scraping.

    Passing ``client`` lets tests plug in an ``httpx.MockTransport``; passing
    ``sleep`` lets them skip the throttling delays.
    """

    name: str = ""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        settings: ScraperSettings | None = None,
        sleep: SleepFunc | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self._client = client
        self._owns_client = client is None
        self._sleep: SleepFunc = sleep or asyncio.sleep

    def default_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.settings.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/json",
            "Accept-Language": "en-US,en;q=0.9",
        }

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.settings.request_timeout,
                headers=self.default_headers(),
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def fetch_text(self, url: str, **params: Any) -> str | None:
        """GET ``url`` and return the body, or ``None`` for any non-2xx/transport error."""
        try:
            response = await self.client.get(url, params=params or None)
        except httpx.HTTPError as exc:
            logger.warning("%s request to %s failed: %s", self.name, url, exc)
            return None
        if not response.is_success:
            logger.warning("%s returned HTTP %s for %s", self.name, response.status_code, url)
            return None
        return response.text


class ApiProvider(HttpProvider):
    """JSON API adapter with bounded retries.

    Rate limits (429) wait for ``Retry-After`` seconds, other failures back
    off linearly (``retry_base_delay * attempt``). Once the attempts are
    exhausted the last error is raised as :class:`ProviderRequestError`.
    """

    def default_headers(self) -> dict[str, str]:
        headers = super().default_headers()
        headers["Accept"] = "application/json"
        headers["Content-Type"] = "application/json"
        return headers

    def _backoff_delay(self, attempt: int) -> float:
        return self.settings.retry_base_delay * (attempt + 1)

    def _retry_after_delay(self, response: httpx.Response, attempt: int) -> float:
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                return float(int(retry_after))
            except ValueError:
                logger.debug("Ignoring non-numeric Retry-After header: %s", retry_after)
        return self._backoff_delay(attempt)

    async def fetch_with_retry(self, url: str, params: dict[str, Any] | None = None) -> Any:
        attempts = max(1, self.settings.retry_attempts)
        last_error: Exception | None = None

        for attempt in range(attempts):
            is_last = attempt == attempts - 1
            try:
                response = await self.client.get(url, params=params)
            except httpx.HTTPError as exc:
                last_error = exc
                logger.warning(
                    "%s request failed: %s (attempt %d/%d)", self.name, exc, attempt + 1, attempts
                )
            else:
                if response.status_code == 429:
                    last_error = ProviderRequestError(url, "API rate limit exceeded", 429)
                    if not is_last:
                        delay = self._retry_after_delay(response, attempt)
                        logger.warning(
                            "%s rate limited; waiting %.1fs (attempt %d/%d)",
                            self.name,
                            delay,
                            attempt + 1,
                            attempts,
                        )
                        await self._sleep(delay)
                    continue

                if response.is_success:
                    try:
                        return response.json()
                    except ValueError as exc:
                        last_error = ProviderRequestError(
                            url, f"Invalid JSON payload: {exc}", response.status_code
                        )
                else:
                    last_error = ProviderRequestError(
                        url,
                        f"API request failed: {response.status_code} {response.reason_phrase}",
                        response.status_code,
                    )
                logger.warning(
                    "%s: %s (attempt %d/%d)", self.name, last_error, attempt + 1, attempts
                )

            if not is_last:
                await self._sleep(self._backoff_delay(attempt))

        if isinstance(last_error, ProviderRequestError):
            raise last_error
        raise ProviderRequestError(
            url, f"Request failed after {attempts} attempts: {last_error}"
        ) from last_error
