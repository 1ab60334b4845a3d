"""Pytest configuration shared by the scraper and backend suites."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import pytest

from tests import _ensure_repo_on_path


def pytest_configure(config: pytest.Config) -> None:
    """Hook executed by pytest prior to running any tests."""

    _ensure_repo_on_path()


@pytest.fixture
def no_sleep() -> Callable[[float], Awaitable[None]]:
    """Replacement for ``asyncio.sleep`` that records delays instead of waiting."""

    delays: list[float] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays  # type: ignore[attr-defined]
    return _sleep
