#!/usr/bin/env python
"""Run a sync stage by hand and print the resulting report.

Examples::

    python -m scripts.run_sync all
    python -m scripts.run_sync past-events --limit 10 --provider thesportsdb
    python -m scripts.run_sync slugs --slugs jon-jones alex-pereira
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from backend.db.connection import dispose_engine, get_engine, get_session_factory, init_models
from backend.db.store import SyncStore
from backend.schemas.sync import RosterSyncResult, SyncResult
from backend.services.dependencies import build_event_provider
from backend.services.sync import MmaSyncService, RosterSyncService
from backend.settings import get_settings
from scraper.providers import UFCRosterScraper

console = Console()

EVENT_COMMANDS = ("all", "organizations", "events", "past-events")
ROSTER_COMMANDS = ("roster", "top-fighters", "records", "slugs")


async def run_event_sync(
    command: str, *, provider_name: str | None, limit: int | None
) -> SyncResult:
    settings = get_settings()
    if provider_name:
        settings = settings.model_copy(update={"sync_provider": provider_name})

    provider = build_event_provider(settings)
    try:
        service = MmaSyncService(
            SyncStore(get_session_factory()),
            provider,
            past_events_limit=settings.sync_past_events_limit,
        )
        if command == "all":
            return await service.sync_all()
        if command == "organizations":
            return await service.sync_organizations()
        if command == "events":
            return await service.sync_upcoming_events()
        return await service.sync_past_events(limit)
    finally:
        await provider.aclose()


async def run_roster_sync(command: str, *, slugs: list[str]) -> RosterSyncResult:
    async with UFCRosterScraper() as scraper:
        service = RosterSyncService(SyncStore(get_session_factory()), scraper)
        if command == "roster":
            return await service.sync_full_roster()
        if command == "top-fighters":
            return await service.sync_top_fighters()
        if command == "records":
            return await service.update_all_records()
        return await service.sync_fighters_by_slug(slugs)


def render_report(title: str, result: SyncResult | RosterSyncResult, *, show_errors: int) -> None:
    table = Table("Metric", "Value", title=title)
    status = "[green]success[/green]" if result.success else "[red]failed[/red]"
    table.add_row("Status", status)
    for field, value in result.model_dump(exclude={"success", "errors"}).items():
        table.add_row(field.replace("_", " ").capitalize(), str(value))
    table.add_row("Errors", str(len(result.errors)))
    console.print(table)

    if result.errors:
        shown = result.errors if show_errors == 0 else result.errors[:show_errors]
        console.print("[yellow]Errors:[/yellow]")
        for error in shown:
            console.print(f"  • {error}")
        if len(shown) < len(result.errors):
            console.print(
                f"... {len(result.errors) - len(shown)} additional errors not shown. "
                "Use --show-errors 0 to display all."
            )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Sync MMA organizations, events, fight cards and rosters into the database."
    )
    parser.add_argument("command", choices=EVENT_COMMANDS + ROSTER_COMMANDS)
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Number of past events to sync (defaults to SYNC_PAST_EVENTS_LIMIT).",
    )
    parser.add_argument(
        "--provider",
        choices=("ufc", "thesportsdb", "sportsdataio"),
        default=None,
        help="Event provider to use (defaults to SYNC_PROVIDER).",
    )
    parser.add_argument(
        "--slugs",
        nargs="+",
        default=[],
        help="UFC.com athlete slugs for the 'slugs' command.",
    )
    parser.add_argument(
        "--show-errors",
        type=int,
        default=10,
        help="Number of errors to print (0 shows all).",
    )
    args = parser.parse_args(argv)
    if args.command == "slugs" and not args.slugs:
        parser.error("the 'slugs' command requires --slugs")
    return args


async def _async_main(args: argparse.Namespace) -> int:
    try:
        await init_models(get_engine())
        if args.command in EVENT_COMMANDS:
            result = await run_event_sync(
                args.command, provider_name=args.provider, limit=args.limit
            )
        else:
            result = await run_roster_sync(args.command, slugs=args.slugs)
    finally:
        await dispose_engine()

    render_report(f"Sync: {args.command}", result, show_errors=args.show_errors)
    return 0 if result.success else 1


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(
        level=get_settings().log_level_numeric,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return asyncio.run(_async_main(args))


if __name__ == "__main__":
    sys.exit(main())
