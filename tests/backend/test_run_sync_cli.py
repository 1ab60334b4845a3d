"""Argument handling and report rendering for ``scripts.run_sync``."""

from __future__ import annotations

import pytest
from rich.console import Console

from backend.schemas.sync import RosterSyncResult, SyncResult
from scripts import run_sync


def test_parse_args_defaults_to_settings_driven_values():
    args = run_sync.parse_args(["all"])

    assert args.command == "all"
    assert args.limit is None
    assert args.provider is None
    assert args.show_errors == 10


def test_parse_args_accepts_provider_and_limit():
    args = run_sync.parse_args(["past-events", "--limit", "3", "--provider", "thesportsdb"])

    assert (args.command, args.limit, args.provider) == ("past-events", 3, "thesportsdb")


def test_slugs_command_requires_slugs():
    with pytest.raises(SystemExit):
        run_sync.parse_args(["slugs"])

    args = run_sync.parse_args(["slugs", "--slugs", "jon-jones", "alex-pereira"])
    assert args.slugs == ["jon-jones", "alex-pereira"]


def test_unknown_provider_is_rejected():
    with pytest.raises(SystemExit):
        run_sync.parse_args(["all", "--provider", "sherdog"])


def test_render_report_lists_counts_and_truncates_errors(monkeypatch: pytest.MonkeyPatch):
    """Only the requested number of errors is printed, with a hint about the rest."""
    console = Console(record=True, width=120)
    monkeypatch.setattr(run_sync, "console", console)
    result = SyncResult(events_processed=3, errors=[f"error {n}" for n in range(5)])

    run_sync.render_report("Sync: events", result, show_errors=2)

    output = console.export_text()
    assert "Events processed" in output
    assert "error 1" in output
    assert "error 2" not in output
    assert "3 additional errors not shown" in output


def test_render_report_marks_failed_roster_runs(monkeypatch: pytest.MonkeyPatch):
    console = Console(record=True, width=120)
    monkeypatch.setattr(run_sync, "console", console)

    run_sync.render_report(
        "Sync: roster", RosterSyncResult(success=False, errors=["boom"]), show_errors=0
    )

    output = console.export_text()
    assert "failed" in output
    assert "Fighters added" in output
    assert "boom" in output
