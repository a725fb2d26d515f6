"""Tests for CLI commands driven through a recording console."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from rich.console import Console

from commands.clear_cache_command import ClearCacheCommand
from commands.exit_command import ExitCommand
from commands.game_command import GameCommand
from commands.games_command import GamesCommand
from commands.league_context import LeagueContext
from commands.leagues_command import LeaguesCommand
from commands.refresh_command import RefreshCommand
from commands.week_command import WeekCommand
from redzone.cli import _restore_session, build_registry

NOW = datetime(2025, 9, 15, 12, tzinfo=timezone.utc).timestamp()


@pytest.fixture
def console() -> Console:
    return Console(record=True, width=160)


@pytest.fixture
def context(console, tmp_path, fake_sleeper, fake_schedule):
    ctx = LeagueContext(
        console,
        cache_dir=tmp_path / "cache",
        leagues_file=tmp_path / "leagues.json",
        sleeper=fake_sleeper,
        schedule=fake_schedule,
    )
    ctx.resolver._clock = lambda: NOW
    yield ctx
    ctx.close()


def _output(console: Console) -> str:
    return console.export_text()


@pytest.mark.unit
def test_refresh_without_leagues_prints_error(console, context):
    RefreshCommand(console, context).execute("/refresh")
    assert "Error fetching data: No leagues configured" in _output(console)


@pytest.mark.unit
def test_refresh_upstream_error_is_single_message(console, context, fake_schedule):
    context.store.add_league("L1", "u1", "Dynasty Degens")
    fake_schedule.fail = True

    RefreshCommand(console, context).execute("/refresh")

    assert "Error fetching data: ESPN API error: 500" in _output(console)
    assert context.snapshot is None


@pytest.mark.unit
def test_add_league_then_refresh_and_select_game(console, context):
    LeaguesCommand(console, context).execute("/leagues add L1 MeTheManager Main")
    RefreshCommand(console, context).execute("/refresh")
    GameCommand(console, context).execute("/game 1")

    text = _output(console)
    assert "Added Main (id 1)" in text
    assert "Week 2: 2 games" in text
    assert "Patrick Mahomes" in text
    assert context.state.get_selected_game() == 0


@pytest.mark.unit
def test_games_hide_and_reset(console, context):
    context.store.add_league("L1", "u1", "Dynasty Degens")
    RefreshCommand(console, context).execute("/refresh")
    games = GamesCommand(console, context)

    games.execute("/games hide 1")
    assert [g.id for g in context.visible_games()] == ["403"]

    games.execute("/games reset")
    assert [g.id for g in context.visible_games()] == ["402", "403"]


@pytest.mark.unit
def test_games_move_and_bad_input(console, context):
    context.store.add_league("L1", "u1", "Dynasty Degens")
    RefreshCommand(console, context).execute("/refresh")
    games = GamesCommand(console, context)

    games.execute("/games move 2 1")
    assert [g.id for g in context.visible_games()] == ["403", "402"]

    games.execute("/games move 2 zero")
    games.execute("/games window primetime")
    text = _output(console)
    assert "Position must be a number" in text
    assert "Unknown window 'primetime'" in text


@pytest.mark.unit
def test_leagues_rename_hide_remove(console, context):
    context.store.add_league("L1", "u1", "Dynasty Degens")
    leagues = LeaguesCommand(console, context)

    leagues.execute("/leagues rename 1 The Big One")
    leagues.execute("/leagues hide 1")
    assert context.state.get_hidden_leagues() == {"1"}
    leagues.execute("/leagues remove 1")
    leagues.execute("/leagues remove 1")

    text = _output(console)
    assert "League 1 is now The Big One" in text
    assert "League 1 not found" in text
    assert context.state.get_hidden_leagues() == set()


@pytest.mark.unit
def test_duplicate_league_message(console, context):
    context.store.add_league("L1", "u1", "Dynasty Degens")
    LeaguesCommand(console, context).execute("/leagues add L1 u1")
    assert 'League "Dynasty Degens" is already added!' in _output(console)


@pytest.mark.unit
def test_week_and_clear_cache(console, context):
    WeekCommand(console, context).execute("/week")
    assert context.state.get_current_week() == 2

    ClearCacheCommand(console, context).execute("/clear-cache")
    assert context.state.get_current_week() is None
    assert context.resolver.memo is None


@pytest.mark.unit
def test_registry_includes_aliases(console, context):
    registry = build_registry(console, context)
    assert "/quit" in registry.names()
    assert registry.get("/leagues") is not None
    assert registry.get("/QUIT").name == "/exit"
    assert registry.completion_tree()["/games"] == dict.fromkeys(
        ("list", "show", "hide", "window", "move", "reset")
    )
    assert registry.completion_tree()["/week"] is None


@pytest.mark.unit
def test_refresh_reports_cache_quota_failure(console, context):
    context.store.add_league("L1", "u1", "Dynasty Degens")
    context.cache.quota_bytes = 300

    RefreshCommand(console, context).execute("/refresh")

    assert "Error saving cache: Storage quota exceeded" in _output(console)
    assert context.snapshot.week == 2
    assert context.state.get_games() is None


@pytest.mark.unit
def test_hide_league_reports_cache_quota_failure(console, context):
    context.store.add_league("L1", "u1", "Dynasty Degens")
    context.cache.quota_bytes = 10

    LeaguesCommand(console, context).execute("/leagues hide 1")

    assert "Error saving cache" in _output(console)


@pytest.mark.unit
def test_exit_flushes_pending_writes(console, context):
    context.store.add_league("L1", "u1", "Dynasty Degens")
    RefreshCommand(console, context).execute("/refresh")

    ExitCommand(console, context).execute("/exit")

    assert "Goodbye (week 2 saved)" in _output(console)
    assert context.cache._pending == {}


def _reopen(tmp_path, fake_sleeper, fake_schedule) -> tuple:
    console = Console(record=True, width=160)
    ctx = LeagueContext(
        console,
        cache_dir=tmp_path / "cache",
        leagues_file=tmp_path / "leagues.json",
        sleeper=fake_sleeper,
        schedule=fake_schedule,
    )
    return console, ctx


@pytest.mark.unit
def test_restore_session_reopens_redzone_view(
    console, context, tmp_path, fake_sleeper, fake_schedule
):
    context.store.add_league("L1", "u1", "Dynasty Degens")
    RefreshCommand(console, context).execute("/refresh")

    restored_console, restored = _reopen(tmp_path, fake_sleeper, fake_schedule)
    try:
        _restore_session(restored_console, restored, build_registry(restored_console, restored))
    finally:
        restored.close()

    text = _output(restored_console)
    assert "Restored week 2: 2 games, 5 starters" in text
    assert "Week 2 Games" in text
    assert "Patrick Mahomes" in text
    assert "Your leagues changed" not in text


@pytest.mark.unit
def test_restore_session_flags_changed_leagues(
    console, context, tmp_path, fake_sleeper, fake_schedule
):
    context.store.add_league("L1", "u1", "Dynasty Degens")
    RefreshCommand(console, context).execute("/refresh")
    LeaguesCommand(console, context).execute("/leagues list")
    context.store.add_league("L2", "u1", "Keeper")

    restored_console, restored = _reopen(tmp_path, fake_sleeper, fake_schedule)
    try:
        _restore_session(restored_console, restored, build_registry(restored_console, restored))
    finally:
        restored.close()

    text = _output(restored_console)
    assert "Your leagues changed since the last refresh" in text
    # Last view was the league list
    assert "Your Leagues" in text
    assert "Keeper" in text
