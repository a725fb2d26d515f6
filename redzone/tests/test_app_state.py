"""Tests for typed state accessors over the cache."""

from __future__ import annotations

import pytest

from conftest import make_game
from redzone.cache.app_state import StorageKeys, compact_players, visible_leagues
from redzone.models import GameConfig, LeagueConfig, LineupEntry


@pytest.mark.unit
def test_games_survive_round_trip(app_state):
    games = [make_game("401", "2025-09-14T17:00Z")]
    app_state.set_games(games)

    loaded = app_state.get_games()

    assert [g.id for g in loaded] == ["401"]
    assert loaded[0].home_team.team.abbreviation == "KC"


@pytest.mark.unit
def test_missing_keys_return_defaults(app_state):
    assert app_state.get_games() is None
    assert app_state.get_player_lineups() is None
    assert app_state.get_game_config() == []
    assert app_state.get_selected_game() is None
    assert app_state.get_current_week() is None
    assert app_state.get_hidden_leagues() == set()


@pytest.mark.unit
def test_malformed_list_is_evicted(app_state):
    app_state.cache.set_immediate(StorageKeys.PLAYER_LINEUPS, [{"unexpected": True}])

    assert app_state.get_player_lineups() is None
    assert app_state.cache.get(StorageKeys.PLAYER_LINEUPS) is None


@pytest.mark.unit
def test_selected_game_none_removes_key(app_state):
    app_state.set_selected_game(3)
    assert app_state.get_selected_game() == 3

    app_state.set_selected_game(None)
    assert app_state.get_selected_game() is None


@pytest.mark.unit
def test_view_must_be_known(app_state):
    app_state.set_current_view("leagues")
    assert app_state.get_current_view() == "leagues"
    with pytest.raises(ValueError):
        app_state.set_current_view("scoreboard")


@pytest.mark.unit
def test_game_config_round_trip(app_state):
    app_state.set_game_config([GameConfig(game_id="g1", is_visible=False, custom_order=2)])
    assert app_state.get_game_config()[0].is_visible is False


@pytest.mark.unit
def test_compact_players_keeps_only_referenced(app_state, player_table):
    lineups = [
        LineupEntry(player_id="4034", name="Patrick Mahomes", position="QB", team="KC"),
    ]
    app_state.set_player_lineups(lineups)
    app_state.set_compact_players(player_table, ["4034", "missing"])

    players = app_state.get_players()

    assert list(players) == ["4034"]
    assert players["4034"].full_name == "Patrick Mahomes"
    assert players["4034"].jersey_number == "15"


@pytest.mark.unit
def test_compact_players_field_subset(player_table):
    compact = compact_players(player_table, ["6794"])
    assert set(compact["6794"]) == {"first_name", "last_name", "position", "team", "number"}


@pytest.mark.unit
def test_hidden_leagues(app_state):
    leagues = [
        LeagueConfig(league_id="1", sleeper_league_id="L1"),
        LeagueConfig(league_id="2", sleeper_league_id="L2"),
    ]
    app_state.hide_league("2")

    assert app_state.get_hidden_leagues() == {"2"}
    assert [league.league_id for league in visible_leagues(leagues, app_state.get_hidden_leagues())] == ["1"]

    app_state.show_league("2")
    assert app_state.get_hidden_leagues() == set()


@pytest.mark.unit
def test_clear_cache_removes_everything(app_state):
    app_state.set_current_week(4)
    app_state.hide_league("1")

    app_state.clear_cache()

    assert app_state.cache.keys() == []
