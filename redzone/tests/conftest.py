"""Pytest configuration and fixtures for redzone tests."""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Optional

import pytest

from redzone.cache.app_state import AppState, build_local_cache
from redzone.leagues.league_store import JsonLeagueStore
from redzone.models import (
    EspnGame,
    EspnScoreboard,
    LeagueConfig,
    SleeperLeague,
    SleeperMatchup,
    SleeperNFLState,
    SleeperRoster,
    SleeperUser,
)
from redzone.sleeper.sleeper_client import build_player_table
from redzone.utils.http import UpstreamError


def espn_event(
    game_id: str,
    date: str,
    week: int,
    home: str,
    away: str,
    home_score: Optional[str] = None,
    away_score: Optional[str] = None,
) -> Dict:
    """One scoreboard event in ESPN's wire shape."""
    return {
        "id": game_id,
        "date": date,
        "name": f"{away} at {home}",
        "shortName": f"{away} @ {home}",
        "week": {"number": week},
        "competitions": [
            {
                "id": game_id,
                "date": date,
                "competitors": [
                    {
                        "id": "1",
                        "homeAway": "home",
                        "team": {"abbreviation": home, "displayName": home},
                        "score": home_score,
                        "records": [{"name": "overall", "summary": "1-0"}],
                    },
                    {
                        "id": "2",
                        "homeAway": "away",
                        "team": {"abbreviation": away, "displayName": away},
                        "score": away_score,
                        "records": [],
                    },
                ],
                "status": {
                    "displayClock": "0:00",
                    "period": 0,
                    "type": {
                        "name": "STATUS_SCHEDULED",
                        "state": "pre",
                        "completed": False,
                        "shortDetail": "Sun 1:00 PM",
                    },
                },
            }
        ],
    }


def make_game(game_id: str, date: str, week: int = 2, home: str = "KC", away: str = "BUF") -> EspnGame:
    return EspnGame.model_validate(espn_event(game_id, date, week, home, away))


@pytest.fixture
def scoreboard_payload() -> Dict:
    """Week 2 scoreboard that still lists the Monday night game of week 1."""
    return {
        "week": {"number": 2},
        "events": [
            espn_event("401", "2025-09-08T00:20Z", 1, "CHI", "MIN"),
            espn_event("402", "2025-09-14T17:00Z", 2, "KC", "BUF"),
            espn_event("403", "2025-09-14T20:25Z", 2, "SF", "DAL"),
        ],
    }


@pytest.fixture
def players_payload() -> Dict[str, Dict]:
    return {
        "4034": {"first_name": "Patrick", "last_name": "Mahomes", "position": "QB", "team": "KC", "number": 15},
        "4984": {"first_name": "Josh", "last_name": "Allen", "position": "QB", "team": "BUF", "number": 17},
        "6794": {"first_name": "Justin", "last_name": "Jefferson", "position": "WR", "team": "MIN", "number": 18},
        "4866": {"first_name": "Saquon", "last_name": "Barkley", "position": "RB", "team": "PHI", "number": 26},
        "9999": {"first_name": "Free", "last_name": "Agent", "position": None, "team": None},
        "KC": {"first_name": "Kansas City", "last_name": "Chiefs", "position": "DEF", "team": "KC"},
    }


@pytest.fixture
def player_table(players_payload):
    return build_player_table(players_payload)


def league_payload(
    user_id: str = "u1",
    opponent_id: str = "u2",
    my_starters: Optional[List[str]] = None,
    their_starters: Optional[List[str]] = None,
    bye: bool = False,
) -> Dict:
    """Rosters, users and week matchups for a two-team league."""
    my_starters = ["4034", "6794", "", "KC"] if my_starters is None else my_starters
    their_starters = ["4984", "4866"] if their_starters is None else their_starters
    matchups = [
        {"roster_id": 1, "matchup_id": None if bye else 1, "points": 0, "starters": my_starters},
    ]
    if not bye:
        matchups.append(
            {"roster_id": 2, "matchup_id": 1, "points": None, "starters": their_starters}
        )
    return {
        "users": [
            {"user_id": user_id, "display_name": "MeTheManager"},
            {"user_id": opponent_id, "display_name": "Rival"},
        ],
        "rosters": [
            {"roster_id": 1, "owner_id": user_id, "starters": ["9999"]},
            {"roster_id": 2, "owner_id": opponent_id, "starters": ["9999"]},
        ],
        "matchups": matchups,
    }


class FakeSleeper:
    """In-memory stand-in for :class:`SleeperClient` that counts calls."""

    def __init__(self, players: Dict[str, Dict], week: Optional[int] = 2) -> None:
        self.players = players
        self.state = {"week": week, "season": "2025", "season_type": "regular"}
        self.leagues: Dict[str, Dict] = {}
        self.calls: Counter = Counter()
        self.failing: set = set()

    def _check(self, endpoint: str) -> None:
        self.calls[endpoint] += 1
        if endpoint in self.failing:
            raise UpstreamError(f"Sleeper {endpoint}", status_code=503)

    async def fetch_nfl_state(self) -> SleeperNFLState:
        self._check("state")
        return SleeperNFLState.model_validate(self.state)

    async def fetch_league(self, league_id: str) -> SleeperLeague:
        self._check("league")
        league = self.leagues.get(league_id)
        if league is None:
            return SleeperLeague(league_id=league_id)
        return SleeperLeague(league_id=league_id, name=league.get("name"))

    async def fetch_league_users(self, league_id: str) -> List[SleeperUser]:
        self._check("users")
        return [SleeperUser.model_validate(u) for u in self.leagues.get(league_id, {}).get("users", [])]

    async def fetch_league_rosters(self, league_id: str) -> List[SleeperRoster]:
        self._check("rosters")
        return [SleeperRoster.model_validate(r) for r in self.leagues[league_id]["rosters"]]

    async def fetch_matchups(self, league_id: str, week: int) -> List[SleeperMatchup]:
        self._check("matchups")
        self.calls[f"matchups:{league_id}:{week}"] += 1
        return [SleeperMatchup.model_validate(m) for m in self.leagues[league_id]["matchups"]]

    async def fetch_players(self):
        self._check("players")
        return build_player_table(self.players)

    async def aclose(self) -> None:
        return None


class FakeSchedule:
    """In-memory stand-in for :class:`ScheduleClient`."""

    def __init__(self, payload: Dict) -> None:
        self.payload = payload
        self.calls = 0
        self.fail = False

    async def fetch_scoreboard(self) -> EspnScoreboard:
        self.calls += 1
        if self.fail:
            raise UpstreamError("ESPN", status_code=500)
        return EspnScoreboard.model_validate(self.payload)

    async def aclose(self) -> None:
        return None


@pytest.fixture
def fake_sleeper(players_payload) -> FakeSleeper:
    sleeper = FakeSleeper(players_payload)
    sleeper.leagues["L1"] = {"name": "Dynasty Degens", **league_payload()}
    return sleeper


@pytest.fixture
def fake_schedule(scoreboard_payload) -> FakeSchedule:
    return FakeSchedule(scoreboard_payload)


@pytest.fixture
def league() -> LeagueConfig:
    return LeagueConfig(
        league_id="1",
        sleeper_league_id="L1",
        sleeper_user_id="u1",
        league_name="Dynasty Degens",
    )


@pytest.fixture
def temp_cache_dir(tmp_path):
    """Create a temporary cache directory for testing."""
    cache_dir = tmp_path / "test_cache"
    cache_dir.mkdir()
    return cache_dir


@pytest.fixture
def app_state(temp_cache_dir) -> AppState:
    return AppState(build_local_cache(temp_cache_dir, debounce_seconds=0.01))


@pytest.fixture
def league_store(tmp_path) -> JsonLeagueStore:
    return JsonLeagueStore(tmp_path / "leagues.json")
