"""Tests for the upstream gateways against a mocked transport."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from redzone.models import SleeperMatchup, SleeperRoster, SleeperUser
from redzone.schedule.espn_client import ScheduleClient
from redzone.sleeper.sleeper_client import (
    SleeperClient,
    find_opponent_roster,
    find_user,
    find_user_roster,
)
from redzone.utils.http import UnexpectedPayloadError, UpstreamError, gather_or_cancel

BASE = "https://sleeper.test/v1"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _sleeper(routes) -> SleeperClient:
    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path.replace("/v1", "", 1)
        if path not in routes:
            return httpx.Response(404)
        status, body = routes[path]
        if body is None:
            return httpx.Response(status, content=b"null")
        return httpx.Response(status, json=body)

    return SleeperClient(client=_client(handler), base_url=BASE)


class TestSleeperClient:
    @pytest.mark.unit
    def test_fetch_nfl_state(self):
        sleeper = _sleeper({"/state/nfl": (200, {"week": 5, "season": "2025", "leg": 5})})
        state = asyncio.run(sleeper.fetch_nfl_state())
        assert state.week == 5
        assert state.season == "2025"

    @pytest.mark.unit
    def test_matchups_url_includes_week(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json=[{"roster_id": 1, "matchup_id": 2, "points": None}])

        sleeper = SleeperClient(client=_client(handler), base_url=BASE)
        matchups = asyncio.run(sleeper.fetch_matchups("L1", 7))

        assert seen == ["/v1/league/L1/matchups/7"]
        assert matchups[0].points == 0.0

    @pytest.mark.unit
    def test_non_2xx_raises_upstream_error(self):
        sleeper = _sleeper({"/league/L1/rosters": (503, {"error": "down"})})

        with pytest.raises(UpstreamError) as exc_info:
            asyncio.run(sleeper.fetch_league_rosters("L1"))

        assert exc_info.value.status_code == 503
        assert str(exc_info.value) == "Sleeper rosters API error: 503"

    @pytest.mark.unit
    def test_network_failure_raises_upstream_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        sleeper = SleeperClient(client=_client(handler), base_url=BASE)

        with pytest.raises(UpstreamError) as exc_info:
            asyncio.run(sleeper.fetch_league_users("L1"))
        assert exc_info.value.status_code is None
        assert "Sleeper users API unreachable" in str(exc_info.value)

    @pytest.mark.unit
    def test_invalid_json_raises_upstream_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>oops</html>")

        sleeper = SleeperClient(client=_client(handler), base_url=BASE)
        with pytest.raises(UpstreamError):
            asyncio.run(sleeper.fetch_nfl_state())

    @pytest.mark.unit
    def test_wrong_shape_raises_unexpected_payload(self):
        sleeper = _sleeper(
            {
                "/league/L1/rosters": (200, {"roster_id": 1}),
                "/players/nfl": (200, ["4034"]),
            }
        )

        with pytest.raises(UnexpectedPayloadError) as exc_info:
            asyncio.run(sleeper.fetch_league_rosters("L1"))
        assert str(exc_info.value) == "Sleeper rosters API returned an unexpected payload"

        with pytest.raises(UpstreamError, match="Sleeper players"):
            asyncio.run(sleeper.fetch_players())

    @pytest.mark.unit
    def test_unknown_league_returns_placeholder(self):
        sleeper = _sleeper({"/league/nope": (200, None)})
        league = asyncio.run(sleeper.fetch_league("nope"))
        assert league.league_id == "nope"
        assert league.name is None

    @pytest.mark.unit
    def test_players_table_keyed_by_id(self, players_payload):
        sleeper = _sleeper({"/players/nfl": (200, players_payload)})
        players = asyncio.run(sleeper.fetch_players())
        assert players["4034"].player_id == "4034"
        assert players["4034"].full_name == "Patrick Mahomes"


class TestScheduleClient:
    @pytest.mark.unit
    def test_fetch_scoreboard(self, scoreboard_payload):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=scoreboard_payload)

        schedule = ScheduleClient(client=_client(handler), scoreboard_url="https://espn.test/sb")
        scoreboard = asyncio.run(schedule.fetch_scoreboard())

        assert scoreboard.week_number == 2
        assert scoreboard.events[1].home_team.team.abbreviation == "KC"
        assert scoreboard.events[1].kickoff.isoformat() == "2025-09-14T17:00:00+00:00"

    @pytest.mark.unit
    def test_error_names_espn(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        schedule = ScheduleClient(client=_client(handler), scoreboard_url="https://espn.test/sb")
        with pytest.raises(UpstreamError, match="ESPN API error: 500"):
            asyncio.run(schedule.fetch_scoreboard())

    @pytest.mark.unit
    def test_scoreboard_event_missing_date_raises_upstream_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"events": [{"id": "1"}]})

        schedule = ScheduleClient(client=_client(handler), scoreboard_url="https://espn.test/sb")
        with pytest.raises(UnexpectedPayloadError, match="ESPN API returned"):
            asyncio.run(schedule.fetch_scoreboard())


class TestGatherOrCancel:
    @pytest.mark.unit
    def test_failure_cancels_sibling(self):
        finished = []

        async def slow():
            await asyncio.sleep(1)
            finished.append("slow")

        async def failing():
            raise UpstreamError("Sleeper state", 503)

        async def scenario():
            with pytest.raises(UpstreamError):
                await gather_or_cancel(slow(), failing())
            await asyncio.sleep(0)
            return [task for task in asyncio.all_tasks() if task is not asyncio.current_task()]

        leftover = asyncio.run(scenario())

        assert leftover == []
        assert finished == []

    @pytest.mark.unit
    def test_results_keep_argument_order(self):
        async def value(result, delay):
            await asyncio.sleep(delay)
            return result

        results = asyncio.run(gather_or_cancel(value("a", 0.02), value("b", 0)))
        assert results == ["a", "b"]


class TestLookups:
    @pytest.mark.unit
    def test_find_user_by_id_or_display_name(self):
        users = [
            SleeperUser(user_id="u1", display_name="MeTheManager"),
            SleeperUser(user_id="u2", display_name="Rival"),
        ]
        assert find_user(users, "u2").display_name == "Rival"
        assert find_user(users, "methemanager").user_id == "u1"
        assert find_user(users, "nobody") is None

    @pytest.mark.unit
    def test_find_opponent_roster(self):
        rosters = [
            SleeperRoster(roster_id=1, owner_id="u1"),
            SleeperRoster(roster_id=2, owner_id="u2"),
            SleeperRoster(roster_id=3, owner_id="u3"),
        ]
        matchups = [
            SleeperMatchup(roster_id=1, matchup_id=4),
            SleeperMatchup(roster_id=3, matchup_id=4),
            SleeperMatchup(roster_id=2, matchup_id=None),
        ]
        user_roster = find_user_roster(rosters, "u1")

        assert find_opponent_roster(rosters, matchups, user_roster.roster_id).owner_id == "u3"
        assert find_opponent_roster(rosters, matchups, 2) is None
