"""Sleeper fantasy-league API client and roster/matchup lookups."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import TypeAdapter

from redzone.config import settings
from redzone.models import (
    PlayerTable,
    SleeperLeague,
    SleeperMatchup,
    SleeperNFLState,
    SleeperPlayer,
    SleeperRoster,
    SleeperUser,
)
from redzone.utils.http import JsonGateway

logger = logging.getLogger(__name__)

_USERS = TypeAdapter(List[SleeperUser])
_ROSTERS = TypeAdapter(List[SleeperRoster])
_MATCHUPS = TypeAdapter(List[SleeperMatchup])
_RAW_PLAYERS = TypeAdapter(Dict[str, Any])


class SleeperClient(JsonGateway):
    """Read-only client for ``api.sleeper.app``. No authentication required."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(client)
        self.base_url = (base_url or settings.sleeper_base_url).rstrip("/")

    async def fetch_nfl_state(self) -> SleeperNFLState:
        return await self._get_parsed(
            f"{self.base_url}/state/nfl",
            "Sleeper state",
            lambda data: SleeperNFLState.model_validate(data or {}),
        )

    async def fetch_league(self, league_id: str) -> SleeperLeague:
        def parse(data) -> SleeperLeague:
            if not data:
                # Sleeper answers 200 with a null body for unknown league ids
                return SleeperLeague(league_id=league_id)
            return SleeperLeague.model_validate(data)

        return await self._get_parsed(
            f"{self.base_url}/league/{league_id}", "Sleeper league", parse
        )

    async def fetch_league_users(self, league_id: str) -> List[SleeperUser]:
        return await self._get_parsed(
            f"{self.base_url}/league/{league_id}/users",
            "Sleeper users",
            lambda data: _USERS.validate_python(data or []),
        )

    async def fetch_league_rosters(self, league_id: str) -> List[SleeperRoster]:
        return await self._get_parsed(
            f"{self.base_url}/league/{league_id}/rosters",
            "Sleeper rosters",
            lambda data: _ROSTERS.validate_python(data or []),
        )

    async def fetch_matchups(self, league_id: str, week: int) -> List[SleeperMatchup]:
        return await self._get_parsed(
            f"{self.base_url}/league/{league_id}/matchups/{week}",
            "Sleeper matchups",
            lambda data: _MATCHUPS.validate_python(data or []),
        )

    async def fetch_players(self) -> PlayerTable:
        """Fetch the full NFL player reference table, keyed by player id.

        The payload is several megabytes; callers should cache only the subset
        they need (see ``AppState.set_compact_players``).
        """
        return await self._get_parsed(
            f"{self.base_url}/players/nfl",
            "Sleeper players",
            lambda data: build_player_table(_RAW_PLAYERS.validate_python(data or {})),
        )


def build_player_table(raw: Dict[str, dict]) -> PlayerTable:
    """Convert a ``{player_id: {...}}`` mapping into :class:`SleeperPlayer` records."""
    table: PlayerTable = {}
    for player_id, fields in raw.items():
        if not isinstance(fields, dict):
            continue
        table[player_id] = SleeperPlayer.model_validate(
            {**fields, "player_id": player_id}
        )
    return table


def find_user_roster(
    rosters: Sequence[SleeperRoster], sleeper_user_id: str
) -> Optional[SleeperRoster]:
    """Return the roster owned by ``sleeper_user_id``, if any."""
    for roster in rosters:
        if roster.owner_id == sleeper_user_id:
            return roster
    return None


def find_roster(
    rosters: Sequence[SleeperRoster], roster_id: int
) -> Optional[SleeperRoster]:
    for roster in rosters:
        if roster.roster_id == roster_id:
            return roster
    return None


def find_matchup(
    matchups: Sequence[SleeperMatchup], roster_id: int
) -> Optional[SleeperMatchup]:
    for matchup in matchups:
        if matchup.roster_id == roster_id:
            return matchup
    return None


def find_opponent_matchup(
    matchups: Sequence[SleeperMatchup], user_matchup: Optional[SleeperMatchup]
) -> Optional[SleeperMatchup]:
    """Return the other side of ``user_matchup``'s pairing, or None on a bye."""
    if user_matchup is None or user_matchup.matchup_id is None:
        return None
    for matchup in matchups:
        if (
            matchup.matchup_id == user_matchup.matchup_id
            and matchup.roster_id != user_matchup.roster_id
        ):
            return matchup
    return None


def find_opponent_roster(
    rosters: Sequence[SleeperRoster],
    matchups: Sequence[SleeperMatchup],
    user_roster_id: int,
) -> Optional[SleeperRoster]:
    """Return the roster paired against ``user_roster_id`` this week."""
    opponent = find_opponent_matchup(matchups, find_matchup(matchups, user_roster_id))
    if opponent is None:
        return None
    return find_roster(rosters, opponent.roster_id)


def find_user(users: Sequence[SleeperUser], query: str) -> Optional[SleeperUser]:
    """Match a league member by user id or case-insensitive display name."""
    needle = query.strip()
    for user in users:
        if user.user_id == needle:
            return user
    lowered = needle.lower()
    for user in users:
        if user.display_name and user.display_name.lower() == lowered:
            return user
    return None
