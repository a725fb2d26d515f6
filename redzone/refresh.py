"""Refresh orchestration: week, games and lineups fetched together and cached.

Nothing from a failed or superseded refresh is persisted, so the cache always
holds the last complete snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from redzone.cache.app_state import AppState, visible_leagues
from redzone.leagues.league_store import LeagueStore
from redzone.lineup.aggregator import (
    aggregate_lineups,
    league_lineup,
    resolve_league_matchups,
    starter_ids_needed,
)
from redzone.lineup.player_index import referenced_player_ids
from redzone.models import (
    EspnGame,
    GameConfig,
    LeagueConfig,
    LeagueLineup,
    LineupEntry,
    PlayerTable,
)
from redzone.schedule.week_resolver import WeekResolver
from redzone.sleeper.sleeper_client import SleeperClient
from redzone.utils.http import gather_or_cancel

logger = logging.getLogger(__name__)


class NoLeaguesConfiguredError(Exception):
    """A refresh was requested with no visible leagues."""

    def __init__(self) -> None:
        super().__init__("No leagues configured. Please add leagues first.")


class StaleRefreshError(Exception):
    """A newer refresh started while this one was in flight."""

    def __init__(self, generation: int, latest: int) -> None:
        self.generation = generation
        self.latest = latest
        super().__init__(
            f"Refresh {generation} superseded by refresh {latest}; results discarded"
        )


@dataclass
class RedZoneSnapshot:
    """Everything the RedZone view shows for one week."""

    week: int
    games: List[EspnGame] = field(default_factory=list)
    lineups: List[LineupEntry] = field(default_factory=list)
    game_config: List[GameConfig] = field(default_factory=list)
    selected_game: Optional[int] = None


class RefreshService:
    """Coordinates a full refresh across the upstream gateways and the cache."""

    def __init__(
        self,
        sleeper: SleeperClient,
        resolver: WeekResolver,
        state: AppState,
        store: LeagueStore,
    ) -> None:
        self.sleeper = sleeper
        self.resolver = resolver
        self.state = state
        self.store = store
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def leagues(self) -> List[LeagueConfig]:
        """Stored leagues minus the ones hidden from refreshes."""
        return visible_leagues(
            self.store.list_leagues(), self.state.get_hidden_leagues()
        )

    def _begin(self) -> Tuple[int, List[LeagueConfig]]:
        leagues = self.leagues()
        if not leagues:
            raise NoLeaguesConfiguredError()
        self._generation += 1
        return self._generation, leagues

    def _ensure_current(self, generation: int) -> None:
        if generation != self._generation:
            logger.info(
                "Discarding stale refresh %s (latest %s)", generation, self._generation
            )
            raise StaleRefreshError(generation, self._generation)

    async def refresh_redzone(self) -> RedZoneSnapshot:
        """Resolve the week, fetch its games and merge lineups across leagues.

        Raises:
            NoLeaguesConfiguredError: No visible leagues
            UpstreamError: Any upstream call failed; nothing is persisted
            StaleRefreshError: A newer refresh started meanwhile
        """
        generation, leagues = self._begin()
        logger.info("Refreshing %d league(s)", len(leagues))

        scoreboard, players = await gather_or_cancel(
            self.resolver.resolve_scoreboard(), self.sleeper.fetch_players()
        )
        week = scoreboard.week_number or 1
        lineups = await aggregate_lineups(week, leagues, players, self.sleeper)
        self._ensure_current(generation)

        self._persist(week, scoreboard.events, lineups, players, leagues)
        return RedZoneSnapshot(
            week=week,
            games=list(scoreboard.events),
            lineups=lineups,
            game_config=self.state.get_game_config(),
            selected_game=self.state.get_selected_game(),
        )

    async def refresh_league_lineups(self) -> Tuple[int, List[LeagueLineup]]:
        """Per-league view of both matchup sides for the effective week.

        The compact player table from the last RedZone refresh is reused when
        it was built for the same week and covers every starter; otherwise the
        full Sleeper table is fetched.
        """
        generation, leagues = self._begin()

        week = await self.resolver.resolve()
        matchups = await resolve_league_matchups(week, leagues, self.sleeper)
        players = self._cached_players(week, starter_ids_needed(matchups))
        if players is None:
            players = await self.sleeper.fetch_players()
        self._ensure_current(generation)

        self.state.set_current_week(week)
        return week, [league_lineup(matchup, players) for matchup in matchups]

    def _cached_players(self, week: int, needed: Set[str]) -> Optional[PlayerTable]:
        if self.state.get_current_week() != week:
            return None
        cached = self.state.get_players()
        if cached is None or not needed <= set(cached):
            return None
        logger.debug("Reusing cached player table for %d starters", len(needed))
        return cached

    def leagues_changed(self) -> bool:
        """True when the followed leagues differ from those of the cached refresh."""
        cached = self.state.get_user_leagues()
        if cached is None:
            return False
        return _league_keys(cached) != _league_keys(self.leagues())

    def _persist(
        self,
        week: int,
        games: List[EspnGame],
        lineups: List[LineupEntry],
        players: PlayerTable,
        leagues: List[LeagueConfig],
    ) -> None:
        self.state.set_games(games)
        self.state.set_current_week(week)
        self.state.set_player_lineups(lineups)
        self.state.set_compact_players(players, referenced_player_ids(lineups))
        self.state.set_user_leagues(leagues)

    def load_cached_snapshot(self) -> Optional[RedZoneSnapshot]:
        """Read-through of the last snapshot; expired entries are swept first."""
        removed = self.state.cache.clear_expired()
        if removed:
            logger.debug("Cleared %d expired cache entries", removed)

        games = self.state.get_games()
        lineups = self.state.get_player_lineups()
        week = self.state.get_current_week()
        if games is None and lineups is None and week is None:
            return None

        return RedZoneSnapshot(
            week=week or 1,
            games=games or [],
            lineups=lineups or [],
            game_config=self.state.get_game_config(),
            selected_game=self.state.get_selected_game(),
        )


def _league_keys(leagues: List[LeagueConfig]) -> Set[Tuple[str, Optional[str]]]:
    return {(league.sleeper_league_id, league.sleeper_user_id) for league in leagues}
