"""Shared context for RedZone commands: clients, cache, league store and view state."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, List, Optional, TypeVar

from rich.console import Console
from rich.markup import escape

from redzone.cache.app_state import AppState, build_local_cache
from redzone.cache.local_cache import StorageQuotaExceeded
from redzone.leagues.league_store import JsonLeagueStore
from redzone.models import EspnGame, GameConfig, LeagueConfig
from redzone.refresh import (
    NoLeaguesConfiguredError,
    RedZoneSnapshot,
    RefreshService,
    StaleRefreshError,
)
from redzone.schedule.espn_client import ScheduleClient
from redzone.schedule.game_filter import apply_config, index_for_key, ordered_configs
from redzone.schedule.week_resolver import WeekResolver
from redzone.sleeper.sleeper_client import SleeperClient
from redzone.utils.http import UpstreamError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors a refresh can surface to the user as a single message
FETCH_ERRORS = (UpstreamError, NoLeaguesConfiguredError, StaleRefreshError)


class LeagueContext:
    """Owns the long-lived objects every command works with.

    Commands are synchronous; async work runs on one event loop kept for the
    whole session so the HTTP connection pools stay usable between commands.
    """

    def __init__(
        self,
        console: Console,
        cache_dir: Optional[Path] = None,
        leagues_file: Optional[Path] = None,
        sleeper: Optional[SleeperClient] = None,
        schedule: Optional[ScheduleClient] = None,
    ) -> None:
        self.console = console
        self.loop = asyncio.new_event_loop()
        self.cache = build_local_cache(cache_dir)
        self.state = AppState(self.cache)
        self.store = JsonLeagueStore(leagues_file)
        self.sleeper = sleeper or SleeperClient()
        self.schedule = schedule or ScheduleClient()
        self.resolver = WeekResolver(self.sleeper, self.schedule)
        self.service = RefreshService(self.sleeper, self.resolver, self.state, self.store)
        self.snapshot: Optional[RedZoneSnapshot] = None

    def run(self, coro: Awaitable[T]) -> T:
        """Run ``coro`` to completion, then write any debounced cache values."""
        try:
            return self.loop.run_until_complete(coro)
        finally:
            self.flush()

    def flush(self) -> bool:
        """Write pending cache values; a quota failure is reported, not raised.

        Returns:
            True if everything pending was written
        """
        try:
            self.cache.flush()
        except StorageQuotaExceeded as err:
            logger.error("Cache flush failed: %s", err)
            self.console.print(f"Error saving cache: {escape(str(err))}", style="red")
            return False
        return True

    def report_fetch_error(self, err: Exception) -> None:
        self.console.print(f"Error fetching data: {escape(str(err))}", style="red")

    def load_cached(self) -> Optional[RedZoneSnapshot]:
        self.snapshot = self.service.load_cached_snapshot()
        return self.snapshot

    def leagues(self) -> List[LeagueConfig]:
        return self.store.list_leagues()

    # Games

    @property
    def games(self) -> List[EspnGame]:
        return list(self.snapshot.games) if self.snapshot else []

    def visible_games(self) -> List[EspnGame]:
        return apply_config(self.games, self.state.get_game_config())

    def editable_configs(self) -> List[GameConfig]:
        return ordered_configs(self.games, self.state.get_game_config())

    def visible_game_for_key(self, key: str) -> Optional[int]:
        return index_for_key(key, len(self.visible_games()))

    def selected_game(self) -> Optional[EspnGame]:
        index = self.state.get_selected_game()
        games = self.visible_games()
        if index is None or index >= len(games):
            return None
        return games[index]

    def reset_view(self) -> None:
        self.snapshot = None
        self.resolver.clear()

    def close(self) -> None:
        try:
            self.loop.run_until_complete(self._aclose())
        finally:
            self.flush()
            self.loop.close()

    async def _aclose(self) -> None:
        await asyncio.gather(self.sleeper.aclose(), self.schedule.aclose())
