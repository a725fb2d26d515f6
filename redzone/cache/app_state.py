"""Typed accessors for the persisted RedZone state keys."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Set, Type, TypeVar

from pydantic import BaseModel, ValidationError

from redzone.cache.local_cache import LocalCache
from redzone.models import (
    EspnGame,
    GameConfig,
    LeagueConfig,
    LineupEntry,
    PlayerTable,
    SleeperPlayer,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Views the CLI can restore on startup
VIEWS = ("redzone", "leagues", "dashboard")

# Fields kept when compacting the player reference table
COMPACT_PLAYER_FIELDS = ("first_name", "last_name", "position", "team", "number")


class StorageKeys:
    GAMES = "redzone_games"
    PLAYER_LINEUPS = "redzone_player_lineups"
    GAME_CONFIG = "redzone_game_config"
    SLEEPER_PLAYERS = "redzone_sleeper_players"
    SELECTED_GAME = "redzone_selected_game"
    CURRENT_WEEK = "redzone_current_week"
    CURRENT_VIEW = "redzone_current_view"
    USER_LEAGUES = "redzone_user_leagues"
    HIDDEN_LEAGUES = "redzone_hidden_leagues"

    ALL = (
        GAMES,
        PLAYER_LINEUPS,
        GAME_CONFIG,
        SLEEPER_PLAYERS,
        SELECTED_GAME,
        CURRENT_WEEK,
        CURRENT_VIEW,
        USER_LEAGUES,
        HIDDEN_LEAGUES,
    )


def build_local_cache(cache_dir: Optional[Path] = None, **kwargs) -> LocalCache:
    """Create the application cache; the player table is the only skippable key."""
    return LocalCache(
        cache_dir=cache_dir, oversize_keys=(StorageKeys.SLEEPER_PLAYERS,), **kwargs
    )


def compact_players(all_players: PlayerTable, player_ids: Iterable[str]) -> dict:
    """Reduce the player table to the ids referenced by the current lineups."""
    compact = {}
    for player_id in player_ids:
        player = all_players.get(player_id)
        if player is None:
            continue
        compact[player_id] = player.model_dump(include=set(COMPACT_PLAYER_FIELDS))
    return compact


class AppState:
    """Reads and writes the logical state keys through a :class:`LocalCache`."""

    def __init__(self, cache: LocalCache) -> None:
        self.cache = cache

    # Games

    def get_games(self) -> Optional[List[EspnGame]]:
        return self._load_list(StorageKeys.GAMES, EspnGame)

    def set_games(self, games: List[EspnGame]) -> None:
        self.cache.set(StorageKeys.GAMES, [game.model_dump() for game in games])

    def get_game_config(self) -> List[GameConfig]:
        return self._load_list(StorageKeys.GAME_CONFIG, GameConfig) or []

    def set_game_config(self, configs: List[GameConfig]) -> None:
        self.cache.set(
            StorageKeys.GAME_CONFIG, [config.model_dump() for config in configs]
        )

    def get_selected_game(self) -> Optional[int]:
        value = self.cache.get(StorageKeys.SELECTED_GAME)
        return value if isinstance(value, int) else None

    def set_selected_game(self, index: Optional[int]) -> None:
        if index is None:
            self.cache.remove(StorageKeys.SELECTED_GAME)
        else:
            self.cache.set(StorageKeys.SELECTED_GAME, index)

    # Lineups and players

    def get_player_lineups(self) -> Optional[List[LineupEntry]]:
        return self._load_list(StorageKeys.PLAYER_LINEUPS, LineupEntry)

    def set_player_lineups(self, lineups: List[LineupEntry]) -> None:
        self.cache.set(
            StorageKeys.PLAYER_LINEUPS, [entry.model_dump() for entry in lineups]
        )

    def get_players(self) -> Optional[PlayerTable]:
        raw = self.cache.get(StorageKeys.SLEEPER_PLAYERS)
        if not isinstance(raw, dict):
            return None
        try:
            return {
                player_id: SleeperPlayer.model_validate({**fields, "player_id": player_id})
                for player_id, fields in raw.items()
            }
        except (ValidationError, TypeError) as err:
            logger.warning("Discarding malformed player cache: %s", err)
            self.cache.remove(StorageKeys.SLEEPER_PLAYERS)
            return None

    def set_compact_players(
        self, all_players: PlayerTable, player_ids: Iterable[str]
    ) -> None:
        self.cache.set(
            StorageKeys.SLEEPER_PLAYERS, compact_players(all_players, player_ids)
        )

    # Week / view

    def get_current_week(self) -> Optional[int]:
        value = self.cache.get(StorageKeys.CURRENT_WEEK)
        return value if isinstance(value, int) and value > 0 else None

    def set_current_week(self, week: int) -> None:
        self.cache.set(StorageKeys.CURRENT_WEEK, week)

    def get_current_view(self) -> Optional[str]:
        value = self.cache.get(StorageKeys.CURRENT_VIEW)
        return value if value in VIEWS else None

    def set_current_view(self, view: str) -> None:
        if view not in VIEWS:
            raise ValueError(f"Unknown view: {view}")
        self.cache.set(StorageKeys.CURRENT_VIEW, view)

    # Leagues

    def get_user_leagues(self) -> Optional[List[LeagueConfig]]:
        return self._load_list(StorageKeys.USER_LEAGUES, LeagueConfig)

    def set_user_leagues(self, leagues: List[LeagueConfig]) -> None:
        self.cache.set(
            StorageKeys.USER_LEAGUES, [league.model_dump() for league in leagues]
        )

    def get_hidden_leagues(self) -> Set[str]:
        value = self.cache.get(StorageKeys.HIDDEN_LEAGUES)
        if not isinstance(value, list):
            return set()
        return {str(league_id) for league_id in value}

    def set_hidden_leagues(self, league_ids: Iterable[str]) -> None:
        # Survives a CLI exit, so skip the debounce
        self.cache.set_immediate(StorageKeys.HIDDEN_LEAGUES, sorted(set(league_ids)))

    def hide_league(self, league_id: str) -> None:
        self.set_hidden_leagues(self.get_hidden_leagues() | {league_id})

    def show_league(self, league_id: str) -> None:
        self.set_hidden_leagues(self.get_hidden_leagues() - {league_id})

    def clear_cache(self) -> None:
        self.cache.clear_all()

    def _load_list(self, key: str, model: Type[ModelT]) -> Optional[List[ModelT]]:
        raw = self.cache.get(key)
        if raw is None:
            return None
        if not isinstance(raw, list):
            self.cache.remove(key)
            return None
        try:
            return [model.model_validate(item) for item in raw]
        except ValidationError as err:
            logger.warning("Discarding malformed cache entry %s: %s", key, err)
            self.cache.remove(key)
            return None


def visible_leagues(
    leagues: Iterable[LeagueConfig], hidden: Set[str]
) -> List[LeagueConfig]:
    return [league for league in leagues if league.league_id not in hidden]
