"""Storage for the leagues a user follows."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional, Protocol

from pydantic import ValidationError

from redzone.config import settings
from redzone.models import LeagueConfig
from redzone.utils.file_utils import read_json, write_json

logger = logging.getLogger(__name__)


class LeagueNotFoundError(Exception):
    """No stored league has the requested id."""


class LeagueStore(Protocol):
    """CRUD over :class:`LeagueConfig` rows owned by the current user."""

    def list_leagues(self) -> List[LeagueConfig]: ...

    def get_league(self, league_id: str) -> Optional[LeagueConfig]: ...

    def find_by_sleeper_id(self, sleeper_league_id: str) -> Optional[LeagueConfig]: ...

    def add_league(
        self,
        sleeper_league_id: str,
        sleeper_user_id: Optional[str] = None,
        league_name: Optional[str] = None,
        custom_nickname: Optional[str] = None,
    ) -> LeagueConfig: ...

    def rename_league(
        self, league_id: str, custom_nickname: Optional[str]
    ) -> LeagueConfig: ...

    def remove_league(self, league_id: str) -> None: ...


class JsonLeagueStore:
    """League store backed by a single JSON file (``~/.redzone/leagues.json``)."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path or settings.leagues_file)

    def _load(self) -> dict:
        if not self.path.exists():
            return {"next_id": 1, "leagues": []}
        try:
            data = read_json(self.path)
        except (json.JSONDecodeError, IOError) as err:
            logger.warning("Could not load league store %s: %s", self.path, err)
            return {"next_id": 1, "leagues": []}
        data.setdefault("leagues", [])
        data.setdefault("next_id", len(data["leagues"]) + 1)
        return data

    def _save(self, data: dict) -> None:
        write_json(self.path, data)

    def list_leagues(self) -> List[LeagueConfig]:
        leagues = []
        for row in self._load()["leagues"]:
            try:
                leagues.append(LeagueConfig.model_validate(row))
            except ValidationError as err:
                logger.warning("Skipping malformed league row %s: %s", row, err)
        return leagues

    def get_league(self, league_id: str) -> Optional[LeagueConfig]:
        for league in self.list_leagues():
            if league.league_id == league_id:
                return league
        return None

    def find_by_sleeper_id(self, sleeper_league_id: str) -> Optional[LeagueConfig]:
        for league in self.list_leagues():
            if league.sleeper_league_id == sleeper_league_id:
                return league
        return None

    def add_league(
        self,
        sleeper_league_id: str,
        sleeper_user_id: Optional[str] = None,
        league_name: Optional[str] = None,
        custom_nickname: Optional[str] = None,
    ) -> LeagueConfig:
        data = self._load()
        league = LeagueConfig(
            league_id=str(data["next_id"]),
            sleeper_league_id=sleeper_league_id,
            sleeper_user_id=sleeper_user_id,
            league_name=league_name,
            custom_nickname=(custom_nickname or "").strip() or None,
        )
        data["leagues"].append(league.model_dump())
        data["next_id"] += 1
        self._save(data)
        return league

    def rename_league(
        self, league_id: str, custom_nickname: Optional[str]
    ) -> LeagueConfig:
        """Set or clear (empty/None) a league's nickname."""
        data = self._load()
        for row in data["leagues"]:
            if str(row.get("league_id")) == league_id:
                row["custom_nickname"] = (custom_nickname or "").strip() or None
                self._save(data)
                return LeagueConfig.model_validate(row)
        raise LeagueNotFoundError(f"League {league_id} not found")

    def remove_league(self, league_id: str) -> None:
        data = self._load()
        remaining = [
            row for row in data["leagues"] if str(row.get("league_id")) != league_id
        ]
        if len(remaining) == len(data["leagues"]):
            raise LeagueNotFoundError(f"League {league_id} not found")
        data["leagues"] = remaining
        self._save(data)
