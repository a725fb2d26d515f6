"""Pydantic models for upstream payloads and RedZone state."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UpstreamModel(BaseModel):
    """Base for upstream JSON records: unknown fields ignored, aliases accepted."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# Sleeper


class SleeperNFLState(UpstreamModel):
    """Global NFL state as reported by Sleeper."""

    week: Optional[int] = None
    display_week: Optional[int] = None
    season: Optional[str] = None
    season_type: Optional[str] = None


class SleeperLeague(UpstreamModel):
    """League metadata."""

    league_id: str
    name: Optional[str] = None
    season: Optional[str] = None
    season_type: Optional[str] = None
    sport: Optional[str] = None
    status: Optional[str] = None
    total_rosters: Optional[int] = None
    roster_positions: List[str] = []


class SleeperUser(UpstreamModel):
    """A member of a league."""

    user_id: str
    display_name: Optional[str] = None
    avatar: Optional[str] = None


class SleeperRoster(UpstreamModel):
    """A league squad. ``starters`` is None when Sleeper omits it."""

    roster_id: int
    owner_id: Optional[str] = None
    league_id: Optional[str] = None
    players: Optional[List[str]] = None
    starters: Optional[List[str]] = None
    reserve: Optional[List[str]] = None
    taxi: Optional[List[str]] = None


class SleeperMatchup(UpstreamModel):
    """One roster's side of a weekly pairing; ``matchup_id`` is the pairing key."""

    roster_id: int
    matchup_id: Optional[int] = None
    points: float = 0.0
    starters: Optional[List[str]] = None
    players_points: Optional[Dict[str, float]] = None

    @field_validator("points", mode="before")
    @classmethod
    def _null_points(cls, value):
        return 0.0 if value is None else value


class SleeperPlayer(UpstreamModel):
    """Reference data for a single NFL player."""

    player_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    position: Optional[str] = None
    team: Optional[str] = None
    number: Optional[Union[int, str]] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def jersey_number(self) -> Optional[str]:
        if self.number is None or self.number == "":
            return None
        return str(self.number)


PlayerTable = Dict[str, SleeperPlayer]


# ESPN


class EspnTeam(UpstreamModel):
    id: Optional[str] = None
    abbreviation: str = ""
    display_name: Optional[str] = Field(default=None, alias="displayName")
    short_display_name: Optional[str] = Field(default=None, alias="shortDisplayName")
    name: Optional[str] = None
    location: Optional[str] = None
    logo: Optional[str] = None


class EspnRecord(UpstreamModel):
    name: Optional[str] = None
    type: Optional[str] = None
    summary: Optional[str] = None


class EspnCompetitor(UpstreamModel):
    id: Optional[str] = None
    home_away: str = Field(alias="homeAway")
    team: EspnTeam
    score: Optional[str] = None
    records: List[EspnRecord] = []

    @property
    def record_summary(self) -> Optional[str]:
        for record in self.records:
            if record.summary:
                return record.summary
        return None


class EspnAddress(UpstreamModel):
    city: Optional[str] = None
    state: Optional[str] = None


class EspnVenue(UpstreamModel):
    id: Optional[str] = None
    full_name: Optional[str] = Field(default=None, alias="fullName")
    address: Optional[EspnAddress] = None
    indoor: Optional[bool] = None


class EspnStatusType(UpstreamModel):
    name: Optional[str] = None
    state: Optional[str] = None
    completed: bool = False
    short_detail: Optional[str] = Field(default=None, alias="shortDetail")


class EspnStatus(UpstreamModel):
    display_clock: Optional[str] = Field(default=None, alias="displayClock")
    period: Optional[int] = None
    type: Optional[EspnStatusType] = None


class EspnBroadcast(UpstreamModel):
    market: Optional[str] = None
    names: List[str] = []


class EspnCompetition(UpstreamModel):
    id: Optional[str] = None
    date: Optional[str] = None
    venue: Optional[EspnVenue] = None
    competitors: List[EspnCompetitor] = []
    status: Optional[EspnStatus] = None
    broadcasts: List[EspnBroadcast] = []

    def competitor(self, home_away: str) -> Optional[EspnCompetitor]:
        for competitor in self.competitors:
            if competitor.home_away == home_away:
                return competitor
        return None


class EspnWeek(UpstreamModel):
    number: Optional[int] = None


class EspnWeather(UpstreamModel):
    display_value: Optional[str] = Field(default=None, alias="displayValue")
    temperature: Optional[float] = None


class EspnGame(UpstreamModel):
    """A scheduled NFL game (an ESPN scoreboard event)."""

    id: str
    date: str
    name: Optional[str] = None
    short_name: Optional[str] = Field(default=None, alias="shortName")
    week: Optional[EspnWeek] = None
    competitions: List[EspnCompetition] = []
    weather: Optional[EspnWeather] = None

    @property
    def week_number(self) -> Optional[int]:
        return self.week.number if self.week else None

    @property
    def kickoff(self) -> datetime:
        """Kickoff as an aware datetime (ESPN sends e.g. ``2025-09-07T17:00Z``)."""
        return parse_espn_datetime(self.date)

    @property
    def competition(self) -> Optional[EspnCompetition]:
        return self.competitions[0] if self.competitions else None

    @property
    def home_team(self) -> Optional[EspnCompetitor]:
        return self.competition.competitor("home") if self.competition else None

    @property
    def away_team(self) -> Optional[EspnCompetitor]:
        return self.competition.competitor("away") if self.competition else None


class EspnScoreboard(UpstreamModel):
    week: Optional[EspnWeek] = None
    events: List[EspnGame] = []

    @property
    def week_number(self) -> Optional[int]:
        return self.week.number if self.week else None


def parse_espn_datetime(value: str) -> datetime:
    """Parse an ESPN timestamp, treating a trailing ``Z`` as UTC."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# RedZone state


class LeagueConfig(BaseModel):
    """A league the user follows."""

    league_id: str
    sleeper_league_id: str
    sleeper_user_id: Optional[str] = None
    league_name: Optional[str] = None
    custom_nickname: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.custom_nickname or self.league_name or "League"


class LineupEntry(BaseModel):
    """One player's appearance as "mine" or "opponent's", tagged with every league."""

    player_id: str
    name: str
    position: str
    team: str
    jersey_number: Optional[str] = None
    league_ids: List[str] = []
    league_names: List[str] = []
    is_opponent: bool = False

    @property
    def merge_key(self) -> Tuple[str, bool, str]:
        return (self.player_id, self.is_opponent, self.team)


class LineupPlayer(BaseModel):
    player_id: str
    name: str
    position: str
    team: str
    jersey_number: Optional[str] = None


class RosterLineup(BaseModel):
    roster_id: int
    owner: str
    starters: List[LineupPlayer] = []


class LeagueLineup(BaseModel):
    """Per-league (unmerged) view of both sides of the user's matchup."""

    league_id: str
    league_name: str
    user_side: RosterLineup
    opponent_side: Optional[RosterLineup] = None
    matchup_id: Optional[int] = None


class GameConfig(BaseModel):
    game_id: str
    is_visible: bool = True
    custom_order: int = 0
    custom_label: Optional[str] = None


class TeamPlayers(BaseModel):
    my_players: List[LineupEntry] = []
    opponents: List[LineupEntry] = []


class GamePlayers(BaseModel):
    home: TeamPlayers = Field(default_factory=TeamPlayers)
    away: TeamPlayers = Field(default_factory=TeamPlayers)
