"""Cross-league lineup aggregation.

For each configured league the user's roster and this week's opponent are
resolved, starters are taken (matchup-level starters preferred over the
roster's own list), and players appearing in several leagues are merged into
a single entry per ``(player_id, is_opponent, team)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from redzone.lineup.player_index import resolve_starters
from redzone.models import (
    LeagueConfig,
    LeagueLineup,
    LineupEntry,
    LineupPlayer,
    PlayerTable,
    RosterLineup,
    SleeperMatchup,
    SleeperRoster,
    SleeperUser,
)
from redzone.sleeper.sleeper_client import (
    SleeperClient,
    find_matchup,
    find_opponent_matchup,
    find_roster,
    find_user_roster,
)
from redzone.utils.http import gather_or_cancel

logger = logging.getLogger(__name__)


@dataclass
class LeagueMatchup:
    """Both sides of the user's matchup in one league for one week."""

    league: LeagueConfig
    user_roster: SleeperRoster
    user_matchup: Optional[SleeperMatchup] = None
    opponent_roster: Optional[SleeperRoster] = None
    opponent_matchup: Optional[SleeperMatchup] = None
    users: List[SleeperUser] = field(default_factory=list)

    @property
    def is_bye(self) -> bool:
        return self.opponent_roster is None

    @property
    def user_starter_ids(self) -> List[str]:
        return starter_ids(self.user_matchup, self.user_roster)

    @property
    def opponent_starter_ids(self) -> List[str]:
        return starter_ids(self.opponent_matchup, self.opponent_roster)

    def owner_name(self, roster: Optional[SleeperRoster], fallback: str) -> str:
        if roster is None:
            return fallback
        for user in self.users:
            if user.user_id == roster.owner_id and user.display_name:
                return user.display_name
        return fallback


def starter_ids(
    matchup: Optional[SleeperMatchup], roster: Optional[SleeperRoster]
) -> List[str]:
    """Matchup starters reflect the live lineup; roster starters can be stale."""
    if matchup is not None and matchup.starters is not None:
        return list(matchup.starters)
    if roster is not None and roster.starters is not None:
        return list(roster.starters)
    return []


async def resolve_league_matchup(
    league: LeagueConfig, week: int, sleeper: SleeperClient
) -> Optional[LeagueMatchup]:
    """Fetch a league's rosters, users and matchups and locate the user's pairing.

    Returns None (after logging) when the league has no stored Sleeper user id
    or the user owns no roster in it. Gateway errors propagate.
    """
    league_id = league.sleeper_league_id
    if not league.sleeper_user_id:
        logger.warning(
            "No Sleeper user ID stored for league %s. Re-add it with a user selection.",
            league_id,
        )
        return None

    rosters, users, matchups = await gather_or_cancel(
        sleeper.fetch_league_rosters(league_id),
        sleeper.fetch_league_users(league_id),
        sleeper.fetch_matchups(league_id, week),
    )

    user_roster = find_user_roster(rosters, league.sleeper_user_id)
    if user_roster is None:
        logger.warning(
            "User roster not found in league %s for Sleeper user %s",
            league_id,
            league.sleeper_user_id,
        )
        return None

    user_matchup = find_matchup(matchups, user_roster.roster_id)
    opponent_matchup = find_opponent_matchup(matchups, user_matchup)
    opponent_roster = (
        find_roster(rosters, opponent_matchup.roster_id) if opponent_matchup else None
    )
    if opponent_roster is None:
        logger.info("League %s: no opponent in week %s (bye)", league_id, week)

    return LeagueMatchup(
        league=league,
        user_roster=user_roster,
        user_matchup=user_matchup,
        opponent_roster=opponent_roster,
        opponent_matchup=opponent_matchup if opponent_roster else None,
        users=users,
    )


def merge_entry(
    entries: List[LineupEntry],
    index: Dict[Tuple[str, bool, str], LineupEntry],
    candidate: LineupEntry,
) -> None:
    """Append ``candidate``'s leagues to a matching entry, or insert it."""
    existing = index.get(candidate.merge_key)
    if existing is None:
        entries.append(candidate)
        index[candidate.merge_key] = candidate
        return
    existing.league_ids.extend(candidate.league_ids)
    existing.league_names.extend(candidate.league_names)


def _candidates(
    players: Sequence[LineupPlayer], league: LeagueConfig, is_opponent: bool
) -> List[LineupEntry]:
    return [
        LineupEntry(
            player_id=player.player_id,
            name=player.name,
            position=player.position,
            team=player.team,
            jersey_number=player.jersey_number,
            league_ids=[league.sleeper_league_id],
            league_names=[league.display_name],
            is_opponent=is_opponent,
        )
        for player in players
    ]


async def aggregate_lineups(
    week: int,
    leagues: Sequence[LeagueConfig],
    player_index: PlayerTable,
    sleeper: SleeperClient,
) -> List[LineupEntry]:
    """Build the deduplicated "who is playing" set across all leagues.

    Leagues are processed one at a time; a gateway error in any league aborts
    the whole aggregation.
    """
    entries: List[LineupEntry] = []
    index: Dict[Tuple[str, bool, str], LineupEntry] = {}

    for league in leagues:
        matchup = await resolve_league_matchup(league, week, sleeper)
        if matchup is None:
            continue

        mine = resolve_starters(matchup.user_starter_ids, player_index)
        theirs = resolve_starters(matchup.opponent_starter_ids, player_index)

        for candidate in _candidates(mine, league, is_opponent=False):
            merge_entry(entries, index, candidate)
        for candidate in _candidates(theirs, league, is_opponent=True):
            merge_entry(entries, index, candidate)

    return entries


async def resolve_league_matchups(
    week: int, leagues: Sequence[LeagueConfig], sleeper: SleeperClient
) -> List[LeagueMatchup]:
    """Matchups for every league that has one, in league order."""
    matchups = []
    for league in leagues:
        matchup = await resolve_league_matchup(league, week, sleeper)
        if matchup is not None:
            matchups.append(matchup)
    return matchups


def starter_ids_needed(matchups: Iterable[LeagueMatchup]) -> Set[str]:
    """Every non-empty starter id on either side of ``matchups``."""
    needed: Set[str] = set()
    for matchup in matchups:
        needed.update(matchup.user_starter_ids)
        needed.update(matchup.opponent_starter_ids)
    needed.discard("")
    return needed


def league_lineup(matchup: LeagueMatchup, player_index: PlayerTable) -> LeagueLineup:
    user_side = RosterLineup(
        roster_id=matchup.user_roster.roster_id,
        owner=matchup.owner_name(matchup.user_roster, "You"),
        starters=resolve_starters(matchup.user_starter_ids, player_index),
    )
    opponent_side = None
    if matchup.opponent_roster is not None:
        opponent_side = RosterLineup(
            roster_id=matchup.opponent_roster.roster_id,
            owner=matchup.owner_name(matchup.opponent_roster, "Opponent"),
            starters=resolve_starters(matchup.opponent_starter_ids, player_index),
        )

    return LeagueLineup(
        league_id=matchup.league.sleeper_league_id,
        league_name=matchup.league.display_name,
        user_side=user_side,
        opponent_side=opponent_side,
        matchup_id=matchup.user_matchup.matchup_id if matchup.user_matchup else None,
    )


async def build_league_lineups(
    week: int,
    leagues: Sequence[LeagueConfig],
    player_index: PlayerTable,
    sleeper: SleeperClient,
) -> List[LeagueLineup]:
    """Per-league view of both sides of each matchup, without merging."""
    matchups = await resolve_league_matchups(week, leagues, sleeper)
    return [league_lineup(matchup, player_index) for matchup in matchups]
