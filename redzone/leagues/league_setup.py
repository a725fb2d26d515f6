"""Adding a Sleeper league: validation, metadata lookup and user selection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from redzone.leagues.league_store import LeagueStore
from redzone.models import LeagueConfig, SleeperLeague, SleeperUser
from redzone.sleeper.sleeper_client import SleeperClient, find_user
from redzone.utils.http import gather_or_cancel


class DuplicateLeagueError(Exception):
    """The league is already in the user's list."""


class UnknownSleeperUserError(Exception):
    """No member of the league matches the requested user."""


@dataclass
class PendingLeague:
    """A league fetched from Sleeper, awaiting the user's own-team selection."""

    league: SleeperLeague
    users: List[SleeperUser]

    @property
    def name(self) -> str:
        return self.league.name or "Unnamed League"


async def prepare_league(
    sleeper: SleeperClient, store: LeagueStore, sleeper_league_id: str
) -> PendingLeague:
    """Validate a new league id and fetch what the user needs to pick their team.

    Raises:
        DuplicateLeagueError: The league is already stored
        UpstreamError: Sleeper could not be reached
    """
    sleeper_league_id = sleeper_league_id.strip()
    existing = store.find_by_sleeper_id(sleeper_league_id)
    if existing is not None:
        raise DuplicateLeagueError(
            f'League "{existing.league_name or "Unnamed League"}" is already added!'
        )

    league, users = await gather_or_cancel(
        sleeper.fetch_league(sleeper_league_id),
        sleeper.fetch_league_users(sleeper_league_id),
    )
    return PendingLeague(league=league, users=users)


def complete_league(
    store: LeagueStore,
    pending: PendingLeague,
    user_query: Optional[str],
    nickname: Optional[str] = None,
) -> LeagueConfig:
    """Store the pending league with the selected Sleeper user.

    A league may be stored without a user, but it is skipped by lineup
    aggregation until it is re-added with one.
    """
    sleeper_user_id = None
    if user_query:
        user = find_user(pending.users, user_query)
        if user is None:
            raise UnknownSleeperUserError(
                f"No member named '{user_query}' in {pending.name}"
            )
        sleeper_user_id = user.user_id

    return store.add_league(
        sleeper_league_id=pending.league.league_id,
        sleeper_user_id=sleeper_user_id,
        league_name=pending.league.name,
        custom_nickname=nickname,
    )
