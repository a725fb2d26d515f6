"""Effective NFL week resolution.

Sleeper and ESPN disagree about "the current week" around week transitions:
Sleeper usually rolls over first, before ESPN's schedule data catches up.
The resolver reconciles the two and keeps the previous week in view until a
fixed offset after the last previous-week kickoff, so a late Monday game is
not orphaned into the next week.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from redzone.config import settings
from redzone.models import EspnScoreboard, EspnWeek
from redzone.schedule.espn_client import ScheduleClient, event_weeks, events_for_week
from redzone.sleeper.sleeper_client import SleeperClient
from redzone.utils.http import UpstreamError, gather_or_cancel

logger = logging.getLogger(__name__)


@dataclass
class WeekMemo:
    timestamp: float
    week: int


def compute_effective_week(
    league_week: Optional[int],
    scoreboard: EspnScoreboard,
    now: datetime,
    transition_offset: timedelta,
) -> int:
    """Reconcile the league provider's week with the scheduled events.

    Args:
        league_week: Sleeper's declared week (None or 0 is treated as week 1)
        scoreboard: ESPN scoreboard for its own declared week
        now: Current time (timezone-aware)
        transition_offset: Time after the latest previous-week kickoff during
            which the previous week stays current

    Returns:
        The effective week, always >= 1
    """
    candidate = league_week or 1
    available = event_weeks(scoreboard.events)
    schedule_week = scoreboard.week_number

    if candidate not in available and schedule_week and schedule_week in available:
        candidate = schedule_week

    previous_games = events_for_week(scoreboard.events, candidate - 1)
    if previous_games:
        latest_kickoff = max(game.kickoff for game in previous_games)
        if now < latest_kickoff + transition_offset:
            candidate -= 1

    return max(candidate, 1)


class WeekResolver:
    """Resolves and memoizes the effective current week.

    The memo lives on the instance: it is created with the resolver at startup
    and dropped by :meth:`clear` (the manual cache-clear).
    """

    def __init__(
        self,
        sleeper: SleeperClient,
        schedule: ScheduleClient,
        memo_ttl_seconds: Optional[float] = None,
        transition_offset: Optional[timedelta] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.sleeper = sleeper
        self.schedule = schedule
        self.memo_ttl_seconds = (
            memo_ttl_seconds
            if memo_ttl_seconds is not None
            else settings.week_cache_ttl_minutes * 60
        )
        self.transition_offset = transition_offset or timedelta(
            hours=settings.week_transition_offset_hours
        )
        self._clock = clock
        self._memo: Optional[WeekMemo] = None

    @property
    def memo(self) -> Optional[WeekMemo]:
        return self._memo

    def clear(self) -> None:
        self._memo = None

    def _memoized_week(self) -> Optional[int]:
        if self._memo and self._clock() - self._memo.timestamp < self.memo_ttl_seconds:
            return self._memo.week
        return None

    def _remember(self, week: int) -> int:
        self._memo = WeekMemo(timestamp=self._clock(), week=week)
        return week

    async def resolve(self) -> int:
        """Return the effective current week.

        Raises:
            UpstreamError: If the Sleeper state cannot be fetched on the fallback path
        """
        week = self._memoized_week()
        if week is not None:
            return week
        week, _ = await self._resolve_fresh()
        return week

    async def resolve_scoreboard(self) -> EspnScoreboard:
        """Return the scoreboard narrowed to the effective week's games.

        If no event carries the effective week, all events are kept. Unlike
        :meth:`resolve`, a scoreboard failure here propagates.
        """
        week = self._memoized_week()
        if week is not None:
            scoreboard = await self.schedule.fetch_scoreboard()
        else:
            week, scoreboard = await self._resolve_fresh()
            if scoreboard is None:
                scoreboard = await self.schedule.fetch_scoreboard()
        return narrow_scoreboard(scoreboard, week)

    async def _resolve_fresh(self):
        try:
            state, scoreboard = await gather_or_cancel(
                self.sleeper.fetch_nfl_state(), self.schedule.fetch_scoreboard()
            )
        except UpstreamError as err:
            logger.error("Error calculating effective current week: %s", err)
            # Fallback is not retried: a second failure propagates
            state = await self.sleeper.fetch_nfl_state()
            return self._remember(max(state.week or 1, 1)), None

        now = datetime.fromtimestamp(self._clock(), tz=timezone.utc)
        week = compute_effective_week(
            state.week, scoreboard, now, self.transition_offset
        )
        logger.debug(
            "Effective week %s (sleeper=%s, espn=%s)",
            week,
            state.week,
            scoreboard.week_number,
        )
        return self._remember(week), scoreboard


def narrow_scoreboard(scoreboard: EspnScoreboard, week: int) -> EspnScoreboard:
    events = events_for_week(scoreboard.events, week)
    return scoreboard.model_copy(
        update={
            "week": EspnWeek(number=week),
            "events": events or list(scoreboard.events),
        }
    )
