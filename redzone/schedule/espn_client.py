"""ESPN NFL scoreboard client."""

from __future__ import annotations

from typing import List, Optional, Set

import httpx

from redzone.config import settings
from redzone.models import EspnGame, EspnScoreboard
from redzone.utils.http import JsonGateway


class ScheduleClient(JsonGateway):
    """Fetches the current-week NFL scoreboard. No authentication required."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        scoreboard_url: Optional[str] = None,
    ) -> None:
        super().__init__(client)
        self.scoreboard_url = scoreboard_url or settings.espn_scoreboard_url

    async def fetch_scoreboard(self) -> EspnScoreboard:
        return await self._get_parsed(
            self.scoreboard_url,
            "ESPN",
            lambda data: EspnScoreboard.model_validate(data or {}),
        )


def event_weeks(events: List[EspnGame]) -> Set[int]:
    """Week numbers actually present among scheduled events."""
    return {game.week_number for game in events if game.week_number}


def events_for_week(events: List[EspnGame], week: int) -> List[EspnGame]:
    return [game for game in events if game.week_number == week]
