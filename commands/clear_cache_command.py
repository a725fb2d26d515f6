"""Clear-cache command for the RedZone CLI."""

from __future__ import annotations

from rich.console import Console

from commands import Command
from commands.league_context import LeagueContext


class ClearCacheCommand(Command):
    """Drop every cached entry and the week memo."""

    def __init__(self, console: Console, league_context: LeagueContext) -> None:
        super().__init__(console)
        self.league_context = league_context

    @property
    def name(self) -> str:
        return "/clear-cache"

    @property
    def description(self) -> str:
        return "Delete cached games, lineups, players and view state. Leagues are kept."

    def handle(self, command: str) -> None:
        ctx = self.league_context
        ctx.state.clear_cache()
        ctx.reset_view()
        self.console.print("Cache cleared. Run /refresh to reload.", style="green")
