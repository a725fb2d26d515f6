"""Week command for the RedZone CLI."""

from __future__ import annotations

from rich.console import Console

from commands import Command
from commands.league_context import FETCH_ERRORS, LeagueContext


class WeekCommand(Command):
    """Show the effective NFL week."""

    def __init__(self, console: Console, league_context: LeagueContext) -> None:
        super().__init__(console)
        self.league_context = league_context

    @property
    def name(self) -> str:
        return "/week"

    @property
    def description(self) -> str:
        return "Show the effective NFL week (the previous week stays current until its last game wraps up)."

    def handle(self, command: str) -> None:
        ctx = self.league_context
        try:
            week = ctx.run(ctx.resolver.resolve())
        except FETCH_ERRORS as err:
            ctx.report_fetch_error(err)
            return

        ctx.state.set_current_week(week)
        self.console.print(f"Current week: [bold]{week}[/bold]")
