"""Lineups command: both sides of every league matchup, unmerged."""

from __future__ import annotations

from rich.console import Console

from commands import Command
from commands.league_context import FETCH_ERRORS, LeagueContext
from redzone.utils.render import render_league_lineup


class LineupsCommand(Command):
    """Show each league's matchup starters side by side."""

    def __init__(self, console: Console, league_context: LeagueContext) -> None:
        super().__init__(console)
        self.league_context = league_context

    @property
    def name(self) -> str:
        return "/lineups"

    @property
    def description(self) -> str:
        return "Show your starters and your opponent's for every visible league."

    def handle(self, command: str) -> None:
        ctx = self.league_context
        with self.console.status("[cyan]Loading league matchups...", spinner="dots"):
            try:
                week, lineups = ctx.run(ctx.service.refresh_league_lineups())
            except FETCH_ERRORS as err:
                ctx.report_fetch_error(err)
                return

        if not lineups:
            self.console.print(
                "No matchups found. Check that each league has a Sleeper user.",
                style="yellow",
            )
            return

        ctx.state.set_current_view("leagues")
        self.console.print(f"[bold green]League matchups (Week {week})[/bold green]")
        for lineup in lineups:
            self.console.print(render_league_lineup(lineup))
