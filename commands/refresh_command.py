"""Refresh command: effective week, this week's games and the merged lineup."""

from __future__ import annotations

from rich.console import Console

from commands import Command
from commands.league_context import FETCH_ERRORS, LeagueContext
from redzone.utils.render import render_games_table, render_lineup_table


class RefreshCommand(Command):
    """Fetch fresh data from ESPN and Sleeper and cache it."""

    def __init__(self, console: Console, league_context: LeagueContext) -> None:
        super().__init__(console)
        self.league_context = league_context

    @property
    def name(self) -> str:
        return "/refresh"

    @property
    def description(self) -> str:
        return "Resolve the current week, fetch its games and rebuild starters across all visible leagues."

    def handle(self, command: str) -> None:
        ctx = self.league_context
        with self.console.status("[cyan]Refreshing games and lineups...", spinner="dots"):
            try:
                snapshot = ctx.run(ctx.service.refresh_redzone())
            except FETCH_ERRORS as err:
                ctx.report_fetch_error(err)
                return

        ctx.snapshot = snapshot
        ctx.state.set_current_view("redzone")
        games = ctx.visible_games()
        self.console.print(
            f"[bold green]Week {snapshot.week}: {len(games)} games, "
            f"{len(snapshot.lineups)} starters tracked[/bold green]"
        )
        self.console.print(
            render_games_table(
                games, week=snapshot.week, selected_index=snapshot.selected_game
            )
        )
        if snapshot.lineups:
            self.console.print(render_lineup_table(snapshot.lineups, "Starters"))
        else:
            self.console.print("No starters found for this week.", style="yellow")
