"""Exit command for the RedZone CLI."""

from __future__ import annotations

from typing import Sequence

from rich.console import Console

from commands import Command
from commands.league_context import LeagueContext


class ExitCommand(Command):
    """Save pending cache writes; the main loop ends the session afterwards."""

    def __init__(self, console: Console, league_context: LeagueContext) -> None:
        super().__init__(console)
        self.league_context = league_context

    @property
    def name(self) -> str:
        return "/exit"

    @property
    def aliases(self) -> Sequence[str]:
        return ("/quit",)

    @property
    def description(self) -> str:
        return "Flush pending cache writes and exit the CLI."

    def handle(self, command: str) -> None:
        ctx = self.league_context
        if ctx.flush():
            week = ctx.snapshot.week if ctx.snapshot else None
            saved = f"week {week} saved" if week else "nothing cached"
            self.console.print(f"[dim]Goodbye ({saved}).[/dim]")
