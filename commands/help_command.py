"""Help command for the RedZone CLI."""

from __future__ import annotations

from typing import Optional

from rich.console import Console

from commands import Command
from commands.league_context import LeagueContext
from redzone.utils.cli_common import CommandRegistry, show_capabilities


class HelpCommand(Command):
    """List every command, with a one-line summary of what is cached."""

    def __init__(
        self,
        console: Console,
        registry: CommandRegistry,
        league_context: Optional[LeagueContext] = None,
    ) -> None:
        super().__init__(console)
        self.registry = registry
        self.league_context = league_context

    @property
    def name(self) -> str:
        return "/help"

    @property
    def description(self) -> str:
        return "Display available commands."

    def handle(self, command: str) -> None:
        show_capabilities(self.registry, self.console, footer=self._cache_summary())

    def _cache_summary(self) -> Optional[str]:
        if self.league_context is None:
            return None
        snapshot = self.league_context.snapshot
        if snapshot is None:
            return "Cache: empty (run /refresh)"
        return (
            f"Cache: week {snapshot.week}, {len(snapshot.games)} games, "
            f"{len(snapshot.lineups)} lineup entries"
        )
