"""Game command: select a game and show who is playing in it."""

from __future__ import annotations

from typing import Dict, List

from rich.console import Console

from commands import Command
from commands.league_context import LeagueContext
from redzone.schedule.game_filter import players_for_game
from redzone.utils.render import matchup_label, render_game_players


class GameCommand(Command):
    """Select a visible game by its keyboard key."""

    def __init__(self, console: Console, league_context: LeagueContext) -> None:
        super().__init__(console)
        self.league_context = league_context

    @property
    def name(self) -> str:
        return "/game"

    @property
    def description(self) -> str:
        return "Select a game (1-9, then A-Z) and show your players and your opponents' in it."

    @property
    def arguments(self) -> List[Dict[str, str | bool]]:
        return [
            {
                "name": "[key]",
                "required": False,
                "default": "selected game",
                "description": "Game key as listed by /games",
            },
        ]

    def handle(self, command: str) -> None:
        ctx = self.league_context
        games = ctx.visible_games()
        if not games:
            self.console.print("No games loaded. Run /refresh first.", style="yellow")
            return

        parts = command.split()
        if len(parts) > 1:
            index = ctx.visible_game_for_key(parts[1])
            if index is None:
                self.console.print(f"No game with key '{parts[1]}'.", style="red")
                return
            ctx.state.set_selected_game(index)

        game = ctx.selected_game()
        if game is None:
            self.console.print("No game selected. Use /game <key>.", style="yellow")
            return

        lineups = ctx.snapshot.lineups if ctx.snapshot else []
        self.console.print(f"[bold green]{matchup_label(game)}[/bold green]")
        for table in render_game_players(game, players_for_game(game, lineups)):
            self.console.print(table)
