"""Interactive RedZone CLI entry point."""

from __future__ import annotations

import logging
import os
from typing import List

from rich.console import Console
from rich.markup import escape

from commands import Command
from commands.clear_cache_command import ClearCacheCommand
from commands.exit_command import ExitCommand
from commands.game_command import GameCommand
from commands.games_command import GamesCommand
from commands.help_command import HelpCommand
from commands.league_context import LeagueContext
from commands.leagues_command import LeaguesCommand
from commands.lineups_command import LineupsCommand
from commands.refresh_command import RefreshCommand
from commands.week_command import WeekCommand
from redzone.config import settings
from redzone.utils.cli_common import CommandRegistry, prompt_with_completion
from redzone.utils.render import render_games_table, render_lineup_table


def configure_logging() -> None:
    # Can be controlled via LOG_LEVEL environment variable
    log_level = os.environ.get("LOG_LEVEL", settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_registry(console: Console, league_context: LeagueContext) -> CommandRegistry:
    registry = CommandRegistry()
    commands: List[Command] = [
        HelpCommand(console, registry, league_context),
        RefreshCommand(console, league_context),
        GamesCommand(console, league_context),
        GameCommand(console, league_context),
        LineupsCommand(console, league_context),
        LeaguesCommand(console, league_context),
        WeekCommand(console, league_context),
        ClearCacheCommand(console, league_context),
        ExitCommand(console, league_context),
    ]
    for command in commands:
        registry.register(
            command.name,
            command.execute,
            command.description,
            aliases=command.aliases,
            subcommands=command.subcommands,
        )
    return registry


def _restore_session(
    console: Console, league_context: LeagueContext, registry: CommandRegistry
) -> None:
    """Read the cache back and reopen the view the last session ended on."""
    snapshot = league_context.load_cached()
    if snapshot is None:
        console.print("No cached data. Run /refresh to load this week.", style="dim")
        return

    console.print(
        f"[dim]Restored week {snapshot.week}: {len(snapshot.games)} games, "
        f"{len(snapshot.lineups)} starters[/dim]"
    )
    if league_context.service.leagues_changed():
        console.print(
            "Your leagues changed since the last refresh. Run /refresh to update.",
            style="yellow",
        )

    view = league_context.state.get_current_view()
    if view == "redzone":
        console.print(
            render_games_table(
                league_context.visible_games(),
                week=snapshot.week,
                selected_index=snapshot.selected_game,
            )
        )
        if snapshot.lineups:
            console.print(render_lineup_table(snapshot.lineups, "Starters"))
    elif view == "dashboard":
        registry.get("/leagues").handler("/leagues list")
    elif view == "leagues":
        console.print("[dim]Last view: league matchups. Run /lineups to reload.[/dim]")


EXIT_COMMANDS = ("/exit", "/quit")


def main() -> None:
    configure_logging()
    console = Console()
    league_context = LeagueContext(console)
    registry = build_registry(console, league_context)

    console.print(f"[bold red]{settings.app_name}[/bold red]  (type /help)")
    _restore_session(console, league_context, registry)

    try:
        while True:
            try:
                line = prompt_with_completion(registry)
            except (EOFError, KeyboardInterrupt):
                break
            if not line:
                continue

            ctx = registry.resolve(line)
            if ctx is None:
                console.print(
                    f"Unknown command: {escape(line.split()[0])}. Type /help.",
                    style="yellow",
                )
                continue

            ctx.handler(line)
            if ctx.name in EXIT_COMMANDS and "-h" not in line and "--help" not in line:
                break
    finally:
        league_context.close()


if __name__ == "__main__":
    main()
