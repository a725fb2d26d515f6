"""Games command: list games and edit their visibility and order."""

from __future__ import annotations

from typing import Dict, List, Sequence

from rich.console import Console
from rich.markup import escape

from commands import Command, CommandError
from commands.league_context import LeagueContext
from redzone.models import GameConfig
from redzone.schedule.game_filter import (
    WINDOW_FILTERS,
    apply_window_filter,
    default_configs,
    index_for_key,
    move_config,
    renumber,
    toggle_visibility,
)
from redzone.utils.render import render_game_config_table, render_games_table


class GamesCommand(Command):
    """Show this week's games and manage which are visible."""

    def __init__(self, console: Console, league_context: LeagueContext) -> None:
        super().__init__(console)
        self.league_context = league_context

    @property
    def name(self) -> str:
        return "/games"

    @property
    def description(self) -> str:
        return "List visible games, or configure them (show, hide, window, move, reset)."

    @property
    def subcommands(self) -> Sequence[str]:
        return ("list", "show", "hide", "window", "move", "reset")

    @property
    def arguments(self) -> List[Dict[str, str | bool]]:
        return [
            {
                "name": "list",
                "required": False,
                "default": "visible games",
                "description": "Show every game with its visibility and kickoff window",
            },
            {
                "name": "show|hide <key>",
                "required": False,
                "description": "Toggle one game (key from '/games list')",
            },
            {
                "name": "window <filter>",
                "required": False,
                "description": f"Show only games in a window: {', '.join(WINDOW_FILTERS)}",
            },
            {
                "name": "move <key> <position>",
                "required": False,
                "description": "Move a game to a 1-based position",
            },
            {
                "name": "reset",
                "required": False,
                "description": "Show all games in original order",
            },
        ]

    def handle(self, command: str) -> None:
        ctx = self.league_context
        if not ctx.games:
            self.console.print("No games loaded. Run /refresh first.", style="yellow")
            return

        parts = command.split()
        action = parts[1].lower() if len(parts) > 1 else ""
        try:
            if not action:
                self._show_visible()
            elif action == "list":
                self._show_config(ctx.editable_configs())
            elif action in ("show", "hide"):
                self._toggle(parts, visible=action == "show")
            elif action == "window":
                self._window(parts)
            elif action == "move":
                self._move(parts)
            elif action == "reset":
                self._save(default_configs(ctx.games))
                self.console.print("Game configuration reset.", style="green")
            else:
                raise CommandError(f"Unknown action '{action}'. See /games --help.")
        except CommandError as err:
            self.console.print(escape(str(err)), style="red")

    def _show_visible(self) -> None:
        ctx = self.league_context
        week = ctx.snapshot.week if ctx.snapshot else None
        self.console.print(
            render_games_table(
                ctx.visible_games(),
                week=week,
                selected_index=ctx.state.get_selected_game(),
            )
        )

    def _show_config(self, configs: List[GameConfig]) -> None:
        self.console.print(render_game_config_table(configs, self.league_context.games))

    def _config_for_key(self, configs: List[GameConfig], key: str) -> GameConfig:
        index = index_for_key(key, len(configs))
        if index is None:
            raise CommandError(f"No game with key '{key}'. See /games list.")
        return configs[index]

    def _arg(self, parts: List[str], position: int, label: str) -> str:
        if len(parts) <= position:
            raise CommandError(f"Missing {label}. See /games --help.")
        return parts[position]

    def _toggle(self, parts: List[str], visible: bool) -> None:
        configs = self.league_context.editable_configs()
        target = self._config_for_key(configs, self._arg(parts, 2, "<key>"))
        self._save(toggle_visibility(configs, target.game_id, visible))
        state = "shown" if visible else "hidden"
        self.console.print(f"Game {parts[2].upper()} {state}.", style="green")

    def _window(self, parts: List[str]) -> None:
        window = self._arg(parts, 2, "<filter>").lower()
        ctx = self.league_context
        try:
            configs = apply_window_filter(ctx.editable_configs(), ctx.games, window)
        except ValueError as err:
            raise CommandError(str(err)) from err
        self._save(configs)
        shown = sum(1 for config in configs if config.is_visible)
        if window != "all" and shown == 0:
            self.console.print(
                f"No games in the {window} window; showing all games.", style="yellow"
            )
        else:
            self.console.print(f"{shown} game(s) visible.", style="green")

    def _move(self, parts: List[str]) -> None:
        configs = self.league_context.editable_configs()
        target = self._config_for_key(configs, self._arg(parts, 2, "<key>"))
        position = self._parse_position(self._arg(parts, 3, "<position>"))
        self._save(move_config(configs, target.game_id, position - 1))
        self._show_config(self.league_context.editable_configs())

    @staticmethod
    def _parse_position(value: str) -> int:
        try:
            position = int(value)
        except ValueError as err:
            raise CommandError(f"Position must be a number, got '{value}'") from err
        if position < 1:
            raise CommandError("Position must be 1 or greater")
        return position

    def _save(self, configs: List[GameConfig]) -> None:
        ctx = self.league_context
        ctx.state.set_game_config(renumber(configs))
        # Keys shift when visibility or order changes
        ctx.state.set_selected_game(None)
