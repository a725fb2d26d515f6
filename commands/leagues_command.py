"""Leagues command: add, rename, remove and hide followed Sleeper leagues."""

from __future__ import annotations

import sys
from typing import Dict, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from commands import Command, CommandError
from commands.league_context import LeagueContext
from redzone.leagues.league_setup import (
    DuplicateLeagueError,
    PendingLeague,
    UnknownSleeperUserError,
    complete_league,
    prepare_league,
)
from redzone.leagues.league_store import LeagueNotFoundError
from redzone.models import LeagueConfig
from redzone.utils.cli_common import ask
from redzone.utils.http import UpstreamError


class LeaguesCommand(Command):
    """Manage the leagues that feed the RedZone view."""

    def __init__(self, console: Console, league_context: LeagueContext) -> None:
        super().__init__(console)
        self.league_context = league_context

    @property
    def name(self) -> str:
        return "/leagues"

    @property
    def description(self) -> str:
        return "List your leagues, or add, rename, remove, hide and show them."

    @property
    def subcommands(self) -> Sequence[str]:
        return ("list", "add", "rename", "remove", "hide", "show")

    @property
    def arguments(self) -> List[Dict[str, str | bool]]:
        return [
            {
                "name": "list",
                "required": False,
                "default": "list",
                "description": "Show followed leagues",
            },
            {
                "name": "add <sleeper_league_id> [user] [nickname...]",
                "required": False,
                "description": "Follow a league as the given member (prompted when omitted)",
            },
            {
                "name": "rename <id> [nickname...]",
                "required": False,
                "description": "Set a nickname; omit it to clear",
            },
            {
                "name": "remove <id>",
                "required": False,
                "description": "Stop following a league",
            },
            {
                "name": "hide|show <id>",
                "required": False,
                "description": "Exclude or include a league in refreshes",
            },
        ]

    def handle(self, command: str) -> None:
        parts = command.split()
        action = parts[1].lower() if len(parts) > 1 else "list"
        try:
            if action == "list":
                self._list()
            elif action == "add":
                self._add(parts)
            elif action == "rename":
                self._rename(parts)
            elif action == "remove":
                self._remove(parts)
            elif action in ("hide", "show"):
                self._set_hidden(parts, hidden=action == "hide")
            else:
                raise CommandError(f"Unknown action '{action}'. See /leagues --help.")
        except (
            CommandError,
            DuplicateLeagueError,
            LeagueNotFoundError,
            UnknownSleeperUserError,
        ) as err:
            self.console.print(escape(str(err)), style="red")
        except UpstreamError as err:
            self.league_context.report_fetch_error(err)

    def _list(self) -> None:
        ctx = self.league_context
        ctx.state.set_current_view("dashboard")
        leagues = ctx.leagues()
        if not leagues:
            self.console.print(
                "No leagues yet. Use /leagues add <sleeper_league_id>.", style="yellow"
            )
            return

        hidden = ctx.state.get_hidden_leagues()
        table = Table(title="Your Leagues")
        table.add_column("ID", justify="center", style="cyan")
        table.add_column("Name", justify="left")
        table.add_column("Sleeper League", justify="left")
        table.add_column("User", justify="center")
        table.add_column("Status", justify="center")
        for league in leagues:
            table.add_row(
                league.league_id,
                league.display_name,
                league.sleeper_league_id,
                "[green]set[/green]" if league.sleeper_user_id else "[red]missing[/red]",
                "[dim]hidden[/dim]" if league.league_id in hidden else "active",
            )
        self.console.print(table)

    def _add(self, parts: List[str]) -> None:
        if len(parts) < 3:
            raise CommandError("Usage: /leagues add <sleeper_league_id> [user] [nickname...]")
        ctx = self.league_context
        sleeper_league_id = parts[2]

        with self.console.status("[cyan]Looking up league...", spinner="dots"):
            pending = ctx.run(prepare_league(ctx.sleeper, ctx.store, sleeper_league_id))

        user_query = parts[3] if len(parts) > 3 else self._select_user(pending)
        nickname = " ".join(parts[4:]) or None
        league = complete_league(ctx.store, pending, user_query, nickname)
        self._report_added(league)

    def _select_user(self, pending: PendingLeague) -> Optional[str]:
        if not pending.users:
            self.console.print(f"{pending.name} has no members.", style="yellow")
            return None
        if not sys.stdin.isatty():
            return None

        table = Table(title=f"Select your team in {pending.name}")
        table.add_column("#", justify="center")
        table.add_column("Member", justify="left")
        for index, user in enumerate(pending.users, start=1):
            table.add_row(str(index), user.display_name or user.user_id)
        self.console.print(table)

        names = [user.display_name for user in pending.users if user.display_name]
        numbers = [str(i) for i in range(1, len(pending.users) + 1)]
        selection = ask(
            "Choose member by number or name",
            choices=numbers + names,
            completions=names,
            show_choices=False,
        )
        if selection in numbers:
            return pending.users[int(selection) - 1].user_id
        # Display names resolve through find_user in complete_league
        return selection

    def _report_added(self, league: LeagueConfig) -> None:
        self.console.print(
            f"Added {league.display_name} (id {league.league_id}).", style="green"
        )
        if not league.sleeper_user_id:
            self.console.print(
                "No member selected; this league is skipped until re-added with a user.",
                style="yellow",
            )

    def _league_id(self, parts: List[str]) -> str:
        if len(parts) < 3:
            raise CommandError(f"Missing <id>. Usage: /leagues {parts[1]} <id>")
        return parts[2]

    def _rename(self, parts: List[str]) -> None:
        league_id = self._league_id(parts)
        nickname = " ".join(parts[3:])
        league = self.league_context.store.rename_league(league_id, nickname)
        self.console.print(f"League {league_id} is now {league.display_name}.", style="green")

    def _remove(self, parts: List[str]) -> None:
        ctx = self.league_context
        league_id = self._league_id(parts)
        ctx.store.remove_league(league_id)
        ctx.state.show_league(league_id)
        self.console.print(f"League {league_id} removed.", style="green")

    def _set_hidden(self, parts: List[str], hidden: bool) -> None:
        ctx = self.league_context
        league_id = self._league_id(parts)
        if ctx.store.get_league(league_id) is None:
            raise LeagueNotFoundError(f"League {league_id} not found")
        if hidden:
            ctx.state.hide_league(league_id)
        else:
            ctx.state.show_league(league_id)
        state = "hidden from" if hidden else "included in"
        self.console.print(f"League {league_id} {state} refreshes.", style="green")
