"""Interactive prompt plumbing for the RedZone CLI: registry, completion, help."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from prompt_toolkit import prompt as pt_prompt
from prompt_toolkit.completion import (
    Completer,
    FuzzyCompleter,
    FuzzyWordCompleter,
    NestedCompleter,
)
from prompt_toolkit.history import FileHistory
from prompt_toolkit.key_binding import KeyBindings
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from redzone.config import settings

console = Console()


def _stdin_isatty() -> bool:
    return sys.stdin.isatty()


@dataclass
class CommandContext:
    """A registered command: its handler plus what help and completion show."""

    name: str
    handler: Callable[[str], None]
    description: str
    aliases: Tuple[str, ...] = ()
    subcommands: Tuple[str, ...] = ()


class CommandRegistry:
    """Maps command names and aliases to their :class:`CommandContext`."""

    def __init__(self) -> None:
        self._commands: Dict[str, CommandContext] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        command: str,
        handler: Callable[[str], None],
        description: str,
        aliases: Sequence[str] = (),
        subcommands: Sequence[str] = (),
    ) -> None:
        self._commands[command] = CommandContext(
            command, handler, description, tuple(aliases), tuple(subcommands)
        )
        for alias in aliases:
            self._aliases[alias] = command

    def get(self, command: str) -> Optional[CommandContext]:
        """Look up a command by name or alias (case-insensitive)."""
        name = command.lower()
        return self._commands.get(self._aliases.get(name, name))

    def resolve(self, line: str) -> Optional[CommandContext]:
        """The command named by the first word of an input line."""
        parts = line.split()
        return self.get(parts[0]) if parts else None

    def descriptions(self) -> Iterable[CommandContext]:
        return self._commands.values()

    def names(self) -> Sequence[str]:
        return tuple(sorted([*self._commands, *self._aliases]))

    def completion_tree(self) -> Dict[str, Optional[Dict[str, None]]]:
        """Nested mapping for prompt_toolkit's ``NestedCompleter``."""
        tree: Dict[str, Optional[Dict[str, None]]] = {}
        for ctx in self._commands.values():
            words = dict.fromkeys(ctx.subcommands) or None
            for name in (ctx.name, *ctx.aliases):
                tree[name] = words
        return tree


def _history() -> FileHistory:
    # Kept beside the cache directory
    history_file = settings.data_dir / "history"
    history_file.parent.mkdir(parents=True, exist_ok=True)
    return FileHistory(str(history_file))


def _escape_bindings() -> KeyBindings:
    kb = KeyBindings()

    @kb.add("escape")
    def _(event) -> None:  # pragma: no cover - interactive
        event.app.exit(result="")

    return kb


def prompt_with_completion(
    registry: CommandRegistry, base_prompt: str = ">"
) -> str:
    """Read one command line; on a terminal, commands and subcommands complete."""
    if not _stdin_isatty():
        return input(f"{base_prompt} ").strip()

    completer: Completer = FuzzyCompleter(
        NestedCompleter.from_nested_dict(registry.completion_tree())
    )
    return pt_prompt(
        f"{base_prompt} ",
        completer=completer,
        complete_while_typing=True,
        key_bindings=_escape_bindings(),
        history=_history(),
    ).strip()


def show_capabilities(
    registry: CommandRegistry,
    console_instance: Optional[Console] = None,
    footer: Optional[str] = None,
) -> None:
    out = console_instance or console
    table = Table(title="RedZone CLI Capabilities")
    table.add_column("Command", justify="left")
    table.add_column("Description", justify="left")

    for ctx in registry.descriptions():
        label = " , ".join([ctx.name, *ctx.aliases])
        if ctx.subcommands:
            label += f" [{'|'.join(ctx.subcommands)}]"
        table.add_row(escape(label), ctx.description)

    out.print(table)

    if footer:
        out.print()
        out.print(f"[dim]{footer}[/dim]")


def render_command_help(
    command_name: str,
    description: str,
    arguments: Sequence[Mapping[str, str | bool]],
    console_instance: Console,
) -> None:
    """Render help information for a command.

    Args:
        command_name: The command name (e.g., '/games')
        description: Command description
        arguments: List of argument definitions with 'name', 'required', 'description', 'default'
        console_instance: Rich Console instance to print to
    """
    console_instance.print(f"[bold cyan]{command_name}[/bold cyan] - {description}\n")

    if not arguments:
        console_instance.print("This command takes no arguments.\n")
        return

    table = Table(title=f"{command_name} Arguments", show_header=True)
    table.add_column("Argument", justify="left", style="cyan")
    table.add_column("Required", justify="center", style="yellow")
    table.add_column("Default", justify="left", style="green")
    table.add_column("Description", justify="left")

    for arg in arguments:
        required = "Yes" if arg.get("required") else "No"
        default = str(arg.get("default", "")) if arg.get("default") else "-"
        table.add_row(
            escape(str(arg.get("name", ""))), required, default, str(arg.get("description", ""))
        )

    console_instance.print(table)


def ask(
    prompt: str = "redzone",
    *,
    choices: Optional[Sequence[str]] = None,
    completions: Optional[Sequence[str]] = None,
    show_choices: bool = True,
    strip: bool = True,
) -> str:
    """Prompt until the answer is one of ``choices`` (any answer if None).

    On a terminal, ``completions`` (for example league member names) are
    offered with fuzzy matching. They are not added to the command history.
    """
    base_prompt = prompt.rstrip(":") + ":"

    if choices and show_choices:
        console.print(f"Options: {', '.join(choices)}", style="cyan")

    while True:
        if completions and _stdin_isatty():
            response = pt_prompt(
                f"{base_prompt} ",
                completer=FuzzyWordCompleter(list(completions)),
                complete_while_typing=True,
            )
        else:
            response = console.input(f"{base_prompt} ")

        if strip:
            response = response.strip()

        if not choices or response in choices:
            return response

        console.print(
            f"Invalid choice. Expected one of: {', '.join(choices)}",
            style="yellow",
        )
