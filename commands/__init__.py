"""Command modules for the RedZone CLI."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Sequence

from rich.console import Console
from rich.markup import escape

from redzone.cache.local_cache import StorageQuotaExceeded
from redzone.utils.cli_common import render_command_help

logger = logging.getLogger(__name__)


class Command(ABC):
    """Base class for CLI commands.

    Subclasses implement :meth:`handle`; :meth:`execute` is what the registry
    dispatches to. It answers ``-h``/``--help`` and turns a failed cache write
    into a single red line instead of ending the session.
    """

    def __init__(self, console: Console) -> None:
        self.console = console

    @property
    @abstractmethod
    def name(self) -> str:
        """Primary command name (e.g., '/refresh')."""

    @property
    def aliases(self) -> Sequence[str]:
        """Additional names for this command (e.g., ['/quit'] for '/exit')."""
        return ()

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this command does."""

    @property
    def arguments(self) -> List[Dict[str, str | bool]]:
        """Argument definitions shown by ``<command> --help``.

        Each argument is a dict with keys:
        - name: The argument name (e.g., 'window <filter>')
        - required: Boolean indicating if the argument is required
        - description: Human-readable description of the argument
        - default: (optional) Default value if not provided
        """
        return []

    @property
    def subcommands(self) -> Sequence[str]:
        """Words accepted right after the command name, offered by completion."""
        return ()

    def should_show_help(self, command: str) -> bool:
        parts = command.split()
        return "-h" in parts or "--help" in parts

    def show_help(self) -> None:
        render_command_help(self.name, self.description, self.arguments, self.console)

    def execute(self, command: str) -> None:
        if self.should_show_help(command):
            self.show_help()
            return
        try:
            self.handle(command)
        except StorageQuotaExceeded as err:
            logger.error("%s could not save to the cache: %s", self.name, err)
            self.console.print(f"Error saving cache: {escape(str(err))}", style="red")

    @abstractmethod
    def handle(self, command: str) -> None:
        """Carry out the command; ``command`` is the full input line."""


class CommandError(Exception):
    """A command line that cannot be carried out as typed."""
