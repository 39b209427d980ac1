"""``bbl help [command]``."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from bbl.application.usage import format_command_usage, format_usage
from bbl.commands.base import Command
from bbl.storage.models import State


class Help(Command):
    """Print the global synopsis, or one command's usage."""

    def __init__(self, ui: Any, command_set: Mapping[str, Command]) -> None:
        self.ui = ui
        # Shared with the dispatcher; filled in after construction.
        self.command_set = command_set

    def usage(self) -> str:
        return "Prints helpful message for the given command"

    def execute(self, subcommand_flags: Sequence[str], state: State) -> State:
        topic = subcommand_flags[0] if subcommand_flags else ""
        command = self.command_set.get(topic)
        if command is not None:
            self.ui.println(format_command_usage(topic, command.usage()))
        else:
            self.ui.println(format_usage(self.command_set))
        return state
