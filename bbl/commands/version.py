"""``bbl version``."""

from __future__ import annotations

from typing import Any, Sequence

from bbl.commands.base import Command
from bbl.storage.models import State


class Version(Command):
    def __init__(self, ui: Any, version: str) -> None:
        self.ui = ui
        self.version = version

    def usage(self) -> str:
        return "Prints version"

    def execute(self, subcommand_flags: Sequence[str], state: State) -> State:
        self.ui.println(f"bbl {self.version}")
        return state
