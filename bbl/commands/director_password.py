"""``bbl director-password``: print the director admin password."""

from __future__ import annotations

from typing import Any, Sequence

from bbl.commands.base import DIRECTOR_PASSWORD_COMMAND, Command, parse_flags
from bbl.storage.models import State
from bbl.storage.store import get_director_password


class DirectorPassword(Command):
    requires_state = True

    def __init__(self, ui: Any) -> None:
        self.ui = ui

    def usage(self) -> str:
        return "Prints the BOSH director password"

    def execute(self, subcommand_flags: Sequence[str], state: State) -> State:
        parse_flags(DIRECTOR_PASSWORD_COMMAND, [], subcommand_flags)
        self.ui.println(get_director_password(state))
        return state
