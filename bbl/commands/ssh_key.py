"""``bbl ssh-key``: print the director VM's private key."""

from __future__ import annotations

from typing import Any, Sequence

from bbl.commands.base import SSH_KEY_COMMAND, Command, parse_flags
from bbl.storage.models import State
from bbl.storage.store import get_ssh_key


class SSHKey(Command):
    requires_state = True

    def __init__(self, ui: Any) -> None:
        self.ui = ui

    def usage(self) -> str:
        return "Prints SSH private key for the BOSH director VM"

    def execute(self, subcommand_flags: Sequence[str], state: State) -> State:
        parse_flags(SSH_KEY_COMMAND, [], subcommand_flags)
        self.ui.println(get_ssh_key(state))
        return state
