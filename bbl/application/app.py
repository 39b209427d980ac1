"""Dispatcher: run one parsed command against the state directory.

State is loaded fresh, handed to the command, and the returned State is
written back in a single atomic save.  If the command raises, nothing is
written and the state file keeps its previous contents.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional

from bbl.application.command_line_parser import CommandLineConfiguration
from bbl.errors import StateNotFoundError
from bbl.storage.models import State
from bbl.storage.store import StateStore

if TYPE_CHECKING:
    from bbl.commands.base import Command

logger = logging.getLogger(__name__)


class App:
    """Resolve the command, load state, execute, persist."""

    def __init__(
        self,
        command_set: Mapping[str, Optional["Command"]],
        store: Optional[StateStore] = None,
    ) -> None:
        self.command_set = command_set
        self.store = store or StateStore()

    def _load(self, command: Any, state_dir: str) -> State:
        try:
            return self.store.load(state_dir)
        except StateNotFoundError:
            if command.requires_state:
                raise
            logger.debug("No state in %s; starting from empty state.", state_dir)
            return State()

    def run(self, config: CommandLineConfiguration) -> State:
        command = self.command_set.get(config.command)
        if command is None:
            # The parser only lets known command names through.
            raise RuntimeError(f"command {config.command!r} is not registered")

        state = self._load(command, config.state_dir)
        next_state = command.execute(config.subcommand_flags, state)

        if next_state != state:
            self.store.save(config.state_dir, next_state)
        return next_state
