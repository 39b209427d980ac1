"""Command abstraction shared by every ``bbl`` subcommand.

A command receives the subcommand's raw argument vector and the State
loaded from the state directory, and returns the State the dispatcher
should persist.  Commands never mutate the State they are given: on
error they raise and the dispatcher leaves the state file untouched.
"""

from __future__ import annotations

import abc
from typing import Any, Dict, List, Sequence

import click

from bbl.errors import FlagError
from bbl.storage.models import State

# ---------------------------------------------------------------------------
# Command names
# ---------------------------------------------------------------------------

UP_COMMAND = "up"
DESTROY_COMMAND = "destroy"
SSH_KEY_COMMAND = "ssh-key"
DIRECTOR_PASSWORD_COMMAND = "director-password"
VERSION_COMMAND = "version"
HELP_COMMAND = "help"

COMMAND_NAMES = (
    UP_COMMAND,
    DESTROY_COMMAND,
    SSH_KEY_COMMAND,
    DIRECTOR_PASSWORD_COMMAND,
    VERSION_COMMAND,
    HELP_COMMAND,
)


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------


class Command(abc.ABC):
    """One ``bbl`` subcommand."""

    #: When True, a missing state file is an error instead of an empty State.
    requires_state: bool = False

    @abc.abstractmethod
    def execute(self, subcommand_flags: Sequence[str], state: State) -> State:
        """Run the command and return the next State."""

    @abc.abstractmethod
    def usage(self) -> str:
        """One-paragraph description shown by ``bbl help``."""


# ---------------------------------------------------------------------------
# Subcommand flag parsing
# ---------------------------------------------------------------------------


def parse_flags(
    name: str, params: List[click.Parameter], args: Sequence[str],
) -> Dict[str, Any]:
    """Parse *args* against *params* with click and return the values.

    Raises:
        FlagError: Unknown flag, missing flag value or stray argument,
            carrying click's message unchanged.
    """
    command = click.Command(name, params=params, add_help_option=False)
    try:
        ctx = command.make_context(name, list(args))
    except click.UsageError as exc:
        raise FlagError(exc.format_message()) from exc
    return dict(ctx.params)
