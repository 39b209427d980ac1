"""Split a raw ``bbl`` argument vector into global options and a command.

Accepted shape::

    bbl [--endpoint-override URL] [--state-dir PATH] COMMAND [SUBCOMMAND FLAGS...]

Rules:

- Global flags may be spelled with one or two dashes and given as
  ``--flag value`` or ``--flag=value``; all spellings are aliases.
- The first token that is neither a global flag nor a global flag's value
  is the command.  Everything after it is handed to the command verbatim.
- ``--help`` / ``--h`` / ``help`` select the help command; the remaining
  tokens pass through untouched.  No arguments at all also means help.
- The command name is validated *before* the global flags, so a bad
  command is reported even when a bad flag precedes it.
- ``--state-dir`` may appear at most once; when omitted the working
  directory provider supplies the default.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple

import click

from bbl.errors import UsageError

logger = logging.getLogger(__name__)

HELP_COMMAND = "help"

#: Tokens that select the help command wherever the command may appear.
HELP_TOKENS = frozenset({"help", "--help", "-help", "--h", "-h"})

#: Global flags that consume a value (``--flag value`` / ``--flag=value``).
VALUE_FLAGS = frozenset({"endpoint-override", "state-dir"})

DUPLICATE_STATE_DIR_MESSAGE = (
    "Invalid usage: cannot specify global 'state-dir' flag more than once."
)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass
class CommandLineConfiguration:
    """Parsed global options plus the command and its raw flags."""

    command: str
    state_dir: str = ""
    endpoint_override: str = ""
    subcommand_flags: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Token helpers
# ---------------------------------------------------------------------------


def _is_flag(token: str) -> bool:
    return len(token) > 1 and token.startswith("-")


def _flag_name(token: str) -> str:
    """``--state-dir=/x`` → ``state-dir``; ``-state-dir`` → ``state-dir``."""
    return token.lstrip("-").split("=", 1)[0]


def _takes_separate_value(token: str) -> bool:
    return "=" not in token and _flag_name(token) in VALUE_FLAGS


def _global_command() -> click.Command:
    return click.Command(
        "bbl",
        params=[
            click.Option(["--endpoint-override", "-endpoint-override"], default=""),
            click.Option(["--state-dir", "-state-dir"], default=""),
        ],
        add_help_option=False,
    )


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class CommandLineParser:
    """Flag splitter for the ``bbl`` CLI.

    Args:
        usage: Called exactly once before any usage error is raised.
        commands: Known command names (a mapping's keys work too).
        getwd: Working directory provider, used when ``--state-dir`` is
            absent.  Its exceptions propagate unchanged.
    """

    def __init__(
        self,
        usage: Callable[[], None],
        commands: Iterable[str],
        getwd: Callable[[], str] = os.getcwd,
    ) -> None:
        self._usage = usage
        self._commands = frozenset(commands)
        self._getwd = getwd

    def parse(self, args: Sequence[str]) -> CommandLineConfiguration:
        global_args, command, subcommand_flags = self._split(list(args))

        self._validate_command(command, subcommand_flags)
        self._validate_single_state_dir(global_args)
        options = self._parse_global_flags(global_args)

        state_dir = options["state_dir"] or self._getwd()
        logger.debug(
            "Parsed command=%s state_dir=%s flags=%s",
            command, state_dir, subcommand_flags,
        )
        return CommandLineConfiguration(
            command=command,
            state_dir=state_dir,
            endpoint_override=options["endpoint_override"],
            subcommand_flags=subcommand_flags,
        )

    # -- internals ---------------------------------------------------------

    def _fail(self, message: str) -> None:
        self._usage()
        raise UsageError(message)

    @staticmethod
    def _split(args: List[str]) -> Tuple[List[str], str, List[str]]:
        """Return ``(global_args, command, subcommand_flags)``."""
        i = 0
        while i < len(args):
            token = args[i]
            if token in HELP_TOKENS:
                return args[:i], HELP_COMMAND, args[i + 1:]
            if _is_flag(token):
                i += 2 if _takes_separate_value(token) else 1
                continue
            return args[:i], token, args[i + 1:]
        return args, HELP_COMMAND, []

    def _validate_command(self, command: str, subcommand_flags: List[str]) -> None:
        if command == HELP_COMMAND:
            # ``bbl help <topic>``: the topic, if any, must be a real command.
            topic = subcommand_flags[0] if subcommand_flags else ""
            if topic and not _is_flag(topic) and topic not in self._commands:
                self._fail(f"Unrecognized command '{topic}'")
            return
        if command not in self._commands:
            self._fail(f"Unrecognized command '{command}'")

    def _validate_single_state_dir(self, global_args: List[str]) -> None:
        seen = 0
        i = 0
        while i < len(global_args):
            token = global_args[i]
            if _is_flag(token) and _flag_name(token) == "state-dir":
                seen += 1
            i += 2 if _is_flag(token) and _takes_separate_value(token) else 1
        if seen > 1:
            self._fail(DUPLICATE_STATE_DIR_MESSAGE)

    def _parse_global_flags(self, global_args: List[str]) -> Dict[str, Any]:
        try:
            ctx = _global_command().make_context("bbl", list(global_args))
        except click.UsageError as exc:
            self._usage()
            raise UsageError(exc.format_message()) from exc
        return dict(ctx.params)
