"""Usage text for ``bbl`` and its commands."""

from __future__ import annotations

from typing import Any, Mapping

GLOBAL_USAGE = """\
Usage: bbl [GLOBAL OPTIONS] COMMAND [OPTIONS]

Global Options:
  --help       [-h]   Prints usage
  --state-dir         Directory containing bbl-state.json (default: current working directory)
  --endpoint-override Override the AWS API endpoint (testing)
"""


def format_usage(command_set: Mapping[str, Any]) -> str:
    """Global synopsis followed by one line per command."""
    lines = [GLOBAL_USAGE, "Commands:"]
    width = max((len(name) for name in command_set), default=0)
    for name in sorted(command_set):
        command = command_set[name]
        summary = command.usage().splitlines()[0] if command is not None else ""
        lines.append(f"  {name.ljust(width)}  {summary}")
    return "\n".join(lines)


def format_command_usage(name: str, usage: str) -> str:
    """Usage block for a single command."""
    return f"Usage: bbl [GLOBAL OPTIONS] {name} [OPTIONS]\n\n{usage}"


def print_usage(ui: Any) -> None:
    """Global synopsis only; shown once alongside usage errors."""
    ui.println(GLOBAL_USAGE)
