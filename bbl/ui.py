"""Console output for bbl commands.

Thin wrapper around :mod:`rich` that degrades gracefully when stdout is
not a TTY.  All operator-facing messages flow through a
:class:`ConsoleLogger`; ``logger.*`` calls are kept for diagnostics
(enabled with ``BBL_DEBUG=1``).

Commands receive the logger through their constructor so tests can pass
a logger bound to an in-memory console, or a mock.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console

# ── Symbols ────────────────────────────────────────────────────────────────

_ARROW = "[bold cyan]›[/]"


class ConsoleLogger:
    """Step / prompt / plain output on stdout, errors on stderr."""

    def __init__(
        self,
        console: Optional[Console] = None,
        error_console: Optional[Console] = None,
    ) -> None:
        self.console = console or Console(force_terminal=None)
        self.error_console = error_console or Console(stderr=True)

    def step(self, msg: str) -> None:
        """Cyan arrow + action message."""
        self.console.print(f"{_ARROW} step: {msg}", highlight=False)

    def prompt(self, msg: str) -> None:
        """Question awaiting a line on stdin; no trailing newline."""
        self.console.print(f"{msg} (y/N): ", end="", markup=False, highlight=False)

    def println(self, msg: str) -> None:
        """Raw text (keys, passwords, usage): no markup, no wrapping."""
        self.console.print(msg, markup=False, highlight=False, soft_wrap=True)

    def error(self, msg: str) -> None:
        """Bold red error message on stderr."""
        self.error_console.print("[bold red]ERROR:[/] ", end="")
        self.error_console.print(msg, markup=False, highlight=False, soft_wrap=True)
