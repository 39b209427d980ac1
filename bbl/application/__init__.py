"""Argument parsing and command dispatch."""

from bbl.application.app import App
from bbl.application.command_line_parser import (
    CommandLineConfiguration,
    CommandLineParser,
)

__all__ = ["App", "CommandLineConfiguration", "CommandLineParser"]
