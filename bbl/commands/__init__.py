"""The ``bbl`` command set."""

from bbl.commands.base import (
    COMMAND_NAMES,
    DESTROY_COMMAND,
    DIRECTOR_PASSWORD_COMMAND,
    HELP_COMMAND,
    SSH_KEY_COMMAND,
    UP_COMMAND,
    VERSION_COMMAND,
    Command,
    parse_flags,
)
from bbl.commands.destroy import Destroy
from bbl.commands.director_password import DirectorPassword
from bbl.commands.help import Help
from bbl.commands.ssh_key import SSHKey
from bbl.commands.up import Up
from bbl.commands.version import Version

__all__ = [
    "COMMAND_NAMES",
    "Command",
    "DESTROY_COMMAND",
    "DIRECTOR_PASSWORD_COMMAND",
    "Destroy",
    "DirectorPassword",
    "HELP_COMMAND",
    "Help",
    "SSHKey",
    "SSH_KEY_COMMAND",
    "UP_COMMAND",
    "Up",
    "VERSION_COMMAND",
    "Version",
    "parse_flags",
]
