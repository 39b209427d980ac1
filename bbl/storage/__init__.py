"""Persisted environment state."""

from bbl.storage.models import AWS, BOSH, KeyPair, Stack, State
from bbl.storage.store import (
    STATE_FILE_NAME,
    StateStore,
    get_director_password,
    get_ssh_key,
)

__all__ = [
    "AWS",
    "BOSH",
    "KeyPair",
    "STATE_FILE_NAME",
    "Stack",
    "State",
    "StateStore",
    "get_director_password",
    "get_ssh_key",
]
