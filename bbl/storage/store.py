"""Load and persist :class:`State` in a state directory.

The state file is ``<state_dir>/bbl-state.json``.  Writes go to a
temporary file in the same directory and are moved into place with
:func:`os.replace`, so a crash mid-write leaves the previous state intact.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from bbl.errors import MissingStateFieldError, StateNotFoundError
from bbl.storage.models import State

logger = logging.getLogger(__name__)

STATE_FILE_NAME = "bbl-state.json"


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class StateStore:
    """File-backed state persistence."""

    def __init__(self, filename: str = STATE_FILE_NAME) -> None:
        self.filename = filename

    def path(self, state_dir: str) -> Path:
        return Path(state_dir) / self.filename

    def load(self, state_dir: str) -> State:
        """Read the state file.

        Raises:
            StateNotFoundError: If the file does not exist.
            pydantic.ValidationError: If the file is not a valid state document.
        """
        path = self.path(state_dir)
        if not path.is_file():
            raise StateNotFoundError(state_dir, self.filename)
        data = json.loads(path.read_text(encoding="utf-8") or "{}")
        logger.debug("Loaded state from %s", path)
        return State.model_validate(data)

    def save(self, state_dir: str, state: State) -> Path:
        """Atomically write *state* and return the written path."""
        dest = self.path(state_dir)
        dest.parent.mkdir(parents=True, exist_ok=True)
        payload = state.to_sorted_json() + "\n"

        fd, tmp_name = tempfile.mkstemp(
            dir=str(dest.parent), prefix=f".{self.filename}.", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, dest)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.info("State written to %s", dest)
        return dest


# ---------------------------------------------------------------------------
# Field lookups
# ---------------------------------------------------------------------------


def get_ssh_key(state: State) -> str:
    """Return the stored EC2 private key or raise."""
    if not state.key_pair.private_key:
        raise MissingStateFieldError("Could not retrieve ssh key")
    return state.key_pair.private_key


def get_director_password(state: State) -> str:
    """Return the stored director password or raise."""
    if not state.bosh.director_password:
        raise MissingStateFieldError("Could not retrieve director password")
    return state.bosh.director_password
