"""``bosh-init`` CLI wrapper: deploy + delete.

Wraps ``bosh-init`` as a subprocess so bbl never reimplements director
installation.  Each invocation runs in a scratch directory laid out the
way bosh-init expects::

    <tmp>/bosh.yml            rendered manifest
    <tmp>/bosh-state.json     bosh-init's own state (read back afterwards)
    <tmp>/bosh.pem            EC2 private key referenced by the manifest
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from bbl.boshinit.manifest import PRIVATE_KEY_FILENAME
from bbl.errors import BOSHInitError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MANIFEST_FILENAME = "bosh.yml"
STATE_FILENAME = "bosh-state.json"

#: Return code used when the binary is missing (mirrors "toolchain" failures).
EXIT_NOT_FOUND = 4


class Executor:
    """Run ``bosh-init deploy`` / ``bosh-init delete`` against a manifest."""

    def __init__(self, binary: Optional[str] = None) -> None:
        self.binary = binary or os.environ.get("BBL_BOSH_INIT_PATH", "bosh-init")

    # -- public API --------------------------------------------------------

    def deploy(
        self, manifest: str, state: Dict[str, Any], ec2_private_key: str,
    ) -> Dict[str, Any]:
        """Deploy the director and return bosh-init's updated state."""
        return self._run("deploy", manifest, state, ec2_private_key)

    def delete(
        self, manifest: str, state: Dict[str, Any], ec2_private_key: str,
    ) -> Dict[str, Any]:
        """Delete the director VM, disks and stemcell."""
        return self._run("delete", manifest, state, ec2_private_key)

    # -- internals ---------------------------------------------------------

    def _run(
        self,
        command: str,
        manifest: str,
        state: Dict[str, Any],
        ec2_private_key: str,
    ) -> Dict[str, Any]:
        with tempfile.TemporaryDirectory(prefix="bbl-bosh-init-") as tmp:
            workdir = Path(tmp)
            (workdir / MANIFEST_FILENAME).write_text(manifest, encoding="utf-8")
            key_path = workdir / PRIVATE_KEY_FILENAME
            key_path.write_text(ec2_private_key, encoding="utf-8")
            key_path.chmod(0o600)
            state_path = workdir / STATE_FILENAME
            if state:
                state_path.write_text(json.dumps(state), encoding="utf-8")

            cmd = [self.binary, command, MANIFEST_FILENAME]
            logger.info("Running: %s", " ".join(cmd))
            try:
                proc = subprocess.run(
                    cmd,
                    cwd=str(workdir),
                    capture_output=True,
                    text=True,
                )
            except FileNotFoundError as exc:
                raise BOSHInitError(
                    f"{self.binary} CLI not found on PATH", EXIT_NOT_FOUND,
                ) from exc

            if proc.stdout:
                logger.debug("bosh-init stdout:\n%s", proc.stdout)
            if proc.returncode != 0:
                detail = (proc.stderr or proc.stdout or "(no output)").strip()
                raise BOSHInitError(
                    f"bosh-init {command} failed (rc={proc.returncode}): {detail}",
                    proc.returncode,
                )

            if not state_path.is_file():
                return {}
            text = state_path.read_text(encoding="utf-8")
            return json.loads(text) if text.strip() else {}
