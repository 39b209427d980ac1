"""Director deploy / delete built on :class:`~bbl.boshinit.executor.Executor`.

:meth:`BOSHDeployer.deploy` fills in whatever the previous run did not
produce (internal credentials, the director's TLS pair), renders the
manifest from the live stack outputs and runs ``bosh-init deploy``.
Values already recorded are reused so repeated ``bbl up`` runs converge on
the same director instead of rotating its secrets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from bbl.boshinit.executor import Executor
from bbl.boshinit.manifest import CREDENTIAL_KEYS, ManifestProperties, render_manifest
from bbl.boshinit.ssl import generate_ssl_keypair
from bbl.generators import generate_password
from bbl.storage.models import KeyPair

logger = logging.getLogger(__name__)

#: Stack outputs the manifest cannot be rendered without.
REQUIRED_OUTPUTS = (
    "BOSHSubnet",
    "BOSHSubnetAZ",
    "BOSHEIP",
    "BOSHUserAccessKey",
    "BOSHUserSecretAccessKey",
    "BOSHSecurityGroup",
)


# ---------------------------------------------------------------------------
# Input / output
# ---------------------------------------------------------------------------


@dataclass
class DeployInput:
    """What Up knows when it asks for a director."""

    director_username: str
    director_password: str
    region: str
    key_pair: KeyPair
    stack_outputs: Dict[str, str]
    state: Dict[str, Any] = field(default_factory=dict)
    credentials: Dict[str, str] = field(default_factory=dict)
    ssl_certificate: str = ""
    ssl_private_key: str = ""


@dataclass
class DeployOutput:
    """What Up records after a successful deploy."""

    manifest: str
    state: Dict[str, Any]
    credentials: Dict[str, str]
    ssl_certificate: str
    ssl_private_key: str


# ---------------------------------------------------------------------------
# Deployer
# ---------------------------------------------------------------------------


class BOSHDeployer:
    """Create / update / delete the director with bosh-init."""

    def __init__(self, executor: Optional[Executor] = None) -> None:
        self._executor = executor or Executor()

    def deploy(self, deploy_input: DeployInput) -> DeployOutput:
        outputs = deploy_input.stack_outputs
        missing = [k for k in REQUIRED_OUTPUTS if not outputs.get(k)]
        if missing:
            raise RuntimeError(
                f"stack is missing required outputs: {', '.join(missing)}"
            )

        credentials = dict(deploy_input.credentials)
        for key in CREDENTIAL_KEYS:
            if not credentials.get(key):
                credentials[key] = generate_password()

        ssl_certificate = deploy_input.ssl_certificate
        ssl_private_key = deploy_input.ssl_private_key
        if not (ssl_certificate and ssl_private_key):
            logger.info("Generating director TLS certificate for %s", outputs["BOSHEIP"])
            pair = generate_ssl_keypair(outputs["BOSHEIP"])
            ssl_certificate, ssl_private_key = pair.certificate, pair.private_key

        manifest = render_manifest(
            ManifestProperties(
                director_username=deploy_input.director_username,
                director_password=deploy_input.director_password,
                subnet_id=outputs["BOSHSubnet"],
                availability_zone=outputs["BOSHSubnetAZ"],
                elastic_ip=outputs["BOSHEIP"],
                access_key_id=outputs["BOSHUserAccessKey"],
                secret_access_key=outputs["BOSHUserSecretAccessKey"],
                security_group=outputs["BOSHSecurityGroup"],
                default_key_name=deploy_input.key_pair.name,
                region=deploy_input.region,
                ssl_certificate=ssl_certificate,
                ssl_private_key=ssl_private_key,
                credentials=credentials,
            )
        )

        state = self._executor.deploy(
            manifest, deploy_input.state, deploy_input.key_pair.private_key,
        )
        logger.info("Director deployed at %s", outputs["BOSHEIP"])

        return DeployOutput(
            manifest=manifest,
            state=state,
            credentials=credentials,
            ssl_certificate=ssl_certificate,
            ssl_private_key=ssl_private_key,
        )

    def delete(
        self, manifest: str, state: Dict[str, Any], ec2_private_key: str,
    ) -> None:
        """Run ``bosh-init delete`` with the manifest recorded at deploy time."""
        if not manifest:
            logger.info("No director manifest recorded; skipping bosh-init delete.")
            return
        self._executor.delete(manifest, state, ec2_private_key)
        logger.info("Director deleted.")
