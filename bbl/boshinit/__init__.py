"""Director lifecycle via the ``bosh-init`` CLI."""

from bbl.boshinit.deployer import BOSHDeployer, DeployInput, DeployOutput
from bbl.boshinit.executor import Executor
from bbl.boshinit.manifest import ManifestProperties, build_manifest, render_manifest
from bbl.boshinit.ssl import SSLKeyPair, generate_ssl_keypair

__all__ = [
    "BOSHDeployer",
    "DeployInput",
    "DeployOutput",
    "Executor",
    "ManifestProperties",
    "SSLKeyPair",
    "build_manifest",
    "generate_ssl_keypair",
    "render_manifest",
]
