"""Contracts the commands depend on.

Commands receive implementations of these protocols through their
constructors.  The boto3 / bosh-init backed implementations live in
:mod:`bbl.aws` and :mod:`bbl.boshinit`; tests substitute mocks.
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol

from bbl.aws.cloudformation import Stack
from bbl.aws.iam import Certificate
from bbl.boshinit.deployer import DeployInput, DeployOutput
from bbl.storage.models import KeyPair


# ---------------------------------------------------------------------------
# AWS
# ---------------------------------------------------------------------------


class ClientProvider(Protocol):
    def configure(
        self, access_key_id: str, secret_access_key: str, region: str,
    ) -> None: ...


class StackManager(Protocol):
    def describe(self, stack_name: str) -> Stack: ...


class InfrastructureManager(Protocol):
    def create(
        self,
        key_pair_name: str,
        availability_zones: List[str],
        stack_name: str,
        certificate_arn: str = "",
    ) -> Stack: ...

    def delete(self, stack_name: str) -> None: ...


class KeyPairSynchronizer(Protocol):
    def sync(self, key_pair: KeyPair) -> KeyPair: ...


class KeyPairDeleter(Protocol):
    def delete(self, name: str) -> None: ...


class AvailabilityZoneRetriever(Protocol):
    def retrieve(self, region: str) -> List[str]: ...


class CertificateDescriber(Protocol):
    def describe(self, certificate_name: str) -> Certificate: ...


class VPCStatusChecker(Protocol):
    def validate_safe_to_delete(self, vpc_id: str) -> None: ...


# ---------------------------------------------------------------------------
# Director
# ---------------------------------------------------------------------------


class BOSHDeployer(Protocol):
    def deploy(self, deploy_input: DeployInput) -> DeployOutput: ...


class BOSHDeleter(Protocol):
    def delete(
        self, manifest: str, state: Dict[str, Any], ec2_private_key: str,
    ) -> None: ...
