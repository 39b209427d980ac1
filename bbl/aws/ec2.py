"""EC2 key pairs, availability zones and the pre-destroy VPC check.

- :class:`KeyPairManager`: create-if-absent and delete for the director's
  key pair.  AWS generates the key material; the private key is only
  returned once, at creation, and is then kept in state.
- :class:`AvailabilityZoneRetriever`: list the region's usable zones.
- :class:`VPCStatusChecker`: refuse teardown while workload VMs are still
  running in the environment's VPC.
"""

from __future__ import annotations

import logging
from typing import Any, List

from botocore.exceptions import ClientError

from bbl.errors import VPCNotSafeToDeleteError
from bbl.storage.models import KeyPair

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Instances with these Name tags belong to bbl itself and may be torn down.
BBL_OWNED_INSTANCE_NAMES = frozenset({"NAT", "bosh/0"})

#: Instance states that no longer hold on to VPC resources.
TERMINAL_INSTANCE_STATES = frozenset({"terminated", "shutting-down"})


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


# ---------------------------------------------------------------------------
# Key pairs
# ---------------------------------------------------------------------------


class KeyPairManager:
    """Create, look up and delete EC2 key pairs."""

    def __init__(self, client_provider: Any) -> None:
        self._clients = client_provider

    @property
    def _ec2(self) -> Any:
        return self._clients.client("ec2")

    def exists(self, name: str) -> bool:
        try:
            resp = self._ec2.describe_key_pairs(KeyNames=[name])
        except ClientError as exc:
            if _error_code(exc) == "InvalidKeyPair.NotFound":
                return False
            raise
        return bool(resp.get("KeyPairs"))

    def public_key(self, name: str) -> str:
        """Return the OpenSSH public key AWS holds for *name*."""
        resp = self._ec2.describe_key_pairs(KeyNames=[name], IncludePublicKey=True)
        pairs = resp.get("KeyPairs", [])
        return pairs[0].get("PublicKey", "") if pairs else ""

    def sync(self, key_pair: KeyPair) -> KeyPair:
        """Make sure *key_pair* exists in EC2 and return the up-to-date record.

        - Known locally and present remotely: returned unchanged.
        - Missing remotely, or no private key on record: a new key pair is
          created (replacing a stale remote one, whose private half is lost).
        """
        ec2 = self._ec2
        remote = self.exists(key_pair.name)

        if remote and key_pair.private_key:
            logger.info("Key pair %s already exists.", key_pair.name)
            return key_pair

        if remote:
            logger.warning(
                "Key pair %s exists in EC2 but its private key is not in "
                "state; recreating it.", key_pair.name,
            )
            ec2.delete_key_pair(KeyName=key_pair.name)

        logger.info("Creating key pair %s ...", key_pair.name)
        resp = ec2.create_key_pair(KeyName=key_pair.name, KeyType="rsa")
        return KeyPair(
            name=key_pair.name,
            private_key=resp["KeyMaterial"],
            public_key=self.public_key(key_pair.name),
        )

    def delete(self, name: str) -> None:
        """Delete the key pair.  EC2 treats unknown names as success."""
        logger.info("Deleting key pair %s ...", name)
        self._ec2.delete_key_pair(KeyName=name)


# ---------------------------------------------------------------------------
# Availability zones
# ---------------------------------------------------------------------------


class AvailabilityZoneRetriever:
    """List ``available`` zones in a region, sorted by name."""

    def __init__(self, client_provider: Any) -> None:
        self._clients = client_provider

    def retrieve(self, region: str) -> List[str]:
        resp = self._clients.client("ec2").describe_availability_zones(
            Filters=[
                {"Name": "region-name", "Values": [region]},
                {"Name": "state", "Values": ["available"]},
            ],
        )
        zones = sorted(
            z["ZoneName"] for z in resp.get("AvailabilityZones", [])
        )
        logger.debug("Availability zones in %s: %s", region, zones)
        return zones


# ---------------------------------------------------------------------------
# VPC safety check
# ---------------------------------------------------------------------------


def _instance_name(instance: dict) -> str:
    for tag in instance.get("Tags", []) or []:
        if tag.get("Key") == "Name":
            return tag.get("Value", "")
    return ""


class VPCStatusChecker:
    """Decide whether a VPC can be torn down without orphaning workloads."""

    def __init__(self, client_provider: Any) -> None:
        self._clients = client_provider

    def foreign_instances(self, vpc_id: str) -> List[str]:
        """Instance ids in *vpc_id* that bbl did not create."""
        paginator = self._clients.client("ec2").get_paginator("describe_instances")
        found: List[str] = []
        for page in paginator.paginate(
            Filters=[{"Name": "vpc-id", "Values": [vpc_id]}],
        ):
            for reservation in page.get("Reservations", []):
                for inst in reservation.get("Instances", []):
                    state = inst.get("State", {}).get("Name", "")
                    if state in TERMINAL_INSTANCE_STATES:
                        continue
                    if _instance_name(inst) in BBL_OWNED_INSTANCE_NAMES:
                        continue
                    found.append(inst.get("InstanceId", ""))
        return found

    def validate_safe_to_delete(self, vpc_id: str) -> None:
        """Raise :class:`VPCNotSafeToDeleteError` if workload VMs remain."""
        instances = self.foreign_instances(vpc_id)
        if instances:
            logger.debug("VPC %s still has instances: %s", vpc_id, instances)
            raise VPCNotSafeToDeleteError(f"vpc {vpc_id} is not safe to delete")
