"""``bbl up``: create or converge the environment.

Each step owns one resource and is create-if-absent against the State it
starts from, so ``bbl up`` can be re-run after a partial failure::

    credentials → key pair → (certificate) → stack → director

The working State is checkpointed through the injected ``state_writer``
once the key pair exists and again once the stack name is chosen, before
CloudFormation is called.  A failure later in the run keeps the identities
of resources already created or requested, and the next run reuses them
instead of creating duplicates.  The State given to :meth:`Up.execute`
itself is never modified.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Optional, Sequence

import click

from bbl import capabilities
from bbl.boshinit.deployer import DeployInput
from bbl.commands.base import UP_COMMAND, Command, parse_flags
from bbl.errors import CredentialsMissingError
from bbl.generators import generate_name, generate_password
from bbl.storage.models import State
from bbl.ui import ConsoleLogger

logger = logging.getLogger(__name__)

ENV_PREFIX = "BBL_"
DIRECTOR_USERNAME_PREFIX = "user-"

_FLAGS = [
    click.Option(["--aws-access-key-id"], default="", help="AWS access key id."),
    click.Option(["--aws-secret-access-key"], default="", help="AWS secret access key."),
    click.Option(["--aws-region"], default="", help="AWS region."),
    click.Option(
        ["--lb-cert-name"],
        default="",
        help="Name of an IAM server certificate for the load balancer.",
    ),
]


def _noop_writer(state: State) -> None:
    return None


class Up(Command):
    """Provision key pair, network stack and director."""

    def __init__(
        self,
        ui: ConsoleLogger,
        client_provider: capabilities.ClientProvider,
        key_pair_synchronizer: capabilities.KeyPairSynchronizer,
        infrastructure_manager: capabilities.InfrastructureManager,
        availability_zone_retriever: capabilities.AvailabilityZoneRetriever,
        certificate_describer: capabilities.CertificateDescriber,
        bosh_deployer: capabilities.BOSHDeployer,
        *,
        state_writer: Optional[Callable[[State], None]] = None,
        name_generator: Callable[[str], str] = generate_name,
    ) -> None:
        self.ui = ui
        self.client_provider = client_provider
        self.key_pair_synchronizer = key_pair_synchronizer
        self.infrastructure_manager = infrastructure_manager
        self.availability_zone_retriever = availability_zone_retriever
        self.certificate_describer = certificate_describer
        self.bosh_deployer = bosh_deployer
        self.state_writer = state_writer or _noop_writer
        self.name_generator = name_generator

    def usage(self) -> str:
        return (
            "Deploys a BOSH director on AWS\n"
            "  --aws-access-key-id      AWS access key id (env BBL_AWS_ACCESS_KEY_ID)\n"
            "  --aws-secret-access-key  AWS secret access key (env BBL_AWS_SECRET_ACCESS_KEY)\n"
            "  --aws-region             AWS region (env BBL_AWS_REGION)\n"
            "  --lb-cert-name           IAM server certificate for a load balancer (optional)"
        )

    # -- steps ---------------------------------------------------------------

    def _resolve_credentials(self, flags: dict, state: State) -> None:
        for key in ("access_key_id", "secret_access_key", "region"):
            flag = flags[f"aws_{key}"]
            env = os.environ.get(f"{ENV_PREFIX}AWS_{key.upper()}", "")
            value = flag or env or getattr(state.aws, key)
            if not value:
                raise CredentialsMissingError(
                    f"--aws-{key.replace('_', '-')} must be provided"
                )
            setattr(state.aws, key, value)

    def _sync_key_pair(self, state: State) -> None:
        if not state.key_pair.name:
            state.key_pair.name = self.name_generator("keypair-bbl-")
        self.ui.step(f"checking if keypair {state.key_pair.name!r} exists")
        state.key_pair = self.key_pair_synchronizer.sync(state.key_pair)

    def _certificate_arn(self, flags: dict, state: State) -> str:
        name = flags["lb_cert_name"] or state.stack.certificate_name
        if not name:
            return ""
        self.ui.step(f"retrieving certificate {name!r}")
        certificate = self.certificate_describer.describe(name)
        state.stack.certificate_name = name
        return certificate.arn

    def _name_stack(self, state: State) -> None:
        if not state.stack.name:
            state.stack.name = self.name_generator("stack-bbl-")

    def _create_stack(self, state: State, certificate_arn: str) -> Any:
        zones = self.availability_zone_retriever.retrieve(state.aws.region)
        self.ui.step(f"creating or updating AWS stack {state.stack.name!r}")
        return self.infrastructure_manager.create(
            state.key_pair.name, zones, state.stack.name, certificate_arn,
        )

    def _deploy_director(self, state: State, stack: Any) -> None:
        bosh = state.bosh
        if not bosh.director_username:
            bosh.director_username = self.name_generator(DIRECTOR_USERNAME_PREFIX)
        if not bosh.director_password:
            bosh.director_password = generate_password()

        self.ui.step("deploying BOSH director")
        output = self.bosh_deployer.deploy(
            DeployInput(
                director_username=bosh.director_username,
                director_password=bosh.director_password,
                region=state.aws.region,
                key_pair=state.key_pair,
                stack_outputs=dict(stack.outputs),
                state=bosh.state,
                credentials=bosh.credentials,
                ssl_certificate=bosh.director_ssl_certificate,
                ssl_private_key=bosh.director_ssl_private_key,
            )
        )
        bosh.manifest = output.manifest
        bosh.state = output.state
        bosh.credentials = output.credentials
        bosh.director_ssl_certificate = output.ssl_certificate
        bosh.director_ssl_private_key = output.ssl_private_key

    # -- entry point -----------------------------------------------------------

    def execute(self, subcommand_flags: Sequence[str], state: State) -> State:
        flags = parse_flags(UP_COMMAND, _FLAGS, subcommand_flags)
        working = state.model_copy(deep=True)

        self._resolve_credentials(flags, working)
        self.client_provider.configure(
            working.aws.access_key_id,
            working.aws.secret_access_key,
            working.aws.region,
        )

        self._sync_key_pair(working)
        self.state_writer(working)

        certificate_arn = self._certificate_arn(flags, working)

        # Persisted before the stack is requested.
        self._name_stack(working)
        self.state_writer(working)
        stack = self._create_stack(working, certificate_arn)

        self._deploy_director(working, stack)

        outputs = stack.outputs
        if outputs.get("LoadBalancerURL"):
            self.ui.println(f"load balancer: {outputs['LoadBalancerURL']}")
        self.ui.println(f"director address: https://{outputs.get('BOSHEIP', '')}:25555")
        logger.info("Environment %s is up.", working.stack.name)
        return working
