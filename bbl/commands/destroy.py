"""``bbl destroy``: tear the environment down.

Order of operations::

    confirm → VPC safety check → bosh-init delete → delete stack
            → delete key pair → empty State

The VPC check runs before any deletion.  The director lives on the
stack's subnet, so it is deleted first.  State is cleared only after
every step has succeeded.

A stack that was never named, or is already gone, skips the VPC check and
the stack delete; the remaining steps still run.  Re-running destroy after
a partial failure therefore finishes the teardown.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, TextIO

import click

from bbl import capabilities
from bbl.aws.cloudformation import Stack
from bbl.commands.base import DESTROY_COMMAND, Command, parse_flags
from bbl.errors import StackNotFoundError
from bbl.storage.models import State
from bbl.ui import ConsoleLogger

logger = logging.getLogger(__name__)

CONFIRMATION_PROMPT = (
    "Are you sure you want to delete your infrastructure? "
    "This operation cannot be undone!"
)

AFFIRMATIVE_RESPONSES = frozenset({"y", "yes"})

_FLAGS = [
    click.Option(
        ["--no-confirm", "-n"],
        is_flag=True,
        default=False,
        help="Do not ask for confirmation.",
    ),
]


class Destroy(Command):
    """Delete the director, the network stack and the key pair."""

    def __init__(
        self,
        ui: ConsoleLogger,
        stdin: TextIO,
        bosh_deleter: capabilities.BOSHDeleter,
        vpc_status_checker: capabilities.VPCStatusChecker,
        stack_manager: capabilities.StackManager,
        infrastructure_manager: capabilities.InfrastructureManager,
        key_pair_deleter: capabilities.KeyPairDeleter,
        client_provider: capabilities.ClientProvider,
    ) -> None:
        self.ui = ui
        self.stdin = stdin
        self.bosh_deleter = bosh_deleter
        self.vpc_status_checker = vpc_status_checker
        self.stack_manager = stack_manager
        self.infrastructure_manager = infrastructure_manager
        self.key_pair_deleter = key_pair_deleter
        self.client_provider = client_provider

    def usage(self) -> str:
        return (
            "Tears down a BOSH director environment on AWS\n"
            "  --no-confirm, -n  Do not ask for confirmation (optional)"
        )

    def _confirmed(self) -> bool:
        self.ui.prompt(CONFIRMATION_PROMPT)
        response = self.stdin.readline()
        return response.strip().lower() in AFFIRMATIVE_RESPONSES

    def _describe_stack(self, stack_name: str) -> Optional[Stack]:
        """The recorded stack, or None when it was never created or is gone."""
        if not stack_name:
            return None
        try:
            return self.stack_manager.describe(stack_name)
        except StackNotFoundError:
            logger.info("Stack %s no longer exists; skipping its teardown.", stack_name)
            return None

    def execute(self, subcommand_flags: Sequence[str], state: State) -> State:
        flags = parse_flags(DESTROY_COMMAND, _FLAGS, subcommand_flags)

        if not flags["no_confirm"] and not self._confirmed():
            self.ui.step("exiting")
            return state

        self.ui.step("destroying BOSH director and AWS stack")
        self.client_provider.configure(
            state.aws.access_key_id,
            state.aws.secret_access_key,
            state.aws.region,
        )

        stack = self._describe_stack(state.stack.name)
        if stack is not None:
            vpc_id = stack.outputs.get("VPCID", "")
            self.vpc_status_checker.validate_safe_to_delete(vpc_id)

        self.bosh_deleter.delete(
            state.bosh.manifest,
            state.bosh.state,
            state.key_pair.private_key,
        )

        if stack is not None:
            self.ui.step("deleting AWS stack")
            self.infrastructure_manager.delete(state.stack.name)

        if state.key_pair.name:
            self.ui.step("deleting keypair")
            self.key_pair_deleter.delete(state.key_pair.name)

        logger.info("Environment for stack %s destroyed.", state.stack.name or "(none)")
        return State()
