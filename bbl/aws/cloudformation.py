"""CloudFormation stack lifecycle for the director's network.

:class:`StackManager` wraps the raw CloudFormation calls (describe,
create-or-update, wait, delete).  :class:`InfrastructureManager` layers the
bbl template on top and is what the commands use to create and tear down
the stack.

Only the stack *name* is ever persisted.  Everything else (VPC id, subnet,
security group, EIP, CPI access keys) is read from the stack outputs on
demand via :meth:`StackManager.describe`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from botocore.exceptions import ClientError, WaiterError

from bbl.aws.templates import render_template
from bbl.errors import StackNotFoundError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Stack statuses that mean "done, no action needed".
COMPLETE_STATUSES = frozenset({
    "CREATE_COMPLETE",
    "UPDATE_COMPLETE",
    "UPDATE_ROLLBACK_COMPLETE",
})

NO_UPDATES_MESSAGE = "No updates are to be performed."

WAITER_CONFIG = {"Delay": 15, "MaxAttempts": 240}


# ---------------------------------------------------------------------------
# Stack dataclass
# ---------------------------------------------------------------------------


@dataclass
class Stack:
    """A described CloudFormation stack."""

    name: str = ""
    status: str = ""
    outputs: Dict[str, str] = field(default_factory=dict)


def _is_missing_stack(exc: ClientError) -> bool:
    error = exc.response.get("Error", {})
    return error.get("Code") == "ValidationError" and "does not exist" in error.get(
        "Message", ""
    )


# ---------------------------------------------------------------------------
# StackManager
# ---------------------------------------------------------------------------


class StackManager:
    """Thin wrapper around the CloudFormation API."""

    def __init__(self, client_provider: Any) -> None:
        self._clients = client_provider

    @property
    def _cfn(self) -> Any:
        return self._clients.client("cloudformation")

    def describe(self, stack_name: str) -> Stack:
        """Return the stack's status and outputs.

        Raises:
            StackNotFoundError: If no stack named *stack_name* exists.
        """
        try:
            resp = self._cfn.describe_stacks(StackName=stack_name)
        except ClientError as exc:
            if _is_missing_stack(exc):
                raise StackNotFoundError(f"stack {stack_name} not found") from exc
            raise

        stacks = resp.get("Stacks", [])
        if not stacks:
            raise StackNotFoundError(f"stack {stack_name} not found")

        raw = stacks[0]
        outputs = {
            o["OutputKey"]: o.get("OutputValue", "")
            for o in raw.get("Outputs", [])
        }
        return Stack(
            name=raw.get("StackName", stack_name),
            status=raw.get("StackStatus", ""),
            outputs=outputs,
        )

    def exists(self, stack_name: str) -> bool:
        try:
            self.describe(stack_name)
        except StackNotFoundError:
            return False
        return True

    def create_or_update(self, stack_name: str, template_body: str) -> None:
        """Create the stack, or update it in place if it already exists."""
        cfn = self._cfn
        params = {
            "StackName": stack_name,
            "TemplateBody": template_body,
            "Capabilities": ["CAPABILITY_IAM"],
        }

        if not self.exists(stack_name):
            logger.info("Creating CFN stack %s ...", stack_name)
            cfn.create_stack(**params)
            return

        logger.info("Updating CFN stack %s ...", stack_name)
        try:
            cfn.update_stack(**params)
        except ClientError as exc:
            if NO_UPDATES_MESSAGE in exc.response.get("Error", {}).get("Message", ""):
                logger.info("Stack %s is already up to date.", stack_name)
                return
            raise

    def wait_for_completion(self, stack_name: str) -> Stack:
        """Block until the stack leaves its in-progress state.

        Raises:
            RuntimeError: If the stack settles in a non-complete status.
        """
        stack = self.describe(stack_name)
        waiter_name = (
            "stack_update_complete"
            if stack.status.startswith("UPDATE")
            else "stack_create_complete"
        )
        if stack.status not in COMPLETE_STATUSES:
            logger.info("Waiting for stack %s (%s) ...", stack_name, stack.status)
            try:
                self._cfn.get_waiter(waiter_name).wait(
                    StackName=stack_name, WaiterConfig=WAITER_CONFIG,
                )
            except WaiterError as exc:
                final = self.describe(stack_name)
                raise RuntimeError(
                    f"CFN stack {stack_name} did not complete "
                    f"(status={final.status}): {exc}"
                ) from exc
            stack = self.describe(stack_name)

        if stack.status not in COMPLETE_STATUSES:
            raise RuntimeError(
                f"CFN stack {stack_name} ended in unexpected status: {stack.status}"
            )
        return stack

    def delete(self, stack_name: str) -> None:
        """Delete the stack and wait until it is gone.

        Deleting a stack that does not exist is a no-op.
        """
        if not self.exists(stack_name):
            logger.info("Stack %s does not exist; nothing to delete.", stack_name)
            return

        cfn = self._cfn
        logger.info("Deleting CFN stack %s ...", stack_name)
        cfn.delete_stack(StackName=stack_name)
        cfn.get_waiter("stack_delete_complete").wait(
            StackName=stack_name, WaiterConfig=WAITER_CONFIG,
        )
        logger.info("Stack %s deleted.", stack_name)


# ---------------------------------------------------------------------------
# InfrastructureManager
# ---------------------------------------------------------------------------


class InfrastructureManager:
    """Creates / deletes the bbl network stack."""

    def __init__(self, stack_manager: StackManager) -> None:
        self._stacks = stack_manager

    def create(
        self,
        key_pair_name: str,
        availability_zones: List[str],
        stack_name: str,
        certificate_arn: str = "",
    ) -> Stack:
        """Ensure the stack exists with the current template; return it."""
        template_body = render_template(
            key_pair_name, availability_zones, certificate_arn=certificate_arn,
        )
        self._stacks.create_or_update(stack_name, template_body)
        stack = self._stacks.wait_for_completion(stack_name)
        logger.info("Stack %s is %s.", stack_name, stack.status)
        return stack

    def delete(self, stack_name: str) -> None:
        self._stacks.delete(stack_name)
