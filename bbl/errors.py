"""Exception hierarchy for bbl.

Every error the CLI reports to the operator derives from :class:`BBLError`.
Errors raised by boto3 / botocore inside the AWS adapters are left
untranslated and surface with their original message.
"""

from __future__ import annotations


class BBLError(Exception):
    """Base class for operator-facing errors."""


# ---------------------------------------------------------------------------
# Usage
# ---------------------------------------------------------------------------


class UsageError(BBLError):
    """Bad global flag, duplicate flag, or unrecognized command."""


class FlagError(UsageError):
    """A subcommand received a flag it does not define."""


class CredentialsMissingError(UsageError):
    """A required AWS credential was not supplied by flag, env, or state."""


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


class StateNotFoundError(BBLError):
    """No state file exists in the requested state directory."""

    def __init__(self, state_dir: str, filename: str) -> None:
        self.state_dir = state_dir
        super().__init__(
            f'{filename} not found in "{state_dir}", ensure you\'re running '
            "this command in the proper state directory or create a new "
            "environment with bbl up"
        )


class MissingStateFieldError(BBLError):
    """The state file exists but lacks a value a command needs."""


# ---------------------------------------------------------------------------
# AWS resources
# ---------------------------------------------------------------------------


class StackNotFoundError(BBLError):
    """The CloudFormation stack recorded in state does not exist."""


class VPCNotSafeToDeleteError(BBLError):
    """Workload instances still run inside the environment's VPC."""


class CertificateNotFoundError(BBLError):
    """The named IAM server certificate does not exist."""


class CertificateDescriptionError(BBLError):
    """IAM returned a server certificate response without metadata."""


# ---------------------------------------------------------------------------
# Director
# ---------------------------------------------------------------------------


class BOSHInitError(BBLError):
    """``bosh-init`` exited non-zero or could not be started."""

    def __init__(self, message: str, returncode: int = 1) -> None:
        self.returncode = returncode
        super().__init__(message)
