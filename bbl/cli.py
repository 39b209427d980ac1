"""CLI entry point for bbl, built on typer.

typer only captures the raw argument vector; splitting global flags from
the command is done by :class:`~bbl.application.CommandLineParser` so the
``bbl [GLOBAL OPTIONS] COMMAND [FLAGS]`` grammar (single- or double-dash
flags, ``--flag=value``, help passthrough) is honoured exactly.

Usage::

    bbl --help
    bbl --state-dir ./env up --aws-access-key-id ... --aws-secret-access-key ... --aws-region us-east-1
    bbl ssh-key
    bbl destroy --no-confirm

Environment variables:
  BBL_AWS_ACCESS_KEY_ID / BBL_AWS_SECRET_ACCESS_KEY / BBL_AWS_REGION
                       Defaults for ``bbl up`` credential flags.
  BBL_BOSH_INIT_PATH   bosh-init binary (default: ``bosh-init`` on PATH).
  BBL_DEBUG            Set to 1 for debug logging.
"""

from __future__ import annotations

import functools
import logging
import os
import sys
from typing import Callable, Dict, Optional, Sequence, TextIO

import typer
from botocore.exceptions import BotoCoreError, ClientError

from bbl import __version__
from bbl.application.app import App
from bbl.application.command_line_parser import (
    CommandLineConfiguration,
    CommandLineParser,
)
from bbl.application.usage import print_usage
from bbl.aws.cloudformation import InfrastructureManager, StackManager
from bbl.aws.context import ClientProvider
from bbl.aws.ec2 import AvailabilityZoneRetriever, KeyPairManager, VPCStatusChecker
from bbl.aws.iam import CertificateDescriber
from bbl.boshinit.deployer import BOSHDeployer
from bbl.commands import (
    COMMAND_NAMES,
    DESTROY_COMMAND,
    DIRECTOR_PASSWORD_COMMAND,
    HELP_COMMAND,
    SSH_KEY_COMMAND,
    UP_COMMAND,
    VERSION_COMMAND,
    Command,
    Destroy,
    DirectorPassword,
    Help,
    SSHKey,
    Up,
    Version,
)
from bbl.errors import BBLError, FlagError
from bbl.storage.store import StateStore
from bbl.ui import ConsoleLogger

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

#: Errors reported to the operator as a message + non-zero exit.
REPORTED_ERRORS = (BBLError, BotoCoreError, ClientError, OSError, RuntimeError, ValueError)


# ── Wiring ──────────────────────────────────────────────────────────────────


def build_command_set(
    config: CommandLineConfiguration,
    *,
    ui: ConsoleLogger,
    stdin: TextIO,
    store: StateStore,
) -> Dict[str, Command]:
    """Construct every command with its collaborators injected."""
    clients = ClientProvider(endpoint_override=config.endpoint_override)
    stack_manager = StackManager(clients)
    infrastructure_manager = InfrastructureManager(stack_manager)
    key_pairs = KeyPairManager(clients)
    bosh = BOSHDeployer()

    commands: Dict[str, Command] = {}
    commands.update({
        UP_COMMAND: Up(
            ui,
            clients,
            key_pairs,
            infrastructure_manager,
            AvailabilityZoneRetriever(clients),
            CertificateDescriber(clients),
            bosh,
            state_writer=functools.partial(store.save, config.state_dir),
        ),
        DESTROY_COMMAND: Destroy(
            ui,
            stdin,
            bosh,
            VPCStatusChecker(clients),
            stack_manager,
            infrastructure_manager,
            key_pairs,
            clients,
        ),
        SSH_KEY_COMMAND: SSHKey(ui),
        DIRECTOR_PASSWORD_COMMAND: DirectorPassword(ui),
        VERSION_COMMAND: Version(ui, __version__),
        HELP_COMMAND: Help(ui, commands),
    })
    return commands


def run(
    args: Sequence[str],
    *,
    ui: Optional[ConsoleLogger] = None,
    stdin: Optional[TextIO] = None,
    getwd: Callable[[], str] = os.getcwd,
) -> int:
    """Parse *args*, dispatch the command and return an exit code."""
    ui = ui or ConsoleLogger()
    stdin = stdin or sys.stdin
    store = StateStore()

    parser = CommandLineParser(
        usage=functools.partial(print_usage, ui),
        commands=COMMAND_NAMES,
        getwd=getwd,
    )

    try:
        config = parser.parse(args)
        command_set = build_command_set(config, ui=ui, stdin=stdin, store=store)
        App(command_set, store).run(config)
    except FlagError as exc:
        print_usage(ui)
        ui.error(str(exc))
        return EXIT_FAILURE
    except REPORTED_ERRORS as exc:
        logger.debug("Command failed", exc_info=True)
        ui.error(str(exc))
        return EXIT_FAILURE
    return EXIT_SUCCESS


# ── typer shell ─────────────────────────────────────────────────────────────

app = typer.Typer(add_completion=False)

#: Everything after ``bbl`` reaches :func:`run` untouched.
RAW_ARGS_CONTEXT = {
    "allow_extra_args": True,
    "ignore_unknown_options": True,
    "help_option_names": [],
}


@app.command(context_settings=RAW_ARGS_CONTEXT)
def entrypoint(ctx: typer.Context) -> None:
    """Bootstrap and tear down a BOSH director on AWS."""
    if os.environ.get("BBL_DEBUG") == "1":
        logging.basicConfig(level=logging.DEBUG)
    raise typer.Exit(run(ctx.args))


# ── Entry point ─────────────────────────────────────────────────────────────


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI and return an exit code."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        app(args=args, prog_name="bbl")
        return EXIT_SUCCESS
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
