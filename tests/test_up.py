"""Tests for the up command."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from bbl.aws.cloudformation import Stack
from bbl.aws.iam import Certificate
from bbl.boshinit.deployer import DeployOutput
from bbl.commands.up import Up
from bbl.errors import CredentialsMissingError, FlagError
from bbl.storage.models import KeyPair, State

CREDENTIAL_FLAGS = [
    "--aws-access-key-id", "AKIA",
    "--aws-secret-access-key", "secret",
    "--aws-region", "us-east-1",
]

OUTPUTS = {
    "VPCID": "vpc-1",
    "BOSHSubnet": "subnet-1",
    "BOSHSubnetAZ": "us-east-1a",
    "BOSHEIP": "52.0.0.1",
    "BOSHUserAccessKey": "AKIACPI",
    "BOSHUserSecretAccessKey": "cpi-secret",
    "BOSHSecurityGroup": "sg-1",
}


@pytest.fixture(autouse=True)
def _no_env_credentials(monkeypatch):
    for key in ("ACCESS_KEY_ID", "SECRET_ACCESS_KEY", "REGION"):
        monkeypatch.delenv(f"BBL_AWS_{key}", raising=False)


def _up(outputs=None):
    parent = MagicMock()
    parent.key_pair_synchronizer.sync.side_effect = lambda kp: KeyPair(
        name=kp.name, private_key=kp.private_key or "new-private", public_key="ssh-rsa",
    )
    parent.availability_zone_retriever.retrieve.return_value = ["us-east-1a", "us-east-1b"]
    parent.infrastructure_manager.create.return_value = Stack(
        name="stack", status="CREATE_COMPLETE", outputs=dict(outputs or OUTPUTS),
    )
    parent.certificate_describer.describe.return_value = Certificate(
        name="my-cert", body="BODY", arn="arn:aws:iam::1:server-certificate/my-cert",
    )
    parent.bosh_deployer.deploy.side_effect = lambda di: DeployOutput(
        manifest="name: bosh\n",
        state={"current_vm_cid": "i-1"},
        credentials=dict(di.credentials) or {"natsPassword": "n"},
        ssl_certificate=di.ssl_certificate or "CERT",
        ssl_private_key=di.ssl_private_key or "KEY",
    )
    writes = []
    parent.state_writer.side_effect = lambda s: writes.append(s.model_copy(deep=True))

    cmd = Up(
        ui=parent.ui,
        client_provider=parent.client_provider,
        key_pair_synchronizer=parent.key_pair_synchronizer,
        infrastructure_manager=parent.infrastructure_manager,
        availability_zone_retriever=parent.availability_zone_retriever,
        certificate_describer=parent.certificate_describer,
        bosh_deployer=parent.bosh_deployer,
        state_writer=parent.state_writer,
        name_generator=lambda prefix: prefix + "xyz",
    )
    return cmd, parent, writes


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class TestCredentials:
    def test_flags_recorded_in_state(self):
        cmd, parent, _ = _up()
        result = cmd.execute(CREDENTIAL_FLAGS, State())
        assert result.aws.access_key_id == "AKIA"
        assert result.aws.secret_access_key == "secret"
        assert result.aws.region == "us-east-1"
        parent.client_provider.configure.assert_called_once_with(
            "AKIA", "secret", "us-east-1",
        )

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("BBL_AWS_ACCESS_KEY_ID", "ENVKEY")
        monkeypatch.setenv("BBL_AWS_SECRET_ACCESS_KEY", "envsecret")
        monkeypatch.setenv("BBL_AWS_REGION", "eu-west-1")
        cmd, _, _ = _up()
        result = cmd.execute([], State())
        assert result.aws.access_key_id == "ENVKEY"
        assert result.aws.region == "eu-west-1"

    def test_state_fallback(self):
        state = State()
        state.aws.access_key_id = "OLD"
        state.aws.secret_access_key = "oldsecret"
        state.aws.region = "us-west-2"
        cmd, _, _ = _up()
        assert cmd.execute([], state).aws.region == "us-west-2"

    def test_missing_credential(self):
        cmd, parent, writes = _up()
        with pytest.raises(CredentialsMissingError, match="--aws-access-key-id"):
            cmd.execute([], State())
        parent.client_provider.configure.assert_not_called()
        assert writes == []

    def test_unknown_flag(self):
        cmd, _, _ = _up()
        with pytest.raises(FlagError, match="No such option"):
            cmd.execute(["--bogus"], State())


# ---------------------------------------------------------------------------
# Provisioning
# ---------------------------------------------------------------------------


class TestProvisioning:
    def test_fresh_environment(self):
        cmd, parent, _ = _up()
        result = cmd.execute(CREDENTIAL_FLAGS, State())

        assert result.key_pair.name == "keypair-bbl-xyz"
        assert result.key_pair.private_key == "new-private"
        assert result.stack.name == "stack-bbl-xyz"
        assert result.bosh.director_username == "user-xyz"
        assert len(result.bosh.director_password) == 15
        assert result.bosh.manifest == "name: bosh\n"
        assert result.bosh.state == {"current_vm_cid": "i-1"}
        assert result.bosh.director_ssl_certificate == "CERT"
        parent.infrastructure_manager.create.assert_called_once_with(
            "keypair-bbl-xyz", ["us-east-1a", "us-east-1b"], "stack-bbl-xyz", "",
        )
        parent.certificate_describer.describe.assert_not_called()

    def test_existing_names_are_reused(self):
        state = State()
        state.key_pair.name = "keypair-old"
        state.key_pair.private_key = "old-private"
        state.stack.name = "stack-old"
        state.bosh.director_username = "admin"
        state.bosh.director_password = "pw"
        cmd, parent, _ = _up()

        result = cmd.execute(CREDENTIAL_FLAGS, state)

        assert result.key_pair.private_key == "old-private"
        assert result.stack.name == "stack-old"
        assert result.bosh.director_username == "admin"
        assert result.bosh.director_password == "pw"
        deploy_input = parent.bosh_deployer.deploy.call_args[0][0]
        assert deploy_input.director_password == "pw"
        assert deploy_input.stack_outputs == OUTPUTS

    def test_input_state_not_modified(self):
        state = State()
        cmd, _, _ = _up()
        cmd.execute(CREDENTIAL_FLAGS, state)
        assert state == State()

    def test_checkpoints_after_key_pair_and_stack(self):
        cmd, _, writes = _up()
        cmd.execute(CREDENTIAL_FLAGS, State())
        assert len(writes) == 2
        assert writes[0].key_pair.name == "keypair-bbl-xyz"
        assert writes[0].stack.name == ""
        assert writes[1].stack.name == "stack-bbl-xyz"
        assert writes[1].bosh.manifest == ""

    def test_deploy_failure_keeps_checkpointed_stack(self):
        cmd, parent, writes = _up()
        parent.bosh_deployer.deploy.side_effect = RuntimeError("bosh-init failed")
        with pytest.raises(RuntimeError, match="bosh-init failed"):
            cmd.execute(CREDENTIAL_FLAGS, State())
        assert writes[-1].stack.name == "stack-bbl-xyz"
        assert writes[-1].key_pair.private_key == "new-private"

    def test_stack_name_persisted_before_create(self):
        cmd, parent, writes = _up()
        persisted_names = []

        def create(*args):
            persisted_names.append(writes[-1].stack.name)
            return Stack(name="stack", status="CREATE_COMPLETE", outputs=dict(OUTPUTS))

        parent.infrastructure_manager.create.side_effect = create
        cmd.execute(CREDENTIAL_FLAGS, State())
        assert persisted_names == ["stack-bbl-xyz"]

    def test_failed_stack_create_keeps_stack_name(self):
        cmd, parent, writes = _up()
        parent.infrastructure_manager.create.side_effect = RuntimeError(
            "CFN stack stack-bbl-xyz ended in unexpected status: ROLLBACK_COMPLETE"
        )
        with pytest.raises(RuntimeError, match="ROLLBACK_COMPLETE"):
            cmd.execute(CREDENTIAL_FLAGS, State())
        assert writes[-1].stack.name == "stack-bbl-xyz"
        assert parent.infrastructure_manager.create.call_args[0][2] == "stack-bbl-xyz"

    def test_rerun_after_failed_create_reuses_stack_name(self):
        cmd, parent, writes = _up()
        parent.infrastructure_manager.create.side_effect = RuntimeError("rolled back")
        with pytest.raises(RuntimeError):
            cmd.execute(CREDENTIAL_FLAGS, State())
        checkpoint = writes[-1]

        retry, retry_parent, _ = _up()
        retry.name_generator = lambda prefix: prefix + "other"
        result = retry.execute(CREDENTIAL_FLAGS, checkpoint)

        assert result.stack.name == "stack-bbl-xyz"
        assert result.key_pair.name == "keypair-bbl-xyz"
        assert retry_parent.infrastructure_manager.create.call_args[0][2] == "stack-bbl-xyz"

    def test_prints_director_address(self):
        cmd, parent, _ = _up()
        cmd.execute(CREDENTIAL_FLAGS, State())
        printed = [c[0][0] for c in parent.ui.println.call_args_list]
        assert "director address: https://52.0.0.1:25555" in printed


# ---------------------------------------------------------------------------
# Load balancer certificate
# ---------------------------------------------------------------------------


class TestCertificate:
    def test_cert_flag_adds_load_balancer(self):
        outputs = dict(OUTPUTS, LoadBalancerURL="lb.example.com")
        cmd, parent, _ = _up(outputs)

        result = cmd.execute(CREDENTIAL_FLAGS + ["--lb-cert-name", "my-cert"], State())

        parent.certificate_describer.describe.assert_called_once_with("my-cert")
        assert result.stack.certificate_name == "my-cert"
        args = parent.infrastructure_manager.create.call_args[0]
        assert args[3] == "arn:aws:iam::1:server-certificate/my-cert"
        printed = [c[0][0] for c in parent.ui.println.call_args_list]
        assert "load balancer: lb.example.com" in printed

    def test_stored_cert_name_is_reused(self):
        state = State()
        state.stack.certificate_name = "my-cert"
        cmd, parent, _ = _up()
        cmd.execute(CREDENTIAL_FLAGS, state)
        parent.certificate_describer.describe.assert_called_once_with("my-cert")
