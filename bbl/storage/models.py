"""State models persisted to ``bbl-state.json``.

JSON layout (camelCase keys, sorted on disk)::

    {
      "aws":     {"accessKeyId": "", "secretAccessKey": "", "region": ""},
      "bosh":    {"credentials": {}, "directorPassword": "",
                  "directorSSLCertificate": "", "directorSSLPrivateKey": "",
                  "directorUsername": "", "manifest": "", "state": {}},
      "keyPair": {"name": "", "privateKey": "", "publicKey": ""},
      "stack":   {"certificateName": "", "name": ""}
    }

An all-default :class:`State` means "no environment exists here".
"""

from __future__ import annotations

import json
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _StateModel(BaseModel):
    """Shared config: camelCase aliases, construction by field name allowed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


class AWS(_StateModel):
    """Credential and region snapshot taken when the environment was created."""

    access_key_id: str = ""
    secret_access_key: str = ""
    region: str = ""


class KeyPair(_StateModel):
    """EC2 key pair used by bosh-init to reach the director VM."""

    name: str = ""
    private_key: str = ""
    public_key: str = ""


class BOSH(_StateModel):
    """Director credentials, TLS material and bosh-init deployment state.

    ``state`` is bosh-init's own state document; it is carried between
    runs verbatim and never inspected.
    """

    director_username: str = ""
    director_password: str = ""
    state: Dict[str, Any] = Field(default_factory=dict)
    credentials: Dict[str, str] = Field(default_factory=dict)
    director_ssl_certificate: str = Field(default="", alias="directorSSLCertificate")
    director_ssl_private_key: str = Field(default="", alias="directorSSLPrivateKey")
    manifest: str = ""


class Stack(_StateModel):
    """Pointer to the CloudFormation stack; live outputs are never stored."""

    name: str = ""
    certificate_name: str = ""


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


class State(_StateModel):
    """The durable record of one environment."""

    aws: AWS = Field(default_factory=AWS)
    key_pair: KeyPair = Field(default_factory=KeyPair)
    bosh: BOSH = Field(default_factory=BOSH)
    stack: Stack = Field(default_factory=Stack)

    @property
    def is_empty(self) -> bool:
        """True when no environment is recorded."""
        return self == State()

    def to_sorted_json(self, indent: int = 2) -> str:
        """Serialise with camelCase keys, sorted for deterministic output."""
        return json.dumps(
            self.model_dump(mode="json", by_alias=True),
            indent=indent,
            sort_keys=True,
        )
