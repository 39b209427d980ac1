"""Random name and password generation."""

from __future__ import annotations

import secrets
import string

_ALPHABET = string.ascii_lowercase + string.digits


def generate_name(prefix: str, length: int = 7) -> str:
    """Return ``<prefix><random lowercase alphanumerics>``.

    Lowercase only: the result is used in CloudFormation stack names and
    EC2 key pair names, which are shared with DNS-ish contexts.
    """
    return prefix + "".join(secrets.choice(_ALPHABET) for _ in range(length))


def generate_password(length: int = 15) -> str:
    """Return a random alphanumeric password (no symbols, YAML-safe)."""
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))
