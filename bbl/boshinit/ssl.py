"""Self-signed TLS material for the director API."""

from __future__ import annotations

import datetime
import ipaddress
from dataclasses import dataclass

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

KEY_SIZE = 2048
VALIDITY_DAYS = 365 * 2


@dataclass
class SSLKeyPair:
    certificate: str = ""
    private_key: str = ""


def generate_ssl_keypair(common_name: str) -> SSLKeyPair:
    """Create a self-signed certificate for *common_name*.

    When *common_name* is an IP address (the director's elastic IP) it is
    also added as an IP subject alternative name, which is what clients
    verify against.
    """
    key = rsa.generate_private_key(public_exponent=65537, key_size=KEY_SIZE)
    name = x509.Name([
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "bosh-bootloader"),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])

    try:
        san = x509.SubjectAlternativeName(
            [x509.IPAddress(ipaddress.ip_address(common_name))]
        )
    except ValueError:
        san = x509.SubjectAlternativeName([x509.DNSName(common_name)])

    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(minutes=5))
        .not_valid_after(now + datetime.timedelta(days=VALIDITY_DAYS))
        .add_extension(san, critical=False)
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )

    return SSLKeyPair(
        certificate=cert.public_bytes(serialization.Encoding.PEM).decode("ascii"),
        private_key=key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode("ascii"),
    )
