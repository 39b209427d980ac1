"""IAM server certificate lookup.

Used by Up when the operator asks for a load balancer fronted by an
existing IAM server certificate (``--lb-cert-name``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from botocore.exceptions import ClientError

from bbl.errors import CertificateDescriptionError, CertificateNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class Certificate:
    """An IAM server certificate."""

    name: str = ""
    body: str = ""
    arn: str = ""


class CertificateDescriber:
    """Resolve a server certificate name to its body and ARN."""

    def __init__(self, client_provider: Any) -> None:
        self._clients = client_provider

    def describe(self, certificate_name: str) -> Certificate:
        """Return the named certificate.

        Raises:
            CertificateNotFoundError: IAM answered 404 ``NoSuchEntity``.
            CertificateDescriptionError: The response carried no metadata.
        """
        try:
            resp = self._clients.client("iam").get_server_certificate(
                ServerCertificateName=certificate_name,
            )
        except ClientError as exc:
            error = exc.response.get("Error", {})
            status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            if status == 404 and error.get("Code") == "NoSuchEntity":
                raise CertificateNotFoundError("certificate not found") from exc
            raise

        cert = resp.get("ServerCertificate") or {}
        metadata = cert.get("ServerCertificateMetadata")
        if not cert or not metadata:
            raise CertificateDescriptionError("failed to describe certificate")

        logger.debug("Described certificate %s", certificate_name)
        return Certificate(
            name=metadata.get("ServerCertificateName", ""),
            body=cert.get("CertificateBody", ""),
            arn=metadata.get("Arn", ""),
        )
