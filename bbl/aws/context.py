"""AWS session and client factory.

Unlike a profile-based setup, bbl authenticates with the explicit
access key / secret / region that Up recorded in state, so Destroy keeps
using the same identity even if ambient credentials change.

The provider is constructed once at startup (carrying the optional
``--endpoint-override``) and configured by a command once it knows which
credentials to use.  Adapters ask it for clients lazily, per call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import boto3

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# AWSContext
# ---------------------------------------------------------------------------


@dataclass
class AWSContext:
    """Credentials + region + optional endpoint, with a cached session.

    Attributes:
        access_key_id: IAM access key id.
        secret_access_key: IAM secret access key.
        region: AWS region (e.g. ``us-east-1``).
        endpoint_override: Base URL used for every service instead of the
            public AWS endpoints (fake backends, testing).
    """

    access_key_id: str
    secret_access_key: str
    region: str
    endpoint_override: str = ""
    _session: Any = field(default=None, repr=False, compare=False)

    @property
    def session(self) -> boto3.Session:
        """Return the cached :class:`boto3.Session`."""
        if self._session is None:
            self._session = boto3.Session(
                aws_access_key_id=self.access_key_id,
                aws_secret_access_key=self.secret_access_key,
                region_name=self.region,
            )
        return self._session

    def client(self, service: str, **kwargs: Any) -> Any:
        """Create a boto3 client for *service*."""
        if self.endpoint_override:
            kwargs.setdefault("endpoint_url", self.endpoint_override)
        return self.session.client(service, **kwargs)


# ---------------------------------------------------------------------------
# ClientProvider
# ---------------------------------------------------------------------------


class ClientProvider:
    """Hands out boto3 clients once :meth:`configure` has been called."""

    def __init__(self, endpoint_override: str = "") -> None:
        self.endpoint_override = endpoint_override
        self._context: Optional[AWSContext] = None
        self._clients: Dict[str, Any] = {}

    def configure(
        self, access_key_id: str, secret_access_key: str, region: str,
    ) -> None:
        """Set the identity used for subsequent clients."""
        self._context = AWSContext(
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            region=region,
            endpoint_override=self.endpoint_override,
        )
        self._clients.clear()
        logger.debug(
            "AWS client provider configured: region=%s endpoint=%s",
            region, self.endpoint_override or "(default)",
        )

    @property
    def context(self) -> AWSContext:
        if self._context is None:
            raise RuntimeError("AWS client provider used before configure()")
        return self._context

    def client(self, service: str) -> Any:
        """Return a (cached) boto3 client for *service*."""
        if service not in self._clients:
            self._clients[service] = self.context.client(service)
        return self._clients[service]
