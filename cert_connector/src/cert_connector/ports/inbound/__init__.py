"""Inbound ports - API contract of the certificate connector.

Inbound ports define the interface that infrastructure-automation tools
use to obtain certificates: they hand in a request value and a zone, and
get back a PEM collection or a typed ``ConnectorError``.
"""

from __future__ import annotations

import threading
from abc import abstractmethod
from typing import Optional, Protocol, runtime_checkable

from cert_connector.domain.entities.account import Credentials, Session
from cert_connector.domain.entities.certificate import (
    CertificateRequest,
    ChainOrder,
    PEMCollection,
    RenewalRequest,
)
from cert_connector.domain.entities.policy import Policy
from cert_connector.domain.entities.zone import Zone
from cert_connector.domain.value_objects.identifiers import RequestId


@runtime_checkable
class CertificateConnectorPort(Protocol):
    """Protocol for certificate issuance through a remote service.

    Thread Safety:
        Implementations hold no per-operation state; one instance may serve
        concurrent operations once authenticated.

    Example:
        connector.authenticate(Credentials(api_key))
        request_id = connector.submit(CertificateRequest(csr=csr_pem), "Default")
        pems = connector.poll_and_retrieve(request_id, timeout=60)
    """

    @abstractmethod
    def authenticate(self, credentials: Optional[Credentials]) -> Session:
        """Resolve the account behind the credentials.

        Raises:
            MissingCredentials: If no credentials are given.
        """
        ...

    @abstractmethod
    def resolve_policy(self, zone_tag: str) -> tuple[Zone, Policy]:
        """Resolve a zone and its merged issuance policy.

        Raises:
            ZoneNotFound: If the zone does not exist.
            PolicyFetchFailed: If a policy of the zone cannot be fetched.
        """
        ...

    @abstractmethod
    def submit(self, request: CertificateRequest, zone_tag: Optional[str] = None) -> RequestId:
        """Submit a CSR.

        Returns:
            Pickup id of the request.
        """
        ...

    @abstractmethod
    def poll_and_retrieve(
        self,
        request_id: RequestId,
        timeout: Optional[float] = None,
        chain_order: Optional[ChainOrder] = None,
        *,
        fetch_private_key: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> PEMCollection:
        """Wait for issuance and download the certificate chain.

        Raises:
            CertificatePending: Not issued yet and no timeout given.
            RetrieveTimeout: Not issued within the timeout.
            Cancelled: The cancel event was set.
        """
        ...

    @abstractmethod
    def renew(self, renewal: RenewalRequest) -> RequestId:
        """Submit a renewal of a previously issued certificate.

        Raises:
            StaleRenewalTarget: The target is no longer the latest request.
        """
        ...
