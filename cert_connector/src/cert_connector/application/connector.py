"""Certificate service connector.

Entry point for callers. Wires the policy resolver, request lifecycle,
fingerprint resolver and renewal orchestrator around one transport, and
exposes the connector operations:

- Account: ``ping``, ``register``, ``authenticate``
- Zones: ``resolve_policy``, ``read_zone_configuration``
- Issuance: ``submit``, ``poll_and_retrieve``, ``retrieve_certificate``
- Renewal: ``renew``

The only state kept between calls is the session produced by
``authenticate``; zones and pickup ids are always passed per call, so one
connector can serve concurrent operations.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from cert_connector.application.fingerprint_resolver import FingerprintResolver
from cert_connector.application.policy_resolver import PolicyResolver
from cert_connector.application.renewal import RenewalOrchestrator
from cert_connector.application.request_lifecycle import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    CertificateRequestLifecycle,
)
from cert_connector.domain.entities.account import Credentials, Session, UserDetails
from cert_connector.domain.entities.certificate import (
    CertificateRequest,
    ChainOrder,
    PEMCollection,
    PickupRequest,
    RenewalRequest,
)
from cert_connector.domain.entities.policy import Policy
from cert_connector.domain.entities.zone import Zone, ZoneConfiguration
from cert_connector.domain.errors import (
    MissingCredentials,
    MissingPickupTarget,
    PrivateKeyUnsupported,
    UnsupportedOperation,
)
from cert_connector.domain.services.response_parsers import (
    HTTP_ACCEPTED,
    HTTP_CREATED,
    HTTP_OK,
    parse_user_details,
    unexpected_status,
)
from cert_connector.domain.value_objects.identifiers import RequestId
from cert_connector.domain.value_objects.resources import Resource
from cert_connector.infrastructure.logging import get_logger
from cert_connector.infrastructure.metrics import MetricsRegistry, get_metrics
from cert_connector.infrastructure.tracing import trace_span
from cert_connector.ports.outbound.transport_port import TransportPort


class CertificateConnector:
    """Client for the certificate issuance service."""

    def __init__(
        self,
        transport: TransportPort,
        *,
        default_zone: Optional[str] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        default_timeout: float = 0.0,
        default_chain_order: ChainOrder = ChainOrder.ROOT_LAST,
        clock: Callable[[], float] = time.monotonic,
        metrics: Optional[MetricsRegistry] = None,
    ):
        """Initialize connector.

        Args:
            transport: Unauthenticated transport to the service API.
            default_zone: Zone tag used when a submission names none.
            poll_interval: Seconds between status polls while waiting.
            default_timeout: Retrieval timeout used when a call gives none.
            default_chain_order: Chain order used when a call gives none.
            clock: Monotonic clock for retrieval timeouts.
            metrics: Metrics registry (global one if omitted).
        """
        self._transport = transport
        self._default_timeout = default_timeout
        self._default_chain_order = default_chain_order
        self._metrics = metrics or get_metrics()
        self._session: Optional[Session] = None
        self._logger = get_logger(__name__, component="connector")

        self.policies = PolicyResolver()
        self.fingerprints = FingerprintResolver()
        self.lifecycle = CertificateRequestLifecycle(
            self.policies,
            default_zone=default_zone,
            poll_interval=poll_interval,
            clock=clock,
            metrics=self._metrics,
        )
        self.renewals = RenewalOrchestrator(self.lifecycle, self.fingerprints, metrics=self._metrics)

    @property
    def session(self) -> Optional[Session]:
        """Session of the last successful ``authenticate``."""
        return self._session

    # -------------------------------------------------------------------------
    # Account
    # -------------------------------------------------------------------------

    def ping(self) -> None:
        """Check that the service answers.

        Raises:
            UnexpectedStatus: If the service does not answer 200.
        """
        with trace_span("connector.ping"):
            response = self._transport.request("GET", Resource.PING.path(), skip_auth=True)
            if response.status_code != HTTP_OK:
                raise unexpected_status("ping", response)

    def register(self, email: str) -> Optional[UserDetails]:
        """Register an API user account.

        Returns:
            Details of the new account, or None if it was already registered.
        """
        with trace_span("connector.register"):
            body = {"username": email, "userAccountType": "API"}
            response = self._transport.request(
                "POST", Resource.USER_ACCOUNTS.path(), body, skip_auth=True
            )
            if response.status_code == HTTP_ACCEPTED:
                self._logger.info("user_already_registered", username=email)
                return None
            details = parse_user_details(response, expected_status=HTTP_CREATED)
            self._logger.info("user_registered", username=email)
            return details

    def authenticate(self, credentials: Optional[Credentials]) -> Session:
        """Resolve the account of an API key and open a session.

        Raises:
            MissingCredentials: No credentials or an empty API key.
            UnexpectedStatus: The service rejected the key.
        """
        if credentials is None or not credentials.api_key:
            raise MissingCredentials()
        with trace_span("connector.authenticate"):
            transport = self._transport.with_api_key(credentials.api_key)
            response = transport.request("GET", Resource.USER_ACCOUNTS.path())
            details = parse_user_details(response)
            session = Session(transport=transport, details=details)
            self._session = session
            self._logger.info(
                "authenticated",
                username=details.user.username if details.user else "",
                company=session.organization,
            )
            return session

    # -------------------------------------------------------------------------
    # Zones
    # -------------------------------------------------------------------------

    def resolve_policy(self, zone_tag: str) -> tuple[Zone, Policy]:
        """Zone descriptor and merged policy of ``zone_tag``."""
        with trace_span("connector.resolve_policy", {"zone.tag": zone_tag}):
            return self.policies.resolve_policy(self._session, zone_tag)

    def read_zone_configuration(self, zone_tag: str) -> ZoneConfiguration:
        """Zone, policy and organization to build requests from."""
        with trace_span("connector.read_zone_configuration", {"zone.tag": zone_tag}):
            return self.policies.read_zone_configuration(self._session, zone_tag)

    # -------------------------------------------------------------------------
    # Issuance
    # -------------------------------------------------------------------------

    def submit(
        self,
        request: CertificateRequest,
        zone_tag: Optional[str] = None,
        *,
        enforce_policy: bool = False,
    ) -> RequestId:
        """Submit a CSR; see ``CertificateRequestLifecycle.submit``."""
        with trace_span("connector.submit", {"zone.tag": zone_tag or ""}):
            return self.lifecycle.submit(
                self._session, request, zone_tag, enforce_policy=enforce_policy
            )

    def poll_and_retrieve(
        self,
        request_id: RequestId,
        timeout: Optional[float] = None,
        chain_order: Optional[ChainOrder] = None,
        *,
        fetch_private_key: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> PEMCollection:
        """Wait for issuance and download; see ``CertificateRequestLifecycle``."""
        timeout = self._default_timeout if timeout is None else timeout
        chain_order = chain_order or self._default_chain_order
        with trace_span("connector.poll_and_retrieve", {"request.id": request_id}):
            return self.lifecycle.poll_and_retrieve(
                self._session,
                request_id,
                timeout,
                chain_order,
                fetch_private_key=fetch_private_key,
                cancel=cancel,
            )

    def retrieve_certificate(
        self,
        pickup: PickupRequest,
        cancel: Optional[threading.Event] = None,
    ) -> PEMCollection:
        """Collect a certificate by pickup id or by fingerprint.

        Raises:
            PrivateKeyUnsupported: The pickup asks for the private key.
            MissingPickupTarget: Neither pickup id nor fingerprint given.
        """
        if pickup.fetch_private_key:
            raise PrivateKeyUnsupported()
        with trace_span("connector.retrieve_certificate"):
            request_id = pickup.request_id
            if not request_id:
                if not pickup.fingerprint:
                    raise MissingPickupTarget()
                request_id = self.fingerprints.resolve_request_id(self._session, pickup.fingerprint)
            return self.lifecycle.poll_and_retrieve(
                self._session,
                request_id,
                pickup.timeout,
                pickup.chain_order,
                cancel=cancel,
            )

    # -------------------------------------------------------------------------
    # Renewal
    # -------------------------------------------------------------------------

    def renew(self, renewal: RenewalRequest) -> RequestId:
        """Renew a certificate; see ``RenewalOrchestrator.renew``."""
        with trace_span("connector.renew"):
            return self.renewals.renew(self._session, renewal)

    def revoke_certificate(self, *args: object, **kwargs: object) -> None:
        """Revocation is not offered by the service."""
        raise UnsupportedOperation("certificate revocation")

    def import_certificate(self, *args: object, **kwargs: object) -> None:
        """Import is not offered by the service."""
        raise UnsupportedOperation("certificate import")
