"""Certificate request lifecycle: submit, poll, retrieve.

Submission posts a caller-supplied CSR to a zone. Retrieval waits for the
request to be issued (bounded by the caller's timeout and interruptible by
a cancellation event) and then downloads the chain-ordered PEM bundle.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from cert_connector.application.policy_resolver import PolicyResolver
from cert_connector.domain.entities.account import Session, require_session
from cert_connector.domain.entities.certificate import (
    CertificateRequest,
    CertificateSubmission,
    ChainOrder,
    CsrOrigin,
    PEMCollection,
    RequestStatus,
)
from cert_connector.domain.errors import (
    Cancelled,
    CertificatePending,
    ConnectorError,
    MissingCSR,
    MissingZone,
    PolicyViolation,
    PrivateKeyUnsupported,
    RetrievalFailed,
    UnsupportedCSROrigin,
)
from cert_connector.domain.services.csr_inspector import csr_pem_text, inspect_csr
from cert_connector.domain.services.response_parsers import (
    HTTP_CONFLICT,
    HTTP_OK,
    parse_request_acknowledgment,
    parse_request_status,
)
from cert_connector.domain.services.retrieval_poller import PollDecision, RetrievalPoller
from cert_connector.domain.value_objects.identifiers import RequestId
from cert_connector.domain.value_objects.resources import Resource
from cert_connector.infrastructure.logging import get_logger
from cert_connector.infrastructure.metrics import MetricsRegistry, error_outcome, get_metrics

DEFAULT_POLL_INTERVAL_SECONDS = 2.0


class CertificateRequestLifecycle:
    """Submit certificate requests and collect issued certificates."""

    def __init__(
        self,
        policy_resolver: PolicyResolver,
        default_zone: Optional[str] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        metrics: Optional[MetricsRegistry] = None,
    ):
        """Initialize lifecycle.

        Args:
            policy_resolver: Resolves zones (and policies when enforcing).
            default_zone: Zone tag used when a submission names none.
            poll_interval: Seconds between status polls.
            clock: Monotonic clock used for the retrieval timeout.
            metrics: Metrics registry (global one if omitted).
        """
        self._policies = policy_resolver
        self._default_zone = default_zone
        self._poll_interval = poll_interval
        self._clock = clock
        self._metrics = metrics or get_metrics()
        self._logger = get_logger(__name__, component="request_lifecycle")

    def submit(
        self,
        session: Optional[Session],
        request: CertificateRequest,
        zone_tag: Optional[str] = None,
        *,
        enforce_policy: bool = False,
    ) -> RequestId:
        """Submit a CSR for signing.

        Args:
            session: Authenticated session.
            request: Request carrying the CSR.
            zone_tag: Zone to issue from (default zone if omitted).
            enforce_policy: Check the CSR against the zone policy first.

        Returns:
            Pickup id of the new request.

        Raises:
            MissingZone: No zone given and no default zone.
            UnsupportedCSROrigin: The request wants a service-generated CSR.
            MissingCSR: The request has no CSR.
            NotAuthenticated: No authenticated session.
            InvalidCSR: The CSR is not PEM encoded.
            PolicyViolation: ``enforce_policy`` and the CSR breaks the policy.
        """
        zone_tag = zone_tag or self._default_zone
        if not zone_tag:
            raise MissingZone()
        if request.csr_origin is CsrOrigin.SERVICE_GENERATED:
            raise UnsupportedCSROrigin(request.csr_origin.value)
        if not request.csr:
            raise MissingCSR()
        session = require_session(session, "request a certificate")
        csr = csr_pem_text(request.csr)

        try:
            if enforce_policy:
                zone, policy = self._policies.resolve_policy(session, zone_tag)
                violations = policy.check(inspect_csr(request.csr))
                if violations:
                    raise PolicyViolation(zone_tag, violations)
            else:
                zone = self._policies.resolve_zone(session, zone_tag)

            submission = CertificateSubmission(
                zone_id=zone.zone_id,
                csr=csr,
            )
            response = session.transport.request(
                "POST", Resource.CERTIFICATE_REQUESTS.path(), submission.to_payload()
            )
            acknowledgment = parse_request_acknowledgment(response)
        except ConnectorError as e:
            self._metrics.certificate_requests_total.labels(outcome=error_outcome(e)).inc()
            raise

        self._metrics.certificate_requests_total.labels(outcome="submitted").inc()
        self._logger.info(
            "certificate_request_submitted",
            zone_tag=zone_tag,
            zone_id=zone.zone_id,
            request_id=acknowledgment.pickup_id,
        )
        return acknowledgment.pickup_id

    def get_status(self, session: Optional[Session], request_id: RequestId) -> RequestStatus:
        """Fetch the current status of a request."""
        session = require_session(session, "read a certificate request")
        response = session.transport.request("GET", Resource.CERTIFICATE_STATUS.path(request_id))
        return parse_request_status(response)

    def poll_and_retrieve(
        self,
        session: Optional[Session],
        request_id: RequestId,
        timeout: float = 0.0,
        chain_order: ChainOrder = ChainOrder.ROOT_LAST,
        *,
        fetch_private_key: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> PEMCollection:
        """Wait for a request to be issued and download the certificate.

        Args:
            session: Authenticated session.
            request_id: Pickup id returned by ``submit``.
            timeout: Seconds to wait for issuance; 0 returns at once if pending.
            chain_order: Order of the issuer chain in the result.
            fetch_private_key: Must be False; the service never holds keys.
            cancel: Event that aborts the wait when set.

        Raises:
            PrivateKeyUnsupported: ``fetch_private_key`` was requested.
            Cancelled: ``cancel`` was set while waiting.
            IssuanceFailed: The request was marked FAILED.
            CertificatePending: Not issued and no timeout, or chain not ready.
            RetrieveTimeout: Not issued within ``timeout``.
            RetrievalFailed: Download answered with an unexpected status.
        """
        if fetch_private_key:
            raise PrivateKeyUnsupported()
        session = require_session(session, "retrieve a certificate")
        cancel = cancel or threading.Event()

        poller = RetrievalPoller(request_id, timeout, clock=self._clock)
        try:
            with self._metrics.issuance_wait_seconds.time():
                while True:
                    if cancel.is_set():
                        raise Cancelled(request_id)
                    status = self.get_status(session, request_id)
                    self._metrics.issuance_poll_ticks_total.inc()
                    if poller.observe(status) is PollDecision.RETRIEVE:
                        break
                    if cancel.wait(self._poll_interval):
                        raise Cancelled(request_id)
            collection = self.retrieve(session, request_id, chain_order)
        except ConnectorError as e:
            self._metrics.certificate_retrievals_total.labels(outcome=error_outcome(e)).inc()
            self._logger.info(
                "certificate_retrieval_stopped",
                request_id=request_id,
                ticks=poller.ticks,
                reason=type(e).__name__,
            )
            raise

        self._metrics.certificate_retrievals_total.labels(outcome="issued").inc()
        self._logger.info(
            "certificate_retrieved",
            request_id=request_id,
            ticks=poller.ticks,
            chain_length=len(collection.chain),
        )
        return collection

    def retrieve(
        self,
        session: Optional[Session],
        request_id: RequestId,
        chain_order: ChainOrder = ChainOrder.ROOT_LAST,
    ) -> PEMCollection:
        """Download an issued certificate once.

        Raises:
            CertificatePending: 409, the chain has not been attached yet.
            RetrievalFailed: Any other non-200 status.
        """
        session = require_session(session, "retrieve a certificate")
        path = Resource.CERTIFICATE_RETRIEVE.path(request_id, chain_order.value)
        response = session.transport.request("GET", path)
        if response.status_code == HTTP_OK:
            return PEMCollection.from_pem_bundle(response.body, chain_order)
        if response.status_code == HTTP_CONFLICT:
            raise CertificatePending(request_id)
        raise RetrievalFailed(request_id, response.status_code, response.status_text)
