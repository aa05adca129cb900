"""Renewal of previously issued certificates.

Renewal walks request -> managed certificate -> latest request id to make
sure the target is still the current generation of its managed certificate,
then submits a new request threaded to the same managed certificate:

    1. resolve the prior request id (explicit, or by fingerprint)
    2. look up its status for zone id and managed certificate id
    3. compare the managed certificate's latest request id
    4. submit the renewal

Each step aborts the renewal on failure; nothing is submitted unless all
lookups agree.
"""

from __future__ import annotations

from typing import Optional

from cert_connector.application.fingerprint_resolver import FingerprintResolver
from cert_connector.application.request_lifecycle import CertificateRequestLifecycle
from cert_connector.domain.entities.account import Session, require_session
from cert_connector.domain.entities.certificate import (
    CertificateSubmission,
    ManagedCertificate,
    RenewalRequest,
)
from cert_connector.domain.errors import (
    ConnectorError,
    MissingRenewalTarget,
    RenewalLookupFailed,
    StaleRenewalTarget,
)
from cert_connector.domain.services.csr_inspector import csr_pem_text
from cert_connector.domain.services.response_parsers import (
    parse_managed_certificate,
    parse_request_acknowledgment,
)
from cert_connector.domain.value_objects.identifiers import ManagedCertificateId, RequestId
from cert_connector.domain.value_objects.resources import Resource
from cert_connector.infrastructure.logging import get_logger
from cert_connector.infrastructure.metrics import MetricsRegistry, error_outcome, get_metrics


class RenewalOrchestrator:
    """Renew certificates through their managed certificate identity."""

    def __init__(
        self,
        lifecycle: CertificateRequestLifecycle,
        fingerprints: FingerprintResolver,
        metrics: Optional[MetricsRegistry] = None,
    ):
        self._lifecycle = lifecycle
        self._fingerprints = fingerprints
        self._metrics = metrics or get_metrics()
        self._logger = get_logger(__name__, component="renewal")

    def get_managed_certificate(
        self,
        session: Optional[Session],
        managed_certificate_id: ManagedCertificateId,
    ) -> ManagedCertificate:
        """Fetch a managed certificate record."""
        session = require_session(session, "read a managed certificate")
        response = session.transport.request(
            "GET", Resource.MANAGED_CERTIFICATE_BY_ID.path(managed_certificate_id)
        )
        return parse_managed_certificate(response)

    def renew(self, session: Optional[Session], renewal: RenewalRequest) -> RequestId:
        """Submit a renewal.

        Args:
            session: Authenticated session.
            renewal: Target (request id or fingerprint) and optional new CSR.

        Returns:
            Id of the renewal request.

        Raises:
            MissingRenewalTarget: Neither request id nor fingerprint given.
            InvalidCSR: The new CSR is not PEM encoded.
            FingerprintNotFound / AmbiguousFingerprint: Fingerprint lookup failed.
            RenewalLookupFailed: The prior request has no zone or managed certificate.
            StaleRenewalTarget: The prior request is no longer the latest one.
        """
        session = require_session(session, "renew a certificate")
        new_csr = csr_pem_text(renewal.new_csr) if renewal.new_csr else None
        try:
            request_id = self._renew(session, renewal, new_csr)
        except ConnectorError as e:
            self._metrics.certificate_renewals_total.labels(outcome=error_outcome(e)).inc()
            raise
        self._metrics.certificate_renewals_total.labels(outcome="submitted").inc()
        return request_id

    def _renew(self, session: Session, renewal: RenewalRequest, new_csr: Optional[str]) -> RequestId:
        # 1. prior request id
        searched_fingerprint = None
        if renewal.request_id:
            prior_id = renewal.request_id
        elif renewal.fingerprint:
            searched_fingerprint = renewal.fingerprint
            prior_id = self._fingerprints.resolve_request_id(session, renewal.fingerprint)
        else:
            raise MissingRenewalTarget()

        # 2. zone and managed certificate of the prior request
        prior = self._lifecycle.get_status(session, prior_id)
        if not prior.managed_certificate_id:
            raise RenewalLookupFailed(prior_id, "managed certificate id", prior.status.value)
        if not prior.zone_id:
            raise RenewalLookupFailed(prior_id, "zone id", prior.status.value)

        # 3. prior request must still be the latest generation
        managed = self.get_managed_certificate(session, prior.managed_certificate_id)
        if managed.latest_request_id != prior_id:
            self._logger.warning(
                "renewal_target_stale",
                request_id=prior_id,
                managed_certificate_id=managed.managed_certificate_id,
                latest_request_id=managed.latest_request_id,
            )
            raise StaleRenewalTarget(
                prior_id,
                managed.managed_certificate_id,
                managed.latest_request_id,
                fingerprint=searched_fingerprint,
            )

        # 4. submit
        submission = CertificateSubmission(
            zone_id=prior.zone_id,
            csr=new_csr,
            existing_managed_certificate_id=prior.managed_certificate_id,
            reuse_csr=new_csr is None,
        )
        response = session.transport.request(
            "POST", Resource.CERTIFICATE_REQUESTS.path(), submission.to_payload()
        )
        acknowledgment = parse_request_acknowledgment(response)

        self._logger.info(
            "certificate_renewal_submitted",
            prior_request_id=prior_id,
            managed_certificate_id=prior.managed_certificate_id,
            request_id=acknowledgment.pickup_id,
            reuse_csr=submission.reuse_csr,
        )
        return acknowledgment.pickup_id
