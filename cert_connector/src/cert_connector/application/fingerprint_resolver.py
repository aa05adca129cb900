"""Find the certificate request that issued a certificate, by fingerprint."""

from __future__ import annotations

from typing import Any, Optional

from cert_connector.domain.entities.account import Session, require_session
from cert_connector.domain.entities.certificate import SearchResult
from cert_connector.domain.errors import AmbiguousFingerprint, FingerprintNotFound
from cert_connector.domain.services.response_parsers import parse_search_result
from cert_connector.domain.value_objects.identifiers import (
    Fingerprint,
    RequestId,
    normalize_fingerprint,
)
from cert_connector.domain.value_objects.resources import Resource
from cert_connector.infrastructure.logging import get_logger


def fingerprint_search_expression(fingerprint: Fingerprint) -> dict[str, Any]:
    """Search body matching certificates by fingerprint."""
    return {
        "expression": {
            "operands": [
                {"field": "fingerprint", "operator": "MATCH", "value": fingerprint},
            ],
        },
    }


class FingerprintResolver:
    """Map certificate fingerprints to request ids."""

    def __init__(self) -> None:
        self._logger = get_logger(__name__, component="fingerprint_resolver")

    def search(self, session: Optional[Session], fingerprint: str) -> SearchResult:
        """Search certificates by (normalized) fingerprint."""
        session = require_session(session, "search certificates")
        body = fingerprint_search_expression(normalize_fingerprint(fingerprint))
        response = session.transport.request("POST", Resource.CERTIFICATE_SEARCH.path(), body)
        return parse_search_result(response)

    def resolve_request_id(self, session: Optional[Session], fingerprint: str) -> RequestId:
        """Return the id of the only request that issued ``fingerprint``.

        Raises:
            FingerprintNotFound: No certificate has this fingerprint.
            AmbiguousFingerprint: Certificates with this fingerprint belong
                to more than one request.
        """
        result = self.search(session, fingerprint)
        if not result.hits:
            raise FingerprintNotFound(fingerprint)

        request_ids = result.request_ids()
        if len(request_ids) > 1:
            self._logger.warning(
                "fingerprint_ambiguous",
                fingerprint=fingerprint,
                candidate_ids=request_ids,
            )
            raise AmbiguousFingerprint(fingerprint, request_ids)

        self._logger.debug("fingerprint_resolved", fingerprint=fingerprint, request_id=request_ids[0])
        return request_ids[0]
