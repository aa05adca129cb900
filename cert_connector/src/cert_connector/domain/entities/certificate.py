"""Certificate request entities.

Represents the values exchanged while a certificate moves through the
service's request lifecycle:

    SUBMITTED -> {REQUESTED, PENDING}* -> {ISSUED, FAILED}

ISSUED is the only state from which retrieval proceeds; FAILED is terminal.
A renewal starts a new lifecycle threaded to the same managed certificate.

References:
    - RFC 2986 (PKCS #10 certificate requests)
    - RFC 7468 (textual PEM encoding)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes

from cert_connector.domain.errors import MalformedResponse
from cert_connector.domain.value_objects.identifiers import (
    CertificateId,
    ManagedCertificateId,
    RequestId,
    ZoneId,
)

_PEM_CERTIFICATE = re.compile(
    r"-----BEGIN CERTIFICATE-----\s.+?\s-----END CERTIFICATE-----",
    re.DOTALL,
)


class CsrOrigin(Enum):
    """Where the CSR of a request comes from."""
    LOCAL_GENERATED = "local"      # Generated by the caller from a local key
    USER_PROVIDED = "provided"     # Supplied verbatim by the caller
    SERVICE_GENERATED = "service"  # Generated by the service (not supported)


class ChainOrder(Enum):
    """Order of the issuer chain in a retrieval response.

    Values are the literal ``chainOrder`` tokens of the retrieval endpoint.
    """
    ROOT_FIRST = "ROOT_FIRST"
    ROOT_LAST = "EE_FIRST"


class RequestState(Enum):
    """Server-side status of a certificate request."""
    REQUESTED = "REQUESTED"
    PENDING = "PENDING"
    ISSUED = "ISSUED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestState.ISSUED, RequestState.FAILED)


@dataclass(frozen=True)
class CertificateRequest:
    """Caller's request for a new certificate."""
    csr: Optional[bytes] = None
    csr_origin: CsrOrigin = CsrOrigin.USER_PROVIDED


@dataclass(frozen=True)
class CertificateSubmission:
    """Body of ``POST certificaterequests``.

    Carries either a CSR or an instruction to reuse the CSR of an existing
    managed certificate, never both.
    """
    zone_id: ZoneId
    csr: Optional[str] = None
    existing_managed_certificate_id: Optional[ManagedCertificateId] = None
    reuse_csr: bool = False

    def __post_init__(self) -> None:
        if bool(self.csr) == self.reuse_csr:
            raise ValueError("exactly one of csr and reuse_csr must be set")
        if self.reuse_csr and not self.existing_managed_certificate_id:
            raise ValueError("reuse_csr requires an existing managed certificate id")

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the wire."""
        payload: dict[str, Any] = {"zoneId": self.zone_id}
        if self.csr:
            payload["certificateSigningRequest"] = self.csr
        if self.existing_managed_certificate_id:
            payload["existingManagedCertificateId"] = self.existing_managed_certificate_id
            payload["reuseCSR"] = self.reuse_csr
        return payload


@dataclass(frozen=True)
class RenewalRequest:
    """Request to renew a previously issued certificate.

    The target is identified by the id of the request that issued it or,
    failing that, by the fingerprint of the issued certificate.
    """
    request_id: Optional[RequestId] = None
    fingerprint: Optional[str] = None
    certificate_request: Optional[CertificateRequest] = None

    @property
    def new_csr(self) -> Optional[bytes]:
        if self.certificate_request is None or not self.certificate_request.csr:
            return None
        return self.certificate_request.csr


@dataclass(frozen=True)
class PickupRequest:
    """Request to collect an issued certificate."""
    request_id: Optional[RequestId] = None
    fingerprint: Optional[str] = None
    timeout: float = 0.0  # Seconds; 0 means return immediately if pending
    chain_order: ChainOrder = ChainOrder.ROOT_LAST
    fetch_private_key: bool = False


@dataclass(frozen=True)
class RequestAcknowledgment:
    """Server's acceptance of a submission."""
    request_ids: tuple[RequestId, ...]

    @property
    def pickup_id(self) -> RequestId:
        """Canonical id used to poll and retrieve."""
        return self.request_ids[0]


@dataclass(frozen=True)
class RequestStatus:
    """Snapshot of a certificate request's status."""
    request_id: RequestId
    status: RequestState
    zone_id: Optional[ZoneId] = None
    managed_certificate_id: Optional[ManagedCertificateId] = None
    error_information: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ManagedCertificate:
    """Logical certificate identity that persists across renewals."""
    managed_certificate_id: ManagedCertificateId
    latest_request_id: RequestId
    certificate_name: str = ""
    company_id: str = ""


@dataclass(frozen=True)
class CertificateSearchHit:
    """One certificate returned by a search."""
    certificate_id: CertificateId
    request_id: RequestId
    managed_certificate_id: Optional[ManagedCertificateId] = None


@dataclass(frozen=True)
class SearchResult:
    """Certificates matching a search expression."""
    hits: tuple[CertificateSearchHit, ...] = ()

    def request_ids(self) -> list[RequestId]:
        """Distinct owning request ids, in order of first appearance."""
        seen: list[RequestId] = []
        for hit in self.hits:
            if hit.request_id not in seen:
                seen.append(hit.request_id)
        return seen


@dataclass(frozen=True)
class PEMCollection:
    """Issued certificate and its issuer chain.

    ``chain`` is kept in ``chain_order``: root first, or root last (closest
    issuer first). The leaf is never part of ``chain``.
    """
    certificate: str
    chain: tuple[str, ...] = ()
    chain_order: ChainOrder = ChainOrder.ROOT_LAST
    private_key: Optional[str] = None

    @classmethod
    def from_pem_bundle(cls, data: bytes | str, chain_order: ChainOrder) -> PEMCollection:
        """Split a PEM bundle into leaf and chain.

        A ROOT_FIRST bundle ends with the leaf; a ROOT_LAST bundle starts
        with it.

        Raises:
            MalformedResponse: If the bundle has no certificate or a block
                does not decode.
        """
        text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
        blocks = [block + "\n" for block in _PEM_CERTIFICATE.findall(text)]
        if not blocks:
            raise MalformedResponse("certificate bundle", "no PEM certificate found")
        for block in blocks:
            try:
                x509.load_pem_x509_certificate(block.encode("ascii"))
            except ValueError as e:
                raise MalformedResponse("certificate bundle", str(e)) from e

        if chain_order is ChainOrder.ROOT_FIRST:
            return cls(certificate=blocks[-1], chain=tuple(blocks[:-1]), chain_order=chain_order)
        return cls(certificate=blocks[0], chain=tuple(blocks[1:]), chain_order=chain_order)

    def reordered(self, chain_order: ChainOrder) -> PEMCollection:
        """Return the same collection with the chain in ``chain_order``."""
        if chain_order is self.chain_order:
            return self
        return PEMCollection(
            certificate=self.certificate,
            chain=tuple(reversed(self.chain)),
            chain_order=chain_order,
            private_key=self.private_key,
        )

    def as_list(self) -> list[str]:
        """Leaf and chain as one ordered list, as a bundle file would hold them."""
        if self.chain_order is ChainOrder.ROOT_FIRST:
            return [*self.chain, self.certificate]
        return [self.certificate, *self.chain]

    @property
    def leaf_fingerprint(self) -> str:
        """Upper-case SHA-1 fingerprint of the leaf, as searched by the service."""
        cert = x509.load_pem_x509_certificate(self.certificate.encode("ascii"))
        return cert.fingerprint(hashes.SHA1()).hex().upper()
