"""Certificate connector domain layer."""

from cert_connector.domain.entities import (
    CertificateRequest,
    ChainOrder,
    CsrOrigin,
    ManagedCertificate,
    PEMCollection,
    PickupRequest,
    Policy,
    RenewalRequest,
    RequestState,
    RequestStatus,
    SearchResult,
    Zone,
)
from cert_connector.domain.errors import (
    AmbiguousFingerprint,
    Cancelled,
    CertificatePending,
    ConfigurationError,
    ConnectorError,
    FingerprintNotFound,
    IssuanceFailed,
    LookupFailure,
    PolicyFetchFailed,
    RetrievalFailed,
    RetrieveTimeout,
    StaleRenewalTarget,
    TerminalError,
    TransientError,
    TransportError,
    ZoneNotFound,
)
from cert_connector.domain.value_objects.identifiers import normalize_fingerprint

__all__ = [
    # Entities
    "CertificateRequest",
    "ChainOrder",
    "CsrOrigin",
    "ManagedCertificate",
    "PEMCollection",
    "PickupRequest",
    "Policy",
    "RenewalRequest",
    "RequestState",
    "RequestStatus",
    "SearchResult",
    "Zone",
    # Errors
    "AmbiguousFingerprint",
    "Cancelled",
    "CertificatePending",
    "ConfigurationError",
    "ConnectorError",
    "FingerprintNotFound",
    "IssuanceFailed",
    "LookupFailure",
    "PolicyFetchFailed",
    "RetrievalFailed",
    "RetrieveTimeout",
    "StaleRenewalTarget",
    "TerminalError",
    "TransientError",
    "TransportError",
    "ZoneNotFound",
    # Value objects
    "normalize_fingerprint",
]
