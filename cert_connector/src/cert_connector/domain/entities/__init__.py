"""Domain entities for the certificate connector."""

from cert_connector.domain.entities.account import (
    Company,
    Credentials,
    Session,
    User,
    UserDetails,
)
from cert_connector.domain.entities.certificate import (
    CertificateRequest,
    CertificateSearchHit,
    CertificateSubmission,
    ChainOrder,
    CsrOrigin,
    ManagedCertificate,
    PEMCollection,
    PickupRequest,
    RenewalRequest,
    RequestAcknowledgment,
    RequestState,
    RequestStatus,
    SearchResult,
)
from cert_connector.domain.entities.policy import (
    AllowedKeyType,
    IdentityPolicy,
    Policy,
    PolicyFragment,
    UsePolicy,
    merge_policy_fragments,
)
from cert_connector.domain.entities.zone import Zone, ZoneConfiguration

__all__ = [
    "Company",
    "Credentials",
    "Session",
    "User",
    "UserDetails",
    "CertificateRequest",
    "CertificateSearchHit",
    "CertificateSubmission",
    "ChainOrder",
    "CsrOrigin",
    "ManagedCertificate",
    "PEMCollection",
    "PickupRequest",
    "RenewalRequest",
    "RequestAcknowledgment",
    "RequestState",
    "RequestStatus",
    "SearchResult",
    "AllowedKeyType",
    "IdentityPolicy",
    "Policy",
    "PolicyFragment",
    "UsePolicy",
    "merge_policy_fragments",
    "Zone",
    "ZoneConfiguration",
]
