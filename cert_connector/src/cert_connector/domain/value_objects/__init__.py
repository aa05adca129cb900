"""Value objects for the certificate connector domain."""

from cert_connector.domain.value_objects.identifiers import (
    CertificateId,
    CompanyId,
    Fingerprint,
    ManagedCertificateId,
    PolicyId,
    RequestId,
    UserId,
    ZoneId,
    ZoneTag,
    normalize_fingerprint,
)
from cert_connector.domain.value_objects.resources import Resource, ResourceTemplate

__all__ = [
    "CertificateId",
    "CompanyId",
    "Fingerprint",
    "ManagedCertificateId",
    "PolicyId",
    "RequestId",
    "UserId",
    "ZoneId",
    "ZoneTag",
    "normalize_fingerprint",
    "Resource",
    "ResourceTemplate",
]
