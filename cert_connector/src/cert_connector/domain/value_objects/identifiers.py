"""Identifiers used by the certificate service (type-safe).

Uses Python's NewType for compile-time type safety without runtime overhead.
All identifiers are opaque server-assigned UUID strings, except zone tags
(human-chosen names) and fingerprints (hex digests of issued certificates).
"""

from __future__ import annotations

from typing import NewType

RequestId = NewType("RequestId", str)
ZoneId = NewType("ZoneId", str)
ZoneTag = NewType("ZoneTag", str)
PolicyId = NewType("PolicyId", str)
ManagedCertificateId = NewType("ManagedCertificateId", str)
CertificateId = NewType("CertificateId", str)
CompanyId = NewType("CompanyId", str)
UserId = NewType("UserId", str)
Fingerprint = NewType("Fingerprint", str)

# Separators seen in fingerprints copied from openssl, browsers and Windows.
_FINGERPRINT_SEPARATORS = (":", ".")


def normalize_fingerprint(raw: str) -> Fingerprint:
    """Normalize a hex fingerprint for comparison and search.

    Strips separator characters and upper-cases the digest, so that
    ``ab:cd:ef`` and ``ABCDEF`` refer to the same certificate.

    Args:
        raw: SHA-1 or SHA-256 fingerprint in any common notation.

    Returns:
        Canonical fingerprint.
    """
    value = raw
    for separator in _FINGERPRINT_SEPARATORS:
        value = value.replace(separator, "")
    return Fingerprint(value.upper())
