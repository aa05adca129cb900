"""Extract the policy-relevant parts of a PKCS #10 CSR."""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID

from cert_connector.domain.errors import InvalidCSR

# cryptography curve names -> curve names used in use policies
_CURVE_NAMES = {
    "secp256r1": "P256",
    "secp384r1": "P384",
    "secp521r1": "P521",
}


@dataclass(frozen=True)
class CsrDetails:
    """Subject, SANs and key parameters of a CSR."""
    common_names: tuple[str, ...] = ()
    organizations: tuple[str, ...] = ()
    organizational_units: tuple[str, ...] = ()
    provinces: tuple[str, ...] = ()
    localities: tuple[str, ...] = ()
    countries: tuple[str, ...] = ()
    dns_names: tuple[str, ...] = ()
    key_type: Optional[str] = None
    key_length: Optional[int] = None
    key_curve: Optional[str] = None

    @property
    def key_description(self) -> str:
        if self.key_type == "RSA":
            return f"RSA {self.key_length}"
        if self.key_type == "EC":
            return f"EC {self.key_curve}"
        return str(self.key_type)


def inspect_csr(csr_pem: bytes) -> CsrDetails:
    """Parse a PEM CSR.

    Raises:
        InvalidCSR: If the CSR cannot be decoded.
    """
    try:
        csr = x509.load_pem_x509_csr(csr_pem)
    except ValueError as e:
        raise InvalidCSR(str(e)) from e

    def attributes(oid: x509.ObjectIdentifier) -> tuple[str, ...]:
        return tuple(str(attr.value) for attr in csr.subject.get_attributes_for_oid(oid))

    dns_names: tuple[str, ...] = ()
    with suppress(x509.ExtensionNotFound):
        sans = csr.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        dns_names = tuple(sans.get_values_for_type(x509.DNSName))

    key = csr.public_key()
    key_type: Optional[str] = None
    key_length: Optional[int] = None
    key_curve: Optional[str] = None
    if isinstance(key, rsa.RSAPublicKey):
        key_type, key_length = "RSA", key.key_size
    elif isinstance(key, ec.EllipticCurvePublicKey):
        key_type = "EC"
        key_curve = _CURVE_NAMES.get(key.curve.name, key.curve.name)

    return CsrDetails(
        common_names=attributes(NameOID.COMMON_NAME),
        organizations=attributes(NameOID.ORGANIZATION_NAME),
        organizational_units=attributes(NameOID.ORGANIZATIONAL_UNIT_NAME),
        provinces=attributes(NameOID.STATE_OR_PROVINCE_NAME),
        localities=attributes(NameOID.LOCALITY_NAME),
        countries=attributes(NameOID.COUNTRY_NAME),
        dns_names=dns_names,
        key_type=key_type,
        key_length=key_length,
        key_curve=key_curve,
    )


def csr_pem_text(csr_pem: bytes) -> str:
    """Return a PEM CSR as text for a request body.

    Raises:
        InvalidCSR: If the bytes are not a PEM encoded CSR.
    """
    try:
        x509.load_pem_x509_csr(csr_pem)
        return csr_pem.decode("ascii")
    except ValueError as e:
        raise InvalidCSR(str(e)) from e
