"""In-memory stand-ins for the certificate service used across tests."""

from __future__ import annotations

import datetime
import json
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID

from cert_connector.ports.outbound.transport_port import TransportResponse


# =============================================================================
# Transport and clock
# =============================================================================


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class RecordedCall:
    method: str
    path: str
    body: Any
    skip_auth: bool
    api_key: Optional[str]


@dataclass
class _Script:
    responses: dict[tuple[str, str], deque] = field(default_factory=dict)
    calls: list[RecordedCall] = field(default_factory=list)
    listeners: list[Callable[[RecordedCall], None]] = field(default_factory=list)
    seconds_per_request: float = 0.0
    max_calls: int = 500


class ScriptedTransport:
    """Transport answering from a script of canned responses.

    Responses queued for a (method, path) are served in order; the last one
    repeats. A queued exception is raised instead of returned. Every request
    advances ``clock`` by ``seconds_per_request``.

    Copies made by ``with_api_key`` share the script, so timing set on either
    applies to both. More than ``max_calls`` requests fail the test.
    """

    def __init__(
        self,
        clock: Optional[FakeClock] = None,
        seconds_per_request: float = 0.0,
        api_key: Optional[str] = None,
        _script: Optional[_Script] = None,
    ):
        self.clock = clock
        self.api_key = api_key
        self._script = _script or _Script(seconds_per_request=seconds_per_request)

    @property
    def calls(self) -> list[RecordedCall]:
        return self._script.calls

    @property
    def seconds_per_request(self) -> float:
        return self._script.seconds_per_request

    @seconds_per_request.setter
    def seconds_per_request(self, value: float) -> None:
        self._script.seconds_per_request = value

    def add(self, method: str, path: str, *responses: TransportResponse | Exception) -> None:
        self._script.responses.setdefault((method, path), deque()).extend(responses)

    def on_request(self, listener: Callable[[RecordedCall], None]) -> None:
        """Call ``listener`` after each request is recorded."""
        self._script.listeners.append(listener)

    def with_api_key(self, api_key: str) -> ScriptedTransport:
        return ScriptedTransport(self.clock, api_key=api_key, _script=self._script)

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        skip_auth: bool = False,
    ) -> TransportResponse:
        if len(self._script.calls) >= self._script.max_calls:
            raise AssertionError(f"more than {self._script.max_calls} requests, last {method} {path}")
        call = RecordedCall(method, path, body, skip_auth, self.api_key)
        self._script.calls.append(call)
        for listener in self._script.listeners:
            listener(call)
        if self.clock is not None:
            self.clock.advance(self._script.seconds_per_request)
        queue = self._script.responses.get((method, path))
        if not queue:
            return TransportResponse(404, "Not Found", b'{"errors": [{"code": 404, "message": "no script"}]}')
        response = queue.popleft() if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response

    def calls_to(self, method: str, path: Optional[str] = None) -> list[RecordedCall]:
        return [
            c for c in self.calls
            if c.method == method and (path is None or c.path == path)
        ]


def json_response(status_code: int, payload: Any, status_text: str = "") -> TransportResponse:
    return TransportResponse(status_code, status_text, json.dumps(payload).encode())


# =============================================================================
# Wire payloads
# =============================================================================


def user_details_payload(company_name: str = "Example Corp") -> dict:
    return {
        "user": {
            "id": "u-1",
            "username": "automation@example.com",
            "companyId": "c-1",
            "emailAddress": "automation@example.com",
            "userType": "EXTERNAL",
            "userAccountType": "API",
            "userStatus": "ACTIVE",
        },
        "company": {"id": "c-1", "name": company_name, "companyType": "TPP_CUSTOMER", "active": True},
        "apiKey": {"key": "not-parsed"},
    }


def zone_payload(zone_id: str = "zone-1", tag: str = "Z1",
                 identity_policy_id: str = "pol-id", use_policy_id: str = "pol-use") -> dict:
    return {
        "id": zone_id,
        "companyId": "c-1",
        "tag": tag,
        "zoneType": "OTHER",
        "defaultCertificateIdentityPolicyId": identity_policy_id,
        "defaultCertificateUsePolicyId": use_policy_id,
    }


def identity_policy_payload(policy_id: str = "pol-id", cn=(r".*\.example\.com",), san=(r".*\.example\.com",),
                            o=("Example Corp",), c=("US",)) -> dict:
    return {
        "id": policy_id,
        "certificatePolicyType": "CERTIFICATE_IDENTITY",
        "name": "identity",
        "subjectCNRegexes": list(cn),
        "subjectORegexes": list(o),
        "subjectOURegexes": None,
        "subjectSTRegexes": [],
        "subjectLRegexes": [],
        "subjectCValues": list(c),
        "sanRegexes": list(san),
    }


def use_policy_payload(policy_id: str = "pol-use", key_reuse: bool = False) -> dict:
    return {
        "id": policy_id,
        "certificatePolicyType": "CERTIFICATE_USE",
        "name": "use",
        "keyTypes": [
            {"keyType": "RSA", "keyLengths": [2048, 4096]},
            {"keyType": "EC", "keyCurves": ["P256", "P384"]},
        ],
        "keyReuse": key_reuse,
    }


def status_payload(request_id: str, status: str, zone_id: Optional[str] = "zone-1",
                   managed_certificate_id: Optional[str] = "mc-1") -> dict:
    return {
        "id": request_id,
        "status": status,
        "zoneId": zone_id,
        "managedCertificateId": managed_certificate_id,
        "subjectDN": "cn=web.example.com",
    }


def acknowledgment_payload(*request_ids: str) -> dict:
    return {"certificateRequests": [{"id": rid, "status": "REQUESTED"} for rid in request_ids]}


def managed_certificate_payload(managed_id: str, latest_request_id: str) -> dict:
    return {
        "id": managed_id,
        "companyId": "c-1",
        "latestCertificateRequestId": latest_request_id,
        "certificateName": "cn=web.example.com",
    }


def search_payload(*hits: tuple[str, str]) -> dict:
    return {
        "count": len(hits),
        "certificates": [
            {"id": cert_id, "certificateRequestId": request_id, "managedCertificateId": "mc-1"}
            for cert_id, request_id in hits
        ],
    }


# =============================================================================
# Certificates and CSRs
# =============================================================================


def _name(common_name: str) -> x509.Name:
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])


def _issue(subject_cn: str, subject_key, issuer_cn: str, issuer_key, ca: bool) -> str:
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(_name(subject_cn))
        .issuer_name(_name(issuer_cn))
        .public_key(subject_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(minutes=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .sign(issuer_key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")


@dataclass(frozen=True)
class IssuedChain:
    leaf: str
    intermediate: str
    root: str

    def bundle(self, root_first: bool) -> bytes:
        ordered = [self.root, self.intermediate, self.leaf] if root_first else [self.leaf, self.intermediate, self.root]
        return "".join(ordered).encode("ascii")


def make_chain(leaf_cn: str = "web.example.com") -> IssuedChain:
    root_key = ec.generate_private_key(ec.SECP256R1())
    intermediate_key = ec.generate_private_key(ec.SECP256R1())
    leaf_key = ec.generate_private_key(ec.SECP256R1())
    return IssuedChain(
        leaf=_issue(leaf_cn, leaf_key, "Example Issuing CA", intermediate_key, ca=False),
        intermediate=_issue("Example Issuing CA", intermediate_key, "Example Root CA", root_key, ca=True),
        root=_issue("Example Root CA", root_key, "Example Root CA", root_key, ca=True),
    )


def make_csr(common_name: str = "web.example.com", sans: tuple[str, ...] = ("web.example.com",),
             organization: str = "Example Corp", country: str = "US", rsa_bits: Optional[int] = None) -> bytes:
    key = rsa.generate_private_key(public_exponent=65537, key_size=rsa_bits) if rsa_bits else ec.generate_private_key(ec.SECP256R1())
    builder = x509.CertificateSigningRequestBuilder().subject_name(
        x509.Name([
            x509.NameAttribute(NameOID.COMMON_NAME, common_name),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization),
            x509.NameAttribute(NameOID.COUNTRY_NAME, country),
        ])
    )
    if sans:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(san) for san in sans]),
            critical=False,
        )
    return builder.sign(key, hashes.SHA256()).public_bytes(serialization.Encoding.PEM)


def make_der_csr() -> bytes:
    """A valid CSR in DER form, which the service does not accept."""
    return x509.load_pem_x509_csr(make_csr()).public_bytes(serialization.Encoding.DER)
