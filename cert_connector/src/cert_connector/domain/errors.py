"""Connector error hierarchy.

Every failure surfaced to callers is a ``ConnectorError`` subclass carrying
the identifiers and status codes needed to act on it. The four families
mirror how a caller should react:

- ``ConfigurationError``: caller mistake, fix the input, never retry.
- ``LookupFailure``: deterministic not-found or ambiguity, never retry.
- ``TransientError``: the certificate is not ready yet, poll again later.
- ``TerminalError``: the server refused or answered garbage, never retry.

``TransportError`` is raised by transport adapters and passes through the
core untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class ResponseError:
    """Single entry of the server's ``{"errors": [...]}`` body."""
    code: int
    message: str

    def __str__(self) -> str:
        return f"Error Code: {self.code} Error: {self.message}"


class ConnectorError(Exception):
    """Base class for all connector failures."""
    pass


# =============================================================================
# Configuration / usage errors
# =============================================================================


class ConfigurationError(ConnectorError):
    """The caller supplied an unusable request."""
    pass


class MissingCredentials(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("failed to authenticate: missing credentials")


class NotAuthenticated(ConfigurationError):
    def __init__(self, action: str = "request a certificate") -> None:
        self.action = action
        super().__init__(f"must be authenticated to {action}")


class MissingZone(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("no zone given and no default zone configured")


class MissingCSR(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("certificate request carries no CSR")


class InvalidCSR(ConfigurationError):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"unable to parse CSR: {reason}")


class UnsupportedCSROrigin(ConfigurationError):
    def __init__(self, origin: str) -> None:
        self.origin = origin
        super().__init__(f"CSR origin {origin!r} is not supported by the service")


class PrivateKeyUnsupported(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("failed to retrieve private key: not supported by the service")


class MissingRenewalTarget(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("failed to create renewal request: request id or fingerprint required")


class MissingPickupTarget(ConfigurationError):
    def __init__(self) -> None:
        super().__init__("failed to retrieve certificate: pickup id or fingerprint required")


class UnsupportedOperation(ConfigurationError):
    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} is not supported by the service")


# =============================================================================
# Not-found / ambiguity
# =============================================================================


class LookupFailure(ConnectorError):
    """A deterministic lookup found nothing, or too much."""
    pass


class ZoneNotFound(LookupFailure):
    def __init__(
        self,
        zone_tag: str,
        status_code: int,
        errors: Sequence[ResponseError] = (),
    ) -> None:
        self.zone_tag = zone_tag
        self.status_code = status_code
        self.errors = tuple(errors)
        super().__init__(f"zone {zone_tag!r} not found (status {status_code})")


class FingerprintNotFound(LookupFailure):
    def __init__(self, fingerprint: str) -> None:
        self.fingerprint = fingerprint
        super().__init__(f"no certificate found using fingerprint {fingerprint}")


class AmbiguousFingerprint(LookupFailure):
    def __init__(self, fingerprint: str, candidate_ids: Sequence[str]) -> None:
        self.fingerprint = fingerprint
        self.candidate_ids = tuple(candidate_ids)
        super().__init__(
            f"more than one certificate request id found with fingerprint {fingerprint}: "
            f"{list(self.candidate_ids)}"
        )


# =============================================================================
# Transient / state
# =============================================================================


class TransientError(ConnectorError):
    """The operation may succeed if retried later."""
    pass


class CertificatePending(TransientError):
    def __init__(self, request_id: str, status: str = "") -> None:
        self.request_id = request_id
        self.status = status
        detail = f" (status {status})" if status else ""
        super().__init__(f"issuance of certificate request {request_id} is pending{detail}")


class RetrieveTimeout(TransientError):
    def __init__(self, request_id: str, timeout: float) -> None:
        self.request_id = request_id
        self.timeout = timeout
        super().__init__(
            f"operation timed out after {timeout:g}s waiting for certificate request {request_id}"
        )


class Cancelled(TransientError):
    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__(f"wait for certificate request {request_id} was cancelled")


# =============================================================================
# Terminal failures
# =============================================================================


class TerminalError(ConnectorError):
    """The server rejected the operation; retrying will not help."""
    pass


class UnexpectedStatus(TerminalError):
    def __init__(
        self,
        operation: str,
        status_code: int,
        status_text: str = "",
        errors: Sequence[ResponseError] = (),
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        self.status_text = status_text
        self.errors = tuple(errors)
        message = f"unexpected status code on {operation}. Status: {status_code} {status_text}".rstrip()
        for error in self.errors:
            message += f"\n{error}"
        super().__init__(message)


class MalformedResponse(TerminalError):
    def __init__(self, what: str, reason: str) -> None:
        self.what = what
        self.reason = reason
        super().__init__(f"failed to parse {what}: {reason}")


class IssuanceFailed(TerminalError):
    def __init__(self, request_id: str, status: object) -> None:
        self.request_id = request_id
        self.status = status
        super().__init__(f"failed to retrieve certificate {request_id}. Status: {status}")


class RetrievalFailed(TerminalError):
    def __init__(self, request_id: str, status_code: int, status_text: str) -> None:
        self.request_id = request_id
        self.status_code = status_code
        self.status_text = status_text
        super().__init__(
            f"failed to retrieve certificate {request_id}. "
            f"StatusCode: {status_code} -- Status: {status_text}"
        )


class PolicyFetchFailed(TerminalError):
    def __init__(self, policy_id: str, reason: str) -> None:
        self.policy_id = policy_id
        self.reason = reason
        super().__init__(f"failed to fetch certificate policy {policy_id!r}: {reason}")


class PolicyViolation(TerminalError):
    def __init__(self, zone_tag: str, violations: Sequence[str]) -> None:
        self.zone_tag = zone_tag
        self.violations = tuple(violations)
        super().__init__(
            f"request does not match policy of zone {zone_tag!r}: " + "; ".join(self.violations)
        )


class RenewalLookupFailed(TerminalError):
    def __init__(self, request_id: str, missing: str, status: str) -> None:
        self.request_id = request_id
        self.missing = missing
        self.status = status
        super().__init__(
            f"failed to submit renewal request for certificate: {missing} is empty, "
            f"certificate status is {status}"
        )


class StaleRenewalTarget(TerminalError):
    def __init__(
        self,
        request_id: str,
        managed_certificate_id: str,
        latest_request_id: str,
        fingerprint: str | None = None,
    ) -> None:
        self.request_id = request_id
        self.managed_certificate_id = managed_certificate_id
        self.latest_request_id = latest_request_id
        self.fingerprint = fingerprint
        with_fingerprint = f"with fingerprint {fingerprint} " if fingerprint else ""
        super().__init__(
            f"certificate under request id {request_id} {with_fingerprint}is not the latest "
            f"under managed certificate {managed_certificate_id}. The latest request is "
            f"{latest_request_id}. This may happen when a revoked certificate is renewed."
        )


# =============================================================================
# Transport
# =============================================================================


class TransportError(ConnectorError):
    """The request never produced an HTTP response."""

    def __init__(self, method: str, path: str, reason: str) -> None:
        self.method = method
        self.path = path
        self.reason = reason
        super().__init__(f"{method} {path} failed: {reason}")
