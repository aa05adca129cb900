"""Application layer for the certificate connector."""

from cert_connector.application.connector import CertificateConnector
from cert_connector.application.fingerprint_resolver import FingerprintResolver
from cert_connector.application.policy_resolver import PolicyResolver
from cert_connector.application.renewal import RenewalOrchestrator
from cert_connector.application.request_lifecycle import CertificateRequestLifecycle

__all__ = [
    "CertificateConnector",
    "CertificateRequestLifecycle",
    "FingerprintResolver",
    "PolicyResolver",
    "RenewalOrchestrator",
]
