"""Domain services - pure logic of the certificate connector."""

from cert_connector.domain.services.csr_inspector import CsrDetails, inspect_csr
from cert_connector.domain.services.retrieval_poller import PollDecision, RetrievalPoller

__all__ = [
    "CsrDetails",
    "inspect_csr",
    "PollDecision",
    "RetrievalPoller",
]
