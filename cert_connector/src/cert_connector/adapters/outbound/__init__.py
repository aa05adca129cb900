"""Outbound adapters - implementations for external dependencies.

Outbound adapters implement the transport to the certificate service.
"""

from cert_connector.adapters.outbound.httpx_transport import HttpxTransport

__all__ = ["HttpxTransport"]
