"""Outbound ports - interfaces for external dependencies.

Outbound ports define the contract for the certificate service transport
that the connector core depends on.
"""

from cert_connector.ports.outbound.transport_port import TransportPort, TransportResponse

__all__ = ["TransportPort", "TransportResponse"]
