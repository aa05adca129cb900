"""Outbound port for the certificate service transport.

This protocol defines the interface the connector core uses to reach the
REST API. Retries, TLS and connection pooling are the adapter's concern.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class TransportResponse:
    """Raw HTTP response."""
    status_code: int
    status_text: str = ""
    body: bytes = b""


@runtime_checkable
class TransportPort(Protocol):
    """Protocol for authenticated requests to the certificate service.

    This is the contract that outbound adapters implement.
    """

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        skip_auth: bool = False,
    ) -> TransportResponse:
        """Send a request.

        Args:
            method: HTTP method.
            path: Resource path relative to the API base URL, placeholders
                already substituted.
            body: JSON-serializable body, or None.
            skip_auth: Do not attach the API key header.

        Returns:
            Status code, status text and raw body of the response.

        Raises:
            TransportError: If no response was received.
        """
        ...

    def with_api_key(self, api_key: str) -> TransportPort:
        """Return a transport that authenticates with ``api_key``.

        The receiver is left unchanged.
        """
        ...
