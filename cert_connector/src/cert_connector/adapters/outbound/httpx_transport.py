"""httpx transport adapter for the certificate service REST API.

Implements ``TransportPort`` on a synchronous ``httpx.Client``. The API
key travels in the ``tppl-api-key`` header; bodies are JSON.

Usage:
    transport = HttpxTransport("https://api.venafi.cloud/v1/")
    authenticated = transport.with_api_key(api_key)
    response = authenticated.request("GET", "useraccounts")
"""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx

from cert_connector.domain.errors import TransportError
from cert_connector.infrastructure.logging import get_logger
from cert_connector.infrastructure.metrics import MetricsRegistry, get_metrics
from cert_connector.ports.outbound.transport_port import TransportResponse

API_KEY_HEADER = "tppl-api-key"
USER_AGENT = "cert-connector/0.1.0"


class HttpxTransport:
    """Certificate service transport over httpx."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        verify: bool = True,
        client: Optional[httpx.Client] = None,
        metrics: Optional[MetricsRegistry] = None,
    ):
        """Initialize transport.

        Args:
            base_url: API root; resource paths are resolved against it.
            api_key: Key sent with every request unless ``skip_auth``.
            timeout: Per-request timeout in seconds.
            verify: Verify the server's TLS certificate.
            client: Pre-built client (tests inject one with a mock transport).
            metrics: Metrics registry (global one if omitted).
        """
        if not base_url.endswith("/"):
            base_url += "/"
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout,
            verify=verify,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )
        self._api_key = api_key
        self._metrics = metrics or get_metrics()
        self._logger = get_logger(__name__, component="transport")

    def with_api_key(self, api_key: str) -> HttpxTransport:
        """Return a transport sharing this client but sending ``api_key``."""
        return HttpxTransport(
            str(self._client.base_url),
            api_key=api_key,
            client=self._client,
            metrics=self._metrics,
        )

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        skip_auth: bool = False,
    ) -> TransportResponse:
        headers: dict[str, str] = {}
        if self._api_key and not skip_auth:
            headers[API_KEY_HEADER] = self._api_key

        started = time.perf_counter()
        try:
            response = self._client.request(
                method,
                path.lstrip("/"),
                json=body,
                headers=headers,
            )
        except httpx.HTTPError as e:
            self._metrics.api_requests_total.labels(method=method, status="error").inc()
            self._logger.warning("api_request_failed", method=method, path=path, error=str(e))
            raise TransportError(method, path, str(e)) from e

        elapsed = time.perf_counter() - started
        self._metrics.api_requests_total.labels(method=method, status=str(response.status_code)).inc()
        self._metrics.api_request_latency_seconds.observe(elapsed)
        self._logger.debug(
            "api_request",
            method=method,
            path=path,
            status=response.status_code,
            elapsed_ms=round(elapsed * 1000, 1),
        )
        return TransportResponse(
            status_code=response.status_code,
            status_text=response.reason_phrase,
            body=response.content,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
