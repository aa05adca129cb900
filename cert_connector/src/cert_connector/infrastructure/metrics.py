"""Prometheus metrics for the certificate connector."""

from __future__ import annotations

from prometheus_client import (
    Counter, Histogram, Info, start_http_server, REGISTRY, CollectorRegistry,
)

from cert_connector.domain.errors import (
    Cancelled,
    CertificatePending,
    ConfigurationError,
    ConnectorError,
    IssuanceFailed,
    LookupFailure,
    RetrieveTimeout,
    StaleRenewalTarget,
    TransportError,
)


class MetricsRegistry:
    """Registry of all connector metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or REGISTRY

        # Transport metrics
        self.api_requests_total = Counter(
            "cert_connector_api_requests_total", "Requests sent to the certificate service",
            ["method", "status"],
            registry=self._registry,
        )

        self.api_request_latency_seconds = Histogram(
            "cert_connector_api_request_latency_seconds", "Certificate service request latency",
            buckets=(0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
            registry=self._registry,
        )

        # Lifecycle metrics
        self.certificate_requests_total = Counter(
            "cert_connector_certificate_requests_total", "Certificate request submissions",
            ["outcome"],
            registry=self._registry,
        )

        self.certificate_retrievals_total = Counter(
            "cert_connector_certificate_retrievals_total", "Certificate retrievals",
            ["outcome"],
            registry=self._registry,
        )

        self.issuance_poll_ticks_total = Counter(
            "cert_connector_issuance_poll_ticks_total", "Status polls while waiting for issuance",
            registry=self._registry,
        )

        self.issuance_wait_seconds = Histogram(
            "cert_connector_issuance_wait_seconds", "Time spent waiting for issuance",
            buckets=(0.1, 1, 2, 5, 10, 30, 60, 120, 300),
            registry=self._registry,
        )

        # Renewal metrics
        self.certificate_renewals_total = Counter(
            "cert_connector_certificate_renewals_total", "Certificate renewals",
            ["outcome"],
            registry=self._registry,
        )

        self.info = Info("cert_connector", "Connector information", registry=self._registry)


def error_outcome(error: ConnectorError) -> str:
    """Outcome label for a failed operation."""
    if isinstance(error, CertificatePending):
        return "pending"
    if isinstance(error, RetrieveTimeout):
        return "timeout"
    if isinstance(error, Cancelled):
        return "cancelled"
    if isinstance(error, IssuanceFailed):
        return "failed"
    if isinstance(error, StaleRenewalTarget):
        return "stale"
    if isinstance(error, LookupFailure):
        return "not_found"
    if isinstance(error, ConfigurationError):
        return "rejected"
    if isinstance(error, TransportError):
        return "transport_error"
    return "error"


_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8004, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """Set up Prometheus metrics and serve them on ``port``."""
    global _metrics
    if _metrics is None or registry is not None:
        _metrics = MetricsRegistry(registry)
    from cert_connector import __version__
    _metrics.info.info({"version": __version__})
    start_http_server(port, registry=registry or REGISTRY)
    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
