"""Dependency injection container."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from cert_connector.adapters.outbound.httpx_transport import HttpxTransport
from cert_connector.application.connector import CertificateConnector
from cert_connector.infrastructure.config import Config, get_config
from cert_connector.infrastructure.logging import get_logger, setup_logging
from cert_connector.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from cert_connector.infrastructure.tracing import setup_tracing

T = TypeVar("T")


class Container:
    """Simple DI container.

    Singletons are stored as already-built instances; factories run once on
    first resolve.
    """

    def __init__(self) -> None:
        self._factories: dict[type, Callable[[Container], Any]] = {}
        self._instances: dict[type, Any] = {}

    def register_singleton(self, interface: type[T], instance: T) -> None:
        self._instances[interface] = instance

    def register_factory(self, interface: type[T], factory: Callable[[Container], T]) -> None:
        self._factories[interface] = factory

    def resolve(self, interface: type[T]) -> T:
        if interface in self._instances:
            return self._instances[interface]
        if interface in self._factories:
            instance = self._factories[interface](self)
            self._instances[interface] = instance
            return instance
        raise KeyError(f"No registration for {interface}")

    def clear(self) -> None:
        self._factories.clear()
        self._instances.clear()


def _build_transport(container: Container) -> HttpxTransport:
    config = container.resolve(Config)
    return HttpxTransport(
        config.service.base_url,
        timeout=config.service.request_timeout_seconds,
        verify=config.service.verify_tls,
        metrics=container.resolve(MetricsRegistry),
    )


def _build_connector(container: Container) -> CertificateConnector:
    config = container.resolve(Config)
    return CertificateConnector(
        container.resolve(HttpxTransport),
        default_zone=config.lifecycle.default_zone,
        poll_interval=config.lifecycle.poll_interval_seconds,
        default_timeout=config.lifecycle.retrieve_timeout_seconds,
        default_chain_order=config.lifecycle.chain_order_option,
        metrics=container.resolve(MetricsRegistry),
    )


def create_container(
    config: Config | None = None,
    metrics: MetricsRegistry | None = None,
) -> Container:
    """Wire config, metrics, transport and connector."""
    container = Container()
    container.register_singleton(Config, config or get_config())
    container.register_singleton(MetricsRegistry, metrics or get_metrics())
    container.register_factory(HttpxTransport, _build_transport)
    container.register_factory(CertificateConnector, _build_connector)
    return container


def configure_observability(config: Config) -> MetricsRegistry:
    """Set up logging, tracing and metrics from ``config.observability``.

    Starts the metrics HTTP server when a metrics port is configured; call
    once per process.
    """
    observability = config.observability
    setup_logging(observability.log_level, observability.log_format)
    setup_tracing(observability.otel_service_name, observability.otel_endpoint)
    metrics = setup_metrics(observability.metrics_port) if observability.metrics_port else get_metrics()
    get_logger(__name__).info(
        "cert_connector_container_initialized",
        base_url=config.service.base_url,
        default_zone=config.lifecycle.default_zone,
    )
    return metrics


_container: Container | None = None


def get_container() -> Container:
    """Process-wide container with observability configured."""
    global _container
    if _container is None:
        config = get_config()
        _container = create_container(config, configure_observability(config))
    return _container


def reset_container() -> None:
    global _container
    if _container:
        _container.clear()
    _container = None
