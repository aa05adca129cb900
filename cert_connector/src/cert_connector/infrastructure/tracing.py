"""OpenTelemetry tracing for connector operations.

Each public connector operation runs in one span. A ``ConnectorError``
leaving the span marks it failed and records the error class as
``connector.error``, so pending and stale results can be told apart from
transport failures in a trace view.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Status, StatusCode

from cert_connector.domain.errors import ConnectorError

TRACER_NAME = "cert_connector"

_tracer: trace.Tracer | None = None


def setup_tracing(service_name: str = TRACER_NAME, otlp_endpoint: str | None = None) -> trace.Tracer:
    """Install a tracer provider, exporting over OTLP when an endpoint is set."""
    global _tracer
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def get_tracer() -> trace.Tracer:
    """Get the connector tracer (no-op until a provider is installed)."""
    return _tracer or trace.get_tracer(TRACER_NAME)


@contextmanager
def trace_span(name: str, attributes: dict[str, Any] | None = None) -> Generator[trace.Span, None, None]:
    """Run the enclosed block in a span named ``name``.

    Attributes whose value is None or empty are not set.
    """
    with get_tracer().start_as_current_span(
        name, record_exception=False, set_status_on_exception=False
    ) as span:
        for key, value in (attributes or {}).items():
            if value not in (None, ""):
                span.set_attribute(key, value)
        try:
            yield span
        except ConnectorError as e:
            span.set_attribute("connector.error", type(e).__name__)
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise
