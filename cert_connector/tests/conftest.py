"""Pytest configuration and shared fixtures for certificate connector tests."""

import pytest
from prometheus_client import CollectorRegistry

from cert_connector.application.connector import CertificateConnector
from cert_connector.domain.entities.account import Credentials
from cert_connector.infrastructure.config import Config, get_config
from cert_connector.infrastructure.container import reset_container
from cert_connector.infrastructure.metrics import MetricsRegistry

from service_fakes import (
    FakeClock,
    ScriptedTransport,
    json_response,
    make_chain,
    user_details_payload,
)


@pytest.fixture(autouse=True)
def reset_globals():
    """Reset the DI container and cached config around each test."""
    reset_container()
    get_config.cache_clear()
    yield
    reset_container()
    get_config.cache_clear()


@pytest.fixture
def test_config() -> Config:
    """Provide a test configuration."""
    return Config()


@pytest.fixture
def metrics() -> MetricsRegistry:
    """Provide metrics bound to a private registry."""
    return MetricsRegistry(CollectorRegistry())


@pytest.fixture
def clock() -> FakeClock:
    """Provide a hand-driven monotonic clock."""
    return FakeClock()


@pytest.fixture
def transport(clock: FakeClock) -> ScriptedTransport:
    """Provide a scripted transport that accepts the test API key."""
    fake = ScriptedTransport(clock=clock)
    fake.add("GET", "useraccounts", json_response(200, user_details_payload()))
    return fake


@pytest.fixture
def connector(transport: ScriptedTransport, clock: FakeClock, metrics: MetricsRegistry) -> CertificateConnector:
    """Provide an authenticated connector that never sleeps between polls."""
    connector = CertificateConnector(
        transport,
        default_zone="Z1",
        poll_interval=0,
        clock=clock,
        metrics=metrics,
    )
    connector.authenticate(Credentials("test-api-key"))
    return connector


@pytest.fixture(scope="session")
def chain():
    """Provide a root -> intermediate -> leaf certificate chain."""
    return make_chain()


# Pytest markers
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
