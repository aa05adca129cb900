"""Configuration management for the certificate connector."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from cert_connector.domain.entities.certificate import ChainOrder
from cert_connector.domain.value_objects.resources import DEFAULT_API_URL


class ServiceConfig(BaseModel):
    """Certificate service endpoint configuration."""

    base_url: str = Field(default=DEFAULT_API_URL)
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    verify_tls: bool = Field(default=True)


class LifecycleConfig(BaseModel):
    """Certificate request lifecycle configuration."""

    default_zone: str | None = Field(default=None)
    poll_interval_seconds: float = Field(default=2.0, ge=0)
    retrieve_timeout_seconds: float = Field(default=0.0, ge=0)
    chain_order: Literal["ROOT_FIRST", "ROOT_LAST"] = Field(default="ROOT_LAST")

    @property
    def chain_order_option(self) -> ChainOrder:
        return ChainOrder[self.chain_order]


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")
    otel_endpoint: str | None = Field(default=None)
    otel_service_name: str = Field(default="cert_connector")
    metrics_port: int | None = Field(default=None)


class Config(BaseSettings):
    """Main configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CERT_CONNECTOR_",
        env_nested_delimiter="__",
    )

    api_key: SecretStr | None = Field(default=None)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    lifecycle: LifecycleConfig = Field(default_factory=LifecycleConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration."""
    return Config()
