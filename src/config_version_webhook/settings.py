"""Centralized webhook settings using pydantic-settings.

This module provides a single source of truth for all webhook configuration
loaded from environment variables. Uses pydantic for automatic validation,
type coercion, and documentation.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from config_version_webhook.constants import (
    DEFAULT_CERT_DIR,
    DEFAULT_CONFLICT_RETRIES,
    DEFAULT_METRICS_PORT,
    DEFAULT_WEBHOOK_PATH,
    DEFAULT_WEBHOOK_PORT,
)


class Settings(BaseSettings):
    """Webhook configuration loaded from environment variables.

    All settings have sensible defaults for running inside a cluster. Override
    via environment variables as documented per field.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Admission webhook server
    webhook_host: str = Field(
        default="0.0.0.0",
        validation_alias="WEBHOOK_HOST",
        description="Host address to bind the admission webhook server",
    )
    webhook_port: int = Field(
        default=DEFAULT_WEBHOOK_PORT,
        validation_alias="WEBHOOK_PORT",
        description="Port for admission webhook server",
    )
    webhook_path: str = Field(
        default=DEFAULT_WEBHOOK_PATH,
        validation_alias="WEBHOOK_PATH",
        description="URL path the API server posts AdmissionReview requests to",
    )
    webhook_cert_dir: str = Field(
        default=DEFAULT_CERT_DIR,
        validation_alias="WEBHOOK_CERT_DIR",
        description="Directory holding tls.crt and tls.key for the webhook server",
    )
    webhook_tls_enabled: bool = Field(
        default=True,
        validation_alias="WEBHOOK_TLS_ENABLED",
        description="Serve HTTPS (disable only for local development)",
    )

    # Reference tracking
    conflict_retries: int = Field(
        default=DEFAULT_CONFLICT_RETRIES,
        ge=0,
        validation_alias="CONFLICT_RETRIES",
        description="Extra attempts when a config map or secret update hits a 409 conflict",
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        validation_alias="JSON_LOGS",
        description="Enable JSON formatted logging for structured log aggregation",
    )
    correlation_ids: bool = Field(
        default=True,
        validation_alias="CORRELATION_IDS",
        description="Enable correlation IDs in logs for request tracing",
    )
    log_health_probes: bool = Field(
        default=False,
        validation_alias="LOG_HEALTH_PROBES",
        description="Log health probe and metrics scrape requests",
    )

    # Metrics and observability
    metrics_port: int = Field(
        default=DEFAULT_METRICS_PORT,
        validation_alias="METRICS_PORT",
        description="Port for Prometheus metrics endpoint",
    )
    metrics_host: str = Field(
        default="0.0.0.0",
        validation_alias="METRICS_HOST",
        description="Host address to bind metrics server",
    )

    # Tracing
    tracing_enabled: bool = Field(
        default=False,
        validation_alias="TRACING_ENABLED",
        description="Enable OpenTelemetry tracing",
    )
    tracing_endpoint: str = Field(
        default="http://localhost:4317",
        validation_alias="OTEL_EXPORTER_OTLP_ENDPOINT",
        description="OTLP collector endpoint (gRPC)",
    )
    tracing_service_name: str = Field(
        default="config-version-webhook",
        validation_alias="OTEL_SERVICE_NAME",
        description="Service name reported on spans",
    )
    tracing_sample_rate: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        validation_alias="OTEL_TRACES_SAMPLER_ARG",
        description="Fraction of root spans to sample",
    )

    @property
    def tls_certfile(self) -> Path:
        return Path(self.webhook_cert_dir) / "tls.crt"

    @property
    def tls_keyfile(self) -> Path:
        return Path(self.webhook_cert_dir) / "tls.key"


# Global settings instance - initialized once at module import
settings = Settings()
