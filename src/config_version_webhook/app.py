#!/usr/bin/env python3
"""
Config Version Webhook - main entry point.

Serves a mutating admission webhook for Deployments that stamps pod
templates with the versions of the config maps and secrets they mount, so
a new config version rolls the Deployment.

Usage:
    python -m config_version_webhook.app
    # Or via the console script:
    config-version-webhook

Environment Variables:
    WEBHOOK_PORT: Admission webhook HTTPS port (default 8443)
    WEBHOOK_CERT_DIR: Directory holding tls.crt and tls.key
    CONFLICT_RETRIES: Retries when a source update conflicts
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
"""

import asyncio
import logging
import sys

from config_version_webhook.errors import ConfigurationError
from config_version_webhook.observability.logging import setup_structured_logging
from config_version_webhook.observability.metrics import MetricsServer
from config_version_webhook.observability.tracing import setup_tracing, shutdown_tracing
from config_version_webhook.services.mutation_service import MutationService
from config_version_webhook.settings import Settings
from config_version_webhook.settings import settings as webhook_settings
from config_version_webhook.utils.kubernetes import (
    KubernetesResourceStore,
    get_kubernetes_client,
)
from config_version_webhook.webhooks.codec import AdmissionCodec
from config_version_webhook.webhooks.deployment import (
    DeploymentWebhook,
    WebhookServer,
    create_ssl_context,
)


def configure_logging(settings: Settings = webhook_settings) -> None:
    """Configure structured logging based on settings."""
    setup_structured_logging(
        log_level=settings.log_level.upper(),
        enable_json_formatting=settings.json_logs,
        correlation_id_enabled=settings.correlation_ids,
        log_health_probes=settings.log_health_probes,
    )


def build_webhook_server(settings: Settings = webhook_settings) -> WebhookServer:
    """
    Wire the resource store, mutation service and codec into a server.

    Raises:
        ConfigurationError: If cluster credentials or TLS files are missing
    """
    store = KubernetesResourceStore(get_kubernetes_client())
    mutation_service = MutationService(store, conflict_retries=settings.conflict_retries)
    webhook = DeploymentWebhook(mutation_service, AdmissionCodec())

    ssl_context = None
    if settings.webhook_tls_enabled:
        ssl_context = create_ssl_context(settings.tls_certfile, settings.tls_keyfile)
    else:
        logging.warning("Webhook TLS is DISABLED - serving plain HTTP")

    return WebhookServer(
        webhook,
        port=settings.webhook_port,
        host=settings.webhook_host,
        path=settings.webhook_path,
        ssl_context=ssl_context,
    )


async def serve(settings: Settings = webhook_settings) -> None:
    """Run the webhook and metrics servers until cancelled."""
    logging.info("Starting Config Version Webhook...")

    setup_tracing(
        enabled=settings.tracing_enabled,
        endpoint=settings.tracing_endpoint,
        service_name=settings.tracing_service_name,
        sample_rate=settings.tracing_sample_rate,
    )

    webhook_server = build_webhook_server(settings)
    metrics_server = MetricsServer(port=settings.metrics_port, host=settings.metrics_host)

    try:
        await metrics_server.start()
    except OSError as e:
        # Don't fail startup if metrics server fails
        logging.error(f"Failed to start metrics server: {e}")
        logging.warning("Continuing without metrics server")
        metrics_server = None

    try:
        async with webhook_server:
            await asyncio.Event().wait()
    finally:
        logging.info("Shutting down Config Version Webhook...")
        if metrics_server:
            await metrics_server.stop()
        shutdown_tracing()


def main() -> None:
    """
    Main entry point for the webhook.

    This function:
    1. Configures logging
    2. Builds the webhook from settings
    3. Serves until interrupted
    """
    configure_logging()

    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logging.info("Received shutdown signal")
        sys.exit(0)
    except ConfigurationError as e:
        logging.error(f"Webhook configuration error: {e}")
        sys.exit(1)
    except Exception as e:
        logging.error(f"Webhook failed with error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
