"""
Mutating admission webhook for Deployments.

Receives AdmissionReview requests, runs the annotation synchronization on
the admitted Deployment and answers with a JSON Patch. Failures never deny
the Deployment outright: they are reported in the response status and the
webhook's failurePolicy decides what the API server does next.
"""

import asyncio
import logging
import ssl
from pathlib import Path

from aiohttp import web
from opentelemetry.trace import SpanKind

from config_version_webhook.constants import DEFAULT_WEBHOOK_PATH, ERROR_EMPTY_BODY
from config_version_webhook.errors import (
    AdmissionDecodeError,
    ConfigurationError,
    WebhookError,
)
from config_version_webhook.models.admission import AdmissionRequest, AdmissionResponse
from config_version_webhook.observability.logging import set_correlation_id
from config_version_webhook.observability.metrics import metrics_collector
from config_version_webhook.observability.tracing import (
    extract_trace_context,
    get_tracer,
)
from config_version_webhook.services.mutation_service import MutationService
from config_version_webhook.webhooks.codec import AdmissionCodec

logger = logging.getLogger(__name__)


class DeploymentWebhook:
    """aiohttp handler for Deployment admission reviews."""

    def __init__(self, mutation_service: MutationService, codec: AdmissionCodec):
        self.mutation_service = mutation_service
        self.codec = codec

    async def handle(self, request: web.Request) -> web.Response:
        """Handle one AdmissionReview POST."""
        body = await request.read()
        if not body:
            logger.error(ERROR_EMPTY_BODY)
            metrics_collector.record_admission_request("rejected")
            return web.Response(status=400, text=ERROR_EMPTY_BODY)

        try:
            review = self.codec.decode_review(body)
        except AdmissionDecodeError as e:
            logger.error(e.status_message())
            metrics_collector.record_admission_request("error")
            return self._respond(self.codec.error("", e.status_message()))

        admission_request = review.request
        set_correlation_id(admission_request.uid)

        tracer = get_tracer(__name__)
        with tracer.start_as_current_span(
            "admission_review",
            context=extract_trace_context(request.headers),
            kind=SpanKind.SERVER,
            attributes={"admission.uid": admission_request.uid},
        ):
            response = await self.review(admission_request)

        return self._respond(response)

    async def review(self, admission_request: AdmissionRequest) -> AdmissionResponse:
        """
        Mutate the Deployment in an admission request.

        Returns:
            An allowing response with the patch, or an error response with a
            status message and no patch
        """
        uid = admission_request.uid
        logger.info(
            f"AdmissionReview for Kind={admission_request.kind.kind} "
            f"Namespace={admission_request.namespace} Name={admission_request.name} "
            f"UID={uid} Operation={admission_request.operation} "
            f"User={admission_request.user_info.username}",
            extra={
                "request_uid": uid,
                "namespace": admission_request.namespace,
                "resource_name": admission_request.name,
                "operation": admission_request.operation,
                "username": admission_request.user_info.username,
            },
        )

        try:
            deployment = self.codec.decode_deployment(admission_request)
            result = await asyncio.to_thread(self.mutation_service.mutate, deployment)
        except WebhookError as e:
            logger.error(
                f"AdmissionResponse: create patch failed: {e}",
                extra={
                    "request_uid": uid,
                    "namespace": admission_request.namespace,
                    "error_type": type(e).__name__,
                },
            )
            metrics_collector.record_admission_request("error")
            return self.codec.error(uid, e.status_message())
        except Exception as e:
            logger.error(
                f"Unexpected error mutating {admission_request.namespace}/"
                f"{admission_request.name}: {e}",
                exc_info=True,
                extra={"request_uid": uid, "error_type": type(e).__name__},
            )
            metrics_collector.record_admission_request("error")
            return self.codec.error(uid, f"internal error: {type(e).__name__}: {e}")

        logger.info(
            f"AdmissionResponse: patch={result.patch.decode('utf-8')}",
            extra={
                "request_uid": uid,
                "namespace": deployment.namespace,
                "resource_name": deployment.name,
                "patch_operations": len(result.operations),
            },
        )
        metrics_collector.record_admission_request("allowed")
        return self.codec.allow(uid, result.patch)

    def _respond(self, response: AdmissionResponse) -> web.Response:
        try:
            payload = self.codec.encode_review(response)
        except ValueError as e:
            logger.error(f"Can't encode response: {e}")
            return web.Response(status=500, text=f"could not encode response: {e}")
        return web.Response(body=payload, content_type="application/json")


def create_webhook_app(
    webhook: DeploymentWebhook, path: str = DEFAULT_WEBHOOK_PATH
) -> web.Application:
    """Build the aiohttp application serving the admission endpoint."""
    app = web.Application()
    app.router.add_post(path, webhook.handle)
    return app


def create_ssl_context(certfile: Path, keyfile: Path) -> ssl.SSLContext:
    """
    Build the server TLS context from the mounted serving certificate.

    Raises:
        ConfigurationError: If the certificate or key is missing
    """
    for path in (certfile, keyfile):
        if not path.exists():
            raise ConfigurationError(
                f"Webhook TLS file not found: {path}",
                user_action="Mount the serving certificate secret (e.g. from cert-manager)",
            )

    context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    context.load_cert_chain(certfile=str(certfile), keyfile=str(keyfile))
    return context


class WebhookServer:
    """HTTPS server exposing the admission endpoint."""

    def __init__(
        self,
        webhook: DeploymentWebhook,
        port: int,
        host: str = "0.0.0.0",
        path: str = DEFAULT_WEBHOOK_PATH,
        ssl_context: ssl.SSLContext | None = None,
    ):
        """
        Initialize webhook server.

        Args:
            webhook: Handler for admission reviews
            port: Port to listen on
            host: Host interface to bind to
            path: URL path of the admission endpoint
            ssl_context: TLS context; plain HTTP when None
        """
        self.port = port
        self.host = host
        self.path = path
        self.ssl_context = ssl_context
        self.app = create_webhook_app(webhook, path)
        self.runner: web.AppRunner | None = None
        self.site: web.TCPSite | None = None

    async def start(self) -> None:
        """Start the webhook server."""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()

        self.site = web.TCPSite(
            self.runner, self.host, self.port, ssl_context=self.ssl_context
        )
        await self.site.start()

        scheme = "https" if self.ssl_context else "http"
        logger.info(
            f"Admission webhook listening on {scheme}://{self.host}:{self.port}{self.path}"
        )

    async def stop(self) -> None:
        """Stop the webhook server."""
        if self.site:
            await self.site.stop()
            self.site = None

        if self.runner:
            await self.runner.cleanup()
            self.runner = None

        logger.info("Webhook server stopped")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
