"""
Prometheus metrics for the config version webhook.

This module provides metrics for admission mutations and the resource
store round trips they make, plus the HTTP server exposing them alongside
the liveness and readiness probes.
"""

import logging
import time
from collections.abc import Iterable
from typing import Any

# aiohttp also serves the admission endpoint; see webhooks/deployment.py
from aiohttp.web import (
    Application,
    AppRunner,
    Request,
    Response,
    TCPSite,
    json_response,
)
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

# Global metrics registry
_metrics_registry: CollectorRegistry | None = None

# Metrics definitions
MUTATIONS_TOTAL = Counter(
    "config_version_webhook_mutations_total",
    "Total number of Deployment mutations attempted",
    ["namespace", "result"],
    registry=None,  # Will be set during initialization
)

MUTATION_DURATION = Histogram(
    "config_version_webhook_mutation_duration_seconds",
    "Time spent computing a Deployment patch",
    ["namespace"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
    registry=None,
)

SOURCE_RESOLUTIONS_TOTAL = Counter(
    "config_version_webhook_source_resolutions_total",
    "Config map and secret lookups made to resolve a marker version",
    ["kind", "result"],
    registry=None,
)

UPDATE_CONFLICTS_TOTAL = Counter(
    "config_version_webhook_update_conflicts_total",
    "Conflicting writes to a source's deployments annotation",
    ["kind"],
    registry=None,
)

PATCH_OPERATIONS_TOTAL = Counter(
    "config_version_webhook_patch_operations_total",
    "JSON Patch operations emitted",
    ["op"],
    registry=None,
)

ADMISSION_REQUESTS_TOTAL = Counter(
    "config_version_webhook_admission_requests_total",
    "AdmissionReview requests received",
    ["result"],
    registry=None,
)


def get_metrics_registry() -> CollectorRegistry:
    """Get or create the global metrics registry."""
    global _metrics_registry

    if _metrics_registry is None:
        _metrics_registry = CollectorRegistry()

        for metric in [
            MUTATIONS_TOTAL,
            MUTATION_DURATION,
            SOURCE_RESOLUTIONS_TOTAL,
            UPDATE_CONFLICTS_TOTAL,
            PATCH_OPERATIONS_TOTAL,
            ADMISSION_REQUESTS_TOTAL,
        ]:
            _metrics_registry.register(metric)

    return _metrics_registry


class MetricsCollector:
    """Collects and manages metrics for the webhook."""

    def record_mutation(self, namespace: str, result: str, duration: float) -> None:
        MUTATIONS_TOTAL.labels(namespace=namespace, result=result).inc()
        MUTATION_DURATION.labels(namespace=namespace).observe(duration)

    def record_source_resolution(self, kind: str, result: str) -> None:
        SOURCE_RESOLUTIONS_TOTAL.labels(kind=kind, result=result).inc()

    def record_update_conflict(self, kind: str) -> None:
        UPDATE_CONFLICTS_TOTAL.labels(kind=kind).inc()

    def record_patch_operations(self, operations: Iterable[Any]) -> None:
        for operation in operations:
            PATCH_OPERATIONS_TOTAL.labels(op=operation.op).inc()

    def record_admission_request(self, result: str) -> None:
        ADMISSION_REQUESTS_TOTAL.labels(result=result).inc()


class MetricsServer:
    """HTTP server for exposing Prometheus metrics."""

    def __init__(self, port: int = 8081, host: str = "0.0.0.0"):
        """
        Initialize metrics server.

        Args:
            port: Port to serve metrics on
            host: Host interface to bind to
        """
        self.port = port
        self.host = host
        self.app = Application()
        self.runner: AppRunner | None = None
        self.site: TCPSite | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Set up HTTP routes for the metrics server."""
        self.app.router.add_get("/metrics", self._metrics_handler)
        self.app.router.add_get("/health", self._health_handler)
        self.app.router.add_get("/ready", self._ready_handler)
        self.app.router.add_get("/healthz", self._healthz_handler)  # K8s compatibility

    async def _metrics_handler(self, request: Request) -> Response:
        """Handle /metrics endpoint for Prometheus scraping."""
        try:
            registry = get_metrics_registry()
            metrics_data = generate_latest(registry)
            return Response(
                body=metrics_data, headers={"Content-Type": CONTENT_TYPE_LATEST}
            )
        except Exception as e:
            logger.error(f"Failed to generate metrics: {e}")
            return Response(
                text=f"Error generating metrics: {type(e).__name__}. Check logs for details.",
                status=500,
            )

    async def _health_handler(self, request: Request) -> Response:
        """Handle /health endpoint for webhook health checks."""
        try:
            from .health import HealthChecker

            health_checker = HealthChecker()
            health_results = await health_checker.check_all()
            health_dict = health_checker.to_dict(health_results)

            status_code = 200 if health_dict["status"] == "healthy" else 503
            return json_response(health_dict, status=status_code)
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return json_response(
                {
                    "status": "unhealthy",
                    "error": f"{type(e).__name__}. Check logs for details.",
                    "timestamp": time.time(),
                },
                status=500,
            )

    async def _ready_handler(self, request: Request) -> Response:
        """Handle /ready endpoint for readiness probes."""
        try:
            from .health import HealthChecker

            health_checker = HealthChecker()
            result = await health_checker.check_kubernetes_api()
            ready = result.status == "healthy"
            return json_response(
                {
                    "status": "ready" if ready else "not_ready",
                    "timestamp": time.time(),
                    "checks": {"kubernetes_api": result.status},
                },
                status=200 if ready else 503,
            )
        except Exception as e:
            logger.error(f"Readiness check failed: {e}")
            return json_response(
                {
                    "status": "not_ready",
                    "error": f"{type(e).__name__}. Check logs for details.",
                    "timestamp": time.time(),
                },
                status=503,
            )

    async def _healthz_handler(self, request: Request) -> Response:
        """Handle /healthz endpoint for Kubernetes compatibility."""
        return Response(text="ok")

    async def start(self) -> None:
        """Start the metrics server."""
        try:
            self.runner = AppRunner(self.app)
            await self.runner.setup()

            self.site = TCPSite(self.runner, self.host, self.port)
            await self.site.start()

            logger.info(f"Metrics server started on {self.host}:{self.port}")
        except Exception as e:
            logger.error(f"Failed to start metrics server: {e}")
            raise

    async def stop(self) -> None:
        """Stop the metrics server."""
        try:
            if self.site:
                await self.site.stop()
                self.site = None

            if self.runner:
                await self.runner.cleanup()
                self.runner = None

            logger.info("Metrics server stopped")
        except Exception as e:
            logger.error(f"Error stopping metrics server: {e}")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()


# Global metrics collector instance
metrics_collector = MetricsCollector()
