"""
Health check utilities for the config version webhook.

The webhook is healthy when it can reach the Kubernetes API and is allowed
to read and update the config maps and secrets it tracks references on.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any

from kubernetes import client
from kubernetes.client.rest import ApiException

logger = logging.getLogger(__name__)

# (resource, verb) pairs the webhook needs on the core API group
REQUIRED_PERMISSIONS = [
    ("configmaps", "get"),
    ("configmaps", "update"),
    ("secrets", "get"),
    ("secrets", "update"),
]


@dataclass
class HealthCheckResult:
    """Result of a health check operation."""

    name: str
    status: str  # "healthy", "unhealthy", "unknown"
    message: str
    details: dict[str, Any] | None = None
    duration: float = 0.0
    timestamp: float = 0.0


class HealthChecker:
    """Performs health checks for the webhook."""

    def __init__(self, k8s_client: client.ApiClient | None = None):
        """
        Initialize health checker.

        Args:
            k8s_client: Kubernetes API client
        """
        self.k8s_client = k8s_client

    def _api_client(self) -> client.ApiClient:
        if not self.k8s_client:
            from ..utils.kubernetes import get_kubernetes_client

            self.k8s_client = get_kubernetes_client()
        return self.k8s_client

    async def check_all(self) -> dict[str, HealthCheckResult]:
        """
        Run all health checks.

        Returns:
            Dictionary of health check results
        """
        checks = {
            "kubernetes_api": self.check_kubernetes_api,
            "rbac_permissions": self.check_rbac_permissions,
        }

        results = {}
        for name, check in checks.items():
            try:
                results[name] = await check()
            except Exception as e:
                results[name] = HealthCheckResult(
                    name=name,
                    status="unhealthy",
                    message=f"Health check failed: {str(e)}",
                    timestamp=time.time(),
                )

        return results

    async def check_kubernetes_api(self) -> HealthCheckResult:
        """Check Kubernetes API connectivity."""
        start_time = time.time()

        try:
            version_api = client.VersionApi(self._api_client())
            version = await asyncio.to_thread(version_api.get_code)
            duration = time.time() - start_time

            return HealthCheckResult(
                name="kubernetes_api",
                status="healthy",
                message="Kubernetes API is accessible",
                details={
                    "api_server_version": getattr(version, "git_version", "unknown"),
                    "response_time_ms": round(duration * 1000, 2),
                },
                duration=duration,
                timestamp=time.time(),
            )

        except ApiException as e:
            duration = time.time() - start_time
            return HealthCheckResult(
                name="kubernetes_api",
                status="unhealthy",
                message=f"Kubernetes API error: {e.reason}",
                details={
                    "status_code": e.status,
                    "response_time_ms": round(duration * 1000, 2),
                },
                duration=duration,
                timestamp=time.time(),
            )

        except Exception as e:
            duration = time.time() - start_time
            return HealthCheckResult(
                name="kubernetes_api",
                status="unhealthy",
                message=f"Failed to connect to Kubernetes API: {str(e)}",
                duration=duration,
                timestamp=time.time(),
            )

    async def check_rbac_permissions(self) -> HealthCheckResult:
        """Check the webhook may read and update config maps and secrets."""
        start_time = time.time()
        auth_api = client.AuthorizationV1Api(self._api_client())

        denied = []
        for resource, verb in REQUIRED_PERMISSIONS:
            review = client.V1SelfSubjectAccessReview(
                spec=client.V1SelfSubjectAccessReviewSpec(
                    resource_attributes=client.V1ResourceAttributes(
                        resource=resource, verb=verb
                    )
                )
            )
            response = await asyncio.to_thread(
                auth_api.create_self_subject_access_review, review
            )
            if not response.status.allowed:
                denied.append(f"{verb} {resource}")

        duration = time.time() - start_time
        if denied:
            return HealthCheckResult(
                name="rbac_permissions",
                status="unhealthy",
                message=f"Missing permissions: {', '.join(denied)}",
                details={"denied": denied},
                duration=duration,
                timestamp=time.time(),
            )

        return HealthCheckResult(
            name="rbac_permissions",
            status="healthy",
            message="All required permissions granted",
            duration=duration,
            timestamp=time.time(),
        )

    def get_overall_health(self, results: dict[str, HealthCheckResult]) -> str:
        """Collapse individual results into one status."""
        if not results:
            return "unknown"
        if all(result.status == "healthy" for result in results.values()):
            return "healthy"
        return "unhealthy"

    def to_dict(self, results: dict[str, HealthCheckResult]) -> dict[str, Any]:
        return {
            "status": self.get_overall_health(results),
            "timestamp": time.time(),
            "checks": {
                name: {
                    "status": result.status,
                    "message": result.message,
                    "details": result.details,
                    "duration": result.duration,
                }
                for name, result in results.items()
            },
        }
