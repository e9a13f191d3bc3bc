"""
Kubernetes utilities for the config version webhook.

This module provides helper functions for interacting with the Kubernetes API:
- Kubernetes client management and configuration
- The resource store the reference tracker reads and updates config maps
  and secrets through
"""

import logging

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from config_version_webhook.constants import KIND_CONFIG_MAP, KIND_SECRET
from config_version_webhook.errors import ConfigurationError, ResourceStoreError
from config_version_webhook.models.sources import ConfigResource, SourceKind

logger = logging.getLogger(__name__)


def load_kubernetes_config() -> None:
    """
    Load cluster credentials into the default client configuration.

    Tries in-cluster config first (when running in a pod) and falls back to
    the local kubeconfig for development.
    """
    try:
        config.load_incluster_config()
        logger.debug("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        try:
            config.load_kube_config()
            logger.debug("Loaded kubeconfig from local environment")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise ConfigurationError(
                f"Failed to load Kubernetes configuration: {e}",
                user_action="Run inside a cluster or provide a kubeconfig",
            ) from e


def get_kubernetes_client() -> client.ApiClient:
    """
    Get configured Kubernetes API client.

    Returns:
        Configured Kubernetes API client
    """
    load_kubernetes_config()
    return client.ApiClient()


class KubernetesResourceStore:
    """Resource store backed by the Kubernetes core/v1 API."""

    def __init__(self, k8s_client: client.ApiClient | None = None):
        self.core_api = client.CoreV1Api(k8s_client or get_kubernetes_client())

    def get(self, namespace: str, kind: SourceKind, name: str) -> ConfigResource:
        """
        Read a config map or secret.

        Raises:
            ResourceStoreError: On API errors (not found, forbidden) or
                transport failures
        """
        try:
            if kind == KIND_CONFIG_MAP:
                body = self.core_api.read_namespaced_config_map(
                    name=name, namespace=namespace
                )
            elif kind == KIND_SECRET:
                body = self.core_api.read_namespaced_secret(
                    name=name, namespace=namespace
                )
            else:
                raise ValueError(f"Unsupported source kind: {kind}")
        except ApiException as e:
            raise ResourceStoreError(
                "get", kind, name, namespace, status=e.status, reason=e.reason, cause=e
            ) from e
        except HTTPError as e:
            raise ResourceStoreError(
                "get", kind, name, namespace, reason=str(e), cause=e
            ) from e

        return ConfigResource(
            kind=kind,
            name=body.metadata.name,
            namespace=body.metadata.namespace or namespace,
            annotations=dict(body.metadata.annotations or {}),
            resource_version=body.metadata.resource_version,
            body=body,
        )

    def update(self, resource: ConfigResource) -> ConfigResource:
        """
        Write a resource's annotations back.

        The replace carries the resourceVersion that was read, so the API
        server rejects it with 409 Conflict if the object changed meanwhile.

        Raises:
            ResourceStoreError: On API errors (including conflicts) or
                transport failures
        """
        body = resource.body
        if body is None:
            if resource.kind == KIND_CONFIG_MAP:
                body = client.V1ConfigMap(metadata=client.V1ObjectMeta())
            else:
                body = client.V1Secret(metadata=client.V1ObjectMeta())
        body.metadata.name = resource.name
        body.metadata.namespace = resource.namespace
        body.metadata.annotations = dict(resource.annotations)
        body.metadata.resource_version = resource.resource_version

        try:
            if resource.kind == KIND_CONFIG_MAP:
                updated = self.core_api.replace_namespaced_config_map(
                    name=resource.name, namespace=resource.namespace, body=body
                )
            else:
                updated = self.core_api.replace_namespaced_secret(
                    name=resource.name, namespace=resource.namespace, body=body
                )
        except ApiException as e:
            raise ResourceStoreError(
                "update",
                resource.kind,
                resource.name,
                resource.namespace,
                status=e.status,
                reason=e.reason,
                cause=e,
            ) from e
        except HTTPError as e:
            raise ResourceStoreError(
                "update",
                resource.kind,
                resource.name,
                resource.namespace,
                reason=str(e),
                cause=e,
            ) from e

        return ConfigResource(
            kind=resource.kind,
            name=updated.metadata.name,
            namespace=updated.metadata.namespace or resource.namespace,
            annotations=dict(updated.metadata.annotations or {}),
            resource_version=updated.metadata.resource_version,
            body=updated,
        )
