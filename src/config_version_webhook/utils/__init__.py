"""
Utils package - Kubernetes helpers for the config version webhook.

Contains the Kubernetes client setup and the resource store used to read
and update config maps and secrets.
"""

from config_version_webhook.utils.kubernetes import (
    KubernetesResourceStore,
    get_kubernetes_client,
    load_kubernetes_config,
)

__all__ = [
    "KubernetesResourceStore",
    "get_kubernetes_client",
    "load_kubernetes_config",
]
