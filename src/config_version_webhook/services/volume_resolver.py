"""Resolve pod template volumes to the configuration sources they mount."""

from collections.abc import Iterable

from config_version_webhook.models.sources import (
    SourceRef,
    config_map_ref,
    secret_ref,
)
from config_version_webhook.models.workload import Volume


def resolve_volume_sources(volumes: Iterable[Volume] | None) -> list[SourceRef]:
    """
    List the config maps and secrets referenced by a pod template's volumes.

    Args:
        volumes: Pod template volumes in declaration order

    Returns:
        One SourceRef per config map or secret volume, in declaration order.
        Other volume types are skipped.
    """
    sources: list[SourceRef] = []
    for volume in volumes or []:
        if volume.config_map is not None:
            sources.append(config_map_ref(volume.config_map.name))
        elif volume.secret is not None:
            sources.append(secret_ref(volume.secret.secret_name))
    return sources
