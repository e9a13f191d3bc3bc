"""
Reference tracking against the resource store.

For every mounted source that has no marker on the pod template yet, the
tracker records the Deployment's name in the source's ``deployments``
annotation and reads back the source's current version. That version
becomes the value of the new marker.
"""

import logging
from typing import Protocol

from config_version_webhook.constants import DEFAULT_CONFLICT_RETRIES
from config_version_webhook.errors import ResourceStoreError
from config_version_webhook.models.sources import ConfigResource, SourceKind, SourceRef
from config_version_webhook.models.workload import Deployment
from config_version_webhook.observability.metrics import metrics_collector

logger = logging.getLogger(__name__)


class ResourceStore(Protocol):
    """Read/write access to config maps and secrets."""

    def get(self, namespace: str, kind: SourceKind, name: str) -> ConfigResource:
        """Fetch a source; raises ResourceStoreError on any failure."""
        ...

    def update(self, resource: ConfigResource) -> ConfigResource:
        """Conditionally write a source back; raises ResourceStoreError on failure."""
        ...


def needs_resolution(annotations: dict[str, str] | None, source: SourceRef) -> bool:
    """True when the pod template carries no usable marker for ``source``."""
    if not annotations:
        return True
    return not annotations.get(source.marker_key)


class ReferenceTracker:
    """Records back-references on sources and resolves their versions."""

    def __init__(
        self, store: ResourceStore, conflict_retries: int = DEFAULT_CONFLICT_RETRIES
    ):
        """
        Initialize reference tracker.

        Args:
            store: Resource store used to read and update sources
            conflict_retries: Extra attempts when an update hits a 409 conflict
        """
        self.store = store
        self.conflict_retries = conflict_retries

    def track(
        self, deployment: Deployment, mounted: list[SourceRef]
    ) -> dict[SourceRef, str]:
        """
        Resolve versions for every mounted source lacking a marker.

        Args:
            deployment: Deployment being admitted
            mounted: Sources mounted by its pod template, in declaration order

        Returns:
            Mapping of freshly resolved sources to their current version

        Raises:
            ResourceStoreError: If any read or write fails; nothing is returned
                for the sources resolved before the failure
        """
        annotations = deployment.template_annotations
        resolved: dict[SourceRef, str] = {}

        for source in mounted:
            if source in resolved or not needs_resolution(annotations, source):
                continue
            resolved[source] = self.record_reference(
                deployment.namespace, deployment.name, source
            )

        return resolved

    def record_reference(
        self, namespace: str, deployment_name: str, source: SourceRef
    ) -> str:
        """
        Add ``deployment_name`` to a source's back-references.

        The read-modify-write is repeated when the conditional update loses
        a race with another writer.

        Returns:
            The source's current version
        """
        attempt = 0
        while True:
            try:
                resource = self.store.get(namespace, source.kind, source.name)
            except ResourceStoreError:
                metrics_collector.record_source_resolution(source.kind, "error")
                raise

            changed = resource.add_deployment(deployment_name)
            if not changed:
                logger.debug(
                    f"{source.kind} {source.name} already references {deployment_name}"
                )

            # Persisted even when the name was already listed
            try:
                updated = self.store.update(resource)
            except ResourceStoreError as e:
                if e.is_conflict and attempt < self.conflict_retries:
                    attempt += 1
                    metrics_collector.record_update_conflict(source.kind)
                    logger.warning(
                        f"Conflict updating {source.kind} {source.name} in {namespace}, "
                        f"retrying ({attempt}/{self.conflict_retries})"
                    )
                    continue
                metrics_collector.record_source_resolution(source.kind, "error")
                raise

            logger.info(
                f"Recorded deployment {deployment_name} on {source.kind} "
                f"{source.name} in {namespace}",
                extra={
                    "namespace": namespace,
                    "resource_name": source.name,
                    "resource_type": source.kind,
                    "operation": "record_reference",
                },
            )
            metrics_collector.record_source_resolution(
                source.kind, "updated" if changed else "unchanged"
            )
            return updated.current_version
