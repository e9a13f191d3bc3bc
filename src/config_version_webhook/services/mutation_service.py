"""
Mutation orchestration for admitted Deployments.

MutationService runs the full annotation synchronization for one
Deployment: resolve mounted sources, track references on the resource
store, diff the pod template annotations and build the serialized patch.
Each call is independent and holds no state between requests.
"""

import logging
import time
from dataclasses import dataclass

from opentelemetry.trace import Status, StatusCode

from config_version_webhook.constants import DEFAULT_CONFLICT_RETRIES
from config_version_webhook.errors import WebhookError
from config_version_webhook.models.patch import ContainerState, PatchOperation
from config_version_webhook.models.workload import Deployment
from config_version_webhook.observability.metrics import metrics_collector
from config_version_webhook.observability.tracing import get_tracer
from config_version_webhook.services.annotation_diff import (
    AnnotationDiff,
    diff_annotations,
)
from config_version_webhook.services.patch_builder import build_patch, serialize_patch
from config_version_webhook.services.reference_tracker import (
    ReferenceTracker,
    ResourceStore,
)
from config_version_webhook.services.volume_resolver import resolve_volume_sources

logger = logging.getLogger(__name__)


@dataclass
class MutationResult:
    """Outcome of a successful mutation."""

    patch: bytes
    operations: list[PatchOperation]
    diff: AnnotationDiff


class MutationService:
    """Entry point invoked once per admission request."""

    def __init__(
        self, store: ResourceStore, conflict_retries: int = DEFAULT_CONFLICT_RETRIES
    ):
        self.tracker = ReferenceTracker(store, conflict_retries=conflict_retries)

    def mutate(self, deployment: Deployment) -> MutationResult:
        """
        Compute the patch that synchronizes a Deployment's version markers.

        Args:
            deployment: Deployment decoded from the admission request

        Returns:
            MutationResult with the serialized JSON Patch

        Raises:
            ResourceStoreError: If a source cannot be read or updated
            PatchSerializationError: If the patch cannot be encoded
        """
        start_time = time.time()
        tracer = get_tracer(__name__)

        with tracer.start_as_current_span(
            "mutate_deployment",
            attributes={
                "k8s.namespace": deployment.namespace,
                "k8s.resource.name": deployment.name,
                "k8s.resource.type": "deployment",
            },
        ) as span:
            try:
                result = self._mutate(deployment)
            except WebhookError as e:
                duration = time.time() - start_time
                span.set_status(Status(StatusCode.ERROR, e.message))
                span.record_exception(e)
                metrics_collector.record_mutation(deployment.namespace, "error", duration)
                raise

            duration = time.time() - start_time
            span.set_status(Status(StatusCode.OK))
            span.set_attribute("patch.operations", len(result.operations))
            metrics_collector.record_mutation(deployment.namespace, "success", duration)
            metrics_collector.record_patch_operations(result.operations)
            return result

    def _mutate(self, deployment: Deployment) -> MutationResult:
        annotations = deployment.template_annotations
        mounted = resolve_volume_sources(deployment.volumes)
        resolved = self.tracker.track(deployment, mounted)
        diff = diff_annotations(annotations, resolved, mounted)
        operations = build_patch(diff, ContainerState.of(annotations))

        logger.debug(
            f"Deployment {deployment.namespace}/{deployment.name}: "
            f"{len(mounted)} mounted sources, {len(diff.add)} added, "
            f"{len(diff.remove)} removed"
        )
        return MutationResult(
            patch=serialize_patch(operations), operations=operations, diff=diff
        )
