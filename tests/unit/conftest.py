"""Shared pytest fixtures for webhook unit tests."""

import copy

import pytest

from config_version_webhook.constants import VERSION_ANNOTATIONS
from config_version_webhook.errors import ResourceStoreError
from config_version_webhook.models.sources import ConfigResource


class FakeResourceStore:
    """In-memory resource store with resourceVersion checks.

    ``fail_get`` and ``fail_update`` map (kind, name) to an HTTP status the
    next call should fail with; ``conflicts`` counts how many updates of a
    source should be rejected with 409 before one succeeds.
    """

    def __init__(self):
        self.resources: dict[tuple[str, str, str], ConfigResource] = {}
        self.fail_get: dict[tuple[str, str], int] = {}
        self.fail_update: dict[tuple[str, str], int] = {}
        self.conflicts: dict[tuple[str, str], int] = {}
        self.get_calls: list[tuple[str, str, str]] = []
        self.update_calls: list[ConfigResource] = []

    def add(
        self,
        kind: str,
        name: str,
        namespace: str = "default",
        version: str | None = None,
        annotations: dict[str, str] | None = None,
    ) -> ConfigResource:
        resource_annotations = dict(annotations or {})
        if version is not None:
            resource_annotations[VERSION_ANNOTATIONS[kind]] = version
        resource = ConfigResource(
            kind=kind,
            name=name,
            namespace=namespace,
            annotations=resource_annotations,
            resource_version="1",
        )
        self.resources[(namespace, kind, name)] = resource
        return resource

    def stored(self, kind: str, name: str, namespace: str = "default") -> ConfigResource:
        return self.resources[(namespace, kind, name)]

    def get(self, namespace: str, kind: str, name: str) -> ConfigResource:
        self.get_calls.append((namespace, kind, name))
        status = self.fail_get.get((kind, name))
        if status:
            raise ResourceStoreError("get", kind, name, namespace, status=status)
        key = (namespace, kind, name)
        if key not in self.resources:
            raise ResourceStoreError(
                "get", kind, name, namespace, status=404, reason="NotFound"
            )
        return copy.deepcopy(self.resources[key])

    def update(self, resource: ConfigResource) -> ConfigResource:
        self.update_calls.append(copy.deepcopy(resource))
        ref = (resource.kind, resource.name)
        status = self.fail_update.get(ref)
        if status:
            raise ResourceStoreError(
                "update", resource.kind, resource.name, resource.namespace, status=status
            )
        if self.conflicts.get(ref, 0) > 0:
            self.conflicts[ref] -= 1
            raise ResourceStoreError(
                "update",
                resource.kind,
                resource.name,
                resource.namespace,
                status=409,
                reason="Conflict",
            )

        key = (resource.namespace, resource.kind, resource.name)
        current = self.resources[key]
        if current.resource_version != resource.resource_version:
            raise ResourceStoreError(
                "update",
                resource.kind,
                resource.name,
                resource.namespace,
                status=409,
                reason="Conflict",
            )

        stored = copy.deepcopy(resource)
        stored.resource_version = str(int(current.resource_version or "0") + 1)
        self.resources[key] = stored
        return copy.deepcopy(stored)


@pytest.fixture
def store():
    """Empty in-memory resource store."""
    return FakeResourceStore()
