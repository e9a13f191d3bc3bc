"""
Configuration source models.

A SourceRef names a config map or secret mounted by a pod template and
knows the marker annotation that records its version. A ConfigResource is
the stored object itself as returned by the resource store.
"""

from dataclasses import dataclass, field
from typing import Any, Literal

from config_version_webhook.constants import (
    DEPLOYMENTS_ANNOTATION,
    DEPLOYMENTS_SEPARATOR,
    KIND_CONFIG_MAP,
    KIND_SECRET,
    MARKER_PREFIXES,
    VERSION_ANNOTATIONS,
)

SourceKind = Literal["configmap", "secret"]


@dataclass(frozen=True)
class SourceRef:
    """A (kind, name) pair referenced by a pod template volume."""

    kind: SourceKind
    name: str

    @property
    def marker_key(self) -> str:
        """Pod template annotation key holding this source's version."""
        return marker_key(self.kind, self.name)


def marker_key(kind: SourceKind, name: str) -> str:
    return f"{MARKER_PREFIXES[kind]}-{name}"


def is_marker_key(key: str) -> bool:
    """True when an annotation key follows the marker naming convention."""
    return any(key.startswith(f"{prefix}-") for prefix in MARKER_PREFIXES.values())


def config_map_ref(name: str) -> SourceRef:
    return SourceRef(kind=KIND_CONFIG_MAP, name=name)


def secret_ref(name: str) -> SourceRef:
    return SourceRef(kind=KIND_SECRET, name=name)


@dataclass
class ConfigResource:
    """
    A config map or secret as held by the resource store.

    The webhook only touches annotations. ``resource_version`` makes updates
    conditional and ``body`` keeps the store's own object so it can be
    written back whole.
    """

    kind: SourceKind
    name: str
    namespace: str
    annotations: dict[str, str] = field(default_factory=dict)
    resource_version: str | None = None
    body: Any = field(default=None, repr=False, compare=False)

    @property
    def ref(self) -> SourceRef:
        return SourceRef(kind=self.kind, name=self.name)

    @property
    def current_version(self) -> str:
        """Content version recorded on the source; empty when never set."""
        return self.annotations.get(VERSION_ANNOTATIONS[self.kind], "")

    @property
    def deployments(self) -> list[str]:
        raw = self.annotations.get(DEPLOYMENTS_ANNOTATION, "")
        return [entry for entry in raw.split(DEPLOYMENTS_SEPARATOR) if entry]

    def add_deployment(self, deployment_name: str) -> bool:
        """
        Record a referencing deployment in the ``deployments`` annotation.

        Returns:
            True if the annotation changed, False if the name was already listed
        """
        current = self.deployments
        if deployment_name in current:
            return False
        current.append(deployment_name)
        self.annotations[DEPLOYMENTS_ANNOTATION] = DEPLOYMENTS_SEPARATOR.join(current)
        return True
