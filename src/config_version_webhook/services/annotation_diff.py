"""
Annotation diff engine.

Compares the pod template's current annotations with the sources it mounts
and splits the result into three disjoint maps: annotations to keep,
markers to add and stale markers to remove.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from config_version_webhook.models.sources import SourceRef, is_marker_key


@dataclass
class AnnotationDiff:
    """Disjoint retain/add/remove maps for the pod template annotations."""

    retain: dict[str, str] = field(default_factory=dict)
    add: dict[str, str] = field(default_factory=dict)
    remove: dict[str, str] = field(default_factory=dict)

    def apply(self, annotations: Mapping[str, str] | None) -> dict[str, str]:
        """Annotations after the diff takes effect."""
        result = dict(annotations or {})
        result.update(self.retain)
        result.update(self.add)
        for key in self.remove:
            result.pop(key, None)
        return result


def diff_annotations(
    existing: Mapping[str, str] | None,
    resolved: Mapping[SourceRef, str],
    mounted: Iterable[SourceRef],
) -> AnnotationDiff:
    """
    Compute the annotation changes for one admission request.

    Args:
        existing: Current pod template annotations (None when absent)
        resolved: Freshly resolved sources and their versions
        mounted: Every source the pod template currently mounts

    Returns:
        AnnotationDiff where
        - retain holds non-marker annotations and markers of still-mounted
          sources that were not re-resolved,
        - add holds a marker for each resolved source,
        - remove holds markers of sources that are no longer mounted.
    """
    mounted_keys = {source.marker_key for source in mounted}
    diff = AnnotationDiff(
        add={source.marker_key: version for source, version in resolved.items()}
    )

    for key, value in (existing or {}).items():
        if key in diff.add:
            continue
        if not is_marker_key(key) or key in mounted_keys:
            diff.retain[key] = value
        else:
            diff.remove[key] = value

    return diff
