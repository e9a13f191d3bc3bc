"""
Patch builder.

Turns an AnnotationDiff into the ordered JSON Patch returned to the API
server. Operations are grouped replace, then add, then remove; keys are
sorted inside each group so equal input always yields an identical patch.
"""

import json

from config_version_webhook.constants import (
    OP_ADD,
    OP_REMOVE,
    OP_REPLACE,
    POD_TEMPLATE_ANNOTATIONS_PATH,
)
from config_version_webhook.errors import PatchSerializationError
from config_version_webhook.models.patch import ContainerState, PatchOperation
from config_version_webhook.services.annotation_diff import AnnotationDiff


def escape_pointer_token(token: str) -> str:
    """Escape a JSON Pointer reference token (RFC 6901)."""
    return token.replace("~", "~0").replace("/", "~1")


def annotation_path(key: str) -> str:
    return f"{POD_TEMPLATE_ANNOTATIONS_PATH}/{escape_pointer_token(key)}"


def build_patch(
    diff: AnnotationDiff, container_state: ContainerState
) -> list[PatchOperation]:
    """
    Build the ordered patch operations for a diff.

    Args:
        diff: Retain/add/remove maps from the diff engine
        container_state: Whether the pod template had annotations before
            this request. When absent, the first added marker creates the
            map with a single ``add``; any later marker is a ``replace``.

    Returns:
        Operations ordered replace, add, remove
    """
    patch = [
        PatchOperation(op=OP_REPLACE, path=annotation_path(key), value=diff.retain[key])
        for key in sorted(diff.retain)
    ]

    container_pending = container_state is ContainerState.CONTAINER_ABSENT
    for key in sorted(diff.add):
        if container_pending:
            patch.append(
                PatchOperation(
                    op=OP_ADD,
                    path=POD_TEMPLATE_ANNOTATIONS_PATH,
                    value={key: diff.add[key]},
                )
            )
            container_pending = False
        else:
            patch.append(
                PatchOperation(op=OP_REPLACE, path=annotation_path(key), value=diff.add[key])
            )

    patch.extend(
        PatchOperation(op=OP_REMOVE, path=annotation_path(key))
        for key in sorted(diff.remove)
    )
    return patch


def serialize_patch(patch: list[PatchOperation]) -> bytes:
    """
    Encode patch operations as a JSON array.

    Raises:
        PatchSerializationError: If an operation value is not JSON serializable
    """
    try:
        return json.dumps([operation.to_dict() for operation in patch]).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise PatchSerializationError(str(e), cause=e) from e
