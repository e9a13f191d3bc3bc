"""
Unit tests for JSON Patch construction and serialization.
"""

import json

import pytest

from config_version_webhook.errors import PatchSerializationError
from config_version_webhook.models.patch import ContainerState, PatchOperation
from config_version_webhook.services.annotation_diff import AnnotationDiff
from config_version_webhook.services.patch_builder import (
    annotation_path,
    build_patch,
    escape_pointer_token,
    serialize_patch,
)

ANNOTATIONS = "/spec/template/metadata/annotations"


def _dicts(patch):
    return [operation.to_dict() for operation in patch]


class TestBuildPatch:
    """Tests for build_patch."""

    def test_first_add_creates_container(self):
        diff = AnnotationDiff(add={"ccm-app-cfg": "v3"})

        patch = build_patch(diff, ContainerState.CONTAINER_ABSENT)

        assert _dicts(patch) == [
            {"op": "add", "path": ANNOTATIONS, "value": {"ccm-app-cfg": "v3"}}
        ]

    def test_later_adds_become_replace(self):
        diff = AnnotationDiff(add={"cs-tls": "t1", "ccm-app-cfg": "v3"})

        patch = build_patch(diff, ContainerState.CONTAINER_ABSENT)

        assert _dicts(patch) == [
            {"op": "add", "path": ANNOTATIONS, "value": {"ccm-app-cfg": "v3"}},
            {"op": "replace", "path": f"{ANNOTATIONS}/cs-tls", "value": "t1"},
        ]

    def test_adds_with_existing_container_are_replace(self):
        diff = AnnotationDiff(add={"ccm-new-cfg": "v2"})

        patch = build_patch(diff, ContainerState.CONTAINER_PRESENT)

        assert _dicts(patch) == [
            {"op": "replace", "path": f"{ANNOTATIONS}/ccm-new-cfg", "value": "v2"}
        ]

    def test_operation_order_is_replace_add_remove(self):
        diff = AnnotationDiff(
            retain={"owner": "team-a", "ccm-app-cfg": "v1"},
            add={"cs-tls": "t1"},
            remove={"ccm-gone": "v0", "ccm-alpha": "v0"},
        )

        patch = build_patch(diff, ContainerState.CONTAINER_PRESENT)

        ops = [operation.op for operation in patch]
        assert ops == ["replace", "replace", "replace", "remove", "remove"]
        assert [operation.path for operation in patch] == [
            f"{ANNOTATIONS}/ccm-app-cfg",
            f"{ANNOTATIONS}/owner",
            f"{ANNOTATIONS}/cs-tls",
            f"{ANNOTATIONS}/ccm-alpha",
            f"{ANNOTATIONS}/ccm-gone",
        ]

    def test_container_add_precedes_removes(self):
        diff = AnnotationDiff(add={"ccm-a": "1"}, remove={"ccm-b": "0"})

        patch = build_patch(diff, ContainerState.CONTAINER_ABSENT)

        assert [operation.op for operation in patch] == ["add", "remove"]

    def test_remove_has_no_value(self):
        patch = build_patch(
            AnnotationDiff(remove={"ccm-old": "v1"}), ContainerState.CONTAINER_PRESENT
        )

        assert _dicts(patch) == [{"op": "remove", "path": f"{ANNOTATIONS}/ccm-old"}]

    def test_deterministic_for_equal_input(self):
        retain = {f"key-{i}": str(i) for i in (5, 1, 9, 3)}
        first = build_patch(
            AnnotationDiff(retain=dict(retain)), ContainerState.CONTAINER_PRESENT
        )
        second = build_patch(
            AnnotationDiff(retain=dict(reversed(list(retain.items())))),
            ContainerState.CONTAINER_PRESENT,
        )

        assert first == second

    def test_empty_diff(self):
        assert build_patch(AnnotationDiff(), ContainerState.CONTAINER_ABSENT) == []


class TestPointerEscaping:
    """Annotation keys with '/' or '~' must be escaped in paths."""

    def test_escape_pointer_token(self):
        assert escape_pointer_token("plain") == "plain"
        assert escape_pointer_token("a/b") == "a~1b"
        assert escape_pointer_token("a~b") == "a~0b"
        assert escape_pointer_token("~/") == "~0~1"

    def test_annotation_path(self):
        assert (
            annotation_path("kubectl.kubernetes.io/restartedAt")
            == f"{ANNOTATIONS}/kubectl.kubernetes.io~1restartedAt"
        )


class TestSerializePatch:
    """Tests for serialize_patch."""

    def test_serializes_json_array(self):
        patch = [
            PatchOperation(op="replace", path=f"{ANNOTATIONS}/a", value="1"),
            PatchOperation(op="remove", path=f"{ANNOTATIONS}/b"),
        ]

        assert json.loads(serialize_patch(patch)) == [
            {"op": "replace", "path": f"{ANNOTATIONS}/a", "value": "1"},
            {"op": "remove", "path": f"{ANNOTATIONS}/b"},
        ]

    def test_empty_patch_is_empty_array(self):
        assert serialize_patch([]) == b"[]"

    def test_unserializable_value_raises(self):
        patch = [PatchOperation(op="replace", path=f"{ANNOTATIONS}/a", value=object())]

        with pytest.raises(PatchSerializationError) as exc_info:
            serialize_patch(patch)

        assert "Could not serialize patch" in str(exc_info.value)
