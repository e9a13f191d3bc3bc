"""
JSON Patch models.

PatchOperation is one RFC 6902 operation; only add, replace and remove are
ever produced. ContainerState records whether the pod template already
carried an annotations map when the request arrived, which decides how the
first added marker is written.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


class PatchOperation(BaseModel):
    """Single JSON Patch operation against the Deployment document."""

    model_config = {"frozen": True}

    op: Literal["add", "replace", "remove"] = Field(..., description="Operation")
    path: str = Field(..., description="JSON Pointer into the Deployment")
    value: Any = Field(None, description="New value (omitted for remove)")

    def to_dict(self) -> dict[str, Any]:
        if self.op == "remove":
            return {"op": self.op, "path": self.path}
        return {"op": self.op, "path": self.path, "value": self.value}


class ContainerState(Enum):
    """Whether the pod template annotations map existed before mutation."""

    CONTAINER_ABSENT = "absent"
    CONTAINER_PRESENT = "present"

    @classmethod
    def of(cls, annotations: dict[str, str] | None) -> "ContainerState":
        if annotations:
            return cls.CONTAINER_PRESENT
        return cls.CONTAINER_ABSENT
