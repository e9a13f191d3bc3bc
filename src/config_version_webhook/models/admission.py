"""
AdmissionReview envelope models (admission.k8s.io/v1).

Field names follow the Kubernetes wire format through aliases; models are
populated by either name so tests can build them with snake_case.
"""

from typing import Any

from pydantic import BaseModel, Field

from config_version_webhook.constants import ADMISSION_API_VERSION, ADMISSION_KIND


class GroupVersionKind(BaseModel):
    model_config = {"populate_by_name": True, "extra": "ignore"}

    group: str = ""
    version: str = ""
    kind: str = ""


class UserInfo(BaseModel):
    """Identity of the client that sent the admitted request."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    username: str = ""
    groups: list[str] = Field(default_factory=list)


class AdmissionRequest(BaseModel):
    """The request half of an AdmissionReview."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    uid: str = Field(..., description="Unique request identifier, echoed back")
    kind: GroupVersionKind = Field(default_factory=GroupVersionKind)
    namespace: str = ""
    name: str = ""
    operation: str = ""
    object: dict[str, Any] | None = Field(
        None, description="Raw object being admitted"
    )
    user_info: UserInfo = Field(default_factory=UserInfo, alias="userInfo")


class Status(BaseModel):
    """Subset of metav1.Status used to report failures."""

    model_config = {"populate_by_name": True}

    message: str = ""


class AdmissionResponse(BaseModel):
    """The response half of an AdmissionReview."""

    model_config = {"populate_by_name": True}

    uid: str = ""
    allowed: bool = False
    patch: str | None = Field(None, description="Base64 encoded JSON Patch")
    patch_type: str | None = Field(None, alias="patchType")
    status: Status | None = None


class AdmissionReview(BaseModel):
    model_config = {"populate_by_name": True, "extra": "ignore"}

    api_version: str = Field(ADMISSION_API_VERSION, alias="apiVersion")
    kind: str = ADMISSION_KIND
    request: AdmissionRequest | None = None
    response: AdmissionResponse | None = None
