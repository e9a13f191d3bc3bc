"""
AdmissionReview codec.

Decodes AdmissionReview requests and the Deployment they carry, and encodes
AdmissionReview responses. The codec is constructed once at startup and
handed to the webhook handler; it holds no per-request state.
"""

import base64
import json

from pydantic import ValidationError

from config_version_webhook.constants import (
    ADMISSION_API_VERSION,
    ADMISSION_KIND,
    ERROR_MISSING_REQUEST,
    PATCH_TYPE_JSON_PATCH,
)
from config_version_webhook.errors import AdmissionDecodeError
from config_version_webhook.models.admission import (
    AdmissionRequest,
    AdmissionResponse,
    AdmissionReview,
    Status,
)
from config_version_webhook.models.workload import Deployment


class AdmissionCodec:
    """Translates between AdmissionReview JSON and webhook models."""

    def __init__(
        self,
        api_version: str = ADMISSION_API_VERSION,
        patch_type: str = PATCH_TYPE_JSON_PATCH,
    ):
        self.api_version = api_version
        self.patch_type = patch_type

    def decode_review(self, body: bytes) -> AdmissionReview:
        """
        Decode an AdmissionReview request body.

        Raises:
            AdmissionDecodeError: If the body is not an AdmissionReview with a request
        """
        try:
            review = AdmissionReview.model_validate(json.loads(body))
        except (ValueError, ValidationError) as e:
            raise AdmissionDecodeError(f"Can't decode body: {e}", cause=e) from e

        if review.request is None:
            raise AdmissionDecodeError(ERROR_MISSING_REQUEST)
        return review

    def decode_deployment(self, request: AdmissionRequest) -> Deployment:
        """
        Decode the Deployment carried by an admission request.

        The namespace and name fall back to the request's when the object
        omits them, as it does on CREATE in a defaulted namespace.

        Raises:
            AdmissionDecodeError: If the object is missing or not a Deployment
        """
        if request.object is None:
            raise AdmissionDecodeError("admission request carries no object")

        try:
            deployment = Deployment.model_validate(request.object)
        except ValidationError as e:
            raise AdmissionDecodeError(
                f"Could not unmarshal raw object: {e}", cause=e
            ) from e

        if not deployment.metadata.namespace:
            deployment.metadata.namespace = request.namespace
        if not deployment.metadata.name:
            deployment.metadata.name = request.name
        return deployment

    def allow(self, uid: str, patch: bytes) -> AdmissionResponse:
        """Build an allowing response carrying a JSON Patch."""
        return AdmissionResponse(
            uid=uid,
            allowed=True,
            patch=base64.b64encode(patch).decode("ascii"),
            patch_type=self.patch_type,
        )

    def error(self, uid: str, message: str) -> AdmissionResponse:
        """Build a response reporting a failure; no patch, not allowed."""
        return AdmissionResponse(uid=uid, allowed=False, status=Status(message=message))

    def encode_review(self, response: AdmissionResponse) -> bytes:
        """Wrap a response in an AdmissionReview and serialize it."""
        review = AdmissionReview(
            api_version=self.api_version, kind=ADMISSION_KIND, response=response
        )
        return review.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
