"""
Constants used throughout the config version webhook.

This module defines all constant values used by the webhook including:
- Marker annotation prefixes for pod templates
- Back-reference and version annotations on config maps and secrets
- JSON Patch paths and admission envelope values
"""

# Source kinds a pod template volume can reference
KIND_CONFIG_MAP = "configmap"
KIND_SECRET = "secret"

# Marker annotation prefixes on the pod template ("<prefix>-<sourceName>")
CONFIG_MAP_MARKER_PREFIX = "ccm"
SECRET_MARKER_PREFIX = "cs"

MARKER_PREFIXES = {
    KIND_CONFIG_MAP: CONFIG_MAP_MARKER_PREFIX,
    KIND_SECRET: SECRET_MARKER_PREFIX,
}

# Annotations stored on the referenced config maps and secrets
DEPLOYMENTS_ANNOTATION = "deployments"
DEPLOYMENTS_SEPARATOR = ","
CONFIG_MAP_VERSION_ANNOTATION = "currentCustomConfigMapVersion"
SECRET_VERSION_ANNOTATION = "currentCustomSecretVersion"

VERSION_ANNOTATIONS = {
    KIND_CONFIG_MAP: CONFIG_MAP_VERSION_ANNOTATION,
    KIND_SECRET: SECRET_VERSION_ANNOTATION,
}

# JSON Patch targets inside an apps/v1 Deployment
POD_TEMPLATE_ANNOTATIONS_PATH = "/spec/template/metadata/annotations"

# Patch operation names (RFC 6902 subset emitted by the webhook)
OP_ADD = "add"
OP_REPLACE = "replace"
OP_REMOVE = "remove"

# Admission review envelope
ADMISSION_API_VERSION = "admission.k8s.io/v1"
ADMISSION_KIND = "AdmissionReview"
PATCH_TYPE_JSON_PATCH = "JSONPatch"

# Default webhook serving values
DEFAULT_WEBHOOK_PORT = 8443
DEFAULT_METRICS_PORT = 8081
DEFAULT_WEBHOOK_PATH = "/mutate"
DEFAULT_CERT_DIR = "/tmp/k8s-webhook-server/serving-certs"
DEFAULT_CONFLICT_RETRIES = 3

# Error message templates
ERROR_EMPTY_BODY = "empty body"
ERROR_MISSING_REQUEST = "admission review has no request"
