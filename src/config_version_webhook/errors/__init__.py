"""
Error handling module for the config version webhook.

This module provides the error hierarchy used to report per-request
failures back through the admission response.
"""

from .webhook_errors import (
    AdmissionDecodeError,
    ConfigurationError,
    PatchSerializationError,
    ResourceStoreError,
    WebhookError,
)

__all__ = [
    "WebhookError",
    "AdmissionDecodeError",
    "ResourceStoreError",
    "PatchSerializationError",
    "ConfigurationError",
]
