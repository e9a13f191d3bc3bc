"""
Models package - Pydantic models and value types for the webhook.

Defines data models for:
- AdmissionReview requests and responses
- The Deployment slice the webhook reads
- Configuration sources (config maps and secrets)
- JSON Patch operations
"""
