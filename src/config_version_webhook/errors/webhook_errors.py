"""
Webhook error hierarchy with categorization and user guidance.

Every error raised while handling an admission request derives from
WebhookError. The handler turns these into an AdmissionReview response
carrying a status message; none of them is fatal to the process.
"""


class WebhookError(Exception):
    """
    Base error class for all webhook-related exceptions.

    Provides categorization and user guidance for resolution.
    """

    def __init__(
        self,
        message: str,
        category: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize webhook error.

        Args:
            message: Human-readable error description
            category: Error category (request, kubernetes, serialization, configuration)
            user_action: What user should do to resolve the issue
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.user_action = user_action
        self.cause = cause

    def status_message(self) -> str:
        """Message placed in the admission response status."""
        return self.message

    def __str__(self) -> str:
        """Enhanced string representation with user guidance."""
        base_msg = super().__str__()
        if self.user_action:
            return f"{base_msg}\nAction required: {self.user_action}"
        return base_msg


class AdmissionDecodeError(WebhookError):
    """The admission request or the Deployment inside it could not be decoded."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(
            message=message,
            category="request",
            user_action="Check the MutatingWebhookConfiguration targets apps/v1 Deployments",
            cause=cause,
        )


class ResourceStoreError(WebhookError):
    """Error reading or writing a config map or secret through the Kubernetes API."""

    def __init__(
        self,
        operation: str,
        kind: str,
        name: str,
        namespace: str,
        status: int | None = None,
        reason: str | None = None,
        cause: Exception | None = None,
    ):
        message = f"Failed to {operation} {kind} '{name}' in namespace '{namespace}'"
        if status:
            message = f"{message}: HTTP {status}"
        if reason:
            message = f"{message} (reason: {reason})"

        super().__init__(
            message=message,
            category="kubernetes",
            user_action="Check the referenced source exists and the webhook's RBAC permissions",
            cause=cause,
        )
        self.operation = operation
        self.kind = kind
        self.name = name
        self.namespace = namespace
        self.status = status
        self.reason = reason

    @property
    def is_conflict(self) -> bool:
        return self.status == 409

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class PatchSerializationError(WebhookError):
    """The computed JSON Patch could not be serialized."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(
            message=f"Could not serialize patch: {message}",
            category="serialization",
            cause=cause,
        )


class ConfigurationError(WebhookError):
    """Error in webhook configuration."""

    def __init__(self, message: str, user_action: str | None = None):
        super().__init__(
            message=message,
            category="configuration",
            user_action=user_action or "Review and correct configuration",
        )
