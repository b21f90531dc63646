"""Custom exceptions for the CloudWatch Events custom resources.

Every error a reconciler can hit is terminal for the invocation; these
classes carry enough detail to be logged and reported back to
CloudFormation as the response ``Reason``.
"""

from __future__ import annotations

from typing import Any


class CustomResourceError(Exception):
    """Base exception for all custom resource errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.error_code = error_code

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class UnknownRequestTypeError(CustomResourceError):
    """Raised when CloudFormation sends a RequestType we do not handle."""

    def __init__(self, request_type: Any, **kwargs):
        super().__init__(f"Unknown RequestType provided: {request_type}", **kwargs)
        self.request_type = request_type
        self.details["request_type"] = request_type


class TransportError(CustomResourceError):
    """Raised when a CloudWatch Events API call itself fails."""

    def __init__(self, message: str, operation: str, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.details["operation"] = operation

    @classmethod
    def from_boto(cls, exc: Exception, operation: str) -> "TransportError":
        """Wrap a botocore ``ClientError`` or ``BotoCoreError``."""
        error_code = None
        response = getattr(exc, "response", None)
        if isinstance(response, dict):
            error_code = response.get("Error", {}).get("Code")
        return cls(str(exc), operation=operation, error_code=error_code)


class PartialEntryFailureError(CustomResourceError):
    """Raised when PutTargets/RemoveTargets reports failed entries."""

    def __init__(self, message: str, failed_entries: list[dict[str, Any]], **kwargs):
        super().__init__(message, **kwargs)
        self.failed_entries = failed_entries
        self.details["failed_entries"] = failed_entries


class InvalidStateValueError(CustomResourceError, ValueError):
    """Raised when a Rule ``State`` is neither ENABLED nor DISABLED."""

    def __init__(self, state: Any, **kwargs):
        super().__init__(
            f"Unknown 'State' value. Must be either 'ENABLED' or 'DISABLED', was '{state}'.",
            **kwargs,
        )
        self.state = state
        self.details["state"] = state


class PropertyValidationError(CustomResourceError, ValueError):
    """Raised when ResourceProperties cannot be parsed into a desired state."""

    def __init__(self, message: str, resource_kind: str, **kwargs):
        super().__init__(message, **kwargs)
        self.resource_kind = resource_kind
        self.details["resource_kind"] = resource_kind


class ConfigurationError(CustomResourceError):
    """Raised when handler configuration is invalid."""

    def __init__(self, message: str, config_key: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.config_key = config_key
        if config_key:
            self.details["config_key"] = config_key
