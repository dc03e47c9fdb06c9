"""
Domain Errors

Every error carries a machine-readable ``code`` that the presentation
layer returns to clients together with the message and details.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for domain errors."""

    code = "DomainError"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidQuerySyntaxError(DomainError):
    """Raised when a device query cannot be parsed or violates the allow-list."""

    code = "InvalidQuerySyntax"

    def __init__(
        self, query: Any, reason: str, details: Optional[Dict[str, Any]] = None
    ):
        self.query = query
        self.reason = reason
        super().__init__(
            f"Invalid query syntax: {reason}",
            {"query": query, "reason": reason, **(details or {})},
        )


class DeviceValidationError(DomainError):
    """Raised when a device payload is not acceptable."""

    code = "InvalidDevice"


class DeviceNotFoundError(DomainError):
    """Raised when a device cannot be found in the registry."""

    code = "NotFound"

    def __init__(self, device_id: str, details: Optional[Dict[str, Any]] = None):
        self.device_id = device_id
        super().__init__(
            f"Device with ID {device_id} not found",
            {"device_id": device_id, **(details or {})},
        )


class DeviceConflictError(DomainError):
    """Raised when the registry reports an etag or identity conflict."""

    code = "Conflict"


class RegistryUnavailableError(DomainError):
    """Raised when the device registry cannot be reached or is overloaded."""

    code = "UpstreamUnavailable"


class RegistryOperationError(DomainError):
    """Raised when the device registry rejects or fails an operation."""

    code = "UpstreamError"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        *,
        client_error: bool = False,
    ):
        self.client_error = client_error
        super().__init__(message, details)
