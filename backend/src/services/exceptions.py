"""
Custom exceptions for service layer.

Provides specific exception types for business logic errors
that can be translated to appropriate HTTP responses.
"""

from datetime import datetime
from typing import Any, Optional


class ServiceError(Exception):
    """Base exception for service layer errors."""
    pass


class NotFoundError(ServiceError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found")


class TeamNotFoundError(NotFoundError):
    """Raised when a referenced team does not exist."""

    def __init__(self, identifier: Any):
        super().__init__("Team", identifier)


class EventNotFoundError(NotFoundError):
    """Raised when a referenced event does not exist."""

    def __init__(self, identifier: Any):
        super().__init__("Event", identifier)


class AccessDeniedError(ServiceError):
    """
    Raised when the caller's team set does not cover the target.

    resource is "team" for the create-time membership check and "event"
    for operations on an existing event.
    """

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"Access denied to {resource} {identifier}")


class ConflictError(ServiceError):
    """Raised when an operation conflicts with existing state."""

    def __init__(
        self,
        message: str,
        server_updated_at: Optional[datetime] = None,
        client_updated_at: Optional[datetime] = None,
    ):
        self.message = message
        self.server_updated_at = server_updated_at
        self.client_updated_at = client_updated_at
        super().__init__(message)


class ValidationError(ServiceError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)
