"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

Domain and application code raise these; the HTTP layer maps each kind to a
status code in one place (shared.api.middleware).
"""

from typing import Optional, Any


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""


class ValidationException(ApplicationException):
    """Exception for validation errors (missing priority, non-agent assignee, ...)."""


class ForbiddenException(ApplicationException):
    """Exception when the acting user may not operate on the target resource."""


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class InvalidTransitionException(DomainException):
    """Exception raised for an illegal or no-op ticket status change."""

    def __init__(
        self,
        current_status: Any,
        attempted_status: Any,
        message: Optional[str] = None
    ):
        self.current_status = current_status
        self.attempted_status = attempted_status
        current = getattr(current_status, "value", current_status)
        attempted = getattr(attempted_status, "value", attempted_status)
        super().__init__(
            message or f"Invalid status transition from {current} to {attempted}",
            {"current_status": current, "attempted_status": attempted}
        )


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class ExternalServiceException(ApplicationException):
    """Base exception for external service failures."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)


class SearchIndexException(ExternalServiceException):
    """Exception for search index projection failures."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("Search Index", message, details)
