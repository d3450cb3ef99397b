"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries.
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
    """Exception for validation errors."""

    def __init__(self, message: str, errors: Optional[dict] = None):
        self.errors = errors or {}
        super().__init__(message, {"errors": self.errors} if self.errors else None)


class ConflictException(ApplicationException):
    """Exception when a write would violate a uniqueness rule."""


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
    """Exception raised when a status change is not in the transition table."""

    def __init__(self, entity: str, current: Any, requested: Any):
        self.entity = entity
        self.current = getattr(current, "value", current)
        self.requested = getattr(requested, "value", requested)
        super().__init__(
            f"{entity} cannot move from '{self.current}' to '{self.requested}'",
            {"entity": entity, "from": self.current, "to": self.requested}
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


class AuthenticationException(ExternalServiceException):
    """Exception for identity provider rejections, carrying a user-facing message."""

    def __init__(self, message: str, raw_error: Optional[str] = None):
        self.user_message = message
        self.raw_error = raw_error
        super().__init__("Identity Provider", message, {"raw_error": raw_error} if raw_error else None)


class StorageException(ExternalServiceException):
    """Exception for blob storage failures."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("Blob Storage", message, details)


class EmailRelayException(ExternalServiceException):
    """Exception for contact-form relay failures."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("Email Relay", message, details)
