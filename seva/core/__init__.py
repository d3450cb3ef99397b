"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from seva.core.exceptions import (
    ApplicationException,
    DomainException,
    RepositoryException,
    ValidationException,
    ConflictException,
    ResourceNotFoundException,
    InvalidTransitionException,
    ConfigurationException,
    ExternalServiceException,
    AuthenticationException,
    StorageException,
    EmailRelayException,
)

__all__ = [
    "ApplicationException",
    "DomainException",
    "RepositoryException",
    "ValidationException",
    "ConflictException",
    "ResourceNotFoundException",
    "InvalidTransitionException",
    "ConfigurationException",
    "ExternalServiceException",
    "AuthenticationException",
    "StorageException",
    "EmailRelayException",
]
