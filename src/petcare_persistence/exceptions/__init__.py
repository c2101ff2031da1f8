"""
Custom exceptions for the petcare-persistence package.

This module defines the exception hierarchy shared by every storage adapter
and the persistence facade.
"""

from .core_exceptions import (  # Utility functions
    ConfigurationException,
    InvalidArgument,
    PetCareException,
    SchemaValidationException,
    StorageUnavailable,
    format_validation_errors,
    log_exception_context,
)

__all__ = [
    # Exception classes
    "PetCareException",
    "InvalidArgument",
    "SchemaValidationException",
    "StorageUnavailable",
    "ConfigurationException",
    # Utility functions
    "format_validation_errors",
    "log_exception_context",
]
