"""
Utility functions and helper modules.

This module provides date handling, record id generation and configuration
management shared by the storage adapters.
"""

from .config import (
    BackendType,
    DatabaseURLValidator,
    EnvironmentConfig,
    LoggingConfigurator,
    LogLevel,
    PersistenceSettings,
)
from .datetime_utils import (
    get_current_utc,
    is_within_range,
    normalize_date_range,
    to_date,
    to_optional_date,
)
from .ids import generate_id

__all__ = [
    # DateTime utilities
    "get_current_utc",
    "to_date",
    "to_optional_date",
    "normalize_date_range",
    "is_within_range",
    # Ids
    "generate_id",
    # Configuration utilities
    "LogLevel",
    "BackendType",
    "EnvironmentConfig",
    "DatabaseURLValidator",
    "LoggingConfigurator",
    "PersistenceSettings",
]
