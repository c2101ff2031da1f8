"""
Database connection and session management.

This module provides async SQLAlchemy engine configuration and session
management for the relational storage backend.
"""

from .connection import DatabaseConfig, close_engine, create_engine
from .session import SessionManager

__all__ = [
    # Connection utilities
    "DatabaseConfig",
    "create_engine",
    "close_engine",
    # Session management
    "SessionManager",
]
