"""
Configuration management utilities.

This module provides environment variable handling with type conversion,
database URL validation, logging configuration, and the settings value that
selects the active storage backend at application start.
"""

import logging
import logging.config
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import parse_qs, urlparse

from ..exceptions import ConfigurationException

DEFAULT_DATABASE_FILENAME = "petcare.db"
IN_MEMORY_SQLITE_URL = "sqlite+aiosqlite://"


class LogLevel(Enum):
    """Enumeration for log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BackendType(Enum):
    """Storage backends a :class:`~petcare_persistence.Persistence` can bind."""

    DOCUMENT = "document"
    RELATIONAL = "relational"


class EnvironmentConfig:
    """Utility class for handling environment variables with type conversion."""

    @staticmethod
    def get_str(
        key: str, default: Optional[str] = None, required: bool = False
    ) -> Optional[str]:
        """
        Get a string environment variable.

        Args:
            key: Environment variable key
            default: Default value if not found
            required: Whether the variable is required

        Returns:
            String value or default

        Raises:
            ConfigurationException: If required variable is missing
        """
        value = os.getenv(key, default)

        if required and value is None:
            raise ConfigurationException(
                f"Required environment variable '{key}' is not set", config_key=key
            )

        return value

    @staticmethod
    def get_int(
        key: str, default: Optional[int] = None, required: bool = False
    ) -> Optional[int]:
        """
        Get an integer environment variable.

        Raises:
            ConfigurationException: If required variable is missing or invalid
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigurationException(
                    f"Required environment variable '{key}' is not set",
                    config_key=key,
                )
            return default

        try:
            return int(value)
        except ValueError:
            raise ConfigurationException(
                f"Environment variable '{key}' must be an integer, got: {value}",
                config_key=key,
                config_value=value,
            )

    @staticmethod
    def get_bool(
        key: str, default: Optional[bool] = None, required: bool = False
    ) -> Optional[bool]:
        """
        Get a boolean environment variable.

        Raises:
            ConfigurationException: If required variable is missing
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigurationException(
                    f"Required environment variable '{key}' is not set",
                    config_key=key,
                )
            return default

        return value.lower() in ("true", "1", "yes", "on", "enabled")


class DatabaseURLValidator:
    """Utility class for validating database URLs."""

    SUPPORTED_DRIVERS = {
        "postgresql": ["postgresql", "postgresql+asyncpg"],
        "sqlite": ["sqlite", "sqlite+aiosqlite"],
    }

    @classmethod
    def validate_url(cls, url: str) -> Dict[str, Any]:
        """
        Validate a database URL and return parsed components.

        Args:
            url: Database URL to validate

        Returns:
            Dictionary with validation results and parsed components

        Raises:
            ConfigurationException: If URL is invalid
        """
        if not url:
            raise ConfigurationException("Database URL cannot be empty")

        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise ConfigurationException(f"Invalid URL format: {e}")

        if not parsed.scheme:
            raise ConfigurationException(
                "Database URL must include a scheme (e.g., sqlite+aiosqlite://)"
            )

        database_type = None
        for db_type, drivers in cls.SUPPORTED_DRIVERS.items():
            if parsed.scheme in drivers:
                database_type = db_type
                break

        if database_type is None:
            supported_list = []
            for drivers in cls.SUPPORTED_DRIVERS.values():
                supported_list.extend(drivers)
            raise ConfigurationException(
                f"Unsupported database driver '{parsed.scheme}'. Supported: {', '.join(supported_list)}",
                config_key="database_driver",
                config_value=parsed.scheme,
            )

        if database_type != "sqlite":
            if not parsed.hostname:
                raise ConfigurationException("Database URL must include a hostname")
            if not parsed.path.lstrip("/"):
                raise ConfigurationException(
                    "Database URL must include a database name"
                )

        return {
            "valid": True,
            "database_type": database_type,
            "scheme": parsed.scheme,
            "hostname": parsed.hostname,
            "port": parsed.port,
            "database": parsed.path.lstrip("/") if parsed.path else "",
            "username": parsed.username,
            "password": parsed.password,
            "query": dict(parse_qs(parsed.query)),
        }


class LoggingConfigurator:
    """Utility class for configuring logging."""

    DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @staticmethod
    def configure_basic_logging(
        level: Union[str, LogLevel] = LogLevel.INFO,
        format_string: Optional[str] = None,
        log_file: Optional[str] = None,
    ) -> None:
        """
        Configure basic logging for the application.

        Args:
            level: Logging level
            format_string: Custom format string
            log_file: Optional log file path
        """
        if isinstance(level, LogLevel):
            level = level.value

        basic_config_args: Dict[str, Any] = {
            "level": level,
            "format": format_string or LoggingConfigurator.DEFAULT_FORMAT,
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }
        if log_file:
            basic_config_args["filename"] = log_file
            basic_config_args["filemode"] = "a"

        logging.basicConfig(**basic_config_args)

    @staticmethod
    def configure_structured_logging(
        config_dict: Optional[Dict[str, Any]] = None,
        level: Union[str, LogLevel] = LogLevel.INFO,
    ) -> None:
        """
        Configure structured logging using a dictionary.

        Args:
            config_dict: Logging configuration dictionary
            level: Level for the package logger when using the default config
        """
        if config_dict:
            logging.config.dictConfig(config_dict)
            return

        if isinstance(level, LogLevel):
            level = level.value

        default_config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {"format": LoggingConfigurator.DEFAULT_FORMAT},
                "detailed": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s - %(message)s"
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": level,
                    "formatter": "standard",
                    "stream": "ext://sys.stdout",
                }
            },
            "loggers": {
                "petcare_persistence": {
                    "level": level,
                    "handlers": ["console"],
                    "propagate": False,
                }
            },
            "root": {"level": "WARNING", "handlers": ["console"]},
        }
        logging.config.dictConfig(default_config)


@dataclass
class PersistenceSettings:
    """
    Selects and configures the storage backend for one application run.

    Attributes:
        backend: Which adapter the facade binds
        data_dir: Directory for the document blobs (and the default SQLite
            file). ``None`` keeps everything in memory.
        database_url: Explicit SQLAlchemy URL for the relational backend
        echo: Whether to echo SQL statements
        pool_size: Connections kept by a PostgreSQL pool (SQLite ignores it)
        enforce_foreign_keys: Turn on SQLite foreign key enforcement so the
            declared ``ON DELETE CASCADE`` is applied by the engine
        log_level: Level for the package logger
    """

    backend: BackendType = BackendType.DOCUMENT
    data_dir: Optional[Path] = None
    database_url: Optional[str] = None
    echo: bool = False
    pool_size: int = 5
    enforce_foreign_keys: bool = True
    log_level: LogLevel = LogLevel.INFO

    def __post_init__(self) -> None:
        if isinstance(self.backend, str):
            try:
                self.backend = BackendType(self.backend.strip().lower())
            except ValueError:
                raise ConfigurationException(
                    f"Unknown storage backend '{self.backend}'",
                    config_key="backend",
                    config_value=self.backend,
                )
        if isinstance(self.log_level, str):
            try:
                self.log_level = LogLevel(self.log_level.strip().upper())
            except ValueError:
                raise ConfigurationException(
                    f"Unknown log level '{self.log_level}'",
                    config_key="log_level",
                    config_value=self.log_level,
                )
        if self.data_dir is not None and not isinstance(self.data_dir, Path):
            self.data_dir = Path(self.data_dir)
        if self.database_url:
            DatabaseURLValidator.validate_url(self.database_url)

    @property
    def resolved_database_url(self) -> str:
        """Database URL for the relational backend."""
        if self.database_url:
            return self.database_url
        if self.data_dir is not None:
            return f"sqlite+aiosqlite:///{self.data_dir / DEFAULT_DATABASE_FILENAME}"
        return IN_MEMORY_SQLITE_URL

    @classmethod
    def from_environment(cls, prefix: str = "PETCARE_") -> "PersistenceSettings":
        """
        Build settings from environment variables.

        Reads ``<prefix>BACKEND``, ``<prefix>DATA_DIR``, ``<prefix>DATABASE_URL``,
        ``<prefix>DB_ECHO``, ``<prefix>DB_POOL_SIZE``,
        ``<prefix>ENFORCE_FOREIGN_KEYS`` and
        ``<prefix>LOG_LEVEL``.
        """
        data_dir = EnvironmentConfig.get_str(f"{prefix}DATA_DIR")
        return cls(
            backend=EnvironmentConfig.get_str(
                f"{prefix}BACKEND", BackendType.DOCUMENT.value
            ),
            data_dir=Path(data_dir) if data_dir else None,
            database_url=EnvironmentConfig.get_str(f"{prefix}DATABASE_URL"),
            echo=EnvironmentConfig.get_bool(f"{prefix}DB_ECHO", False),
            pool_size=EnvironmentConfig.get_int(f"{prefix}DB_POOL_SIZE", 5),
            enforce_foreign_keys=EnvironmentConfig.get_bool(
                f"{prefix}ENFORCE_FOREIGN_KEYS", True
            ),
            log_level=EnvironmentConfig.get_str(
                f"{prefix}LOG_LEVEL", LogLevel.INFO.value
            ),
        )
