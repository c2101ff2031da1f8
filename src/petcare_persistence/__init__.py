"""
PetCare Persistence Package

Async storage layer for a pet-care application: pets, the products applied to
them, their health records and their appointments.

The same operation set is served by two interchangeable backends:

- A document store keeping each collection as one JSON array (in memory or as
  files on disk)
- A relational store on SQLAlchemy's asyncio extension (SQLite via aiosqlite,
  or PostgreSQL via asyncpg)

Quick Start:
    >>> from petcare_persistence import PersistenceSettings, create_persistence
    >>> from petcare_persistence.schemas import PetSchema, ProductSchema
    >>> from petcare_persistence.utils import LoggingConfigurator

    >>> LoggingConfigurator.configure_structured_logging(level="INFO")

    >>> settings = PersistenceSettings(backend="document", data_dir="./data")
    >>> async with create_persistence(settings) as persistence:
    ...     pet = await persistence.save_pet(PetSchema.new(name="Rex", species="Dog"))
    ...     await persistence.save_product(
    ...         ProductSchema.new(name="Vermífugo", type="Medicamento", pet_id=pet.id)
    ...     )
    ...     products = await persistence.get_products_by_pet_id(pet.id)
    ...     products[0].pet_name
    'Rex'

Requirements:
    - Python 3.11+
    - SQLAlchemy 2.0+
    - Pydantic 2.5+
"""

__version__ = "0.1.0"
__license__ = "MIT"

from . import adapters, database, exceptions, models, schemas, utils

# Convenience imports for common usage patterns
from .adapters import DocumentStoreAdapter, RelationalStoreAdapter, StorageAdapter
from .exceptions import (
    InvalidArgument,
    PetCareException,
    SchemaValidationException,
    StorageUnavailable,
)
from .persistence import Persistence, create_adapter, create_persistence
from .schemas import UNKNOWN_PET_NAME
from .utils.config import BackendType, PersistenceSettings

__all__ = [
    # Version and metadata
    "__version__",
    "__license__",
    # Core modules
    "adapters",
    "database",
    "exceptions",
    "models",
    "schemas",
    "utils",
    # Convenience imports
    "Persistence",
    "create_persistence",
    "create_adapter",
    "PersistenceSettings",
    "BackendType",
    "StorageAdapter",
    "DocumentStoreAdapter",
    "RelationalStoreAdapter",
    "PetCareException",
    "InvalidArgument",
    "SchemaValidationException",
    "StorageUnavailable",
    "UNKNOWN_PET_NAME",
]
