"""
Storage adapters implementing the persistence contract.
"""

from .base import (
    APPOINTMENTS,
    HEALTH_RECORDS,
    PETS,
    PRODUCTS,
    UNKNOWN_PET_NAME,
    CascadeReport,
    CollectionSpec,
    StorageAdapter,
)
from .document import DocumentStoreAdapter
from .document_store import DocumentStore, FileDocumentStore, MemoryDocumentStore
from .relational import RelationalStoreAdapter

__all__ = [
    # Contract
    "StorageAdapter",
    "CascadeReport",
    "UNKNOWN_PET_NAME",
    "CollectionSpec",
    "PETS",
    "PRODUCTS",
    "HEALTH_RECORDS",
    "APPOINTMENTS",
    # Document backend
    "DocumentStoreAdapter",
    "DocumentStore",
    "MemoryDocumentStore",
    "FileDocumentStore",
    # Relational backend
    "RelationalStoreAdapter",
]
