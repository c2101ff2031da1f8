"""
Pytest configuration and fixtures for petcare-persistence tests.

This module provides the storage adapters under test (document store in
memory and on disk, relational store on a temporary SQLite file) together
with factory classes producing valid record data.
"""

from datetime import date
from pathlib import Path
from typing import Any, AsyncGenerator, Dict

import pytest
import pytest_asyncio

from petcare_persistence.adapters import (
    DocumentStoreAdapter,
    FileDocumentStore,
    MemoryDocumentStore,
    RelationalStoreAdapter,
    StorageAdapter,
)
from petcare_persistence.database import SessionManager, create_engine
from petcare_persistence.schemas import (
    AppointmentSchema,
    HealthRecordSchema,
    PetSchema,
    ProductSchema,
)
from petcare_persistence.utils.ids import generate_id


def sqlite_url(directory: Path) -> str:
    return f"sqlite+aiosqlite:///{directory / 'petcare.db'}"


async def build_relational_adapter(
    directory: Path, enforce_foreign_keys: bool = True
) -> RelationalStoreAdapter:
    directory.mkdir(parents=True, exist_ok=True)
    engine = create_engine(
        sqlite_url(directory), enforce_foreign_keys=enforce_foreign_keys
    )
    adapter = RelationalStoreAdapter(SessionManager(engine))
    await adapter.initialize()
    return adapter


@pytest.fixture
def memory_store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest_asyncio.fixture
async def document_adapter(
    memory_store: MemoryDocumentStore,
) -> AsyncGenerator[DocumentStoreAdapter, None]:
    """Document adapter over an in-memory medium."""
    adapter = DocumentStoreAdapter(memory_store)
    await adapter.initialize()
    yield adapter
    await adapter.close()


@pytest_asyncio.fixture
async def relational_adapter(tmp_path: Path) -> AsyncGenerator[RelationalStoreAdapter, None]:
    """Relational adapter over a fresh SQLite file with foreign keys enforced."""
    adapter = await build_relational_adapter(tmp_path)
    yield adapter
    await adapter.close()


@pytest_asyncio.fixture(params=["document", "file", "relational"])
async def adapter(request, tmp_path: Path) -> AsyncGenerator[StorageAdapter, None]:
    """Every backend, so one behavioural suite covers all of them."""
    if request.param == "document":
        storage: StorageAdapter = DocumentStoreAdapter(MemoryDocumentStore())
        await storage.initialize()
    elif request.param == "file":
        storage = DocumentStoreAdapter(FileDocumentStore(tmp_path / "blobs"))
        await storage.initialize()
    else:
        storage = await build_relational_adapter(tmp_path)

    yield storage
    await storage.close()


class PetFactory:
    """Factory for creating pet test data."""

    @staticmethod
    def build_data(**kwargs: Any) -> Dict[str, Any]:
        defaults = {
            "id": generate_id("pet"),
            "name": "Rex",
            "species": "Dog",
            "breed": "Labrador",
            "dob": date(2020, 5, 1),
            "notes": None,
        }
        defaults.update(kwargs)
        return defaults

    @staticmethod
    def build(**kwargs: Any) -> PetSchema:
        return PetSchema(**PetFactory.build_data(**kwargs))


class ProductFactory:
    """Factory for creating product test data."""

    @staticmethod
    def build_data(**kwargs: Any) -> Dict[str, Any]:
        defaults = {
            "id": generate_id("product"),
            "name": "Flea drops",
            "type": "Medicamento",
            "application_date": date(2024, 3, 1),
            "expiry_date": date(2024, 6, 1),
            "notes": None,
            "pet_id": None,
        }
        defaults.update(kwargs)
        return defaults

    @staticmethod
    def build(**kwargs: Any) -> ProductSchema:
        return ProductSchema(**ProductFactory.build_data(**kwargs))


class HealthRecordFactory:
    """Factory for creating health record test data."""

    @staticmethod
    def build_data(pet_id: str, **kwargs: Any) -> Dict[str, Any]:
        defaults = {
            "id": generate_id("health"),
            "type": "Rabies vaccine",
            "date": date(2024, 3, 10),
            "dose": "1 ml",
            "expiry_date": date(2025, 3, 10),
            "notes": None,
            "pet_id": pet_id,
        }
        defaults.update(kwargs)
        return defaults

    @staticmethod
    def build(pet_id: str, **kwargs: Any) -> HealthRecordSchema:
        return HealthRecordSchema(**HealthRecordFactory.build_data(pet_id, **kwargs))


class AppointmentFactory:
    """Factory for creating appointment test data."""

    @staticmethod
    def build_data(**kwargs: Any) -> Dict[str, Any]:
        defaults = {
            "id": generate_id("appointment"),
            "type": "Check-up",
            "date": date(2024, 4, 15),
            "time": "14:30",
            "dose": None,
            "expiry_date": None,
            "notes": None,
            "pet_id": None,
        }
        defaults.update(kwargs)
        return defaults

    @staticmethod
    def build(**kwargs: Any) -> AppointmentSchema:
        return AppointmentSchema(**AppointmentFactory.build_data(**kwargs))


@pytest.fixture
def pet_factory():
    return PetFactory


@pytest.fixture
def product_factory():
    return ProductFactory


@pytest.fixture
def health_record_factory():
    return HealthRecordFactory


@pytest.fixture
def appointment_factory():
    return AppointmentFactory
