"""
Persistence facade.

The application builds one :class:`Persistence` at start-up, usually through
:func:`create_persistence`, and passes it to whatever needs storage. The
facade forwards every call to the bound adapter unchanged, so switching
backends is a configuration change only.

Example:
    >>> settings = PersistenceSettings(backend="relational", data_dir="./data")
    >>> async with create_persistence(settings) as persistence:
    ...     pet = await persistence.save_pet(PetSchema.new(name="Rex", species="Dog"))
    ...     await persistence.get_pets()
"""

import logging
from typing import List, Optional

from .adapters import (
    DocumentStoreAdapter,
    FileDocumentStore,
    MemoryDocumentStore,
    RelationalStoreAdapter,
    StorageAdapter,
)
from .adapters.base import RecordInput
from .database import SessionManager, create_engine
from .schemas import (
    AppointmentResponse,
    AppointmentSchema,
    HealthRecordResponse,
    HealthRecordSchema,
    PetSchema,
    ProductResponse,
    ProductSchema,
)
from .utils.config import BackendType, PersistenceSettings
from .utils.datetime_utils import DateLike

logger = logging.getLogger(__name__)


class Persistence:
    """Single entry point binding exactly one storage adapter."""

    def __init__(self, adapter: StorageAdapter):
        self.adapter = adapter

    async def initialize(self) -> None:
        await self.adapter.initialize()

    async def close(self) -> None:
        await self.adapter.close()

    async def __aenter__(self) -> "Persistence":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Pets
    async def get_pets(self) -> List[PetSchema]:
        return await self.adapter.get_pets()

    async def get_pet_by_id(self, pet_id: str) -> Optional[PetSchema]:
        return await self.adapter.get_pet_by_id(pet_id)

    async def save_pet(self, pet: RecordInput) -> PetSchema:
        return await self.adapter.save_pet(pet)

    async def delete_pet(self, pet_id: str) -> bool:
        return await self.adapter.delete_pet(pet_id)

    # Products
    async def get_products(self) -> List[ProductResponse]:
        return await self.adapter.get_products()

    async def get_product_by_id(self, product_id: str) -> Optional[ProductResponse]:
        return await self.adapter.get_product_by_id(product_id)

    async def save_product(self, product: RecordInput) -> ProductSchema:
        return await self.adapter.save_product(product)

    async def delete_product(self, product_id: str) -> bool:
        return await self.adapter.delete_product(product_id)

    async def get_products_by_pet_id(self, pet_id: str) -> List[ProductResponse]:
        return await self.adapter.get_products_by_pet_id(pet_id)

    # Health records
    async def get_health_records(self) -> List[HealthRecordResponse]:
        return await self.adapter.get_health_records()

    async def get_health_record_by_id(
        self, record_id: str
    ) -> Optional[HealthRecordResponse]:
        return await self.adapter.get_health_record_by_id(record_id)

    async def save_health_record(self, record: RecordInput) -> HealthRecordSchema:
        return await self.adapter.save_health_record(record)

    async def delete_health_record(self, record_id: str) -> bool:
        return await self.adapter.delete_health_record(record_id)

    async def get_health_records_by_pet_id(
        self, pet_id: str
    ) -> List[HealthRecordResponse]:
        return await self.adapter.get_health_records_by_pet_id(pet_id)

    # Appointments
    async def get_appointments(self) -> List[AppointmentResponse]:
        return await self.adapter.get_appointments()

    async def get_appointment_by_id(
        self, appointment_id: str
    ) -> Optional[AppointmentResponse]:
        return await self.adapter.get_appointment_by_id(appointment_id)

    async def save_appointment(self, appointment: RecordInput) -> AppointmentSchema:
        return await self.adapter.save_appointment(appointment)

    async def delete_appointment(self, appointment_id: str) -> bool:
        return await self.adapter.delete_appointment(appointment_id)

    async def get_appointments_by_pet_id(
        self, pet_id: str
    ) -> List[AppointmentResponse]:
        return await self.adapter.get_appointments_by_pet_id(pet_id)

    async def get_appointments_by_date_range(
        self, start: DateLike, end: DateLike
    ) -> List[AppointmentResponse]:
        return await self.adapter.get_appointments_by_date_range(start, end)

    def __repr__(self) -> str:
        return f"<Persistence(adapter={self.adapter!r})>"


def create_adapter(settings: PersistenceSettings) -> StorageAdapter:
    """
    Build the adapter described by ``settings``.

    Args:
        settings: Backend selection and medium configuration

    Returns:
        A document or relational storage adapter, not yet initialized

    Raises:
        ConfigurationException: If the database URL is invalid
    """
    if settings.backend is BackendType.RELATIONAL:
        if settings.data_dir is not None and not settings.database_url:
            settings.data_dir.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            settings.resolved_database_url,
            echo=settings.echo,
            pool_size=settings.pool_size,
            enforce_foreign_keys=settings.enforce_foreign_keys,
        )
        return RelationalStoreAdapter(SessionManager(engine))

    if settings.data_dir is not None:
        return DocumentStoreAdapter(FileDocumentStore(settings.data_dir))
    return DocumentStoreAdapter(MemoryDocumentStore())


def create_persistence(settings: Optional[PersistenceSettings] = None) -> Persistence:
    """
    Build the persistence facade for one application run.

    Args:
        settings: Backend configuration; read from the environment when omitted

    Returns:
        Facade bound to the configured adapter
    """
    if settings is None:
        settings = PersistenceSettings.from_environment()

    logging.getLogger("petcare_persistence").setLevel(settings.log_level.value)

    adapter = create_adapter(settings)
    logger.info(f"Persistence bound to {adapter.backend_name}")
    return Persistence(adapter)
