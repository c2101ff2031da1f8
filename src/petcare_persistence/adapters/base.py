"""
Storage adapter contract.

:class:`StorageAdapter` is the operation set every backend exposes. The
public coroutines live here and carry the behaviour both backends must share:

- ``save_*`` needs a non-empty ``id``, validates the record against its
  schema, checks that a non-empty ``pet_id`` names an existing pet, then
  upserts and returns the stored (non-enriched) record.
- ``delete_*`` is idempotent and always returns ``True``.
- ``get_*_by_id`` returns ``None`` when nothing matches.
- Reads of products, health records and appointments return ``*Response``
  records carrying ``pet_name``; absent or dangling references read as
  :data:`~petcare_persistence.schemas.UNKNOWN_PET_NAME`.
- Deleting a pet removes its dependents best effort: cleanup failures land in
  a :class:`CascadeReport` and are logged, never raised.

Backends implement the underscore-prefixed storage primitives.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import (
    Any,
    ClassVar,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    Union,
)

from pydantic import BaseModel, ValidationError

from ..exceptions import (
    InvalidArgument,
    SchemaValidationException,
    format_validation_errors,
    log_exception_context,
)
from ..schemas import (
    UNKNOWN_PET_NAME,
    AppointmentResponse,
    AppointmentSchema,
    EnrichedResponse,
    HealthRecordResponse,
    HealthRecordSchema,
    PetSchema,
    ProductResponse,
    ProductSchema,
    RecordSchema,
)
from ..utils.datetime_utils import DateLike, normalize_date_range

logger = logging.getLogger(__name__)

PETS = "pets"
PRODUCTS = "products"
HEALTH_RECORDS = "healthRecords"
APPOINTMENTS = "appointments"

RecordInput = Union[RecordSchema, Mapping[str, Any]]


@dataclass(frozen=True)
class CollectionSpec:
    """Static description of one record collection."""

    name: str
    label: str
    schema: Type[RecordSchema]
    response: Optional[Type[EnrichedResponse]] = None

    @property
    def is_dependent(self) -> bool:
        """Whether records of this collection reference a pet."""
        return self.response is not None


PET_SPEC = CollectionSpec(PETS, "pet", PetSchema)
PRODUCT_SPEC = CollectionSpec(PRODUCTS, "product", ProductSchema, ProductResponse)
HEALTH_RECORD_SPEC = CollectionSpec(
    HEALTH_RECORDS, "health record", HealthRecordSchema, HealthRecordResponse
)
APPOINTMENT_SPEC = CollectionSpec(
    APPOINTMENTS, "appointment", AppointmentSchema, AppointmentResponse
)

COLLECTIONS: Dict[str, CollectionSpec] = {
    spec.name: spec
    for spec in (PET_SPEC, PRODUCT_SPEC, HEALTH_RECORD_SPEC, APPOINTMENT_SPEC)
}
DEPENDENT_SPECS: Tuple[CollectionSpec, ...] = (
    PRODUCT_SPEC,
    HEALTH_RECORD_SPEC,
    APPOINTMENT_SPEC,
)


@dataclass
class CascadeReport:
    """Outcome of removing a pet's dependent records."""

    pet_id: str
    removed: Dict[str, int] = field(default_factory=dict)
    failures: Dict[str, Exception] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        """True when every dependent collection was cleaned up."""
        return not self.failures

    @property
    def total_removed(self) -> int:
        return sum(self.removed.values())


class StorageAdapter(ABC):
    """Abstract base class for every storage backend."""

    backend_name: ClassVar[str] = "StorageAdapter"

    async def initialize(self) -> None:
        """Prepare the medium. Safe to call more than once."""

    async def close(self) -> None:
        """Release resources held by the medium."""

    # ------------------------------------------------------------------
    # Storage primitives
    # ------------------------------------------------------------------

    @abstractmethod
    async def _list(self, spec: CollectionSpec) -> List[RecordSchema]:
        """Return every record of a collection, enriched for dependents."""

    @abstractmethod
    async def _get(
        self, spec: CollectionSpec, record_id: str
    ) -> Optional[RecordSchema]:
        """Return one record (enriched for dependents) or ``None``."""

    @abstractmethod
    async def _list_by_pet(
        self, spec: CollectionSpec, pet_id: str
    ) -> List[RecordSchema]:
        """Return the enriched dependents of one pet."""

    @abstractmethod
    async def _list_appointments_between(
        self, start: date, end: date
    ) -> List[AppointmentResponse]:
        """Return enriched appointments dated within ``[start, end]``."""

    @abstractmethod
    async def _pet_exists(self, pet_id: str) -> bool:
        """Point lookup used to validate references on save."""

    @abstractmethod
    async def _upsert(self, spec: CollectionSpec, record: RecordSchema) -> bool:
        """Insert or replace a record. Returns True when it was inserted."""

    @abstractmethod
    async def _remove(self, spec: CollectionSpec, record_id: str) -> bool:
        """Remove a record. Returns True when something was removed."""

    @abstractmethod
    async def _remove_pet(self, pet_id: str) -> Tuple[bool, CascadeReport]:
        """Remove a pet, then its dependents; never raises for cleanup failures."""

    # ------------------------------------------------------------------
    # Shared behaviour
    # ------------------------------------------------------------------

    @staticmethod
    def _require_id(value: Any, label: str, operation: str, field_name: str = "id") -> str:
        """
        Validate a lookup or delete id and return it stripped.

        Surrounding whitespace is dropped, as the record schemas do on save,
        so ``" p1 "`` addresses the record stored as ``"p1"``.

        Raises:
            InvalidArgument: If the id is not a string or is blank
        """
        if not isinstance(value, str) or not value.strip():
            raise InvalidArgument(
                f"{StorageAdapter._capitalize(label)} {field_name} is required for {operation}",
                field=field_name,
                value=value,
            )
        return value.strip()

    @staticmethod
    def _capitalize(label: str) -> str:
        return label[:1].upper() + label[1:]

    def _coerce(self, spec: CollectionSpec, data: Any) -> RecordSchema:
        """Turn caller input into a validated record of ``spec.schema``."""
        if spec.response is not None and isinstance(data, spec.response):
            return data.to_record()
        if type(data) is spec.schema:
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump()
        if not isinstance(data, Mapping):
            raise InvalidArgument(
                f"Invalid {spec.label} data provided for saving",
                field="record",
                value=type(data).__name__,
            )

        self._require_id(data.get("id"), spec.label, "saving")

        try:
            return spec.schema.model_validate(dict(data))
        except ValidationError as e:
            raise SchemaValidationException(
                f"Invalid {spec.label} data provided for saving",
                schema_name=spec.schema.__name__,
                validation_errors=format_validation_errors(e.errors()),
            )

    async def _save(self, spec: CollectionSpec, data: RecordInput) -> RecordSchema:
        record = self._coerce(spec, data)

        pet_id = getattr(record, "pet_id", None)
        if spec.is_dependent and pet_id and not await self._pet_exists(pet_id):
            raise InvalidArgument(
                f"Cannot save {spec.label} {record.id}: pet {pet_id} does not exist",
                field="pet_id",
                value=pet_id,
            )

        inserted = await self._upsert(spec, record)
        logger.info(
            f"{self.backend_name}: {self._capitalize(spec.label)} "
            f"{'inserted' if inserted else 'updated'} successfully: {record.id}"
        )
        return record

    async def _delete(self, spec: CollectionSpec, record_id: str) -> bool:
        record_id = self._require_id(record_id, spec.label, "deletion")
        if await self._remove(spec, record_id):
            logger.info(
                f"{self.backend_name}: {self._capitalize(spec.label)} deleted successfully: {record_id}"
            )
        else:
            logger.warning(
                f"{self.backend_name}: {self._capitalize(spec.label)} ID not found for deletion: {record_id}"
            )
        return True

    async def _get_by_id(
        self, spec: CollectionSpec, record_id: str
    ) -> Optional[RecordSchema]:
        record_id = self._require_id(record_id, spec.label, "retrieval")
        return await self._get(spec, record_id)

    async def _get_all(self, spec: CollectionSpec) -> List[RecordSchema]:
        records = await self._list(spec)
        logger.debug(f"{self.backend_name}: Retrieved {len(records)} {spec.name}")
        return records

    async def _get_by_pet(self, spec: CollectionSpec, pet_id: str) -> List[RecordSchema]:
        pet_id = self._require_id(pet_id, "pet", f"{spec.label} retrieval")
        records = await self._list_by_pet(spec, pet_id)
        logger.debug(
            f"{self.backend_name}: Retrieved {len(records)} {spec.name} for pet {pet_id}"
        )
        return records

    # ------------------------------------------------------------------
    # Pets
    # ------------------------------------------------------------------

    async def get_pets(self) -> List[PetSchema]:
        """Return every pet."""
        return await self._get_all(PET_SPEC)

    async def get_pet_by_id(self, pet_id: str) -> Optional[PetSchema]:
        """Return one pet or ``None``."""
        return await self._get_by_id(PET_SPEC, pet_id)

    async def save_pet(self, pet: RecordInput) -> PetSchema:
        """Insert or replace a pet."""
        return await self._save(PET_SPEC, pet)

    async def delete_pet(self, pet_id: str) -> bool:
        """
        Delete a pet and, best effort, every record referencing it.

        Returns:
            True, also when the pet did not exist or a cleanup step failed
        """
        pet_id = self._require_id(pet_id, "pet", "deletion")
        removed, report = await self._remove_pet(pet_id)

        if removed:
            logger.info(f"{self.backend_name}: Pet deleted successfully: {pet_id}")
        else:
            logger.warning(f"{self.backend_name}: Pet ID not found for deletion: {pet_id}")

        if report.total_removed:
            logger.info(
                f"{self.backend_name}: Removed {report.total_removed} records associated with pet {pet_id}"
            )
        for collection, error in report.failures.items():
            log_exception_context(
                error,
                {
                    "operation": "cascade_delete",
                    "pet_id": pet_id,
                    "collection": collection,
                },
                logger=logger,
                level=logging.WARNING,
            )
        return True

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def get_products(self) -> List[ProductResponse]:
        """Return every product, enriched with ``pet_name``."""
        return await self._get_all(PRODUCT_SPEC)

    async def get_product_by_id(self, product_id: str) -> Optional[ProductResponse]:
        """Return one enriched product or ``None``."""
        return await self._get_by_id(PRODUCT_SPEC, product_id)

    async def save_product(self, product: RecordInput) -> ProductSchema:
        """Insert or replace a product."""
        return await self._save(PRODUCT_SPEC, product)

    async def delete_product(self, product_id: str) -> bool:
        """Delete a product; idempotent."""
        return await self._delete(PRODUCT_SPEC, product_id)

    async def get_products_by_pet_id(self, pet_id: str) -> List[ProductResponse]:
        """Return the products associated with a pet."""
        return await self._get_by_pet(PRODUCT_SPEC, pet_id)

    # ------------------------------------------------------------------
    # Health records
    # ------------------------------------------------------------------

    async def get_health_records(self) -> List[HealthRecordResponse]:
        """Return every health record, enriched with ``pet_name``."""
        return await self._get_all(HEALTH_RECORD_SPEC)

    async def get_health_record_by_id(
        self, record_id: str
    ) -> Optional[HealthRecordResponse]:
        """Return one enriched health record or ``None``."""
        return await self._get_by_id(HEALTH_RECORD_SPEC, record_id)

    async def save_health_record(self, record: RecordInput) -> HealthRecordSchema:
        """Insert or replace a health record."""
        return await self._save(HEALTH_RECORD_SPEC, record)

    async def delete_health_record(self, record_id: str) -> bool:
        """Delete a health record; idempotent."""
        return await self._delete(HEALTH_RECORD_SPEC, record_id)

    async def get_health_records_by_pet_id(
        self, pet_id: str
    ) -> List[HealthRecordResponse]:
        """Return the health records of a pet."""
        return await self._get_by_pet(HEALTH_RECORD_SPEC, pet_id)

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------

    async def get_appointments(self) -> List[AppointmentResponse]:
        """Return every appointment, enriched with ``pet_name``."""
        return await self._get_all(APPOINTMENT_SPEC)

    async def get_appointment_by_id(
        self, appointment_id: str
    ) -> Optional[AppointmentResponse]:
        """Return one enriched appointment or ``None``."""
        return await self._get_by_id(APPOINTMENT_SPEC, appointment_id)

    async def save_appointment(self, appointment: RecordInput) -> AppointmentSchema:
        """Insert or replace an appointment."""
        return await self._save(APPOINTMENT_SPEC, appointment)

    async def delete_appointment(self, appointment_id: str) -> bool:
        """Delete an appointment; idempotent."""
        return await self._delete(APPOINTMENT_SPEC, appointment_id)

    async def get_appointments_by_pet_id(
        self, pet_id: str
    ) -> List[AppointmentResponse]:
        """Return the appointments of a pet."""
        return await self._get_by_pet(APPOINTMENT_SPEC, pet_id)

    async def get_appointments_by_date_range(
        self, start: DateLike, end: DateLike
    ) -> List[AppointmentResponse]:
        """
        Return the appointments dated within ``[start, end]``, both inclusive.

        Args:
            start: First day (date, datetime or ISO string)
            end: Last day (date, datetime or ISO string)

        Raises:
            InvalidArgument: If a bound is missing, unparsable, or start > end
        """
        try:
            start_date, end_date = normalize_date_range(start, end)
        except ValueError as e:
            raise InvalidArgument(
                f"Invalid date range provided for appointment retrieval: {e}",
                field="date_range",
            )

        appointments = await self._list_appointments_between(start_date, end_date)
        logger.debug(
            f"{self.backend_name}: Retrieved {len(appointments)} appointments "
            f"between {start_date.isoformat()} and {end_date.isoformat()}"
        )
        return appointments
