"""
Relational-store adapter over SQLAlchemy's asyncio extension.

Tables are created on first use. Dependent reads join ``pets`` once and
resolve ``pet_name`` with ``COALESCE``, so dangling or absent references
read as the placeholder name without a second query.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncGenerator, Dict, List, Optional, Tuple, Type

from pydantic import ValidationError
from sqlalchemy import MetaData, delete, func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.session import SessionManager
from ..exceptions import InvalidArgument, StorageUnavailable
from ..models import Appointment, Base, HealthRecord, Pet, Product, RecordModel
from ..schemas import UNKNOWN_PET_NAME, AppointmentResponse, RecordSchema
from .base import (
    APPOINTMENT_SPEC,
    APPOINTMENTS,
    DEPENDENT_SPECS,
    HEALTH_RECORDS,
    PET_SPEC,
    PETS,
    PRODUCTS,
    CascadeReport,
    CollectionSpec,
    StorageAdapter,
)

logger = logging.getLogger(__name__)

MODELS: Dict[str, Type[RecordModel]] = {
    PETS: Pet,
    PRODUCTS: Product,
    HEALTH_RECORDS: HealthRecord,
    APPOINTMENTS: Appointment,
}


class RelationalStoreAdapter(StorageAdapter):
    """
    Storage adapter backed by a SQL database.

    Every operation opens its own session; writes run in their own
    transaction. Whether the database enforces ``ON DELETE CASCADE`` is
    detected at initialization: SQLite only does so with
    ``PRAGMA foreign_keys`` on, other dialects always do. Without it,
    :meth:`delete_pet` removes dependents itself, table by table.
    """

    backend_name = "RelationalStoreAdapter"

    def __init__(self, session_manager: SessionManager, metadata: Optional[MetaData] = None):
        self.session_manager = session_manager
        self.metadata = metadata if metadata is not None else Base.metadata
        self._init_lock = asyncio.Lock()
        self._native_cascade: Optional[bool] = None

    @property
    def is_initialized(self) -> bool:
        return self._native_cascade is not None

    @property
    def native_cascade(self) -> Optional[bool]:
        """Whether deleting a pet cascades in the database; ``None`` before initialization."""
        return self._native_cascade

    async def initialize(self) -> None:
        if self._native_cascade is not None:
            return

        async with self._init_lock:
            if self._native_cascade is not None:
                return

            if not await self.session_manager.initialize_database(self.metadata):
                health = await self.session_manager.health_check()
                error = StorageUnavailable(
                    "Could not initialize the relational store",
                    operation="initialize",
                )
                error.details["health"] = health
                error.log_error(logger)
                raise error
            self._native_cascade = await self._detect_native_cascade()
            logger.info(
                f"{self.backend_name}: Tables ready "
                f"(native cascade {'on' if self._native_cascade else 'off'})"
            )

    async def _detect_native_cascade(self) -> bool:
        engine = self.session_manager.engine
        if engine.dialect.name != "sqlite":
            return True

        try:
            async with engine.connect() as conn:
                result = await conn.execute(text("PRAGMA foreign_keys"))
                return bool(result.scalar())
        except SQLAlchemyError as e:
            raise StorageUnavailable(
                "Could not inspect foreign key enforcement",
                operation="initialize",
                original_error=e,
            )

    async def close(self) -> None:
        await self.session_manager.close_all_sessions()
        self._native_cascade = None

    @asynccontextmanager
    async def _session(
        self, collection: str, operation: str, transactional: bool = False
    ) -> AsyncGenerator[AsyncSession, None]:
        """Open a session (or transaction) and translate database errors."""
        await self.initialize()

        manager = self.session_manager
        context = manager.get_transaction() if transactional else manager.get_session()
        try:
            async with context as session:
                yield session
        except IntegrityError as e:
            raise InvalidArgument(
                f"Integrity constraint violated during {operation} on {collection}",
                value=str(e.orig) if e.orig is not None else None,
            )
        except SQLAlchemyError as e:
            error = StorageUnavailable(
                f"Could not {operation} {collection}",
                collection=collection,
                operation=operation,
                original_error=e,
            )
            error.log_error(logger)
            raise error

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    def _select(self, spec: CollectionSpec):
        model = MODELS[spec.name]
        if not spec.is_dependent:
            return select(model)
        return select(
            model, func.coalesce(Pet.name, UNKNOWN_PET_NAME).label("pet_name")
        ).outerjoin(Pet, model.pet_id == Pet.id)

    def _build(
        self, spec: CollectionSpec, row: RecordModel, pet_name: Optional[str] = None
    ) -> RecordSchema:
        data = row.to_dict()
        try:
            if spec.response is None:
                return spec.schema.model_validate(data)
            return spec.response.model_validate({**data, "pet_name": pet_name})
        except ValidationError as e:
            logger.error(f"{self.backend_name}: Stored {spec.label} {row.id} is invalid: {e}")
            raise StorageUnavailable(
                f"Table {row.get_table_name()} holds an invalid {spec.label}",
                collection=spec.name,
                operation="read",
                original_error=e,
            )

    async def _fetch(self, spec: CollectionSpec, *criteria) -> List[RecordSchema]:
        stmt = self._select(spec)
        if criteria:
            stmt = stmt.where(*criteria)

        async with self._session(spec.name, "read") as session:
            result = await session.execute(stmt)
            if spec.is_dependent:
                return [self._build(spec, row, pet_name) for row, pet_name in result.all()]
            return [self._build(spec, row) for row in result.scalars().all()]

    # ------------------------------------------------------------------
    # Storage primitives
    # ------------------------------------------------------------------

    async def _list(self, spec: CollectionSpec) -> List[RecordSchema]:
        return await self._fetch(spec)

    async def _get(self, spec: CollectionSpec, record_id: str) -> Optional[RecordSchema]:
        records = await self._fetch(spec, MODELS[spec.name].id == record_id)
        return records[0] if records else None

    async def _list_by_pet(self, spec: CollectionSpec, pet_id: str) -> List[RecordSchema]:
        return await self._fetch(spec, MODELS[spec.name].pet_id == pet_id)

    async def _list_appointments_between(
        self, start: date, end: date
    ) -> List[AppointmentResponse]:
        return await self._fetch(APPOINTMENT_SPEC, Appointment.date.between(start, end))

    async def _pet_exists(self, pet_id: str) -> bool:
        async with self._session(PETS, "read") as session:
            return await session.get(Pet, pet_id) is not None

    async def _upsert(self, spec: CollectionSpec, record: RecordSchema) -> bool:
        model = MODELS[spec.name]
        columns = set(model.column_names())
        values = {k: v for k, v in record.model_dump().items() if k in columns}

        async with self._session(spec.name, "save", transactional=True) as session:
            row = await session.get(model, record.id)
            if row is None:
                session.add(model(**values))
                return True
            row.update_fields(**values)
            return False

    async def _delete_where(self, spec: CollectionSpec, *criteria) -> int:
        model = MODELS[spec.name]
        async with self._session(spec.name, "delete", transactional=True) as session:
            result = await session.execute(delete(model).where(*criteria))
            return result.rowcount or 0

    async def _remove(self, spec: CollectionSpec, record_id: str) -> bool:
        return await self._delete_where(spec, MODELS[spec.name].id == record_id) > 0

    async def _remove_pet(self, pet_id: str) -> Tuple[bool, CascadeReport]:
        removed = await self._delete_where(PET_SPEC, Pet.id == pet_id) > 0

        report = CascadeReport(pet_id=pet_id)
        if self._native_cascade:
            return removed, report

        for spec in DEPENDENT_SPECS:
            model = MODELS[spec.name]
            try:
                count = await self._delete_where(spec, model.pet_id == pet_id)
            except Exception as e:
                report.failures[spec.name] = e
                continue
            if count:
                report.removed[spec.name] = count
                logger.info(
                    f"{self.backend_name}: Associated {spec.name} deleted for pet: {pet_id}"
                )
        return removed, report

    def __repr__(self) -> str:
        return f"<RelationalStoreAdapter(engine={self.session_manager.engine.url!r})>"
