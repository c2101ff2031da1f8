"""
Document-store adapter.

Each collection is one JSON array kept under its own key in a
:class:`~petcare_persistence.adapters.document_store.DocumentStore`. Every
write rewrites the whole collection; a per-collection :class:`asyncio.Lock`
serialises those read-modify-write cycles within the process.
"""

import asyncio
import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from ..exceptions import StorageUnavailable
from ..schemas import UNKNOWN_PET_NAME, AppointmentResponse, RecordSchema
from ..utils.datetime_utils import is_within_range
from .base import (
    APPOINTMENT_SPEC,
    COLLECTIONS,
    DEPENDENT_SPECS,
    PET_SPEC,
    PETS,
    CascadeReport,
    CollectionSpec,
    StorageAdapter,
)
from .document_store import DocumentStore, MemoryDocumentStore

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class DocumentStoreAdapter(StorageAdapter):
    """Storage adapter persisting collections as JSON blobs."""

    backend_name = "DocumentStoreAdapter"

    def __init__(self, store: Optional[DocumentStore] = None):
        self.store = store if store is not None else MemoryDocumentStore()
        self._locks: Dict[str, asyncio.Lock] = {
            name: asyncio.Lock() for name in COLLECTIONS
        }

    async def close(self) -> None:
        await self.store.close()

    # ------------------------------------------------------------------
    # Blob access
    # ------------------------------------------------------------------

    async def _load(self, key: str) -> List[Row]:
        raw = await self.store.get_item(key)
        if raw is None:
            return []

        try:
            rows = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"{self.backend_name}: Collection {key} is not valid JSON: {e}")
            raise StorageUnavailable(
                f"Collection {key} is corrupt",
                collection=key,
                operation="decode",
                original_error=e,
            )

        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            logger.error(f"{self.backend_name}: Collection {key} is not a JSON array of objects")
            raise StorageUnavailable(
                f"Collection {key} is corrupt",
                collection=key,
                operation="decode",
            )
        return rows

    async def _dump(self, key: str, rows: List[Row]) -> None:
        await self.store.set_item(key, json.dumps(rows, ensure_ascii=False))

    async def _pet_names(self) -> Dict[str, str]:
        return {
            row["id"]: row.get("name") or UNKNOWN_PET_NAME
            for row in await self._load(PETS)
            if "id" in row
        }

    def _build(
        self, spec: CollectionSpec, row: Row, pet_names: Optional[Dict[str, str]] = None
    ) -> RecordSchema:
        try:
            if spec.response is None:
                return spec.schema.model_validate(row)
            pet_name = (pet_names or {}).get(row.get("pet_id"), UNKNOWN_PET_NAME)
            return spec.response.model_validate({**row, "pet_name": pet_name})
        except ValidationError as e:
            logger.error(
                f"{self.backend_name}: Stored {spec.label} {row.get('id')} is invalid: {e}"
            )
            raise StorageUnavailable(
                f"Collection {spec.name} holds an invalid {spec.label}",
                collection=spec.name,
                operation="decode",
                original_error=e,
            )

    async def _read(self, spec: CollectionSpec, keep: Any = None) -> List[RecordSchema]:
        """Load a collection, optionally filtered, and build (enriched) records."""
        pet_names = await self._pet_names() if spec.is_dependent else None
        rows = await self._load(spec.name)
        if keep is not None:
            rows = [row for row in rows if keep(row)]
        return [self._build(spec, row, pet_names) for row in rows]

    # ------------------------------------------------------------------
    # Storage primitives
    # ------------------------------------------------------------------

    async def _list(self, spec: CollectionSpec) -> List[RecordSchema]:
        return await self._read(spec)

    async def _get(self, spec: CollectionSpec, record_id: str) -> Optional[RecordSchema]:
        records = await self._read(spec, lambda row: row.get("id") == record_id)
        return records[0] if records else None

    async def _list_by_pet(self, spec: CollectionSpec, pet_id: str) -> List[RecordSchema]:
        return await self._read(spec, lambda row: row.get("pet_id") == pet_id)

    async def _list_appointments_between(
        self, start: date, end: date
    ) -> List[AppointmentResponse]:
        return await self._read(
            APPOINTMENT_SPEC, lambda row: is_within_range(row.get("date"), start, end)
        )

    async def _pet_exists(self, pet_id: str) -> bool:
        return any(row.get("id") == pet_id for row in await self._load(PETS))

    async def _upsert(self, spec: CollectionSpec, record: RecordSchema) -> bool:
        data = record.to_storage()
        async with self._locks[spec.name]:
            rows = await self._load(spec.name)
            for index, row in enumerate(rows):
                if row.get("id") == record.id:
                    rows[index] = data
                    inserted = False
                    break
            else:
                rows.append(data)
                inserted = True
            await self._dump(spec.name, rows)
        return inserted

    async def _remove_where(self, spec: CollectionSpec, predicate: Any) -> int:
        """Drop every row matching ``predicate``; returns how many went."""
        async with self._locks[spec.name]:
            rows = await self._load(spec.name)
            kept = [row for row in rows if not predicate(row)]
            removed = len(rows) - len(kept)
            if removed:
                await self._dump(spec.name, kept)
        return removed

    async def _remove(self, spec: CollectionSpec, record_id: str) -> bool:
        return bool(
            await self._remove_where(spec, lambda row: row.get("id") == record_id)
        )

    async def _remove_pet(self, pet_id: str) -> Tuple[bool, CascadeReport]:
        removed = bool(
            await self._remove_where(PET_SPEC, lambda row: row.get("id") == pet_id)
        )

        # Runs even when the pet was already gone so a retry finishes an
        # interrupted cascade.
        report = CascadeReport(pet_id=pet_id)
        for spec in DEPENDENT_SPECS:
            try:
                count = await self._remove_where(
                    spec, lambda row: row.get("pet_id") == pet_id
                )
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
        return f"<DocumentStoreAdapter(store={self.store!r})>"
