"""
Health record Pydantic schemas for validation and serialization.
"""

import datetime as dt
from typing import Any, Optional

from pydantic import Field, field_validator

from .base import (
    ID_MAX_LENGTH,
    EnrichedResponse,
    PetLinkedSchema,
    blank_to_none,
    parse_optional_date,
)


class HealthRecordSchema(PetLinkedSchema):
    """A vaccination, treatment or check-up entry for one pet."""

    id_prefix = "health"

    type: str = Field(
        ..., description="Kind of record, e.g. vaccine name", min_length=1, max_length=100
    )
    date: dt.date = Field(..., description="Day the care was given")
    dose: Optional[str] = Field(None, description="Dose administered", max_length=100)
    expiry_date: Optional[dt.date] = Field(
        None, description="When the protection expires"
    )
    notes: Optional[str] = Field(None, description="Free-form notes")
    pet_id: str = Field(
        ..., description="Pet this record belongs to", min_length=1, max_length=ID_MAX_LENGTH
    )

    @field_validator("dose", "notes", mode="before")
    @classmethod
    def validate_optional_text(cls, v: Any) -> Any:
        """Store blank optional text as missing."""
        return blank_to_none(v)

    @field_validator("date", "expiry_date", mode="before")
    @classmethod
    def validate_dates(cls, v: Any) -> Any:
        """Accept ISO dates or datetimes."""
        return parse_optional_date(v)


class HealthRecordResponse(HealthRecordSchema, EnrichedResponse):
    """Health record as returned by reads, with the referenced pet's name."""

    record_class = HealthRecordSchema
