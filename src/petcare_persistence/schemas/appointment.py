"""
Appointment Pydantic schemas for validation and serialization.
"""

import datetime as dt
from typing import Any, Optional

from pydantic import Field, field_validator

from .base import EnrichedResponse, PetLinkedSchema, blank_to_none, parse_optional_date


class AppointmentSchema(PetLinkedSchema):
    """A scheduled appointment, optionally tied to a pet."""

    id_prefix = "appointment"

    type: str = Field(
        ..., description="Kind of appointment", min_length=1, max_length=100
    )
    date: dt.date = Field(..., description="Day of the appointment")
    time: Optional[str] = Field(
        None, description="Free-form time of day, e.g. '14:30'", max_length=20
    )
    dose: Optional[str] = Field(None, description="Dose to administer", max_length=100)
    expiry_date: Optional[dt.date] = Field(None, description="Related expiry date")
    notes: Optional[str] = Field(None, description="Free-form notes")

    @field_validator("time", "dose", "notes", mode="before")
    @classmethod
    def validate_optional_text(cls, v: Any) -> Any:
        """Store blank optional text as missing."""
        return blank_to_none(v)

    @field_validator("date", "expiry_date", mode="before")
    @classmethod
    def validate_dates(cls, v: Any) -> Any:
        """Accept ISO dates or datetimes."""
        return parse_optional_date(v)


class AppointmentResponse(AppointmentSchema, EnrichedResponse):
    """Appointment as returned by reads, with the referenced pet's name."""

    record_class = AppointmentSchema
