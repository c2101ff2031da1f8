"""
Pet Pydantic schemas for validation and serialization.
"""

import datetime as dt
from typing import Any, Optional

from pydantic import Field, field_validator

from .base import RecordSchema, blank_to_none, parse_optional_date


class PetSchema(RecordSchema):
    """A pet: the root entity other records reference."""

    id_prefix = "pet"

    name: str = Field(..., description="Pet's name", min_length=1, max_length=100)
    species: str = Field(
        ..., description="Pet's species", min_length=1, max_length=50
    )
    breed: Optional[str] = Field(None, description="Pet's breed", max_length=100)
    dob: Optional[dt.date] = Field(None, description="Date of birth")
    notes: Optional[str] = Field(None, description="Free-form notes")

    @field_validator("breed", "notes", mode="before")
    @classmethod
    def validate_optional_text(cls, v: Any) -> Any:
        """Store blank optional text as missing."""
        return blank_to_none(v)

    @field_validator("dob", mode="before")
    @classmethod
    def validate_dob(cls, v: Any) -> Any:
        """Accept ISO dates or datetimes."""
        return parse_optional_date(v)
