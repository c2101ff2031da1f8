"""
Shared Pydantic building blocks for record schemas.

Every record carries a caller-assigned ``id``. Records that reference a pet
(products, health records, appointments) share :class:`PetLinkedSchema`; their
read-side variants mix in :class:`EnrichedResponse`, which adds the
``pet_name`` resolved from ``pet_id`` at read time.
"""

from datetime import datetime
from typing import Any, ClassVar, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.datetime_utils import to_optional_date
from ..utils.ids import generate_id

UNKNOWN_PET_NAME = "Unknown Pet"
ID_MAX_LENGTH = 64


def blank_to_none(value: Any) -> Any:
    """Map empty or whitespace-only strings to ``None``."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def parse_optional_date(value: Any) -> Any:
    """Accept ISO dates and ISO datetimes (keeping the date part) for date fields."""
    if value is None or isinstance(value, (str, datetime)):
        try:
            return to_optional_date(value)
        except ValueError:
            # Let Pydantic report the field error.
            return value
    return value


class RecordSchema(BaseModel):
    """Base schema for every persisted record."""

    model_config = ConfigDict(
        from_attributes=True,
        use_enum_values=True,
        validate_assignment=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    id_prefix: ClassVar[str] = ""

    id: str = Field(
        ...,
        description="Stable unique id, assigned at creation",
        min_length=1,
        max_length=ID_MAX_LENGTH,
    )

    @classmethod
    def new(cls, **fields: Any) -> "RecordSchema":
        """
        Build a record with a freshly generated id.

        Example:
            >>> pet = PetSchema.new(name="Rex", species="Dog")
            >>> pet.id.startswith("pet_")
            True
        """
        return cls(id=generate_id(cls.id_prefix), **fields)

    def to_storage(self) -> Dict[str, Any]:
        """Serialise to the flat JSON-compatible mapping persisted by the adapters."""
        return self.model_dump(mode="json")


class PetLinkedSchema(RecordSchema):
    """Record with an optional weak reference to a pet."""

    pet_id: Optional[str] = Field(
        None, description="Referenced pet id", max_length=ID_MAX_LENGTH
    )

    @field_validator("pet_id", mode="before")
    @classmethod
    def normalize_pet_id(cls, v: Any) -> Any:
        """Treat an empty reference as no reference."""
        return blank_to_none(v)


class EnrichedResponse(BaseModel):
    """Mixin adding the read-time ``pet_name`` to a dependent record."""

    record_class: ClassVar[Type[RecordSchema]]

    pet_name: str = Field(
        UNKNOWN_PET_NAME, description="Name of the referenced pet at read time"
    )

    def to_record(self) -> RecordSchema:
        """Drop the enrichment and return the stored record."""
        return self.record_class.model_validate(self.model_dump(exclude={"pet_name"}))
