"""
Product Pydantic schemas for validation and serialization.
"""

import datetime as dt
from typing import Any, Optional

from pydantic import Field, field_validator

from ..models.product import ProductType
from .base import EnrichedResponse, PetLinkedSchema, blank_to_none, parse_optional_date


class ProductSchema(PetLinkedSchema):
    """A care or shop product, optionally associated with a pet."""

    id_prefix = "product"

    name: str = Field(..., description="Product name", min_length=1, max_length=200)
    type: ProductType = Field(..., description="Product category")
    application_date: Optional[dt.date] = Field(
        None, description="When the product was applied"
    )
    expiry_date: Optional[dt.date] = Field(None, description="When the product expires")
    notes: Optional[str] = Field(None, description="Free-form notes")

    @field_validator("notes", mode="before")
    @classmethod
    def validate_notes(cls, v: Any) -> Any:
        """Store blank notes as missing."""
        return blank_to_none(v)

    @field_validator("application_date", "expiry_date", mode="before")
    @classmethod
    def validate_dates(cls, v: Any) -> Any:
        """Accept ISO dates or datetimes."""
        return parse_optional_date(v)


class ProductResponse(ProductSchema, EnrichedResponse):
    """Product as returned by reads, with the referenced pet's name."""

    record_class = ProductSchema
