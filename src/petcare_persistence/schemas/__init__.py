"""
Pydantic schemas for the four record collections.

``*Schema`` classes describe what is stored; ``*Response`` classes are what
reads of dependent collections return, enriched with ``pet_name``.
"""

from .appointment import AppointmentResponse, AppointmentSchema
from .base import (
    UNKNOWN_PET_NAME,
    EnrichedResponse,
    PetLinkedSchema,
    RecordSchema,
)
from .health_record import HealthRecordResponse, HealthRecordSchema
from .pet import PetSchema
from .product import ProductResponse, ProductSchema

__all__ = [
    "UNKNOWN_PET_NAME",
    "RecordSchema",
    "PetLinkedSchema",
    "EnrichedResponse",
    # Pet schemas
    "PetSchema",
    # Product schemas
    "ProductSchema",
    "ProductResponse",
    # Health record schemas
    "HealthRecordSchema",
    "HealthRecordResponse",
    # Appointment schemas
    "AppointmentSchema",
    "AppointmentResponse",
]
