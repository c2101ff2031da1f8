"""
SQLAlchemy models for the relational storage backend.

Importing this package registers every table on ``Base.metadata``.
"""

from .appointment import Appointment
from .base import Base, RecordModel
from .health_record import HealthRecord
from .pet import Pet
from .product import Product, ProductType

__all__ = [
    "Base",
    "RecordModel",
    "Pet",
    "Product",
    "ProductType",
    "HealthRecord",
    "Appointment",
]
