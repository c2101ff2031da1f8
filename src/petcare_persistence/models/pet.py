"""
Pet model for the petcare-persistence package.

Pets are the root entity: products, health records and appointments reference
them through ``pet_id`` foreign keys declared with ``ON DELETE CASCADE``.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import RecordModel


class Pet(RecordModel):
    """Pet row: ``pets(id PK, name, species, breed, dob, notes)``."""

    __tablename__ = "pets"

    name: Mapped[str] = mapped_column(String(100), nullable=False, comment="Pet's name")

    species: Mapped[str] = mapped_column(
        String(50), nullable=False, comment="Pet's species"
    )

    breed: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, comment="Pet's breed"
    )

    dob: Mapped[Optional[date]] = mapped_column(
        Date, nullable=True, comment="Pet's date of birth"
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
