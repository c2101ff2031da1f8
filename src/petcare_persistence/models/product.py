"""
Product model for the petcare-persistence package.

Care and shop products (medication, vaccines, hygiene, food) optionally
associated with a pet.
"""

import enum
from datetime import date
from typing import Optional

from sqlalchemy import Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import ID_LENGTH, RecordModel


class ProductType(enum.Enum):
    """Fixed set of product categories offered by the business."""

    MEDICAMENTO = "Medicamento"
    VACINA = "Vacina"
    HIGIENE = "Higiene"
    ALIMENTO = "Alimento"
    OUTRO = "Outro"


class Product(RecordModel):
    """
    Product row.

    The product type is stored as its plain value (``"Medicamento"`` ...) in a
    string column; the record schema restricts it to :class:`ProductType`.
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    type: Mapped[str] = mapped_column(
        String(50), nullable=False, comment="ProductType value"
    )

    application_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    pet_id: Mapped[Optional[str]] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("pets.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
        comment="Associated pet, if any",
    )
