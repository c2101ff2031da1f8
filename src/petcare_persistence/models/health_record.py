"""
Health record model for the petcare-persistence package.
"""

import datetime as dt
from typing import Optional

from sqlalchemy import Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import ID_LENGTH, RecordModel


class HealthRecord(RecordModel):
    """
    Health record row (vaccination, deworming, check-up ...).

    Every health record belongs to a pet, so ``pet_id`` is NOT NULL.
    """

    __tablename__ = "health_records"

    type: Mapped[str] = mapped_column(String(100), nullable=False)

    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)

    dose: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    expiry_date: Mapped[Optional[dt.date]] = mapped_column(Date, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    pet_id: Mapped[str] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("pets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
