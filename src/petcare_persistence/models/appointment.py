"""
Appointment model for the petcare-persistence package.
"""

import datetime as dt
from typing import Optional

from sqlalchemy import Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import ID_LENGTH, RecordModel


class Appointment(RecordModel):
    """Scheduled appointment row, optionally tied to a pet."""

    __tablename__ = "appointments"

    type: Mapped[str] = mapped_column(String(100), nullable=False)

    date: Mapped[dt.date] = mapped_column(
        Date, nullable=False, index=True, comment="Day of the appointment"
    )

    time: Mapped[Optional[str]] = mapped_column(
        String(20), nullable=True, comment="Free-form time of day, e.g. 14:30"
    )

    dose: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    expiry_date: Mapped[Optional[dt.date]] = mapped_column(Date, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    pet_id: Mapped[Optional[str]] = mapped_column(
        String(ID_LENGTH),
        ForeignKey("pets.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
