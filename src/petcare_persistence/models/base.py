"""
Base model class for all SQLAlchemy models in the petcare-persistence package.

Rows are keyed by caller-supplied string ids (see
:func:`petcare_persistence.utils.ids.generate_id`), so the base model carries
no server-side defaults, audit columns or soft-delete flags: a row holds
exactly the fields of its record schema.

Example:
    >>> from petcare_persistence.models.base import RecordModel
    >>> from sqlalchemy.orm import Mapped, mapped_column
    >>> from sqlalchemy import String

    >>> class Tag(RecordModel):
    ...     __tablename__ = "tags"
    ...     label: Mapped[str] = mapped_column(String(50))

    >>> tag = Tag(id="tag_1", label="vip")
    >>> tag.to_dict()
    {'id': 'tag_1', 'label': 'vip'}
"""

from datetime import date, datetime
from typing import Any, Dict

from sqlalchemy import String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

ID_LENGTH = 64


class Base(DeclarativeBase):
    """Base declarative class for all SQLAlchemy models."""


class RecordModel(Base):
    """
    Abstract base for the four record tables.

    Attributes:
        id (str): Primary key, assigned by the caller and never reassigned
    """

    __abstract__ = True

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)

    def __repr__(self) -> str:
        """Return string representation in the format ``<ModelName(id=...)>``."""
        return f"<{self.__class__.__name__}(id={self.id})>"

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the row to a dictionary of column values.

        Dates are rendered as ISO strings, matching the document medium.

        Returns:
            Dictionary with column names as keys
        """
        result = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            if isinstance(value, (date, datetime)):
                result[column.name] = value.isoformat()
            else:
                result[column.name] = value
        return result

    def update_fields(self, **kwargs: Any) -> None:
        """
        Update multiple fields on the row in a single operation.

        Raises:
            AttributeError: If any field name doesn't exist on the model.
        """
        for field, value in kwargs.items():
            if hasattr(self, field):
                setattr(self, field, value)
            else:
                raise AttributeError(
                    f"'{self.__class__.__name__}' has no attribute '{field}'"
                )

    @classmethod
    def get_table_name(cls) -> str:
        """Get the database table name for this model."""
        return cls.__tablename__

    @classmethod
    def column_names(cls) -> list:
        """Names of the columns backing this model, in declaration order."""
        return [column.name for column in cls.__table__.columns]
