import uuid

from sqlalchemy import Column, DateTime, String, Enum as SAEnum
from sqlalchemy.sql import func


def new_uuid() -> str:
    return str(uuid.uuid4())


def str_enum(enum_cls, length: int = 30) -> SAEnum:
    """Enum stored as a plain VARCHAR of member values (no DB check constraint)."""
    return SAEnum(
        enum_cls,
        native_enum=False,
        create_constraint=False,
        length=length,
        values_callable=lambda members: [m.value for m in members],
    )


class TimestampMixin:
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        onupdate=func.now()
    )


class UUIDPrimaryKeyMixin:
    id = Column(String(36), primary_key=True, default=new_uuid)
