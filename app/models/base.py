"""Base Models and Mixins"""

import uuid
from sqlalchemy import Column, DateTime, Boolean, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declared_attr

from app.database import Base
from app.utils.time import get_utc_now


class BaseModel(Base):
    """
    Base model class with common fields for all models.

    Provides:
    - UUID primary key
    - created_at timestamp (also the "most recent record" ordering key)
    - updated_at timestamp
    """
    __abstract__ = True

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    created_at = Column(DateTime, default=get_utc_now, nullable=False, index=True)
    updated_at = Column(DateTime, default=get_utc_now, onupdate=get_utc_now, nullable=False)


class SchoolScopedMixin:
    """
    Mixin for billing records that belong to a school.

    Provides:
    - school_id foreign key (the school's back-reference list is the reverse relationship)
    """

    @declared_attr
    def school_id(cls):
        return Column(
            UUID(as_uuid=True),
            ForeignKey("schools.id", ondelete="CASCADE"),
            nullable=False,
            index=True
        )


class StatusMixin:
    """
    Mixin for models with active/inactive status.

    Provides:
    - is_active boolean flag
    """
    is_active = Column(Boolean, default=True, nullable=False, index=True)
