"""
Database models for Tagfolio.
"""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Column, String, Text, Integer, DateTime, JSON, ForeignKey, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form SQLite round-trips unchanged."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class EntityKind(str, Enum):
    """Entity kinds that draw ids from their own sequence."""
    USER = "user"
    RECORD = "record"


class SequenceModel(Base):
    """Next id to hand out for one entity kind."""
    __tablename__ = "sequences"

    kind = Column(String(32), primary_key=True)
    next_value = Column(Integer, nullable=False, default=1)


class UserModel(Base):
    """User model for authentication."""
    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class RecordModel(Base):
    """A catalog item owned by exactly one user."""
    __tablename__ = "records"

    id = Column(String(32), primary_key=True)
    owner_id = Column(String(32), ForeignKey("users.id"), nullable=False)

    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=False)

    # Ordered JSON arrays
    tags = Column(JSON, default=list, nullable=False)
    images = Column(JSON, default=list, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_records_owner_updated", "owner_id", "updated_at"),
    )
