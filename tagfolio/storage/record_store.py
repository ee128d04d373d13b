"""
Record Store for Tagfolio

Owner-scoped storage for catalog records using SQLAlchemy:
- Id allocation from store-owned sequences
- Create, partial update, delete
- Per-owner listing, most recently updated first

Mutations take the caller's user id and treat a record owned by someone
else exactly like a missing one, so callers cannot test for existence.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Optional, Sequence

from loguru import logger
from sqlalchemy import Integer, cast, func

from tagfolio.errors import NotFoundError
from .database import Database
from .models import EntityKind, RecordModel


@dataclass
class StoredRecord:
    """Data class for record data transfer."""

    id: str
    owner_id: str
    title: str
    description: str
    tags: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, model: RecordModel) -> "StoredRecord":
        """Create from SQLAlchemy model."""
        return cls(
            id=model.id,
            owner_id=model.owner_id,
            title=model.title,
            description=model.description,
            tags=list(model.tags or []),
            images=list(model.images or []),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "description": self.description,
            "tags": self.tags,
            "images": self.images,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class RecordPatch:
    """
    Partial update for a record.

    A field left as None keeps its stored value. There is no way to clear
    a field through a patch; title and description are never empty.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[Sequence[str]] = None
    images: Optional[Sequence[str]] = None

    def changes(self) -> dict:
        """Fields to overwrite, with sequences copied to lists."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.name in ("tags", "images"):
                value = list(value)
            result[f.name] = value
        return result

    def is_empty(self) -> bool:
        return not self.changes()


class RecordStore:
    """
    Repository for record CRUD operations.

    Usage:
        store = RecordStore(Database())

        record = store.create(
            owner_id="1",
            title="1967 Mustang",
            description="Fastback, Highland Green",
            tags=["classic", "ford"],
        )

        store.update("1", record.id, RecordPatch(description="Restored"))
        store.list_by_owner("1")
    """

    def __init__(self, database: Database):
        """
        Initialize store.

        Args:
            database: Shared database handle
        """
        self.db = database

    def allocate_id(self, entity_kind: EntityKind) -> str:
        """
        Reserve the next id for an entity kind.

        Reserved ids are consumed even if nothing is stored under them.
        """
        with self.db.transaction() as session:
            return self.db.next_id(session, entity_kind)

    def create(
        self,
        owner_id: str,
        title: str,
        description: str,
        tags: Optional[Sequence[str]] = None,
        images: Optional[Sequence[str]] = None,
    ) -> StoredRecord:
        """
        Create a new record.

        Args:
            owner_id: Id of the owning user
            title: Record title
            description: Record description
            tags: Ordered tags
            images: Ordered image URIs (display order)

        Returns:
            Created StoredRecord including id and timestamps
        """
        with self.db.transaction() as session:
            now = self.db.clock()
            model = RecordModel(
                id=self.db.next_id(session, EntityKind.RECORD),
                owner_id=owner_id,
                title=title,
                description=description,
                tags=list(tags or []),
                images=list(images or []),
                created_at=now,
                updated_at=now,
            )
            session.add(model)
            session.flush()
            record = StoredRecord.from_model(model)

        logger.info(f"Created record {record.id} for owner {owner_id}")
        return record

    def get_by_id(self, record_id: str, owner_id: Optional[str] = None) -> Optional[StoredRecord]:
        """
        Get record by ID.

        Args:
            record_id: Record ID
            owner_id: If given, records owned by anyone else read as missing

        Returns:
            StoredRecord or None
        """
        with self.db.transaction() as session:
            model = session.get(RecordModel, record_id)
            if model is None:
                return None
            if owner_id is not None and model.owner_id != owner_id:
                return None
            return StoredRecord.from_model(model)

    def update(self, owner_id: str, record_id: str, patch: RecordPatch) -> StoredRecord:
        """
        Merge a patch over an owned record.

        Args:
            owner_id: Id of the calling user
            record_id: Record ID
            patch: Fields to overwrite

        Returns:
            The merged StoredRecord

        Raises:
            NotFoundError: If the record is missing or owned by someone else
        """
        changes = patch.changes()

        with self.db.transaction() as session:
            model = session.get(RecordModel, record_id)
            if model is None or model.owner_id != owner_id:
                raise NotFoundError("Record", record_id)

            for key, value in changes.items():
                setattr(model, key, value)

            # updated_at never moves backwards, even if the clock does
            model.updated_at = max(self.db.clock(), model.updated_at)
            session.flush()
            record = StoredRecord.from_model(model)

        logger.info(f"Updated record {record_id}: {sorted(changes)}")
        return record

    def delete(self, owner_id: str, record_id: str) -> bool:
        """
        Delete an owned record.

        Args:
            owner_id: Id of the calling user
            record_id: Record ID

        Returns:
            True if a record was removed; False if it was missing or
            owned by someone else
        """
        with self.db.transaction() as session:
            model = session.get(RecordModel, record_id)
            if model is None or model.owner_id != owner_id:
                return False
            session.delete(model)

        logger.info(f"Deleted record {record_id}")
        return True

    def list_by_owner(self, owner_id: str) -> list[StoredRecord]:
        """
        List all records of one owner.

        Ordered by updated_at descending; ties go to the higher id, i.e.
        the record created later.
        """
        with self.db.transaction() as session:
            models = session.query(RecordModel).filter(
                RecordModel.owner_id == owner_id,
            ).order_by(
                RecordModel.updated_at.desc(),
                cast(RecordModel.id, Integer).desc(),
            ).all()

            return [StoredRecord.from_model(m) for m in models]

    def count_by_owner(self, owner_id: str) -> int:
        with self.db.transaction() as session:
            return session.query(func.count(RecordModel.id)).filter(
                RecordModel.owner_id == owner_id,
            ).scalar() or 0
