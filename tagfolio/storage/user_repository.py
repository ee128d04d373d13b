"""
User storage for Tagfolio.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError

from tagfolio.errors import DuplicateError
from .database import Database
from .models import EntityKind, UserModel


@dataclass(frozen=True)
class PublicUser:
    """The only user shape that leaves the identity layer."""

    id: str
    email: str

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email}


@dataclass(frozen=True)
class StoredUser:
    """Data class for user data transfer inside the core."""

    id: str
    email: str
    password_hash: str
    created_at: datetime

    @classmethod
    def from_model(cls, model: UserModel) -> "StoredUser":
        """Create from SQLAlchemy model."""
        return cls(
            id=model.id,
            email=model.email,
            password_hash=model.password_hash,
            created_at=model.created_at,
        )

    def public(self) -> PublicUser:
        return PublicUser(id=self.id, email=self.email)


def normalize_email(email: str) -> str:
    """Canonical form used for storage and lookup."""
    return email.strip().lower()


class UserRepository:
    """
    Credential storage.

    Emails are stored lower-cased, so uniqueness is case-insensitive.
    Users are never updated or deleted.
    """

    def __init__(self, database: Database):
        self.db = database

    def create(self, email: str, password_hash: str) -> StoredUser:
        """
        Persist a new user.

        Args:
            email: Email address (normalized again here)
            password_hash: Opaque password hash

        Returns:
            Created StoredUser

        Raises:
            DuplicateError: If the email is already registered
        """
        email = normalize_email(email)
        try:
            with self.db.transaction() as session:
                existing = session.query(UserModel).filter(UserModel.email == email).first()
                if existing:
                    raise DuplicateError()

                user = UserModel(
                    id=self.db.next_id(session, EntityKind.USER),
                    email=email,
                    password_hash=password_hash,
                    created_at=self.db.clock(),
                )
                session.add(user)
                session.flush()
                stored = StoredUser.from_model(user)
        except IntegrityError as e:
            # Unique index on email, for databases shared between processes
            raise DuplicateError() from e

        logger.info(f"Created user {stored.id}")
        return stored

    def get(self, user_id: str) -> Optional[StoredUser]:
        """Get user by ID."""
        with self.db.transaction() as session:
            user = session.get(UserModel, user_id)
            return StoredUser.from_model(user) if user else None

    def get_by_email(self, email: str) -> Optional[StoredUser]:
        """Get user by email, ignoring case and surrounding whitespace."""
        with self.db.transaction() as session:
            user = session.query(UserModel).filter(
                UserModel.email == normalize_email(email),
            ).first()
            return StoredUser.from_model(user) if user else None

    def exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None
