"""
Storage Module for Tagfolio

Persistent storage for users and catalog records:
- Database handle with a single store lock and id sequences
- User repository (credentials)
- Owner-scoped record store
"""

from tagfolio.storage.models import (
    Base,
    EntityKind,
    UserModel,
    RecordModel,
)
from tagfolio.storage.database import Database
from tagfolio.storage.user_repository import (
    UserRepository,
    StoredUser,
    PublicUser,
    normalize_email,
)
from tagfolio.storage.record_store import (
    RecordStore,
    StoredRecord,
    RecordPatch,
)

__all__ = [
    # Models
    "Base",
    "EntityKind",
    "UserModel",
    "RecordModel",
    # Database
    "Database",
    # Users
    "UserRepository",
    "StoredUser",
    "PublicUser",
    "normalize_email",
    # Records
    "RecordStore",
    "StoredRecord",
    "RecordPatch",
]
