"""
Database handle for Tagfolio.

One Database instance owns everything the stores share:
- SQLAlchemy engine and session factory
- Per-entity-kind id sequences
- The lock that serializes every store operation
- The clock used for record timestamps

Stores receive a Database instead of reaching for module globals, so each
test (or each host process) can build an isolated one.
"""

import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional
from datetime import datetime

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tagfolio.errors import InternalError
from .models import Base, EntityKind, SequenceModel, utcnow


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


class Database:
    """
    Engine, sessions and sequences behind a single lock.

    Usage:
        db = Database("sqlite:///./tagfolio.db")
        with db.transaction() as session:
            record_id = db.next_id(session, EntityKind.RECORD)
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        echo: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize database.

        Args:
            database_url: SQLAlchemy database URL (defaults to in-memory SQLite)
            echo: Log emitted SQL
            clock: Source of "now" for timestamps
        """
        # Strip async drivers for sync engine
        url = database_url or "sqlite:///:memory:"
        self.database_url = url.replace("+aiosqlite", "").replace("+asyncpg", "")

        engine_kwargs = {"echo": echo}
        if self.database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if _is_memory_sqlite(self.database_url):
                # Every session must see the same in-memory database
                engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(self.database_url, **engine_kwargs)
        Base.metadata.create_all(self.engine)

        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)
        self.lock = threading.RLock()
        self.clock = clock

        logger.info(f"Database initialized: {self.database_url[:50]}")

    def get_session(self) -> Session:
        """Get database session."""
        return self.SessionLocal()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Hold the store lock for one unit of work.

        Commits on normal exit, rolls back and re-raises otherwise.
        Constraint violations propagate unchanged; any other database
        failure surfaces as InternalError.
        """
        with self.lock:
            with self.get_session() as session:
                try:
                    yield session
                    session.commit()
                except IntegrityError:
                    session.rollback()
                    raise
                except SQLAlchemyError as e:
                    session.rollback()
                    logger.exception("Database operation failed")
                    raise InternalError(detail=str(e)) from e
                except Exception:
                    session.rollback()
                    raise

    def next_id(self, session: Session, kind: EntityKind) -> str:
        """
        Take the next id of the given kind inside an open transaction.

        Ids start at 1, increase by one and are never handed out twice,
        even when the entity that held them is deleted.
        """
        kind = EntityKind(kind)
        sequence = session.get(SequenceModel, kind.value)
        if sequence is None:
            sequence = SequenceModel(kind=kind.value, next_value=1)
            session.add(sequence)

        value = sequence.next_value
        sequence.next_value = value + 1
        session.flush()
        return str(value)

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()
        logger.debug("Database disposed")
