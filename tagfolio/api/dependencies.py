"""
Dependency injection for FastAPI routes.

Provides injectable dependencies for:
- Configuration
- Service instances (identity, records, search)
- Authentication
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tagfolio.config import Settings
from tagfolio.identity import IdentityService
from tagfolio.search import QueryEngine
from tagfolio.storage import Database, RecordStore, UserRepository


# =============================================================================
# Service Container
# =============================================================================

class ServiceContainer:
    """
    Container for lazy-loaded service instances.

    One container per application; every service shares its Database, so
    a single lock serializes all store access.
    """

    def __init__(self, settings: Settings, database: Optional[Database] = None):
        self.settings = settings
        self._database = database
        self._user_repository = None
        self._record_store = None
        self._identity_service = None
        self._query_engine = None

    @property
    def database(self) -> Database:
        """Get database handle."""
        if self._database is None:
            self._database = Database(
                self.settings.database_url,
                echo=self.settings.database_echo,
            )
        return self._database

    @property
    def user_repository(self) -> UserRepository:
        if self._user_repository is None:
            self._user_repository = UserRepository(self.database)
        return self._user_repository

    @property
    def record_store(self) -> RecordStore:
        """Get record store instance."""
        if self._record_store is None:
            self._record_store = RecordStore(self.database)
        return self._record_store

    @property
    def identity_service(self) -> IdentityService:
        """Get identity service instance."""
        if self._identity_service is None:
            self._identity_service = IdentityService(
                self.user_repository,
                settings=self.settings,
            )
        return self._identity_service

    @property
    def query_engine(self) -> QueryEngine:
        """Get query engine instance."""
        if self._query_engine is None:
            self._query_engine = QueryEngine(self.record_store)
        return self._query_engine

    def close(self) -> None:
        if self._database is not None:
            self._database.dispose()


# =============================================================================
# Dependencies
# =============================================================================

def get_service_container(request: Request) -> ServiceContainer:
    """Get the container the application was built with."""
    return request.app.state.services


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_identity_service(
    container: ServiceContainer = Depends(get_service_container),
) -> IdentityService:
    """Dependency for identity service."""
    return container.identity_service


def get_record_store(
    container: ServiceContainer = Depends(get_service_container),
) -> RecordStore:
    """Dependency for record store."""
    return container.record_store


def get_query_engine(
    container: ServiceContainer = Depends(get_service_container),
) -> QueryEngine:
    """Dependency for query engine."""
    return container.query_engine


# =============================================================================
# Authentication Dependencies
# =============================================================================

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity: IdentityService = Depends(get_identity_service),
) -> str:
    """
    Resolve the bearer token to a user id.

    Raises:
        AuthError: Missing, invalid or expired token, or deleted user.
    """
    token = credentials.credentials if credentials else None
    user_id = identity.validate_token(token)
    # Picked up by the access log
    request.state.user_id = user_id
    return user_id
