"""
Tagfolio - FastAPI Backend.

Thin HTTP boundary over the identity, record and search services.
"""

from .main import create_app, main
from .dependencies import (
    ServiceContainer,
    get_service_container,
    get_current_user_id,
)
from .schemas import (
    Credentials,
    AuthResponse,
    UserResponse,
    RecordCreate,
    RecordUpdate,
    RecordResponse,
    MessageResponse,
    HealthResponse,
    ErrorResponse,
)

__all__ = [
    # Application
    "create_app",
    "main",
    # Dependencies
    "ServiceContainer",
    "get_service_container",
    "get_current_user_id",
    # Schemas
    "Credentials",
    "AuthResponse",
    "UserResponse",
    "RecordCreate",
    "RecordUpdate",
    "RecordResponse",
    "MessageResponse",
    "HealthResponse",
    "ErrorResponse",
]
