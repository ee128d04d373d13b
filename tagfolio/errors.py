"""
Error taxonomy for Tagfolio.

Every failure the core reports deterministically is a TagfolioError
subclass carrying a stable message, a machine-readable code and the HTTP
status the API boundary answers with.
"""

from enum import Enum
from typing import Optional


class TagfolioError(Exception):
    """Base exception for Tagfolio errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        detail: Optional[str] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)


class ValidationError(TagfolioError):
    """Malformed or missing input."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            detail=detail,
        )


class DuplicateError(TagfolioError):
    """A unique value is already taken."""

    def __init__(self, message: str = "Email already registered"):
        super().__init__(
            message=message,
            code="DUPLICATE",
            status_code=409,
        )


class AuthFailure(str, Enum):
    """Why a credential or session was rejected."""
    MISSING = "missing"
    INVALID = "invalid"
    EXPIRED = "expired"
    USER_NOT_FOUND = "user_not_found"
    INVALID_CREDENTIALS = "invalid_credentials"


_AUTH_MESSAGES = {
    AuthFailure.MISSING: "Authentication required",
    AuthFailure.INVALID: "Invalid token",
    AuthFailure.EXPIRED: "Token expired",
    AuthFailure.USER_NOT_FOUND: "User not found",
    # Shared by unknown email and wrong password
    AuthFailure.INVALID_CREDENTIALS: "Invalid email or password",
}


class AuthError(TagfolioError):
    """Authentication failed."""

    def __init__(self, reason: AuthFailure):
        self.reason = reason
        super().__init__(
            message=_AUTH_MESSAGES[reason],
            code=f"AUTH_{reason.name}",
            status_code=401,
        )


class NotFoundError(TagfolioError):
    """Resource absent, or not owned by the caller."""

    def __init__(self, resource: str = "Record", identifier: Optional[str] = None):
        super().__init__(
            message=f"{resource} not found",
            code="NOT_FOUND",
            status_code=404,
            detail=f"No {resource.lower()} with identifier '{identifier}' exists" if identifier else None,
        )


class InternalError(TagfolioError):
    """Unexpected failure; never shown to clients in detail."""

    def __init__(self, message: str = "Internal Server Error", detail: Optional[str] = None):
        super().__init__(
            message=message,
            code="INTERNAL_ERROR",
            status_code=500,
            detail=detail,
        )


class ConfigurationError(TagfolioError):
    """Settings are unusable for the selected environment."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            status_code=500,
        )
