"""
Identity Module for Tagfolio

Registration, login and session token validation.
"""

from tagfolio.identity.security import PasswordHasher, TokenSigner
from tagfolio.identity.service import (
    IdentityService,
    AuthResult,
    normalize_email,
)

__all__ = [
    "IdentityService",
    "AuthResult",
    "PasswordHasher",
    "TokenSigner",
    "normalize_email",
]
