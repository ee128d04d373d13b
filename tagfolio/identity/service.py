"""
Identity service.

Registers users, checks credentials and resolves session tokens back to
user ids.
"""

import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from loguru import logger

from tagfolio.config import Settings
from tagfolio.errors import AuthError, AuthFailure, DuplicateError, ValidationError
from tagfolio.storage import PublicUser, UserRepository, normalize_email
from .security import PasswordHasher, TokenSigner


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class AuthResult:
    """Token plus public user view, returned by register and login."""

    token: str
    user: PublicUser

    def to_dict(self) -> dict:
        return {"token": self.token, "user": self.user.to_dict()}


class IdentityService:
    """
    Credential storage, password checks and session tokens.

    Usage:
        identity = IdentityService(UserRepository(db), settings=settings)
        result = identity.register("a@test.com", "secret1")
        user_id = identity.validate_token(result.token)
    """

    def __init__(
        self,
        users: UserRepository,
        settings: Optional[Settings] = None,
        hasher: Optional[PasswordHasher] = None,
        signer: Optional[TokenSigner] = None,
    ):
        settings = settings or Settings()
        self.users = users
        self.min_password_length = settings.min_password_length
        self.hasher = hasher or PasswordHasher(rounds=settings.bcrypt_rounds)
        self.signer = signer or TokenSigner(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(days=settings.token_ttl_days),
        )

    def _validate(self, email: Optional[str], password: Optional[str]) -> str:
        if not email or not email.strip() or not password or not password.strip():
            raise ValidationError("Email and password are required")

        email = normalize_email(email)
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Invalid email format")
        if len(password) < self.min_password_length:
            raise ValidationError(f"Password must be at least {self.min_password_length} characters")
        return email

    def register(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        """
        Create an account and sign the first session.

        Raises:
            ValidationError: Missing fields, bad email format, short password
            DuplicateError: Email already registered (case-insensitive)
        """
        email = self._validate(email, password)

        # Cheap rejection before paying for a hash
        if self.users.exists(email):
            raise DuplicateError()

        user = self.users.create(email, self.hasher.hash(password))
        logger.info(f"Registered user {user.id}")

        return AuthResult(token=self.signer.issue(user.id), user=user.public())

    def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        """
        Check credentials and sign a session.

        Raises:
            ValidationError: Missing fields
            AuthError: INVALID_CREDENTIALS for unknown email or wrong password
        """
        if not email or not email.strip() or not password or not password.strip():
            raise ValidationError("Email and password are required")

        user = self.users.get_by_email(normalize_email(email))
        if user is None:
            self.hasher.dummy_verify()
            logger.info("Login rejected")
            raise AuthError(AuthFailure.INVALID_CREDENTIALS)

        if not self.hasher.verify(password, user.password_hash):
            logger.info("Login rejected")
            raise AuthError(AuthFailure.INVALID_CREDENTIALS)

        return AuthResult(token=self.signer.issue(user.id), user=user.public())

    def validate_token(self, token: Optional[str]) -> str:
        """
        Resolve a session token to the user id it was issued for.

        Raises:
            AuthError: MISSING, INVALID, EXPIRED or USER_NOT_FOUND
        """
        if not token or not token.strip():
            raise AuthError(AuthFailure.MISSING)

        user_id = self.signer.decode(token.strip())
        if self.users.get(user_id) is None:
            raise AuthError(AuthFailure.USER_NOT_FOUND)
        return user_id

    def get_user(self, user_id: str) -> Optional[PublicUser]:
        user = self.users.get(user_id)
        return user.public() if user else None
