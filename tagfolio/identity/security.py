"""
Password hashing and session tokens.

Passwords are hashed with bcrypt through passlib; session tokens are
HS256 JWTs signed with the process-wide secret.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from tagfolio.errors import AuthError, AuthFailure


USER_ID_CLAIM = "userId"


class PasswordHasher:
    """Salted bcrypt hashing with a fixed cost factor."""

    def __init__(self, rounds: int = 10):
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        return self.pwd_context.verify(plain_password, hashed_password)

    def dummy_verify(self) -> None:
        """Spend one verification's worth of time without a stored hash."""
        self.pwd_context.dummy_verify()


class TokenSigner:
    """Issues and checks signed, time-bounded session tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl: timedelta = timedelta(days=7)):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    def issue(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        """Sign a token asserting user_id."""
        now = datetime.now(timezone.utc)
        to_encode = {
            USER_ID_CLAIM: user_id,
            "iat": now,
            "exp": now + (expires_delta if expires_delta is not None else self.ttl),
        }
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> str:
        """
        Check a token and return the user id it asserts.

        Raises:
            AuthError: INVALID for bad signature, format or claims;
                EXPIRED once past expiry
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise AuthError(AuthFailure.EXPIRED)
        except JWTError:
            raise AuthError(AuthFailure.INVALID)

        user_id = payload.get(USER_ID_CLAIM)
        if not isinstance(user_id, str) or not user_id:
            raise AuthError(AuthFailure.INVALID)
        return user_id
