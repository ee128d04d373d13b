"""
Configuration for Tagfolio.

Settings are read from the environment (and a local .env file when
present) once per process and cached.
"""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv
from loguru import logger

from tagfolio.errors import ConfigurationError


# Development-only signing secret; production deployments must set JWT_SECRET.
DEFAULT_JWT_SECRET = "dev-insecure-secret-change-me"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class Settings:
    """Application settings loaded from environment."""

    # Database
    database_url: str = "sqlite:///:memory:"
    database_echo: bool = False

    # Sessions
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    token_ttl_days: int = 7

    # Credentials
    bcrypt_rounds: int = 10
    min_password_length: int = 6

    # Records
    max_images_per_record: int = 10

    # Environment
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    log_request_body: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        load_dotenv()
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            database_echo=os.getenv("DATABASE_ECHO", "false").lower() == "true",
            jwt_secret=os.getenv("JWT_SECRET") or cls.jwt_secret,
            jwt_algorithm=os.getenv("JWT_ALGORITHM", cls.jwt_algorithm),
            token_ttl_days=_env_int("TOKEN_TTL_DAYS", cls.token_ttl_days),
            bcrypt_rounds=_env_int("BCRYPT_ROUNDS", cls.bcrypt_rounds),
            min_password_length=_env_int("MIN_PASSWORD_LENGTH", cls.min_password_length),
            max_images_per_record=_env_int("MAX_IMAGES_PER_RECORD", cls.max_images_per_record),
            environment=os.getenv("TAGFOLIO_ENV", cls.environment),
            debug=os.getenv("DEBUG", "true").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            log_request_body=os.getenv("LOG_REQUEST_BODY", "false").lower() == "true",
        )

    @property
    def uses_default_secret(self) -> bool:
        return self.jwt_secret == DEFAULT_JWT_SECRET

    def validate(self) -> "Settings":
        """
        Check settings are safe for the selected environment.

        Raises:
            ConfigurationError: If production runs with the default secret,
                or numeric limits are out of range.
        """
        if self.uses_default_secret:
            if self.environment == "production":
                raise ConfigurationError("JWT_SECRET must be set in production")
            logger.warning("Using the default JWT secret; set JWT_SECRET outside development")

        if not 4 <= self.bcrypt_rounds <= 31:
            raise ConfigurationError(f"BCRYPT_ROUNDS must be between 4 and 31, got {self.bcrypt_rounds}")
        if self.token_ttl_days < 1:
            raise ConfigurationError("TOKEN_TTL_DAYS must be at least 1")
        if self.min_password_length < 1:
            raise ConfigurationError("MIN_PASSWORD_LENGTH must be at least 1")
        if self.max_images_per_record < 0:
            raise ConfigurationError("MAX_IMAGES_PER_RECORD cannot be negative")

        return self


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings.from_env()
