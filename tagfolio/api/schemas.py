"""
API Schemas for Tagfolio

Pydantic models for request validation and response serialization:
- Auth models
- Record models

Submission rules live here, so the store only ever sees clean input:
text is trimmed, title and description must stay non-empty, and a new
record needs at least one tag.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tagfolio.storage import RecordPatch


def _clean_text(value: Optional[str], label: str) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError(f"{label} is required")
    return value


def _clean_tags(value: Optional[list[str]]) -> Optional[list[str]]:
    if value is None:
        return None
    tags = [tag.strip() for tag in value if tag.strip()]
    if not tags:
        raise ValueError("At least one tag is required")
    return tags


def _clean_images(value: Optional[list[str]]) -> Optional[list[str]]:
    if value is None:
        return None
    images = [uri.strip() for uri in value]
    if any(not uri for uri in images):
        raise ValueError("Image URIs cannot be empty")
    return images


# =============================================================================
# Auth Schemas
# =============================================================================

class Credentials(BaseModel):
    """Register/login request. Checked by the identity service."""

    email: Optional[str] = None
    password: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": "a@test.com", "password": "secret1"}
        }
    )


class UserResponse(BaseModel):
    """Public user view; never carries the password hash."""

    id: str
    email: str


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


# =============================================================================
# Record Schemas
# =============================================================================

class RecordCreate(BaseModel):
    """Record creation request."""

    title: str = Field(..., max_length=500)
    description: str
    tags: list[str]
    images: list[str] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "1967 Mustang Fastback",
                "description": "Highland Green, 390 V8",
                "tags": ["classic", "ford"],
                "images": ["/uploads/1718000000-mustang.jpg"],
            }
        }
    )

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _clean_text(v, "Title")

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        return _clean_text(v, "Description")

    @field_validator("tags")
    @classmethod
    def tags_present(cls, v: list[str]) -> list[str]:
        return _clean_tags(v)

    @field_validator("images")
    @classmethod
    def images_not_blank(cls, v: list[str]) -> list[str]:
        return _clean_images(v)


class RecordUpdate(BaseModel):
    """Record update request (partial). Omitted or null fields are kept."""

    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    tags: Optional[list[str]] = None
    images: Optional[list[str]] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _clean_text(v, "Title")

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _clean_text(v, "Description")

    @field_validator("tags")
    @classmethod
    def tags_present(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _clean_tags(v)

    @field_validator("images")
    @classmethod
    def images_not_blank(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _clean_images(v)

    def to_patch(self) -> RecordPatch:
        return RecordPatch(
            title=self.title,
            description=self.description,
            tags=self.tags,
            images=self.images,
        )


class RecordResponse(BaseModel):
    """Record response model."""

    id: str
    owner_id: str
    title: str
    description: str
    tags: list[str]
    images: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# System Schemas
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str


class ErrorResponse(BaseModel):
    """Error body shared by every failing endpoint."""

    message: str
    code: str
    detail: Optional[str] = None
    timestamp: datetime
