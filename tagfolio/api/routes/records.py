"""
Record API Routes

CRUD operations and search over the caller's own records. Every route
is scoped to the user id resolved from the bearer token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from loguru import logger

from tagfolio.api.dependencies import (
    get_app_settings,
    get_current_user_id,
    get_query_engine,
    get_record_store,
)
from tagfolio.api.schemas import (
    ErrorResponse,
    MessageResponse,
    RecordCreate,
    RecordResponse,
    RecordUpdate,
)
from tagfolio.config import Settings
from tagfolio.errors import NotFoundError, ValidationError
from tagfolio.search import QueryEngine, parse_tag_filter
from tagfolio.storage import RecordStore


router = APIRouter(prefix="/records", tags=["records"])


def _check_image_count(images: Optional[list[str]], settings: Settings) -> None:
    if images is not None and len(images) > settings.max_images_per_record:
        raise ValidationError(f"At most {settings.max_images_per_record} images per record")


# =============================================================================
# Read Endpoints
# =============================================================================

@router.get("", response_model=list[RecordResponse])
def list_records(
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    """List the caller's records, most recently updated first."""
    return store.list_by_owner(user_id)


@router.get("/search", response_model=list[RecordResponse])
def search_records(
    q: str = Query("", description="Free-text term (case-insensitive)"),
    tags: Optional[str] = Query(None, description="Comma-separated tags, all required"),
    user_id: str = Depends(get_current_user_id),
    engine: QueryEngine = Depends(get_query_engine),
):
    """Search the caller's records by text and tags."""
    return engine.search(user_id, q, parse_tag_filter(tags))


@router.get(
    "/{record_id}",
    response_model=RecordResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Record not found"},
    },
)
def get_record(
    record_id: str,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    """Get one of the caller's records."""
    record = store.get_by_id(record_id, owner_id=user_id)
    if record is None:
        raise NotFoundError("Record", record_id)
    return record


# =============================================================================
# Write Endpoints
# =============================================================================

@router.post(
    "",
    response_model=RecordResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid record data"},
    },
)
def create_record(
    record: RecordCreate,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
    settings: Settings = Depends(get_app_settings),
):
    """Create a record owned by the caller."""
    _check_image_count(record.images, settings)
    logger.info(f"Creating record '{record.title}' for user {user_id}")

    return store.create(
        owner_id=user_id,
        title=record.title,
        description=record.description,
        tags=record.tags,
        images=record.images,
    )


@router.put(
    "/{record_id}",
    response_model=RecordResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Record not found"},
    },
)
@router.patch(
    "/{record_id}",
    response_model=RecordResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Record not found"},
    },
)
def update_record(
    record_id: str,
    record: RecordUpdate,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
    settings: Settings = Depends(get_app_settings),
):
    """
    Update a record.

    Supports partial updates - only provided fields are modified.
    """
    _check_image_count(record.images, settings)
    return store.update(user_id, record_id, record.to_patch())


@router.delete(
    "/{record_id}",
    response_model=MessageResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Record not found"},
    },
)
def delete_record(
    record_id: str,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    """Delete one of the caller's records. Deletion is permanent."""
    if not store.delete(user_id, record_id):
        raise NotFoundError("Record", record_id)
    return {"message": "Record deleted successfully"}
