"""
Error Handling for Tagfolio API

Centralized error handling:
- Structured error responses
- Logging of errors
- Exception translation
"""

import traceback
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from tagfolio.errors import AuthError, TagfolioError


def create_error_response(
    message: str,
    code: str,
    status_code: int,
    detail: Optional[str] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """Create standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "message": message,
            "code": code,
            "detail": detail,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        headers=headers,
    )


def describe_validation_error(exc: RequestValidationError) -> str:
    """First validation problem as one readable sentence."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    message = str(first.get("msg", "Invalid value"))
    # pydantic prefixes messages raised from our validators
    message = message.removeprefix("Value error, ")

    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if field and not message.lower().startswith(field.lower()):
        return f"{field}: {message}"
    return message


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with FastAPI app."""

    @app.exception_handler(TagfolioError)
    async def tagfolio_exception_handler(request: Request, exc: TagfolioError):
        logger.warning(f"Tagfolio error: {exc.code} - {exc.message} ({request.method} {request.url.path})")

        headers = None
        if isinstance(exc, AuthError):
            headers = {"WWW-Authenticate": "Bearer"}

        if exc.status_code >= 500:
            # Internal failures carry no detail to clients
            logger.error(f"Internal error detail: {exc.detail}")
            return create_error_response(
                message="Internal Server Error",
                code=exc.code,
                status_code=exc.status_code,
            )

        return create_error_response(
            message=exc.message,
            code=exc.code,
            status_code=exc.status_code,
            detail=exc.detail,
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = describe_validation_error(exc)
        logger.warning(f"Validation error: {message}")
        return create_error_response(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}: "
            f"{type(exc).__name__}: {exc}\n{traceback.format_exc()}"
        )
        return create_error_response(
            message="Internal Server Error",
            code="INTERNAL_ERROR",
            status_code=500,
            detail="An unexpected error occurred",
        )
