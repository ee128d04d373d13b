"""
API middleware components.

Provides cross-cutting concerns for the API:
- Error handling
- Request logging
"""

from .error_handler import (
    setup_exception_handlers,
    create_error_response,
    describe_validation_error,
)

from .logging import (
    RequestLogConfig,
    JsonLogFormatter,
    RequestLoggingMiddleware,
    setup_logging,
    get_request_id,
    redact_credentials,
)


__all__ = [
    # Error handling
    "setup_exception_handlers",
    "create_error_response",
    "describe_validation_error",
    # Logging
    "RequestLogConfig",
    "JsonLogFormatter",
    "RequestLoggingMiddleware",
    "setup_logging",
    "get_request_id",
    "redact_credentials",
]
