"""
Request logging middleware.

One access log line per catalog request, tagged with:
- A correlation id, echoed back in ``X-Request-ID``
- The authenticated caller and the record the request addressed
- The JSON body with credentials redacted (only when LOG_REQUEST_BODY is on)
"""

import json
import logging
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from tagfolio.config import Settings

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

logger = logging.getLogger("tagfolio.api")

REQUEST_ID_HEADER = "X-Request-ID"
REDACTED = "[REDACTED]"

# Sent to /auth/register and /auth/login, or returned by them
CREDENTIAL_FIELDS: FrozenSet[str] = frozenset({"password", "token"})


@dataclass(frozen=True)
class RequestLogConfig:
    """What the access log records."""

    log_body: bool = False
    max_body_bytes: int = 8192
    # Health checks and the API banner
    quiet_paths: FrozenSet[str] = frozenset({"/", "/health"})
    redacted_fields: FrozenSet[str] = CREDENTIAL_FIELDS
    slow_threshold: float = 1.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "RequestLogConfig":
        return cls(log_body=settings.log_request_body)


def redact_credentials(data: Any, fields: FrozenSet[str] = CREDENTIAL_FIELDS) -> Any:
    """Replace credential values anywhere in a decoded JSON body."""
    if isinstance(data, dict):
        return {
            key: REDACTED if key.lower() in fields else redact_credentials(value, fields)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact_credentials(item, fields) for item in data]
    return data


def get_request_id() -> str:
    return request_id_var.get()


def describe_request(request: Request, status_code: int) -> Dict[str, Any]:
    """
    Summarize a finished request for the access log.

    ``user_id`` is set by the bearer dependency once a token resolves, and
    ``record_id`` comes from the matched route, so both are read after the
    handler has run.
    """
    data: Dict[str, Any] = {
        "method": request.method,
        "path": request.url.path,
        "status": status_code,
    }
    if request.url.query:
        data["query"] = request.url.query

    user_id = getattr(request.state, "user_id", None)
    if user_id is not None:
        data["user_id"] = user_id

    record_id = request.path_params.get("record_id")
    if record_id is not None:
        data["record_id"] = record_id

    return data


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line, for log shippers outside development."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_var.get()
        if request_id:
            entry["request_id"] = request_id

        request_data = getattr(record, "request_data", None)
        if request_data:
            entry["request"] = request_data
        duration_ms = getattr(record, "duration_ms", None)
        if duration_ms is not None:
            entry["duration_ms"] = duration_ms

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access logging for the catalog API."""

    def __init__(self, app: FastAPI, config: Optional[RequestLogConfig] = None):
        super().__init__(app)
        self.config = config or RequestLogConfig()

    async def _read_body(self, request: Request) -> Optional[str]:
        body = await request.body()
        if not body:
            return None
        if len(body) > self.config.max_body_bytes:
            return f"[{len(body)} bytes omitted]"

        try:
            payload = json.loads(body)
        except ValueError:
            return "[non-JSON body]"
        return json.dumps(redact_credentials(payload, self.config.redacted_fields))

    def _level_for(self, status_code: int, duration: float) -> int:
        if status_code >= 500:
            return logging.ERROR
        if status_code >= 400 or duration > self.config.slow_threshold:
            return logging.WARNING
        return logging.INFO

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request_id_var.set(request_id)

        if request.url.path in self.config.quiet_paths:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response

        body = await self._read_body(request) if self.config.log_body else None

        started = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - started
        duration_ms = round(duration * 1000, 2)

        response.headers[REQUEST_ID_HEADER] = request_id

        request_data = describe_request(request, response.status_code)
        if body:
            request_data["body"] = body

        message = f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)"
        if "user_id" in request_data:
            message = f"{message} user={request_data['user_id']}"
        if duration > self.config.slow_threshold:
            message = f"[SLOW] {message}"

        logger.log(
            self._level_for(response.status_code, duration),
            message,
            extra={"request_data": request_data, "duration_ms": duration_ms},
        )

        return response


def setup_logging(app: FastAPI, settings: Settings) -> None:
    """
    Install the access log middleware.

    Outside development and test the ``tagfolio`` logger also gets a JSON
    handler.
    """
    if settings.environment not in ("development", "test"):
        app_logger = logging.getLogger("tagfolio")
        if not any(isinstance(h.formatter, JsonLogFormatter) for h in app_logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(JsonLogFormatter())
            app_logger.addHandler(handler)
        app_logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    app.add_middleware(RequestLoggingMiddleware, config=RequestLogConfig.from_settings(settings))
