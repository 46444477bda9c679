import time
import logging
import json
from typing import Any, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from config.settings import settings
from config.logging_config import get_request_id

logger = logging.getLogger(__name__)

MASK = "********"

# Probes hit these constantly; only failures are worth a line
QUIET_PATHS = {"/", "/api/health"}

# Manuscripts, images and avatars are never echoed into the logs
BINARY_CONTENT_PREFIXES = ("multipart/", "image/", "application/pdf", "application/octet-stream")

MAX_TEXT_BODY_CHARS = 1000


def is_sensitive(name: str) -> bool:
    name = name.lower()
    return any(field in name for field in settings.LOG_SENSITIVE_FIELDS)


def mask_sensitive(data: Any) -> Any:
    """Recursively replace values of sensitive keys (passwords, tokens, hook secrets)."""
    if isinstance(data, dict):
        return {
            key: MASK if is_sensitive(key) else mask_sensitive(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive(item) for item in data]
    return data


def describe_body(body: bytes) -> Optional[Any]:
    """Masked JSON, or short text; anything else is left out."""
    if not body:
        return None
    try:
        return mask_sensitive(json.loads(body))
    except ValueError:
        if len(body) < MAX_TEXT_BODY_CHARS:
            return body.decode("utf-8", errors="replace")
    return None


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Access log for the journal API.

    Every request gets an X-Request-ID that is stamped on all log records
    written while it is handled. Responses are logged with their duration:
    5xx as ERROR, 4xx and slow responses as WARNING. Request and response
    bodies are only logged when enabled in settings, never for uploads,
    and always with credentials masked.
    """

    def __init__(self, app: ASGIApp, request_id_filter=None):
        super().__init__(app)
        self.request_id_filter = request_id_filter

    async def dispatch(self, request: Request, call_next):
        request_id = get_request_id()
        if self.request_id_filter:
            self.request_id_filter.request_id = request_id
        request.state.request_id = request_id

        quiet = request.url.path in QUIET_PATHS
        started = time.perf_counter()
        if not quiet:
            await self._log_request(request, request_id)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                f"Unhandled error on {request.method} {request.url.path}",
                extra={
                    "request_id": request_id,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
            raise
        finally:
            if self.request_id_filter:
                self.request_id_filter.request_id = None

        duration_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        if not quiet or response.status_code >= 500:
            self._log_response(request, response, duration_ms, request_id)
        return response

    async def _log_request(self, request: Request, request_id: str):
        log_data = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client_host": request.client.host if request.client else None,
        }

        if settings.LOG_LEVEL == "DEBUG":
            log_data["headers"] = {
                key: MASK if is_sensitive(key) else value
                for key, value in request.headers.items()
            }

        content_type = request.headers.get("content-type", "")
        if settings.LOG_REQUEST_BODY and not content_type.startswith(BINARY_CONTENT_PREFIXES):
            body = describe_body(await request.body())
            if body is not None:
                log_data["body"] = body

        logger.info(f"{request.method} {request.url.path}", extra=log_data)

    def _log_response(self, request: Request, response: Response, duration_ms: float, request_id: str):
        log_data = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
        }
        if "X-New-Token" in response.headers:
            log_data["token_refreshed"] = True

        if settings.LOG_RESPONSE_BODY and hasattr(response, "body"):
            body = describe_body(response.body)
            if body is not None:
                log_data["body"] = body

        summary = f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.0f}ms)"
        if response.status_code >= 500:
            logger.error(summary, extra=log_data)
        elif response.status_code >= 400:
            logger.warning(summary, extra=log_data)
        elif duration_ms > settings.LOG_PERFORMANCE_THRESHOLD_MS:
            logger.warning(f"Slow response: {summary}", extra=log_data)
        else:
            logger.info(summary, extra=log_data)
