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
REQUEST_ID_HEADER = "X-Request-ID"


def _is_sensitive(key: str) -> bool:
    key = key.lower()
    return any(sensitive in key for sensitive in settings.LOG_SENSITIVE_FIELDS)


def mask_sensitive(data: Any) -> Any:
    """Recursively replace values under credential-like keys."""
    if isinstance(data, dict):
        return {k: MASK if _is_sensitive(str(k)) else mask_sensitive(v) for k, v in data.items()}
    if isinstance(data, list):
        return [mask_sensitive(item) for item in data]
    return data


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Access log with a per-request id.

    The id is taken from an incoming X-Request-ID header when the caller sent
    one, otherwise generated. It is stored on request.state, attached to every
    log record through the shared filter and echoed back on the response.
    Responses are logged with the id of the user a guard attached, if any.
    """

    def __init__(self, app: ASGIApp, request_id_filter=None):
        super().__init__(app)
        self.request_id_filter = request_id_filter

    async def dispatch(self, request: Request, call_next):
        request_id = self._request_id(request)
        if self.request_id_filter:
            self.request_id_filter.request_id = request_id
        request.state.request_id = request_id

        await self._log_request(request)
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"Request failed: {request.method} {request.url.path}")
            raise
        finally:
            if self.request_id_filter:
                self.request_id_filter.request_id = None

        duration_ms = (time.perf_counter() - start_time) * 1000
        self._log_response(request, response, duration_ms, request_id)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @staticmethod
    def _request_id(request: Request) -> str:
        incoming: Optional[str] = request.headers.get(REQUEST_ID_HEADER)
        if incoming and len(incoming) <= 64:
            return incoming
        return get_request_id()

    async def _log_request(self, request: Request):
        details = {"query": dict(request.query_params)} if request.query_params else {}

        if settings.LOG_LEVEL.upper() == "DEBUG":
            details["headers"] = {
                k: MASK if _is_sensitive(k) else v for k, v in request.headers.items()
            }

        if settings.LOG_REQUEST_BODY and request.method in ("POST", "PUT", "PATCH"):
            body = await request.body()
            try:
                details["body"] = mask_sensitive(json.loads(body))
            except (ValueError, UnicodeDecodeError):
                details["body"] = f"<{len(body)} bytes>"

        client = request.client.host if request.client else "-"
        logger.info(f"--> {request.method} {request.url.path} from {client} {details or ''}".rstrip())

    def _log_response(self, request: Request, response: Response, duration_ms: float, request_id: str):
        user = getattr(request.state, "user", None)
        who = f" user={user.id}" if user is not None else ""
        message = f"<-- {request.method} {request.url.path} {response.status_code} {duration_ms:.1f}ms{who}"
        extra = {"request_id": request_id}

        if response.status_code >= 500:
            logger.error(message, extra=extra)
        elif response.status_code >= 400:
            logger.warning(message, extra=extra)
        elif duration_ms > settings.LOG_PERFORMANCE_THRESHOLD_MS:
            logger.warning(f"Slow response: {message}", extra=extra)
        else:
            logger.info(message, extra=extra)
