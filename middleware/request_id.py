"""
Request ID middleware.

Each request gets an id (client supplied ``X-Request-ID`` or a fresh UUID).
It is kept in a ContextVar so concurrent requests never see each other's id,
stamped on log records by ``RequestIDLogFilter`` and echoed in the response.
"""

import uuid
import logging
from contextvars import ContextVar
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


NO_REQUEST_ID = "no-request-id"

_request_id: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        request.state.request_id = request_id
        token = _request_id.set(request_id)

        try:
            response: Response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            _request_id.reset(token)


class RequestIDLogFilter(logging.Filter):
    """Attach the current request id to every record passing the handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _request_id.get()
        return True


def get_request_id(request: Request) -> str:
    """
    Get the request id from request state.

    Returns:
        Request ID string, or "no-request-id" outside the middleware
    """
    return getattr(request.state, "request_id", NO_REQUEST_ID)
