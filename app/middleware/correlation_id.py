"""
Correlation ID middleware

Every request runs with a correlation ID, taken from the inbound header when the
caller supplied one and generated otherwise. The ID is visible to the logger
through a context variable and is echoed back on the response.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import config

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def set_correlation_id(correlation_id: Optional[str]) -> None:
    _correlation_id.set(correlation_id)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds a correlation ID to the request context and the response headers"""

    async def dispatch(self, request: Request, call_next):
        header = config.correlation_id_header
        correlation_id = request.headers.get(header) or str(uuid.uuid4())

        set_correlation_id(correlation_id)
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers[header] = correlation_id
        return response
