from __future__ import annotations

import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

_REQUEST_ID: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

HEADER = "X-Request-ID"


def get_request_id() -> Optional[str]:
    """Request id of the request being served, if any."""
    return _REQUEST_ID.get()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Accept an incoming X-Request-ID or mint a UUID4, publish it through a
    context variable for logging and error bodies, and echo it back.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        raw_header = request.headers.get(HEADER)
        rid = (raw_header or "").strip() or str(uuid.uuid4())

        token = _REQUEST_ID.set(rid)
        try:
            request.state.request_id = rid
            response = await call_next(request)
        finally:
            _REQUEST_ID.reset(token)

        if response.headers.get(HEADER) is None:
            response.headers[HEADER] = rid
        return response
