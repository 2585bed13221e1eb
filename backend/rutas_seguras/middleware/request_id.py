"""
Rutas Seguras Backend — Request ID Middleware
=============================================

What:  Assigns a correlation ID to each incoming request and echoes it in the
       X-Request-ID response header.
Why:   Every log line and every error envelope from one request carries the
       same ID, so a user can quote it and support can find the logs.
How:   Reuses a sane client-supplied X-Request-ID or generates a short one,
       stores it in a ContextVar and on request.state.
When:  First middleware in the chain (runs before all other processing).
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one thread each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Client IDs end up in logs and headers; accept only short token-like values
_CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9._\-]{1,64}$")


def new_request_id() -> str:
    # 8 hex chars are enough for correlation and stay readable in logs
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Use the client's X-Request-ID header when it looks like an ID
        2. Otherwise generate a new one
        3. Store it in the ContextVar (loggers, error handlers) and in
           request.state (route handlers)
        4. Add it to the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        supplied = request.headers.get("X-Request-ID", "")
        rid = supplied if _CLIENT_ID_PATTERN.match(supplied) else new_request_id()

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
