"""
Rutas Seguras Backend — Request Logging Middleware
==================================================

What:  One access-log line per HTTP request with status and duration.
Why:   Monitoring and debugging without uvicorn's access log, which lacks the
       request ID and timing.
How:   Times the downstream call and logs at a level chosen by status class.
When:  After RequestIDMiddleware (uses the request ID for correlation).

What we log vs what we DON'T log (privacy):
    Logged:     method, path, status, duration, client IP, request ID, user id
    Not logged: request bodies (passwords), query strings, Authorization headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from rutas_seguras.middleware.request_id import request_id_var

logger = logging.getLogger("rutas_seguras.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request/response pair.

    Level by status:
        5xx     → ERROR   (system problem)
        4xx     → WARNING (client error; a spike of 401/403 is worth a look)
        2xx/3xx → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Health probes run every few seconds and would drown everything else
        if request.url.path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        # Set by the auth dependency when the request carried a valid token
        user = getattr(request.state, "user", None)
        rid = request_id_var.get("")

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s user=%s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            client_ip,
            user.id if user else "-",
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
