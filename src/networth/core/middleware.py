"""Logging middleware for HTTP requests and responses."""

import logging
import time
from collections.abc import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging API requests and responses with timing metrics.

    Logs every request under ``/api`` with method, path and client, then the
    response status and processing time. Every response, logged or not, gets
    an ``X-Process-Time`` header.

    Skips logging for:
    - Health check endpoints (/health, /health/db, /health/cache)
    - API documentation endpoints (/docs, /openapi.json, /redoc)
    - Static bundle and client-side routes served to the browser
    """

    def __init__(self, app: ASGIApp, logged_prefixes: tuple[str, ...] = ("/api",)) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application instance
            logged_prefixes: Path prefixes whose requests are logged
        """
        super().__init__(app)
        self._logged_prefixes = logged_prefixes

    def _should_log(self, path: str) -> bool:
        return path.startswith(self._logged_prefixes)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process the request, timing it and logging it when it is an API call.

        Args:
            request: The incoming HTTP request
            call_next: The next middleware/route handler in the chain

        Returns:
            The HTTP response with timing header added
        """
        path = request.url.path
        should_log = self._should_log(path)

        if should_log:
            client_host = request.client.host if request.client else "unknown"
            logger.info(f"→ {request.method} {path} from {client_host}")

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        if should_log:
            log_level = logging.WARNING if response.status_code >= 400 else logging.INFO
            logger.log(
                log_level,
                f"← {request.method} {path} - {response.status_code} ({duration:.3f}s)",
            )

        response.headers["X-Process-Time"] = f"{duration:.3f}"

        return response
