"""Centralized exception hierarchy and handlers for the application.

This module maps application errors to HTTP status codes and a uniform
response body. Services and routes raise exceptions from this hierarchy
rather than generic exceptions or HTTPException directly.

Exception Hierarchy:
    AppException (base)
    ├── ValidationError (400)
    ├── NotFoundError (404)
    ├── UpstreamError (502)
    └── ExternalAPIError (503)
        ├── InvalidSymbolError (404)
        └── RateLimitedError (503)

Usage in Services:
    from networth.core.exceptions import ExternalAPIError

    async def fetch_price(symbol: str) -> Decimal:
        try:
            return await upstream_call(symbol)
        except httpx.HTTPError as e:
            raise ExternalAPIError(f"Price lookup failed: {e}") from e

The core aggregation functions never raise; only collaborator calls
(network, storage) end up here.
"""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    """
    Base exception class for all application errors.

    Attributes:
        status_code: HTTP status code for this error type
        detail: User-facing error message
        error_code: Machine-readable error code (optional)
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "Internal server error"
    error_code: str | None = None

    def __init__(
        self,
        detail: str | None = None,
        *,
        error_code: str | None = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            detail: Custom error message (overrides class default)
            error_code: Machine-readable error identifier
        """
        self.detail = detail or self.__class__.detail
        self.error_code = error_code or self.__class__.error_code
        super().__init__(self.detail)


class ValidationError(AppException):
    """Raised when input fails a business rule pydantic cannot express alone."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Validation error"
    error_code = "VALIDATION_ERROR"


class NotFoundError(AppException):
    """Raised when a transaction, asset or liability id is unknown."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Resource not found"
    error_code = "NOT_FOUND"


class UpstreamError(AppException):
    """
    Raised when a proxied upstream answers with an error or garbage.

    Maps to HTTP 502 Bad Gateway. The error_code doubles as the short tag
    the proxy routes return to the browser.
    """

    status_code = status.HTTP_502_BAD_GATEWAY
    detail = "Upstream request failed"
    error_code = "UPSTREAM_ERROR"


class ExternalAPIError(AppException):
    """
    Raised when an external price or FX API call fails.

    Used when Yahoo Finance, the Indian market API or the metals API is
    unavailable or returns unusable data.
    Maps to HTTP 503 Service Unavailable.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "External service unavailable"
    error_code = "EXTERNAL_API_ERROR"


class InvalidSymbolError(ExternalAPIError):
    """Raised when a price provider does not know the requested symbol."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Symbol not found"
    error_code = "INVALID_SYMBOL"


class RateLimitedError(ExternalAPIError):
    """Raised when a price provider refuses the call because of its quota."""

    detail = "Price provider rate limit reached"
    error_code = "PROVIDER_RATE_LIMITED"


async def app_exception_handler(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    """
    Handle application exceptions and convert to HTTP responses.

    Response Format:
        {
            "detail": "User-facing error message",
            "error_code": "MACHINE_READABLE_CODE"  # optional
        }

    Logging:
        - Server/upstream errors (5xx): full stack trace
        - Client errors (4xx): message only
    """
    if exc.status_code >= 500:
        logger.error(
            f"{exc.__class__.__name__}: {exc.detail}",
            exc_info=True,
            extra={
                "status_code": exc.status_code,
                "error_code": exc.error_code,
                "request_path": request.url.path,
            },
        )
    else:
        logger.warning(
            f"{exc.__class__.__name__}: {exc.detail}",
            extra={
                "status_code": exc.status_code,
                "error_code": exc.error_code,
                "request_path": request.url.path,
            },
        )

    response_body: dict[str, Any] = {"detail": exc.detail}
    if exc.error_code:
        response_body["error_code"] = exc.error_code

    return JSONResponse(
        status_code=exc.status_code,
        content=response_body,
    )
