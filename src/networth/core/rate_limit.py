"""Rate limiting for the proxy and refresh endpoints using slowapi."""

import re

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from networth.core.config import settings

_UNIT_SECONDS = {"second": 1, "minute": 60, "hour": 3600, "day": 86400}


def parse_retry_after(limit_detail: str, default: int = 60) -> int:
    """
    Convert a slowapi limit description into a Retry-After value in seconds.

    slowapi describes limits as "X per Y unit" (e.g. "10 per 1 minute").

    Args:
        limit_detail: Limit description from the RateLimitExceeded exception
        default: Value used when the description cannot be parsed

    Returns:
        Number of seconds the client should wait
    """
    match = re.search(r"(\d+)\s+per\s+(\d+)\s+(\w+)", limit_detail)
    if not match:
        return default

    amount = int(match.group(2))
    unit = match.group(3).rstrip("s")
    return amount * _UNIT_SECONDS.get(unit, 60)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Exception handler for rate limit exceeded errors.

    Args:
        request: The incoming request
        exc: The RateLimitExceeded exception

    Returns:
        429 JSONResponse with retry_after and a Retry-After header
    """
    retry_after = parse_retry_after(str(exc.detail))

    response = JSONResponse(
        status_code=429,
        content={
            "detail": f"Rate limit exceeded: {exc.detail}",
            "retry_after": retry_after,
        },
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],  # Each endpoint sets its own limit
    enabled=settings.RATE_LIMIT_ENABLED,
    headers_enabled=False,
)
