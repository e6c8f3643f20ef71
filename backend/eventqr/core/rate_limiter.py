"""
Rate Limiting for EventQR API
=============================
Implements rate limiting using slowapi.

Only the credential endpoints are limited:
- /api/login: LOGIN_RATE_LIMIT (brute force protection)
- /api/register: REGISTER_RATE_LIMIT

Storage defaults to in-process memory; point RATE_LIMIT_STORAGE_URI at
redis:// when running more than one worker.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse

from eventqr.core.config import settings
from eventqr.core.logging_config import logger

DEFAULT_RETRY_AFTER_SECONDS = 60


def get_client_identifier(request: Request) -> str:
    """Rate limit key. Credential endpoints are hit before a session exists, so key by IP."""
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
    strategy="fixed-window",
)


def _retry_after(exc: RateLimitExceeded) -> int:
    limit = getattr(exc, "limit", None)
    item = getattr(limit, "limit", None)
    if item is not None:
        return int(item.get_expiry())
    return DEFAULT_RETRY_AFTER_SECONDS


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Uniform 429 body with a Retry-After header"""
    retry_after = _retry_after(exc)

    logger.warning(
        f"[RateLimit] Exceeded for {get_client_identifier(request)} on {request.url.path}: {exc.detail}",
        extra={"event_type": "rate_limit", "http_path": request.url.path},
    )

    return JSONResponse(
        status_code=429,
        content={
            "message": "Too many requests. Please slow down.",
            "code": "RATE_LIMITED",
        },
        headers={"Retry-After": str(retry_after)},
    )


def login_rate_limit():
    """Rate limit for the login endpoint"""
    return limiter.limit(settings.LOGIN_RATE_LIMIT)


def register_rate_limit():
    """Rate limit for the registration endpoint"""
    return limiter.limit(settings.REGISTER_RATE_LIMIT)
