"""Rate limits for the marketplace API.

slowapi keeps the counters; where they live comes from
RATE_LIMIT_STORAGE_URI (in-memory by default, a redis:// URI when several
instances share the limits). Authenticated callers are limited per user,
anonymous ones per client IP.

Tiers:
    auth_limit      register / login, 5 per minute
    checkout_limit  placing orders, 20 per minute
    admin_limit     admin writes, 200 per minute
"""

from functools import lru_cache
from typing import Callable

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from libs.common.config import get_settings

AUTH_RATE = "5/minute"
CHECKOUT_RATE = "20/minute"
ADMIN_RATE = "200/minute"
DEFAULT_RATE = "100/minute"


def _get_client_ip(request: Request) -> str:
    """Original client address, looking through X-Forwarded-For when proxied."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


def _get_user_or_ip(request: Request) -> str:
    # request.state.user is set by the auth dependencies; None for anonymous calls
    user = getattr(request.state, "user", None)
    if user:
        return f"user:{user.user_id}"
    return f"ip:{_get_client_ip(request)}"


@lru_cache
def get_limiter() -> Limiter:
    settings = get_settings()
    return Limiter(
        key_func=_get_user_or_ip,
        default_limits=[DEFAULT_RATE],
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


limiter = get_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """429 in the same body shape as every other API error."""
    return JSONResponse(
        status_code=429,
        content={
            "detail": f"Too many requests (limit {exc.detail}). Try again later.",
            "code": "RATE_LIMIT_EXCEEDED",
        },
        headers={"Retry-After": str(getattr(exc, "retry_after", 60))},
    )


def auth_limit(func: Callable) -> Callable:
    return limiter.limit(AUTH_RATE)(func)


def checkout_limit(func: Callable) -> Callable:
    return limiter.limit(CHECKOUT_RATE)(func)


def admin_limit(func: Callable) -> Callable:
    return limiter.limit(ADMIN_RATE)(func)
