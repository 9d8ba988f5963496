"""Request tracing middleware for the marketplace API.

Every request gets an id (taken from ``X-Request-ID`` or generated), which
is bound to the logging context, echoed back on the response and included
in error bodies. One line is logged when the request finishes, carrying the
caller's user id and role when the request was authenticated.
"""
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
UNLOGGED_PATHS = frozenset({"/health"})


def _caller_fields(request: Request) -> dict[str, Optional[str]]:
    # Set by libs.auth.dependencies once a bearer token has been verified
    user = getattr(request.state, "user", None)
    if user is None:
        return {"user_id": None, "role": None}
    return {"user_id": user.user_id, "role": user.role.value}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id to the logging context and log each request's outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get(REQUEST_ID_HEADER),
            path=request.url.path,
            method=request.method,
        )
        logged = request.url.path not in UNLOGGED_PATHS
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Request failed with unhandled exception",
                extra={
                    "extra_fields": {
                        "error": str(e),
                        "duration_ms": round(
                            (time.perf_counter() - start_time) * 1000, 2
                        ),
                        **_caller_fields(request),
                    }
                },
            )
            raise
        else:
            if logged:
                duration_ms = (time.perf_counter() - start_time) * 1000
                # 4xx/5xx are worth a look; denied access shows up here too
                log = logger.warning if response.status_code >= 400 else logger.info
                log(
                    "%s %s -> %s (%.2f ms)",
                    request.method,
                    request.url.path,
                    response.status_code,
                    duration_ms,
                    extra={
                        "extra_fields": {
                            "status_code": response.status_code,
                            "duration_ms": round(duration_ms, 2),
                            **_caller_fields(request),
                        }
                    },
                )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_request_context()


def add_observability_middleware(app: FastAPI) -> None:
    """Configure logging and install request tracing on ``app``."""
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
    logger.info("Request tracing enabled")
