"""Request tracing middleware for the training API.

Every request gets an ``X-Request-ID`` (propagated from the caller when
present), its path and method are bound to the logging context, and its
completion is logged with status code and duration.

Usage:
    from libs.common.middleware import add_observability_middleware

    app = FastAPI()
    add_observability_middleware(app)
"""
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

_QUIET_PATHS = frozenset({"/health"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request context for log correlation and log each request once."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=request.url.path,
            method=request.method,
        )
        started = time.perf_counter()

        try:
            response = await call_next(request)

            if request.url.path not in _QUIET_PATHS:
                level = "warning" if response.status_code >= 400 else "info"
                getattr(logger, level)(
                    "%s %s -> %d",
                    request.method,
                    request.url.path,
                    response.status_code,
                    extra={
                        "extra_fields": {
                            "status_code": response.status_code,
                            "duration_ms": _elapsed_ms(started),
                        }
                    },
                )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception:
            logger.exception(
                "Request failed",
                extra={"extra_fields": {"duration_ms": _elapsed_ms(started)}},
            )
            raise

        finally:
            clear_request_context()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def add_observability_middleware(app: FastAPI) -> None:
    """
    Configure logging and install the request context middleware.
    """
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
