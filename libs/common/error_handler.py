"""Global exception handlers producing consistent JSON error bodies.

Usage:
    from libs.common.error_handler import add_exception_handlers

    app = FastAPI()
    add_exception_handlers(app)
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from libs.common.errors import AppError
from libs.common.logging import get_logger, get_request_id

logger = get_logger(__name__)


def _error_body(kind: str, detail) -> dict:
    body = {"error": kind, "detail": detail}
    request_id = get_request_id()
    if request_id:
        body["request_id"] = request_id
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.kind, exc.detail)
    else:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=exc.status_code, content=_error_body(exc.kind, exc.detail)
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Missing or malformed fields are plain 400s in this API.
    missing = [
        ".".join(str(part) for part in err["loc"] if part != "body")
        for err in exc.errors()
        if err.get("type") == "missing"
    ]
    if missing:
        detail = f"Missing required fields: {', '.join(missing)}"
    else:
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Validation", detail),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("InternalError", "Internal server error"),
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Register the domain, validation and fallback handlers on ``app``."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
