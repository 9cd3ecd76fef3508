"""Exception handlers - every error leaves the API as ``{error, message}``."""

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from enrichment_tracker.core.exceptions import EnrichmentError
from enrichment_tracker.observability.logging import get_logger

logger = get_logger(__name__)

# Domain error code -> HTTP status
ERROR_CODE_TO_STATUS: dict[str, int] = {
    "NOT_FOUND": 404,
    "CONFLICT": 409,
    "INVALID_INPUT": 400,
    "INTERNAL": 500,
}


def status_for_error_code(code: str) -> int:
    """Resolve a domain error code to HTTP status, defaulting to 500."""
    return ERROR_CODE_TO_STATUS.get(code, 500)


def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message},
    )


async def enrichment_error_handler(request: Request, exc: EnrichmentError) -> JSONResponse:
    status_code = status_for_error_code(exc.code)
    if status_code >= 500:
        logger.error("request_error", path=request.url.path, error=exc.message)
    return error_response(status_code, exc.title, exc.message)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    try:
        title = HTTPStatus(exc.status_code).phrase
    except ValueError:
        title = "Error"
    message = exc.detail if isinstance(exc.detail, str) else title
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": title, "message": message},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies and out-of-range query parameters are a 400."""
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return error_response(400, "Invalid request", "; ".join(problems) or "Invalid request")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
    return error_response(500, "Internal server error", "An unexpected error occurred.")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EnrichmentError, enrichment_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
