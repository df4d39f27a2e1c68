import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tradedesk.exceptions import (
    AppError,
    ConfigurationError,
    NotFoundError,
    RateLimitError,
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
)

logger = structlog.get_logger()

_STATUS_CODES: list[tuple[type[AppError], int]] = [
    (NotFoundError, 404),
    (ValidationError, 422),
    (RateLimitError, 429),
    (UpstreamTimeoutError, 504),
    (UpstreamError, 502),
    (ConfigurationError, 500),
]


def status_code_for(exc: AppError) -> int:
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("request_failed", path=request.url.path, code=exc.code, error=exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": exc.message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
