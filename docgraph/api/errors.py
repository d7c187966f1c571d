"""Maps domain errors onto HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from docgraph.config.logger import app_logger
from docgraph.utils.errors import (
    ConflictError,
    DocGraphError,
    InvalidInputError,
    NotFoundError,
    ProcessingError,
    UnsupportedError,
    UpstreamError,
)
from docgraph.utils.responses import error_response

STATUS_CODES = (
    (NotFoundError, 404),
    (InvalidInputError, 400),
    (ConflictError, 409),
    (UnsupportedError, 415),
    (ProcessingError, 422),
    (UpstreamError, 502),
)


def status_for(error: DocGraphError) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


async def domain_error_handler(request: Request, exc: DocGraphError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        app_logger.error(f"{request.method} {request.url.path} failed: {exc} {exc.details}")
    else:
        app_logger.warning(f"{request.method} {request.url.path} rejected ({status_code}): {exc}")
    body = error_response(error=type(exc).__name__, detail=exc.message, details=exc.details)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DocGraphError, domain_error_handler)
