"""Structured error responses for the error taxonomy."""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog
from .correlation import get_correlation_id
from ..errors import NotFoundError, StoreError, ValidationError

log = structlog.get_logger()


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    log.warning("request.invalid", fields=exc.fields, path=request.url.path)
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation error",
            "details": [d.to_dict() for d in exc.details],
            "correlation_id": get_correlation_id(),
        },
    )


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    log.info("event.not_found", event_id=exc.event_id, path=request.url.path)
    return JSONResponse(
        status_code=404,
        content={
            "error": "Not found",
            "message": exc.message,
            "id": exc.event_id,
            "correlation_id": get_correlation_id(),
        },
    )


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    log.error(
        "store.error",
        operation=exc.operation,
        error=str(exc.cause) if exc.cause else None,
        error_type=type(exc.cause).__name__ if exc.cause else None,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "correlation_id": get_correlation_id(),
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(StoreError, store_error_handler)
