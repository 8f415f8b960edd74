from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from partyhub.api.responses import error_content
from partyhub.services.error_codes import ErrorCode
from partyhub.services.exceptions import ServiceError

logger = structlog.get_logger(__name__)

_HTTP_STATUS_CODES = {
    401: ErrorCode.UNAUTHENTICATED,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.METHOD_NOT_ALLOWED,
    429: ErrorCode.RATE_LIMITED,
}


def _error_path(loc: tuple | list) -> str:
    # Drop the leading "body"/"query"/"path" marker FastAPI adds
    parts = [str(p) for p in loc]
    if parts and parts[0] in {"body", "query", "path", "header"}:
        parts = parts[1:]
    return ".".join(parts)


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    logger.info(
        "service_error",
        code=exc.code,
        status_code=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_content(exc.message, exc.code),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"path": _error_path(err.get("loc", ())), "message": err.get("msg", "invalid value")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_content("Validation failed", ErrorCode.VALIDATION_FAILED.value, errors),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _HTTP_STATUS_CODES.get(exc.status_code, ErrorCode.HTTP_ERROR)
    message = exc.detail if isinstance(exc.detail, str) else "request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_content(message, code.value),
        headers=getattr(exc, "headers", None),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("database_error", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_content("Internal server error", ErrorCode.INTERNAL_ERROR.value),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_content("Internal server error", ErrorCode.INTERNAL_ERROR.value),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
