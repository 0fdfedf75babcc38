"""Exception handlers rendering the JSON error envelope.

Every failed request gets {"error": "<message>"}. Internal failures are
logged with detail and answered with a generic message.
"""

import sqlite3

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from codetrain.web.sessions import SessionStoreError

logger = structlog.get_logger(__name__)


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [
        ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        for err in exc.errors()
    ]
    logger.info("request_validation_failed", path=request.url.path, fields=fields)
    message = "Invalid request"
    if fields and any(fields):
        message = f"Invalid request: {', '.join(f for f in fields if f)}"
    return _error(status.HTTP_400_BAD_REQUEST, message)


async def database_exception_handler(request: Request, exc: sqlite3.Error) -> JSONResponse:
    logger.exception("database_error", path=request.url.path, error=str(exc))
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Database error")


async def session_store_exception_handler(request: Request, exc: SessionStoreError) -> JSONResponse:
    logger.exception("session_store_error", path=request.url.path, error=str(exc))
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Session store error")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, error=str(exc))
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(sqlite3.Error, database_exception_handler)
    app.add_exception_handler(SessionStoreError, session_store_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
