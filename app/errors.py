"""Application errors and the JSON error envelope."""
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base error carrying an HTTP status and optional details."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[dict] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """Missing or malformed input, invalid enum value, duplicate key."""
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Operation incompatible with the current state of a resource."""
    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamError(AppError):
    """The database or the media service failed or timed out."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(message: str, details: Any = None) -> dict:
    body = {"success": False, "message": message}
    if details is not None:
        body["details"] = details
    return body


async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, UpstreamError) and settings.is_production:
        return JSONResponse(status_code=exc.status_code, content=error_body("Internal server error"))
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.details))


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        content = {"success": False, **exc.detail}
    else:
        content = error_body(str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"), "message": err.get("msg")}
        for err in exc.errors()
    ]
    fields = ", ".join(e["field"] for e in errors if e["field"])
    message = f"Invalid input: {fields}" if fields else "Invalid input"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body(message, errors))


async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Store error on %s %s: %s", request.method, request.url.path, exc)
    message = "Internal server error" if settings.is_production else "Database error, please retry"
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error_body(message))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = "Internal server error" if settings.is_production else str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error_body(message))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
