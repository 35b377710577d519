"""Error taxonomy and the FastAPI handlers that render it."""

import logging
from typing import Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger("streak_tracker.errors")


class AppError(Exception):
    status_code = 500
    # Response body key. The already-joined reply uses "message" instead.
    body_key = "error"

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code


class ValidationError(AppError, ValueError):
    status_code = 400


class NotFoundError(AppError, LookupError):
    status_code = 404


class ConflictError(AppError):
    status_code = 400


class AlreadyJoinedError(ConflictError):
    body_key = "message"

    def __init__(self, message: str = "User already joined this streak"):
        super().__init__(message)


class InvalidCredentialsError(AppError):
    status_code = 400

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class StorageError(AppError):
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


async def app_error_handler(request: Request, exc: AppError):
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(level, "%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={exc.body_key: exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    logger.warning("%s %s -> 400: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=400, content={"error": message})


async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": StorageError().message})


def install_error_handlers(app) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
