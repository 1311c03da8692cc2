"""Error kinds raised by handlers and their HTTP mapping."""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    """A required field is missing or unusable."""


class ConflictError(ApiError):
    """The record would violate a uniqueness rule (duplicate email)."""


class AuthError(ApiError):
    """Missing or invalid token, or bad credentials.

    Missing token is 401; every other auth failure is 400.
    """


def describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = ".".join(loc)
    if not field:
        return "Request body is required"
    if first.get("type") in ("missing", "string_too_short") or first.get("input", "") is None:
        return f"{field} is required"
    return f"{field} is invalid: {first.get('msg')}"


async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return await api_error_handler(request, ValidationError(describe_validation_error(exc)))


async def store_error_handler(request: Request, exc: PyMongoError):
    logger.warning("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=400, content={"message": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(PyMongoError, store_error_handler)
