"""
app/core/errors.py

Purpose: Exception handlers

Every failure leaves the API as ErrorResponse {error, code, details}:
- StorefrontError subclasses keep their own status and code
- Routing errors -> HTTP_ERROR, body validation -> VALIDATION_ERROR (422)
- Anything else -> INTERNAL_ERROR (500), message hidden in production
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.exceptions import ExternalServiceError, StorefrontError
from app.core.logging import get_logger
from app.schemas.response import error_response

logger = get_logger(__name__)

HIDDEN_ERROR_MESSAGE = "An internal error occurred. Please try again later."


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold the raw exception object
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(error)
    return errors


async def storefront_error(request: Request, exc: StorefrontError):
    # upstream outages are worth a log line; user errors are not
    if isinstance(exc, ExternalServiceError):
        logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return error_response(exc.status_code, exc.message, exc.code, exc.details)


async def http_error(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), "HTTP_ERROR")


async def validation_error(request: Request, exc: RequestValidationError):
    return error_response(422, "Input validation failed", "VALIDATION_ERROR", jsonable_errors(exc))


async def unhandled_error(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    message = HIDDEN_ERROR_MESSAGE if settings.is_production else str(exc)
    return error_response(500, message, "INTERNAL_ERROR")


def add_exception_handlers(app: FastAPI):
    app.add_exception_handler(StorefrontError, storefront_error)
    app.add_exception_handler(StarletteHTTPException, http_error)
    app.add_exception_handler(RequestValidationError, validation_error)
    app.add_exception_handler(Exception, unhandled_error)
