"""Translate domain errors into the ``{"error": ...}`` HTTP contract.

Protean's FastAPI handlers are installed first; the handlers below replace
the ones whose response shape or status differs from this API's contract
and add the errors Protean does not know about.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers as register_protean_handlers
from pydantic.alias_generators import to_camel
from starlette.exceptions import HTTPException as StarletteHTTPException

from site_reviews.exceptions import RateLimited, StoreFault, error_message

logger = structlog.get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again later."


def _error(status_code: int, message: str, headers: dict | None = None, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra}, headers=headers)


async def _validation_error(request: Request, exc: ValidationError):
    errors = {
        to_camel(field): list(value) if isinstance(value, (list, tuple)) else [value]
        for field, value in exc.messages.items()
    }
    return _error(400, error_message(exc), errors=errors)


async def _request_validation_error(request: Request, exc: RequestValidationError):
    # Only the body is strictly typed, so a schema failure means unusable JSON
    in_body = any((error.get("loc") or ("",))[0] == "body" for error in exc.errors())
    return _error(400, "Bad JSON" if in_body else "Bad params")


async def _rate_limited(request: Request, exc: RateLimited):
    return _error(429, str(exc), headers={"Retry-After": str(exc.retry_after)})


async def _not_found(request: Request, exc: ObjectNotFoundError):
    return _error(404, error_message(exc))


async def _invalid_operation(request: Request, exc: InvalidOperationError):
    return _error(409, error_message(exc))


async def _store_fault(request: Request, exc: StoreFault):
    # Already logged with the underlying cause by the repository
    return _error(500, GENERIC_ERROR_MESSAGE)


async def _http_exception(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def _unhandled(request: Request, exc: Exception):
    logger.exception("request.failed", path=request.url.path, method=request.method)
    return _error(500, GENERIC_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    register_protean_handlers(app)

    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(InvalidOperationError, _invalid_operation)
    app.add_exception_handler(RateLimited, _rate_limited)
    app.add_exception_handler(StoreFault, _store_fault)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_exception)
    app.add_exception_handler(Exception, _unhandled)
