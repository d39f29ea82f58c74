"""
Handlers that render expected failures into the JSON error envelope.

- Domain errors keep their own status code, message and field errors.
- HTTP exceptions raised by FastAPI/Starlette keep their status and detail.
- Request validation errors become 422 with errors keyed by dotted field path
  (``timings.0.start_time``).
"""

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lingua_learn.core.errors import LinguaLearnError
from lingua_learn.core.logging_config import get_logger
from lingua_learn.server.api.responses import error_response

logger = get_logger(__name__)

_LOCATION_PREFIXES = ("body", "query", "path", "header", "cookie")
_VALUE_ERROR_PREFIX = "Value error, "


async def domain_exception_handler(request: Request, exc: LinguaLearnError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}", exc_info=True)
    else:
        logger.info(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")
    return error_response(exc.message, exc.errors, exc.status_code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = error_response(str(exc.detail), None, exc.status_code)
    if getattr(exc, "headers", None):
        response.headers.update(exc.headers)
    return response


def _field_key(loc: tuple[Any, ...]) -> str:
    parts = list(loc)
    if parts and parts[0] in _LOCATION_PREFIXES:
        prefix = parts.pop(0)
        if not parts:
            return str(prefix)
    return ".".join(str(part) for part in parts)


def _clean_message(message: str) -> str:
    if message.startswith(_VALUE_ERROR_PREFIX):
        return message[len(_VALUE_ERROR_PREFIX) :]
    return message


def validation_errors_by_field(exc: RequestValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        errors.setdefault(_field_key(tuple(error.get("loc", ()))), []).append(_clean_message(str(error.get("msg", ""))))
    return errors


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = validation_errors_by_field(exc)
    logger.info(f"Request validation failed in {request.method} {request.url.path}: {list(errors)}")
    return error_response("The given data was invalid.", errors, 422)
