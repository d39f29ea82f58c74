"""
JSON response envelope.

Every endpoint answers with ``{"success": true, "data": ..., "message": ...}``
on success and ``{"success": false, "message": ..., "errors": ...}`` on
failure. Paginated listings add a ``pagination`` block.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

from lingua_learn.core.database import Page


def success_response(data: Any = None, message: Optional[str] = None, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": jsonable_encoder(data), "message": message},
    )


def created_response(data: Any = None, message: Optional[str] = None) -> JSONResponse:
    return success_response(data, message, status.HTTP_201_CREATED)


def error_response(message: str, errors: Any = None, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "errors": jsonable_encoder(errors)},
    )


def paginated_response(page: Page, transform: Optional[Callable[[Any], Any]] = None, message: Optional[str] = None) -> JSONResponse:
    items = [transform(item) for item in page.items] if transform else page.items
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "success": True,
            "data": jsonable_encoder(items),
            "pagination": page.meta(),
            "message": message,
        },
    )


def no_content_response() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)
