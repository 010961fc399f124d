from __future__ import annotations

from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cafeorders.api.middleware.correlation import get_request_id
from cafeorders.application.ports.repositories import ItemUnavailableError, StorageUnavailableError
from cafeorders.application.services.sequence_allocator import AllocatorUnavailableError
from cafeorders.application.use_cases.daily_reports import InvalidReportQueryError
from cafeorders.application.use_cases.get_order import OrderNotFoundError
from cafeorders.application.use_cases.place_order import OrderValidationError, TableInactiveError
from cafeorders.application.use_cases.transition_order import (
    InvalidTransitionError,
    OrderConflictError,
)
from cafeorders.domain.order.entities import OrderNotesLockedError

_STORAGE_UNAVAILABLE_MESSAGE = "order storage is temporarily unavailable, retry shortly"


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
    )


def _exception_handler(status_code: int, code: str):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        details = getattr(exc, "details", None)
        return _error_response(
            status_code=status_code,
            code=code,
            message=str(exc),
            details=details if isinstance(details, dict) else None,
        )

    return handler


async def _storage_unavailable_handler(_: Request, exc: Exception) -> JSONResponse:
    return _error_response(
        status_code=503,
        code="STORAGE_UNAVAILABLE",
        message=_STORAGE_UNAVAILABLE_MESSAGE,
    )


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 400:
        code = "BAD_REQUEST"
    elif http_exc.status_code == 409:
        code = "CONFLICT"
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=400,
        code="INVALID_REQUEST",
        message="request validation failed",
        details={"errors": validation_exc.errors()},
    )


def register_exception_handlers(app: FastAPI) -> None:
    mappings: list[tuple[type[Exception], int, str]] = [
        (OrderValidationError, 400, "INVALID_ORDER"),
        (ItemUnavailableError, 400, "MENU_ITEM_UNAVAILABLE"),
        (InvalidReportQueryError, 400, "INVALID_QUERY"),
        (OrderNotFoundError, 404, "ORDER_NOT_FOUND"),
        (TableInactiveError, 409, "TABLE_INACTIVE"),
        (InvalidTransitionError, 409, "INVALID_ORDER_TRANSITION"),
        (OrderConflictError, 409, "CONFLICT"),
        (OrderNotesLockedError, 409, "ORDER_NOTES_LOCKED"),
    ]

    for exc_cls, status_code, code in mappings:
        app.add_exception_handler(exc_cls, _exception_handler(status_code, code))

    app.add_exception_handler(AllocatorUnavailableError, _storage_unavailable_handler)
    app.add_exception_handler(StorageUnavailableError, _storage_unavailable_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
