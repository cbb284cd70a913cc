"""Maps domain exceptions to HTTP responses, once, for every route.

Clients always get a JSON ``{"message": ...}`` body and a status code;
stack traces only go to the log.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lessonshop.domain.exceptions import (
    DomainException,
    DuplicateOrderError,
    EntityNotFoundError,
    InsufficientStockError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _message(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    if exc.field is None:
        return _message(400, str(exc))
    return _message(400, str(exc), field=exc.field)


async def _request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = ".".join(loc)
    if not field:
        return _message(400, f"Invalid request: {first.get('msg', 'malformed body')}")
    return _message(400, f"Invalid field '{field}': {first.get('msg', 'invalid value')}", field=field)


async def _not_found(request: Request, exc: EntityNotFoundError) -> JSONResponse:
    return _message(404, str(exc))


async def _insufficient_stock(request: Request, exc: InsufficientStockError) -> JSONResponse:
    return _message(409, str(exc), lessonId=exc.lesson_id)


async def _duplicate_order(request: Request, exc: DuplicateOrderError) -> JSONResponse:
    return _message(409, str(exc))


async def _store_error(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return _message(500, "The database could not complete the request.")


async def _domain_error(request: Request, exc: DomainException) -> JSONResponse:
    return _message(400, str(exc))


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(EntityNotFoundError, _not_found)
    app.add_exception_handler(InsufficientStockError, _insufficient_stock)
    app.add_exception_handler(DuplicateOrderError, _duplicate_order)
    app.add_exception_handler(StoreError, _store_error)
    app.add_exception_handler(DomainException, _domain_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
