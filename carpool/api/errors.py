"""
Maps core errors onto HTTP responses using the ``{success, message}`` envelope.
"""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from carpool.api.schemas import ErrorResponse
from carpool.errors import (
    DriverNotFound,
    DriverUnavailable,
    InvalidDayOfWeek,
    InvalidTimeFormat,
    OutOfRange,
    PlaceNotFound,
    RoutingProviderError,
    UnknownCampus,
    UserNotFound,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (UserNotFound, status.HTTP_404_NOT_FOUND),
    (DriverNotFound, status.HTTP_404_NOT_FOUND),
    (DriverUnavailable, status.HTTP_404_NOT_FOUND),
    (PlaceNotFound, status.HTTP_404_NOT_FOUND),
    (InvalidTimeFormat, status.HTTP_400_BAD_REQUEST),
    (InvalidDayOfWeek, status.HTTP_400_BAD_REQUEST),
    (OutOfRange, status.HTTP_400_BAD_REQUEST),
)


def _error_body(message: str, **extra) -> dict:
    return ErrorResponse(message=message, **extra).model_dump(exclude_none=True)


def register_exception_handlers(app: FastAPI) -> None:
    def make_handler(status_code: int):
        async def handler(request: Request, exc: Exception) -> JSONResponse:
            return JSONResponse(status_code=status_code, content=_error_body(str(exc)))
        return handler

    for error_type, status_code in _STATUS_BY_ERROR:
        app.add_exception_handler(error_type, make_handler(status_code))

    @app.exception_handler(UnknownCampus)
    async def unknown_campus_handler(request: Request, exc: UnknownCampus) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(str(exc), allowed=exc.allowed),
        )

    @app.exception_handler(RoutingProviderError)
    async def routing_error_handler(request: Request, exc: RoutingProviderError) -> JSONResponse:
        logger.error(f"[Geo] {request.method} {request.url.path} failed: {exc}")
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=_error_body(f"Routing provider error: {exc}"),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("Validation error", errors=errors),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=_error_body(str(exc.detail)))
