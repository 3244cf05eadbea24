"""Utility functions for mapping domain exceptions to HTTP responses."""

from typing import Any, Dict

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic.alias_generators import to_camel

from ....infrastructure.logging import get_logger
from ..constants import EXCEPTION_MAPPING
from ..exceptions import DomainError

logger = get_logger(__name__)


def map_exception(error: DomainError) -> HTTPException:
    """Map a domain exception to a corresponding HTTP exception."""
    for exception_class, mapper in EXCEPTION_MAPPING.items():
        if isinstance(error, exception_class):
            return mapper(error.client_message)

    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error.client_message)


def error_body(error: DomainError, detail: str) -> Dict[str, Any]:
    """Render the JSON body shared by every domain error response."""
    body: Dict[str, Any] = {"kind": error.kind, "detail": detail}
    for key, value in error.context.items():
        body[to_camel(key)] = value
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers for domain and request validation errors."""

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
        """Convert domain exceptions to appropriate HTTP responses."""
        http_exception = map_exception(exc)
        if http_exception.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                f"{exc.kind} on {request.method} {request.url.path}: {exc.message}",
                exc_info=exc,
            )
        else:
            logger.info(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=http_exception.status_code,
            content=error_body(exc, http_exception.detail),
            headers=http_exception.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Render malformed requests as 400 validation errors."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "kind": "validation_error",
                "detail": "Request validation failed",
                "errors": jsonable_encoder(exc.errors()),
            },
        )
