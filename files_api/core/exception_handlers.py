"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to HTTP responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from files_api.core.config import get_settings
from files_api.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    FileOperationException,
    FilesApiException,
    ResourceNotFoundException,
    StoreException,
    ValidationException,
)

logger = logging.getLogger(__name__)

# Checked in order; first matching family decides the status
_FAMILY_STATUS: tuple[tuple[type[FilesApiException], int], ...] = (
    (ValidationException, 400),
    (ResourceNotFoundException, 404),
    (AuthenticationException, 401),
    (AuthorizationException, 403),
    (FileOperationException, 500),
    (StoreException, 500),
)


def status_for(exc: FilesApiException) -> int:
    for family, status in _FAMILY_STATUS:
        if isinstance(exc, family):
            return status
    return 400


def _files_api_exception_handler(
    request: Request, exc: FilesApiException
) -> JSONResponse:
    """Return JSON from FilesApiException.to_dict() with the family's status code.

    5xx bodies never carry adapter details unless debug is on.
    """
    status = status_for(exc)
    content = exc.to_dict()
    if status >= 500:
        logger.error(
            "%s on %s %s: %s %s",
            exc.error_code,
            request.method,
            request.url.path,
            exc.message,
            exc.details,
            exc_info=exc.__cause__ is not None,
        )
        if isinstance(exc, StoreException) and not get_settings().debug:
            content["details"] = {}
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(status_code=status, content=content, headers=headers)


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Validation errors without the raw input (may hold binary upload content)."""
    return [
        {k: v for k, v in err.items() if k in ("loc", "msg", "type")}
        for err in exc.errors()
    ]


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    settings = get_settings()
    detail: Any = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. Handlers: FilesApiException (and
    subclasses), RequestValidationError, StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(FilesApiException, _files_api_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
