"""
Custom exception handlers for consistent API error responses.

This module provides the error taxonomy of the order relay and the
handlers that turn each error into a JSON body with an ``error`` field.
"""

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    """Base API error with consistent structure"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class NotFoundError(APIError):
    """Referenced resource does not exist"""

    def __init__(
        self, detail: str = "Resource not found", error_code: str = "NOT_FOUND"
    ):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND, detail=detail, error_code=error_code
        )


class ValidationError(APIError):
    """Client input is malformed or out of range"""

    def __init__(
        self, detail: str = "Validation failed", error_code: str = "VALIDATION_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
        )


class MalformedRequestError(APIError):
    """Request body could not be parsed"""

    def __init__(
        self,
        detail: str = "Invalid JSON",
        details: Optional[str] = None,
        error_code: str = "MALFORMED_REQUEST",
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code,
        )
        self.details = details


class StorageError(APIError):
    """Storage backend failure"""

    def __init__(
        self, detail: str = "Storage failure", error_code: str = "STORAGE_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=error_code,
        )


def _error_body(request: Request, exc: APIError) -> Dict[str, Any]:
    body = {
        "error": exc.detail,
        "error_code": exc.error_code,
        "path": str(request.url.path),
    }
    details = getattr(exc, "details", None)
    if details:
        body["details"] = details
    return body


async def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors"""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} at {request.url.path}: {exc.detail}")
    else:
        logger.warning(f"{type(exc).__name__} at {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc),
        headers=exc.headers,
    )


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert FastAPI body parsing failures to a malformed request response"""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg', 'invalid')}")
    return await handle_api_error(
        request, MalformedRequestError(details="; ".join(messages) or None)
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app"""
    app.add_exception_handler(APIError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
