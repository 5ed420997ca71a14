"""
Error types raised by the services and the FastAPI handlers that turn them
into HTTP responses.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class CaseNotesError(Exception):
    """Base exception for all case-notes errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(CaseNotesError):
    """Raised when input fails validation. Carries field-level problems."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str = "Invalid data",
        errors: Optional[List[Dict[str, str]]] = None,
        field: Optional[str] = None,
    ):
        super().__init__(message)
        self.errors = list(errors or [])
        if field and not self.errors:
            self.errors.append({"field": field, "message": message})

    @classmethod
    def from_pydantic(cls, exc, message: str = "Invalid data") -> "ValidationError":
        errors = [
            {"field": ".".join(str(part) for part in error.get("loc", [])), "message": error.get("msg")}
            for error in exc.errors()
        ]
        return cls(message, errors=errors)


class NotFoundError(CaseNotesError):
    """Raised when a referenced record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, identifier: Any):
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.identifier = identifier


class AuthenticationError(CaseNotesError):
    """Raised when the request carries no identity."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class AuthorizationError(CaseNotesError):
    """Raised when an authenticated user is not the author of the case note."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Not authorized to modify this case note"):
        super().__init__(message)


class StorageError(CaseNotesError):
    """Raised when the database or blob storage fails underneath an operation."""

    def __init__(self, message: str = "Storage failure", detail: Optional[str] = None):
        super().__init__(message, detail)


def format_error_response(exc: CaseNotesError) -> Dict[str, Any]:
    body = {
        "error": exc.__class__.__name__,
        "message": exc.message,
        "status_code": exc.status_code,
    }
    if isinstance(exc, ValidationError):
        body["errors"] = exc.errors
    return body


async def case_notes_exception_handler(request: Request, exc: CaseNotesError) -> JSONResponse:
    if isinstance(exc, StorageError):
        # internals stay in the log
        logger.error("Storage error on %s %s: %s (%s)", request.method, request.url.path,
                     exc.message, exc.detail, exc_info=exc)
        body = {
            "error": "ServerError",
            "message": "Internal server error",
            "status_code": exc.status_code,
        }
        return JSONResponse(status_code=exc.status_code, content=body)

    if exc.status_code >= 500:
        logger.error("Unhandled case-notes error: %s", exc.message, exc_info=exc)
    else:
        logger.info("%s on %s %s: %s", exc.__class__.__name__, request.method,
                    request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=format_error_response(exc))


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reshape FastAPI/Pydantic request errors into the ValidationError body."""
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", []) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc), "message": error.get("msg")})

    logger.info("Request validation failed on %s %s: %s", request.method, request.url.path, errors)
    body = {
        "error": "ValidationError",
        "message": "Invalid data",
        "status_code": status.HTTP_400_BAD_REQUEST,
        "errors": errors,
    }
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    body = {
        "error": "ServerError",
        "message": "Internal server error",
        "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
    }
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(CaseNotesError, case_notes_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
