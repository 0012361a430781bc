"""
Application Exception Handling

AppException and its three subclasses form the error taxonomy of the
catalog. Every error leaves the repository as one of them:

    InvalidArgument  - filter, sort or paging parameter not recognized (400)
    NotFound         - no row matched the identifier (404)
    StorageFailure   - the database engine raised (500)
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Base application exception with a consistent error response format.

    Usage:
        raise AppException("Catalog unavailable", "CATALOG_UNAVAILABLE", 503)
        raise NotFound("Product not found", details={"product_id": 7})
    """

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (defaults to the class code)
            status_code: HTTP status code (defaults to the class status)
            details: Additional error context (optional)
        """
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


class InvalidArgument(AppException):
    """A filter, sort or paging parameter is outside the recognized set."""

    code = "INVALID_ARGUMENT"
    status_code = 400


class NotFound(AppException):
    """No product row matched the requested identifier."""

    code = "NOT_FOUND"
    status_code = 404


class StorageFailure(AppException):
    """
    The database engine reported an error.

    The engine exception is chained as ``__cause__`` and kept on
    ``original`` so callers can inspect it unchanged.
    """

    code = "STORAGE_FAILURE"
    status_code = 500

    def __init__(
        self,
        message: str,
        original: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details=details)
        self.original = original


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    FastAPI exception handler for AppException.

    Converts AppException to consistent JSON error response.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def invalid_argument(message: str, **details: Any) -> InvalidArgument:
    """Create a generic invalid argument exception."""
    return InvalidArgument(message, details=details)


def invalid_filter(value: str) -> InvalidArgument:
    """Create invalid filter exception."""
    return InvalidArgument(f"Invalid filter applied: {value}", details={"filter": value})


def invalid_sort(value: str) -> InvalidArgument:
    """Create invalid sort exception."""
    return InvalidArgument(f"Invalid sort applied: {value}", details={"sort": value})


def product_not_found(product_id: Optional[int] = None) -> NotFound:
    """Create product not found exception."""
    details = {"product_id": product_id} if product_id is not None else {}
    return NotFound("Product not found", details=details)


def storage_failure(original: BaseException) -> StorageFailure:
    """Wrap an engine error; the message names the engine exception type."""
    return StorageFailure(
        f"Storage failure: {type(original).__name__}",
        original=original
    )
