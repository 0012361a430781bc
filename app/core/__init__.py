"""
==============================================================================
Core Package
==============================================================================

Core utilities and infrastructure for the application.

Modules:
--------
- exceptions: AppException hierarchy and error factory functions
- dependencies: FastAPI dependency injection functions (import directly
  from app.core.dependencies)

Usage:
------
    from app.core import NotFound, InvalidArgument

    # Or use exception factory functions via module
    from app.core import exceptions
    raise exceptions.product_not_found(42)

==============================================================================
"""

from .exceptions import (
    AppException,
    InvalidArgument,
    NotFound,
    StorageFailure,
    register_exception_handlers,
)

__all__ = [
    "AppException",
    "InvalidArgument",
    "NotFound",
    "StorageFailure",
    "register_exception_handlers",
]
