"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Common: Shared response schemas
- Product: Partial update, inventory update and product responses

==============================================================================
"""

from .common import MessageResponse
from .product import (
    InventoryUpdate,
    ProductChanges,
    ProductDetail,
    ProductListResponse,
    ProductResponse,
    ProductSearchResponse,
    ProductUpdate,
)

__all__ = [
    # Common
    "MessageResponse",
    # Product
    "ProductChanges",
    "ProductUpdate",
    "InventoryUpdate",
    "ProductDetail",
    "ProductResponse",
    "ProductListResponse",
    "ProductSearchResponse",
]
