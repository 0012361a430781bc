"""
==============================================================================
Product Schemas Module
==============================================================================

Request and response schemas for the product catalog.

Partial updates:
---------------
ProductChanges tracks which fields the caller actually supplied
(model_fields_set). A supplied zero value such as price=0 or an empty
description is written; an omitted or null field is left untouched.

==============================================================================
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.db.models import Category


class ProductChanges(BaseModel):
    """Fields a general update may write."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None)
    category: Optional[Category] = Field(default=None)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    inventory: Optional[int] = Field(default=None, ge=0)

    def to_values(self) -> Dict[str, Any]:
        """
        Column values to write.

        Only explicitly supplied, non-null fields are included.
        """
        supplied = self.model_dump(include=self.model_fields_set - {"id"})
        return {key: value for key, value in supplied.items() if value is not None}


class ProductUpdate(ProductChanges):
    """A partial update addressed to one product."""

    id: int = Field(..., ge=1)


class InventoryUpdate(BaseModel):
    """Inventory update request."""
    inventory: int = Field(..., ge=0)


class ProductDetail(BaseModel):
    """Product as persisted."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    category: Category
    price: Decimal
    inventory: int
    is_deleted: bool
    created_at: datetime
    updated_at: datetime


class ProductResponse(BaseModel):
    """Single product response."""
    success: bool = Field(default=True)
    product: ProductDetail


class ProductListResponse(BaseModel):
    """One page of a product listing."""
    success: bool = Field(default=True)
    products: List[ProductDetail]
    total: int = Field(ge=0)
    next_offset: int = Field(ge=0)


class ProductSearchResponse(BaseModel):
    """Fuzzy search results, best match first."""
    success: bool = Field(default=True)
    query: str
    total: int = Field(ge=0)
    products: List[ProductDetail]
