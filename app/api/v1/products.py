"""
==============================================================================
Product Catalog Endpoints
==============================================================================

Endpoints for listing, searching, updating and soft-deleting products.

==============================================================================
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from app.config import Settings, get_settings
from app.core import exceptions
from app.core.dependencies import get_product_repository
from app.repositories.product_repository import ProductRepository
from app.schemas.common import MessageResponse
from app.schemas.product import (
    InventoryUpdate,
    ProductChanges,
    ProductDetail,
    ProductListResponse,
    ProductResponse,
    ProductSearchResponse,
    ProductUpdate,
)


router = APIRouter(prefix="/products", tags=["Products"])


class ProductController:
    """Controller for product catalog operations."""

    def __init__(self, repository: ProductRepository, settings: Settings):
        self._repository = repository
        self._settings = settings

    def list_products(
        self,
        limit: Optional[int],
        offset: int,
        sort: Optional[str],
        filter: Optional[str],
        direction: Optional[str]
    ) -> ProductListResponse:
        """List products with filter, sort and pagination."""
        if limit is None:
            limit = self._settings.default_page_size
        if limit > self._settings.max_page_size:
            raise exceptions.invalid_argument(
                f"Limit cannot exceed {self._settings.max_page_size}", limit=limit
            )

        page = self._repository.list(limit, offset, sort, filter, direction)

        return ProductListResponse(
            products=[ProductDetail.model_validate(p) for p in page.products],
            total=page.total,
            next_offset=page.next_offset,
        )

    def search(self, query: str) -> ProductSearchResponse:
        """Fuzzy search."""
        matched = self._repository.search(query)

        return ProductSearchResponse(
            query=query,
            total=len(matched),
            products=[ProductDetail.model_validate(p) for p in matched],
        )

    def get_by_id(self, product_id: int) -> ProductResponse:
        """Get product by ID."""
        product = self._repository.get_by_id(product_id)
        return ProductResponse(product=ProductDetail.model_validate(product))

    def update(self, product_id: int, changes: ProductChanges) -> ProductResponse:
        """Apply a partial update."""
        patch = ProductUpdate(id=product_id, **changes.model_dump(exclude_unset=True))
        product = self._repository.update(patch)
        return ProductResponse(product=ProductDetail.model_validate(product))

    def update_inventory(self, product_id: int, data: InventoryUpdate) -> MessageResponse:
        """Set inventory."""
        self._repository.update_inventory(product_id, data.inventory)
        return MessageResponse(message=f"Inventory set to {data.inventory}")

    def delete(self, product_id: int) -> MessageResponse:
        """Soft-delete."""
        self._repository.delete(product_id)
        return MessageResponse(message="Product deleted")


def get_controller(
    repository: ProductRepository = Depends(get_product_repository),
    settings: Settings = Depends(get_settings)
) -> ProductController:
    return ProductController(repository, settings)


@router.get("", response_model=ProductListResponse)
def list_products(
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    sort: Optional[str] = Query(None, description="name or price"),
    filter_: Optional[str] = Query(None, alias="filter", description="category or in_stock"),
    direction: Optional[str] = Query(None, description="asc (default) or desc"),
    controller: ProductController = Depends(get_controller)
):
    """List live products with optional filter, sort and pagination."""
    return controller.list_products(limit, offset, sort, filter_, direction)


@router.get("/search", response_model=ProductSearchResponse)
def search_products(
    q: str = Query(..., min_length=1),
    controller: ProductController = Depends(get_controller)
):
    """Fuzzy search over name, description and category."""
    return controller.search(q)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: int = Path(..., ge=1), controller: ProductController = Depends(get_controller)):
    """Get product by ID (soft-deleted products included)."""
    return controller.get_by_id(product_id)


@router.patch("/{product_id}", response_model=ProductResponse)
def update_product(
    changes: ProductChanges,
    product_id: int = Path(..., ge=1),
    controller: ProductController = Depends(get_controller)
):
    """Update the supplied fields of a product."""
    return controller.update(product_id, changes)


@router.put("/{product_id}/inventory", response_model=MessageResponse)
def update_inventory(
    data: InventoryUpdate,
    product_id: int = Path(..., ge=1),
    controller: ProductController = Depends(get_controller)
):
    """Set the inventory count of a product."""
    return controller.update_inventory(product_id, data)


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(product_id: int = Path(..., ge=1), controller: ProductController = Depends(get_controller)):
    """Soft-delete a product."""
    return controller.delete(product_id)
