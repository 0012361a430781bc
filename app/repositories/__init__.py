"""
==============================================================================
Repositories Package - Data Access Layer
==============================================================================

This package provides:
- ProductRepository: Catalog queries and mutations over a read/write split
- ListOptions: Parsed filter/sort/paging parameters

    ┌─────────────────┐
    │   API Router    │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │   Repository    │  ← Data Access (via ORM)
    └───┬─────────┬───┘
        │         │
     read       write
    Session    Session

==============================================================================
"""

from .options import ListOptions, ProductSort, SortDirection, StockFilter, parse_filter
from .product_repository import ProductPage, ProductRepository

__all__ = [
    "ListOptions",
    "ProductSort",
    "SortDirection",
    "StockFilter",
    "parse_filter",
    "ProductPage",
    "ProductRepository",
]
