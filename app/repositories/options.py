"""
==============================================================================
Product List Options
==============================================================================

Closed types for the list parameters. Raw strings coming from callers are
parsed once here; everything past this point works with enums.

Recognized values:
-----------------
    sort       name | price           (empty = none, other = InvalidArgument)
    direction  asc | desc             (anything else = asc)
    filter     <category> | in_stock  (empty = none, other = InvalidArgument)

==============================================================================
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import List, Optional, Union

from sqlalchemy.sql.expression import ColumnElement

from app.core import exceptions
from app.db.models import Category, Product


class ProductSort(str, enum.Enum):
    """Columns a product listing may be sorted by."""

    NAME = "name"
    PRICE = "price"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ProductSort"]:
        """
        Parse a sort parameter.

        Raises:
            InvalidArgument: If the value is not a sortable column
        """
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            raise exceptions.invalid_sort(value) from None

    @property
    def column(self):
        return {
            ProductSort.NAME: Product.name,
            ProductSort.PRICE: Product.price,
        }[self]


class SortDirection(str, enum.Enum):
    """Sort direction; unrecognized input means ascending."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortDirection":
        return cls.DESC if value == cls.DESC.value else cls.ASC


class StockFilter(str, enum.Enum):
    """Non-category filters."""

    IN_STOCK = "in_stock"


ProductFilter = Union[Category, StockFilter]


def parse_filter(value: Optional[str]) -> Optional[ProductFilter]:
    """
    Parse a filter parameter into a category or a stock filter.

    Raises:
        InvalidArgument: If the value is neither a category nor in_stock
    """
    if not value:
        return None

    if value in Category.values():
        return Category(value)
    if value == StockFilter.IN_STOCK.value:
        return StockFilter.IN_STOCK

    raise exceptions.invalid_filter(value)


@dataclass(frozen=True)
class ListOptions:
    """
    Parsed list parameters.

    Attributes:
        limit: Maximum rows to return (>= 1)
        offset: Rows to skip (>= 0)
        sort: Primary sort column, or None
        direction: Direction for the primary sort
        filter: Category or stock filter, or None
    """

    limit: int
    offset: int = 0
    sort: Optional[ProductSort] = None
    direction: SortDirection = SortDirection.ASC
    filter: Optional[ProductFilter] = None

    @classmethod
    def parse(
        cls,
        limit: int,
        offset: int = 0,
        sort: Optional[str] = None,
        filter: Optional[str] = None,
        direction: Optional[str] = None,
    ) -> "ListOptions":
        """
        Validate raw list parameters.

        Raises:
            InvalidArgument: Bad filter, sort, limit or offset
        """
        if limit < 1:
            raise exceptions.invalid_argument(f"Invalid limit: {limit}", limit=limit)
        if offset < 0:
            raise exceptions.invalid_argument(f"Invalid offset: {offset}", offset=offset)

        return cls(
            limit=limit,
            offset=offset,
            sort=ProductSort.parse(sort),
            direction=SortDirection.parse(direction),
            filter=parse_filter(filter),
        )

    def conditions(self) -> List[ColumnElement]:
        """WHERE clauses: live rows plus the optional filter."""
        clauses = [Product.is_deleted.is_(False)]

        if isinstance(self.filter, Category):
            clauses.append(Product.category == self.filter)
        elif self.filter is StockFilter.IN_STOCK:
            clauses.append(Product.inventory > 0)

        return clauses

    def ordering(self) -> List[ColumnElement]:
        """ORDER BY clauses: requested sort, then updated_at DESC, id ASC."""
        order = []

        if self.sort is not None:
            column = self.sort.column
            order.append(column.desc() if self.direction is SortDirection.DESC else column.asc())

        order.append(Product.updated_at.desc())
        order.append(Product.id.asc())
        return order
