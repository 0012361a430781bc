"""
==============================================================================
Product Repository Module
==============================================================================

Data access for the product catalog.

This module implements:
- ProductRepository: list, get_by_id, update, update_inventory, delete
  and search over the products table
- ProductPage: One page of a listing with its total and next offset

Read/Write Split:
----------------
Queries go through the read session, mutations through the write session.
update() writes, commits, then re-reads through the read session. The two
steps are not atomic: a concurrent writer may land in between.

Errors:
------
    InvalidArgument  bad filter/sort/limit/offset/inventory
    NotFound         no row matched (zero rows affected)
    StorageFailure   any SQLAlchemyError, chained to the engine error

Search Ranking:
--------------
    candidate  similarity(name, q)                         >= 0.1
            OR similarity(description, q)                  >= 0.1
            OR similarity(category_to_text(category), q)   >= 0.4
    rank       GREATEST(all three) DESC, id ASC

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List, NamedTuple, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.core import exceptions
from app.core.exceptions import InvalidArgument
from app.db.models import Product
from app.repositories.options import ListOptions
from app.schemas.product import ProductUpdate


# Module logger
logger = logging.getLogger(__name__)


class ProductPage(NamedTuple):
    """A page of products plus the paging state."""

    products: List[Product]
    total: int
    next_offset: int


class ProductRepository:
    """
    Repository for product catalog rows.

    Attributes:
        _read: Session bound to the read engine
        _write: Session bound to the write engine

    Example:
        >>> repo = ProductRepository(read_session, write_session, migrate=db_manager.migrate)
        >>> page = repo.list(limit=10, sort="price", filter="in_stock")
        >>> page.total, page.next_offset
        (15, 10)
        >>> repo.update(ProductUpdate(id=3, price=0))
        >>> repo.delete(3)
    """

    NAME_THRESHOLD = 0.1
    DESCRIPTION_THRESHOLD = 0.1
    # Category labels are short; low thresholds match almost anything
    CATEGORY_THRESHOLD = 0.4

    def __init__(
        self,
        read: Session,
        write: Session,
        migrate: Optional[Callable[[], None]] = None
    ) -> None:
        """
        Initialize the repository.

        Args:
            read: Session used for queries
            write: Session used for mutations
            migrate: Schema migration trigger, invoked once here

        Raises:
            StorageFailure: If the migration trigger fails
        """
        self._read = read
        self._write = write

        if migrate is not None:
            with self._storage(self._write, "migrate"):
                migrate()

    @contextmanager
    def _storage(self, session: Session, operation: str) -> Iterator[None]:
        """Roll back and re-raise engine errors as StorageFailure."""
        try:
            yield
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error(f"❌ Product {operation} failed: {exc}")
            raise exceptions.storage_failure(exc) from exc

    @staticmethod
    def _paged(query: Query, options: ListOptions) -> Query:
        """Apply ordering and LIMIT; OFFSET only when skipping rows."""
        query = query.order_by(*options.ordering()).limit(options.limit)
        if options.offset > 0:
            query = query.offset(options.offset)
        return query

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    def list(
        self,
        limit: int,
        offset: int = 0,
        sort: Optional[str] = None,
        filter: Optional[str] = None,
        direction: Optional[str] = None
    ) -> ProductPage:
        """
        List live products with optional filter, sort and pagination.

        Args:
            limit: Page size (>= 1)
            offset: Rows to skip; 0 emits no OFFSET clause
            sort: "name", "price" or empty
            filter: A category label, "in_stock" or empty
            direction: "desc" for descending, anything else ascending

        Returns:
            ProductPage with the rows, the filtered total (before paging)
            and offset + len(rows)

        Raises:
            InvalidArgument: Unrecognized filter or sort, bad limit/offset
        """
        try:
            options = ListOptions.parse(limit, offset, sort, filter, direction)
        except InvalidArgument as exc:
            logger.warning(f"Product list rejected: {exc.message}")
            raise

        with self._storage(self._read, "list"):
            query = self._read.query(Product).filter(*options.conditions())
            total = query.count()
            products = self._paged(query, options).populate_existing().all()

        return ProductPage(
            products=products,
            total=total,
            next_offset=options.offset + len(products),
        )

    def get_by_id(self, product_id: int) -> Product:
        """
        Get a product by ID, including soft-deleted rows.

        Raises:
            NotFound: If no row has this ID
        """
        with self._storage(self._read, "lookup"):
            product = (
                self._read.query(Product)
                .filter(Product.id == product_id)
                .populate_existing()
                .first()
            )

        if product is None:
            logger.warning(f"Product not found: {product_id}")
            raise exceptions.product_not_found(product_id)

        return product

    def search(self, query: str) -> List[Product]:
        """
        Fuzzy search over name, description and category.

        Matching and scoring use the engine's similarity() and
        category_to_text() functions. Results are unbounded.

        Args:
            query: Free text

        Returns:
            Live products, best-matching field first
        """
        name_score = func.similarity(Product.name, query)
        description_score = func.similarity(Product.description, query)
        category_score = func.similarity(func.category_to_text(Product.category), query)

        with self._storage(self._read, "search"):
            products = (
                self._read.query(Product)
                .filter(
                    or_(
                        name_score >= self.NAME_THRESHOLD,
                        description_score >= self.DESCRIPTION_THRESHOLD,
                        category_score >= self.CATEGORY_THRESHOLD,
                    ),
                    Product.is_deleted.is_(False),
                )
                .order_by(
                    func.greatest(name_score, description_score, category_score).desc(),
                    Product.id.asc(),
                )
                .populate_existing()
                .all()
            )

        logger.debug(f"Search {query!r} matched {len(products)} products")
        return products

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    def update(self, product: ProductUpdate) -> Product:
        """
        Apply a partial update and return the persisted row.

        Only fields supplied on the patch are written. id, created_at,
        updated_at and is_deleted are never written here.

        Raises:
            NotFound: If no row has this ID
        """
        values = product.to_values()

        if not values:
            logger.debug(f"Empty update for product {product.id}")
            return self.get_by_id(product.id)

        with self._storage(self._write, "update"):
            affected = (
                self._write.query(Product)
                .filter(Product.id == product.id)
                .update(values, synchronize_session=False)
            )
            self._write.commit()

        if affected == 0:
            logger.warning(f"Update found no product: {product.id}")
            raise exceptions.product_not_found(product.id)

        logger.info(f"✅ Product {product.id} updated: {', '.join(sorted(values))}")
        return self.get_by_id(product.id)

    def update_inventory(self, product_id: int, inventory: int) -> None:
        """
        Set the inventory count of a product. No other column is touched.

        Raises:
            InvalidArgument: If inventory is negative
            NotFound: If no row has this ID
        """
        if inventory < 0:
            logger.warning(f"Negative inventory rejected for product {product_id}")
            raise exceptions.invalid_argument(
                f"Invalid inventory: {inventory}", inventory=inventory
            )

        with self._storage(self._write, "inventory update"):
            affected = (
                self._write.query(Product)
                .filter(Product.id == product_id)
                .update({"inventory": inventory}, synchronize_session=False)
            )
            self._write.commit()

        if affected == 0:
            logger.warning(f"Inventory update found no product: {product_id}")
            raise exceptions.product_not_found(product_id)

        logger.info(f"Inventory of product {product_id} set to {inventory}")

    def delete(self, product_id: int) -> None:
        """
        Soft-delete a product.

        A row that is already deleted counts as not found, so deleting
        twice fails the second time.

        Raises:
            NotFound: If no live row has this ID
        """
        with self._storage(self._write, "delete"):
            affected = (
                self._write.query(Product)
                .filter(Product.id == product_id, Product.is_deleted.is_(False))
                .update({"is_deleted": True}, synchronize_session=False)
            )
            self._write.commit()

        if affected == 0:
            logger.warning(f"Delete found no live product: {product_id}")
            raise exceptions.product_not_found(product_id)

        logger.info(f"🗑️ Product {product_id} soft-deleted")
