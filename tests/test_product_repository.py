"""
==============================================================================
Product Repository Tests
==============================================================================

Tests for listing, lookup, updates, soft delete and fuzzy search.

==============================================================================
"""

from decimal import Decimal

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from app.core.exceptions import InvalidArgument, NotFound, StorageFailure
from app.db.functions import similarity
from app.db.models import Category, Product
from app.repositories.options import ListOptions
from app.repositories.product_repository import ProductRepository
from app.schemas.product import ProductUpdate


class TestListProducts:
    """Tests for ProductRepository.list."""

    def test_in_stock_sorted_by_price(self, repository, make_product):
        """Example: 15 in-stock products, first page of 10 by ascending price."""
        seeded = []
        for i in range(15):
            price = f"{(i * 7) % 5 + 1}.50"
            product_id = make_product(name=f"Item {i:02d}", price=price, inventory=i + 1)
            seeded.append((Decimal(price), product_id))

        # Out of stock and deleted rows must not count
        make_product(name="Empty shelf", price="0.10", inventory=0)
        make_product(name="Retired", price="0.20", inventory=3, is_deleted=True)

        page = repository.list(limit=10, offset=0, sort="price", filter="in_stock", direction="asc")

        expected = [product_id for _, product_id in sorted(seeded)][:10]
        assert [p.id for p in page.products] == expected
        assert page.total == 15
        assert page.next_offset == 10

        prices = [p.price for p in page.products]
        assert prices == sorted(prices)

    def test_never_returns_deleted_rows(self, repository, make_product):
        """Soft-deleted rows are excluded for every filter and sort."""
        make_product(name="Live", category=Category.BOOKS)
        make_product(name="Gone", category=Category.BOOKS, is_deleted=True)

        for filter_value in ["", "books", "in_stock"]:
            for sort_value in ["", "name", "price"]:
                page = repository.list(limit=50, sort=sort_value, filter=filter_value)
                assert all(not p.is_deleted for p in page.products)
                assert [p.name for p in page.products] == ["Live"]

    def test_total_is_independent_of_paging(self, repository, make_product):
        """Total counts the filtered set; next_offset advances by rows returned."""
        for i in range(7):
            make_product(name=f"Book {i}", category=Category.BOOKS)
        make_product(name="Robot", category=Category.TOYS)

        first = repository.list(limit=3, offset=0, filter="books")
        last = repository.list(limit=3, offset=6, filter="books")

        assert first.total == last.total == 7
        assert first.next_offset == 3
        assert len(last.products) == 1
        assert last.next_offset == 7

    def test_offset_past_end(self, repository, make_product):
        """An offset past the end returns no rows and keeps the offset."""
        make_product()

        page = repository.list(limit=5, offset=10)

        assert page.products == []
        assert page.total == 1
        assert page.next_offset == 10

    def test_pagination_partitions_filtered_set(self, repository, make_product):
        """Walking pages yields every live row exactly once."""
        live_ids = set()
        for i in range(13):
            # Repeated names force the tiebreak to do the work
            live_ids.add(make_product(name=f"Widget {i % 3}", category=Category.HOME))
        make_product(name="Widget 0", category=Category.HOME, is_deleted=True)
        make_product(name="Widget 1", category=Category.HOME, is_deleted=True)

        seen = []
        offset = 0
        while True:
            page = repository.list(limit=4, offset=offset, sort="name", filter="home", direction="desc")
            if not page.products:
                break
            seen.extend(p.id for p in page.products)
            offset = page.next_offset

        assert len(seen) == len(set(seen))
        assert set(seen) == live_ids
        assert offset == 13

    def test_category_filter(self, repository, make_product):
        make_product(name="Laptop", category=Category.ELECTRONICS)
        make_product(name="Scarf", category=Category.CLOTHING)

        page = repository.list(limit=10, filter="clothing")

        assert [p.name for p in page.products] == ["Scarf"]

    def test_in_stock_filter(self, repository, make_product):
        make_product(name="Stocked", inventory=1)
        make_product(name="Sold out", inventory=0)

        page = repository.list(limit=10, filter="in_stock")

        assert [p.name for p in page.products] == ["Stocked"]

    def test_sort_direction(self, repository, make_product):
        """'desc' sorts descending; any other direction ascends."""
        for name in ["Banana", "Apple", "Cherry"]:
            make_product(name=name)

        descending = repository.list(limit=10, sort="name", direction="desc")
        fallback = repository.list(limit=10, sort="name", direction="sideways")

        assert [p.name for p in descending.products] == ["Cherry", "Banana", "Apple"]
        assert [p.name for p in fallback.products] == ["Apple", "Banana", "Cherry"]

    def test_tiebreak_prefers_recently_updated(self, repository, make_product):
        """Equal sort keys fall back to updated_at DESC, then id ASC."""
        first = make_product(name="A", price="5.00")
        second = make_product(name="B", price="5.00")
        third = make_product(name="C", price="5.00")

        page = repository.list(limit=10, sort="price")
        assert [p.id for p in page.products] == [first, second, third]

        repository.update_inventory(third, 42)

        page = repository.list(limit=10, sort="price")
        assert [p.id for p in page.products] == [third, first, second]

    def test_invalid_filter(self, repository, make_product):
        """Unknown filters are rejected instead of returning an empty page."""
        make_product()

        with pytest.raises(InvalidArgument) as exc_info:
            repository.list(limit=10, filter="nonexistent_category")

        assert exc_info.value.message == "Invalid filter applied: nonexistent_category"
        assert exc_info.value.status_code == 400

    def test_invalid_sort(self, repository):
        with pytest.raises(InvalidArgument, match="Invalid sort applied: inventory"):
            repository.list(limit=10, sort="inventory")

    @pytest.mark.parametrize("limit,offset", [(0, 0), (-1, 0), (10, -1)])
    def test_invalid_paging(self, repository, limit, offset):
        with pytest.raises(InvalidArgument):
            repository.list(limit=limit, offset=offset)

    @pytest.mark.parametrize("offset,has_offset", [(0, False), (5, True)])
    def test_offset_clause_only_when_skipping(self, read_session, offset, has_offset):
        # SQLite always renders OFFSET, so compile for PostgreSQL instead
        query = ProductRepository._paged(
            read_session.query(Product), ListOptions.parse(limit=10, offset=offset)
        )
        sql = str(query.statement.compile(dialect=postgresql.dialect()))

        assert "LIMIT" in sql
        assert ("OFFSET" in sql) is has_offset


class TestGetProduct:
    """Tests for ProductRepository.get_by_id."""

    def test_get_existing(self, repository, make_product):
        product_id = make_product(name="Desk Lamp", category=Category.HOME, price="24.50")

        product = repository.get_by_id(product_id)

        assert product.name == "Desk Lamp"
        assert product.category == Category.HOME
        assert product.price == Decimal("24.50")

    def test_get_soft_deleted(self, repository, make_product):
        """Lookup by id does not hide soft-deleted rows."""
        product_id = make_product(is_deleted=True)

        assert repository.get_by_id(product_id).is_deleted is True

    def test_get_missing(self, repository):
        with pytest.raises(NotFound) as exc_info:
            repository.get_by_id(999)

        assert exc_info.value.details == {"product_id": 999}


class TestUpdateProduct:
    """Tests for ProductRepository.update."""

    def test_partial_update(self, repository, make_product):
        """Only supplied fields change; the persisted row is returned."""
        product_id = make_product(name="Old", description="Keep me", price="10.00", inventory=4)

        updated = repository.update(ProductUpdate(id=product_id, name="New"))

        assert updated.id == product_id
        assert updated.name == "New"
        assert updated.description == "Keep me"
        assert updated.price == Decimal("10.00")
        assert updated.inventory == 4

    def test_zero_values_are_written(self, repository, make_product):
        """A supplied zero price or empty description is applied."""
        product_id = make_product(description="Soon gone", price="10.00")

        updated = repository.update(ProductUpdate(id=product_id, price=Decimal("0"), description=""))

        assert updated.price == Decimal("0")
        assert updated.description == ""

    def test_update_refreshes_updated_at(self, repository, make_product):
        product_id = make_product()
        before = repository.get_by_id(product_id)
        created_at, updated_at = before.created_at, before.updated_at

        updated = repository.update(ProductUpdate(id=product_id, category=Category.TOYS))

        assert updated.category == Category.TOYS
        assert updated.updated_at > updated_at
        assert updated.created_at == created_at

    def test_update_soft_deleted_row(self, repository, make_product):
        """Update targets any existing row and never clears is_deleted."""
        product_id = make_product(is_deleted=True)

        updated = repository.update(ProductUpdate(id=product_id, name="Archived"))

        assert updated.name == "Archived"
        assert updated.is_deleted is True

    def test_update_missing(self, repository):
        with pytest.raises(NotFound):
            repository.update(ProductUpdate(id=404, name="Ghost"))

    def test_empty_update_returns_current_row(self, repository, make_product):
        product_id = make_product(name="Untouched")

        product = repository.update(ProductUpdate(id=product_id))

        assert product.name == "Untouched"

    def test_empty_update_missing(self, repository):
        with pytest.raises(NotFound):
            repository.update(ProductUpdate(id=404))


class TestUpdateInventory:
    """Tests for ProductRepository.update_inventory."""

    def test_sets_inventory_only(self, repository, make_product):
        product_id = make_product(name="Mug", price="7.25", inventory=3)

        repository.update_inventory(product_id, 0)

        product = repository.get_by_id(product_id)
        assert product.inventory == 0
        assert product.name == "Mug"
        assert product.price == Decimal("7.25")

    def test_missing_creates_nothing(self, repository, make_product, count_products):
        make_product()

        with pytest.raises(NotFound):
            repository.update_inventory(12345, 10)

        assert count_products() == 1

    def test_negative_inventory(self, repository, make_product):
        product_id = make_product(inventory=2)

        with pytest.raises(InvalidArgument):
            repository.update_inventory(product_id, -1)

        assert repository.get_by_id(product_id).inventory == 2


class TestDeleteProduct:
    """Tests for ProductRepository.delete."""

    def test_soft_delete(self, repository, make_product, count_products):
        product_id = make_product()

        repository.delete(product_id)

        assert repository.get_by_id(product_id).is_deleted is True
        assert repository.list(limit=10).total == 0
        assert count_products() == 1

    def test_delete_twice(self, repository, make_product):
        """The second delete of the same id reports NotFound."""
        product_id = make_product()

        repository.delete(product_id)

        with pytest.raises(NotFound):
            repository.delete(product_id)

    def test_delete_missing(self, repository):
        with pytest.raises(NotFound):
            repository.delete(777)


class TestSearchProducts:
    """Tests for ProductRepository.search."""

    def test_ranks_by_best_field(self, repository, make_product):
        wireless = make_product(name="Wireless Headphones", category=Category.ELECTRONICS)
        stand = make_product(name="Headphone Stand", category=Category.ELECTRONICS)
        lamp = make_product(name="Lamp", description="Headphones", category=Category.HOME)
        make_product(name="Desk Chair", description="Ergonomic", category=Category.HOME)

        results = repository.search("headphones")

        # Exact description match (1.0) beats 0.55 on name, which beats 0.5
        assert [p.id for p in results] == [lamp, wireless, stand]

    def test_excludes_deleted_even_on_exact_match(self, repository, make_product):
        make_product(name="Headphones", is_deleted=True)
        live = make_product(name="Wireless Headphones")

        results = repository.search("headphones")

        assert [p.id for p in results] == [live]

    def test_category_match(self, repository, make_product):
        """A category label matches rows whose other fields do not."""
        chess = make_product(name="Chess Set", description="Wooden board", category=Category.TOYS)
        make_product(name="Atlas", description="Maps", category=Category.BOOKS)

        results = repository.search("toys")

        assert [p.id for p in results] == [chess]

    def test_category_uses_stricter_threshold(self, repository, make_product):
        """A category score above 0.1 but below 0.4 does not match."""
        make_product(name="Chess Set", description="Wooden board", category=Category.TOYS)

        assert 0.1 < similarity("toys", "tools") < 0.4
        assert repository.search("tools") == []

    def test_no_match(self, repository, make_product):
        make_product(name="Laptop", description="Fast", category=Category.ELECTRONICS)

        assert repository.search("zzzz") == []


class TestStorageFailures:
    """Engine errors surface as StorageFailure chained to the original."""

    def test_missing_table(self, repository, db_manager):
        db_manager.drop_tables()

        with pytest.raises(StorageFailure) as exc_info:
            repository.list(limit=10)

        assert isinstance(exc_info.value.__cause__, SQLAlchemyError)
        assert exc_info.value.original is exc_info.value.__cause__
        assert exc_info.value.code == "STORAGE_FAILURE"

    def test_write_failure_after_drop(self, repository, db_manager):
        db_manager.drop_tables()

        with pytest.raises(StorageFailure):
            repository.delete(1)

    def test_migration_failure(self, read_session, write_session):
        def broken_migration():
            raise OperationalError("CREATE TABLE products", {}, Exception("disk full"))

        with pytest.raises(StorageFailure):
            ProductRepository(read_session, write_session, migrate=broken_migration)

    def test_migration_runs_on_construction(self, read_session, write_session):
        calls = []

        ProductRepository(read_session, write_session, migrate=lambda: calls.append(1))

        assert calls == [1]
