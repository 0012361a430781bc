"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides a file-backed SQLite database per test, read/write sessions,
a product factory, the repository and an API client.

==============================================================================
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.config import Settings
from app.core.dependencies import get_db_manager
from app.db.database import DatabaseManager
from app.db.models import Category, Product
from app.main import app
from app.repositories.product_repository import ProductRepository


# Seeded rows share one timestamp so ordering falls through to the id tiebreak
SEED_TIMESTAMP = datetime(2024, 1, 1, 12, 0, 0)


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a fresh SQLite file."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'catalog.db'}",
    )


@pytest.fixture
def db_manager(settings: Settings) -> Generator[DatabaseManager, None, None]:
    """DatabaseManager with the schema in place."""
    manager = DatabaseManager(settings)
    manager.migrate()
    yield manager
    manager.dispose()


@pytest.fixture
def read_session(db_manager: DatabaseManager) -> Generator[Session, None, None]:
    session = db_manager.get_read_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def write_session(db_manager: DatabaseManager) -> Generator[Session, None, None]:
    session = db_manager.get_write_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repository(
    read_session: Session,
    write_session: Session,
    db_manager: DatabaseManager
) -> ProductRepository:
    return ProductRepository(read_session, write_session, migrate=db_manager.migrate)


# ============================================================================
# PRODUCT FIXTURES
# ============================================================================

@pytest.fixture
def make_product(db_manager: DatabaseManager) -> Callable[..., int]:
    """
    Factory inserting one product and returning its id.

    Rows are created outside the repository, as in production.
    """
    def _make(
        name: str = "Sample Product",
        description: str = "",
        category: Category = Category.MISC,
        price: str = "9.99",
        inventory: int = 5,
        is_deleted: bool = False,
    ) -> int:
        with db_manager.session_scope() as session:
            product = Product(
                name=name,
                description=description,
                category=category,
                price=Decimal(price),
                inventory=inventory,
                is_deleted=is_deleted,
                created_at=SEED_TIMESTAMP,
                updated_at=SEED_TIMESTAMP,
            )
            session.add(product)
            session.flush()
            return product.id

    return _make


@pytest.fixture
def count_products(db_manager: DatabaseManager) -> Callable[[], int]:
    """Count every row in the products table, deleted or not."""
    def _count() -> int:
        with db_manager.session_scope() as session:
            return session.query(Product).count()

    return _count


# ============================================================================
# API FIXTURES
# ============================================================================

@pytest.fixture
def client(db_manager: DatabaseManager) -> Generator[TestClient, None, None]:
    """Test client wired to the test database."""
    app.dependency_overrides[get_db_manager] = lambda: db_manager

    yield TestClient(app)

    app.dependency_overrides.clear()
