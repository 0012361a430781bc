"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection for database sessions and the product repository.

Dependency Hierarchy:
--------------------
                    ┌──────────────────┐
                    │ get_db_manager() │
                    └────────┬─────────┘
                             │
              ┌──────────────┴──────────────┐
              │                             │
      ┌───────▼───────┐             ┌───────▼───────┐
      │ get_read_db() │             │get_write_db() │
      └───────┬───────┘             └───────┬───────┘
              └──────────────┬──────────────┘
                    ┌────────▼───────────────┐
                    │get_product_repository()│
                    └────────────────────────┘

Tests swap the whole database by overriding get_db_manager.

==============================================================================
"""

from __future__ import annotations

from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.database import DatabaseManager, get_database_manager
from app.repositories.product_repository import ProductRepository


def get_db_manager() -> DatabaseManager:
    """FastAPI dependency returning the process-wide DatabaseManager."""
    return get_database_manager()


def get_read_db(
    db_manager: DatabaseManager = Depends(get_db_manager)
) -> Generator[Session, None, None]:
    """
    Yield a session bound to the read engine.

    The session is closed after the request.
    """
    db = db_manager.get_read_session()
    try:
        yield db
    finally:
        db.close()


def get_write_db(
    db_manager: DatabaseManager = Depends(get_db_manager)
) -> Generator[Session, None, None]:
    """
    Yield a session bound to the write engine.

    The session is closed after the request.
    """
    db = db_manager.get_write_session()
    try:
        yield db
    finally:
        db.close()


def get_product_repository(
    read: Session = Depends(get_read_db),
    write: Session = Depends(get_write_db),
    db_manager: DatabaseManager = Depends(get_db_manager)
) -> ProductRepository:
    """
    FastAPI dependency that builds a ProductRepository for the request.

    Usage:
        @router.get("/products/{product_id}")
        async def get_product(
            product_id: int,
            repo: ProductRepository = Depends(get_product_repository)
        ):
            return repo.get_by_id(product_id)
    """
    return ProductRepository(read, write, migrate=db_manager.migrate)
