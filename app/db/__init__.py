"""
==============================================================================
Database Package
==============================================================================

SQLAlchemy database infrastructure and ORM models.

This package provides:
- DatabaseManager: Read and write engines with their session factories
- ORM models: Product
- Enums: Category
- Schema bootstrap utilities

Architecture:
------------
├── database.py   - DatabaseManager class, session factories
├── functions.py  - SQLite shims for similarity/category_to_text/greatest
├── models.py     - SQLAlchemy ORM model classes
└── init_db.py    - Schema bootstrap and DatabaseInitializer

Usage:
------
    from app.db import get_database_manager, Product, Category, init_db

    db_manager = get_database_manager()
    session = db_manager.get_read_session()
    try:
        books = session.query(Product).filter(Product.category == Category.BOOKS).all()
    finally:
        session.close()

==============================================================================
"""

from .database import Base, DatabaseManager, get_database_manager
from .models import Category, Product
from .init_db import DatabaseInitializer, ensure_schema, init_db

__all__ = [
    # Database management
    "Base",
    "DatabaseManager",
    "get_database_manager",
    # Models
    "Product",
    # Enums
    "Category",
    # Initialization
    "DatabaseInitializer",
    "ensure_schema",
    "init_db",
]
