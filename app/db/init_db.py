"""
==============================================================================
Database Initialization Module
==============================================================================

Schema bootstrap for the product catalog.

This module implements:
- ensure_schema: Idempotent migration trigger used by the repository
- DatabaseInitializer: Startup and development operations

Bootstrap Flow:
--------------
1. PostgreSQL only: enable the pg_trgm extension
2. Create the products table (and the category enum type) if missing
3. PostgreSQL only: (re)define category_to_text(category)

SQLite gets similarity, category_to_text and greatest from the connect
hook in database.py, so only step 2 applies.

Usage:
------
    from app.db import init_db, DatabaseInitializer

    # Application startup
    init_db()

    # Or with more control
    initializer = DatabaseInitializer(db_manager)
    initializer.initialize()

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from app.config import get_settings
from app.db.database import Base, DatabaseManager, get_database_manager
from app.db.models import Product


# Module logger
logger = logging.getLogger(__name__)


PG_TRGM_EXTENSION = "CREATE EXTENSION IF NOT EXISTS pg_trgm"

PG_CATEGORY_TO_TEXT = """
CREATE OR REPLACE FUNCTION category_to_text(category) RETURNS text
LANGUAGE sql IMMUTABLE STRICT AS $$ SELECT $1::text $$
"""


def ensure_schema(engine: Engine) -> None:
    """
    Make sure the products table and its SQL functions exist.

    Safe to call repeatedly: every statement is idempotent.

    Args:
        engine: Engine bound to the write database
    """
    is_postgres = engine.dialect.name == "postgresql"

    if is_postgres:
        with engine.begin() as conn:
            conn.execute(text(PG_TRGM_EXTENSION))

    Base.metadata.create_all(bind=engine, tables=[Product.__table__])

    if is_postgres:
        with engine.begin() as conn:
            conn.execute(text(PG_CATEGORY_TO_TEXT))

    logger.info(f"✅ Product schema verified ({engine.dialect.name})")


class DatabaseInitializer:
    """
    Database initialization manager.

    Attributes:
        _db_manager: DatabaseManager instance
        _settings: Application settings

    Example:
        >>> initializer = DatabaseInitializer()
        >>> initializer.initialize()
    """

    def __init__(self, db_manager: Optional[DatabaseManager] = None) -> None:
        """
        Initialize the database initializer.

        Args:
            db_manager: Optional DatabaseManager (uses the global one if None)
        """
        self._db_manager = db_manager or get_database_manager()
        self._settings = get_settings()

    # =========================================================================
    # TABLE OPERATIONS
    # =========================================================================

    def verify_tables(self) -> bool:
        """
        Verify that the products table is queryable on both engines.

        Returns:
            True if the table exists, False otherwise
        """
        read = self._db_manager.get_read_session()
        write = self._db_manager.get_write_session()

        try:
            write.query(Product.id).first()
            read.query(Product.id).first()

            logger.debug("Database tables verified successfully")
            return True

        except Exception as e:
            logger.error(f"Table verification failed: {e}")
            return False
        finally:
            read.close()
            write.close()

    # =========================================================================
    # INITIALIZATION METHODS
    # =========================================================================

    def initialize(self) -> None:
        """
        Perform full database initialization.

        Runs the schema bootstrap and checks connectivity of both the read
        and the write engine.
        """
        logger.info("=" * 60)
        logger.info("Initializing database...")
        logger.info("=" * 60)

        self._db_manager.migrate()

        if self._db_manager.verify_connection(self._db_manager.write_engine):
            logger.info("✅ Write database connection verified")
        else:
            logger.warning("⚠️ Write database connection check failed")

        if self._db_manager.verify_connection(self._db_manager.read_engine):
            logger.info("✅ Read database connection verified")
        else:
            logger.warning("⚠️ Read database connection check failed")

        logger.info("Database initialization complete")

    def reset(self) -> None:
        """
        Drop and recreate the catalog schema.

        WARNING: This deletes all data. Refused in production.
        """
        if self._settings.is_production:
            logger.error("Cannot reset database in production!")
            raise RuntimeError("Database reset not allowed in production")

        logger.warning("RESETTING DATABASE - ALL DATA WILL BE LOST")

        self._db_manager.drop_tables()
        self._db_manager.migrate()

        logger.warning("Database reset complete")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def init_db(db_manager: Optional[DatabaseManager] = None) -> None:
    """
    Initialize the database at application startup.

    Usage:
        from app.db import init_db
        init_db()
    """
    DatabaseInitializer(db_manager).initialize()
