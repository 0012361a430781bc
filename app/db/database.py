"""
==============================================================================
Database Connection Management Module
==============================================================================

Database connection management using SQLAlchemy with a read/write split.

This module implements:
- DatabaseManager: Owns the write engine, the read engine and their
  session factories
- Session factories with proper lifecycle management
- Connection pooling configuration
- SQLite function shims for development and tests

Read/Write Split:
----------------
    ┌─────────────────┐
    │ DatabaseManager │
    └───┬─────────┬───┘
        │         │
  ┌─────▼───┐ ┌───▼─────┐
  │  write  │ │  read   │   (same Engine when no replica is configured)
  │ Engine  │ │ Engine  │
  └─────┬───┘ └───┬─────┘
        │         │
  ┌─────▼───┐ ┌───▼─────┐
  │ Session │ │ Session │   (request-scoped)
  └─────────┘ └─────────┘

Connection Pool Configuration:
-----------------------------
Taken from Settings: db_pool_size, db_max_overflow, db_pool_timeout,
db_pool_recycle. pool_pre_ping is always on.

SQLite Note:
-----------
SQLite connections disable 'check_same_thread' and get the similarity,
category_to_text and greatest functions registered on connect.

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from functools import lru_cache
from typing import Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.config import Settings, get_settings
from app.db.functions import register_sqlite_functions


# Module logger
logger = logging.getLogger(__name__)

# SQLAlchemy declarative base for all models
Base = declarative_base()


class DatabaseManager:
    """
    Centralized database connection manager.

    Engines are created lazily on first access. When no read replica is
    configured the read side reuses the write engine, so both sessions
    share one pool.

    Attributes:
        _settings: Application settings reference
        _write_engine: Engine for mutations (lazy loaded)
        _read_engine: Engine for queries (lazy loaded)
        _migrated: Whether the schema bootstrap has run

    Example:
        >>> db_manager = DatabaseManager()
        >>> with db_manager.session_scope() as session:
        ...     session.execute(text("SELECT 1"))
        >>> read = db_manager.get_read_session()
        >>> write = db_manager.get_write_session()
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """
        Initialize the database manager.

        Args:
            settings: Optional Settings (uses the global instance if None)
        """
        self._settings = settings or get_settings()
        self._write_engine: Optional[Engine] = None
        self._read_engine: Optional[Engine] = None
        self._write_factory: Optional[sessionmaker] = None
        self._read_factory: Optional[sessionmaker] = None
        self._migrated = False

        logger.debug("DatabaseManager initialized")

    # =========================================================================
    # ENGINE MANAGEMENT
    # =========================================================================

    @property
    def write_engine(self) -> Engine:
        """Engine bound to the primary database."""
        if self._write_engine is None:
            self._write_engine = self._create_engine(self._settings.database_url)
        return self._write_engine

    @property
    def read_engine(self) -> Engine:
        """Engine bound to the read replica, or the write engine."""
        if self._read_engine is None:
            if self._settings.has_read_replica:
                self._read_engine = self._create_engine(
                    self._settings.effective_read_database_url
                )
            else:
                self._read_engine = self.write_engine
        return self._read_engine

    def _create_engine(self, database_url: str) -> Engine:
        """
        Create a SQLAlchemy engine for the given URL.

        - SQLite: disables check_same_thread, registers function shims
        - PostgreSQL/MySQL: uses connection pooling from settings

        Returns:
            Configured SQLAlchemy Engine
        """
        if database_url.startswith("sqlite"):
            db_path = Settings.sqlite_path(database_url)
            if db_path is not None:
                db_path.parent.mkdir(parents=True, exist_ok=True)

            engine = create_engine(
                database_url,
                connect_args={"check_same_thread": False},
                echo=self._settings.debug,
            )

            @event.listens_for(engine, "connect")
            def set_sqlite_functions(dbapi_connection, connection_record):
                register_sqlite_functions(dbapi_connection)

            logger.info(f"Created SQLite engine: {database_url}")

        else:
            engine = create_engine(
                database_url,
                pool_size=self._settings.db_pool_size,
                max_overflow=self._settings.db_max_overflow,
                pool_timeout=self._settings.db_pool_timeout,
                pool_recycle=self._settings.db_pool_recycle,
                pool_pre_ping=True,
                echo=self._settings.debug,
            )

            logger.info(f"Created database engine with pooling: {engine.url!r}")

        return engine

    # =========================================================================
    # SESSION MANAGEMENT
    # =========================================================================

    @staticmethod
    def _make_factory(engine: Engine) -> sessionmaker:
        return sessionmaker(
            bind=engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    def get_write_session(self) -> Session:
        """
        Get a new session bound to the write engine.

        The caller is responsible for closing the session.
        """
        if self._write_factory is None:
            self._write_factory = self._make_factory(self.write_engine)
        return self._write_factory()

    def get_read_session(self) -> Session:
        """
        Get a new session bound to the read engine.

        The caller is responsible for closing the session.
        """
        if self._read_factory is None:
            self._read_factory = self._make_factory(self.read_engine)
        return self._read_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope on the write engine.

        Commits on success, rolls back on exception, always closes.

        Example:
            >>> with db_manager.session_scope() as session:
            ...     session.add(Product(name="Lamp", ...))
        """
        session = self.get_write_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # =========================================================================
    # SCHEMA MANAGEMENT
    # =========================================================================

    def migrate(self) -> None:
        """
        Ensure the catalog schema exists on the write database.

        Idempotent; the bootstrap only runs once per manager.
        """
        if self._migrated:
            return

        # Imported here: init_db depends on the models, which depend on Base
        from app.db.init_db import ensure_schema

        ensure_schema(self.write_engine)
        self._migrated = True

    def drop_tables(self) -> None:
        """
        Drop all tables defined in the models.

        WARNING: This deletes all data. Use only for tests or development.
        """
        Base.metadata.drop_all(bind=self.write_engine)
        self._migrated = False
        logger.warning("All database tables dropped")

    # =========================================================================
    # CONNECTION MANAGEMENT
    # =========================================================================

    def verify_connection(self, engine: Optional[Engine] = None) -> bool:
        """
        Verify a database connection is working.

        Args:
            engine: Engine to probe (defaults to the write engine)

        Returns:
            True if connection successful, False otherwise
        """
        engine = engine or self.write_engine
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.debug("Database connection verified")
            return True
        except Exception as e:
            logger.error(f"Database connection failed: {e}")
            return False

    def dispose(self) -> None:
        """
        Dispose of the connection pools.

        Call this on application shutdown to clean up resources.
        """
        if self._read_engine is not None and self._read_engine is not self._write_engine:
            self._read_engine.dispose()
        if self._write_engine is not None:
            self._write_engine.dispose()
        logger.info("Database connection pools disposed")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"DatabaseManager(read_replica={self._settings.has_read_replica}, "
            f"migrated={self._migrated})"
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

@lru_cache(maxsize=1)
def get_database_manager() -> DatabaseManager:
    """
    Get the global DatabaseManager instance.

    Returns:
        Process-wide DatabaseManager built from get_settings()
    """
    return DatabaseManager()
