"""
==============================================================================
Product Catalog Service
==============================================================================

Wires the product repository into a FastAPI app:
- /api/v1/products   list, search, get, patch, inventory, delete
- /api/v1/health     read and write database probes

The schema is brought up to date on startup; both engines are disposed
on shutdown.

Run:
----
    uvicorn app.main:app --reload
    python -m app.main

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.core.exceptions import register_exception_handlers
from app.db import get_database_manager, init_db
from app.api.router import api_router


# ============================================================================
# LOGGING
# ============================================================================

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)


# ============================================================================
# APPLICATION
# ============================================================================

class Application:
    """Builds the catalog app and owns its database lifecycle."""

    def __init__(self):
        self._settings = get_settings()
        self._app = self._create_app()

    def _create_app(self) -> FastAPI:
        app = FastAPI(
            title=self._settings.app_name,
            version="1.0.0",
            description="Product catalog with filtering, pagination and fuzzy search",
            lifespan=self._lifespan,
        )

        app.add_middleware(
            CORSMiddleware,
            allow_origins=self._settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        register_exception_handlers(app)
        app.include_router(api_router)
        self._register_root(app)

        return app

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        init_db()
        replica = "replica" if self._settings.has_read_replica else "primary"
        logger.info(f"✅ {self._settings.app_name} ready (reads from {replica})")

        yield

        get_database_manager().dispose()
        logger.info("🛑 Database engines disposed")

    def _register_root(self, app: FastAPI) -> None:

        @app.get("/")
        async def root():
            """Service banner."""
            return {
                "name": self._settings.app_name,
                "docs": "/docs",
                "api": "/api/v1",
            }

    @property
    def app(self) -> FastAPI:
        return self._app


app = Application().app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
