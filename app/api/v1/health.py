"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

from fastapi import APIRouter, Depends

from app.core.dependencies import get_db_manager
from app.db.database import DatabaseManager


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, db_manager: DatabaseManager):
        self._db_manager = db_manager

    def check_write_database(self) -> str:
        """Check primary database connectivity."""
        ok = self._db_manager.verify_connection(self._db_manager.write_engine)
        return "healthy" if ok else "unhealthy"

    def check_read_database(self) -> str:
        """Check read replica connectivity."""
        ok = self._db_manager.verify_connection(self._db_manager.read_engine)
        return "healthy" if ok else "unhealthy"

    def get_health(self) -> dict:
        """Get full health status."""
        write_status = self.check_write_database()
        read_status = self.check_read_database()

        overall = "healthy" if write_status == read_status == "healthy" else "degraded"

        return {
            "status": overall,
            "components": {
                "api": "healthy",
                "write_database": write_status,
                "read_database": read_status,
            }
        }


@router.get("")
def health_check(db_manager: DatabaseManager = Depends(get_db_manager)):
    """
    Health check endpoint.

    Returns API status plus connectivity of the write and read databases.
    """
    controller = HealthController(db_manager)
    return controller.get_health()


@router.get("/ready")
async def readiness_check():
    """Readiness probe for container orchestration."""
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    """Liveness probe for container orchestration."""
    return {"alive": True}
