"""
Liveness, readiness and dependency status for the storefront API.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from config.database import get_db, probe_database
from config.settings import get_settings
from core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])

SERVICE_NAME = "nowiht-api"


def _database_status(db) -> Dict[str, Any]:
    try:
        return {"status": probe_database(db), "error": None}
    except Exception as e:
        logger.warning("Database probe failed", error=str(e))
        return {"status": "error", "error": str(e)}


@router.get("/health")
def health_check() -> Dict[str, str]:
    return {"status": "healthy", "service": SERVICE_NAME}


@router.get("/health/detailed")
def detailed_health_check(db=Depends(get_db)) -> Dict[str, Any]:
    """Database reachability plus the email and environment configuration."""
    settings = get_settings()
    database = _database_status(db)

    return {
        "status": "healthy" if database["status"] != "error" else "degraded",
        "service": SERVICE_NAME,
        "environment": settings.environment,
        "checks": {
            "database": database,
            "email": "configured" if settings.email_enabled else "disabled",
            "currency": settings.store_currency,
        },
    }


@router.get("/ready")
def readiness_check(db=Depends(get_db)) -> Dict[str, str]:
    """Ready once the products table answers a query."""
    database = _database_status(db)
    if database["status"] == "error":
        return {"status": "not_ready", "reason": "database_unreachable"}
    return {"status": "ready"}


@router.get("/live")
def liveness_check() -> Dict[str, str]:
    return {"status": "alive"}
