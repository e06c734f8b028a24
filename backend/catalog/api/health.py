"""
Health and readiness endpoints.
"""
from typing import Dict, Any

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.config import settings
from catalog.core.database import get_db
from catalog.core.logging import get_logger
from catalog.services.data_products import data_product_service

logger = get_logger(__name__)

router = APIRouter()


def _service_info() -> Dict[str, Any]:
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Liveness: the process is up and serving."""
    return {"status": "healthy", **_service_info()}


@router.get("/health/detailed")
async def detailed_health_check(db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    """
    Readiness of the catalog.

    Pings the database and reports how many data products are registered.
    ``demoData`` tells whether demo provisioning is enabled and has content to
    show. Failures are logged; the response only carries a status word.
    """
    checks: Dict[str, Any] = {"database": "unknown", "catalog": "unknown"}
    catalog: Dict[str, Any] = {
        "dataProducts": None,
        "demoData": {"enabled": settings.SEED_DEMO_DATA, "provisioned": False},
    }

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        logger.error(f"Health check database ping failed: {e}", exc_info=True)
        checks["database"] = "unhealthy"

    if checks["database"] == "healthy":
        try:
            count = await data_product_service.count(db)
            catalog["dataProducts"] = count
            catalog["demoData"]["provisioned"] = settings.SEED_DEMO_DATA and count > 0
            checks["catalog"] = "healthy"
        except Exception as e:
            logger.error(f"Health check catalog query failed: {e}", exc_info=True)
            checks["catalog"] = "unhealthy"

    healthy = all(status == "healthy" for status in checks.values())
    return {
        "status": "healthy" if healthy else "unhealthy",
        **_service_info(),
        "checks": checks,
        "catalog": catalog,
    }
