"""
Prometheus scrape endpoint.
"""
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import get_db
from catalog.core.logging import get_logger
from catalog.core.metrics import catalog_data_products, get_metrics, get_metrics_content_type
from catalog.services.data_products import data_product_service

logger = get_logger(__name__)

router = APIRouter(tags=["Metrics"])


@router.get("/metrics")
async def prometheus_metrics(db: AsyncSession = Depends(get_db)):
    """
    Expose Prometheus metrics, refreshing the catalog size gauge first.

    A failed count leaves the gauge at its last value; the scrape still succeeds.
    """
    try:
        catalog_data_products.set(await data_product_service.count(db))
    except Exception as e:
        logger.warning(f"Could not sample catalog size for metrics: {e}")

    return Response(content=get_metrics(), media_type=get_metrics_content_type())
