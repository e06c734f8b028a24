# API routes package
from fastapi import APIRouter

from catalog.api.routes.data_products import router as data_products_router
from catalog.api.routes.lineage import router as lineage_router
from catalog.api.routes.quality import router as quality_router
from catalog.api.routes.comments import router as comments_router
from catalog.api.routes.usage import router as usage_router
from catalog.api.routes.stewardship import router as stewardship_router

api_router = APIRouter()
api_router.include_router(data_products_router)
api_router.include_router(lineage_router)
api_router.include_router(quality_router)
api_router.include_router(comments_router)
api_router.include_router(usage_router)
api_router.include_router(stewardship_router)

__all__ = [
    "api_router",
    "data_products_router",
    "lineage_router",
    "quality_router",
    "comments_router",
    "usage_router",
    "stewardship_router",
]
