"""
Data product catalog API endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import get_db
from catalog.middleware.auth import CurrentUser
from catalog.models.schemas.data_products import DataProductCreate, DataProductResponse
from catalog.services.data_products import data_product_service

router = APIRouter(tags=["Data Products"])


@router.get("/data-products", response_model=List[DataProductResponse])
async def list_data_products(db: AsyncSession = Depends(get_db)):
    """List every registered data product."""
    products = await data_product_service.list_products(db)
    return [DataProductResponse.from_orm(product) for product in products]


@router.post("/data-products", response_model=DataProductResponse, status_code=status.HTTP_201_CREATED)
async def register_data_product(
    request: DataProductCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Register a data product. The owner defaults to the caller."""
    product = await data_product_service.create_product(
        db,
        name=request.name,
        owner=request.owner or current_user.username,
        description=request.description,
        domain=request.domain,
        schema=request.data_schema,
        tags=request.tags,
        sla=request.sla,
        update_frequency=request.update_frequency,
    )
    return DataProductResponse.from_orm(product)


@router.get("/metadata/{product_id}", response_model=DataProductResponse)
async def get_data_product(product_id: int, db: AsyncSession = Depends(get_db)):
    product = await data_product_service.get_product(db, product_id)
    return DataProductResponse.from_orm(product)


@router.get("/search", response_model=List[DataProductResponse])
async def search_data_products(
    q: Optional[str] = Query(None, description="Substring matched against names and tags"),
    db: AsyncSession = Depends(get_db),
):
    """Case-insensitive search over product names and tags."""
    products = await data_product_service.search(db, q)
    return [DataProductResponse.from_orm(product) for product in products]
