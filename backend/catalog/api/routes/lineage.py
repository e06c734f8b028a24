"""
Lineage graph API endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import get_db
from catalog.middleware.auth import CurrentUser
from catalog.models.schemas.lineage import (
    LineageGraphResponse,
    LineageNodeCreate,
    LineageNodeResponse,
    LineageEdgeCreate,
    LineageEdgeResponse,
    LineageVersionCreate,
    LineageVersionResponse,
)
from catalog.services.lineage import lineage_service

router = APIRouter(prefix="/lineage", tags=["Lineage"])


@router.post("/edges", response_model=LineageEdgeResponse, status_code=status.HTTP_201_CREATED)
async def add_lineage_edge(request: LineageEdgeCreate, db: AsyncSession = Depends(get_db)):
    edge = await lineage_service.add_edge(
        db,
        source_id=request.source_id,
        target_id=request.target_id,
        transformation_logic=request.transformation_logic,
        metadata=request.edge_metadata,
    )
    return LineageEdgeResponse.from_orm(edge)


@router.get("/{product_id}", response_model=LineageGraphResponse)
async def get_lineage(
    product_id: int,
    version: Optional[int] = Query(None, ge=1, description="Return a stored snapshot instead of the live graph"),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the lineage graph of a data product.

    A product without any lineage gets a default source -> transformation -> target chain.
    """
    return await lineage_service.get_graph(db, product_id, version=version)


@router.post("/{product_id}/nodes", response_model=LineageNodeResponse, status_code=status.HTTP_201_CREATED)
async def add_lineage_node(product_id: int, request: LineageNodeCreate, db: AsyncSession = Depends(get_db)):
    node = await lineage_service.add_node(db, product_id, request.type, request.details)
    return LineageNodeResponse.from_orm(node)


@router.get("/{product_id}/versions", response_model=List[LineageVersionResponse])
async def list_lineage_versions(product_id: int, db: AsyncSession = Depends(get_db)):
    versions = await lineage_service.list_versions(db, product_id)
    return [LineageVersionResponse.from_orm(version) for version in versions]


@router.post(
    "/{product_id}/versions",
    response_model=LineageVersionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def save_lineage_version(
    product_id: int,
    request: LineageVersionCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    """Snapshot the current graph as the next version."""
    version = await lineage_service.save_version(
        db,
        product_id,
        change_message=request.change_message,
        created_by=current_user.username,
    )
    return LineageVersionResponse.from_orm(version)
