"""
Quality metric and metric definition API endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import get_db
from catalog.models.schemas.quality import (
    MetricDefinitionCreate,
    MetricDefinitionUpdate,
    MetricDefinitionResponse,
    MetricDefinitionVersionResponse,
    MetricTemplateResponse,
    QualityObservationCreate,
    QualityObservationResponse,
    QualitySummaryResponse,
    RollbackResponse,
)
from catalog.services.metric_definitions import metric_definition_service
from catalog.services.quality_metrics import quality_metrics_service, DEFAULT_HISTORY_DAYS

router = APIRouter(tags=["Data Quality"])


@router.get("/quality-metrics/{product_id}", response_model=QualitySummaryResponse)
async def get_quality_metrics(
    product_id: int,
    days: int = Query(DEFAULT_HISTORY_DAYS, ge=1, le=365),
    db: AsyncSession = Depends(get_db),
):
    """Current values, observation history and per-metric trends for a data product."""
    return await quality_metrics_service.get_quality_summary(db, product_id, days=days)


@router.post(
    "/quality-metrics/{product_id}",
    response_model=QualityObservationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_quality_observation(
    product_id: int,
    request: QualityObservationCreate,
    db: AsyncSession = Depends(get_db),
):
    observation = await quality_metrics_service.record_observation(
        db,
        product_id,
        metric_definition_id=request.metric_definition_id,
        value=request.value,
        metadata=request.observation_metadata,
        timestamp=request.timestamp,
    )
    return QualityObservationResponse.from_orm(observation)


@router.post(
    "/metric-definitions",
    response_model=MetricDefinitionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_metric_definition(request: MetricDefinitionCreate, db: AsyncSession = Depends(get_db)):
    """Create a metric definition for a data product."""
    definition = await metric_definition_service.create_definition(
        db,
        data_product_id=request.data_product_id,
        name=request.name,
        query=request.query,
        description=request.description,
        metric_type=request.type,
        threshold=request.threshold,
        parameters=request.parameters,
        template_id=request.template_id,
    )
    return MetricDefinitionResponse.from_orm(definition)


@router.get("/metric-definitions", response_model=List[MetricDefinitionResponse])
async def list_metric_definitions(
    data_product_id: Optional[int] = Query(None, alias="dataProductId"),
    db: AsyncSession = Depends(get_db),
):
    definitions = await metric_definition_service.list_definitions(db, data_product_id)
    return [MetricDefinitionResponse.from_orm(definition) for definition in definitions]


@router.put("/metric-definitions/{definition_id}", response_model=MetricDefinitionResponse)
async def update_metric_definition(
    definition_id: int,
    request: MetricDefinitionUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update a metric definition. The new state is stored as the next version."""
    changes = request.model_dump(exclude_unset=True, exclude={"change_message"})
    definition = await metric_definition_service.update_definition(
        db, definition_id, changes, change_message=request.change_message
    )
    return MetricDefinitionResponse.from_orm(definition)


@router.get(
    "/metric-definitions/{definition_id}/history",
    response_model=List[MetricDefinitionVersionResponse],
)
async def get_metric_definition_history(definition_id: int, db: AsyncSession = Depends(get_db)):
    versions = await metric_definition_service.get_history(db, definition_id)
    return [MetricDefinitionVersionResponse.from_orm(version) for version in versions]


@router.post(
    "/metric-definitions/{definition_id}/rollback/{version_id}",
    response_model=RollbackResponse,
)
async def rollback_metric_definition(
    definition_id: int,
    version_id: int,
    db: AsyncSession = Depends(get_db),
):
    result = await metric_definition_service.rollback(db, definition_id, version_id)
    return RollbackResponse(
        message=result["message"],
        definition=MetricDefinitionResponse.from_orm(result["definition"]),
    )


@router.get("/metric-templates", response_model=List[MetricTemplateResponse])
async def list_metric_templates(db: AsyncSession = Depends(get_db)):
    templates = await metric_definition_service.list_templates(db)
    return [MetricTemplateResponse.from_orm(template) for template in templates]
