# Schemas package
from catalog.models.schemas.base import CamelModel
from catalog.models.schemas.data_products import DataProductCreate, DataProductResponse
from catalog.models.schemas.lineage import (
    GraphNode,
    GraphLink,
    LineageGraphResponse,
    LineageNodeCreate,
    LineageNodeResponse,
    LineageEdgeCreate,
    LineageEdgeResponse,
    LineageVersionCreate,
    LineageVersionResponse,
)
from catalog.models.schemas.quality import (
    MetricDefinitionCreate,
    MetricDefinitionUpdate,
    MetricDefinitionResponse,
    MetricDefinitionVersionResponse,
    RollbackResponse,
    MetricTemplateResponse,
    QualityObservationCreate,
    QualityObservationResponse,
    QualitySummaryResponse,
)
from catalog.models.schemas.comments import (
    CommentCreate,
    CommentResponse,
    CommentCreatedResponse,
    ReactionCounts,
    ReactionRequest,
    ReactionResponse,
)
from catalog.models.schemas.usage import UsageStatsResponse
from catalog.models.schemas.stewardship import StewardshipMetricsResponse

__all__ = [
    "CamelModel",
    "DataProductCreate",
    "DataProductResponse",
    "GraphNode",
    "GraphLink",
    "LineageGraphResponse",
    "LineageNodeCreate",
    "LineageNodeResponse",
    "LineageEdgeCreate",
    "LineageEdgeResponse",
    "LineageVersionCreate",
    "LineageVersionResponse",
    "MetricDefinitionCreate",
    "MetricDefinitionUpdate",
    "MetricDefinitionResponse",
    "MetricDefinitionVersionResponse",
    "RollbackResponse",
    "MetricTemplateResponse",
    "QualityObservationCreate",
    "QualityObservationResponse",
    "QualitySummaryResponse",
    "CommentCreate",
    "CommentResponse",
    "CommentCreatedResponse",
    "ReactionCounts",
    "ReactionRequest",
    "ReactionResponse",
    "UsageStatsResponse",
    "StewardshipMetricsResponse",
]
