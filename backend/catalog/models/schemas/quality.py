"""
Quality metric, metric definition and template schemas.
"""
from typing import Optional, List, Dict, Any
from datetime import datetime
from pydantic import ConfigDict, Field
from catalog.models.database.quality_metrics import MetricType
from catalog.models.schemas.base import CamelModel


class MetricDefinitionCreate(CamelModel):
    """Schema for creating a metric definition."""
    model_config = ConfigDict(str_strip_whitespace=True)

    data_product_id: int = Field(..., description="Product the metric is measured for")
    name: str = Field(..., min_length=1, max_length=255)
    query: str = Field(..., min_length=1, description="Formula used to compute the metric")
    description: Optional[str] = None
    type: MetricType = MetricType.COMPLETENESS
    threshold: Optional[float] = None
    parameters: Optional[Dict[str, Any]] = None
    template_id: Optional[int] = None


class MetricDefinitionUpdate(CamelModel):
    """Schema for updating a metric definition. Every change is versioned."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    query: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    type: Optional[MetricType] = None
    threshold: Optional[float] = None
    parameters: Optional[Dict[str, Any]] = None
    enabled: Optional[bool] = None
    change_message: Optional[str] = None


class MetricDefinitionResponse(CamelModel):
    """Schema for metric definition response."""
    id: int
    data_product_id: Optional[int] = None
    template_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    type: str
    query: str
    parameters: Optional[Dict[str, Any]] = None
    threshold: Optional[float] = None
    enabled: bool
    version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_orm(cls, definition):
        """Create from ORM model."""
        return cls(
            id=definition.id,
            data_product_id=definition.data_product_id,
            template_id=definition.template_id,
            name=definition.name,
            description=definition.description,
            type=definition.type.value,
            query=definition.query,
            parameters=definition.parameters,
            threshold=definition.threshold,
            enabled=definition.enabled,
            version=definition.version,
            created_at=definition.created_at,
            updated_at=definition.updated_at,
        )


class MetricDefinitionVersionResponse(CamelModel):
    id: int
    metric_definition_id: int
    version: int
    name: str
    description: Optional[str] = None
    type: str
    query: str
    parameters: Optional[Dict[str, Any]] = None
    threshold: Optional[float] = None
    change_message: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_orm(cls, version):
        """Create from ORM model."""
        return cls(
            id=version.id,
            metric_definition_id=version.metric_definition_id,
            version=version.version,
            name=version.name,
            description=version.description,
            type=version.type.value,
            query=version.query,
            parameters=version.parameters,
            threshold=version.threshold,
            change_message=version.change_message,
            created_at=version.created_at,
        )


class RollbackResponse(CamelModel):
    message: str
    definition: MetricDefinitionResponse


class MetricTemplateResponse(CamelModel):
    """Schema for metric template response."""
    id: int
    name: str
    description: Optional[str] = None
    type: str
    default_formula: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    example: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @classmethod
    def from_orm(cls, template):
        """Create from ORM model."""
        return cls(
            id=template.id,
            name=template.name,
            description=template.description,
            type=template.type.value,
            default_formula=template.default_formula,
            parameters=template.parameters,
            example=template.example,
            tags=template.tags or [],
        )


class QualityObservationCreate(CamelModel):
    """Schema for recording one metric observation."""
    model_config = ConfigDict(allow_inf_nan=False)

    metric_definition_id: int
    value: float
    observation_metadata: Optional[Dict[str, Any]] = Field(None, alias="metadata")
    timestamp: Optional[datetime] = None


class QualityObservationResponse(CamelModel):
    id: int
    data_product_id: int
    metric_definition_id: int
    value: float
    observation_metadata: Optional[Dict[str, Any]] = Field(None, alias="metadata")
    timestamp: Optional[datetime] = None

    @classmethod
    def from_orm(cls, observation):
        """Create from ORM model."""
        return cls(
            id=observation.id,
            data_product_id=observation.data_product_id,
            metric_definition_id=observation.metric_definition_id,
            value=observation.value,
            observation_metadata=observation.observation_metadata,
            timestamp=observation.timestamp,
        )


class CurrentMetric(CamelModel):
    """Latest state of one applicable metric definition."""
    metric_definition_id: int
    name: str
    type: str
    query: str
    threshold: Optional[float] = None
    value: Optional[float] = None
    timestamp: Optional[datetime] = None


class CurrentQuality(CamelModel):
    completeness: float = 0
    accuracy: float = 0
    timeliness: float = 0
    consistency: float = 0
    metrics: List[CurrentMetric] = Field(default_factory=list)


class HistoryPoint(CamelModel):
    timestamp: datetime
    metric_definition_id: int
    value: float


class MetricSummary(CamelModel):
    metric_definition_id: int
    latest: Optional[float] = None
    previous: Optional[float] = None
    change: Optional[float] = None
    average: Optional[float] = None


class QualitySummaryResponse(CamelModel):
    """Quality summary for a data product."""
    current: CurrentQuality
    history: List[HistoryPoint]
    summary: List[MetricSummary]
