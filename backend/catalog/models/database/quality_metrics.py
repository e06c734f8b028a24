"""
Quality metric database models.
"""
import enum

from sqlalchemy import (
    Column, Integer, String, JSON, DateTime, Float, Boolean, ForeignKey, Text,
    UniqueConstraint, Enum as SQLEnum,
)
from sqlalchemy.sql import func
from catalog.core.database import Base, utc_now


class MetricType(str, enum.Enum):
    """Quality dimension a metric measures."""
    COMPLETENESS = "completeness"
    ACCURACY = "accuracy"
    TIMELINESS = "timeliness"
    CONSISTENCY = "consistency"


# Shared so PostgreSQL creates the enum type once
metric_type_enum = SQLEnum(MetricType, name="metrictype", values_callable=lambda obj: [e.value for e in obj])


class MetricTemplate(Base):
    """Reusable metric pattern."""

    __tablename__ = "metric_templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    type = Column(metric_type_enum, nullable=False)
    default_formula = Column(Text, nullable=True)
    parameters = Column(JSON, nullable=True)
    example = Column(Text, nullable=True)
    tags = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())


class MetricDefinition(Base):
    """Metric measured for a data product (or for any product when data_product_id is null)."""

    __tablename__ = "metric_definitions"

    id = Column(Integer, primary_key=True, index=True)
    data_product_id = Column(Integer, ForeignKey("data_products.id", ondelete="CASCADE"), nullable=True, index=True)
    template_id = Column(Integer, ForeignKey("metric_templates.id", ondelete="SET NULL"), nullable=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(metric_type_enum, nullable=False, default=MetricType.COMPLETENESS)
    query = Column(Text, nullable=False)  # Formula used to compute the metric
    parameters = Column(JSON, nullable=True)
    threshold = Column(Float, nullable=True)
    enabled = Column(Boolean, default=True, nullable=False)
    version = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)


class MetricDefinitionVersion(Base):
    """Append-only history of a metric definition."""

    __tablename__ = "metric_definition_versions"
    __table_args__ = (
        UniqueConstraint("metric_definition_id", "version", name="uq_metric_definition_versions_version"),
    )

    id = Column(Integer, primary_key=True, index=True)
    metric_definition_id = Column(
        Integer, ForeignKey("metric_definitions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    version = Column(Integer, nullable=False)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(metric_type_enum, nullable=False)
    query = Column(Text, nullable=False)
    parameters = Column(JSON, nullable=True)
    threshold = Column(Float, nullable=True)
    change_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())


class QualityMetric(Base):
    """One observation of a metric for a data product."""

    __tablename__ = "quality_metrics"

    id = Column(Integer, primary_key=True, index=True)
    data_product_id = Column(Integer, ForeignKey("data_products.id", ondelete="CASCADE"), nullable=False, index=True)
    metric_definition_id = Column(
        Integer, ForeignKey("metric_definitions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    value = Column(Float, nullable=False)  # 0-100 in practice
    observation_metadata = Column("metadata", JSON, nullable=True)
    timestamp = Column(DateTime(timezone=True), default=utc_now, server_default=func.now(), index=True)
