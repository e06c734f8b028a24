# Database models package
from catalog.models.database.data_products import DataProduct
from catalog.models.database.lineage import LineageNode, LineageEdge, LineageVersion, LineageNodeType
from catalog.models.database.quality_metrics import (
    MetricTemplate,
    MetricDefinition,
    MetricDefinitionVersion,
    QualityMetric,
    MetricType,
)
from catalog.models.database.comments import (
    Comment,
    CommentReaction,
    CommentBadge,
    ReactionType,
    BadgeType,
    REACTION_COUNTER_COLUMNS,
)
from catalog.models.database.api_usage import ApiUsageRecord

__all__ = [
    "DataProduct",
    "LineageNode",
    "LineageEdge",
    "LineageVersion",
    "LineageNodeType",
    "MetricTemplate",
    "MetricDefinition",
    "MetricDefinitionVersion",
    "QualityMetric",
    "MetricType",
    "Comment",
    "CommentReaction",
    "CommentBadge",
    "ReactionType",
    "BadgeType",
    "REACTION_COUNTER_COLUMNS",
    "ApiUsageRecord",
]
