"""
Lineage graph schemas.
"""
from typing import Optional, List, Dict, Any
from datetime import datetime
from pydantic import Field
from catalog.models.database.lineage import LineageNodeType
from catalog.models.schemas.base import CamelModel


class GraphNode(CamelModel):
    id: str
    type: str
    label: str


class GraphLink(CamelModel):
    source: str
    target: str


class LineageGraphResponse(CamelModel):
    """Renderable lineage graph."""
    nodes: List[GraphNode]
    links: List[GraphLink]


class LineageNodeCreate(CamelModel):
    """Schema for adding a node to a product's lineage."""
    type: LineageNodeType
    details: Optional[Dict[str, Any]] = Field(None, description="Free-form details; 'name' is the display label")


class LineageNodeResponse(CamelModel):
    id: int
    data_product_id: int
    type: str
    label: str
    details: Optional[Dict[str, Any]] = None

    @classmethod
    def from_orm(cls, node):
        """Create from ORM model."""
        return cls(
            id=node.id,
            data_product_id=node.data_product_id,
            type=node.type.value,
            label=node.label,
            details=node.details,
        )


class LineageEdgeCreate(CamelModel):
    """Schema for connecting two lineage nodes."""
    source_id: int
    target_id: int
    transformation_logic: Optional[str] = None
    edge_metadata: Optional[Dict[str, Any]] = Field(None, alias="metadata")


class LineageEdgeResponse(CamelModel):
    id: int
    source_id: int
    target_id: int
    transformation_logic: Optional[str] = None
    edge_metadata: Optional[Dict[str, Any]] = Field(None, alias="metadata")

    @classmethod
    def from_orm(cls, edge):
        """Create from ORM model."""
        return cls(
            id=edge.id,
            source_id=edge.source_id,
            target_id=edge.target_id,
            transformation_logic=edge.transformation_logic,
            edge_metadata=edge.edge_metadata,
        )


class LineageVersionCreate(CamelModel):
    change_message: Optional[str] = Field(None, max_length=2000)


class LineageVersionResponse(CamelModel):
    """Stored snapshot of a lineage graph."""
    id: int
    data_product_id: int
    version: int
    snapshot: LineageGraphResponse
    change_message: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_orm(cls, version):
        """Create from ORM model."""
        return cls(
            id=version.id,
            data_product_id=version.data_product_id,
            version=version.version,
            snapshot=version.snapshot,
            change_message=version.change_message,
            created_by=version.created_by,
            created_at=version.created_at,
        )
