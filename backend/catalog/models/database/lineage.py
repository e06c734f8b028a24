"""
Lineage graph database models.
"""
import enum

from sqlalchemy import Column, Integer, String, JSON, DateTime, ForeignKey, Text, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.sql import func
from catalog.core.database import Base, utc_now


class LineageNodeType(str, enum.Enum):
    """Role of a node in the data flow."""
    SOURCE = "source"
    TRANSFORMATION = "transformation"
    TARGET = "target"


class LineageNode(Base):
    """Node in a data product's lineage graph."""

    __tablename__ = "lineage_nodes"

    id = Column(Integer, primary_key=True, index=True)
    data_product_id = Column(Integer, ForeignKey("data_products.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(
        SQLEnum(LineageNodeType, name="lineagenodetype", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
    )
    details = Column(JSON, nullable=True)  # Free-form; "name" is used as the display label

    @property
    def label(self) -> str:
        if self.details and self.details.get("name"):
            return str(self.details["name"])
        return f"Node {self.id}"


class LineageEdge(Base):
    """Directed edge between two lineage nodes."""

    __tablename__ = "lineage_edges"

    id = Column(Integer, primary_key=True, index=True)
    source_id = Column(Integer, ForeignKey("lineage_nodes.id", ondelete="CASCADE"), nullable=False, index=True)
    target_id = Column(Integer, ForeignKey("lineage_nodes.id", ondelete="CASCADE"), nullable=False, index=True)

    transformation_logic = Column(Text, nullable=True)
    edge_metadata = Column("metadata", JSON, nullable=True)


class LineageVersion(Base):
    """Append-only snapshot of a product's lineage graph."""

    __tablename__ = "lineage_versions"
    __table_args__ = (
        UniqueConstraint("data_product_id", "version", name="uq_lineage_versions_product_version"),
    )

    id = Column(Integer, primary_key=True, index=True)
    data_product_id = Column(Integer, ForeignKey("data_products.id", ondelete="CASCADE"), nullable=False, index=True)
    version = Column(Integer, nullable=False)
    snapshot = Column(JSON, nullable=False)  # {"nodes": [...], "links": [...]}
    change_message = Column(Text, nullable=True)
    created_by = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())
