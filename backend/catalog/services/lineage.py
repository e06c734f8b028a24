"""
Lineage graph service.
"""
from typing import Optional, Dict, Any, List

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import NotFoundError, ValidationError
from catalog.core.logging import get_logger
from catalog.core.metrics import lineage_default_chains_total
from catalog.core.sql import insert_or_ignore
from catalog.models.database.data_products import DataProduct
from catalog.models.database.lineage import LineageNode, LineageEdge, LineageVersion, LineageNodeType
from catalog.services.data_products import get_product_or_404

logger = get_logger(__name__)

DEFAULT_CHAIN_MESSAGE = "Default lineage chain"


def render_graph(nodes: List[LineageNode], edges: List[LineageEdge]) -> Dict[str, List[Dict[str, str]]]:
    """Render nodes and edges as a graph with string ids."""
    return {
        "nodes": [
            {"id": str(node.id), "type": node.type.value, "label": node.label}
            for node in nodes
        ],
        "links": [
            {"source": str(edge.source_id), "target": str(edge.target_id)}
            for edge in edges
        ],
    }


def _default_chain(product_name: str) -> List[Dict[str, Any]]:
    return [
        {
            "type": LineageNodeType.SOURCE,
            "details": {"name": "Source System", "description": f"Upstream system feeding {product_name}"},
        },
        {
            "type": LineageNodeType.TRANSFORMATION,
            "details": {"name": "Data Processing", "description": "Cleansing and enrichment"},
        },
        {
            "type": LineageNodeType.TARGET,
            "details": {"name": product_name, "description": "Published data product"},
        },
    ]


class LineageService:
    """Builds and versions the lineage graph of a data product."""

    async def _load(self, db: AsyncSession, product_id: int):
        nodes_result = await db.execute(
            select(LineageNode)
            .where(LineageNode.data_product_id == product_id)
            .order_by(LineageNode.id)
        )
        nodes = list(nodes_result.scalars().all())

        edges_result = await db.execute(
            select(LineageEdge)
            .join(LineageNode, LineageEdge.source_id == LineageNode.id)
            .where(LineageNode.data_product_id == product_id)
            .order_by(LineageEdge.id)
        )
        edges = list(edges_result.scalars().all())
        return nodes, edges

    async def _next_version(self, db: AsyncSession, product_id: int) -> int:
        result = await db.execute(
            select(func.max(LineageVersion.version)).where(LineageVersion.data_product_id == product_id)
        )
        return (result.scalar() or 0) + 1

    async def _has_nodes(self, db: AsyncSession, product_id: int) -> bool:
        result = await db.execute(
            select(func.count(LineageNode.id)).where(LineageNode.data_product_id == product_id)
        )
        return result.scalar_one() > 0

    async def ensure_default_chain(self, db: AsyncSession, product: DataProduct) -> bool:
        """
        Write the source -> transformation -> target chain for a product with no lineage.

        The product row is locked (SELECT ... FOR UPDATE on PostgreSQL) and the
        node check is repeated under the lock, so a caller that waited behind
        the writer sees its chain and stops. The snapshot version is then
        claimed with an insert that ignores conflicts on (product, version).

        Returns:
            True if this call wrote the chain
        """
        product_id = product.id
        product_name = product.name

        await db.execute(select(DataProduct.id).where(DataProduct.id == product_id).with_for_update())
        if await self._has_nodes(db, product_id):
            await db.rollback()
            logger.info(
                f"Lineage for product {product_id} already written by another request",
                extra={"data_product_id": product_id},
            )
            return False

        version = await self._next_version(db, product_id)
        version_id = await insert_or_ignore(
            db,
            LineageVersion,
            {
                "data_product_id": product_id,
                "version": version,
                "snapshot": {"nodes": [], "links": []},
                "change_message": DEFAULT_CHAIN_MESSAGE,
                "created_by": "system",
            },
        )
        if version_id is None:
            await db.rollback()
            logger.info(
                f"Default lineage for product {product_id} written by a concurrent request",
                extra={"data_product_id": product_id},
            )
            return False

        try:
            nodes = [LineageNode(data_product_id=product_id, **spec) for spec in _default_chain(product_name)]
            db.add_all(nodes)
            await db.flush()

            edges = [
                LineageEdge(source_id=nodes[0].id, target_id=nodes[1].id, transformation_logic="extract"),
                LineageEdge(source_id=nodes[1].id, target_id=nodes[2].id, transformation_logic="load"),
            ]
            db.add_all(edges)
            await db.flush()

            await db.execute(
                update(LineageVersion)
                .where(LineageVersion.id == version_id)
                .values(snapshot=render_graph(nodes, edges))
            )
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Error writing default lineage for product {product_id}: {e}", exc_info=True)
            raise

        lineage_default_chains_total.inc()
        logger.info(f"Wrote default lineage chain for product {product_id}", extra={"data_product_id": product_id})
        return True

    async def get_graph(
        self,
        db: AsyncSession,
        product_id: int,
        version: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Get the lineage graph of a product.

        Args:
            db: Database session
            product_id: Data product ID
            version: Stored snapshot to return instead of the live graph

        Returns:
            {"nodes": [...], "links": [...]} with string ids
        """
        product = await get_product_or_404(db, product_id)

        if version is not None:
            stored = await self.get_version(db, product_id, version)
            return stored.snapshot

        nodes, edges = await self._load(db, product_id)
        if not nodes:
            await self.ensure_default_chain(db, product)
            nodes, edges = await self._load(db, product_id)

        return render_graph(nodes, edges)

    async def add_node(
        self,
        db: AsyncSession,
        product_id: int,
        node_type: LineageNodeType,
        details: Optional[Dict[str, Any]] = None,
    ) -> LineageNode:
        await get_product_or_404(db, product_id)

        node = LineageNode(data_product_id=product_id, type=LineageNodeType(node_type), details=details)
        db.add(node)
        await db.commit()
        await db.refresh(node)
        return node

    async def add_edge(
        self,
        db: AsyncSession,
        source_id: int,
        target_id: int,
        transformation_logic: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> LineageEdge:
        """Connect two existing nodes. Cycles are not checked."""
        for node_id in (source_id, target_id):
            if await db.get(LineageNode, node_id) is None:
                raise NotFoundError(f"Lineage node {node_id} not found")

        edge = LineageEdge(
            source_id=source_id,
            target_id=target_id,
            transformation_logic=transformation_logic,
            edge_metadata=metadata,
        )
        db.add(edge)
        await db.commit()
        await db.refresh(edge)
        return edge

    async def save_version(
        self,
        db: AsyncSession,
        product_id: int,
        change_message: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> LineageVersion:
        """
        Snapshot the current graph as the next version.

        Raises:
            ValidationError: if a concurrent save claimed the same version number
        """
        await get_product_or_404(db, product_id)
        nodes, edges = await self._load(db, product_id)

        version = await self._next_version(db, product_id)
        version_id = await insert_or_ignore(
            db,
            LineageVersion,
            {
                "data_product_id": product_id,
                "version": version,
                "snapshot": render_graph(nodes, edges),
                "change_message": change_message,
                "created_by": created_by,
            },
        )
        if version_id is None:
            await db.rollback()
            raise ValidationError(
                f"Lineage version {version} of product {product_id} was saved concurrently, retry the request"
            )

        await db.commit()
        logger.info(
            f"Saved lineage version {version} for product {product_id}",
            extra={"data_product_id": product_id, "version": version},
        )
        return await db.get(LineageVersion, version_id)

    async def list_versions(self, db: AsyncSession, product_id: int) -> List[LineageVersion]:
        """Stored versions, newest first."""
        await get_product_or_404(db, product_id)
        result = await db.execute(
            select(LineageVersion)
            .where(LineageVersion.data_product_id == product_id)
            .order_by(LineageVersion.version.desc())
        )
        return list(result.scalars().all())

    async def get_version(self, db: AsyncSession, product_id: int, version: int) -> LineageVersion:
        result = await db.execute(
            select(LineageVersion).where(
                LineageVersion.data_product_id == product_id,
                LineageVersion.version == version,
            )
        )
        stored = result.scalar_one_or_none()
        if stored is None:
            raise NotFoundError(f"Lineage version {version} of product {product_id} not found")
        return stored


lineage_service = LineageService()
