"""
Data product catalog service.
"""
from typing import Optional, Dict, Any, List

from sqlalchemy import select, func, or_, String, cast
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import NotFoundError
from catalog.core.logging import get_logger
from catalog.core.metrics import data_products_registered_total
from catalog.models.database.data_products import DataProduct

logger = get_logger(__name__)


async def get_product_or_404(db: AsyncSession, product_id: int) -> DataProduct:
    product = await db.get(DataProduct, product_id)
    if product is None:
        raise NotFoundError(f"Data product {product_id} not found")
    return product


def _matches(product: DataProduct, needle: str) -> bool:
    if needle in (product.name or "").lower():
        return True
    return any(needle in str(tag).lower() for tag in (product.tags or []))


class DataProductService:
    """Registers, lists and searches data products."""

    async def list_products(self, db: AsyncSession) -> List[DataProduct]:
        result = await db.execute(select(DataProduct).order_by(DataProduct.id))
        return list(result.scalars().all())

    async def get_product(self, db: AsyncSession, product_id: int) -> DataProduct:
        return await get_product_or_404(db, product_id)

    async def create_product(
        self,
        db: AsyncSession,
        name: str,
        owner: str,
        description: Optional[str] = None,
        domain: Optional[str] = None,
        schema: Any = None,
        tags: Optional[List[str]] = None,
        sla: Optional[str] = None,
        update_frequency: Optional[str] = None,
    ) -> DataProduct:
        """Register a data product."""
        product = DataProduct(
            name=name,
            owner=owner,
            description=description,
            domain=domain,
            schema=schema if schema is not None else {},
            tags=list(tags or []),
            sla=sla,
            update_frequency=update_frequency,
        )
        db.add(product)
        await db.commit()
        await db.refresh(product)

        data_products_registered_total.labels(domain=domain or "unassigned").inc()
        logger.info(
            f"Registered data product {product.id}",
            extra={"data_product_id": product.id, "owner": owner},
        )
        return product

    async def search(self, db: AsyncSession, query: Optional[str]) -> List[DataProduct]:
        """
        Case-insensitive substring search over product names and tags.

        Tags are stored as JSON, so the database narrows candidates on the
        serialised tag list and each candidate is confirmed tag by tag.
        An empty query returns every product.
        """
        needle = (query or "").strip().lower()
        if not needle:
            return await self.list_products(db)

        pattern = f"%{needle}%"
        result = await db.execute(
            select(DataProduct)
            .where(
                or_(
                    func.lower(DataProduct.name).like(pattern),
                    func.lower(cast(DataProduct.tags, String)).like(pattern),
                )
            )
            .order_by(DataProduct.id)
        )
        return [product for product in result.scalars().all() if _matches(product, needle)]

    async def count(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count(DataProduct.id)))
        return int(result.scalar_one())


data_product_service = DataProductService()
