"""
Quality metrics service.

History is the persisted observations only; nothing is synthesised when a
product has few or no observations.
"""
import math
from datetime import datetime, timedelta
from statistics import mean
from typing import Optional, Dict, Any, List

from sqlalchemy import select, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import utc_now
from catalog.core.exceptions import NotFoundError, ValidationError
from catalog.core.logging import get_logger
from catalog.core.metrics import quality_observations_total
from catalog.core.sql import as_utc
from catalog.models.database.quality_metrics import MetricDefinition, MetricType, QualityMetric
from catalog.services.data_products import get_product_or_404

logger = get_logger(__name__)

DEFAULT_HISTORY_DAYS = 30


def _round(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(value, 2)


class QualityMetricsService:
    """Aggregates quality observations into current values, history and trends."""

    async def applicable_definitions(self, db: AsyncSession, product_id: int) -> List[MetricDefinition]:
        """The product's own definitions plus generic ones that have observations for it."""
        observed = select(QualityMetric.metric_definition_id).where(
            QualityMetric.data_product_id == product_id
        )
        result = await db.execute(
            select(MetricDefinition)
            .where(
                or_(
                    MetricDefinition.data_product_id == product_id,
                    and_(
                        MetricDefinition.data_product_id.is_(None),
                        MetricDefinition.id.in_(observed),
                    ),
                )
            )
            .order_by(MetricDefinition.id)
        )
        return list(result.scalars().all())

    async def latest_observations(self, db: AsyncSession, product_id: int) -> Dict[int, QualityMetric]:
        """Newest observation per metric definition, keyed by definition id."""
        rank = func.row_number().over(
            partition_by=QualityMetric.metric_definition_id,
            order_by=(QualityMetric.timestamp.desc(), QualityMetric.id.desc()),
        ).label("rank")
        ranked = (
            select(QualityMetric.id.label("id"), rank)
            .where(QualityMetric.data_product_id == product_id)
            .subquery()
        )
        result = await db.execute(
            select(QualityMetric)
            .join(ranked, QualityMetric.id == ranked.c.id)
            .where(ranked.c.rank == 1)
        )
        return {observation.metric_definition_id: observation for observation in result.scalars().all()}

    async def get_history(
        self,
        db: AsyncSession,
        product_id: int,
        since: datetime,
    ) -> List[QualityMetric]:
        result = await db.execute(
            select(QualityMetric)
            .where(
                QualityMetric.data_product_id == product_id,
                QualityMetric.timestamp >= since,
            )
            .order_by(QualityMetric.timestamp, QualityMetric.id)
        )
        return list(result.scalars().all())

    async def get_quality_summary(
        self,
        db: AsyncSession,
        product_id: int,
        days: int = DEFAULT_HISTORY_DAYS,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Get current values, history and per-metric trends for a product.

        Args:
            db: Database session
            product_id: Data product ID
            days: History window in days
            now: End of the window, defaults to the current time

        Returns:
            Dictionary with "current", "history" and "summary"
        """
        if days < 1:
            raise ValidationError("days must be a positive integer")

        await get_product_or_404(db, product_id)

        definitions = await self.applicable_definitions(db, product_id)
        latest = await self.latest_observations(db, product_id)
        history = await self.get_history(db, product_id, (now or utc_now()) - timedelta(days=days))

        metrics = []
        latest_by_type: Dict[MetricType, List[float]] = {metric_type: [] for metric_type in MetricType}
        for definition in definitions:
            observation = latest.get(definition.id)
            if observation is not None:
                latest_by_type[definition.type].append(observation.value)
            metrics.append({
                "metric_definition_id": definition.id,
                "name": definition.name,
                "type": definition.type.value,
                "query": definition.query,
                "threshold": definition.threshold,
                "value": observation.value if observation is not None else None,
                "timestamp": as_utc(observation.timestamp) if observation is not None else None,
            })

        current: Dict[str, Any] = {
            metric_type.value: _round(mean(values)) if values else 0
            for metric_type, values in latest_by_type.items()
        }
        current["metrics"] = metrics

        values_by_definition: Dict[int, List[float]] = {}
        for observation in history:
            values_by_definition.setdefault(observation.metric_definition_id, []).append(observation.value)

        summary = []
        for definition in definitions:
            values = values_by_definition.get(definition.id, [])
            latest_value = values[-1] if values else None
            previous_value = values[-2] if len(values) > 1 else None
            summary.append({
                "metric_definition_id": definition.id,
                "latest": latest_value,
                "previous": previous_value,
                "change": _round(latest_value - previous_value) if previous_value is not None else None,
                "average": _round(mean(values)) if values else None,
            })

        return {
            "current": current,
            "history": [
                {
                    "timestamp": as_utc(observation.timestamp),
                    "metric_definition_id": observation.metric_definition_id,
                    "value": observation.value,
                }
                for observation in history
            ],
            "summary": summary,
        }

    async def record_observation(
        self,
        db: AsyncSession,
        product_id: int,
        metric_definition_id: int,
        value: float,
        metadata: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> QualityMetric:
        """
        Record one observation of a metric for a product.

        Raises:
            NotFoundError: if the product or the definition does not exist
            ValidationError: if the value is not finite or the definition belongs to another product
        """
        await get_product_or_404(db, product_id)

        definition = await db.get(MetricDefinition, metric_definition_id)
        if definition is None:
            raise NotFoundError(f"Metric definition {metric_definition_id} not found")
        if definition.data_product_id not in (None, product_id):
            raise ValidationError(
                f"Metric definition {metric_definition_id} belongs to data product {definition.data_product_id}"
            )
        if value is None or not math.isfinite(value):
            raise ValidationError("Observation value must be a finite number")

        observation = QualityMetric(
            data_product_id=product_id,
            metric_definition_id=metric_definition_id,
            value=float(value),
            observation_metadata=metadata,
            timestamp=timestamp or utc_now(),
        )
        db.add(observation)
        await db.commit()
        await db.refresh(observation)

        quality_observations_total.labels(metric_type=definition.type.value).inc()
        return observation


quality_metrics_service = QualityMetricsService()
