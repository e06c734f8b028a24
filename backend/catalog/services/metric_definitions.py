"""
Metric definition and template service.

Every saved state of a definition is appended to metric_definition_versions,
so a definition can be audited and rolled back.
"""
from typing import Optional, Dict, Any, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.exceptions import NotFoundError, ValidationError
from catalog.core.logging import get_logger
from catalog.core.sql import insert_or_ignore
from catalog.models.database.quality_metrics import (
    MetricDefinition,
    MetricDefinitionVersion,
    MetricTemplate,
    MetricType,
)
from catalog.services.data_products import get_product_or_404

logger = get_logger(__name__)

# Fields copied between a definition and its versions
VERSIONED_FIELDS = ("name", "description", "type", "query", "parameters", "threshold")


class MetricDefinitionService:
    """Creates, versions and rolls back metric definitions."""

    async def _append_version(
        self,
        db: AsyncSession,
        definition: MetricDefinition,
        change_message: Optional[str],
    ) -> None:
        values = {field: getattr(definition, field) for field in VERSIONED_FIELDS}
        version_id = await insert_or_ignore(
            db,
            MetricDefinitionVersion,
            {
                "metric_definition_id": definition.id,
                "version": definition.version,
                "change_message": change_message,
                **values,
            },
        )
        if version_id is None:
            await db.rollback()
            raise ValidationError(
                f"Metric definition {definition.id} was modified concurrently, retry the request"
            )

    async def get_definition(self, db: AsyncSession, definition_id: int) -> MetricDefinition:
        definition = await db.get(MetricDefinition, definition_id)
        if definition is None:
            raise NotFoundError(f"Metric definition {definition_id} not found")
        return definition

    async def create_definition(
        self,
        db: AsyncSession,
        data_product_id: int,
        name: str,
        query: str,
        description: Optional[str] = None,
        metric_type: Optional[MetricType] = None,
        threshold: Optional[float] = None,
        parameters: Optional[Dict[str, Any]] = None,
        template_id: Optional[int] = None,
    ) -> MetricDefinition:
        """
        Create a metric definition and record it as version 1.

        Raises:
            ValidationError: if name or query is blank
            NotFoundError: if the product or template does not exist
        """
        if not name or not name.strip() or not query or not query.strip():
            raise ValidationError("dataProductId, name and query are required")

        await get_product_or_404(db, data_product_id)
        if template_id is not None and await db.get(MetricTemplate, template_id) is None:
            raise NotFoundError(f"Metric template {template_id} not found")

        definition = MetricDefinition(
            data_product_id=data_product_id,
            template_id=template_id,
            name=name.strip(),
            description=description,
            type=MetricType(metric_type) if metric_type else MetricType.COMPLETENESS,
            query=query.strip(),
            parameters=parameters,
            threshold=threshold,
            version=1,
        )
        db.add(definition)
        await db.flush()

        await self._append_version(db, definition, "Initial version")
        await db.commit()
        await db.refresh(definition)

        logger.info(
            f"Created metric definition {definition.id}",
            extra={"metric_definition_id": definition.id, "data_product_id": data_product_id},
        )
        return definition

    async def list_definitions(
        self,
        db: AsyncSession,
        data_product_id: Optional[int] = None,
    ) -> List[MetricDefinition]:
        query = select(MetricDefinition).order_by(MetricDefinition.id)
        if data_product_id is not None:
            query = query.where(MetricDefinition.data_product_id == data_product_id)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def update_definition(
        self,
        db: AsyncSession,
        definition_id: int,
        changes: Dict[str, Any],
        change_message: Optional[str] = None,
    ) -> MetricDefinition:
        """
        Apply field changes and append a version.

        Args:
            db: Database session
            definition_id: Metric definition ID
            changes: Field values to set; keys outside the versioned fields and "enabled" are rejected
            change_message: Note stored with the new version
        """
        definition = await self.get_definition(db, definition_id)

        allowed = set(VERSIONED_FIELDS) | {"enabled"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
        for field in ("name", "query"):
            if field in changes and (changes[field] is None or not str(changes[field]).strip()):
                raise ValidationError(f"{field} must not be blank")

        for field, value in changes.items():
            if field == "type" and value is not None:
                value = MetricType(value)
            setattr(definition, field, value)
        definition.version = (definition.version or 0) + 1

        await db.flush()
        await self._append_version(db, definition, change_message)
        await db.commit()
        await db.refresh(definition)
        return definition

    async def get_history(self, db: AsyncSession, definition_id: int) -> List[MetricDefinitionVersion]:
        """Versions of a definition, newest first."""
        await self.get_definition(db, definition_id)
        result = await db.execute(
            select(MetricDefinitionVersion)
            .where(MetricDefinitionVersion.metric_definition_id == definition_id)
            .order_by(MetricDefinitionVersion.version.desc())
        )
        return list(result.scalars().all())

    async def rollback(self, db: AsyncSession, definition_id: int, version_id: int) -> Dict[str, Any]:
        """
        Restore a stored version's fields onto the definition.

        The restore is itself recorded as a new version.
        """
        definition = await self.get_definition(db, definition_id)

        result = await db.execute(
            select(MetricDefinitionVersion).where(
                MetricDefinitionVersion.id == version_id,
                MetricDefinitionVersion.metric_definition_id == definition_id,
            )
        )
        stored = result.scalar_one_or_none()
        if stored is None:
            raise NotFoundError(f"Version {version_id} of metric definition {definition_id} not found")

        for field in VERSIONED_FIELDS:
            setattr(definition, field, getattr(stored, field))
        definition.version = (definition.version or 0) + 1

        message = f"Rolled back to version {stored.version}"
        await db.flush()
        await self._append_version(db, definition, message)
        await db.commit()
        await db.refresh(definition)

        logger.info(message, extra={"metric_definition_id": definition_id})
        return {"message": message, "definition": definition}

    async def list_templates(self, db: AsyncSession) -> List[MetricTemplate]:
        result = await db.execute(select(MetricTemplate).order_by(MetricTemplate.id))
        return list(result.scalars().all())


metric_definition_service = MetricDefinitionService()
