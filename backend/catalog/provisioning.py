"""
Demo data provisioning.

Seeds sample data products, metric templates and definitions, 30 days of
quality observations, lineage, comments, reactions and badges. Read paths
never seed; run this once instead:

    python -m catalog.provisioning [--reset] [--create-schema]

or set SEED_DEMO_DATA=true to run it at application startup.
"""
import argparse
import asyncio
import random
from datetime import datetime, timedelta
from typing import Optional, Dict, Any, List

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.database import Base, engine, get_db_session, utc_now
from catalog.core.logging import setup_logging, get_logger
from catalog.models.database import (
    ApiUsageRecord,
    BadgeType,
    Comment,
    CommentBadge,
    DataProduct,
    LineageNodeType,
    MetricDefinition,
    MetricDefinitionVersion,
    MetricTemplate,
    MetricType,
    QualityMetric,
)
from catalog.services.data_products import data_product_service
from catalog.services.lineage import lineage_service
from catalog.services.reactions import reaction_service

logger = get_logger(__name__)

DEMO_PRODUCTS: List[Dict[str, Any]] = [
    {
        "name": "Market Data",
        "description": "Real-time and historical market data from various exchanges and data providers",
        "owner": "Market Data Team",
        "domain": "Market",
        "schema": {
            "type": "object",
            "properties": {
                "symbol": {"type": "string", "description": "Unique identifier for the financial instrument"},
                "price": {"type": "number", "description": "Current market price"},
                "timestamp": {"type": "string", "format": "date-time", "description": "Time of the price update"},
                "volume": {"type": "number", "description": "Trading volume"},
                "exchange": {"type": "string", "description": "Source exchange"},
            },
            "required": ["symbol", "price", "timestamp"],
        },
        "tags": ["market-data", "real-time", "pricing"],
        "sla": "99.99% availability during market hours",
        "update_frequency": "Real-time",
    },
    {
        "name": "Trade and Position Data",
        "description": "Comprehensive trade and position data from trading systems",
        "owner": "Trading Systems Team",
        "domain": "Trading",
        "schema": {
            "type": "object",
            "properties": {
                "tradeId": {"type": "string", "description": "Unique trade identifier"},
                "instrumentId": {"type": "string", "description": "Identifier of the traded instrument"},
                "quantity": {"type": "number", "description": "Trade quantity"},
                "price": {"type": "number", "description": "Trade execution price"},
                "tradeDate": {"type": "string", "format": "date-time", "description": "Date and time of trade execution"},
                "status": {"type": "string", "enum": ["pending", "settled", "cancelled"]},
            },
            "required": ["tradeId", "instrumentId", "quantity", "price", "tradeDate"],
        },
        "tags": ["trading", "positions", "settlement"],
        "sla": "99.9% availability",
        "update_frequency": "Near real-time",
    },
    {
        "name": "Reference Data",
        "description": "Static and reference data for financial instruments and entities",
        "owner": "Reference Data Team",
        "domain": "Reference",
        "schema": {
            "type": "object",
            "properties": {
                "instrumentId": {"type": "string", "description": "Unique identifier for the instrument"},
                "isin": {"type": "string", "description": "International Securities Identification Number"},
                "instrumentType": {"type": "string", "enum": ["equity", "bond", "derivative", "fund"]},
                "issuer": {"type": "string", "description": "Issuing entity"},
            },
            "required": ["instrumentId", "instrumentType"],
        },
        "tags": ["reference-data", "static-data"],
        "sla": "99.9% availability",
        "update_frequency": "Daily",
    },
    {
        "name": "Portfolio Risk Metrics",
        "description": "Aggregate risk metrics at the portfolio level providing comprehensive risk analysis",
        "owner": "Risk Analytics Team",
        "domain": "Risk",
        "schema": {
            "type": "object",
            "properties": {
                "portfolio_id": {"type": "string", "description": "Unique identifier for the portfolio"},
                "total_exposure": {"type": "number", "description": "Total market exposure of the portfolio"},
                "delta": {"type": "number", "description": "Portfolio sensitivity to price changes"},
                "gamma": {"type": "number", "description": "Rate of change of delta"},
            },
            "required": ["portfolio_id", "total_exposure"],
        },
        "tags": ["risk", "portfolio", "aggregate"],
        "sla": "99.9% availability",
        "update_frequency": "Daily",
    },
    {
        "name": "VaR Report Data Product",
        "description": "Value-at-Risk figures per portfolio for risk reporting",
        "owner": "Risk Reporting Team",
        "domain": "Risk",
        "schema": [
            {"name": "portfolio_id", "type": "string", "description": "Portfolio identifier"},
            {"name": "var_95", "type": "number", "description": "One-day VaR at 95% confidence"},
            {"name": "var_99", "type": "number", "description": "One-day VaR at 99% confidence"},
            {"name": "as_of_date", "type": "date", "description": "Business date of the calculation"},
        ],
        "tags": ["risk", "var", "reporting"],
        "sla": "Available by 07:00 UTC on business days",
        "update_frequency": "Daily",
    },
]

METRIC_TEMPLATES: List[Dict[str, Any]] = [
    {
        "name": "Data Completeness",
        "description": "Measures the percentage of non-null values in required fields.",
        "type": MetricType.COMPLETENESS,
        "default_formula": "count(non_null) / count(*) * 100",
        "parameters": {"fields": ["required_fields"], "threshold": 95},
        "example": "98% completeness across all required fields",
        "tags": ["data quality", "completeness", "technical"],
    },
    {
        "name": "Data Accuracy",
        "description": "Measures the accuracy of data against reference sources or patterns.",
        "type": MetricType.ACCURACY,
        "default_formula": "count(matching_records) / count(*) * 100",
        "parameters": {"referenceSource": "source_system", "matchingFields": ["key_fields"], "threshold": 99},
        "example": "99.9% accuracy when compared to source system",
        "tags": ["data quality", "accuracy", "technical"],
    },
    {
        "name": "Data Timeliness",
        "description": "Measures data freshness and update frequency.",
        "type": MetricType.TIMELINESS,
        "default_formula": "avg(current_timestamp - last_update_timestamp)",
        "parameters": {"maxDelay": "PT15M", "warningThreshold": "PT10M"},
        "example": "Average delay of 5 minutes",
        "tags": ["data quality", "timeliness", "technical"],
    },
    {
        "name": "Data Consistency",
        "description": "Measures consistency of data values across different systems or data sets.",
        "type": MetricType.CONSISTENCY,
        "default_formula": "count(matching_records) / total_records * 100",
        "parameters": {"comparisonSystems": ["system_a", "system_b"], "matchingFields": ["key_fields"], "threshold": 98},
        "example": "99% consistency between front-office and back-office systems",
        "tags": ["data quality", "consistency", "technical"],
    },
]

# Generic definitions (no data product), one per template, with the baseline their history starts from
GENERIC_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "name": "Record Completeness",
        "description": "Presence of required data across any dataset",
        "template": "Data Completeness",
        "query": "SELECT complete_records::float / NULLIF(total_records, 0) * 100 FROM field_stats",
        "threshold": 95.0,
        "baseline": 96.0,
    },
    {
        "name": "Data Value Accuracy",
        "description": "Data values validated against reference data or expected patterns",
        "template": "Data Accuracy",
        "query": "SELECT accurate_records::float / NULLIF(total_records, 0) * 100 FROM accuracy_check",
        "threshold": 99.0,
        "baseline": 97.5,
    },
    {
        "name": "Update Timeliness",
        "description": "Data freshness and update frequency",
        "template": "Data Timeliness",
        "query": "SELECT CASE WHEN avg_delay_seconds <= threshold_seconds THEN 100 ELSE 0 END FROM time_gaps",
        "threshold": 90.0,
        "baseline": 92.0,
    },
    {
        "name": "Cross-System Consistency",
        "description": "Agreement of values between front-office and back-office systems",
        "template": "Data Consistency",
        "query": "SELECT matching_records::float / NULLIF(total_records, 0) * 100 FROM reconciliation",
        "threshold": 98.0,
        "baseline": 94.0,
    },
]

COMMENT_USERS = ["user_123_steward", "user_456_engineer", "user_789_analyst", "user_101_architect"]

# A comment with at least this many reactions is trending
TRENDING_REACTION_COUNT = 3
# A comment longer than this earns the quality badge
QUALITY_COMMENT_LENGTH = 100


def _comments_for(product: DataProduct) -> List[Dict[str, str]]:
    return [
        {
            "author_name": "Data Steward",
            "content": (
                f"Great documentation for {product.name}. The schema is well-structured and clear, "
                f"and the ownership by {product.owner} is easy to find."
            ),
        },
        {
            "author_name": "Data Engineer",
            "content": f"The {product.update_frequency} update frequency works well for our use case.",
        },
        {
            "author_name": "Product Owner",
            "content": f"{product.sla} SLA is crucial for our downstream dependencies.",
        },
    ]


def _quality_series(rng: random.Random, baseline: float, days: int) -> List[float]:
    """Bounded random walk around a baseline, one value per day."""
    values = []
    value = baseline
    for _ in range(days):
        value = min(100.0, max(0.0, value + rng.uniform(-1.5, 1.6)))
        values.append(round(value, 2))
    return values


async def has_demo_data(db: AsyncSession) -> bool:
    return await data_product_service.count(db) > 0


async def reset_catalog(db: AsyncSession) -> None:
    """Delete all catalog rows. API usage records are kept."""
    for table in reversed(Base.metadata.sorted_tables):
        if table.name == ApiUsageRecord.__tablename__:
            continue
        await db.execute(delete(table))
    await db.commit()
    # Deleted rows may still sit in the identity map; ids can be reused on reseed
    db.expunge_all()
    logger.info("Catalog data deleted")


async def _seed_products(db: AsyncSession) -> List[DataProduct]:
    products = [DataProduct(**spec) for spec in DEMO_PRODUCTS]
    db.add_all(products)
    await db.commit()
    return products


async def _seed_metrics(
    db: AsyncSession,
    products: List[DataProduct],
    rng: random.Random,
    days: int,
    now: datetime,
) -> Dict[str, int]:
    templates = {spec["name"]: MetricTemplate(**spec) for spec in METRIC_TEMPLATES}
    db.add_all(templates.values())
    await db.flush()

    definitions = []
    for spec in GENERIC_DEFINITIONS:
        template = templates[spec["template"]]
        definition = MetricDefinition(
            data_product_id=None,
            template_id=template.id,
            name=spec["name"],
            description=spec["description"],
            type=template.type,
            query=spec["query"],
            parameters=template.parameters,
            threshold=spec["threshold"],
            version=1,
        )
        definitions.append((definition, spec["baseline"]))

    market_data = products[0]
    definitions.append((
        MetricDefinition(
            data_product_id=market_data.id,
            template_id=templates["Data Timeliness"].id,
            name="Price Feed Freshness",
            description="Share of price updates delivered within 15 minutes",
            type=MetricType.TIMELINESS,
            query="SELECT count(*) FILTER (WHERE delay < interval '15 minutes') * 100.0 / count(*) FROM price_updates",
            threshold=99.0,
            version=1,
        ),
        98.0,
    ))
    db.add_all([definition for definition, _ in definitions])
    await db.flush()

    db.add_all([
        MetricDefinitionVersion(
            metric_definition_id=definition.id,
            version=1,
            name=definition.name,
            description=definition.description,
            type=definition.type,
            query=definition.query,
            parameters=definition.parameters,
            threshold=definition.threshold,
            change_message="Initial version",
        )
        for definition, _ in definitions
    ])

    observations = 0
    start = now.replace(minute=0, second=0, microsecond=0) - timedelta(days=days - 1)
    for product in products:
        for definition, baseline in definitions:
            if definition.data_product_id not in (None, product.id):
                continue
            for offset, value in enumerate(_quality_series(rng, baseline, days)):
                db.add(QualityMetric(
                    data_product_id=product.id,
                    metric_definition_id=definition.id,
                    value=value,
                    observation_metadata={"source": "provisioning"},
                    timestamp=start + timedelta(days=offset),
                ))
                observations += 1

    await db.commit()
    return {"templates": len(templates), "definitions": len(definitions), "observations": observations}


async def _seed_lineage(db: AsyncSession, products: List[DataProduct]) -> int:
    """Explicit graph for the VaR report; the default chain for every other product."""
    by_name = {product.name: product for product in products}
    var_report = by_name["VaR Report Data Product"]

    inputs = []
    for name in ("Market Data", "Trade and Position Data", "Portfolio Risk Metrics"):
        inputs.append(await lineage_service.add_node(
            db, var_report.id, LineageNodeType.SOURCE, {"name": name, "dataProductId": by_name[name].id}
        ))
    calculation = await lineage_service.add_node(
        db, var_report.id, LineageNodeType.TRANSFORMATION, {"name": "VaR Calculation", "method": "historical simulation"}
    )
    report = await lineage_service.add_node(db, var_report.id, LineageNodeType.TARGET, {"name": var_report.name})

    for node in inputs:
        await lineage_service.add_edge(
            db, node.id, calculation.id, "Data transformation and integration", {"relationship": "data_flow"}
        )
    await lineage_service.add_edge(db, calculation.id, report.id, "Aggregate per portfolio", {"relationship": "data_flow"})
    await lineage_service.save_version(db, var_report.id, "Initial lineage", created_by="provisioning")

    graphs = 1
    for product in products:
        if product.id != var_report.id and await lineage_service.ensure_default_chain(db, product):
            graphs += 1
    return graphs


async def _seed_comments(db: AsyncSession, products: List[DataProduct], rng: random.Random) -> Dict[str, int]:
    counts = {"comments": 0, "reactions": 0, "badges": 0}
    for product in products:
        comments = [Comment(data_product_id=product.id, **spec) for spec in _comments_for(product)]
        db.add_all(comments)
        await db.commit()
        counts["comments"] += len(comments)

        for comment in comments:
            reaction_count = rng.randint(2, 4)
            users = rng.sample(COMMENT_USERS, reaction_count)
            for user in users:
                reaction_type = rng.choice(["like", "helpful", "insightful"])
                await reaction_service.add_reaction(db, comment.id, reaction_type, user)
            counts["reactions"] += reaction_count

            badges = []
            if reaction_count >= TRENDING_REACTION_COUNT:
                badges.append(CommentBadge(comment_id=comment.id, type=BadgeType.TRENDING))
            if len(comment.content) > QUALITY_COMMENT_LENGTH:
                badges.append(CommentBadge(comment_id=comment.id, type=BadgeType.QUALITY))
            if badges:
                db.add_all(badges)
                await db.commit()
                counts["badges"] += len(badges)
    return counts


async def seed_demo_data(
    db: AsyncSession,
    reset: bool = False,
    days: int = 30,
    seed: Optional[int] = 42,
    now: Optional[datetime] = None,
) -> Dict[str, int]:
    """
    Provision the demo catalog.

    Idempotent: does nothing when data products already exist, unless
    ``reset`` is set.

    Args:
        db: Database session
        reset: Delete existing catalog data first
        days: Days of quality history to generate
        seed: Random seed for generated values
        now: End of the generated history

    Returns:
        Number of rows provisioned per kind; empty when skipped
    """
    if reset:
        await reset_catalog(db)
    elif await has_demo_data(db):
        logger.info("Data products already exist, skipping provisioning")
        return {}

    rng = random.Random(seed)
    products = await _seed_products(db)
    counts: Dict[str, int] = {"products": len(products)}
    counts.update(await _seed_metrics(db, products, rng, days, now or utc_now()))
    counts["lineage_graphs"] = await _seed_lineage(db, products)
    counts.update(await _seed_comments(db, products, rng))

    logger.info("Provisioned demo catalog", extra={"provisioned": counts})
    return counts


async def _run(reset: bool, create_schema: bool, days: int) -> Dict[str, int]:
    if create_schema:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async with get_db_session() as db:
        counts = await seed_demo_data(db, reset=reset, days=days)
    await engine.dispose()
    return counts


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Provision demo data for the data catalog")
    parser.add_argument("--reset", action="store_true", help="delete existing catalog data first")
    parser.add_argument("--create-schema", action="store_true", help="create missing tables before seeding")
    parser.add_argument("--days", type=int, default=30, help="days of quality history to generate")
    args = parser.parse_args(argv)

    setup_logging()
    counts = asyncio.run(_run(args.reset, args.create_schema, args.days))
    if counts:
        logger.info(f"Provisioning complete: {counts}")
    else:
        logger.info("Nothing to provision")


if __name__ == "__main__":
    main()
