"""
Tests for demo data provisioning.
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from catalog.models.database import (
    ApiUsageRecord,
    Comment,
    CommentReaction,
    DataProduct,
    LineageNode,
    MetricDefinition,
)
from catalog.provisioning import has_demo_data, seed_demo_data
from catalog.services.lineage import lineage_service
from catalog.services.quality_metrics import quality_metrics_service

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


async def _count(db, column):
    result = await db.execute(select(func.count(column)))
    return result.scalar_one()


async def _product(db, name):
    result = await db.execute(select(DataProduct).where(DataProduct.name == name))
    return result.scalar_one()


@pytest.mark.unit
class TestSeedDemoData:

    async def test_provisions_catalog(self, db):
        counts = await seed_demo_data(db, now=NOW)

        assert counts["products"] == 5
        assert counts["templates"] == 4
        assert counts["definitions"] == 5
        # four generic definitions for every product plus one product-specific definition
        assert counts["observations"] == 5 * 4 * 30 + 30
        assert counts["lineage_graphs"] == 5
        assert counts["comments"] == 15
        assert counts["badges"] >= 5

        assert await _count(db, DataProduct.id) == 5
        assert await _count(db, CommentReaction.id) == counts["reactions"]

    async def test_reaction_counters_match_reaction_rows(self, db):
        await seed_demo_data(db, now=NOW)

        result = await db.execute(
            select(func.sum(Comment.like_count + Comment.helpful_count + Comment.insightful_count))
        )
        assert result.scalar_one() == await _count(db, CommentReaction.id)

    async def test_has_demo_data(self, db):
        assert await has_demo_data(db) is False

        await seed_demo_data(db, now=NOW)

        assert await has_demo_data(db) is True

    async def test_second_run_is_skipped(self, db):
        await seed_demo_data(db, now=NOW)

        assert await seed_demo_data(db, now=NOW) == {}
        assert await _count(db, DataProduct.id) == 5

    async def test_reset_reseeds_and_keeps_usage(self, db):
        await seed_demo_data(db, now=NOW)
        db.add(ApiUsageRecord(endpoint="/api/search", status_code=200, is_successful=True))
        await db.commit()

        counts = await seed_demo_data(db, reset=True, now=NOW)

        assert counts["products"] == 5
        assert await _count(db, DataProduct.id) == 5
        assert await _count(db, MetricDefinition.id) == 5
        assert await _count(db, ApiUsageRecord.id) == 1

    async def test_lineage(self, db):
        await seed_demo_data(db, now=NOW)
        var_report = await _product(db, "VaR Report Data Product")
        reference = await _product(db, "Reference Data")

        var_graph = await lineage_service.get_graph(db, var_report.id)
        reference_graph = await lineage_service.get_graph(db, reference.id)

        assert len(var_graph["nodes"]) == 5
        assert len(var_graph["links"]) == 4
        assert [node["label"] for node in reference_graph["nodes"]] == [
            "Source System", "Data Processing", "Reference Data"
        ]
        assert await _count(db, LineageNode.id) == 5 + 4 * 3

    async def test_quality_summary_for_seeded_product(self, db):
        await seed_demo_data(db, days=10, now=NOW)
        market = await _product(db, "Market Data")

        summary = await quality_metrics_service.get_quality_summary(db, market.id, days=365, now=NOW)

        assert len(summary["current"]["metrics"]) == 5
        assert len(summary["history"]) == 5 * 10
        for metric_type in ("completeness", "accuracy", "timeliness", "consistency"):
            assert 0 < summary["current"][metric_type] <= 100
