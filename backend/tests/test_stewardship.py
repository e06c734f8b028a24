"""
Tests for stewardship scoring and the /api/stewardship/metrics endpoint.
"""
from datetime import timedelta

import pytest

from catalog.core.database import utc_now
from catalog.models.database import BadgeType, CommentBadge, CommentReaction, QualityMetric, ReactionType
from catalog.services.stewardship import (
    calculate_level,
    describe_comment,
    reputation_score,
    stewardship_service,
)


@pytest.mark.unit
class TestReputationScore:
    """Pure scoring helpers."""

    def test_weights(self):
        assert reputation_score(1, 0, 0, 0) == 10
        assert reputation_score(0, 1, 0, 0) == 20
        assert reputation_score(0, 0, 1, 0) == 15
        assert reputation_score(0, 0, 0, 1) == 25
        assert reputation_score(2, 1, 3, 2) == 20 + 20 + 45 + 50

    def test_score_never_decreases_when_an_input_grows(self):
        base = (3, 2, 1, 4)
        for position in range(4):
            grown = list(base)
            grown[position] += 1
            assert reputation_score(*grown) > reputation_score(*base)

    @pytest.mark.parametrize(
        "score, level",
        [(0, 1), (99, 1), (100, 2), (199, 2), (250, 3)],
    )
    def test_level_boundaries(self, score, level):
        assert calculate_level(score) == level

    def test_describe_comment_truncates_long_content(self):
        content = "x" * 60
        assert describe_comment(content) == f'Added a comment: "{"x" * 50}..."'
        assert describe_comment("short") == 'Added a comment: "short"'


@pytest.mark.unit
class TestStewardshipMetrics:
    """Aggregation over comments, badges, products and observations."""

    async def test_metrics_for_active_steward(self, db, make_product, make_comment, make_definition, username):
        owned = await make_product(owner=username)
        await make_product(name="Reference Data", owner=username, tags=["reference"])
        await make_product(name="Trade Data", owner="someone-else", tags=["trades"])

        first = await make_comment(owned.id, author_name=username, content="Schema is clear")
        second = await make_comment(owned.id, author_name=username, content="y" * 80)
        await make_comment(owned.id, author_name="someone-else", content="Not mine")

        db.add(CommentReaction(comment_id=first.id, type=ReactionType.HELPFUL, user_identifier="analyst"))
        db.add(CommentReaction(comment_id=second.id, type=ReactionType.LIKE, user_identifier="analyst"))
        db.add(CommentBadge(comment_id=first.id, type=BadgeType.TRENDING))

        definition = await make_definition(owned.id)
        base = (utc_now() - timedelta(days=2)).replace(hour=10, minute=0, second=0, microsecond=0)
        db.add(QualityMetric(
            data_product_id=owned.id, metric_definition_id=definition.id, value=90.0, timestamp=base
        ))
        db.add(QualityMetric(
            data_product_id=owned.id, metric_definition_id=definition.id, value=94.0,
            timestamp=base + timedelta(hours=1),
        ))
        await db.commit()

        metrics = await stewardship_service.get_metrics(db, username)

        assert metrics["total_comments"] == 2
        assert metrics["helpful_comments"] == 1
        assert metrics["data_products_managed"] == 2
        assert metrics["quality_improvements"] == 1
        assert metrics["reputation_score"] == 10 + 20 + 15 + 50
        assert metrics["level"] == 1

        assert [badge["name"] for badge in metrics["badges"]] == ["Trending Badge"]
        assert metrics["badges"][0]["description"] == "Created highly engaging discussions about data products"

        assert len(metrics["recent_activities"]) == 2
        assert all(activity["impact"] == 10 for activity in metrics["recent_activities"])
        assert {activity["description"] for activity in metrics["recent_activities"]} == {
            'Added a comment: "Schema is clear"',
            f'Added a comment: "{"y" * 50}..."',
        }

        assert metrics["quality_trend"] == [{"date": base.date().isoformat(), "score": 92.0}]

    async def test_declining_values_are_not_improvements(self, db, make_product, make_definition):
        product = await make_product()
        definition = await make_definition(product.id)
        base = utc_now() - timedelta(days=3)
        for offset, value in enumerate((97.0, 95.0, 95.0)):
            db.add(QualityMetric(
                data_product_id=product.id, metric_definition_id=definition.id,
                value=value, timestamp=base + timedelta(hours=offset),
            ))
        await db.commit()

        assert await stewardship_service.count_quality_improvements(db) == 0

    async def test_trend_ignores_observations_older_than_thirty_days(self, db, make_product, make_definition):
        product = await make_product()
        definition = await make_definition(product.id)
        db.add(QualityMetric(
            data_product_id=product.id, metric_definition_id=definition.id,
            value=50.0, timestamp=utc_now() - timedelta(days=45),
        ))
        await db.commit()

        assert await stewardship_service.get_quality_trend(db) == []


@pytest.mark.unit
class TestStewardshipEndpoint:

    async def test_requires_authentication(self, client):
        response = await client.get("/api/stewardship/metrics")

        assert response.status_code == 401
        assert response.json()["error"] == "AuthenticationError"

    async def test_new_user_starts_at_level_one(self, client, auth_headers):
        response = await client.get("/api/stewardship/metrics", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["reputationScore"] == 0
        assert data["level"] == 1
        assert data["totalComments"] == 0
        assert data["badges"] == []
        assert data["recentActivities"] == []
        assert data["qualityTrend"] == []
