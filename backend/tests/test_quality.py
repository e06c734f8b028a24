"""
Tests for quality summaries, observations, metric definitions and their versions.
"""
from datetime import timedelta

import pytest

from catalog.core.database import utc_now
from catalog.core.exceptions import NotFoundError, ValidationError
from catalog.models.database import MetricTemplate, MetricType, QualityMetric
from catalog.services.metric_definitions import metric_definition_service
from catalog.services.quality_metrics import quality_metrics_service


@pytest.mark.unit
class TestQualitySummary:
    """Current values, history and per-metric trend."""

    async def test_product_without_metrics(self, client, make_product):
        product = await make_product()

        response = await client.get(f"/api/quality-metrics/{product.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["current"] == {
            "completeness": 0,
            "accuracy": 0,
            "timeliness": 0,
            "consistency": 0,
            "metrics": [],
        }
        assert data["history"] == []
        assert data["summary"] == []

    async def test_definition_round_trips_into_current_metrics(self, client, make_product):
        product = await make_product()

        created = await client.post(
            "/api/metric-definitions",
            json={
                "dataProductId": product.id,
                "name": "Price Completeness",
                "query": "SELECT count(price) * 100.0 / count(*) FROM prices",
                "threshold": 95.5,
            },
        )
        assert created.status_code == 201
        assert created.json()["type"] == "completeness"
        assert created.json()["version"] == 1

        data = (await client.get(f"/api/quality-metrics/{product.id}")).json()

        [metric] = data["current"]["metrics"]
        assert metric["metricDefinitionId"] == created.json()["id"]
        assert metric["name"] == "Price Completeness"
        assert metric["query"] == "SELECT count(price) * 100.0 / count(*) FROM prices"
        assert metric["threshold"] == 95.5
        assert metric["value"] is None

    async def test_observations_drive_current_history_and_summary(self, client, make_product, make_definition):
        product = await make_product()
        definition = await make_definition(product.id)

        for value in (90.0, 95.0):
            response = await client.post(
                f"/api/quality-metrics/{product.id}",
                json={"metricDefinitionId": definition.id, "value": value},
            )
            assert response.status_code == 201

        data = (await client.get(f"/api/quality-metrics/{product.id}")).json()

        assert data["current"]["completeness"] == 95.0
        assert data["current"]["accuracy"] == 0
        assert [point["value"] for point in data["history"]] == [90.0, 95.0]
        assert data["summary"] == [{
            "metricDefinitionId": definition.id,
            "latest": 95.0,
            "previous": 90.0,
            "change": 5.0,
            "average": 92.5,
        }]

    async def test_history_window(self, db, make_product, make_definition):
        product = await make_product()
        definition = await make_definition(product.id, metric_type=MetricType.ACCURACY)
        now = utc_now()
        db.add(QualityMetric(
            data_product_id=product.id, metric_definition_id=definition.id,
            value=80.0, timestamp=now - timedelta(days=40),
        ))
        await db.commit()

        summary = await quality_metrics_service.get_quality_summary(db, product.id, days=30, now=now)

        assert summary["history"] == []
        assert summary["current"]["accuracy"] == 80.0
        assert summary["summary"][0]["latest"] is None

        wider = await quality_metrics_service.get_quality_summary(db, product.id, days=60, now=now)
        assert len(wider["history"]) == 1

    async def test_generic_definitions_apply_only_when_observed(self, db, make_product, make_definition):
        product = await make_product()
        observed = await make_definition(None, name="Record Completeness")
        await make_definition(None, name="Never Measured", metric_type=MetricType.CONSISTENCY)
        await quality_metrics_service.record_observation(db, product.id, observed.id, 88.0)

        definitions = await quality_metrics_service.applicable_definitions(db, product.id)

        assert [definition.name for definition in definitions] == ["Record Completeness"]

    async def test_current_averages_latest_value_per_definition(self, db, make_product, make_definition):
        product = await make_product()
        first = await make_definition(product.id, name="Null Rate")
        second = await make_definition(product.id, name="Row Coverage")
        base = utc_now() - timedelta(hours=5)
        for definition, values in ((first, (50.0, 90.0)), (second, (70.0,))):
            for offset, value in enumerate(values):
                await quality_metrics_service.record_observation(
                    db, product.id, definition.id, value, timestamp=base + timedelta(hours=offset)
                )

        summary = await quality_metrics_service.get_quality_summary(db, product.id)

        assert summary["current"]["completeness"] == 80.0

    async def test_unknown_product_returns_404(self, client):
        response = await client.get("/api/quality-metrics/31337")

        assert response.status_code == 404

    async def test_days_out_of_range_returns_400(self, client, make_product):
        product = await make_product()

        response = await client.get(f"/api/quality-metrics/{product.id}", params={"days": 0})

        assert response.status_code == 400


@pytest.mark.unit
class TestRecordObservation:

    async def test_definition_of_another_product_is_rejected(self, db, make_product, make_definition):
        product = await make_product()
        other = await make_product(name="Trade Data", tags=["trades"])
        definition = await make_definition(other.id)

        with pytest.raises(ValidationError):
            await quality_metrics_service.record_observation(db, product.id, definition.id, 90.0)

    async def test_unknown_definition(self, db, make_product):
        product = await make_product()

        with pytest.raises(NotFoundError):
            await quality_metrics_service.record_observation(db, product.id, 404, 90.0)

    async def test_non_finite_value_is_rejected(self, db, make_product, make_definition):
        product = await make_product()
        definition = await make_definition(product.id)

        with pytest.raises(ValidationError):
            await quality_metrics_service.record_observation(db, product.id, definition.id, float("inf"))


@pytest.mark.unit
class TestMetricDefinitionValidation:

    async def test_missing_name_returns_400(self, client, make_product):
        product = await make_product()

        response = await client.post(
            "/api/metric-definitions", json={"dataProductId": product.id, "query": "SELECT 1"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"
        assert "name" in response.json()["detail"]

    async def test_blank_query_returns_400(self, client, make_product):
        product = await make_product()

        response = await client.post(
            "/api/metric-definitions",
            json={"dataProductId": product.id, "name": "Null Rate", "query": "   "},
        )

        assert response.status_code == 400

    async def test_unknown_product_returns_404(self, client):
        response = await client.post(
            "/api/metric-definitions",
            json={"dataProductId": 999, "name": "Null Rate", "query": "SELECT 1"},
        )

        assert response.status_code == 404

    async def test_list_filters_by_product(self, client, make_product, make_definition):
        product = await make_product()
        other = await make_product(name="Trade Data", tags=["trades"])
        mine = await make_definition(product.id)
        await make_definition(other.id)

        response = await client.get("/api/metric-definitions", params={"dataProductId": product.id})

        assert [definition["id"] for definition in response.json()] == [mine.id]


@pytest.mark.unit
class TestMetricDefinitionVersions:
    """Every change appends a version; rollback restores one."""

    @pytest.fixture
    async def definition(self, db, make_product):
        product = await make_product()
        return await metric_definition_service.create_definition(
            db, product.id, name="Null Rate", query="SELECT 1", threshold=90.0
        )

    async def test_update_appends_version(self, client, definition):
        response = await client.put(
            f"/api/metric-definitions/{definition.id}",
            json={"threshold": 97.0, "changeMessage": "Tighter threshold"},
        )

        assert response.status_code == 200
        assert response.json()["threshold"] == 97.0
        assert response.json()["version"] == 2
        assert response.json()["name"] == "Null Rate"

        history = (await client.get(f"/api/metric-definitions/{definition.id}/history")).json()
        assert [(v["version"], v["threshold"], v["changeMessage"]) for v in history] == [
            (2, 97.0, "Tighter threshold"),
            (1, 90.0, "Initial version"),
        ]

    async def test_rollback_restores_fields_as_new_version(self, client, definition):
        await client.put(f"/api/metric-definitions/{definition.id}", json={"name": "Renamed", "threshold": 50.0})
        history = (await client.get(f"/api/metric-definitions/{definition.id}/history")).json()
        first_version_id = history[-1]["id"]

        response = await client.post(f"/api/metric-definitions/{definition.id}/rollback/{first_version_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Rolled back to version 1"
        assert data["definition"]["name"] == "Null Rate"
        assert data["definition"]["threshold"] == 90.0
        assert data["definition"]["version"] == 3

        history = (await client.get(f"/api/metric-definitions/{definition.id}/history")).json()
        assert [v["version"] for v in history] == [3, 2, 1]
        assert history[0]["changeMessage"] == "Rolled back to version 1"

    async def test_rollback_to_foreign_version_returns_404(self, client, db, definition, make_product):
        other_product = await make_product(name="Trade Data", tags=["trades"])
        other = await metric_definition_service.create_definition(
            db, other_product.id, name="Fill Rate", query="SELECT 2"
        )
        foreign_version = (await metric_definition_service.get_history(db, other.id))[0]

        response = await client.post(
            f"/api/metric-definitions/{definition.id}/rollback/{foreign_version.id}"
        )

        assert response.status_code == 404

    async def test_update_rejects_unknown_fields(self, db, definition):
        with pytest.raises(ValidationError):
            await metric_definition_service.update_definition(db, definition.id, {"owner": "someone"})

    async def test_blank_name_update_returns_400(self, client, definition):
        response = await client.put(f"/api/metric-definitions/{definition.id}", json={"name": " "})

        assert response.status_code == 400

    async def test_unknown_definition_returns_404(self, client):
        response = await client.get("/api/metric-definitions/555/history")

        assert response.status_code == 404


@pytest.mark.unit
class TestMetricTemplates:

    async def test_lists_templates(self, client, db):
        db.add(MetricTemplate(
            name="Data Completeness",
            type=MetricType.COMPLETENESS,
            default_formula="SELECT count(*) FILTER (WHERE {column} IS NOT NULL) * 100.0 / count(*) FROM {table}",
            parameters={"column": "string", "table": "string"},
            tags=["completeness"],
        ))
        await db.commit()

        response = await client.get("/api/metric-templates")

        assert response.status_code == 200
        [template] = response.json()
        assert template["name"] == "Data Completeness"
        assert template["type"] == "completeness"
        assert template["tags"] == ["completeness"]
