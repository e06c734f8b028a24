"""
Tests for API usage tracking: the aggregation service and the recording middleware.
"""
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from catalog.core.exceptions import ValidationError
from catalog.models.database import ApiUsageRecord
from catalog.services.usage_tracker import is_successful_status, usage_tracker

NOW = datetime(2026, 10, 18, 12, 30, tzinfo=timezone.utc)


def _record(endpoint, status_code, timestamp, error_type=None, quota_used=1):
    return ApiUsageRecord(
        endpoint=endpoint,
        method="GET",
        status_code=status_code,
        error_type=error_type,
        quota_used=quota_used,
        is_successful=is_successful_status(status_code),
        timestamp=timestamp,
    )


async def _all_records(db):
    result = await db.execute(select(ApiUsageRecord).order_by(ApiUsageRecord.id))
    return list(result.scalars().all())


@pytest.mark.unit
class TestUsageStats:
    """Window, bucketing and summary arithmetic."""

    @pytest.fixture
    async def records(self, db):
        db.add_all([
            _record("/api/data-products", 200, datetime(2026, 10, 18, 11, 10, tzinfo=timezone.utc)),
            _record("/api/metadata/{id}", 404, datetime(2026, 10, 18, 9, 5, tzinfo=timezone.utc), "NotFound"),
            _record("/api/data-products", 200, datetime(2026, 10, 18, 9, 45, tzinfo=timezone.utc), quota_used=3),
            _record("/api/search", 500, datetime(2026, 10, 17, 6, 0, tzinfo=timezone.utc), "RuntimeError"),
        ])
        await db.commit()

    async def test_day_window(self, db, records):
        stats = await usage_tracker.get_usage_stats(db, "day", now=NOW)

        assert stats["summary"] == {
            "total_requests": 3,
            "successful_requests": 2,
            "total_quota_used": 5,
            "unique_errors": 1,
        }
        assert stats["hourly_usage"] == [
            {"hour": datetime(2026, 10, 18, 9, tzinfo=timezone.utc), "requests": 2, "successful": 1},
            {"hour": datetime(2026, 10, 18, 11, tzinfo=timezone.utc), "requests": 1, "successful": 1},
        ]

    async def test_week_window_includes_older_records(self, db, records):
        stats = await usage_tracker.get_usage_stats(db, "week", now=NOW)

        assert stats["summary"]["total_requests"] == 4
        assert stats["summary"]["unique_errors"] == 2
        hours = [bucket["hour"] for bucket in stats["hourly_usage"]]
        assert hours == sorted(hours)
        assert hours[0] == datetime(2026, 10, 17, 6, tzinfo=timezone.utc)

    async def test_successful_never_exceeds_total(self, db, records):
        stats = await usage_tracker.get_usage_stats(db, "month", now=NOW)

        assert stats["summary"]["successful_requests"] <= stats["summary"]["total_requests"]
        for bucket in stats["hourly_usage"]:
            assert bucket["successful"] <= bucket["requests"]

    async def test_empty_window(self, db):
        stats = await usage_tracker.get_usage_stats(db, "day", now=NOW)

        assert stats["summary"] == {
            "total_requests": 0,
            "successful_requests": 0,
            "total_quota_used": 0,
            "unique_errors": 0,
        }
        assert stats["hourly_usage"] == []

    async def test_invalid_timeframe(self, db):
        with pytest.raises(ValidationError):
            await usage_tracker.get_usage_stats(db, "year", now=NOW)

    @pytest.mark.parametrize("status_code, successful", [(200, True), (201, True), (302, False), (404, False)])
    def test_successful_status(self, status_code, successful):
        assert is_successful_status(status_code) is successful


@pytest.mark.unit
class TestUsageTrackingMiddleware:
    """One usage row per /api request."""

    async def test_records_successful_and_failed_requests(self, client, db):
        await client.get("/api/data-products")
        await client.get("/api/metadata/999")

        records = await _all_records(db)
        assert [(r.endpoint, r.status_code, r.is_successful) for r in records] == [
            ("/api/data-products", 200, True),
            ("/api/metadata/{id}", 404, False),
        ]
        assert records[0].error_type is None
        assert records[0].quota_used == 1
        assert records[1].error_type == "NotFound"
        assert records[1].usage_metadata["statusCode"] == 404
        assert "Request path: /api/metadata/999" in records[1].usage_metadata["debugInsights"]

    async def test_requests_outside_api_are_not_recorded(self, client, db):
        await client.get("/")

        assert await _all_records(db) == []

    async def test_usage_stats_endpoint(self, client):
        await client.get("/api/data-products")
        await client.get("/api/data-products")
        await client.get("/api/metadata/999")

        response = await client.get("/api/usage-stats", params={"timeframe": "day"})

        assert response.status_code == 200
        data = response.json()
        assert data["summary"] == {
            "totalRequests": 3,
            "successfulRequests": 2,
            "totalQuotaUsed": 3,
            "uniqueErrors": 1,
        }
        assert sum(bucket["requests"] for bucket in data["hourlyUsage"]) == 3

    async def test_invalid_timeframe_returns_400(self, client):
        response = await client.get("/api/usage-stats", params={"timeframe": "decade"})

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    async def test_unhandled_error_is_recorded_with_exception_name(self, app, db):
        @app.get("/api/explode")
        async def explode():
            raise RuntimeError("boom")

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/explode")

        assert response.status_code == 500
        assert response.json() == {"error": "InternalError", "detail": "Internal server error"}

        records = await _all_records(db)
        assert len(records) == 1
        assert records[0].status_code == 500
        assert records[0].error_type == "RuntimeError"

    async def test_recording_failure_does_not_fail_the_request(self, client, db, monkeypatch):
        async def failing_record(*args, **kwargs):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(usage_tracker, "record", failing_record)

        response = await client.get("/api/data-products")

        assert response.status_code == 200
        assert await _all_records(db) == []
