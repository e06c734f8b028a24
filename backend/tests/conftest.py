"""
Shared fixtures for the catalog test suite.

The application reads its settings at import time, so the environment is
pointed at a temporary SQLite database before anything from ``catalog`` is
imported. Tables are created and dropped around every test.
"""
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="catalog-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/catalog.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["LOG_FORMAT"] = "text"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Any, Dict, Optional  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

import catalog.models.database  # noqa: E402,F401
from catalog.core.database import AsyncSessionLocal, Base, engine  # noqa: E402
from catalog.core.security import create_access_token  # noqa: E402
from catalog.main import create_app  # noqa: E402
from catalog.models.database import Comment, DataProduct, MetricDefinition, MetricType  # noqa: E402


@pytest.fixture(autouse=True)
async def database():
    """Fresh schema for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db():
    """Database session for service-level tests."""
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
async def client(app):
    """Async HTTP client bound to the in-process app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def username() -> str:
    return "steward"


@pytest.fixture
def auth_headers(username: str) -> Dict[str, str]:
    token = create_access_token(username, display_name="Data Steward")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_product(db):
    """Insert a data product and return it."""

    async def _make(**overrides: Any) -> DataProduct:
        fields = {
            "name": "Market Data",
            "description": "Real-time and historical market data",
            "owner": "Market Data Team",
            "domain": "Market",
            "schema": {"type": "object", "properties": {"symbol": {"type": "string"}}},
            "tags": ["market-data", "real-time", "pricing"],
            "sla": "99.99% availability during market hours",
            "update_frequency": "Real-time",
        }
        fields.update(overrides)
        product = DataProduct(**fields)
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    return _make


@pytest.fixture
def make_definition(db):
    """Insert a metric definition and return it."""

    async def _make(
        data_product_id: Optional[int],
        name: str = "Record Completeness",
        metric_type: MetricType = MetricType.COMPLETENESS,
        threshold: Optional[float] = 95.0,
    ) -> MetricDefinition:
        definition = MetricDefinition(
            data_product_id=data_product_id,
            name=name,
            type=metric_type,
            query="SELECT 100",
            threshold=threshold,
            version=1,
        )
        db.add(definition)
        await db.commit()
        await db.refresh(definition)
        return definition

    return _make


@pytest.fixture
def make_comment(db):
    """Insert a comment and return it."""

    async def _make(data_product_id: int, author_name: str = "steward", content: str = "Looks good") -> Comment:
        comment = Comment(data_product_id=data_product_id, author_name=author_name, content=content)
        db.add(comment)
        await db.commit()
        await db.refresh(comment)
        return comment

    return _make
