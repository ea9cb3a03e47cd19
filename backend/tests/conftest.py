"""
ArchLens Backend - Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   No real database: sessions are AsyncMocks and HTTP tests override the
       session dependency. Service methods are patched per test.

Fixtures:
    ├── mock_db_session:  AsyncSession stand-in
    ├── sample_analysis:  unsaved Analysis ORM row with every column set
    ├── sample_stats:     DashboardStats payload
    └── test_client:      HTTPX AsyncClient bound to the FastAPI app
"""

import os
import tempfile
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

# Settings are read when archlens.config is first imported, so the
# environment has to be in place before any archlens import below.
_test_dir = tempfile.mkdtemp(prefix="archlens_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_dir}/test.db"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from archlens.models.analysis import Analysis  # noqa: E402
from archlens.schemas.analysis import (  # noqa: E402
    AverageScores,
    DashboardStats,
    DistributionBucket,
)


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get(mock_db_session, sample_analysis):
            mock_db_session.get.return_value = sample_analysis
            result = await analysis_service.get_analysis_by_id(mock_db_session, "abc")
    """
    session = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.execute = AsyncMock()
    session.delete = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_analysis():
    """An Analysis row as the analysis pipeline would have stored it."""
    created = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
    return Analysis(
        id="65a4f0c2e13b4a0012ab34cd",
        external_id="analysis-1765483803647",
        timestamp=created,
        file_name="checkout-architecture.png",
        file_type="image",
        original_file=None,
        app_id="APP-1042",
        component_name="checkout-service",
        description="Checkout flow on AWS",
        environment="production",
        version="2.3.0",
        components=[{"id": "api-gw", "type": "gateway"}],
        connections=[{"from": "api-gw", "to": "orders"}],
        risks=[
            {
                "id": "risk-1",
                "title": "Single AZ database",
                "description": "Orders DB runs in one availability zone",
                "severity": "high",
                "category": "resiliency",
                "impact": "Outage on AZ failure",
                "recommendation": "Enable Multi-AZ",
                "components": ["orders-db"],
            }
        ],
        compliance_gaps=[],
        cost_issues=[],
        recommendations=[
            {
                "id": "rec-1",
                "issue": "Single AZ database",
                "fix": "Enable Multi-AZ",
                "impact": "high",
                "effort": "low",
                "priority": 1,
                "category": "resiliency",
            }
        ],
        resiliency_score=62.0,
        security_score=81.0,
        cost_efficiency_score=74.0,
        compliance_score=90.0,
        estimated_savings_usd=1200.0,
        summary="Mostly sound; database availability is the main gap.",
        architecture_description="API gateway in front of three services.",
        processing_time=12.4,
        llm_provider="openai",
        llm_model="gpt-4o",
        created_by="alice@example.com",
        tags=["aws", "checkout"],
        status="completed",
        similar_blueprints=[],
        created_at=created,
        updated_at=created,
    )


@pytest.fixture
def sample_stats():
    return DashboardStats(
        total_analyses=12,
        recent_analyses=4,
        average_scores=AverageScores(
            avg_security=78.5,
            avg_resilience=66.0,
            avg_cost_efficiency=71.25,
            avg_compliance=88.0,
        ),
        environment_distribution=[
            DistributionBucket(key="production", count=7),
            DistributionBucket(key="staging", count=5),
        ],
        risk_distribution=[
            DistributionBucket(key="high", count=9),
            DistributionBucket(key="low", count=2),
        ],
        timestamp=datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc),
    )


@pytest_asyncio.fixture
async def test_client(mock_db_session):
    """
    HTTPX AsyncClient wired to the app through ASGITransport.

    The database session dependency yields `mock_db_session`, so no request
    ever opens a real connection.
    """
    from archlens.database import get_db_session
    from archlens.main import app

    async def override_session():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
