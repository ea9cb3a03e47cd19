"""
ArchLens Backend - Analysis Service Unit Tests
===============================================

What:  AnalysisService lookup, listing, dashboard aggregates, update, delete.
How:   Mock sessions, where each `execute` call is fed a prepared result object,
       plus one class that runs the real queries on a throwaway SQLite file.
"""

import pytest
import pytest_asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from archlens.database import Base
from archlens.exceptions import DatabaseError
from archlens.models.analysis import Analysis
from archlens.schemas.analysis import AnalysisQuery, AnalysisUpdate
from archlens.services.analysis_service import AnalysisService


def _scalar_result(value):
    result = MagicMock()
    result.scalar.return_value = value
    return result


def _rows_result(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


class TestGetAnalysisById:
    """Primary key lookup with custom-id fallback."""

    def setup_method(self):
        self.service = AnalysisService()

    @pytest.mark.asyncio
    async def test_found_by_primary_key(self, mock_db_session, sample_analysis):
        mock_db_session.get.return_value = sample_analysis

        result = await self.service.get_analysis_by_id(mock_db_session, sample_analysis.id)

        assert result.record_id == sample_analysis.id
        assert result.app_id == "APP-1042"
        assert result.file_name == "checkout-architecture.png"
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_falls_back_to_external_id(self, mock_db_session, sample_analysis):
        mock_db_session.get.return_value = None
        fallback = MagicMock()
        fallback.scalar_one_or_none.return_value = sample_analysis
        mock_db_session.execute.return_value = fallback

        result = await self.service.get_analysis_by_id(
            mock_db_session, "analysis-1765483803647"
        )

        assert result.external_id == "analysis-1765483803647"
        mock_db_session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_not_found_returns_none(self, mock_db_session):
        mock_db_session.get.return_value = None
        fallback = MagicMock()
        fallback.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = fallback

        assert await self.service.get_analysis_by_id(mock_db_session, "missing") is None

    @pytest.mark.asyncio
    async def test_query_failure_raises_database_error(self, mock_db_session):
        mock_db_session.get.side_effect = RuntimeError("connection reset")

        with pytest.raises(DatabaseError, match="Failed to fetch analysis from database"):
            await self.service.get_analysis_by_id(mock_db_session, "abc")

    @pytest.mark.asyncio
    async def test_wire_format_uses_mongo_style_keys(self, mock_db_session, sample_analysis):
        mock_db_session.get.return_value = sample_analysis

        result = await self.service.get_analysis_by_id(mock_db_session, sample_analysis.id)
        body = result.model_dump(mode="json", by_alias=True)

        assert body["_id"] == sample_analysis.id
        assert body["id"] == "analysis-1765483803647"
        assert body["appId"] == "APP-1042"
        assert body["componentName"] == "checkout-service"
        assert body["fileName"] == "checkout-architecture.png"
        assert body["estimatedSavingsUSD"] == 1200.0
        assert body["risks"][0]["severity"] == "high"


class TestListAnalyses:
    """Offset pagination and filter plumbing."""

    def setup_method(self):
        self.service = AnalysisService()

    @pytest.mark.asyncio
    async def test_empty_store(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=[_rows_result([]), _scalar_result(0)]
        )

        result = await self.service.list_analyses(mock_db_session, AnalysisQuery())

        assert result.analyses == []
        assert result.pagination.total_count == 0
        assert result.pagination.total_pages == 0
        assert result.pagination.has_next_page is False
        assert result.pagination.has_prev_page is False

    @pytest.mark.asyncio
    async def test_middle_page(self, mock_db_session, sample_analysis):
        mock_db_session.execute = AsyncMock(
            side_effect=[_rows_result([sample_analysis]), _scalar_result(45)]
        )

        result = await self.service.list_analyses(
            mock_db_session, AnalysisQuery(page=2, limit=20)
        )

        assert len(result.analyses) == 1
        pagination = result.pagination
        assert pagination.page == 2
        assert pagination.limit == 20
        assert pagination.total_count == 45
        assert pagination.total_pages == 3
        assert pagination.has_next_page is True
        assert pagination.has_prev_page is True

    @pytest.mark.asyncio
    async def test_last_page_has_no_next(self, mock_db_session, sample_analysis):
        mock_db_session.execute = AsyncMock(
            side_effect=[_rows_result([sample_analysis]), _scalar_result(41)]
        )

        result = await self.service.list_analyses(
            mock_db_session, AnalysisQuery(page=3, limit=20)
        )

        assert result.pagination.total_pages == 3
        assert result.pagination.has_next_page is False

    @pytest.mark.asyncio
    async def test_limit_is_capped(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=[_rows_result([]), _scalar_result(0)]
        )

        result = await self.service.list_analyses(
            mock_db_session, AnalysisQuery(limit=5000)
        )

        assert result.pagination.limit == 100

    @pytest.mark.asyncio
    async def test_filters_reach_the_query(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=[_rows_result([]), _scalar_result(0)]
        )

        await self.service.list_analyses(
            mock_db_session,
            AnalysisQuery(
                app_id="APP-1042",
                environment="production",
                date_from=datetime(2025, 1, 1, tzinfo=timezone.utc),
            ),
        )

        statement = mock_db_session.execute.await_args_list[0].args[0]
        sql = str(statement)
        assert "analyses.app_id" in sql
        assert "analyses.environment" in sql
        assert "analyses.timestamp >=" in sql

    @pytest.mark.asyncio
    async def test_failure_raises_database_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(DatabaseError, match="Failed to fetch analyses"):
            await self.service.list_analyses(mock_db_session, AnalysisQuery())


class TestDashboardStats:
    """Counts, averages and distributions over completed analyses."""

    def setup_method(self):
        self.service = AnalysisService()

    def _results(self, total, recent, averages, environments, risk_lists):
        avg_result = MagicMock()
        avg_result.one.return_value = averages
        env_result = MagicMock()
        env_result.all.return_value = environments
        return [
            _scalar_result(total),
            _scalar_result(recent),
            avg_result,
            env_result,
            _rows_result(risk_lists),
        ]

    @pytest.mark.asyncio
    async def test_aggregates(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=self._results(
                total=3,
                recent=2,
                averages=(80.0, 70.0, 65.5, 90.0),
                environments=[("production", 2), ("staging", 1)],
                risk_lists=[
                    [{"severity": "high"}, {"severity": "low"}],
                    [{"severity": "high"}],
                    None,
                ],
            )
        )

        stats = await self.service.get_dashboard_stats(mock_db_session)

        assert stats.total_analyses == 3
        assert stats.recent_analyses == 2
        assert stats.average_scores.avg_security == 80.0
        assert stats.average_scores.avg_resilience == 70.0
        assert stats.average_scores.avg_cost_efficiency == 65.5
        assert stats.average_scores.avg_compliance == 90.0
        assert [(b.key, b.count) for b in stats.environment_distribution] == [
            ("production", 2),
            ("staging", 1),
        ]
        assert [(b.key, b.count) for b in stats.risk_distribution] == [
            ("high", 2),
            ("low", 1),
        ]
        assert mock_db_session.execute.await_count == 5

    @pytest.mark.asyncio
    async def test_no_completed_analyses_gives_zero_averages(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=self._results(
                total=0,
                recent=0,
                averages=(None, None, None, None),
                environments=[],
                risk_lists=[],
            )
        )

        stats = await self.service.get_dashboard_stats(mock_db_session)

        assert stats.total_analyses == 0
        assert stats.average_scores.avg_security == 0
        assert stats.average_scores.avg_compliance == 0
        assert stats.environment_distribution == []
        assert stats.risk_distribution == []

    @pytest.mark.asyncio
    async def test_wire_format(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=self._results(
                total=1,
                recent=1,
                averages=(50.0, 50.0, 50.0, 50.0),
                environments=[(None, 1)],
                risk_lists=[[{"severity": "medium"}]],
            )
        )

        stats = await self.service.get_dashboard_stats(mock_db_session)
        body = stats.model_dump(mode="json", by_alias=True)

        assert set(body) == {
            "totalAnalyses",
            "recentAnalyses",
            "averageScores",
            "environmentDistribution",
            "riskDistribution",
            "timestamp",
        }
        assert set(body["averageScores"]) == {
            "avgSecurity",
            "avgResilience",
            "avgCostEfficiency",
            "avgCompliance",
        }
        assert body["environmentDistribution"] == [{"_id": None, "count": 1}]
        assert body["riskDistribution"] == [{"_id": "medium", "count": 1}]

    @pytest.mark.asyncio
    async def test_failure_raises_database_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=RuntimeError("timeout"))

        with pytest.raises(DatabaseError, match="Failed to fetch dashboard statistics"):
            await self.service.get_dashboard_stats(mock_db_session)


class TestUpdateAnalysis:

    def setup_method(self):
        self.service = AnalysisService()

    @pytest.mark.asyncio
    async def test_applies_only_sent_fields(self, mock_db_session, sample_analysis):
        mock_db_session.get.return_value = sample_analysis
        previous_updated_at = sample_analysis.updated_at

        updates = AnalysisUpdate.model_validate({"environment": "staging", "securityScore": 91})
        result = await self.service.update_analysis(
            mock_db_session, sample_analysis.id, updates
        )

        assert result.environment == "staging"
        assert result.security_score == 91
        assert result.app_id == "APP-1042"
        assert result.updated_at > previous_updated_at
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_returns_none(self, mock_db_session):
        mock_db_session.get.return_value = None

        result = await self.service.update_analysis(
            mock_db_session, "missing", AnalysisUpdate(environment="staging")
        )

        assert result is None
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_flush_failure_raises_database_error(self, mock_db_session, sample_analysis):
        mock_db_session.get.return_value = sample_analysis
        mock_db_session.flush.side_effect = RuntimeError("constraint violated")

        with pytest.raises(DatabaseError, match="Failed to update analysis"):
            await self.service.update_analysis(
                mock_db_session, sample_analysis.id, AnalysisUpdate(status="failed")
            )


class TestDeleteAnalysis:

    def setup_method(self):
        self.service = AnalysisService()

    @pytest.mark.asyncio
    async def test_existing_is_deleted(self, mock_db_session, sample_analysis):
        mock_db_session.get.return_value = sample_analysis

        assert await self.service.delete_analysis(mock_db_session, sample_analysis.id) is True
        mock_db_session.delete.assert_awaited_once_with(sample_analysis)

    @pytest.mark.asyncio
    async def test_missing_returns_false(self, mock_db_session):
        mock_db_session.get.return_value = None

        assert await self.service.delete_analysis(mock_db_session, "missing") is False
        mock_db_session.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure_raises_database_error(self, mock_db_session):
        mock_db_session.get.side_effect = RuntimeError("connection reset")

        with pytest.raises(DatabaseError, match="Failed to delete analysis"):
            await self.service.delete_analysis(mock_db_session, "abc")


# ══════════════════════════════════════════════════════════════════════════
# Real queries on SQLite
# ══════════════════════════════════════════════════════════════════════════


@pytest_asyncio.fixture
async def sqlite_session(tmp_path):
    """Session on a fresh SQLite file with the `analyses` table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/analyses.db")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


def _stored(**fields):
    now = datetime.now(timezone.utc)
    defaults = {
        "file_name": "diagram.png",
        "timestamp": now - timedelta(days=1),
        "created_at": now,
        "updated_at": now,
    }
    defaults.update(fields)
    return Analysis(**defaults)


class TestQueriesOnSqlite:
    """Dashboard and listing queries executed against SQLite."""

    def setup_method(self):
        self.service = AnalysisService()

    async def _seed(self, session):
        now = datetime.now(timezone.utc)
        session.add_all(
            [
                _stored(
                    id="a" * 24,
                    external_id="analysis-1",
                    environment="production",
                    timestamp=now - timedelta(days=1),
                    security_score=80,
                    risks=[{"severity": "high"}, {"severity": "low"}],
                ),
                _stored(
                    id="b" * 24,
                    environment="staging",
                    timestamp=now - timedelta(days=90),
                    security_score=60,
                    risks=[{"severity": "high"}],
                ),
                _stored(
                    id="c" * 24,
                    environment="production",
                    timestamp=now - timedelta(days=2),
                    security_score=70,
                    risks=[],
                ),
                # Not completed: excluded from every dashboard figure
                _stored(
                    id="d" * 24,
                    environment="production",
                    status="processing",
                    timestamp=now - timedelta(days=3),
                    security_score=10,
                    risks=[{"severity": "critical"}],
                ),
            ]
        )
        await session.commit()

    @pytest.mark.asyncio
    async def test_dashboard_stats(self, sqlite_session):
        await self._seed(sqlite_session)

        stats = await self.service.get_dashboard_stats(sqlite_session)
        body = stats.model_dump(mode="json", by_alias=True)

        assert body["totalAnalyses"] == 3
        assert body["recentAnalyses"] == 2
        assert body["averageScores"]["avgSecurity"] == pytest.approx(70.0)
        assert body["environmentDistribution"] == [
            {"_id": "production", "count": 2},
            {"_id": "staging", "count": 1},
        ]
        assert body["riskDistribution"] == [
            {"_id": "high", "count": 2},
            {"_id": "low", "count": 1},
        ]

    @pytest.mark.asyncio
    async def test_listing_newest_first_with_filter(self, sqlite_session):
        await self._seed(sqlite_session)

        result = await self.service.list_analyses(
            sqlite_session, AnalysisQuery(environment="production", limit=2)
        )

        assert [a.record_id for a in result.analyses] == ["a" * 24, "c" * 24]
        assert result.pagination.total_count == 3
        assert result.pagination.total_pages == 2
        assert result.pagination.has_next_page is True

    @pytest.mark.asyncio
    async def test_lookup_by_custom_id(self, sqlite_session):
        await self._seed(sqlite_session)

        result = await self.service.get_analysis_by_id(sqlite_session, "analysis-1")

        assert result.record_id == "a" * 24
