"""
ArchLens Backend - Analysis Service
====================================

What:  Data access for stored analyses: lookup, listing, dashboard
       aggregates, update and delete.
Why:   Keeps SQLAlchemy out of the routes. Routes decide status codes; this
       module decides what "not found" and "failed" mean for the store.
How:   Stateless methods that take the request's AsyncSession.

Not-found contract:
    get_analysis_by_id / update_analysis → None
    delete_analysis                      → False
    Routes turn these into 404s with their own wording.

Failure contract:
    Any driver/ORM error is logged with its type and re-raised as
    DatabaseError carrying a short operation summary.
"""

import logging
import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from archlens.config import settings
from archlens.exceptions import DatabaseError
from archlens.models.analysis import Analysis
from archlens.schemas.analysis import (
    AnalysisListResponse,
    AnalysisQuery,
    AnalysisResponse,
    AnalysisUpdate,
    AverageScores,
    DashboardStats,
    DistributionBucket,
    PaginationInfo,
)

logger = logging.getLogger(__name__)

COMPLETED = "completed"


class AnalysisService:
    """
    Operations over the `analyses` table.

    Responsibilities:
        - get_analysis_by_id(): primary key lookup with custom-id fallback
        - list_analyses(): filtered, offset-paginated listing
        - get_dashboard_stats(): counts, averages and distributions
        - update_analysis(): partial update
        - delete_analysis(): delete by primary key
    """

    async def get_analysis_by_id(
        self, db: AsyncSession, analysis_id: str
    ) -> Optional[AnalysisResponse]:
        """
        Retrieve a single analysis.

        Lookup order:
            1. Primary key (`_id` on the wire)
            2. Custom id column (`id` on the wire, e.g. "analysis-1765483803647")

        Returns:
            AnalysisResponse, or None when neither lookup matches.

        Raises:
            DatabaseError: Query execution failed.
        """
        try:
            analysis = await self._find(db, analysis_id)
        except Exception as e:
            logger.error("Database error fetching analysis %s: %s", analysis_id, str(e))
            raise DatabaseError(
                message="Failed to fetch analysis from database",
                context={"analysis_id": analysis_id, "error_type": type(e).__name__},
            ) from e

        if analysis is None:
            return None
        return AnalysisResponse.from_model(analysis)

    async def _find(self, db: AsyncSession, analysis_id: str) -> Optional[Analysis]:
        analysis = await db.get(Analysis, analysis_id)
        if analysis is None:
            result = await db.execute(
                select(Analysis).where(Analysis.external_id == analysis_id)
            )
            analysis = result.scalar_one_or_none()
        return analysis

    async def list_analyses(
        self, db: AsyncSession, query: AnalysisQuery
    ) -> AnalysisListResponse:
        """
        List analyses newest first with offset pagination.

        Filters (all optional, combined with AND):
            app_id, environment, status: exact match
            date_from / date_to: inclusive bounds on `timestamp`

        `limit` is capped at settings.max_page_size.

        Raises:
            DatabaseError: Either query failed.
        """
        limit = min(query.limit, settings.max_page_size)
        page = query.page

        conditions = []
        if query.app_id:
            conditions.append(Analysis.app_id == query.app_id)
        if query.environment:
            conditions.append(Analysis.environment == query.environment)
        if query.status:
            conditions.append(Analysis.status == query.status)
        if query.date_from:
            conditions.append(Analysis.timestamp >= query.date_from)
        if query.date_to:
            conditions.append(Analysis.timestamp <= query.date_to)

        try:
            result = await db.execute(
                select(Analysis)
                .where(*conditions)
                .order_by(desc(Analysis.timestamp))
                .offset((page - 1) * limit)
                .limit(limit)
            )
            rows = list(result.scalars().all())

            count_result = await db.execute(
                select(func.count(Analysis.id)).where(*conditions)
            )
            total_count = count_result.scalar() or 0
        except Exception as e:
            logger.error("Database error listing analyses: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch analyses from database",
                context={"error_type": type(e).__name__},
            ) from e

        total_pages = math.ceil(total_count / limit)
        return AnalysisListResponse(
            analyses=[AnalysisResponse.from_model(row) for row in rows],
            pagination=PaginationInfo(
                page=page,
                limit=limit,
                total_count=total_count,
                total_pages=total_pages,
                has_next_page=page < total_pages,
                has_prev_page=page > 1,
            ),
        )

    async def get_dashboard_stats(self, db: AsyncSession) -> DashboardStats:
        """
        Aggregate statistics over completed analyses.

        Queries (run sequentially on the one session):
            1. COUNT of completed analyses
            2. COUNT of those within the last `recent_analysis_days`
            3. AVG of the four scores
            4. COUNT grouped by environment
            5. risks column, tallied by severity in Python

        Risks are JSON lists, so the severity tally happens here rather than
        in dialect-specific JSON SQL.

        Raises:
            DatabaseError: Any of the queries failed.
        """
        completed = Analysis.status == COMPLETED
        now = datetime.now(timezone.utc)
        since = now - timedelta(days=settings.recent_analysis_days)

        try:
            total_result = await db.execute(
                select(func.count(Analysis.id)).where(completed)
            )
            total_analyses = total_result.scalar() or 0

            recent_result = await db.execute(
                select(func.count(Analysis.id)).where(completed, Analysis.timestamp >= since)
            )
            recent_analyses = recent_result.scalar() or 0

            avg_result = await db.execute(
                select(
                    func.avg(Analysis.security_score),
                    func.avg(Analysis.resiliency_score),
                    func.avg(Analysis.cost_efficiency_score),
                    func.avg(Analysis.compliance_score),
                ).where(completed)
            )
            avg_security, avg_resilience, avg_cost, avg_compliance = avg_result.one()

            count_col = func.count(Analysis.id).label("count")
            env_result = await db.execute(
                select(Analysis.environment, count_col)
                .where(completed)
                .group_by(Analysis.environment)
                .order_by(desc(count_col))
            )
            environment_distribution = [
                DistributionBucket(key=environment, count=count)
                for environment, count in env_result.all()
            ]

            risks_result = await db.execute(select(Analysis.risks).where(completed))
            risk_distribution = self._tally_severities(risks_result.scalars().all())
        except Exception as e:
            logger.error("Error fetching dashboard stats: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch dashboard statistics",
                context={"error_type": type(e).__name__},
            ) from e

        stats = DashboardStats(
            total_analyses=total_analyses,
            recent_analyses=recent_analyses,
            average_scores=AverageScores(
                avg_security=float(avg_security or 0),
                avg_resilience=float(avg_resilience or 0),
                avg_cost_efficiency=float(avg_cost or 0),
                avg_compliance=float(avg_compliance or 0),
            ),
            environment_distribution=environment_distribution,
            risk_distribution=risk_distribution,
            timestamp=now,
        )
        logger.debug("Dashboard stats: %s", stats)
        return stats

    @staticmethod
    def _tally_severities(risk_lists) -> List[DistributionBucket]:
        """Count risks by severity across analyses, largest group first."""
        counts = Counter(
            risk.get("severity")
            for risks in risk_lists
            for risk in (risks or [])
            if isinstance(risk, dict)
        )
        return [
            DistributionBucket(key=severity, count=count)
            for severity, count in counts.most_common()
        ]

    async def update_analysis(
        self, db: AsyncSession, analysis_id: str, updates: AnalysisUpdate
    ) -> Optional[AnalysisResponse]:
        """
        Apply a partial update to the analysis with this primary key.

        Only fields the client actually sent are written; `updated_at` is
        refreshed on every successful call.

        Returns:
            The updated AnalysisResponse, or None when no row matches.

        Raises:
            DatabaseError: Lookup or flush failed.
        """
        try:
            analysis = await db.get(Analysis, analysis_id)
            if analysis is None:
                return None

            for field, value in updates.model_dump(exclude_unset=True).items():
                setattr(analysis, field, value)
            analysis.updated_at = datetime.now(timezone.utc)
            await db.flush()
        except Exception as e:
            logger.error("Error updating analysis %s: %s", analysis_id, str(e))
            raise DatabaseError(
                message="Failed to update analysis",
                context={"analysis_id": analysis_id, "error_type": type(e).__name__},
            ) from e

        logger.info("Analysis %s updated", analysis_id)
        return AnalysisResponse.from_model(analysis)

    async def delete_analysis(self, db: AsyncSession, analysis_id: str) -> bool:
        """
        Delete the analysis with this primary key.

        Returns:
            True if a row was deleted, False if none matched.

        Raises:
            DatabaseError: Lookup or delete failed.
        """
        try:
            analysis = await db.get(Analysis, analysis_id)
            if analysis is None:
                return False
            await db.delete(analysis)
            await db.flush()
        except Exception as e:
            logger.error("Error deleting analysis %s: %s", analysis_id, str(e))
            raise DatabaseError(
                message="Failed to delete analysis",
                context={"analysis_id": analysis_id, "error_type": type(e).__name__},
            ) from e

        logger.info("Analysis %s deleted", analysis_id)
        return True


analysis_service = AnalysisService()
