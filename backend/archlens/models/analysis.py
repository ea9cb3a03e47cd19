"""
ArchLens Backend - Analysis SQLAlchemy Model
=============================================

What:  ORM model for the `analyses` table.
Who:   Queried by AnalysisService; read by Alembic for migrations.

Table Design:
    - id: 24 hex characters, the same shape as the ids the frontend already
      links to (`/analysis/<id>`). Exposed on the wire as `_id`.
    - external_id: optional human-readable id such as "analysis-1765483803647".
      Lookups by id fall back to this column. Exposed on the wire as `id`.
    - Nested results (components, risks, recommendations, ...) are JSON
      columns; this service passes them through untouched.
    - Scores are 0-100 floats that default to 0.

Indexes match the listing and dashboard filters:
    timestamp DESC, app_id, environment, status, created_by.
"""

import secrets
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from archlens.database import Base


def generate_analysis_id() -> str:
    """24 lowercase hex characters (12 random bytes)."""
    return secrets.token_hex(12)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Analysis(Base):
    """
    A stored architecture analysis.

    Lifecycle (owned by the analysis pipeline, not by this service):
        processing → completed | failed

    This service reads, updates and deletes rows; it never creates them
    outside of migrations and tests.
    """

    __tablename__ = "analyses"

    # ── Identity ──────────────────────────────────────────────────────────
    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=generate_analysis_id,
        comment="Primary identifier, 24 hex chars",
    )
    external_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        unique=True,
        nullable=True,
        comment="Optional custom id, e.g. analysis-1765483803647",
    )

    # ── Source File ───────────────────────────────────────────────────────
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="image",
        comment="image, iac or text",
    )
    original_file: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # ── Application Metadata ──────────────────────────────────────────────
    app_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    component_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    environment: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    version: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # ── Analysis Results ──────────────────────────────────────────────────
    components: Mapped[List[Any]] = mapped_column(JSON, nullable=False, default=list)
    connections: Mapped[List[Any]] = mapped_column(JSON, nullable=False, default=list)
    risks: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    compliance_gaps: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    cost_issues: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    recommendations: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )

    # ── Scores (0-100) ────────────────────────────────────────────────────
    resiliency_score: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    security_score: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    cost_efficiency_score: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    compliance_score: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    estimated_savings_usd: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    architecture_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    processing_time: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    llm_provider: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    llm_model: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    # ── Bookkeeping ───────────────────────────────────────────────────────
    created_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="completed",
        comment="completed, processing or failed",
    )
    similar_blueprints: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        Index("idx_analyses_timestamp", timestamp.desc()),
        Index("idx_analyses_app_id", app_id),
        Index("idx_analyses_environment", environment),
        Index("idx_analyses_status", status),
        Index("idx_analyses_created_by", created_by),
    )

    def __repr__(self) -> str:
        return (
            f"<Analysis(id={self.id}, app_id='{self.app_id}', "
            f"status='{self.status}')>"
        )
