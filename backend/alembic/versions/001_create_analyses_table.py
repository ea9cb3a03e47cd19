"""Create analyses table

Revision ID: 001
Revises: None
Create Date: 2025-12-11 00:00:00.000000+00:00

What:  Creates the `analyses` table read by the ArchLens API.
How:   Portable column types (JSON, DateTime with timezone) so the same
       migration runs on PostgreSQL and on SQLite in development.

Rollback: downgrade() drops the table and all analysis data.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the analyses table with its lookup and filter indexes."""
    op.create_table(
        "analyses",
        sa.Column("id", sa.String(64), nullable=False, comment="Primary identifier, 24 hex chars"),
        sa.Column(
            "external_id",
            sa.String(64),
            nullable=True,
            comment="Optional custom id, e.g. analysis-1765483803647",
        ),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_type", sa.String(20), nullable=False, comment="image, iac or text"),
        sa.Column("original_file", sa.JSON(), nullable=True),

        sa.Column("app_id", sa.String(255), nullable=True),
        sa.Column("component_name", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("environment", sa.String(100), nullable=True),
        sa.Column("version", sa.String(50), nullable=True),

        sa.Column("components", sa.JSON(), nullable=False),
        sa.Column("connections", sa.JSON(), nullable=False),
        sa.Column("risks", sa.JSON(), nullable=False),
        sa.Column("compliance_gaps", sa.JSON(), nullable=False),
        sa.Column("cost_issues", sa.JSON(), nullable=False),
        sa.Column("recommendations", sa.JSON(), nullable=False),

        sa.Column("resiliency_score", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("security_score", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("cost_efficiency_score", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("compliance_score", sa.Float(), nullable=False, server_default=sa.text("0")),

        sa.Column("estimated_savings_usd", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("architecture_description", sa.Text(), nullable=False),
        sa.Column("processing_time", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("llm_provider", sa.String(100), nullable=False),
        sa.Column("llm_model", sa.String(100), nullable=False),

        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'completed'"),
            comment="completed, processing or failed",
        ),
        sa.Column("similar_blueprints", sa.JSON(), nullable=False),

        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),

        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("external_id", name="uq_analyses_external_id"),
    )

    op.create_index("idx_analyses_timestamp", "analyses", [sa.text("timestamp DESC")])
    op.create_index("idx_analyses_app_id", "analyses", ["app_id"])
    op.create_index("idx_analyses_environment", "analyses", ["environment"])
    op.create_index("idx_analyses_status", "analyses", ["status"])
    op.create_index("idx_analyses_created_by", "analyses", ["created_by"])


def downgrade() -> None:
    """Drop the analyses table. Destructive: all analysis data is lost."""
    op.drop_index("idx_analyses_created_by", table_name="analyses")
    op.drop_index("idx_analyses_status", table_name="analyses")
    op.drop_index("idx_analyses_environment", table_name="analyses")
    op.drop_index("idx_analyses_app_id", table_name="analyses")
    op.drop_index("idx_analyses_timestamp", table_name="analyses")
    op.drop_table("analyses")
