"""
ArchLens Backend - Analysis Request/Response Schemas
=====================================================

What:  Pydantic models for analyses, listings and dashboard statistics.
Why:   The frontend speaks camelCase with MongoDB-style keys (`_id`); the ORM
       speaks snake_case. These models own that translation.
How:   `CamelModel` generates camelCase aliases; FastAPI serializes responses
       by alias. Fields whose wire name is not plain camelCase (`_id`,
       `estimatedSavingsUSD`) declare it explicitly.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from archlens.models.analysis import Analysis

AnalysisStatus = Literal["completed", "processing", "failed"]
AnalysisFileType = Literal["image", "iac", "text"]


class CamelModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Analysis Records
# ══════════════════════════════════════════════════════════════════════════


class AnalysisResponse(CamelModel):
    """
    Full analysis record as returned by the detail endpoints.

    Nested result lists are passed through exactly as stored.
    """
    record_id: str = Field(alias="_id", description="Primary identifier")
    external_id: Optional[str] = Field(
        default=None, alias="id", description="Custom identifier, if any"
    )
    timestamp: datetime
    file_name: str
    file_type: str
    original_file: Optional[Dict[str, Any]] = None

    app_id: Optional[str] = None
    component_name: Optional[str] = None
    description: Optional[str] = None
    environment: Optional[str] = None
    version: Optional[str] = None

    components: List[Any] = Field(default_factory=list)
    connections: List[Any] = Field(default_factory=list)
    risks: List[Dict[str, Any]] = Field(default_factory=list)
    compliance_gaps: List[Dict[str, Any]] = Field(default_factory=list)
    cost_issues: List[Dict[str, Any]] = Field(default_factory=list)
    recommendations: List[Dict[str, Any]] = Field(default_factory=list)

    resiliency_score: float = 0
    security_score: float = 0
    cost_efficiency_score: float = 0
    compliance_score: float = 0

    estimated_savings_usd: float = Field(default=0, alias="estimatedSavingsUSD")
    summary: str = ""
    architecture_description: str = ""
    processing_time: float = 0
    llm_provider: str = ""
    llm_model: str = ""

    created_by: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    status: str = "completed"
    similar_blueprints: List[Dict[str, Any]] = Field(default_factory=list)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, analysis: Analysis) -> "AnalysisResponse":
        """Build the wire representation from an ORM row."""
        return cls(
            record_id=analysis.id,
            external_id=analysis.external_id,
            timestamp=analysis.timestamp,
            file_name=analysis.file_name,
            file_type=analysis.file_type,
            original_file=analysis.original_file,
            app_id=analysis.app_id,
            component_name=analysis.component_name,
            description=analysis.description,
            environment=analysis.environment,
            version=analysis.version,
            components=analysis.components or [],
            connections=analysis.connections or [],
            risks=analysis.risks or [],
            compliance_gaps=analysis.compliance_gaps or [],
            cost_issues=analysis.cost_issues or [],
            recommendations=analysis.recommendations or [],
            resiliency_score=analysis.resiliency_score or 0,
            security_score=analysis.security_score or 0,
            cost_efficiency_score=analysis.cost_efficiency_score or 0,
            compliance_score=analysis.compliance_score or 0,
            estimated_savings_usd=analysis.estimated_savings_usd or 0,
            summary=analysis.summary or "",
            architecture_description=analysis.architecture_description or "",
            processing_time=analysis.processing_time or 0,
            llm_provider=analysis.llm_provider or "",
            llm_model=analysis.llm_model or "",
            created_by=analysis.created_by,
            tags=analysis.tags or [],
            status=analysis.status,
            similar_blueprints=analysis.similar_blueprints or [],
            created_at=analysis.created_at,
            updated_at=analysis.updated_at,
        )


class AnalysisUpdate(CamelModel):
    """
    Partial update body for PATCH /api/analyses/{id}.

    Only fields present in the request are applied. Identity columns and
    timestamps are not updatable; unknown keys are ignored.
    """
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    file_name: Optional[str] = None
    file_type: Optional[AnalysisFileType] = None
    app_id: Optional[str] = None
    component_name: Optional[str] = None
    description: Optional[str] = None
    environment: Optional[str] = None
    version: Optional[str] = None

    components: Optional[List[Any]] = None
    connections: Optional[List[Any]] = None
    risks: Optional[List[Dict[str, Any]]] = None
    compliance_gaps: Optional[List[Dict[str, Any]]] = None
    cost_issues: Optional[List[Dict[str, Any]]] = None
    recommendations: Optional[List[Dict[str, Any]]] = None

    resiliency_score: Optional[float] = Field(default=None, ge=0, le=100)
    security_score: Optional[float] = Field(default=None, ge=0, le=100)
    cost_efficiency_score: Optional[float] = Field(default=None, ge=0, le=100)
    compliance_score: Optional[float] = Field(default=None, ge=0, le=100)

    estimated_savings_usd: Optional[float] = Field(default=None, alias="estimatedSavingsUSD")
    summary: Optional[str] = None
    architecture_description: Optional[str] = None

    created_by: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[AnalysisStatus] = None
    similar_blueprints: Optional[List[Dict[str, Any]]] = None

    # Optional here means "may be omitted". These columns are NOT NULL, so an
    # explicit null is a client error (422), not a failed flush.
    @field_validator(
        "file_name",
        "file_type",
        "components",
        "connections",
        "risks",
        "compliance_gaps",
        "cost_issues",
        "recommendations",
        "resiliency_score",
        "security_score",
        "cost_efficiency_score",
        "compliance_score",
        "estimated_savings_usd",
        "summary",
        "architecture_description",
        "tags",
        "status",
        "similar_blueprints",
        mode="before",
    )
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("may be omitted but cannot be null")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Listing
# ══════════════════════════════════════════════════════════════════════════


class AnalysisQuery(BaseModel):
    """
    Filters and paging for GET /api/analyses.

    page is 1-based; dates bound `timestamp` inclusively.
    """
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)
    app_id: Optional[str] = None
    environment: Optional[str] = None
    status: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class PaginationInfo(CamelModel):
    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class AnalysisListResponse(CamelModel):
    analyses: List[AnalysisResponse]
    pagination: PaginationInfo


# ══════════════════════════════════════════════════════════════════════════
# Dashboard
# ══════════════════════════════════════════════════════════════════════════


class AverageScores(CamelModel):
    """Mean scores over completed analyses; zeros when there are none."""
    avg_security: float = 0
    avg_resilience: float = 0
    avg_cost_efficiency: float = 0
    avg_compliance: float = 0


class DistributionBucket(BaseModel):
    """One group of a distribution: `_id` is the group key (may be null)."""
    model_config = ConfigDict(populate_by_name=True)

    key: Optional[str] = Field(alias="_id")
    count: int


class DashboardStats(CamelModel):
    """
    Aggregate statistics over completed analyses.

    Distributions are ordered by count, largest first.
    """
    total_analyses: int
    recent_analyses: int
    average_scores: AverageScores
    environment_distribution: List[DistributionBucket]
    risk_distribution: List[DistributionBucket]
    timestamp: datetime
