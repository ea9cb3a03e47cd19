"""
ArchLens Backend - Shared Response Schemas
===========================================

What:  Error, message and health models used by every router.
Why:   One error shape across the API so the frontend can read `error`
       without caring which endpoint failed.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response body.

    Example:
        {
            "error": "Failed to delete project",
            "details": "Failed to delete analysis",
            "request_id": "550e8400"
        }
    """
    error: str = Field(description="Human-readable error message")
    details: Optional[str] = Field(
        default=None,
        description="Message of the underlying error, when the endpoint reports one",
    )
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    """Plain confirmation body, e.g. after a delete."""
    message: str = Field(description="Human-readable confirmation")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer checks."""
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
