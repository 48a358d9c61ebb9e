# src/moderation_engine/schemas/report.py
"""Report-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from moderation_engine.models.enums import SYSTEM_ACTOR_ID, ContentType, ReportReason


def check_admin_id(v: str) -> str:
    """Reject the identifier reserved for automatic processing."""
    if v.strip() == SYSTEM_ACTOR_ID:
        raise ValueError(f"admin_id {SYSTEM_ACTOR_ID!r} is reserved")
    return v


class ReportCreate(BaseModel):
    """Schema for filing a report against a note or comment."""

    content_type: ContentType
    content_id: str = Field(..., min_length=1, max_length=64)
    reason: ReportReason
    description: str | None = Field(default=None, max_length=2000)
    reporter_id: str = Field(..., min_length=1, max_length=64)


class ReportDecision(BaseModel):
    """Schema for an admin approving or rejecting a report."""

    action: Literal["approved", "rejected"]
    admin_note: str = Field(default="", max_length=2000)
    admin_id: str = Field(..., min_length=1, max_length=64)

    @field_validator("admin_id")
    @classmethod
    def validate_admin_id(cls, v: str) -> str:
        return check_admin_id(v)


class ReportResponse(BaseModel):
    """Schema for report information returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    content_type: str
    content_id: str
    content_author_id: str | None
    reason: str
    description: str | None
    reporter_id: str
    status: str
    priority: int
    duplicate_reports: int
    author_violation_count: int
    auto_generated: bool
    auto_processed: bool
    admin_note: str | None
    created_at: datetime
    processed_at: datetime | None
    processed_by: str | None


class ContentPreview(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    content_type: str
    content_id: str
    author_id: str
    text: str
    title: str | None = None
    image_url: str | None = None


class QueuedReportResponse(BaseModel):
    """A pending report with its current priority and a content preview."""

    model_config = ConfigDict(from_attributes=True)

    report: ReportResponse
    priority: int
    # None when the content is gone or could not be loaded.
    content: ContentPreview | None


class TriageOutcomeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    processed: bool
    action: str | None = None
    reason: str | None = None


class ReportDecisionResponse(BaseModel):
    report_id: int
    processed: bool


class ContentReportCount(BaseModel):
    content_type: str
    content_id: str
    count: int
