# src/moderation_engine/schemas/moderation.py
"""Schemas for content scanning and keyword filter management."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from moderation_engine.models.enums import ContentType, FilterSeverity


class ModerationScanRequest(BaseModel):
    """Schema for scanning a piece of text before or after it is published."""

    content_type: ContentType
    content_id: str = Field(..., min_length=1, max_length=64)
    text: str = Field(default="", description="Free text to scan")


class ModerationResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    action: str
    confidence: float
    reasons: list[str]
    auto_blocked: bool
    degraded: bool = Field(False, description="True if keyword filters could not be loaded")
    report_id: int | None = None
    write_failed: bool = Field(
        False,
        description="True if the block was decided but its report could not be stored",
    )


class KeywordFilterCreate(BaseModel):
    keyword: str = Field(..., min_length=1, max_length=128)
    severity: FilterSeverity = FilterSeverity.MEDIUM


class KeywordFilterResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    keyword: str
    severity: str
    is_active: bool
    created_at: datetime
