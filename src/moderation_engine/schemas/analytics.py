# src/moderation_engine/schemas/analytics.py
"""Dashboard analytics schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .security import ActivityScanResponse


class ReportAnalyticsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_reports: int
    by_reason: dict[str, int]
    by_day: dict[str, int]
    by_status: dict[str, int]
    avg_processing_hours: float
    most_common_reason: str | None
    degraded: bool


class ContentCountsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    users: int
    notes: int
    comments: int


class GrowthRatesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    users: float
    notes: float
    comments: float


class ActiveUsersResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    daily: int
    weekly: int
    monthly: int


class OverviewAnalyticsResponse(BaseModel):
    """Growth, activity and retention figures for one dashboard range."""

    model_config = ConfigDict(from_attributes=True)

    window_range: str
    today: ContentCountsResponse
    yesterday: ContentCountsResponse
    growth: GrowthRatesResponse
    active_users: ActiveUsersResponse
    image_uploads: int
    new_in_range: ContentCountsResponse
    totals: ContentCountsResponse
    retention_rate: float
    degraded: bool


class SystemStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_users: int
    active_users: int
    total_notes: int
    security_alerts: int
    total_reports: int
    degraded: bool


class RefreshSnapshotResponse(BaseModel):
    """Latest results published by the background refresh worker."""

    model_config = ConfigDict(from_attributes=True)

    enabled: bool
    refreshed_at: datetime | None = None
    activity: ActivityScanResponse | None = None
    report_analytics: ReportAnalyticsResponse | None = None
