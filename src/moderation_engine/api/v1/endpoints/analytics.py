"""Dashboard analytics endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from moderation_engine.api.v1.dependencies import AnalyticsDep, RefreshWorkerDep
from moderation_engine.schemas.analytics import (
    OverviewAnalyticsResponse,
    RefreshSnapshotResponse,
    ReportAnalyticsResponse,
    SystemStatsResponse,
)
from moderation_engine.schemas.security import ActivityScanResponse

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/reports", response_model=ReportAnalyticsResponse)
def get_report_analytics(
    analytics: AnalyticsDep,
    window_days: int = Query(30, ge=1, le=365),
) -> ReportAnalyticsResponse:
    return ReportAnalyticsResponse.model_validate(analytics.get_report_analytics(window_days))


@router.get("/overview", response_model=OverviewAnalyticsResponse)
def get_real_analytics_data(
    analytics: AnalyticsDep,
    window_range: str = Query("7d", alias="range"),
) -> OverviewAnalyticsResponse:
    """Growth, active users and retention for ``1d``, ``7d``, ``30d`` or ``90d``."""
    overview = analytics.get_real_analytics_data(window_range)
    return OverviewAnalyticsResponse.model_validate(overview)


@router.get("/system", response_model=SystemStatsResponse)
def get_system_stats(analytics: AnalyticsDep) -> SystemStatsResponse:
    return SystemStatsResponse.model_validate(analytics.get_system_stats())


@router.get("/snapshot", response_model=RefreshSnapshotResponse)
def get_refresh_snapshot(worker: RefreshWorkerDep) -> RefreshSnapshotResponse:
    """Latest background-refreshed results; empty when the worker is disabled."""
    if worker is None:
        return RefreshSnapshotResponse(enabled=False)
    snapshot = worker.snapshot
    return RefreshSnapshotResponse(
        enabled=True,
        refreshed_at=snapshot.refreshed_at,
        activity=(
            ActivityScanResponse.model_validate(snapshot.activity)
            if snapshot.activity is not None
            else None
        ),
        report_analytics=(
            ReportAnalyticsResponse.model_validate(snapshot.report_analytics)
            if snapshot.report_analytics is not None
            else None
        ),
    )
