# src/moderation_engine/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .analytics import (
    OverviewAnalyticsResponse,
    RefreshSnapshotResponse,
    ReportAnalyticsResponse,
    SystemStatsResponse,
)
from .moderation import (
    KeywordFilterCreate,
    KeywordFilterResponse,
    ModerationResultResponse,
    ModerationScanRequest,
)
from .report import (
    ContentReportCount,
    QueuedReportResponse,
    ReportCreate,
    ReportDecision,
    ReportDecisionResponse,
    ReportResponse,
    TriageOutcomeResponse,
)
from .security import (
    ActivityScanResponse,
    BlockedIPResponse,
    BlockIPRequest,
    RateLimitStatsResponse,
    SecurityEventCreate,
    SecurityLogPageResponse,
    SecurityLogResponse,
    UnblockIPRequest,
    UnblockIPResponse,
)
from .user import ManagedUserResponse, UserStatusUpdate

__all__ = [
    "OverviewAnalyticsResponse", "RefreshSnapshotResponse",
    "ReportAnalyticsResponse", "SystemStatsResponse",
    "KeywordFilterCreate", "KeywordFilterResponse",
    "ModerationResultResponse", "ModerationScanRequest",
    "ContentReportCount", "QueuedReportResponse", "ReportCreate",
    "ReportDecision", "ReportDecisionResponse", "ReportResponse", "TriageOutcomeResponse",
    "ActivityScanResponse", "RateLimitStatsResponse", "SecurityEventCreate",
    "SecurityLogPageResponse", "SecurityLogResponse",
    "BlockedIPResponse", "BlockIPRequest", "UnblockIPRequest", "UnblockIPResponse",
    "ManagedUserResponse", "UserStatusUpdate",
]
