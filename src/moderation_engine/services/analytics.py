"""Report, user and content statistics for the admin dashboard.

All reads here are aggregate and non-critical: each one is retried with
backoff and, if the store stays unavailable, replaced by an empty default
while the result is flagged ``degraded``.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TypeVar

from moderation_engine.core.errors import InvalidInputError
from moderation_engine.db.time import ensure_utc, start_of_day, utcnow
from moderation_engine.models import Report
from moderation_engine.models.enums import LogSeverity, ReportReason
from moderation_engine.repositories.ports import (
    CommentStore,
    NoteStore,
    ReportStore,
    SecurityLogStore,
    UserStore,
)
from moderation_engine.services.retry import read_or_default

logger = logging.getLogger(__name__)

T = TypeVar("T")

WINDOW_RANGES: dict[str, int] = {"1d": 1, "7d": 7, "30d": 30, "90d": 90}
ALERT_SEVERITIES = (LogSeverity.HIGH.value, LogSeverity.CRITICAL.value)


def compute_growth_rate(today: int, yesterday: int) -> float:
    """Percentage change from yesterday to today.

    >>> compute_growth_rate(3, 6)
    -50.0
    """
    if today == 0 and yesterday == 0:
        return 0
    if yesterday == 0:
        return 100
    return round((today - yesterday) / yesterday * 100, 1)


def retention_rate(monthly_active: int, total_users: int) -> float:
    if total_users == 0:
        return 0
    return round(monthly_active / total_users * 100, 1)


@dataclass
class ReportAnalytics:
    total_reports: int = 0
    by_reason: dict[str, int] = field(default_factory=dict)
    by_day: dict[str, int] = field(default_factory=dict)
    by_status: dict[str, int] = field(default_factory=dict)
    avg_processing_hours: float = 0.0
    most_common_reason: str | None = None
    degraded: bool = False


@dataclass
class ContentCounts:
    users: int = 0
    notes: int = 0
    comments: int = 0


@dataclass
class GrowthRates:
    users: float = 0
    notes: float = 0
    comments: float = 0


@dataclass
class ActiveUsers:
    daily: int = 0
    weekly: int = 0
    monthly: int = 0


@dataclass
class OverviewAnalytics:
    window_range: str
    today: ContentCounts = field(default_factory=ContentCounts)
    yesterday: ContentCounts = field(default_factory=ContentCounts)
    growth: GrowthRates = field(default_factory=GrowthRates)
    active_users: ActiveUsers = field(default_factory=ActiveUsers)
    image_uploads: int = 0
    new_in_range: ContentCounts = field(default_factory=ContentCounts)
    totals: ContentCounts = field(default_factory=ContentCounts)
    retention_rate: float = 0
    degraded: bool = False


@dataclass
class SystemStats:
    total_users: int = 0
    active_users: int = 0
    total_notes: int = 0
    security_alerts: int = 0
    total_reports: int = 0
    degraded: bool = False


def _reason_histogram(reports: Iterable[Report]) -> dict[str, int]:
    counts = Counter(report.reason for report in reports)
    ordered = {
        reason.value: counts.pop(reason.value)
        for reason in ReportReason
        if reason.value in counts
    }
    # Reasons outside the enum keep first-seen order after the known ones.
    ordered.update(counts)
    return ordered


def summarize_reports(reports: list[Report]) -> ReportAnalytics:
    """Histogram and latency figures for an already-fetched list of reports."""
    by_reason = _reason_histogram(reports)

    by_day: Counter[str] = Counter()
    by_status: Counter[str] = Counter()
    latencies: list[float] = []
    for report in reports:
        created_at = ensure_utc(report.created_at)
        by_day[created_at.date().isoformat()] += 1
        by_status[report.status] += 1
        if report.processed_at is not None:
            elapsed = ensure_utc(report.processed_at) - created_at
            latencies.append(elapsed.total_seconds() / 3600)

    return ReportAnalytics(
        total_reports=len(reports),
        by_reason=by_reason,
        by_day=dict(sorted(by_day.items())),
        by_status=dict(by_status),
        avg_processing_hours=round(sum(latencies) / len(latencies), 2) if latencies else 0.0,
        # max() keeps the first maximal key, so ties resolve in ReportReason order.
        most_common_reason=max(by_reason, key=by_reason.__getitem__) if by_reason else None,
    )


class _DegradableReads:
    """Runs reads through ``read_or_default`` and remembers if any fell back."""

    def __init__(self) -> None:
        self.degraded = False

    def __call__(self, func: Callable[[], T], default: T, operation: str) -> T:
        value, degraded = read_or_default(func, default, operation=operation)
        self.degraded = self.degraded or degraded
        return value


class AnalyticsAggregator:
    """Computes dashboard statistics from the read-only stores."""

    def __init__(
        self,
        report_store: ReportStore,
        user_store: UserStore,
        note_store: NoteStore,
        comment_store: CommentStore,
        security_log_store: SecurityLogStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.report_store = report_store
        self.user_store = user_store
        self.note_store = note_store
        self.comment_store = comment_store
        self.security_log_store = security_log_store
        self.clock = clock

    def get_report_analytics(self, window_days: int = 30) -> ReportAnalytics:
        """Summarize reports created in the last ``window_days`` days."""
        if window_days <= 0:
            raise InvalidInputError("window_days must be positive")
        since = self.clock() - timedelta(days=window_days)
        reports, degraded = read_or_default(
            lambda: list(self.report_store.query_created_since(since)),
            [],
            operation="reports.query_created_since",
        )
        analytics = summarize_reports(reports)
        analytics.degraded = degraded
        return analytics

    def get_real_analytics_data(self, window_range: str = "7d") -> OverviewAnalytics:
        """Compute growth, activity and retention figures for the dashboard.

        Args:
            window_range: One of ``1d``, ``7d``, ``30d`` or ``90d``; bounds the
                image-upload and new-item counts.

        Raises:
            InvalidInputError: If ``window_range`` is not supported.
        """
        if window_range not in WINDOW_RANGES:
            raise InvalidInputError(
                f"Unsupported range {window_range!r}; expected one of {', '.join(WINDOW_RANGES)}"
            )
        now = self.clock()
        today_start = start_of_day(now)
        yesterday_start = today_start - timedelta(days=1)
        range_start = now - timedelta(days=WINDOW_RANGES[window_range])
        read = _DegradableReads()

        stores = {
            "users": self.user_store,
            "notes": self.note_store,
            "comments": self.comment_store,
        }
        today = ContentCounts()
        yesterday = ContentCounts()
        new_in_range = ContentCounts()
        totals = ContentCounts()
        for name, store in stores.items():
            today_count = read(lambda s=store: s.count_since(today_start), 0, f"{name}.count_since")
            since_yesterday = read(
                lambda s=store: s.count_since(yesterday_start), 0, f"{name}.count_since"
            )
            setattr(today, name, today_count)
            setattr(yesterday, name, max(since_yesterday - today_count, 0))
            setattr(
                new_in_range,
                name,
                read(lambda s=store: s.count_since(range_start), 0, f"{name}.count_since"),
            )
            setattr(totals, name, read(store.count_all, 0, f"{name}.count_all"))

        growth = GrowthRates(
            users=compute_growth_rate(today.users, yesterday.users),
            notes=compute_growth_rate(today.notes, yesterday.notes),
            comments=compute_growth_rate(today.comments, yesterday.comments),
        )

        active = ActiveUsers()
        for tier, days in (("daily", 1), ("weekly", 7), ("monthly", 30)):
            since = now - timedelta(days=days)
            users = read(
                lambda since=since: list(self.user_store.list_with_last_activity_since(since)),
                [],
                "users.list_with_last_activity_since",
            )
            setattr(active, tier, len(users))

        image_uploads = read(
            lambda: self.note_store.count_with_images_since(range_start),
            0,
            "notes.count_with_images_since",
        ) + read(
            lambda: self.comment_store.count_with_images_since(range_start),
            0,
            "comments.count_with_images_since",
        )

        if read.degraded:
            logger.warning("Overview analytics for %s computed from partial data", window_range)
        return OverviewAnalytics(
            window_range=window_range,
            today=today,
            yesterday=yesterday,
            growth=growth,
            active_users=active,
            image_uploads=image_uploads,
            new_in_range=new_in_range,
            totals=totals,
            retention_rate=retention_rate(active.monthly, totals.users),
            degraded=read.degraded,
        )

    def get_system_stats(self) -> SystemStats:
        """Headline counters; any unreadable figure degrades to zero."""
        read = _DegradableReads()
        week_ago = self.clock() - timedelta(days=7)
        stats = SystemStats(
            total_users=read(self.user_store.count_all, 0, "users.count_all"),
            active_users=len(
                read(
                    lambda: list(self.user_store.list_with_last_activity_since(week_ago)),
                    [],
                    "users.list_with_last_activity_since",
                )
            ),
            total_notes=read(self.note_store.count_all, 0, "notes.count_all"),
            security_alerts=read(
                lambda: self.security_log_store.count_by_severity(ALERT_SEVERITIES),
                0,
                "security_log.count_by_severity",
            ),
            total_reports=read(self.report_store.count_all, 0, "reports.count_all"),
        )
        stats.degraded = read.degraded
        return stats
