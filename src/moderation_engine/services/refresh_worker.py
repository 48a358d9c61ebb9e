"""Background refresh of suspicious-activity and report-analytics snapshots.

Disabled by default; the dashboard normally calls the detector and the
aggregator per request. When enabled, this worker re-runs both on a fixed
interval and publishes the latest results to an in-memory cache.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from moderation_engine.core.errors import ModerationError
from moderation_engine.core.settings import settings
from moderation_engine.db.session import SessionLocal
from moderation_engine.db.time import utcnow
from moderation_engine.repositories import (
    SqlCommentStore,
    SqlNoteStore,
    SqlReportStore,
    SqlSecurityLogStore,
    SqlUserStore,
)
from moderation_engine.services.analytics import AnalyticsAggregator, ReportAnalytics
from moderation_engine.services.detector import ActivityScan, SuspiciousActivityDetector

logger = logging.getLogger(__name__)


@dataclass
class RefreshSnapshot:
    """Most recent results published by the worker."""

    activity: ActivityScan | None = None
    report_analytics: ReportAnalytics | None = None
    refreshed_at: datetime | None = None


class AnalyticsRefreshWorker:
    """Periodically recomputes detection and analytics results off the event loop."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        interval_seconds: float | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.session_factory = session_factory
        self.interval = max(
            0.1,
            float(
                interval_seconds
                if interval_seconds is not None
                else settings.analytics_refresh_interval_seconds
            ),
        )
        self.clock = clock
        self.snapshot = RefreshSnapshot()
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background refresh loop."""
        if not self.running:
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the loop and wait for the current iteration to finish."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                self.snapshot = await asyncio.to_thread(self.refresh_once)
            except ModerationError as e:
                logger.warning("AnalyticsRefreshWorker refresh failed: %s", e)
            except Exception:
                logger.exception("AnalyticsRefreshWorker iteration crashed; retrying next interval")

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            except TimeoutError:
                continue

    def refresh_once(self) -> RefreshSnapshot:
        """Run one detection scan and one report summary in a fresh session."""
        with self.session_factory() as db:
            detector = SuspiciousActivityDetector(SqlSecurityLogStore(db), clock=self.clock)
            aggregator = AnalyticsAggregator(
                SqlReportStore(db),
                SqlUserStore(db),
                SqlNoteStore(db),
                SqlCommentStore(db),
                SqlSecurityLogStore(db),
                clock=self.clock,
            )
            activity = detector.detect_suspicious_activity(settings.refresh_detection_window_hours)
            report_analytics = aggregator.get_report_analytics(
                settings.refresh_report_window_days
            )

        snapshot = RefreshSnapshot(
            activity=activity,
            report_analytics=report_analytics,
            refreshed_at=self.clock(),
        )
        logger.debug(
            "Refreshed analytics snapshot: %d activities, %d reports",
            len(activity),
            report_analytics.total_reports,
        )
        return snapshot
