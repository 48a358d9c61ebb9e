"""Tests for the background analytics refresh worker."""

import asyncio
from datetime import UTC, datetime

import pytest

from moderation_engine.services.analytics import ReportAnalytics
from moderation_engine.services.detector import ActivityScan
from moderation_engine.services.refresh_worker import AnalyticsRefreshWorker, RefreshSnapshot

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


class _SessionContext:
    def __init__(self, session) -> None:
        self.session = session

    def __enter__(self):
        return self.session

    def __exit__(self, *exc) -> None:
        return None


def test_refresh_once_publishes_detection_and_report_summary(
    db_session, security_log, make_report
) -> None:
    for _ in range(101):
        security_log.log_event("NOTE_WRITE", ip="192.0.2.1")
    make_report(reason="spam")
    worker = AnalyticsRefreshWorker(
        session_factory=lambda: _SessionContext(db_session),
        clock=lambda: NOW,
    )

    snapshot = worker.refresh_once()

    assert snapshot.refreshed_at == NOW
    assert [a.target for a in snapshot.activity] == ["192.0.2.1"]
    assert snapshot.report_analytics.total_reports == 1


@pytest.mark.asyncio
async def test_worker_runs_until_stopped(mocker) -> None:
    published = RefreshSnapshot(
        activity=ActivityScan(),
        report_analytics=ReportAnalytics(),
        refreshed_at=NOW,
    )
    worker = AnalyticsRefreshWorker(interval_seconds=0.1, clock=lambda: NOW)
    refresh = mocker.patch.object(worker, "refresh_once", return_value=published)

    await worker.start()
    await asyncio.sleep(0.05)
    assert worker.running
    await worker.stop()

    assert not worker.running
    assert refresh.call_count >= 1
    assert worker.snapshot is published


@pytest.mark.asyncio
async def test_stop_without_start_is_a_no_op() -> None:
    worker = AnalyticsRefreshWorker(interval_seconds=1)
    await worker.stop()
    assert worker.snapshot.refreshed_at is None


@pytest.mark.asyncio
async def test_unexpected_error_does_not_end_the_loop(mocker) -> None:
    published = RefreshSnapshot(
        activity=ActivityScan(),
        report_analytics=ReportAnalytics(),
        refreshed_at=NOW,
    )
    calls = []

    def flaky_refresh() -> RefreshSnapshot:
        calls.append(None)
        if len(calls) == 1:
            raise RuntimeError("boom")
        return published

    worker = AnalyticsRefreshWorker(interval_seconds=0.1, clock=lambda: NOW)
    mocker.patch.object(worker, "refresh_once", side_effect=flaky_refresh)

    await worker.start()
    for _ in range(100):
        if len(calls) >= 2:
            break
        await asyncio.sleep(0.02)
    assert worker.running
    await worker.stop()

    assert len(calls) >= 2
    assert worker.snapshot is published
