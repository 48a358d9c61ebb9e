"""Tests for dashboard analytics."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from moderation_engine.core.errors import InvalidInputError, StoreUnavailableError
from moderation_engine.services.analytics import (
    AnalyticsAggregator,
    compute_growth_rate,
    retention_rate,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    ("today", "yesterday", "expected"),
    [(5, 0, 100), (0, 0, 0), (3, 6, -50.0), (7, 3, 133.3), (0, 4, -100.0)],
)
def test_compute_growth_rate(today, yesterday, expected) -> None:
    assert compute_growth_rate(today, yesterday) == expected


def test_retention_rate() -> None:
    assert retention_rate(0, 0) == 0
    assert retention_rate(1, 3) == 33.3


def test_report_analytics_histograms(aggregator, make_report) -> None:
    make_report(reason="spam", created_at=NOW - timedelta(days=2))
    make_report(
        reason="spam",
        status="approved",
        created_at=NOW - timedelta(days=1, hours=4),
        processed_at=NOW - timedelta(days=1, hours=1),
    )
    make_report(
        reason="harassment",
        status="rejected",
        created_at=NOW - timedelta(hours=2),
        processed_at=NOW - timedelta(hours=1),
    )
    make_report(reason="violence", created_at=NOW - timedelta(days=40))

    analytics = aggregator.get_report_analytics(30)

    assert analytics.total_reports == 3
    assert analytics.by_reason == {"harassment": 1, "spam": 2}
    assert analytics.by_status == {"pending": 1, "approved": 1, "rejected": 1}
    assert analytics.by_day == {"2026-10-17": 1, "2026-10-18": 1, "2026-10-19": 1}
    assert analytics.avg_processing_hours == 2.0
    assert analytics.most_common_reason == "spam"
    assert analytics.degraded is False


def test_most_common_reason_ties_follow_reason_order(aggregator, make_report) -> None:
    make_report(reason="spam")
    make_report(reason="violence")
    make_report(reason="spam")
    make_report(reason="violence")

    assert aggregator.get_report_analytics(7).most_common_reason == "violence"


def test_report_analytics_empty_window(aggregator) -> None:
    analytics = aggregator.get_report_analytics(7)

    assert analytics.total_reports == 0
    assert analytics.most_common_reason is None
    assert analytics.avg_processing_hours == 0.0


def test_report_analytics_rejects_non_positive_window(aggregator) -> None:
    with pytest.raises(InvalidInputError):
        aggregator.get_report_analytics(0)


def test_overview_counts_growth_activity_and_retention(
    aggregator, make_user, make_note, make_comment
) -> None:
    make_user("new-today", created_at=NOW - timedelta(hours=1), last_activity=NOW)
    make_user("new-yesterday", created_at=NOW - timedelta(days=1), last_activity=None)
    make_user("weekly", last_activity=NOW - timedelta(days=3))
    make_user("monthly", last_activity=NOW - timedelta(days=20))
    make_user("dormant", last_activity=NOW - timedelta(days=90))

    make_note(created_at=NOW - timedelta(hours=2), image_url="https://img.example/1.png")
    make_note(created_at=NOW - timedelta(days=1))
    make_note(created_at=NOW - timedelta(days=1), image_url="")
    make_note(created_at=NOW - timedelta(days=10), image_url="https://img.example/2.png")
    make_comment(created_at=NOW - timedelta(hours=3), image_url="https://img.example/3.png")

    overview = aggregator.get_real_analytics_data("7d")

    assert (overview.today.users, overview.yesterday.users) == (1, 1)
    assert (overview.today.notes, overview.yesterday.notes) == (1, 2)
    assert (overview.today.comments, overview.yesterday.comments) == (1, 0)
    assert overview.growth.users == 0.0
    assert overview.growth.notes == -50.0
    assert overview.growth.comments == 100
    assert (overview.active_users.daily, overview.active_users.weekly) == (1, 2)
    assert overview.active_users.monthly == 3
    assert overview.image_uploads == 2
    assert overview.new_in_range.notes == 3
    assert overview.totals.notes == 4
    assert overview.totals.users == 5
    assert overview.retention_rate == 60.0
    assert overview.degraded is False


def test_overview_image_uploads_follow_range(aggregator, make_note) -> None:
    make_note(created_at=NOW - timedelta(days=10), image_url="https://img.example/old.png")

    assert aggregator.get_real_analytics_data("7d").image_uploads == 0
    assert aggregator.get_real_analytics_data("30d").image_uploads == 1


def test_overview_rejects_unknown_range(aggregator) -> None:
    with pytest.raises(InvalidInputError):
        aggregator.get_real_analytics_data("2w")


def test_overview_degrades_when_a_store_is_down(aggregator) -> None:
    aggregator.comment_store = MagicMock()
    aggregator.comment_store.count_since.side_effect = StoreUnavailableError("down")
    aggregator.comment_store.count_all.side_effect = StoreUnavailableError("down")
    aggregator.comment_store.count_with_images_since.side_effect = StoreUnavailableError("down")

    overview = aggregator.get_real_analytics_data("1d")

    assert overview.degraded is True
    assert overview.today.comments == 0
    assert overview.totals.comments == 0


def test_system_stats(aggregator, make_user, make_note, make_report, security_log) -> None:
    make_user("active", last_activity=NOW - timedelta(days=2))
    make_user("idle", last_activity=NOW - timedelta(days=12))
    make_note()
    make_report()
    security_log.log_event("AUTO_MODERATION_BLOCK", severity="HIGH")
    security_log.log_event("BREACH", severity="CRITICAL")
    security_log.log_event("NOTE_WRITE")

    stats = aggregator.get_system_stats()

    assert (stats.total_users, stats.active_users) == (2, 1)
    assert (stats.total_notes, stats.total_reports) == (1, 1)
    assert stats.security_alerts == 2
    assert stats.degraded is False


def test_system_stats_degrade_to_zero() -> None:
    broken = MagicMock()
    for name in ("count_all", "count_by_severity", "list_with_last_activity_since"):
        getattr(broken, name).side_effect = StoreUnavailableError("down")
    aggregator = AnalyticsAggregator(broken, broken, broken, broken, broken, clock=lambda: NOW)

    stats = aggregator.get_system_stats()

    assert stats.degraded is True
    assert (stats.total_users, stats.active_users, stats.total_reports) == (0, 0, 0)
