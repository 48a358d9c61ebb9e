"""Tests for security event logging and rate-limit statistics."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from moderation_engine.core.errors import StoreUnavailableError
from moderation_engine.services.security_log import (
    REDACTED,
    SecurityLogService,
    sanitize_log_data,
)


def test_sanitize_redacts_sensitive_keys_at_any_depth() -> None:
    data = {
        "reportId": 7,
        "password": "hunter2",
        "userEmail": "a@example.com",
        "nested": {"accessToken": "abc", "note": "fine"},
        "items": [{"creditCard": "4111"}, {"label": "ok"}],
    }

    cleaned = sanitize_log_data(data)

    assert cleaned == {
        "reportId": 7,
        "password": REDACTED,
        "userEmail": REDACTED,
        "nested": {"accessToken": REDACTED, "note": "fine"},
        "items": [{"creditCard": REDACTED}, {"label": "ok"}],
    }
    assert data["password"] == "hunter2"


def test_log_event_persists_sanitized_entry(security_log, security_events) -> None:
    entry = security_log.log_event(
        "LOGIN_FAILED",
        {"ip": "198.51.100.4", "userAgent": "curl/8", "password": "nope"},
        severity="MEDIUM",
        user_uid="user-1",
    )

    [stored] = security_events("LOGIN_FAILED")
    assert stored.id == entry.id
    assert stored.ip == "198.51.100.4"
    assert stored.user_agent == "curl/8"
    assert stored.severity == "MEDIUM"
    assert stored.details["password"] == REDACTED


def test_log_event_propagates_store_failures() -> None:
    store = MagicMock()
    store.append.side_effect = StoreUnavailableError("down")

    with pytest.raises(StoreUnavailableError):
        SecurityLogService(store).log_event("LOGIN_FAILED")


def test_get_security_logs_newest_first_within_window(
    security_log_store, security_log
) -> None:
    clock_values = iter(
        [
            security_log.clock() - timedelta(hours=30),
            security_log.clock() - timedelta(hours=2),
            security_log.clock() - timedelta(hours=1),
        ]
    )
    writer = SecurityLogService(security_log_store, clock=lambda: next(clock_values))
    writer.log_event("OLD")
    writer.log_event("EARLIER")
    writer.log_event("LATEST")

    page = security_log.get_security_logs(window_hours=24)

    assert [e.event_type for e in page.entries] == ["LATEST", "EARLIER"]
    assert page.degraded is False
    assert len(security_log.get_security_logs(limit=1).entries) == 1


def test_get_security_logs_degrades() -> None:
    store = MagicMock()
    store.query_since.side_effect = StoreUnavailableError("down")

    page = SecurityLogService(store).get_security_logs()

    assert page.entries == []
    assert page.degraded is True


def test_rate_limit_stats(security_log) -> None:
    for _ in range(3):
        security_log.log_event("REQUEST", user_uid="heavy", request_type="NOTE_WRITE")
    security_log.log_event("REQUEST", user_uid="heavy", request_type="SEARCH", blocked=True)
    security_log.log_event("REQUEST", user_uid="light", request_type="IMAGE_UPLOAD")
    for name in ("a", "b"):
        security_log.log_event("REQUEST", user_uid=name, request_type="SEARCH")
    security_log.log_event("REQUEST", request_type="OTHER_TYPE", blocked=True)

    stats = security_log.get_rate_limit_stats()

    assert stats.total_requests == 8
    assert stats.blocked_requests == 2
    assert stats.top_users[0].user_id == "heavy"
    assert (stats.top_users[0].requests, stats.top_users[0].blocked) == (4, 1)
    assert len(stats.top_users) == 3
    assert stats.requests_by_type == {
        "NOTE_WRITE": 3,
        "COMMENT_WRITE": 0,
        "IMAGE_UPLOAD": 1,
        "SEARCH": 3,
        "PROFILE_UPDATE": 0,
    }
