"""Security event logging and monitoring queries."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from moderation_engine.core.settings import settings
from moderation_engine.db.time import utcnow
from moderation_engine.models import SecurityLogEntry
from moderation_engine.models.enums import LogSeverity
from moderation_engine.repositories.ports import SecurityLogStore
from moderation_engine.services.retry import read_or_default

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"
SENSITIVE_FIELDS = (
    "password", "token", "secret", "key", "auth",
    "email", "phone", "ssn", "credit", "card",
)
REQUEST_TYPES = ("NOTE_WRITE", "COMMENT_WRITE", "IMAGE_UPLOAD", "SEARCH", "PROFILE_UPDATE")
TOP_USERS_LIMIT = 3


def sanitize_log_data(data: Any) -> Any:
    """Return a copy of ``data`` with sensitive keys redacted at any depth."""
    if isinstance(data, Mapping):
        cleaned: dict[str, Any] = {}
        for key, value in data.items():
            lowered = str(key).lower()
            if any(marker in lowered for marker in SENSITIVE_FIELDS):
                cleaned[key] = REDACTED
            else:
                cleaned[key] = sanitize_log_data(value)
        return cleaned
    if isinstance(data, list | tuple):
        return [sanitize_log_data(item) for item in data]
    return data


@dataclass
class SecurityLogPage:
    entries: list[SecurityLogEntry]
    degraded: bool = False


@dataclass
class UserRequestStats:
    user_id: str
    requests: int = 0
    blocked: int = 0


@dataclass
class RateLimitStats:
    total_requests: int = 0
    blocked_requests: int = 0
    top_users: list[UserRequestStats] = field(default_factory=list)
    requests_by_type: dict[str, int] = field(
        default_factory=lambda: dict.fromkeys(REQUEST_TYPES, 0)
    )
    degraded: bool = False


class SecurityLogService:
    """Writes sanitized security events and summarizes recent ones."""

    def __init__(
        self,
        store: SecurityLogStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.clock = clock

    def log_event(
        self,
        event_type: str,
        details: Mapping[str, Any] | None = None,
        *,
        severity: LogSeverity | str = LogSeverity.LOW,
        user_uid: str | None = None,
        ip: str | None = None,
        user_agent: str | None = None,
        request_type: str | None = None,
        blocked: bool = False,
    ) -> SecurityLogEntry:
        """Append a sanitized event to the security log.

        Raises:
            StoreUnavailableError: If the append fails.
        """
        details = dict(details or {})
        entry = {
            "event_type": getattr(event_type, "value", event_type),
            "severity": getattr(severity, "value", severity),
            "details": sanitize_log_data(details),
            "user_uid": user_uid,
            "ip": ip or details.get("ip"),
            "user_agent": user_agent or details.get("userAgent"),
            "request_type": request_type,
            "blocked": blocked,
            "timestamp": self.clock(),
        }
        record = self.store.append(entry)
        logger.debug("Logged security event %s (%s)", entry["event_type"], entry["severity"])
        return record

    def get_security_logs(
        self,
        window_hours: int = 24,
        limit: int | None = None,
    ) -> SecurityLogPage:
        """Return the most recent events inside the window, newest first."""
        since = self.clock() - timedelta(hours=window_hours)
        page_size = limit if limit is not None else settings.security_log_page_size
        entries, degraded = read_or_default(
            lambda: list(self.store.query_since(since, limit=page_size)),
            [],
            operation="security_log.query_since",
        )
        return SecurityLogPage(entries=entries, degraded=degraded)

    def get_rate_limit_stats(self) -> RateLimitStats:
        """Summarize request volume over the last 24 hours."""
        since = self.clock() - timedelta(hours=24)
        entries, degraded = read_or_default(
            lambda: list(self.store.query_since(since)),
            [],
            operation="security_log.rate_limit_stats",
        )
        stats = RateLimitStats(degraded=degraded)
        per_user: dict[str, UserRequestStats] = {}

        for entry in entries:
            stats.total_requests += 1
            if entry.blocked:
                stats.blocked_requests += 1
            if entry.user_uid:
                user = per_user.setdefault(entry.user_uid, UserRequestStats(entry.user_uid))
                user.requests += 1
                if entry.blocked:
                    user.blocked += 1
            if entry.request_type in stats.requests_by_type:
                stats.requests_by_type[entry.request_type] += 1

        stats.top_users = sorted(per_user.values(), key=lambda u: u.requests, reverse=True)[
            :TOP_USERS_LIMIT
        ]
        return stats
