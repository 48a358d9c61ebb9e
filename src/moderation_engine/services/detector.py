"""Windowed abuse detection over the security log."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from moderation_engine.core.settings import settings
from moderation_engine.db.time import utcnow
from moderation_engine.models import SecurityLogEntry
from moderation_engine.models.enums import LogSeverity, SecurityEventType, SuspiciousActivityType
from moderation_engine.repositories.ports import SecurityLogStore
from moderation_engine.services.retry import read_or_default

logger = logging.getLogger(__name__)

UNKNOWN_IP = "unknown"


@dataclass(frozen=True)
class SuspiciousActivity:
    type: SuspiciousActivityType
    target: str
    count: int
    severity: LogSeverity


@dataclass
class ActivityScan:
    """Detected activities plus whether the log could actually be read."""

    activities: list[SuspiciousActivity] = field(default_factory=list)
    degraded: bool = False

    def __iter__(self):
        return iter(self.activities)

    def __len__(self) -> int:
        return len(self.activities)


def _classify(
    counts: Counter[str],
    activity_type: SuspiciousActivityType,
    medium: int,
    high: int,
) -> list[SuspiciousActivity]:
    found = []
    for target, count in counts.items():
        if count <= medium:
            continue
        severity = LogSeverity.HIGH if count > high else LogSeverity.MEDIUM
        found.append(SuspiciousActivity(activity_type, target, count, severity))
    return found


def classify_entries(entries: Iterable[SecurityLogEntry]) -> list[SuspiciousActivity]:
    """Build the per-IP, per-user and failed-login tables and apply the thresholds.

    Entries without an IP (or with the ``unknown`` placeholder) only count
    towards the per-user table. That includes ``LOGIN_FAILED`` entries: failures
    with no usable IP are deliberately not pooled under a shared ``unknown``
    key, which would raise one alert for unrelated clients. Output keeps
    first-seen order within each table.
    """
    ip_counts: Counter[str] = Counter()
    user_counts: Counter[str] = Counter()
    failed_logins: Counter[str] = Counter()

    for entry in entries:
        has_ip = bool(entry.ip) and entry.ip != UNKNOWN_IP
        if has_ip:
            ip_counts[entry.ip] += 1
        if entry.user_uid:
            user_counts[entry.user_uid] += 1
        if has_ip and entry.event_type == SecurityEventType.LOGIN_FAILED.value:
            failed_logins[entry.ip] += 1

    thresholds = settings.detection_thresholds
    activities = _classify(
        ip_counts,
        SuspiciousActivityType.EXCESSIVE_REQUESTS,
        *thresholds[SuspiciousActivityType.EXCESSIVE_REQUESTS.value],
    )
    activities += _classify(
        user_counts,
        SuspiciousActivityType.EXCESSIVE_USER_ACTIVITY,
        *thresholds[SuspiciousActivityType.EXCESSIVE_USER_ACTIVITY.value],
    )
    activities += _classify(
        failed_logins,
        SuspiciousActivityType.REPEATED_LOGIN_FAILURES,
        *thresholds[SuspiciousActivityType.REPEATED_LOGIN_FAILURES.value],
    )
    return activities


class SuspiciousActivityDetector:
    """Read-only scan of recent security events."""

    def __init__(
        self,
        store: SecurityLogStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.clock = clock

    def detect_suspicious_activity(self, window_hours: float = 24) -> ActivityScan:
        """Classify abuse bursts among events from the last ``window_hours`` hours."""
        since = self.clock() - timedelta(hours=window_hours)
        entries, degraded = read_or_default(
            lambda: list(self.store.query_since(since)),
            [],
            operation="security_log.query_since",
        )
        activities = classify_entries(entries)
        if activities:
            logger.info(
                "Detected %d suspicious activities in the last %s hours",
                len(activities),
                window_hours,
            )
        return ActivityScan(activities=activities, degraded=degraded)
