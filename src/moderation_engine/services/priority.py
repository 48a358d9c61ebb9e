"""Report priority scoring."""

from __future__ import annotations

from collections.abc import Mapping
from types import SimpleNamespace
from typing import Any, Protocol

from moderation_engine.models.enums import ReportReason

MIN_PRIORITY = 1
MAX_PRIORITY = 10

REASON_WEIGHTS: dict[str, int] = {
    ReportReason.VIOLENCE.value: 4,
    ReportReason.HATE_SPEECH.value: 3,
    ReportReason.HARASSMENT.value: 3,
    ReportReason.INAPPROPRIATE.value: 2,
    ReportReason.COPYRIGHT.value: 2,
    ReportReason.MISINFORMATION.value: 2,
    ReportReason.SPAM.value: 1,
    ReportReason.OTHER.value: 1,
}
DEFAULT_REASON_WEIGHT = 1


class Scorable(Protocol):
    reason: Any
    duplicate_reports: int
    author_violation_count: int


def _reason_key(reason: Any) -> str | None:
    if isinstance(reason, ReportReason):
        return reason.value
    return reason


def calculate_report_priority(report: Scorable) -> int:
    """Map a report's attributes to an urgency score between 1 and 10.

    The score is the base of 1, plus the reason weight, plus bonuses for many
    duplicate reports (+2 above 3, +3 more above 10) and for repeat offenders
    (+1 above 2 prior violations, +2 more above 5), capped at 10.
    """
    score = MIN_PRIORITY
    score += REASON_WEIGHTS.get(_reason_key(report.reason), DEFAULT_REASON_WEIGHT)

    duplicates = report.duplicate_reports or 0
    if duplicates > 3:
        score += 2
    if duplicates > 10:
        score += 3

    violations = report.author_violation_count or 0
    if violations > 2:
        score += 1
    if violations > 5:
        score += 2

    return min(score, MAX_PRIORITY)


def score_report_fields(fields: Mapping[str, Any]) -> int:
    """Score a report from the field mapping it is about to be created with."""
    return calculate_report_priority(
        SimpleNamespace(
            reason=fields["reason"],
            duplicate_reports=fields.get("duplicate_reports", 0),
            author_violation_count=fields.get("author_violation_count", 0),
        )
    )
