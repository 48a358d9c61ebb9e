"""Keyword and spam-pattern scanning of free text.

The scan itself never fails because of a store: an unreachable keyword store
degrades to "no keyword matches". Only the enforcement write (system report
plus audit entry) can fail, and that is reported on the result instead of
changing the verdict.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime

from moderation_engine.core.errors import InvalidInputError, NotFoundError, StoreUnavailableError
from moderation_engine.core.settings import settings
from moderation_engine.db.time import utcnow
from moderation_engine.models import KeywordFilter
from moderation_engine.models.enums import (
    SYSTEM_ACTOR_ID,
    ContentType,
    FilterSeverity,
    LogSeverity,
    ModerationAction,
    ReportReason,
    ReportStatus,
    SecurityEventType,
)
from moderation_engine.repositories.ports import ContentStore, KeywordFilterStore, ReportStore
from moderation_engine.services.priority import score_report_fields
from moderation_engine.services.retry import read_or_default
from moderation_engine.services.security_log import SecurityLogService

logger = logging.getLogger(__name__)

# (pattern, reason) pairs; each match adds the spam weight once.
SPAM_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(.)\1{10,}", re.DOTALL), "spam: repeated characters"),
    (re.compile(r"https?://\S+", re.IGNORECASE), "spam: contains URL"),
    (re.compile(r"\d{3}-\d{4}-\d{4}"), "spam: phone number"),
)


@dataclass
class ModerationResult:
    """Outcome of scanning a piece of text."""

    action: ModerationAction = ModerationAction.NONE
    confidence: float = 0.0
    reasons: list[str] = field(default_factory=list)
    auto_blocked: bool = False
    # Keyword filters could not be loaded; only spam patterns were applied.
    degraded: bool = False
    report_id: int | None = None
    # The block verdict stands but the system report/audit entry was not written.
    write_failed: bool = False


def match_keywords(text: str, filters: Iterable[KeywordFilter]) -> tuple[list[str], float]:
    """Return reasons and confidence contributed by keyword filters found in ``text``."""
    lowered = text.lower()
    reasons: list[str] = []
    confidence = 0.0
    for keyword_filter in filters:
        keyword = (keyword_filter.keyword or "").lower()
        if not keyword or keyword not in lowered:
            continue
        reasons.append(f"keyword: {keyword} ({keyword_filter.severity})")
        if keyword_filter.severity == FilterSeverity.HIGH.value:
            confidence += settings.keyword_high_weight
        else:
            confidence += settings.keyword_default_weight
    return reasons, confidence


def match_spam_patterns(text: str) -> tuple[list[str], float]:
    """Return reasons and confidence contributed by the fixed spam patterns."""
    reasons = [reason for pattern, reason in SPAM_PATTERNS if pattern.search(text)]
    return reasons, len(reasons) * settings.spam_pattern_weight


class RuleEngine:
    """Scans content against keyword filters and spam patterns."""

    def __init__(
        self,
        keyword_store: KeywordFilterStore,
        report_store: ReportStore,
        security_log: SecurityLogService,
        content_store: ContentStore | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.keyword_store = keyword_store
        self.report_store = report_store
        self.security_log = security_log
        self.content_store = content_store
        self.clock = clock

    def auto_moderate_content(
        self,
        content_type: ContentType | str,
        content_id: str,
        text: str,
    ) -> ModerationResult:
        """Score ``text`` and, at or above the block threshold, file a system report.

        Args:
            content_type: Kind of content being scanned.
            content_id: Identifier of the scanned content.
            text: Free text to scan.

        Returns:
            The scan verdict. ``write_failed`` is set when the block was decided
            but its report or audit entry could not be persisted.
        """
        content_type = getattr(content_type, "value", content_type)
        text = text or ""

        filters, degraded = read_or_default(
            lambda: list(self.keyword_store.list_active()),
            [],
            operation="keyword_filters.list_active",
        )
        keyword_reasons, keyword_confidence = match_keywords(text, filters)
        spam_reasons, spam_confidence = match_spam_patterns(text)

        confidence = round(keyword_confidence + spam_confidence, 6)
        result = ModerationResult(
            confidence=confidence,
            reasons=keyword_reasons + spam_reasons,
            degraded=degraded,
        )
        if confidence < settings.block_confidence_threshold:
            return result

        result.action = ModerationAction.BLOCK
        result.auto_blocked = True
        logger.info(
            "Auto-moderation blocked %s %s (confidence=%.2f)",
            content_type,
            content_id,
            confidence,
        )
        try:
            self._file_block(content_type, content_id, result)
        except StoreUnavailableError:
            logger.error(
                "Failed to persist auto-moderation block for %s %s",
                content_type,
                content_id,
                exc_info=True,
            )
            result.write_failed = True
        return result

    def _author_of(self, content_type: str, content_id: str) -> str | None:
        # Content may be scanned before it is stored.
        if self.content_store is None:
            return None
        item = self.content_store.get(content_type, content_id)
        return item.author_id if item is not None else None

    def _file_block(self, content_type: str, content_id: str, result: ModerationResult) -> None:
        author_id = self._author_of(content_type, content_id)
        fields = {
            "content_type": content_type,
            "content_id": content_id,
            "content_author_id": author_id,
            "reason": ReportReason.INAPPROPRIATE.value,
            "description": "; ".join(result.reasons),
            "reporter_id": SYSTEM_ACTOR_ID,
            "status": ReportStatus.PENDING.value,
            "duplicate_reports": self.report_store.count_for_content(content_type, content_id),
            "author_violation_count": (
                self.report_store.count_approved_for_author(author_id) if author_id else 0
            ),
            "auto_generated": True,
            "created_at": self.clock(),
        }
        fields["priority"] = max(settings.auto_report_priority, score_report_fields(fields))
        report = self.report_store.create(fields)
        result.report_id = report.id
        self.security_log.log_event(
            SecurityEventType.AUTO_MODERATION_BLOCK,
            {
                "contentType": content_type,
                "contentId": content_id,
                "reportId": report.id,
                "confidence": result.confidence,
                "reasons": list(result.reasons),
            },
            severity=LogSeverity.HIGH,
        )

    def list_keywords(self) -> list[KeywordFilter]:
        return list(self.keyword_store.list_all())

    def add_keyword(
        self,
        keyword: str,
        severity: FilterSeverity | str = FilterSeverity.MEDIUM,
    ) -> KeywordFilter:
        """Register a keyword filter; the keyword is stored lowercased."""
        normalized = (keyword or "").strip().lower()
        if not normalized:
            raise InvalidInputError("Keyword must not be empty")
        try:
            severity = FilterSeverity(getattr(severity, "value", severity))
        except ValueError as err:
            raise InvalidInputError(f"Unknown filter severity: {severity!r}") from err

        record = self.keyword_store.add(normalized, severity.value)
        self.security_log.log_event(
            SecurityEventType.KEYWORD_FILTER_ADDED,
            {"term": normalized, "severity": severity.value},
        )
        return record

    def remove_keyword(self, filter_id: int) -> None:
        if not self.keyword_store.remove(filter_id):
            raise NotFoundError(f"Keyword filter {filter_id} not found")
        self.security_log.log_event(
            SecurityEventType.KEYWORD_FILTER_REMOVED,
            {"filterId": filter_id},
        )
