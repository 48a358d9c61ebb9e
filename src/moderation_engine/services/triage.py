"""Report triage: submission, automatic resolution and manual decisions.

A report transitions ``pending -> approved | rejected`` once. Every transition
is a conditional write against the status (and version) read earlier, so two
deciders racing on the same report produce exactly one terminal state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from moderation_engine.core.errors import (
    ContentDeletionError,
    InvalidInputError,
    NotFoundError,
    StoreUnavailableError,
)
from moderation_engine.core.settings import settings
from moderation_engine.db.time import ensure_utc, utcnow
from moderation_engine.models import Report
from moderation_engine.models.enums import (
    Actor,
    ContentType,
    LogSeverity,
    ReportReason,
    ReportStatus,
    SecurityEventType,
)
from moderation_engine.repositories.ports import ContentItem, ContentStore, ReportStore
from moderation_engine.services.priority import calculate_report_priority, score_report_fields
from moderation_engine.services.security_log import SecurityLogService

logger = logging.getLogger(__name__)

TERMINAL_ACTIONS = (ReportStatus.APPROVED, ReportStatus.REJECTED)


@dataclass(frozen=True)
class TriageRule:
    """One row of the automatic decision table."""

    name: str
    action: ReportStatus
    note: str
    matches: Callable[[Report, int], bool]


def _severe_violation(report: Report, priority: int) -> bool:
    return priority >= 8 and report.reason in (
        ReportReason.VIOLENCE.value,
        ReportReason.HATE_SPEECH.value,
    )


def _duplicate_spam(report: Report, priority: int) -> bool:
    return (report.duplicate_reports or 0) > 10 and report.reason == ReportReason.SPAM.value


def _insufficient_grounds(report: Report, priority: int) -> bool:
    return (
        priority <= 2
        and report.reason == ReportReason.OTHER.value
        and not (report.description or "").strip()
    )


# Evaluated in order; the first match wins.
AUTO_RULES: tuple[TriageRule, ...] = (
    TriageRule(
        "severe_violation",
        ReportStatus.APPROVED,
        "auto: severe violation",
        _severe_violation,
    ),
    TriageRule(
        "duplicate_spam",
        ReportStatus.APPROVED,
        "auto: many duplicate spam reports",
        _duplicate_spam,
    ),
    TriageRule(
        "insufficient_grounds",
        ReportStatus.REJECTED,
        "auto: insufficient grounds",
        _insufficient_grounds,
    ),
)


def match_auto_rule(report: Report, priority: int) -> TriageRule | None:
    """Return the first rule of the decision table that applies to ``report``."""
    for rule in AUTO_RULES:
        if rule.matches(report, priority):
            return rule
    return None


def queue_priority(report: Report) -> int:
    """Rank used by the review queue.

    User reports are rescored from their current fields. Reports filed by the
    rule engine never rank below the priority they were filed with, because
    the scan confidence that justified them is not part of the score.
    """
    priority = calculate_report_priority(report)
    if report.auto_generated:
        priority = max(priority, report.priority or 0)
    return priority


@dataclass
class TriageOutcome:
    processed: bool
    action: ReportStatus | None = None
    reason: str | None = None


@dataclass
class QueuedReport:
    report: Report
    priority: int
    content: ContentItem | None


class TriageProcessor:
    """Applies the automatic decision table and records admin decisions."""

    def __init__(
        self,
        report_store: ReportStore,
        content_store: ContentStore,
        security_log: SecurityLogService,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.report_store = report_store
        self.content_store = content_store
        self.security_log = security_log
        self.clock = clock

    def _load(self, report_id: int) -> Report:
        report = self.report_store.get(report_id)
        if report is None:
            raise NotFoundError(f"Report {report_id} not found")
        return report

    def auto_process_report(self, report_id: int) -> TriageOutcome:
        """Resolve a pending report without human input when a rule applies.

        Returns ``processed=False`` when no rule matches, when the report is no
        longer pending, or when a concurrent decision won the conditional write.

        Raises:
            NotFoundError: If the report does not exist.
            StoreUnavailableError: If the status write fails. Never retried.
        """
        report = self._load(report_id)
        if report.status != ReportStatus.PENDING.value:
            logger.debug("Report %s already %s; skipping auto-processing", report_id, report.status)
            return TriageOutcome(processed=False)

        priority = calculate_report_priority(report)
        rule = match_auto_rule(report, priority)
        if rule is None:
            return TriageOutcome(processed=False)

        actor = Actor.system()
        version = report.version
        applied = self.report_store.update_status(
            report_id,
            {
                "status": rule.action.value,
                "admin_note": rule.note,
                "processed_at": self.clock(),
                "processed_by": actor.as_stored(),
                "auto_processed": True,
                "priority": priority,
            },
            expected_status=ReportStatus.PENDING.value,
            expected_version=version,
        )
        if not applied:
            logger.info("Report %s changed concurrently; auto-processing skipped", report_id)
            return TriageOutcome(processed=False)

        logger.info("Report %s auto-%s by rule %s", report_id, rule.action.value, rule.name)
        if rule.action is ReportStatus.APPROVED and settings.auto_approve_deletes_content:
            self._delete_content(report, rule.action, claimed_version=version + 1)

        self._audit(
            SecurityEventType.REPORT_AUTO_PROCESSED,
            {
                "reportId": report_id,
                "action": rule.action.value,
                "rule": rule.name,
                "priority": priority,
                "contentType": report.content_type,
                "contentId": report.content_id,
            },
        )
        return TriageOutcome(processed=True, action=rule.action, reason=rule.note)

    def process_report(
        self,
        report_id: int,
        action: ReportStatus | str,
        admin_note: str,
        actor: Actor,
    ) -> bool:
        """Record an admin decision; approval deletes the reported content.

        The report is claimed with a conditional write before anything is
        deleted. If deletion then fails, the claim is reverted so the report
        stays reviewable, and ``ContentDeletionError`` is raised.

        Returns:
            True if this call transitioned the report, False if it was no longer
            pending.

        Raises:
            InvalidInputError: If ``action`` is not approved/rejected or
                ``actor`` is not an admin.
            NotFoundError: If the report does not exist.
            StoreUnavailableError: If the status write fails.
            ContentDeletionError: If the content could not be deleted.
        """
        try:
            decision = ReportStatus(getattr(action, "value", action))
        except ValueError as err:
            raise InvalidInputError(f"Unsupported action: {action!r}") from err
        if decision not in TERMINAL_ACTIONS:
            raise InvalidInputError("Action must be 'approved' or 'rejected'")

        if not isinstance(actor, Actor) or actor.is_system:
            raise InvalidInputError("Manual decisions must be attributed to an admin")
        report = self._load(report_id)
        if report.status != ReportStatus.PENDING.value:
            logger.info("Report %s already %s; manual decision ignored", report_id, report.status)
            return False

        version = report.version
        applied = self.report_store.update_status(
            report_id,
            {
                "status": decision.value,
                "admin_note": admin_note,
                "processed_at": self.clock(),
                "processed_by": actor.as_stored(),
                "priority": calculate_report_priority(report),
            },
            expected_status=ReportStatus.PENDING.value,
            expected_version=version,
        )
        if not applied:
            logger.info("Report %s changed concurrently; manual decision ignored", report_id)
            return False

        if decision is ReportStatus.APPROVED:
            self._delete_content(report, decision, claimed_version=version + 1)

        logger.info("Report %s %s by %s", report_id, decision.value, actor.as_stored())
        self._audit(
            SecurityEventType.REPORT_PROCESSED,
            {
                "reportId": report_id,
                "action": decision.value,
                "processedBy": actor.as_stored(),
                "contentType": report.content_type,
                "contentId": report.content_id,
            },
            user_uid=actor.user_id,
        )
        return True

    def _delete_content(
        self,
        report: Report,
        claimed_status: ReportStatus,
        claimed_version: int,
    ) -> None:
        try:
            deleted = self.content_store.delete(report.content_type, report.content_id)
        except StoreUnavailableError as exc:
            logger.error(
                "Deleting %s %s for report %s failed; reverting decision",
                report.content_type,
                report.content_id,
                report.id,
                exc_info=True,
            )
            reverted = self._revert_claim(report.id, claimed_status, claimed_version)
            raise ContentDeletionError(
                f"Could not delete {report.content_type} {report.content_id}",
                reverted=reverted,
            ) from exc
        if not deleted:
            logger.info(
                "Content %s %s for report %s was already deleted",
                report.content_type,
                report.content_id,
                report.id,
            )

    def _revert_claim(
        self,
        report_id: int,
        claimed_status: ReportStatus,
        claimed_version: int,
    ) -> bool:
        try:
            return self.report_store.update_status(
                report_id,
                {
                    "status": ReportStatus.PENDING.value,
                    "admin_note": None,
                    "processed_at": None,
                    "processed_by": None,
                    "auto_processed": False,
                },
                expected_status=claimed_status.value,
                expected_version=claimed_version,
            )
        except StoreUnavailableError:
            logger.error("Reverting report %s failed", report_id, exc_info=True)
            return False

    def _audit(
        self,
        event_type: SecurityEventType,
        details: dict,
        user_uid: str | None = None,
    ) -> None:
        # The transition is already committed; a missing audit row must not undo it.
        try:
            self.security_log.log_event(
                event_type,
                details,
                severity=LogSeverity.MEDIUM,
                user_uid=user_uid,
            )
        except StoreUnavailableError:
            logger.error("Failed to write %s audit entry", event_type.value, exc_info=True)

    def submit_report(
        self,
        content_type: ContentType | str,
        content_id: str,
        reason: ReportReason | str,
        description: str | None,
        reporter_id: str,
    ) -> Report:
        """File a user report against a note or comment.

        Raises:
            InvalidInputError: On unknown content type or reason, a missing
                reporter, or a repeat report of the same content by the same user.
            NotFoundError: If the content does not exist.
        """
        try:
            content_type = ContentType(getattr(content_type, "value", content_type))
            reason = ReportReason(getattr(reason, "value", reason))
        except ValueError as err:
            raise InvalidInputError(str(err)) from err
        if not reporter_id:
            raise InvalidInputError("Reporter is required")
        if not content_id:
            raise InvalidInputError("Content id is required")

        if self.report_store.exists_for_reporter(content_type.value, content_id, reporter_id):
            raise InvalidInputError("Content already reported by this user")

        content = self.content_store.get(content_type.value, content_id)
        if content is None:
            raise NotFoundError(f"{content_type.value} {content_id} not found")

        fields = {
            "content_type": content_type.value,
            "content_id": content_id,
            "content_author_id": content.author_id,
            "reason": reason.value,
            "description": (description or "").strip() or None,
            "reporter_id": reporter_id,
            "status": ReportStatus.PENDING.value,
            "duplicate_reports": self.report_store.count_for_content(
                content_type.value, content_id
            ),
            "author_violation_count": self.report_store.count_approved_for_author(
                content.author_id
            ),
            "created_at": self.clock(),
        }
        fields["priority"] = score_report_fields(fields)
        report = self.report_store.create(fields)
        logger.info(
            "Report %s filed against %s %s (priority %s)",
            report.id,
            content_type.value,
            content_id,
            report.priority,
        )
        self._audit(
            SecurityEventType.REPORT_SUBMITTED,
            {
                "reportId": report.id,
                "contentType": content_type.value,
                "contentId": content_id,
                "reason": reason.value,
            },
            user_uid=reporter_id,
        )
        return report

    def get_pending_reports(self) -> list[QueuedReport]:
        """Return the review queue, most urgent first, with content previews."""
        queue: list[QueuedReport] = []
        for report in self.report_store.query_by_status(ReportStatus.PENDING.value):
            try:
                content = self.content_store.get(report.content_type, report.content_id)
            except (StoreUnavailableError, InvalidInputError):
                logger.warning("Content lookup for report %s failed", report.id)
                content = None
            queue.append(QueuedReport(report, queue_priority(report), content))

        queue.sort(key=lambda item: ensure_utc(item.report.created_at), reverse=True)
        queue.sort(key=lambda item: item.priority, reverse=True)
        return queue

    def get_user_reports(self, reporter_id: str) -> list[Report]:
        return list(self.report_store.query_by_reporter(reporter_id))

    def get_content_report_count(self, content_type: ContentType | str, content_id: str) -> int:
        return self.report_store.count_for_content(
            getattr(content_type, "value", content_type), content_id
        )
