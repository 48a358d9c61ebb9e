"""Tests for keyword and spam-pattern scanning."""

from unittest.mock import MagicMock

import pytest

from moderation_engine.core.errors import InvalidInputError, NotFoundError, StoreUnavailableError
from moderation_engine.models import KeywordFilter, Report
from moderation_engine.models.enums import ModerationAction
from moderation_engine.services.rule_engine import (
    RuleEngine,
    match_keywords,
    match_spam_patterns,
)
from moderation_engine.services.security_log import SecurityLogService


def test_spam_patterns_each_count_once() -> None:
    reasons, confidence = match_spam_patterns(
        "aaaaaaaaaaaaa visit http://spam.example and http://other.example call 010-1234-5678"
    )

    assert reasons == [
        "spam: repeated characters",
        "spam: contains URL",
        "spam: phone number",
    ]
    assert confidence == pytest.approx(0.9)


def test_repeated_characters_need_eleven_in_a_row() -> None:
    reasons, _ = match_spam_patterns("a" * 10)
    assert reasons == []
    reasons, _ = match_spam_patterns("a" * 11)
    assert reasons == ["spam: repeated characters"]


def test_keyword_matching_is_case_insensitive_substring() -> None:
    filters = [
        KeywordFilter(keyword="scam", severity="high"),
        KeywordFilter(keyword="cheap", severity="medium"),
        KeywordFilter(keyword="absent", severity="low"),
    ]

    reasons, confidence = match_keywords("Totally not a SCAM, very CHEAPskate", filters)

    assert reasons == ["keyword: scam (high)", "keyword: cheap (medium)"]
    assert confidence == pytest.approx(0.6)


def test_clean_text_is_not_blocked(rule_engine, db_session) -> None:
    result = rule_engine.auto_moderate_content("note", "note-1", "A perfectly normal note")

    assert result.action is ModerationAction.NONE
    assert result.confidence == 0
    assert result.reasons == []
    assert db_session.query(Report).count() == 0


def test_block_at_threshold_files_system_report(rule_engine, db_session, security_events) -> None:
    rule_engine.add_keyword("scam", "high")
    rule_engine.add_keyword("prize", "high")

    result = rule_engine.auto_moderate_content("note", "note-1", "Claim your scam prize now")

    assert result.confidence == pytest.approx(0.8)
    assert result.action is ModerationAction.BLOCK
    assert result.auto_blocked is True
    assert result.write_failed is False

    report = db_session.get(Report, result.report_id)
    assert report.reporter_id == "system"
    assert report.reason == "inappropriate"
    assert report.status == "pending"
    assert report.priority == 8
    assert report.auto_generated is True
    assert report.description == "keyword: scam (high); keyword: prize (high)"

    [event] = security_events("AUTO_MODERATION_BLOCK")
    assert event.severity == "HIGH"
    assert event.details["reportId"] == result.report_id


def test_system_report_scores_from_content_history(
    rule_engine, make_note, make_report, db_session
) -> None:
    note = make_note(author_id="repeat-offender")
    for _ in range(6):
        make_report(content_id="older", content_author_id="repeat-offender", status="approved")
    for _ in range(11):
        make_report(content_id=note.id, content_author_id="repeat-offender")
    rule_engine.add_keyword("scam", "high")
    rule_engine.add_keyword("prize", "high")

    result = rule_engine.auto_moderate_content("note", note.id, "Claim your scam prize now")

    report = db_session.get(Report, result.report_id)
    assert report.content_author_id == "repeat-offender"
    assert report.duplicate_reports == 11
    assert report.author_violation_count == 6
    assert report.priority == 10


def test_system_report_outranks_ordinary_reports_in_queue(rule_engine, triage, make_report) -> None:
    violent = make_report(reason="violence", content_id="note-a")
    make_report(reason="harassment", content_id="note-b")
    rule_engine.add_keyword("scam", "high")
    rule_engine.add_keyword("prize", "high")

    result = rule_engine.auto_moderate_content("note", "note-c", "Claim your scam prize now")
    queue = triage.get_pending_reports()

    assert [item.report.id for item in queue][:2] == [result.report_id, violent.id]
    assert queue[0].priority == 8
    assert queue[1].priority == 5


def test_just_below_threshold_does_not_block(rule_engine) -> None:
    rule_engine.add_keyword("scam", "high")
    rule_engine.add_keyword("cheap", "medium")

    result = rule_engine.auto_moderate_content("note", "note-1", "cheap scam")

    assert result.confidence == pytest.approx(0.6)
    assert result.action is ModerationAction.NONE
    assert result.report_id is None


def test_confidence_grows_with_more_matches(rule_engine) -> None:
    rule_engine.add_keyword("scam", "medium")
    texts = [
        "hello",
        "scam",
        "scam http://x.example",
        "scam http://x.example 010-1234-5678",
        "scam http://x.example 010-1234-5678 zzzzzzzzzzzz",
    ]

    scores = [rule_engine.auto_moderate_content("note", "n", text).confidence for text in texts]

    assert scores == sorted(scores)
    assert scores[-1] > scores[0]


def test_keyword_store_failure_degrades_to_patterns_only(security_log) -> None:
    keyword_store = MagicMock()
    keyword_store.list_active.side_effect = StoreUnavailableError("down")
    engine = RuleEngine(keyword_store, MagicMock(), security_log)

    result = engine.auto_moderate_content("comment", "c-1", "see https://spam.example")

    assert result.degraded is True
    assert result.reasons == ["spam: contains URL"]
    assert keyword_store.list_active.call_count == 3


def test_report_write_failure_keeps_block_verdict() -> None:
    keyword_store = MagicMock()
    keyword_store.list_active.return_value = [KeywordFilter(keyword="scam", severity="high")]
    report_store = MagicMock()
    report_store.count_for_content.return_value = 0
    report_store.create.side_effect = StoreUnavailableError("down")
    security_log = MagicMock(spec=SecurityLogService)
    engine = RuleEngine(keyword_store, report_store, security_log)

    text = "scam scam https://a.example 555-1234-5678"
    result = engine.auto_moderate_content("note", "n-1", text)

    assert result.action is ModerationAction.BLOCK
    assert result.write_failed is True
    assert result.report_id is None
    security_log.log_event.assert_not_called()


def test_add_keyword_normalizes_and_audits(rule_engine, security_events) -> None:
    record = rule_engine.add_keyword("  ScAm  ", "high")

    assert record.keyword == "scam"
    assert record.severity == "high"
    assert [f.keyword for f in rule_engine.list_keywords()] == ["scam"]
    [event] = security_events("KEYWORD_FILTER_ADDED")
    assert event.details == {"term": "scam", "severity": "high"}


@pytest.mark.parametrize(("keyword", "severity"), [("   ", "high"), ("scam", "extreme")])
def test_add_keyword_rejects_invalid_input(rule_engine, keyword, severity) -> None:
    with pytest.raises(InvalidInputError):
        rule_engine.add_keyword(keyword, severity)


def test_remove_keyword(rule_engine, security_events) -> None:
    record = rule_engine.add_keyword("scam")

    rule_engine.remove_keyword(record.id)

    assert rule_engine.list_keywords() == []
    [event] = security_events("KEYWORD_FILTER_REMOVED")
    assert event.details == {"filterId": record.id}


def test_remove_missing_keyword_raises(rule_engine) -> None:
    with pytest.raises(NotFoundError):
        rule_engine.remove_keyword(999)
