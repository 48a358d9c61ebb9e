"""Tests for the SQLAlchemy store adapters."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from moderation_engine.core.errors import InvalidInputError, StoreUnavailableError
from moderation_engine.models import KeywordFilter
from moderation_engine.repositories import (
    SqlBlockedIPStore,
    SqlContentStore,
    SqlKeywordFilterStore,
    SqlReportStore,
    SqlUserStore,
)


def test_update_status_is_conditional_on_status_and_version(report_store, make_report) -> None:
    report = make_report()

    assert not report_store.update_status(
        report.id, {"status": "approved"}, expected_status="rejected"
    )
    assert not report_store.update_status(
        report.id, {"status": "approved"}, expected_status="pending", expected_version=5
    )
    assert report_store.update_status(
        report.id, {"status": "approved"}, expected_status="pending", expected_version=1
    )
    assert not report_store.update_status(
        report.id, {"status": "rejected"}, expected_status="pending"
    )

    stored = report_store.get(report.id)
    assert stored.status == "approved"
    assert stored.version == 2


def test_driver_errors_become_store_unavailable() -> None:
    session = MagicMock()
    session.execute.side_effect = OperationalError("UPDATE report", {}, Exception("locked"))

    with pytest.raises(StoreUnavailableError):
        SqlReportStore(session).update_status(1, {"status": "approved"}, "pending")

    session.rollback.assert_called_once()


def test_content_store_reads_and_deletes(content_store, make_comment) -> None:
    comment = make_comment(author_id="writer", body="hello")

    item = content_store.get("comment", comment.id)
    assert (item.author_id, item.text) == ("writer", "hello")

    assert content_store.delete("comment", comment.id) is True
    assert content_store.delete("comment", comment.id) is False
    assert content_store.get("comment", comment.id) is None


def test_content_store_rejects_unknown_type(content_store) -> None:
    with pytest.raises(InvalidInputError):
        content_store.get("video", "v-1")


def test_keyword_store_lists_only_active_filters(db_session) -> None:
    store = SqlKeywordFilterStore(db_session)
    store.add("scam", "high")
    db_session.add(KeywordFilter(keyword="retired", severity="low", is_active=False))
    db_session.commit()

    assert [f.keyword for f in store.list_active()] == ["scam"]
    assert [f.keyword for f in store.list_all()] == ["scam", "retired"]


def test_content_store_get_failure(db_session, mocker) -> None:
    mocker.patch.object(
        db_session, "get", side_effect=OperationalError("SELECT", {}, Exception("gone"))
    )
    with pytest.raises(StoreUnavailableError):
        SqlContentStore(db_session).get("note", "n-1")


def test_blocked_ip_deactivation_is_conditional(db_session) -> None:
    store = SqlBlockedIPStore(db_session)
    block = store.add({"ip": "192.0.2.7", "reason": ""})

    assert store.find_active("192.0.2.7").id == block.id
    assert store.deactivate(block.id, {"unblocked_by": "admin-1"}) is True
    assert store.deactivate(block.id, {"unblocked_by": "admin-2"}) is False

    stored = store.get(block.id)
    assert stored.is_active is False
    assert stored.unblocked_by == "admin-1"
    assert store.find_active("192.0.2.7") is None


def test_user_store_status_update(db_session, make_user) -> None:
    store = SqlUserStore(db_session)
    make_user("u1")

    assert store.update_status("u1", {"status": "suspended"}) is True
    assert store.update_status("missing", {"status": "suspended"}) is False
    assert store.get("u1").status == "suspended"
    assert [user.status for user in store.list_recent(10)] == ["suspended"]
