# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from moderation_engine.core.settings import settings
from moderation_engine.db.session import Base
from moderation_engine.db.session import get_db as app_get_session
from moderation_engine.main import app as fastapi_app
from moderation_engine.models import Comment, Note, Report, SecurityLogEntry, User
from moderation_engine.repositories import (
    SqlBlockedIPStore,
    SqlCommentStore,
    SqlContentStore,
    SqlKeywordFilterStore,
    SqlNoteStore,
    SqlReportStore,
    SqlSecurityLogStore,
    SqlUserStore,
)
from moderation_engine.services.analytics import AnalyticsAggregator
from moderation_engine.services.ip_blocking import IPBlockService
from moderation_engine.services.rule_engine import RuleEngine
from moderation_engine.services.security_log import SecurityLogService
from moderation_engine.services.triage import TriageProcessor
from moderation_engine.services.user_admin import UserAdminService

TEST_DB_URL = "sqlite://"
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)

_CONTENT_COUNTER = count(1)


def fixed_clock() -> datetime:
    return NOW


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(autouse=True)
def fast_retries(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep degraded-read tests from sleeping between retries."""
    monkeypatch.setattr(settings, "read_retry_base_delay_seconds", 0.0)
    monkeypatch.setattr(settings, "read_retry_max_delay_seconds", 0.0)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def report_store(db_session: Session) -> SqlReportStore:
    return SqlReportStore(db_session)


@pytest.fixture()
def content_store(db_session: Session) -> SqlContentStore:
    return SqlContentStore(db_session)


@pytest.fixture()
def security_log_store(db_session: Session) -> SqlSecurityLogStore:
    return SqlSecurityLogStore(db_session)


@pytest.fixture()
def security_log(security_log_store: SqlSecurityLogStore) -> SecurityLogService:
    return SecurityLogService(security_log_store, clock=fixed_clock)


@pytest.fixture()
def triage(
    report_store: SqlReportStore,
    content_store: SqlContentStore,
    security_log: SecurityLogService,
) -> TriageProcessor:
    return TriageProcessor(report_store, content_store, security_log, clock=fixed_clock)


@pytest.fixture()
def rule_engine(
    db_session: Session,
    report_store: SqlReportStore,
    content_store: SqlContentStore,
    security_log: SecurityLogService,
) -> RuleEngine:
    return RuleEngine(
        SqlKeywordFilterStore(db_session),
        report_store,
        security_log,
        content_store=content_store,
        clock=fixed_clock,
    )


@pytest.fixture()
def aggregator(
    db_session: Session,
    report_store: SqlReportStore,
    security_log_store: SqlSecurityLogStore,
) -> AnalyticsAggregator:
    return AnalyticsAggregator(
        report_store,
        SqlUserStore(db_session),
        SqlNoteStore(db_session),
        SqlCommentStore(db_session),
        security_log_store,
        clock=fixed_clock,
    )


@pytest.fixture()
def ip_blocks(db_session: Session, security_log: SecurityLogService) -> IPBlockService:
    return IPBlockService(SqlBlockedIPStore(db_session), security_log, clock=fixed_clock)


@pytest.fixture()
def user_admin(db_session: Session, security_log: SecurityLogService) -> UserAdminService:
    return UserAdminService(
        SqlUserStore(db_session),
        SqlNoteStore(db_session),
        SqlCommentStore(db_session),
        security_log,
        clock=fixed_clock,
    )


@pytest.fixture()
def make_note(db_session: Session) -> Callable[..., Note]:
    """Create and return a persisted note."""

    def _make(
        author_id: str = "author-1",
        body: str = "Test note body",
        created_at: datetime = NOW,
        image_url: str | None = None,
    ) -> Note:
        note = Note(
            id=f"note-{next(_CONTENT_COUNTER)}",
            author_id=author_id,
            title="Test note",
            body=body,
            image_url=image_url,
            created_at=created_at,
        )
        db_session.add(note)
        db_session.commit()
        return note

    return _make


@pytest.fixture()
def make_comment(db_session: Session) -> Callable[..., Comment]:
    """Create and return a persisted comment."""

    def _make(
        author_id: str = "author-1",
        body: str = "Test comment",
        created_at: datetime = NOW,
        image_url: str | None = None,
        note_id: str | None = None,
    ) -> Comment:
        comment = Comment(
            id=f"comment-{next(_CONTENT_COUNTER)}",
            note_id=note_id,
            author_id=author_id,
            body=body,
            image_url=image_url,
            created_at=created_at,
        )
        db_session.add(comment)
        db_session.commit()
        return comment

    return _make


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Create and return a persisted user."""

    def _make(
        uid: str,
        created_at: datetime = NOW - timedelta(days=60),
        last_activity: datetime | None = None,
    ) -> User:
        user = User(uid=uid, display_name=uid, created_at=created_at, last_activity=last_activity)
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture()
def make_report(report_store: SqlReportStore) -> Callable[..., Report]:
    """Insert a report directly, bypassing submission checks."""

    def _make(**overrides: Any) -> Report:
        fields: dict[str, Any] = {
            "content_type": "note",
            "content_id": "note-x",
            "content_author_id": "author-1",
            "reason": "other",
            "description": "looks wrong",
            "reporter_id": f"reporter-{next(_CONTENT_COUNTER)}",
            "created_at": NOW,
        }
        fields.update(overrides)
        return report_store.create(fields)

    return _make


@pytest.fixture()
def security_events(db_session: Session) -> Callable[..., list[SecurityLogEntry]]:
    """Return persisted security log rows, optionally filtered by event type."""

    def _events(event_type: str | None = None) -> list[SecurityLogEntry]:
        query = db_session.query(SecurityLogEntry)
        if event_type is not None:
            query = query.filter(SecurityLogEntry.event_type == event_type)
        return query.order_by(SecurityLogEntry.id).all()

    return _events
