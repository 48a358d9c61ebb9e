"""Shared API dependencies wiring services to request-scoped stores."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from moderation_engine.db.session import get_db
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
from moderation_engine.services.detector import SuspiciousActivityDetector
from moderation_engine.services.ip_blocking import IPBlockService
from moderation_engine.services.refresh_worker import AnalyticsRefreshWorker
from moderation_engine.services.rule_engine import RuleEngine
from moderation_engine.services.security_log import SecurityLogService
from moderation_engine.services.triage import TriageProcessor
from moderation_engine.services.user_admin import UserAdminService

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_security_log_service(db: SessionDep) -> SecurityLogService:
    return SecurityLogService(SqlSecurityLogStore(db))


SecurityLogDep = Annotated[SecurityLogService, Depends(get_security_log_service)]


def get_rule_engine(db: SessionDep, security_log: SecurityLogDep) -> RuleEngine:
    return RuleEngine(
        SqlKeywordFilterStore(db),
        SqlReportStore(db),
        security_log,
        content_store=SqlContentStore(db),
    )


def get_triage_processor(db: SessionDep, security_log: SecurityLogDep) -> TriageProcessor:
    return TriageProcessor(SqlReportStore(db), SqlContentStore(db), security_log)


def get_detector(db: SessionDep) -> SuspiciousActivityDetector:
    return SuspiciousActivityDetector(SqlSecurityLogStore(db))


def get_analytics(db: SessionDep) -> AnalyticsAggregator:
    return AnalyticsAggregator(
        SqlReportStore(db),
        SqlUserStore(db),
        SqlNoteStore(db),
        SqlCommentStore(db),
        SqlSecurityLogStore(db),
    )


def get_ip_block_service(db: SessionDep, security_log: SecurityLogDep) -> IPBlockService:
    return IPBlockService(SqlBlockedIPStore(db), security_log)


def get_user_admin(db: SessionDep, security_log: SecurityLogDep) -> UserAdminService:
    return UserAdminService(SqlUserStore(db), SqlNoteStore(db), SqlCommentStore(db), security_log)


def get_refresh_worker(request: Request) -> AnalyticsRefreshWorker | None:
    """Return the running refresh worker, if the app started one."""
    return getattr(request.app.state, "refresh_worker", None)


RuleEngineDep = Annotated[RuleEngine, Depends(get_rule_engine)]
TriageDep = Annotated[TriageProcessor, Depends(get_triage_processor)]
DetectorDep = Annotated[SuspiciousActivityDetector, Depends(get_detector)]
AnalyticsDep = Annotated[AnalyticsAggregator, Depends(get_analytics)]
RefreshWorkerDep = Annotated[AnalyticsRefreshWorker | None, Depends(get_refresh_worker)]
IPBlockDep = Annotated[IPBlockService, Depends(get_ip_block_service)]
UserAdminDep = Annotated[UserAdminService, Depends(get_user_admin)]
