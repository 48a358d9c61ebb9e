# src/moderation_engine/models/security_log.py
"""Append-only security event log."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from moderation_engine.db.session import Base
from moderation_engine.db.time import utcnow
from moderation_engine.models.enums import LogSeverity


class SecurityLogEntry(Base):
    """Audit and abuse-detection record. Rows are never updated."""

    __tablename__ = "security_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    severity: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=LogSeverity.LOW.value,
    )
    ip: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    user_uid: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    user_agent: Mapped[str | None] = mapped_column(String(256), nullable=True)
    request_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )
    details: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
