# src/moderation_engine/models/report.py
"""Models tracking user reports against content."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from moderation_engine.db.session import Base
from moderation_engine.db.time import utcnow
from moderation_engine.models.enums import ReportStatus


class Report(Base):
    """A user (or the rule engine) flagging a note or comment for review.

    Status moves ``pending -> approved | rejected`` exactly once. Every status
    write bumps ``version`` so conditional updates can detect lost races.
    """

    __tablename__ = "report"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content_type: Mapped[str] = mapped_column(String(16), nullable=False)
    content_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    # Author of the reported content at submission time.
    content_author_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    reason: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    reporter_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=ReportStatus.PENDING.value,
        index=True,
    )
    # Snapshot only; triage recomputes from the fields below.
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    duplicate_reports: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    author_violation_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    auto_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    auto_processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    admin_note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    processed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
