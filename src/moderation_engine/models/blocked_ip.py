# src/moderation_engine/models/blocked_ip.py
"""IP addresses barred by an admin."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from moderation_engine.db.session import Base
from moderation_engine.db.time import utcnow


class BlockedIP(Base):
    """A block on one address. Unblocking deactivates the row instead of deleting it."""

    __tablename__ = "blocked_ip"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ip: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    blocked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    blocked_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    unblocked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    unblocked_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
