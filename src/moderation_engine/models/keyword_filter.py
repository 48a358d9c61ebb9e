# src/moderation_engine/models/keyword_filter.py
"""Keyword filters consulted by the rule engine."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from moderation_engine.db.session import Base
from moderation_engine.db.time import utcnow
from moderation_engine.models.enums import FilterSeverity


class KeywordFilter(Base):
    """A lowercased keyword with a severity weight."""

    __tablename__ = "keyword_filter"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    keyword: Mapped[str] = mapped_column(String(128), nullable=False)
    severity: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=FilterSeverity.MEDIUM.value,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
