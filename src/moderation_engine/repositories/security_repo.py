"""Data access helpers for the security log, keyword filters and IP blocks."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select, update

from moderation_engine.models import BlockedIP, KeywordFilter, SecurityLogEntry
from moderation_engine.repositories.base import SqlStore

__all__ = ["SqlBlockedIPStore", "SqlKeywordFilterStore", "SqlSecurityLogStore"]


class SqlSecurityLogStore(SqlStore):
    """Append-only access to the security log."""

    def append(self, entry: Mapping[str, Any]) -> SecurityLogEntry:
        with self._guard("append"):
            record = SecurityLogEntry(**dict(entry))
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
            return record

    def query_since(self, since: datetime, limit: int | None = None) -> list[SecurityLogEntry]:
        stmt = (
            select(SecurityLogEntry)
            .where(SecurityLogEntry.timestamp >= since)
            .order_by(SecurityLogEntry.timestamp.desc(), SecurityLogEntry.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._guard("query_since"):
            return list(self.session.scalars(stmt))

    def count_by_severity(self, severities: Sequence[str]) -> int:
        with self._guard("count_by_severity"):
            return self.session.scalar(
                select(func.count()).where(SecurityLogEntry.severity.in_(list(severities)))
            ) or 0


class SqlKeywordFilterStore(SqlStore):
    """Keyword filter persistence."""

    def list_active(self) -> list[KeywordFilter]:
        with self._guard("list_active"):
            return list(
                self.session.scalars(
                    select(KeywordFilter)
                    .where(KeywordFilter.is_active.is_(True))
                    .order_by(KeywordFilter.id)
                )
            )

    def list_all(self) -> list[KeywordFilter]:
        with self._guard("list_all"):
            return list(self.session.scalars(select(KeywordFilter).order_by(KeywordFilter.id)))

    def add(self, keyword: str, severity: str) -> KeywordFilter:
        with self._guard("add"):
            record = KeywordFilter(keyword=keyword, severity=severity, is_active=True)
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
            return record

    def remove(self, filter_id: int) -> bool:
        with self._guard("remove"):
            result = self.session.execute(
                delete(KeywordFilter).where(KeywordFilter.id == filter_id)
            )
            self.session.commit()
            return result.rowcount > 0


class SqlBlockedIPStore(SqlStore):
    """IP block persistence; rows are deactivated, never deleted."""

    def get(self, block_id: int) -> BlockedIP | None:
        with self._guard("get"):
            return self.session.get(BlockedIP, block_id, populate_existing=True)

    def list_all(self) -> list[BlockedIP]:
        with self._guard("list_all"):
            return list(
                self.session.scalars(
                    select(BlockedIP)
                    .order_by(BlockedIP.blocked_at.desc(), BlockedIP.id.desc())
                    .execution_options(populate_existing=True)
                )
            )

    def find_active(self, ip: str) -> BlockedIP | None:
        with self._guard("find_active"):
            return self.session.scalars(
                select(BlockedIP)
                .where(BlockedIP.ip == ip, BlockedIP.is_active.is_(True))
                .order_by(BlockedIP.id)
                .limit(1)
                .execution_options(populate_existing=True)
            ).first()

    def add(self, fields: Mapping[str, Any]) -> BlockedIP:
        with self._guard("add"):
            record = BlockedIP(**dict(fields), is_active=True)
            self.session.add(record)
            self.session.commit()
            self.session.refresh(record)
            return record

    def deactivate(self, block_id: int, fields: Mapping[str, Any]) -> bool:
        with self._guard("deactivate"):
            result = self.session.execute(
                update(BlockedIP)
                .where(BlockedIP.id == block_id, BlockedIP.is_active.is_(True))
                .values(**dict(fields), is_active=False)
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
            return result.rowcount > 0
