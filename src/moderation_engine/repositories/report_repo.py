"""Data access helpers for working with reports."""
from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy import func, select, update

from moderation_engine.models import Report
from moderation_engine.models.enums import ReportStatus
from moderation_engine.repositories.base import SqlStore

__all__ = ["SqlReportStore"]


class SqlReportStore(SqlStore):
    """Report persistence with status-conditional writes."""

    def get(self, report_id: int) -> Report | None:
        """Return a report by identifier, refreshed from the database."""
        with self._guard("get"):
            return self.session.get(Report, report_id, populate_existing=True)

    def create(self, fields: Mapping[str, Any]) -> Report:
        """Insert a new report and return the persisted ORM instance."""
        with self._guard("create"):
            report = Report(**dict(fields))
            self.session.add(report)
            self.session.commit()
            self.session.refresh(report)
            return report

    def update_status(
        self,
        report_id: int,
        fields: Mapping[str, Any],
        expected_status: str,
        expected_version: int | None = None,
    ) -> bool:
        """Apply ``fields`` only while the row still has ``expected_status``.

        Returns False when another writer transitioned the report first.
        """
        stmt = update(Report).where(
            Report.id == report_id,
            Report.status == expected_status,
        )
        if expected_version is not None:
            stmt = stmt.where(Report.version == expected_version)
        stmt = stmt.values(**dict(fields), version=Report.version + 1).execution_options(
            synchronize_session=False
        )
        with self._guard("update_status"):
            result = self.session.execute(stmt)
            self.session.commit()
            return result.rowcount == 1

    def _all(self, stmt: Any) -> list[Report]:
        return list(self.session.scalars(stmt.execution_options(populate_existing=True)))

    def query_by_status(self, status: str) -> list[Report]:
        """Return reports with the given status, newest first."""
        with self._guard("query_by_status"):
            return self._all(
                select(Report).where(Report.status == status).order_by(Report.created_at.desc())
            )

    def query_created_since(self, since: datetime) -> list[Report]:
        """Return reports created at or after ``since`` in creation order."""
        with self._guard("query_created_since"):
            return self._all(
                select(Report).where(Report.created_at >= since).order_by(Report.created_at)
            )

    def query_by_reporter(self, reporter_id: str) -> list[Report]:
        """Return a reporter's reports, newest first."""
        with self._guard("query_by_reporter"):
            return self._all(
                select(Report)
                .where(Report.reporter_id == reporter_id)
                .order_by(Report.created_at.desc())
            )

    def count_all(self) -> int:
        with self._guard("count_all"):
            return self.session.scalar(select(func.count()).select_from(Report)) or 0

    def count_for_content(self, content_type: str, content_id: str) -> int:
        with self._guard("count_for_content"):
            return self.session.scalar(
                select(func.count()).where(
                    Report.content_type == content_type,
                    Report.content_id == content_id,
                )
            ) or 0

    def exists_for_reporter(self, content_type: str, content_id: str, reporter_id: str) -> bool:
        with self._guard("exists_for_reporter"):
            found = self.session.scalar(
                select(Report.id)
                .where(
                    Report.content_type == content_type,
                    Report.content_id == content_id,
                    Report.reporter_id == reporter_id,
                )
                .limit(1)
            )
            return found is not None

    def count_approved_for_author(self, author_id: str) -> int:
        """Count approved reports against content written by ``author_id``."""
        with self._guard("count_approved_for_author"):
            return self.session.scalar(
                select(func.count()).where(
                    Report.content_author_id == author_id,
                    Report.status == ReportStatus.APPROVED.value,
                )
            ) or 0
