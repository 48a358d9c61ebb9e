"""Store ports the moderation services depend on.

Services receive implementations of these protocols at construction time. The
SQLAlchemy adapters in this package satisfy them; tests may substitute mocks.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from moderation_engine.models import BlockedIP, KeywordFilter, Report, SecurityLogEntry, User

__all__ = [
    "BlockedIPStore",
    "CommentStore",
    "ContentItem",
    "ContentStore",
    "KeywordFilterStore",
    "NoteStore",
    "ReportStore",
    "SecurityLogStore",
    "UserStore",
]


@dataclass(frozen=True)
class ContentItem:
    """Store-agnostic view of a note or comment."""

    content_type: str
    content_id: str
    author_id: str
    text: str
    title: str | None = None
    image_url: str | None = None


class ReportStore(Protocol):
    def get(self, report_id: int) -> Report | None: ...

    def create(self, fields: Mapping[str, Any]) -> Report: ...

    def update_status(
        self,
        report_id: int,
        fields: Mapping[str, Any],
        expected_status: str,
        expected_version: int | None = None,
    ) -> bool:
        """Apply ``fields`` only if the stored status (and version) still match."""
        ...

    def query_by_status(self, status: str) -> Sequence[Report]: ...

    def query_created_since(self, since: datetime) -> Sequence[Report]: ...

    def query_by_reporter(self, reporter_id: str) -> Sequence[Report]: ...

    def count_all(self) -> int: ...

    def count_for_content(self, content_type: str, content_id: str) -> int: ...

    def exists_for_reporter(self, content_type: str, content_id: str, reporter_id: str) -> bool: ...

    def count_approved_for_author(self, author_id: str) -> int: ...


class ContentStore(Protocol):
    def get(self, content_type: str, content_id: str) -> ContentItem | None: ...

    def delete(self, content_type: str, content_id: str) -> bool:
        """Delete the item; return False if it was already gone."""
        ...


class SecurityLogStore(Protocol):
    def append(self, entry: Mapping[str, Any]) -> SecurityLogEntry: ...

    def query_since(self, since: datetime, limit: int | None = None) -> Sequence[SecurityLogEntry]:
        """Return entries newer than ``since``, newest first."""
        ...

    def count_by_severity(self, severities: Sequence[str]) -> int: ...


class KeywordFilterStore(Protocol):
    def list_active(self) -> Sequence[KeywordFilter]: ...

    def list_all(self) -> Sequence[KeywordFilter]: ...

    def add(self, keyword: str, severity: str) -> KeywordFilter: ...

    def remove(self, filter_id: int) -> bool: ...


class BlockedIPStore(Protocol):
    def get(self, block_id: int) -> BlockedIP | None: ...

    def list_all(self) -> Sequence[BlockedIP]:
        """Return every block, newest first."""
        ...

    def find_active(self, ip: str) -> BlockedIP | None: ...

    def add(self, fields: Mapping[str, Any]) -> BlockedIP: ...

    def deactivate(self, block_id: int, fields: Mapping[str, Any]) -> bool:
        """Mark an active block inactive; return False if it was not active."""
        ...


class UserStore(Protocol):
    def count_all(self) -> int: ...

    def count_since(self, since: datetime) -> int: ...

    def list_with_last_activity_since(self, since: datetime) -> Sequence[User]: ...

    def get(self, uid: str) -> User | None: ...

    def list_recent(self, limit: int) -> Sequence[User]:
        """Return the newest accounts first."""
        ...

    def update_status(self, uid: str, fields: Mapping[str, Any]) -> bool: ...


class NoteStore(Protocol):
    def count_all(self) -> int: ...

    def count_since(self, since: datetime) -> int: ...

    def count_with_images_since(self, since: datetime) -> int: ...

    def count_by_author(self, author_id: str) -> int: ...


class CommentStore(NoteStore, Protocol):
    """Comments expose the same read surface as notes."""
