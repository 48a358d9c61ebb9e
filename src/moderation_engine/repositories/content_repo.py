"""Data access helpers for notes, comments and users."""
from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select, update

from moderation_engine.core.errors import InvalidInputError
from moderation_engine.models import Comment, Note, User
from moderation_engine.models.enums import ContentType
from moderation_engine.repositories.base import SqlStore
from moderation_engine.repositories.ports import ContentItem

__all__ = ["SqlCommentStore", "SqlContentStore", "SqlNoteStore", "SqlUserStore"]

_MODELS: dict[str, type[Note] | type[Comment]] = {
    ContentType.NOTE.value: Note,
    ContentType.COMMENT.value: Comment,
}


def _model_for(content_type: str) -> type[Note] | type[Comment]:
    try:
        return _MODELS[content_type]
    except KeyError as err:
        raise InvalidInputError(f"Unsupported content type: {content_type!r}") from err


class SqlContentStore(SqlStore):
    """Read and delete reported content regardless of its kind."""

    def get(self, content_type: str, content_id: str) -> ContentItem | None:
        model = _model_for(content_type)
        with self._guard("get"):
            row = self.session.get(model, content_id)
            if row is None:
                return None
            return ContentItem(
                content_type=content_type,
                content_id=row.id,
                author_id=row.author_id,
                text=row.body,
                title=getattr(row, "title", None),
                image_url=row.image_url,
            )

    def delete(self, content_type: str, content_id: str) -> bool:
        model = _model_for(content_type)
        with self._guard("delete"):
            result = self.session.execute(delete(model).where(model.id == content_id))
            self.session.commit()
            return result.rowcount > 0


class SqlUserStore(SqlStore):
    """User queries for analytics and account moderation."""

    def count_all(self) -> int:
        with self._guard("count_all"):
            return self.session.scalar(select(func.count()).select_from(User)) or 0

    def count_since(self, since: datetime) -> int:
        with self._guard("count_since"):
            return self.session.scalar(
                select(func.count()).where(User.created_at >= since)
            ) or 0

    def list_with_last_activity_since(self, since: datetime) -> list[User]:
        with self._guard("list_with_last_activity_since"):
            return list(self.session.scalars(select(User).where(User.last_activity >= since)))

    def get(self, uid: str) -> User | None:
        with self._guard("get"):
            return self.session.get(User, uid, populate_existing=True)

    def list_recent(self, limit: int) -> list[User]:
        with self._guard("list_recent"):
            return list(
                self.session.scalars(
                    select(User)
                    .order_by(User.created_at.desc(), User.uid)
                    .limit(limit)
                    .execution_options(populate_existing=True)
                )
            )

    def update_status(self, uid: str, fields: Mapping[str, Any]) -> bool:
        with self._guard("update_status"):
            result = self.session.execute(
                update(User)
                .where(User.uid == uid)
                .values(**dict(fields))
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
            return result.rowcount > 0


class _AuthoredContentStore(SqlStore):
    model: type[Note] | type[Comment]

    def count_all(self) -> int:
        with self._guard("count_all"):
            return self.session.scalar(select(func.count()).select_from(self.model)) or 0

    def count_since(self, since: datetime) -> int:
        with self._guard("count_since"):
            return self.session.scalar(
                select(func.count()).where(self.model.created_at >= since)
            ) or 0

    def count_with_images_since(self, since: datetime) -> int:
        """Count items created since ``since`` that carry an image reference."""
        with self._guard("count_with_images_since"):
            return self.session.scalar(
                select(func.count()).where(
                    self.model.created_at >= since,
                    self.model.image_url.is_not(None),
                    self.model.image_url != "",
                )
            ) or 0

    def count_by_author(self, author_id: str) -> int:
        with self._guard("count_by_author"):
            return self.session.scalar(
                select(func.count()).where(self.model.author_id == author_id)
            ) or 0


class SqlNoteStore(_AuthoredContentStore):
    model = Note


class SqlCommentStore(_AuthoredContentStore):
    model = Comment
