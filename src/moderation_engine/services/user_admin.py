"""Account overview and status changes for the admin console."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from moderation_engine.core.errors import InvalidInputError, NotFoundError
from moderation_engine.db.time import utcnow
from moderation_engine.models import User
from moderation_engine.models.enums import Actor, LogSeverity, SecurityEventType, UserStatus
from moderation_engine.repositories.ports import CommentStore, NoteStore, UserStore
from moderation_engine.services.security_log import SecurityLogService

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


@dataclass
class ManagedUser:
    """A user row as shown in the management table."""

    uid: str
    display_name: str | None
    status: str
    status_reason: str | None
    created_at: datetime
    last_activity: datetime
    notes_count: int
    comments_count: int


class UserAdminService:
    def __init__(
        self,
        user_store: UserStore,
        note_store: NoteStore,
        comment_store: CommentStore,
        security_log: SecurityLogService,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.user_store = user_store
        self.note_store = note_store
        self.comment_store = comment_store
        self.security_log = security_log
        self.clock = clock

    def _managed(self, user: User) -> ManagedUser:
        return ManagedUser(
            uid=user.uid,
            display_name=user.display_name,
            status=user.status,
            status_reason=user.status_reason,
            created_at=user.created_at,
            # Accounts that never acted fall back to their signup time.
            last_activity=user.last_activity or user.created_at,
            notes_count=self.note_store.count_by_author(user.uid),
            comments_count=self.comment_store.count_by_author(user.uid),
        )

    def get_user_management_data(self, limit: int = DEFAULT_PAGE_SIZE) -> list[ManagedUser]:
        """Newest accounts first, each with note and comment counts."""
        if limit <= 0:
            raise InvalidInputError("limit must be positive")
        return [self._managed(user) for user in self.user_store.list_recent(limit)]

    def update_user_status(
        self,
        user_id: str,
        status: UserStatus | str,
        reason: str,
        actor: Actor,
    ) -> ManagedUser:
        """Set an account's status and record who changed it and why.

        Raises:
            InvalidInputError: If ``status`` is unknown.
            NotFoundError: If the user does not exist.
            StoreUnavailableError: If the update fails.
        """
        try:
            new_status = UserStatus(getattr(status, "value", status))
        except ValueError as err:
            raise InvalidInputError(f"Unknown user status: {status!r}") from err

        reason = (reason or "").strip()
        updated = self.user_store.update_status(
            user_id,
            {
                "status": new_status.value,
                "status_reason": reason or None,
                "status_updated_at": self.clock(),
            },
        )
        if not updated:
            raise NotFoundError(f"User {user_id} not found")

        logger.info("User %s set to %s by %s", user_id, new_status.value, actor.as_stored())
        self.security_log.log_event(
            SecurityEventType.USER_STATUS_CHANGED,
            {"userId": user_id, "newStatus": new_status.value, "reason": reason},
            severity=LogSeverity.MEDIUM,
            user_uid=actor.user_id,
        )
        user = self.user_store.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return self._managed(user)
