"""Enumerations shared by models, services and schemas."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ContentType(str, Enum):
    NOTE = "note"
    COMMENT = "comment"


class ReportReason(str, Enum):
    """Report reasons, in the order used to break analytics ties."""

    HARASSMENT = "harassment"
    HATE_SPEECH = "hate_speech"
    VIOLENCE = "violence"
    INAPPROPRIATE = "inappropriate"
    SPAM = "spam"
    COPYRIGHT = "copyright"
    MISINFORMATION = "misinformation"
    OTHER = "other"


class ReportStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LogSeverity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class FilterSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ModerationAction(str, Enum):
    NONE = "none"
    BLOCK = "block"


class SuspiciousActivityType(str, Enum):
    EXCESSIVE_REQUESTS = "EXCESSIVE_REQUESTS"
    EXCESSIVE_USER_ACTIVITY = "EXCESSIVE_USER_ACTIVITY"
    REPEATED_LOGIN_FAILURES = "REPEATED_LOGIN_FAILURES"


class SecurityEventType(str, Enum):
    """Event types written by the engine itself."""

    AUTO_MODERATION_BLOCK = "AUTO_MODERATION_BLOCK"
    REPORT_AUTO_PROCESSED = "REPORT_AUTO_PROCESSED"
    REPORT_PROCESSED = "REPORT_PROCESSED"
    REPORT_SUBMITTED = "REPORT_SUBMITTED"
    KEYWORD_FILTER_ADDED = "KEYWORD_FILTER_ADDED"
    KEYWORD_FILTER_REMOVED = "KEYWORD_FILTER_REMOVED"
    IP_BLOCKED = "IP_BLOCKED"
    IP_UNBLOCKED = "IP_UNBLOCKED"
    USER_STATUS_CHANGED = "USER_STATUS_CHANGED"
    LOGIN_FAILED = "LOGIN_FAILED"


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"


SYSTEM_ACTOR_ID = "system"


@dataclass(frozen=True)
class Actor:
    """Who transitioned a report: the automatic processor or an admin."""

    kind: str
    user_id: str | None = None

    @classmethod
    def system(cls) -> Actor:
        return cls(kind="system")

    @classmethod
    def admin(cls, user_id: str) -> Actor:
        if not user_id:
            raise ValueError("admin actor requires a user id")
        if user_id == SYSTEM_ACTOR_ID:
            raise ValueError(f"{SYSTEM_ACTOR_ID!r} is reserved for automatic processing")
        return cls(kind="admin", user_id=user_id)

    @property
    def is_system(self) -> bool:
        return self.kind == "system"

    def as_stored(self) -> str:
        """Return the value persisted in ``processed_by``."""
        return SYSTEM_ACTOR_ID if self.is_system else str(self.user_id)

    @classmethod
    def from_stored(cls, value: str | None) -> Actor | None:
        if value is None:
            return None
        if value == SYSTEM_ACTOR_ID:
            return cls.system()
        return cls.admin(value)
