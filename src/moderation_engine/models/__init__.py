"""SQLAlchemy models for the moderation engine."""

from .blocked_ip import BlockedIP
from .content import Comment, Note, User
from .keyword_filter import KeywordFilter
from .report import Report
from .security_log import SecurityLogEntry

__all__ = [
    "BlockedIP",
    "Comment", "Note", "User",
    "KeywordFilter",
    "Report",
    "SecurityLogEntry",
]
