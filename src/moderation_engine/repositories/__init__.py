"""Store ports and their SQLAlchemy adapters."""

from .content_repo import SqlCommentStore, SqlContentStore, SqlNoteStore, SqlUserStore
from .ports import (
    BlockedIPStore,
    CommentStore,
    ContentItem,
    ContentStore,
    KeywordFilterStore,
    NoteStore,
    ReportStore,
    SecurityLogStore,
    UserStore,
)
from .report_repo import SqlReportStore
from .security_repo import SqlBlockedIPStore, SqlKeywordFilterStore, SqlSecurityLogStore

__all__ = [
    "BlockedIPStore", "CommentStore", "ContentItem", "ContentStore", "KeywordFilterStore",
    "NoteStore", "ReportStore", "SecurityLogStore", "UserStore",
    "SqlCommentStore", "SqlContentStore", "SqlNoteStore", "SqlUserStore",
    "SqlReportStore",
    "SqlBlockedIPStore", "SqlKeywordFilterStore", "SqlSecurityLogStore",
]
