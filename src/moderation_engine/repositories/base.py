"""Shared plumbing for SQLAlchemy-backed stores."""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from moderation_engine.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


class SqlStore:
    """Thin wrapper holding the session used by a store adapter."""

    def __init__(self, session: Session) -> None:
        """Initialize the store with a SQLAlchemy session."""
        self.session = session

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        """Translate driver errors into ``StoreUnavailableError``."""
        try:
            yield
        except SQLAlchemyError as exc:
            logger.warning("%s.%s failed: %s", type(self).__name__, operation, exc)
            self.session.rollback()
            raise StoreUnavailableError(f"{operation} failed: {exc}") from exc
