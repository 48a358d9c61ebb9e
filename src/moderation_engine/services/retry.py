"""Bounded retry for aggregate store reads.

Only read paths feeding analytics, detection and keyword lookups go through
here. Triage writes call their stores directly and fail fast.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from moderation_engine.core.errors import StoreUnavailableError
from moderation_engine.core.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_retry(
    func: Callable[[], T],
    *,
    operation: str,
    attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``func`` retrying ``StoreUnavailableError`` with exponential backoff.

    Args:
        func: Zero-argument read to execute.
        operation: Label used in log messages.
        attempts: Total tries, defaults to ``settings.read_retry_attempts``.
        base_delay: First backoff delay in seconds.
        max_delay: Upper bound for a single backoff delay.
        sleep: Injected for tests.

    Raises:
        StoreUnavailableError: If every attempt failed.
    """
    attempts = max(1, attempts if attempts is not None else settings.read_retry_attempts)
    delay = base_delay if base_delay is not None else settings.read_retry_base_delay_seconds
    cap = max_delay if max_delay is not None else settings.read_retry_max_delay_seconds

    for attempt in range(1, attempts + 1):
        try:
            return func()
        except StoreUnavailableError as exc:
            if attempt == attempts:
                logger.warning("%s failed after %d attempts: %s", operation, attempts, exc)
                raise
            wait = min(delay * (2 ** (attempt - 1)), cap)
            logger.debug("%s attempt %d failed, retrying in %.2fs", operation, attempt, wait)
            sleep(wait)
    raise AssertionError("unreachable")  # pragma: no cover


def read_or_default(
    func: Callable[[], T],
    default: T,
    *,
    operation: str,
    sleep: Callable[[float], None] = time.sleep,
) -> tuple[T, bool]:
    """Return ``(value, degraded)``, falling back to ``default`` once retries run out."""
    try:
        return call_with_retry(func, operation=operation, sleep=sleep), False
    except StoreUnavailableError:
        logger.warning("%s degraded to default result", operation)
        return default, True
