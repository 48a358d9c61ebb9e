"""Admin-managed IP blocks, the follow-up action for request-burst alerts."""

from __future__ import annotations

import ipaddress
import logging
from collections.abc import Callable
from datetime import datetime

from moderation_engine.core.errors import InvalidInputError, NotFoundError
from moderation_engine.db.time import utcnow
from moderation_engine.models import BlockedIP
from moderation_engine.models.enums import Actor, LogSeverity, SecurityEventType
from moderation_engine.repositories.ports import BlockedIPStore
from moderation_engine.services.security_log import SecurityLogService

logger = logging.getLogger(__name__)


def normalize_ip(ip: str) -> str:
    """Return the canonical text form of ``ip``.

    >>> normalize_ip(" 2001:DB8::1 ")
    '2001:db8::1'
    """
    try:
        return str(ipaddress.ip_address((ip or "").strip()))
    except ValueError as err:
        raise InvalidInputError(f"Invalid IP address: {ip!r}") from err


class IPBlockService:
    """Lists, adds and lifts IP blocks, auditing each change."""

    def __init__(
        self,
        store: BlockedIPStore,
        security_log: SecurityLogService,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.security_log = security_log
        self.clock = clock

    def get_blocked_ips(self, active_only: bool = False) -> list[BlockedIP]:
        blocks = list(self.store.list_all())
        if active_only:
            return [block for block in blocks if block.is_active]
        return blocks

    def is_blocked(self, ip: str) -> bool:
        return self.store.find_active(normalize_ip(ip)) is not None

    def block_ip(self, ip: str, reason: str, actor: Actor) -> BlockedIP:
        """Block ``ip``; an address that is already blocked keeps its existing block.

        Raises:
            InvalidInputError: If ``ip`` is not a valid address.
            StoreUnavailableError: If the block cannot be stored.
        """
        address = normalize_ip(ip)
        existing = self.store.find_active(address)
        if existing is not None:
            logger.info("IP %s already blocked (block %s)", address, existing.id)
            return existing

        reason = (reason or "").strip()
        block = self.store.add(
            {
                "ip": address,
                "reason": reason,
                "blocked_at": self.clock(),
                "blocked_by": actor.as_stored(),
            }
        )
        logger.info("Blocked IP %s by %s", address, actor.as_stored())
        self.security_log.log_event(
            SecurityEventType.IP_BLOCKED,
            {"ip": address, "reason": reason, "blockId": block.id},
            severity=LogSeverity.MEDIUM,
            user_uid=actor.user_id,
        )
        return block

    def unblock_ip(self, block_id: int, actor: Actor) -> bool:
        """Lift a block. Returns False if it had already been lifted.

        Raises:
            NotFoundError: If no block has this id.
        """
        block = self.store.get(block_id)
        if block is None:
            raise NotFoundError(f"IP block {block_id} not found")

        lifted = self.store.deactivate(
            block_id,
            {"unblocked_at": self.clock(), "unblocked_by": actor.as_stored()},
        )
        if not lifted:
            logger.info("IP block %s was already lifted", block_id)
            return False

        logger.info("Unblocked IP %s (block %s) by %s", block.ip, block_id, actor.as_stored())
        self.security_log.log_event(
            SecurityEventType.IP_UNBLOCKED,
            {"ip": block.ip, "blockId": block_id},
            severity=LogSeverity.MEDIUM,
            user_uid=actor.user_id,
        )
        return True
