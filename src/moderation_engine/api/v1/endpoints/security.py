"""Security log and abuse monitoring endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from moderation_engine.api.v1.dependencies import DetectorDep, IPBlockDep, SecurityLogDep
from moderation_engine.models.enums import Actor
from moderation_engine.schemas.security import (
    ActivityScanResponse,
    BlockedIPResponse,
    BlockIPRequest,
    RateLimitStatsResponse,
    SecurityEventCreate,
    SecurityLogPageResponse,
    SecurityLogResponse,
    UnblockIPRequest,
    UnblockIPResponse,
)

router = APIRouter(prefix="/security", tags=["security"])


@router.post("/events", response_model=SecurityLogResponse, status_code=status.HTTP_201_CREATED)
def log_event(payload: SecurityEventCreate, security_log: SecurityLogDep) -> SecurityLogResponse:
    """Record a security event; sensitive detail fields are redacted."""
    entry = security_log.log_event(
        payload.event_type,
        payload.details,
        severity=payload.severity,
        user_uid=payload.user_uid,
        ip=payload.ip,
        user_agent=payload.user_agent,
        request_type=payload.request_type,
        blocked=payload.blocked,
    )
    return SecurityLogResponse.model_validate(entry)


@router.get("/logs", response_model=SecurityLogPageResponse)
def get_security_logs(
    security_log: SecurityLogDep,
    window_hours: int = Query(24, ge=1, le=24 * 90),
    limit: int | None = Query(None, ge=1, le=500),
) -> SecurityLogPageResponse:
    page = security_log.get_security_logs(window_hours=window_hours, limit=limit)
    return SecurityLogPageResponse.model_validate(page)


@router.get("/suspicious-activity", response_model=ActivityScanResponse)
def detect_suspicious_activity(
    detector: DetectorDep,
    window_hours: int = Query(24, ge=1, le=24 * 90),
) -> ActivityScanResponse:
    """Scan the window for request bursts and repeated login failures."""
    return ActivityScanResponse.model_validate(detector.detect_suspicious_activity(window_hours))


@router.get("/rate-limit-stats", response_model=RateLimitStatsResponse)
def get_rate_limit_stats(security_log: SecurityLogDep) -> RateLimitStatsResponse:
    return RateLimitStatsResponse.model_validate(security_log.get_rate_limit_stats())


@router.get("/blocked-ips", response_model=list[BlockedIPResponse])
def get_blocked_ips(
    ip_blocks: IPBlockDep,
    active_only: bool = Query(False),
) -> list[BlockedIPResponse]:
    return [
        BlockedIPResponse.model_validate(block)
        for block in ip_blocks.get_blocked_ips(active_only=active_only)
    ]


@router.post(
    "/blocked-ips",
    response_model=BlockedIPResponse,
    status_code=status.HTTP_201_CREATED,
)
def block_ip(payload: BlockIPRequest, ip_blocks: IPBlockDep) -> BlockedIPResponse:
    """Block an address; blocking an already-blocked address returns the existing block."""
    block = ip_blocks.block_ip(payload.ip, payload.reason, Actor.admin(payload.admin_id))
    return BlockedIPResponse.model_validate(block)


@router.post("/blocked-ips/{block_id}/unblock", response_model=UnblockIPResponse)
def unblock_ip(
    block_id: int,
    payload: UnblockIPRequest,
    ip_blocks: IPBlockDep,
) -> UnblockIPResponse:
    unblocked = ip_blocks.unblock_ip(block_id, Actor.admin(payload.admin_id))
    return UnblockIPResponse(block_id=block_id, unblocked=unblocked)
