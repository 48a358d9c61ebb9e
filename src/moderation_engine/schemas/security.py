# src/moderation_engine/schemas/security.py
"""Schemas for security events and abuse monitoring."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from moderation_engine.models.enums import LogSeverity
from moderation_engine.schemas.report import check_admin_id


class SecurityEventCreate(BaseModel):
    """Schema for recording a security event reported by another service."""

    event_type: str = Field(..., min_length=1, max_length=64)
    details: dict[str, Any] = Field(default_factory=dict)
    severity: LogSeverity = LogSeverity.LOW
    user_uid: str | None = None
    ip: str | None = None
    user_agent: str | None = None
    request_type: str | None = None
    blocked: bool = False


class SecurityLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_type: str
    severity: str
    ip: str | None
    user_uid: str | None
    user_agent: str | None
    request_type: str | None
    blocked: bool
    timestamp: datetime
    details: dict[str, Any]


class SecurityLogPageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    entries: list[SecurityLogResponse]
    degraded: bool


class SuspiciousActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: str
    target: str
    count: int
    severity: str


class ActivityScanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    activities: list[SuspiciousActivityResponse]
    degraded: bool = Field(False, description="True if the security log could not be read")


class UserRequestStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    requests: int
    blocked: int


class RateLimitStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_requests: int
    blocked_requests: int
    top_users: list[UserRequestStatsResponse]
    requests_by_type: dict[str, int]
    degraded: bool


class BlockIPRequest(BaseModel):
    """Schema for blocking an address, typically after a request-burst alert."""

    ip: str = Field(..., min_length=1, max_length=64)
    reason: str = Field(default="", max_length=500)
    admin_id: str = Field(..., min_length=1, max_length=64)

    @field_validator("admin_id")
    @classmethod
    def validate_admin_id(cls, v: str) -> str:
        return check_admin_id(v)


class UnblockIPRequest(BaseModel):
    admin_id: str = Field(..., min_length=1, max_length=64)

    @field_validator("admin_id")
    @classmethod
    def validate_admin_id(cls, v: str) -> str:
        return check_admin_id(v)


class BlockedIPResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    ip: str
    reason: str
    is_active: bool
    blocked_at: datetime
    blocked_by: str | None
    unblocked_at: datetime | None
    unblocked_by: str | None


class UnblockIPResponse(BaseModel):
    block_id: int
    unblocked: bool
