# src/moderation_engine/schemas/user.py
"""User management schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from moderation_engine.models.enums import UserStatus
from moderation_engine.schemas.report import check_admin_id


class UserStatusUpdate(BaseModel):
    """Schema for suspending, banning or reinstating an account."""

    status: UserStatus
    reason: str = Field(default="", max_length=500)
    admin_id: str = Field(..., min_length=1, max_length=64)

    @field_validator("admin_id")
    @classmethod
    def validate_admin_id(cls, v: str) -> str:
        return check_admin_id(v)


class ManagedUserResponse(BaseModel):
    """Schema for one row of the user management table."""

    model_config = ConfigDict(from_attributes=True)

    uid: str
    display_name: str | None
    status: str
    status_reason: str | None
    created_at: datetime
    last_activity: datetime
    notes_count: int
    comments_count: int
