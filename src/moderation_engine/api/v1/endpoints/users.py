"""User management endpoints for the admin console."""

from __future__ import annotations

from fastapi import APIRouter, Query

from moderation_engine.api.v1.dependencies import UserAdminDep
from moderation_engine.models.enums import Actor
from moderation_engine.schemas.user import ManagedUserResponse, UserStatusUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/management", response_model=list[ManagedUserResponse])
def get_user_management_data(
    user_admin: UserAdminDep,
    limit: int = Query(20, ge=1, le=200),
) -> list[ManagedUserResponse]:
    """List the newest accounts with their note and comment counts."""
    return [
        ManagedUserResponse.model_validate(user)
        for user in user_admin.get_user_management_data(limit)
    ]


@router.patch("/{user_id}/status", response_model=ManagedUserResponse)
def update_user_status(
    user_id: str,
    payload: UserStatusUpdate,
    user_admin: UserAdminDep,
) -> ManagedUserResponse:
    user = user_admin.update_user_status(
        user_id,
        payload.status,
        payload.reason,
        Actor.admin(payload.admin_id),
    )
    return ManagedUserResponse.model_validate(user)
