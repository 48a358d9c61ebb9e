# src/moderation_engine/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    analytics_router,
    moderation_router,
    reports_router,
    security_router,
    users_router,
)

__all__ = [
    "analytics_router",
    "moderation_router",
    "reports_router",
    "security_router",
    "users_router",
]
