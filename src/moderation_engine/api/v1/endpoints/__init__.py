# src/moderation_engine/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .analytics import router as analytics_router
from .moderation import router as moderation_router
from .reports import router as reports_router
from .security import router as security_router
from .users import router as users_router

__all__ = [
    "analytics_router",
    "moderation_router",
    "reports_router",
    "security_router",
    "users_router",
]
