# src/barter_moderation/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    content_filter_router,
    escalation_router,
    keywords_router,
    moderation_router,
    reports_router,
)

__all__ = [
    "content_filter_router",
    "escalation_router",
    "keywords_router",
    "moderation_router",
    "reports_router",
]
