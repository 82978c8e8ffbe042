# src/barter_moderation/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .content_filter import router as content_filter_router
from .escalation import router as escalation_router
from .keywords import router as keywords_router
from .moderation import router as moderation_router
from .reports import router as reports_router

__all__ = [
    "content_filter_router",
    "escalation_router",
    "keywords_router",
    "moderation_router",
    "reports_router",
]
