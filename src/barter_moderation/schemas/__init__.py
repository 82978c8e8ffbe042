# src/barter_moderation/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

Wire names are camelCase; Python attributes stay snake_case.
"""

from .common import CamelModel, ErrorResponse
from .content_filter import ContentFilterRequest, ContentFilterResponse, MatchedKeyword
from .keyword import KeywordCreate, KeywordResponse
from .moderation import ModerationActionCreate, ModerationActionResponse
from .report import (
    AutoAction,
    EscalationResponse,
    ReportCategory,
    ReportCreate,
    ReportCreated,
    ReportResponse,
    ReportSummary,
    TargetPreviewResponse,
)

__all__ = [
    "AutoAction", "CamelModel", "ErrorResponse",
    "ContentFilterRequest", "ContentFilterResponse", "MatchedKeyword",
    "EscalationResponse",
    "KeywordCreate", "KeywordResponse",
    "ModerationActionCreate", "ModerationActionResponse",
    "ReportCategory", "ReportCreate", "ReportCreated", "ReportResponse", "ReportSummary",
    "TargetPreviewResponse",
]
