# src/barter_moderation/models/__init__.py
"""SQLAlchemy models for the moderation service."""

from .item import Item
from .keyword import BlockedKeyword, ContentFilterLog
from .message import Message
from .moderation import ModerationAction
from .report import Report
from .user import User

__all__ = [
    "BlockedKeyword", "ContentFilterLog",
    "Item",
    "Message",
    "ModerationAction",
    "Report",
    "User",
]
