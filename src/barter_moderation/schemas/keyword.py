"""Blocked keyword administration schemas."""

from datetime import datetime

from pydantic import Field

from .common import CamelModel


class KeywordCreate(CamelModel):
    keyword: str = Field(..., description="Literal text or regular expression")
    pattern_type: str = Field("contains", description="exact, contains or regex")
    severity: str = Field("warning", description="warning or block")
    enabled: bool = True


class KeywordResponse(CamelModel):
    id: str
    keyword: str
    pattern_type: str
    severity: str
    enabled: bool
    created_at: datetime
