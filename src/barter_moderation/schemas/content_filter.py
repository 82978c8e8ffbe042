"""Content filter request/response schemas."""

from pydantic import Field

from .common import CamelModel


class ContentFilterRequest(CamelModel):
    """Content submitted for classification before it is posted."""

    content: str = Field(..., description="Raw user-generated text")
    content_type: str = Field(
        ..., description="One of item_title, item_description, message"
    )
    content_id: str | None = Field(None, description="Id of the entity being edited, if any")


class MatchedKeyword(CamelModel):
    keyword: str
    severity: str


class ContentFilterResponse(CamelModel):
    """Filter verdict. ``matchedKeywords`` and ``message`` are omitted when empty."""

    allowed: bool
    blocked: bool
    warned: bool
    matched_keywords: list[MatchedKeyword] | None = None
    message: str | None = None
