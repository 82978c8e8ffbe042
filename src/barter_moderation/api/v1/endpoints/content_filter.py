"""Content filter endpoint used before user content is posted."""

from __future__ import annotations

from fastapi import APIRouter

from barter_moderation.api.v1.dependencies import CurrentIdentityDep, SessionDep
from barter_moderation.schemas.content_filter import (
    ContentFilterRequest,
    ContentFilterResponse,
    MatchedKeyword,
)
from barter_moderation.services import content_filter

router = APIRouter(tags=["content-filter"])


@router.post(
    "/content-filter",
    response_model=ContentFilterResponse,
    response_model_exclude_none=True,
)
async def check_content(
    payload: ContentFilterRequest,
    identity: CurrentIdentityDep,
    db: SessionDep,
) -> ContentFilterResponse:
    """Classify content as allowed, warned or blocked."""
    result = content_filter.check_content(
        db,
        user_id=identity.user_id,
        content=payload.content,
        content_type=payload.content_type,
        content_id=payload.content_id,
    )
    verdict = result.verdict
    matched = [
        MatchedKeyword(keyword=match.keyword, severity=match.severity)
        for match in verdict.matched_keywords
    ]
    return ContentFilterResponse(
        allowed=verdict.allowed,
        blocked=verdict.blocked,
        warned=verdict.warned,
        matched_keywords=matched or None,
        message=result.message,
    )
