"""Blocked keyword administration."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from barter_moderation.api.v1.dependencies import AdminDep, SessionDep
from barter_moderation.models import BlockedKeyword
from barter_moderation.schemas.keyword import KeywordCreate, KeywordResponse
from barter_moderation.services import content_filter

router = APIRouter(prefix="/keywords", tags=["keywords"])


@router.get("", response_model=list[KeywordResponse])
async def list_keywords(
    admin: AdminDep,
    db: SessionDep,
    include_disabled: bool = Query(True, alias="includeDisabled"),
) -> list[BlockedKeyword]:
    return content_filter.list_keywords(db, include_disabled=include_disabled)


@router.post("", response_model=KeywordResponse, status_code=status.HTTP_201_CREATED)
async def create_keyword(
    payload: KeywordCreate,
    admin: AdminDep,
    db: SessionDep,
) -> BlockedKeyword:
    """Add a rule. Regex rules that do not compile are rejected with 400."""
    return content_filter.create_keyword(
        db,
        keyword=payload.keyword,
        pattern_type=payload.pattern_type,
        severity=payload.severity,
        enabled=payload.enabled,
    )
