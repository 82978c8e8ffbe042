"""Content filter service: rule loading, audit logging and rule administration."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barter_moderation.core.errors import DependencyError, ValidationError
from barter_moderation.core.settings import settings
from barter_moderation.models import BlockedKeyword, ContentFilterLog
from barter_moderation.models.keyword import (
    FilterAction,
    FilterContentType,
    KeywordSeverity,
    PatternType,
)
from barter_moderation.services.keyword_filter import (
    FilterVerdict,
    KeywordRule,
    compile_keyword_pattern,
    evaluate,
    normalize_text,
)

logger = logging.getLogger(__name__)

BLOCKED_MESSAGE = "Your content contains inappropriate language and cannot be posted."
WARNED_MESSAGE = "Your content may contain inappropriate language. Please review and edit."

_CONTENT_TYPES = {member.value for member in FilterContentType}


@dataclass(frozen=True)
class ContentCheckResult:
    """Verdict plus the user-facing message for one filter call."""

    verdict: FilterVerdict
    message: str | None
    log_entry_id: str | None = None


def load_rules(db: Session) -> list[KeywordRule]:
    """Return a snapshot of the enabled rules in a stable iteration order."""
    try:
        rows = db.scalars(
            select(BlockedKeyword)
            .where(BlockedKeyword.enabled.is_(True))
            .order_by(BlockedKeyword.created_at, BlockedKeyword.id)
        ).all()
    except SQLAlchemyError as err:
        logger.warning("Failed to load blocked keywords: %s", err)
        raise DependencyError("Failed to check content") from err

    return [
        KeywordRule(
            id=row.id,
            keyword=row.keyword,
            pattern_type=row.pattern_type,
            severity=row.severity,
            enabled=row.enabled,
        )
        for row in rows
    ]


def _message_for(verdict: FilterVerdict) -> str | None:
    if verdict.blocked:
        return BLOCKED_MESSAGE
    if verdict.warned:
        return WARNED_MESSAGE
    return None


def check_content(
    db: Session,
    *,
    user_id: str,
    content: str,
    content_type: str,
    content_id: str | None = None,
) -> ContentCheckResult:
    """Evaluate ``content`` for ``user_id`` and audit the call when a rule matched.

    Exactly one ``content_filter_logs`` row is written per call with at least
    one match; it references the first matching rule.

    Raises:
        ValidationError: If ``content`` is empty or ``content_type`` unknown.
        DependencyError: If rules cannot be read or the log cannot be written.
    """
    if not content or not isinstance(content, str):
        raise ValidationError("content is required and must be a string")
    if content_type not in _CONTENT_TYPES:
        raise ValidationError(
            "contentType must be one of: item_title, item_description, message"
        )

    verdict = evaluate(content, load_rules(db))
    message = _message_for(verdict)

    if not verdict.matched or verdict.first_matched_rule_id is None:
        return ContentCheckResult(verdict=verdict, message=message)

    entry = ContentFilterLog(
        user_id=user_id,
        content_type=content_type,
        content_id=content_id or None,
        matched_keyword_id=verdict.first_matched_rule_id,
        action_taken=verdict.action_taken.value,
        content_preview=content[: settings.filter_preview_length],
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError as err:
        db.rollback()
        logger.warning("Failed to write content filter log for user %s: %s", user_id, err)
        raise DependencyError("Failed to check content") from err

    if verdict.action_taken == FilterAction.BLOCKED:
        logger.info(
            "Blocked %s from user %s (rule %s)", content_type, user_id, entry.matched_keyword_id
        )
    return ContentCheckResult(verdict=verdict, message=message, log_entry_id=entry.id)


def validate_keyword_rule(keyword: str, pattern_type: str, severity: str) -> str:
    """Validate a new rule and return the keyword with surrounding whitespace trimmed.

    Regex rules are compiled here so authoring mistakes are rejected before
    they reach evaluation, where they would silently degrade to ``contains``.

    Raises:
        ValidationError: On an empty keyword, unknown type/severity or bad regex.
    """
    keyword = (keyword or "").strip()
    if not keyword:
        raise ValidationError("keyword is required")
    if pattern_type not in {member.value for member in PatternType}:
        raise ValidationError("patternType must be one of: exact, contains, regex")
    if severity not in {member.value for member in KeywordSeverity}:
        raise ValidationError("severity must be one of: warning, block")
    if pattern_type == PatternType.REGEX:
        try:
            compile_keyword_pattern(keyword)
        except re.error as err:
            raise ValidationError(f"Invalid regular expression: {err}") from err
    return keyword


def create_keyword(
    db: Session,
    *,
    keyword: str,
    pattern_type: str = PatternType.CONTAINS.value,
    severity: str = KeywordSeverity.WARNING.value,
    enabled: bool = True,
) -> BlockedKeyword:
    """Persist a validated blocked-keyword rule."""
    cleaned = validate_keyword_rule(keyword, pattern_type, severity)
    rule = BlockedKeyword(
        keyword=cleaned,
        pattern_type=pattern_type,
        severity=severity,
        enabled=enabled,
    )
    try:
        db.add(rule)
        db.commit()
        db.refresh(rule)
    except SQLAlchemyError as err:
        db.rollback()
        raise DependencyError("Failed to create keyword") from err

    logger.info("Created %s rule %s (%s)", severity, rule.id, normalize_text(cleaned)[:40])
    return rule


def list_keywords(db: Session, *, include_disabled: bool = True) -> list[BlockedKeyword]:
    """Return configured rules, oldest first."""
    query = select(BlockedKeyword).order_by(BlockedKeyword.created_at, BlockedKeyword.id)
    if not include_disabled:
        query = query.where(BlockedKeyword.enabled.is_(True))
    try:
        return list(db.scalars(query).all())
    except SQLAlchemyError as err:
        raise DependencyError("Failed to load keywords") from err
