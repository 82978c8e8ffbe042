# tests/services/test_content_filter.py
"""Tests for content checks, the filter audit log and rule administration."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select

from barter_moderation.core.errors import ValidationError
from barter_moderation.models import BlockedKeyword, ContentFilterLog
from barter_moderation.services import content_filter


def _logs(db_session):
    return list(db_session.scalars(select(ContentFilterLog)).all())


def test_blocked_content_writes_one_log_row(db_session, make_keyword) -> None:
    rule = make_keyword("fake rolex", severity="block")

    result = content_filter.check_content(
        db_session,
        user_id="user-1",
        content="Selling fake rolex watches",
        content_type="item_title",
    )

    assert result.verdict.blocked is True
    assert result.message == content_filter.BLOCKED_MESSAGE
    logs = _logs(db_session)
    assert len(logs) == 1
    assert logs[0].id == result.log_entry_id
    assert logs[0].action_taken == "blocked"
    assert logs[0].matched_keyword_id == rule.id
    assert logs[0].user_id == "user-1"
    assert logs[0].content_type == "item_title"
    assert logs[0].content_preview == "Selling fake rolex watches"


def test_log_references_first_matching_rule(db_session, make_keyword) -> None:
    created = datetime(2026, 1, 1, tzinfo=UTC)
    first = make_keyword("cheap", severity="warning", created_at=created)
    make_keyword("replica", severity="block", created_at=created + timedelta(seconds=1))

    content_filter.check_content(
        db_session,
        user_id="user-1",
        content="cheap replica bags",
        content_type="item_description",
    )

    logs = _logs(db_session)
    assert len(logs) == 1
    assert logs[0].matched_keyword_id == first.id
    assert logs[0].action_taken == "blocked"


def test_warned_content_returns_warning_message(db_session, make_keyword) -> None:
    make_keyword("cash only", severity="warning")

    result = content_filter.check_content(
        db_session,
        user_id="user-2",
        content="Cash only please",
        content_type="message",
        content_id="msg-9",
    )

    assert result.verdict.allowed is True
    assert result.verdict.warned is True
    assert result.message == content_filter.WARNED_MESSAGE
    (log,) = _logs(db_session)
    assert log.action_taken == "warned"
    assert log.content_id == "msg-9"


def test_clean_content_writes_no_log(db_session, make_keyword) -> None:
    make_keyword("fake rolex", severity="block")

    result = content_filter.check_content(
        db_session,
        user_id="user-1",
        content="Vintage bicycle for trade",
        content_type="item_title",
    )

    assert result.verdict.allowed is True
    assert result.message is None
    assert result.log_entry_id is None
    assert _logs(db_session) == []


def test_disabled_rules_are_not_loaded(db_session, make_keyword) -> None:
    make_keyword("fake rolex", severity="block", enabled=False)
    enabled = make_keyword("bicycle")

    rules = content_filter.load_rules(db_session)

    assert [rule.id for rule in rules] == [enabled.id]


def test_preview_is_truncated(db_session, make_keyword) -> None:
    make_keyword("spam", severity="warning")
    content = "spam " + "x" * 500

    content_filter.check_content(
        db_session, user_id="user-1", content=content, content_type="message"
    )

    (log,) = _logs(db_session)
    assert log.content_preview == content[:200]


@pytest.mark.parametrize(
    ("content", "content_type"),
    [("", "message"), ("hello", "listing"), ("hello", "")],
)
def test_invalid_input_is_rejected(db_session, content, content_type) -> None:
    with pytest.raises(ValidationError):
        content_filter.check_content(
            db_session, user_id="user-1", content=content, content_type=content_type
        )


def test_create_keyword_rejects_invalid_regex(db_session) -> None:
    with pytest.raises(ValidationError):
        content_filter.create_keyword(db_session, keyword="(unclosed", pattern_type="regex")

    assert db_session.scalars(select(BlockedKeyword)).all() == []


def test_create_keyword_trims_and_persists(db_session) -> None:
    rule = content_filter.create_keyword(
        db_session, keyword="  r[o0]lex ", pattern_type="regex", severity="block"
    )

    assert rule.keyword == "r[o0]lex"
    assert [row.id for row in content_filter.list_keywords(db_session)] == [rule.id]


@pytest.mark.parametrize(
    ("keyword", "pattern_type", "severity"),
    [("", "contains", "warning"), ("x", "fuzzy", "warning"), ("x", "contains", "ban")],
)
def test_create_keyword_validates_fields(db_session, keyword, pattern_type, severity) -> None:
    with pytest.raises(ValidationError):
        content_filter.create_keyword(
            db_session, keyword=keyword, pattern_type=pattern_type, severity=severity
        )


def test_legacy_invalid_regex_row_still_evaluates_as_contains(db_session, make_keyword) -> None:
    make_keyword("free (", pattern_type="regex", severity="block")

    result = content_filter.check_content(
        db_session, user_id="user-1", content="FREE ( stuff", content_type="message"
    )

    assert result.verdict.blocked is True
