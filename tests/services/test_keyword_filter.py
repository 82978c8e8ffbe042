# tests/services/test_keyword_filter.py
"""Tests for the pure keyword filter engine."""

from barter_moderation.models.keyword import FilterAction
from barter_moderation.services.keyword_filter import (
    KeywordMatch,
    KeywordRule,
    evaluate,
    keyword_matches,
    normalize_text,
)


def test_normalize_text_lowercases_trims_and_collapses_whitespace() -> None:
    assert normalize_text("  Selling \t FAKE\n\nRolex  ") == "selling fake rolex"


def test_contains_matches_normalized_content() -> None:
    assert keyword_matches("Selling   FAKE rolex watches", "fake rolex", "contains")
    assert not keyword_matches("Selling genuine watches", "fake rolex", "contains")


def test_exact_requires_whole_normalized_content() -> None:
    assert keyword_matches("  Fake   Rolex ", "fake rolex", "exact")
    assert not keyword_matches("fake rolex watch", "fake rolex", "exact")


def test_regex_is_case_insensitive_on_original_content() -> None:
    assert keyword_matches("Genuine R0LEX here", r"r[o0]lex", "regex")
    assert keyword_matches("call 555-1234 now", r"\d{3}-\d{4}", "regex")
    assert not keyword_matches("call me maybe", r"\d{3}-\d{4}", "regex")


def test_regex_keeps_uppercase_escapes() -> None:
    # \S must not be lower-cased into \s.
    assert keyword_matches("abc", r"^\S+$", "regex")
    assert not keyword_matches("a b", r"^\S+$", "regex")


def test_regex_whitespace_sensitive_pattern_sees_original_spacing() -> None:
    assert keyword_matches("buy  now", r"buy\s{2}now", "regex")


def test_invalid_regex_degrades_to_contains() -> None:
    assert keyword_matches("price (negotiable)", "(", "regex")
    assert not keyword_matches("price negotiable", "(", "regex")


def test_unknown_pattern_type_degrades_to_contains() -> None:
    assert keyword_matches("free iphone giveaway", "iphone", "glob")


def test_block_takes_precedence_over_warnings() -> None:
    rules = [
        KeywordRule(id="w1", keyword="cheap", severity="warning"),
        KeywordRule(id="w2", keyword="watches", severity="warning"),
        KeywordRule(id="b1", keyword="fake rolex", severity="block"),
    ]

    verdict = evaluate("Cheap fake rolex watches", rules)

    assert verdict.blocked is True
    assert verdict.warned is False
    assert verdict.allowed is False
    assert verdict.action_taken == FilterAction.BLOCKED
    assert verdict.matched_keywords == [
        KeywordMatch(keyword="cheap", severity="warning"),
        KeywordMatch(keyword="watches", severity="warning"),
        KeywordMatch(keyword="fake rolex", severity="block"),
    ]
    assert verdict.first_matched_rule_id == "w1"


def test_warning_only_is_allowed_but_warned() -> None:
    rules = [KeywordRule(id="w1", keyword="cash only", severity="warning")]

    verdict = evaluate("Cash only, no trades", rules)

    assert verdict.allowed is True
    assert verdict.blocked is False
    assert verdict.warned is True
    assert verdict.action_taken == FilterAction.WARNED


def test_no_match_yields_clean_verdict() -> None:
    rules = [KeywordRule(id="b1", keyword="fake rolex", severity="block")]

    verdict = evaluate("Trading a bicycle for a guitar", rules)

    assert verdict.allowed is True
    assert verdict.blocked is False
    assert verdict.warned is False
    assert verdict.matched_keywords == []
    assert verdict.matched is False
    assert verdict.first_matched_rule_id is None


def test_disabled_rules_do_not_participate() -> None:
    rules = [
        KeywordRule(id="b1", keyword="fake rolex", severity="block", enabled=False),
        KeywordRule(id="w1", keyword="rolex", severity="warning"),
    ]

    verdict = evaluate("fake rolex", rules)

    assert verdict.blocked is False
    assert verdict.warned is True
    assert verdict.first_matched_rule_id == "w1"
