"""Keyword filter engine.

Classifies a piece of user text against a snapshot of blocked-keyword rules.
The engine holds no state: callers pass the rule set they loaded, and the
verdict carries everything needed to write the audit log.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from barter_moderation.models.keyword import FilterAction, KeywordSeverity, PatternType

_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass(frozen=True)
class KeywordRule:
    """Immutable view of a blocked-keyword row handed to the engine."""

    id: str
    keyword: str
    pattern_type: str = PatternType.CONTAINS.value
    severity: str = KeywordSeverity.WARNING.value
    enabled: bool = True


@dataclass(frozen=True)
class KeywordMatch:
    """A rule that matched the evaluated content."""

    keyword: str
    severity: str


@dataclass(frozen=True)
class FilterVerdict:
    """Result of evaluating content against a rule set."""

    allowed: bool
    blocked: bool
    warned: bool
    matched_keywords: list[KeywordMatch] = field(default_factory=list)
    first_matched_rule_id: str | None = None

    @property
    def matched(self) -> bool:
        return bool(self.matched_keywords)

    @property
    def action_taken(self) -> FilterAction:
        """Return the action recorded in the audit log for this verdict."""
        if self.blocked:
            return FilterAction.BLOCKED
        if self.warned:
            return FilterAction.WARNED
        return FilterAction.ALLOWED


def normalize_text(text: str) -> str:
    """Lower-case, trim and collapse internal whitespace runs to one space."""
    return _WHITESPACE_RUN.sub(" ", text.lower().strip())


def compile_keyword_pattern(keyword: str) -> re.Pattern[str]:
    """Compile a regex rule the way the engine evaluates it.

    Raises:
        re.error: If the pattern is not a valid regular expression.
    """
    return re.compile(keyword, re.IGNORECASE)


def keyword_matches(content: str, keyword: str, pattern_type: str) -> bool:
    """Return True when ``content`` matches a single rule.

    ``exact`` and ``contains`` compare normalized forms. ``regex`` searches the
    original content case-insensitively; a pattern that fails to compile, or an
    unknown pattern type, degrades to ``contains``.
    """
    normalized_content = normalize_text(content)
    normalized_keyword = normalize_text(keyword)

    if pattern_type == PatternType.EXACT:
        return normalized_content == normalized_keyword
    if pattern_type == PatternType.REGEX:
        try:
            pattern = compile_keyword_pattern(keyword)
        except re.error:
            return normalized_keyword in normalized_content
        return pattern.search(content) is not None
    return normalized_keyword in normalized_content


def evaluate(content: str, rules: Iterable[KeywordRule]) -> FilterVerdict:
    """Classify ``content`` against ``rules``.

    Every enabled rule is checked. A single block-severity match blocks the
    content regardless of how many warnings also matched; ``warned`` is only
    set when warnings matched and nothing blocked.

    Args:
        content: Raw user text.
        rules: Rule snapshot in iteration order; disabled rules are skipped.

    Returns:
        The verdict, including the id of the first matching rule.
    """
    matches: list[KeywordMatch] = []
    first_rule_id: str | None = None
    has_block = False
    has_warning = False

    for rule in rules:
        if not rule.enabled:
            continue
        if not keyword_matches(content, rule.keyword, rule.pattern_type):
            continue

        matches.append(KeywordMatch(keyword=rule.keyword, severity=rule.severity))
        if first_rule_id is None:
            first_rule_id = rule.id

        if rule.severity == KeywordSeverity.BLOCK:
            has_block = True
        elif rule.severity == KeywordSeverity.WARNING:
            has_warning = True

    return FilterVerdict(
        allowed=not has_block,
        blocked=has_block,
        warned=has_warning and not has_block,
        matched_keywords=matches,
        first_matched_rule_id=first_rule_id,
    )
