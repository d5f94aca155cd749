"""
Similarity Matcher

Decides whether a typed word selects a candidate name, either exactly (an
"add missing import" action for a known name) or fuzzily (completion while
typing).
"""

from __future__ import annotations

from typing import Dict, Optional

from ..foundation.models import PatternMatcher


def is_pattern_in_symbol(typed_value: str, symbol_name: str) -> bool:
    """
    Case-insensitive subsequence test.

    ``"mxs"`` is in ``"MAX_SIZE"``; ``"xm"`` is not.
    """
    typed_lower = typed_value.lower()
    symbol_lower = symbol_name.lower()
    typed_pos = 0
    for ch in symbol_lower:
        if typed_pos == len(typed_lower):
            break
        if typed_lower[typed_pos] == ch:
            typed_pos += 1
    return typed_pos == len(typed_lower)


def is_subsequence_case_sensitive(typed_value: str, symbol_name: str) -> bool:
    it = iter(symbol_name)
    return all(ch in it for ch in typed_value)


def is_prefix_of_symbol(typed_value: str, symbol_name: str) -> bool:
    return symbol_name.lower().startswith(typed_value.lower())


def is_prefix_case_sensitive(typed_value: str, symbol_name: str) -> bool:
    return symbol_name.startswith(typed_value)


def is_substring_of_symbol(typed_value: str, symbol_name: str) -> bool:
    return typed_value.lower() in symbol_name.lower()


def is_substring_case_sensitive(typed_value: str, symbol_name: str) -> bool:
    return typed_value in symbol_name


_PATTERN_MATCHERS: Dict[str, Dict[bool, PatternMatcher]] = {
    "subsequence": {False: is_pattern_in_symbol, True: is_subsequence_case_sensitive},
    "prefix": {False: is_prefix_of_symbol, True: is_prefix_case_sensitive},
    "substring": {False: is_substring_of_symbol, True: is_substring_case_sensitive},
}

PATTERN_NAMES = tuple(_PATTERN_MATCHERS)


def get_pattern_matcher(pattern: str = "subsequence", case_sensitive: bool = False) -> PatternMatcher:
    """Look up a named matcher; raises ``KeyError`` for unknown names."""
    return _PATTERN_MATCHERS[pattern][bool(case_sensitive)]


class SimilarityMatcher:
    """
    Exact or fuzzy comparison of a query word against candidate names.

    Stateless apart from the injected predicate, so one instance can be
    shared by every phase of a query.
    """

    def __init__(self, pattern_matcher: Optional[PatternMatcher] = None):
        self.pattern_matcher: PatternMatcher = pattern_matcher or is_pattern_in_symbol

    def match(self, word: str, candidate_name: str, exact: bool) -> bool:
        if exact:
            return word == candidate_name
        # an empty prefix would select every symbol in every module
        return len(word) > 0 and self.pattern_matcher(word, candidate_name)
