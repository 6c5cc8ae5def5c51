"""
Text Patterns - Matchers used by rules
======================================

A rule does not care how its pattern is evaluated, only that
``match(text)`` returns the captured groups or ``None``. Two matchers
are provided:

- RegexPattern: case-insensitive regular expression with capture groups
- KeywordPattern: case-insensitive substring test, no captures
"""

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import ClassVar, Optional, Tuple, Union

from core.exceptions import PatternCompileFailure


Captures = Tuple[Optional[str], ...]


class MatchType(Enum):
    """Types of pattern matching."""
    REGEX = "regex"       # Regular expression
    KEYWORD = "keyword"   # Contains substring


class TextPattern:
    """
    Interface for rule patterns.

    Subclasses expose the pattern text as ``source`` and implement
    ``match``, returning captures for groups 1..N (an empty tuple when
    the pattern has no groups) or ``None`` when the text does not match.
    """

    source: str
    match_type: MatchType

    def match(self, text: str) -> Optional[Captures]:
        raise NotImplementedError


@lru_cache(maxsize=512)
def _compile_result(source: str) -> Union["re.Pattern[str]", str]:
    # Failures are cached as their message so a broken pattern is
    # compiled once, not on every match attempt
    try:
        return re.compile(source, re.IGNORECASE)
    except re.error as e:
        return f"Invalid pattern: {e}"


def _compile(source: str) -> "re.Pattern[str]":
    result = _compile_result(source)
    if isinstance(result, str):
        raise PatternCompileFailure(result, pattern=source)
    return result


@dataclass(frozen=True)
class RegexPattern(TextPattern):
    """
    Regular expression pattern.

    Compilation is deferred to the first match so that a table holding
    a broken pattern can still be built; the failure surfaces as
    PatternCompileFailure when the rule is evaluated.

    Example:
        >>> RegexPattern(r"^\\s*I need ([^.!?]*)").match("i need help")
        ('help',)
    """
    source: str
    match_type: ClassVar[MatchType] = MatchType.REGEX

    def compile(self) -> "re.Pattern[str]":
        """Compile (or fetch from cache) the expression."""
        return _compile(self.source)

    def match(self, text: str) -> Optional[Captures]:
        found = self.compile().search(text)
        if found is None:
            return None
        return found.groups()


@dataclass(frozen=True)
class KeywordPattern(TextPattern):
    """Substring pattern, true when the keyword occurs anywhere in the text."""
    source: str
    match_type: ClassVar[MatchType] = MatchType.KEYWORD

    def match(self, text: str) -> Optional[Captures]:
        if self.source.lower() in text.lower():
            return ()
        return None


def make_pattern(source: str, match_type: MatchType = MatchType.REGEX) -> TextPattern:
    """
    Build a pattern of the given type.

    Args:
        source: Pattern text
        match_type: MatchType or its string value

    Returns:
        TextPattern instance
    """
    match_type = MatchType(match_type)
    if match_type == MatchType.KEYWORD:
        return KeywordPattern(source)
    return RegexPattern(source)
